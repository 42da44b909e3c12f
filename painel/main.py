from fastapi import FastAPI, Depends, UploadFile, File, Form
from fastapi.responses import JSONResponse
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from painel.database import get_db
from painel.models.base import Company
from painel.services.imports.controller import COMPANY_LABEL, ImportController, ImportFile
from painel.services.imports.records import ErrorKind

app = FastAPI(title="Painel Imports")

@app.get("/health")
async def health(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(func.count()).select_from(Company))
    return {"status": "ok", "companies": result.scalar()}


def _status_code(result) -> int:
    if result.status == "success":
        return 200
    kinds = {error.kind for error in result.errors}
    if ErrorKind.PERSISTENCE in kinds:
        return 500
    if any(error.file == COMPANY_LABEL for error in result.errors):
        return 404
    return 400


@app.post("/api/v1/imports")
async def import_workbooks(
    company: str = Form(...),
    sales: UploadFile = File(...),
    products: UploadFile = File(...),
    service_orders: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
):
    """
    Upload the Sales, Product Master and Service Order workbooks of one
    company and run the import pipeline: parse → enrich → validate → commit.
    """
    controller = ImportController(db)
    result = await controller.import_batch(
        company,
        sales=ImportFile(sales.filename or "sales", await sales.read()),
        products=ImportFile(products.filename or "products", await products.read()),
        service_orders=ImportFile(service_orders.filename or "service_orders", await service_orders.read()),
    )
    return JSONResponse(
        status_code=_status_code(result),
        content=result.model_dump(mode="json"),
    )
