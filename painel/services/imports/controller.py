"""
Import pipeline controller.

Orchestrates:  workbook parsing  →  enrichment  →  validation  →  DB commit.

Usage from a FastAPI endpoint::

    controller = ImportController(session)
    result = await controller.import_batch(
        company_name,
        sales=ImportFile("vendas.xls", sales_bytes),
        products=ImportFile("produtos.xls", product_bytes),
        service_orders=ImportFile("os.xls", order_bytes),
    )
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from painel.services.imports.companies import find_company_id
from painel.services.imports.enricher import CrossReferenceEnricher
from painel.services.imports.parsers.product_parser import ProductParser
from painel.services.imports.parsers.sales_parser import SalesParser
from painel.services.imports.parsers.service_order_parser import ServiceOrderParser
from painel.services.imports.records import (
    ErrorKind,
    ErrorRecord,
    ProcessingResult,
    ProductMaster,
    SalesLineItem,
    ServiceOrderLineItem,
)
from painel.services.imports.validator import (
    check_client_consistency,
    check_duplicate_sales,
    check_order_links,
)
from painel.services.imports.writer import (
    DATABASE_LABEL,
    ImportWriter,
    PersistenceError,
    UploadFiles,
)

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Import completed successfully"

COMPANY_LABEL = "Company"


@dataclass
class ImportFile:
    name: str
    content: bytes


def _distinct_totals(
    sales: list[SalesLineItem],
    products: list[ProductMaster],
    lines: list[ServiceOrderLineItem],
) -> dict[str, int]:
    return {
        "total_sales": len({sale.sale_number for sale in sales}),
        "total_products": len({product.item_reference for product in products}),
        "total_service_orders": len({line.order_number for line in lines}),
    }


# ═══════════════════════════════════════════════════════════════
# Controller
# ═══════════════════════════════════════════════════════════════

class ImportController:
    """
    Full import pipeline for one company batch:

    1. Resolve the company among active companies
    2. Parse the Sales, Product Master and Service Order workbooks
    3. Enrich sales / service-order lines with Product Master attributes
    4. Validate client names, duplicate sales and sale ↔ order links
    5. Commit everything in one transaction, only if no error was found

    Every stage runs even when an earlier one reported errors, so the caller
    gets the complete list in one response.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.writer = ImportWriter(session)

    # ── Public API ────────────────────────────────────────────

    async def import_batch(
        self,
        company_name: str,
        sales: ImportFile,
        products: ImportFile,
        service_orders: ImportFile,
    ) -> ProcessingResult:
        # 1. Company ─────────────────────────────────────────
        company_id = await find_company_id(self.session, company_name)
        if company_id is None:
            logger.warning("Import rejected: company '%s' not found", company_name)
            return ProcessingResult(
                status="failure",
                errors=[ErrorRecord(
                    kind=ErrorKind.INTEGRITY_MISMATCH,
                    file=COMPANY_LABEL,
                    value=company_name,
                    description=f"Company '{company_name}' not found",
                )],
            )

        # 2. Parse ───────────────────────────────────────────
        sales_outcome = SalesParser().parse(sales.content)
        product_outcome = ProductParser().parse(products.content)
        order_outcome = ServiceOrderParser().parse(service_orders.content)

        parsed_sales: list[SalesLineItem] = sales_outcome.records
        parsed_products: list[ProductMaster] = product_outcome.records
        parsed_lines: list[ServiceOrderLineItem] = order_outcome.records

        errors: list[ErrorRecord] = [
            *sales_outcome.errors, *product_outcome.errors, *order_outcome.errors,
        ]

        # 3. Enrich ──────────────────────────────────────────
        #    Cross-file stages are skipped when a workbook they need could
        #    not be decoded; that file's read error already fails the batch.
        enriched_sales: list[SalesLineItem] = []
        enriched_lines: list[ServiceOrderLineItem] = []
        all_readable = sales_outcome.readable and order_outcome.readable
        if product_outcome.readable:
            enrichment = CrossReferenceEnricher(parsed_products).run(
                parsed_sales, parsed_lines, check_orphans=all_readable,
            )
            enriched_sales, enriched_lines = enrichment.sales, enrichment.service_orders
            errors.extend(enrichment.errors)

        # 4. Validate ────────────────────────────────────────
        errors.extend(check_client_consistency(parsed_sales, company_name))
        errors.extend(check_duplicate_sales(parsed_sales))
        if all_readable:
            errors.extend(check_order_links(parsed_sales, parsed_lines))

        totals = _distinct_totals(parsed_sales, parsed_products, parsed_lines)

        if errors:
            logger.info(
                "Import for '%s' rejected with %d errors", company_name, len(errors),
            )
            return ProcessingResult(status="failure", errors=errors, **totals)

        # 5. Commit ──────────────────────────────────────────
        try:
            counts = await self.writer.commit_batch(
                company_id,
                enriched_sales,
                enriched_lines,
                UploadFiles(
                    sales=sales.name,
                    products=products.name,
                    service_orders=service_orders.name,
                ),
            )
        except PersistenceError as exc:
            logger.error("Import commit failed for '%s': %s", company_name, exc, exc_info=True)
            return ProcessingResult(status="failure", errors=[exc.error], **totals)
        except Exception as exc:
            # The session may be mid-transaction, so rollback before answering
            logger.error("Unexpected error committing import for '%s': %s", company_name, exc, exc_info=True)
            try:
                await self.session.rollback()
            except Exception:
                logger.warning("Could not roll back import for '%s'", company_name, exc_info=True)
            return ProcessingResult(
                status="failure",
                errors=[ErrorRecord(
                    kind=ErrorKind.PERSISTENCE,
                    file=DATABASE_LABEL,
                    description=f"Could not save import: {exc}",
                )],
                **totals,
            )

        return ProcessingResult(
            status="success",
            total_sales=counts.sales,
            total_products=totals["total_products"],
            total_service_orders=counts.service_orders,
            message=SUCCESS_MESSAGE,
            upload_id=counts.upload_id,
        )
