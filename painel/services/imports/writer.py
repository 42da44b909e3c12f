"""
Database writer for the import pipeline.

Provides focused statements for each table touched by one import batch:
upload_history, sales_lines, service_order_lines.  ``commit_batch`` runs them
in a single transaction on the caller's session and commits once.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from uuid import UUID, uuid4

from sqlalchemy import delete, insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from painel.models.base import SalesLine, ServiceOrderLine, UploadHistory
from painel.services.imports.records import (
    ErrorKind,
    ErrorRecord,
    SalesLineItem,
    ServiceOrderLineItem,
)

logger = logging.getLogger(__name__)

# Rows per INSERT statement
CHUNK_SIZE = 500

DATABASE_LABEL = "Database"


class PersistenceError(Exception):
    """The batch could not be committed; nothing from it was kept."""

    def __init__(self, error: ErrorRecord):
        super().__init__(error.description)
        self.error = error


@dataclass
class CommitCounts:
    upload_id: UUID
    sales: int
    service_orders: int
    sales_rows: int
    service_order_rows: int


@dataclass
class UploadFiles:
    sales: str | None = None
    products: str | None = None
    service_orders: str | None = None


def _columns(item: SalesLineItem | ServiceOrderLineItem) -> dict:
    values = asdict(item)
    values.pop("line", None)
    return values


def _chunks(rows: list[dict]):
    for start in range(0, len(rows), CHUNK_SIZE):
        yield rows[start:start + CHUNK_SIZE]


class ImportWriter:
    """Writes one validated import batch to the database."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # ── Upload history ────────────────────────────────────

    async def create_upload(
        self,
        company_id: UUID,
        files: UploadFiles,
        total_sales: int,
        total_service_orders: int,
    ) -> UUID:
        """Insert the upload_history row for this batch.  Returns the new ID."""
        upload_id = uuid4()
        await self.session.execute(insert(UploadHistory).values(
            id=upload_id,
            company_id=company_id,
            sales_file=files.sales,
            products_file=files.products,
            service_orders_file=files.service_orders,
            total_sales=total_sales,
            total_service_orders=total_service_orders,
            status="processed",
        ))
        return upload_id

    # ── Previous imports ──────────────────────────────────

    async def delete_existing(
        self,
        company_id: UUID,
        sale_numbers: list[int],
        order_numbers: list[int],
    ) -> None:
        """
        Remove rows of earlier uploads for the sales / orders being imported.

        Re-importing a sale replaces it: the latest upload wins.
        """
        if sale_numbers:
            await self.session.execute(
                delete(SalesLine)
                .where(SalesLine.company_id == company_id)
                .where(SalesLine.sale_number.in_(sale_numbers))
                .execution_options(synchronize_session=False)
            )
        if order_numbers:
            await self.session.execute(
                delete(ServiceOrderLine)
                .where(ServiceOrderLine.company_id == company_id)
                .where(ServiceOrderLine.order_number.in_(order_numbers))
                .execution_options(synchronize_session=False)
            )

    # ── Line items ────────────────────────────────────────

    async def insert_sales_lines(
        self, company_id: UUID, upload_id: UUID, sales: list[SalesLineItem],
    ) -> int:
        rows = [
            {**_columns(sale), "company_id": company_id, "upload_id": upload_id}
            for sale in sales
        ]
        for chunk in _chunks(rows):
            await self.session.execute(insert(SalesLine), chunk)
        return len(rows)

    async def insert_service_order_lines(
        self, company_id: UUID, upload_id: UUID, lines: list[ServiceOrderLineItem],
    ) -> int:
        rows = [
            {**_columns(line), "company_id": company_id, "upload_id": upload_id}
            for line in lines
        ]
        for chunk in _chunks(rows):
            await self.session.execute(insert(ServiceOrderLine), chunk)
        return len(rows)

    # ── Transaction ───────────────────────────────────────

    async def commit_batch(
        self,
        company_id: UUID,
        sales: list[SalesLineItem],
        lines: list[ServiceOrderLineItem],
        files: UploadFiles,
    ) -> CommitCounts:
        """
        Persist the whole batch atomically.

        Either every statement commits or the session is rolled back and
        ``PersistenceError`` is raised; no partial batch is ever visible.
        """
        sale_numbers = list(dict.fromkeys(sale.sale_number for sale in sales))
        order_numbers = list(dict.fromkeys(line.order_number for line in lines))

        try:
            upload_id = await self.create_upload(
                company_id, files,
                total_sales=len(sale_numbers),
                total_service_orders=len(order_numbers),
            )
            await self.delete_existing(company_id, sale_numbers, order_numbers)
            sales_rows = await self.insert_sales_lines(company_id, upload_id, sales)
            order_rows = await self.insert_service_order_lines(company_id, upload_id, lines)
            await self.session.commit()
        except (SQLAlchemyError, OSError) as exc:
            await self.session.rollback()
            raise PersistenceError(ErrorRecord(
                kind=ErrorKind.PERSISTENCE,
                file=DATABASE_LABEL,
                description=f"Could not save import: {exc}",
            )) from exc

        logger.info(
            "Committed upload %s: %d sales (%d rows), %d service orders (%d rows)",
            upload_id, len(sale_numbers), sales_rows, len(order_numbers), order_rows,
        )
        return CommitCounts(
            upload_id=upload_id,
            sales=len(sale_numbers),
            service_orders=len(order_numbers),
            sales_rows=sales_rows,
            service_order_rows=order_rows,
        )
