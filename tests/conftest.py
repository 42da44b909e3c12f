"""
Shared fixtures for the import pipeline tests.

Workbooks are built in memory with openpyxl.  Row 1 always holds a report
title (the parsers skip it), so data starts at sheet line 2.  Persistence
tests run against a throwaway SQLite file through aiosqlite.
"""

import asyncio
import io
import os
import uuid

# Settings are read at import time; point them at SQLite before painel loads
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ["DATABASE_SSL"] = "false"

import pytest
from openpyxl import Workbook
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from painel.models.base import Base, Company
from painel.services.imports.parsers.layouts import (
    PRODUCT_LAYOUT,
    SALES_LAYOUT,
    SERVICE_ORDER_LAYOUT,
)

COMPANY_NAME = "Ótica Central"
INACTIVE_COMPANY_NAME = "Ótica Antiga"


# ═══════════════════════════════════════════════════════════════
# Workbook builders
# ═══════════════════════════════════════════════════════════════

def workbook_bytes(rows: list[dict], title: str = "Relatório") -> bytes:
    """Serialize ``{column letter: value}`` rows into an .xlsx, starting at line 2."""
    wb = Workbook()
    ws = wb.active
    ws["A1"] = title
    for line, row in enumerate(rows, start=2):
        for column, value in row.items():
            ws[f"{column}{line}"] = value
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def sales_row(**fields) -> dict:
    return {SALES_LAYOUT[name]: value for name, value in fields.items()}


def product_row(**fields) -> dict:
    return {PRODUCT_LAYOUT[name]: value for name, value in fields.items()}


def order_row(**fields) -> dict:
    return {SERVICE_ORDER_LAYOUT[name]: value for name, value in fields.items()}


# ═══════════════════════════════════════════════════════════════
# Database
# ═══════════════════════════════════════════════════════════════

@pytest.fixture()
def session_factory(tmp_path):
    """Session factory over a fresh SQLite database holding two companies."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'imports.db'}", poolclass=NullPool,
    )

    async def setup():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            await conn.execute(insert(Company), [
                {"id": uuid.uuid4(), "name": COMPANY_NAME, "active": True},
                {"id": uuid.uuid4(), "name": INACTIVE_COMPANY_NAME, "active": False},
            ])

    asyncio.run(setup())
    yield async_sessionmaker(engine, expire_on_commit=False)
    asyncio.run(engine.dispose())
