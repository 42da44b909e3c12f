"""
Record types shared by every stage of the import pipeline.

Line items and catalog rows are plain dataclasses (they are mutated once by
the enricher).  Errors and the final verdict are pydantic models because they
leave the process as JSON.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel


# ═══════════════════════════════════════════════════════════════
# Source file labels (used in ErrorRecord.file)
# ═══════════════════════════════════════════════════════════════

SALES_FILE = "Sales"
PRODUCTS_FILE = "Products"
SERVICE_ORDERS_FILE = "Service Orders"


# ═══════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════

class ErrorKind(str, Enum):
    PARSE = "parse_error"
    ORPHAN_REFERENCE = "orphan_reference"
    DUPLICATE_KEY = "duplicate_key"
    INTEGRITY_MISMATCH = "integrity_mismatch"
    PERSISTENCE = "persistence_error"


class ErrorRecord(BaseModel):
    kind: ErrorKind
    file: str
    line: int | None = None
    column: str | None = None
    value: Any | None = None
    description: str


class ProcessingResult(BaseModel):
    status: Literal["success", "failure"]
    total_sales: int = 0
    total_products: int = 0
    total_service_orders: int = 0
    errors: list[ErrorRecord] = []
    message: str | None = None
    upload_id: UUID | None = None


# ═══════════════════════════════════════════════════════════════
# Line items
# ═══════════════════════════════════════════════════════════════

@dataclass
class SalesLineItem:
    sale_number: int
    item_reference: str
    sale_date: date | None = None
    order_number: int | None = None
    seller: str | None = None
    client: str | None = None
    payment_method: str | None = None
    item_description: str | None = None
    quantity: int = 1
    original_value: Decimal | None = None
    adjustment_value: Decimal | None = None
    unit_value: Decimal | None = None
    gross_total: Decimal | None = None
    discount_total: Decimal | None = None
    net_total: Decimal | None = None
    # Filled in by the enricher
    item_group: str | None = None
    item_brand: str | None = None
    item_supplier: str | None = None
    unit_cost: Decimal | None = None
    # Sheet row the item was read from
    line: int | None = None


@dataclass
class ProductMaster:
    item_reference: str
    item_group: str | None = None
    item_brand: str | None = None
    item_supplier: str | None = None
    quantity: int | None = None
    total_cost: Decimal | None = None
    unit_cost: Decimal | None = None
    # Sheet row the item was read from
    line: int | None = None
    sale_numbers: list[int] = field(default_factory=list)
    order_numbers: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class ServiceOrderHeader:
    order_number: int
    opened_on: date | None = None
    status: str | None = None
    sale_status: str | None = None
    current_stage: str | None = None
    expected_delivery: date | None = None
    delivered_on: date | None = None
    seller: str | None = None


@dataclass
class ServiceOrderLineItem:
    order_number: int
    item_reference: str
    opened_on: date | None = None
    status: str | None = None
    sale_status: str | None = None
    current_stage: str | None = None
    expected_delivery: date | None = None
    delivered_on: date | None = None
    seller: str | None = None
    item_description: str | None = None
    quantity: int = 1
    original_value: Decimal | None = None
    adjustment_value: Decimal | None = None
    unit_value: Decimal | None = None
    gross_total: Decimal | None = None
    discount_total: Decimal | None = None
    net_total: Decimal | None = None
    # Filled in by the enricher
    item_group: str | None = None
    item_brand: str | None = None
    item_supplier: str | None = None
    unit_cost: Decimal | None = None
    # Sheet row the item was read from
    line: int | None = None
