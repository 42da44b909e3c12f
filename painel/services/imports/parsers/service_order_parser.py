"""
Service Order workbook parser.

The sheet stores a one-to-many structure without repeating the header: a
header row (positive order number in column A) is followed by its item rows
(item reference in the shifted column AC).  Parsing is a single forward scan
over an explicit two-state machine:

    NoHeader ──header row──▶ HaveHeader(h)
    HaveHeader(h) ──header row──▶ HaveHeader(h')      (previous group closed)
    HaveHeader(h) ──item row──▶ HaveHeader(h)        emits line item (h + item)
    NoHeader ──item row──▶ NoHeader                  emits error
    any ──other row──▶ unchanged

All transition rules live in ``step``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .base import (
    Row,
    WorkbookParser,
    cell_date,
    cell_decimal,
    cell_integer,
    cell_text,
    fold_accents,
)
from .layouts import MONEY_FIELDS, SERVICE_ORDER_LAYOUT, ColumnLayout
from ..records import (
    SERVICE_ORDERS_FILE,
    ErrorKind,
    ErrorRecord,
    ServiceOrderHeader,
    ServiceOrderLineItem,
)


# Values exported in the item-reference column that are not references
PLACEHOLDERS = {"-", "--", "---", ".", "...", "n/a", "na", "s/n", "s/ref", "sem referencia"}

# Column titles the export repeats above every group of items
COLUMN_TITLES = {
    "ref", "ref.", "referencia", "referencia do item", "item referencia",
    "item", "itens", "codigo", "cod", "cod.", "produto", "item_ds_referencia",
}


@dataclass(frozen=True)
class NoHeader:
    pass


@dataclass(frozen=True)
class HaveHeader:
    header: ServiceOrderHeader


ScanState = NoHeader | HaveHeader


def is_item_reference(value: str | None) -> bool:
    if not value:
        return False
    key = fold_accents(value)
    return key not in PLACEHOLDERS and key not in COLUMN_TITLES


def read_header(row: Row, layout: ColumnLayout, order_number: int) -> ServiceOrderHeader:
    return ServiceOrderHeader(
        order_number=order_number,
        opened_on=cell_date(row.get(layout["opened_on"])),
        status=cell_text(row.get(layout["status"])),
        sale_status=cell_text(row.get(layout["sale_status"])),
        current_stage=cell_text(row.get(layout["current_stage"])),
        expected_delivery=cell_date(row.get(layout["expected_delivery"])),
        delivered_on=cell_date(row.get(layout["delivered_on"])),
        seller=cell_text(row.get(layout["seller"])),
    )


def build_item(
    header: ServiceOrderHeader, item_reference: str, line: int, row: Row, layout: ColumnLayout,
) -> ServiceOrderLineItem:
    quantity = cell_integer(row.get(layout["quantity"]))
    money = {name: cell_decimal(row.get(layout[name])) for name in MONEY_FIELDS}
    return ServiceOrderLineItem(
        order_number=header.order_number,
        item_reference=item_reference,
        item_description=cell_text(row.get(layout["item_description"])),
        opened_on=header.opened_on,
        status=header.status,
        sale_status=header.sale_status,
        current_stage=header.current_stage,
        expected_delivery=header.expected_delivery,
        delivered_on=header.delivered_on,
        seller=header.seller,
        quantity=1 if quantity is None else quantity,
        **money,
        line=line,
    )


def step(
    state: ScanState,
    line: int,
    row: Row,
    layout: ColumnLayout = SERVICE_ORDER_LAYOUT,
) -> tuple[ScanState, ServiceOrderLineItem | None, ErrorRecord | None]:
    """Apply one row to the scan state; returns ``(next_state, item, error)``."""
    order_number = cell_integer(row.get(layout["order_number"]))
    if order_number is not None and order_number > 0:
        return HaveHeader(read_header(row, layout, order_number)), None, None

    item_reference = cell_text(row.get(layout["item_reference"]))
    if not is_item_reference(item_reference):
        return state, None, None

    if isinstance(state, NoHeader):
        return state, None, ErrorRecord(
            kind=ErrorKind.PARSE,
            file=SERVICE_ORDERS_FILE,
            line=line,
            column=layout["order_number"],
            value=item_reference,
            description="item row without preceding header",
        )

    return state, build_item(state.header, item_reference, line, row, layout), None


class ServiceOrderParser(WorkbookParser):

    file_label = SERVICE_ORDERS_FILE

    def __init__(self, layout: ColumnLayout = SERVICE_ORDER_LAYOUT):
        self.layout = layout

    def parse_rows(self, rows: Iterable[tuple[int, Row]]) -> tuple[list[ServiceOrderLineItem], list[ErrorRecord]]:
        items: list[ServiceOrderLineItem] = []
        errors: list[ErrorRecord] = []

        state: ScanState = NoHeader()
        for line, row in rows:
            state, item, error = step(state, line, row, self.layout)
            if item is not None:
                items.append(item)
            if error is not None:
                errors.append(error)

        return items, errors
