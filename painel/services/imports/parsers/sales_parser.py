"""
Sales workbook parser.

One data row is one sold item.  Sale number (B) and item reference (T) are
required; any row missing either is reported once and dropped.
"""

from __future__ import annotations

from typing import Iterable

from .base import (
    Row,
    WorkbookParser,
    cell_date,
    cell_decimal,
    cell_integer,
    cell_text,
    is_blank_row,
)
from .layouts import MONEY_FIELDS, SALES_LAYOUT, ColumnLayout
from ..records import SALES_FILE, ErrorRecord, SalesLineItem


class SalesParser(WorkbookParser):

    file_label = SALES_FILE

    def __init__(self, layout: ColumnLayout = SALES_LAYOUT):
        self.layout = layout

    def parse_rows(self, rows: Iterable[tuple[int, Row]]) -> tuple[list[SalesLineItem], list[ErrorRecord]]:
        sales: list[SalesLineItem] = []
        errors: list[ErrorRecord] = []

        for line, row in rows:
            if is_blank_row(row):
                continue

            col = self.layout
            sale_number = cell_integer(row.get(col["sale_number"]))
            if sale_number is None or sale_number <= 0:
                errors.append(self.missing_field(
                    line, "sale_number", row, "sale number is required and must be a positive integer",
                ))
                continue

            item_reference = cell_text(row.get(col["item_reference"]))
            if not item_reference:
                errors.append(self.missing_field(
                    line, "item_reference", row, "item reference is required",
                ))
                continue

            order_number = cell_integer(row.get(col["order_number"]))
            if order_number is not None and order_number <= 0:
                order_number = None
            quantity = cell_integer(row.get(col["quantity"]))
            money = {name: cell_decimal(row.get(col[name])) for name in MONEY_FIELDS}

            sales.append(SalesLineItem(
                sale_number=sale_number,
                item_reference=item_reference,
                sale_date=cell_date(row.get(col["sale_date"])),
                order_number=order_number,
                seller=cell_text(row.get(col["seller"])),
                client=cell_text(row.get(col["client"])),
                payment_method=cell_text(row.get(col["payment_method"])),
                item_description=cell_text(row.get(col["item_description"])),
                quantity=1 if quantity is None else quantity,
                **money,
                line=line,
            ))

        return sales, errors
