"""
Product Master workbook parser.

Each row is one catalog item with its aggregate cost and two denormalised
edge lists: the sale numbers (R) and service-order numbers (S) the item was
used in.
"""

from __future__ import annotations

from typing import Iterable

from .base import (
    Row,
    WorkbookParser,
    cell_decimal,
    cell_integer,
    cell_text,
    is_blank_row,
    parse_reference_list,
)
from .layouts import PRODUCT_LAYOUT, ColumnLayout
from ..records import PRODUCTS_FILE, ErrorKind, ErrorRecord, ProductMaster


class ProductParser(WorkbookParser):

    file_label = PRODUCTS_FILE

    def __init__(self, layout: ColumnLayout = PRODUCT_LAYOUT):
        self.layout = layout

    def parse_rows(self, rows: Iterable[tuple[int, Row]]) -> tuple[list[ProductMaster], list[ErrorRecord]]:
        products: list[ProductMaster] = []
        errors: list[ErrorRecord] = []

        for line, row in rows:
            if is_blank_row(row):
                continue

            col = self.layout
            item_reference = cell_text(row.get(col["item_reference"]))
            if not item_reference:
                errors.append(self.missing_field(
                    line, "item_reference", row, "item reference is required",
                ))
                continue

            quantity = cell_integer(row.get(col["quantity"]))
            total_cost = cell_decimal(row.get(col["total_cost"]))

            unit_cost = None
            if total_cost is not None and quantity is not None and quantity > 0:
                unit_cost = total_cost / quantity
            elif total_cost is not None and quantity == 0:
                # Still emitted: the catalog attributes remain usable
                errors.append(ErrorRecord(
                    kind=ErrorKind.PARSE,
                    file=self.file_label,
                    line=line,
                    column=col["quantity"],
                    value=quantity,
                    description="division by zero computing unit cost (quantity is 0)",
                ))

            products.append(ProductMaster(
                item_reference=item_reference,
                item_group=cell_text(row.get(col["item_group"])),
                item_brand=cell_text(row.get(col["item_brand"])),
                item_supplier=cell_text(row.get(col["item_supplier"])),
                quantity=quantity,
                total_cost=total_cost,
                unit_cost=unit_cost,
                sale_numbers=parse_reference_list(row.get(col["sale_numbers"])),
                order_numbers=parse_reference_list(row.get(col["order_numbers"])),
                line=line,
            ))

        return products, errors
