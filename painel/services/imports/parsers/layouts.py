"""
Positional column layouts for the three import workbooks.

None of the exported workbooks carries a trustworthy header row, so cells
are addressed by column letter only.  Each table maps a semantic field name
to the column holding it; parsers never hard-code letters themselves.
"""

from dataclasses import dataclass

from painel.config import settings


@dataclass(frozen=True)
class ColumnLayout:
    columns: dict[str, str]
    skip_rows: int = 1

    def __getitem__(self, field_name: str) -> str:
        return self.columns[field_name]


SALES_LAYOUT = ColumnLayout(
    columns={
        "sale_number":      "B",
        "sale_date":        "C",
        "order_number":     "D",
        "seller":           "E",
        "client":           "H",
        "payment_method":   "Q",
        "item_reference":   "T",
        "item_description": "U",
        "quantity":         "W",
        "original_value":   "X",
        "adjustment_value": "Y",
        "unit_value":       "Z",
        "gross_total":      "AA",
        "discount_total":   "AC",
        "net_total":        "AE",
    },
    skip_rows=settings.sales_skip_rows,
)

PRODUCT_LAYOUT = ColumnLayout(
    columns={
        "item_reference": "A",
        "item_group":     "C",
        "item_brand":     "E",
        "item_supplier":  "I",
        "quantity":       "L",
        "total_cost":     "N",
        "sale_numbers":   "R",
        "order_numbers":  "S",
    },
    skip_rows=settings.products_skip_rows,
)

# Header rows and item rows share one sheet.  Item rows lack the description
# block of header rows, so their fields sit in the shifted AB..AK range.
SERVICE_ORDER_LAYOUT = ColumnLayout(
    columns={
        # header
        "order_number":      "A",
        "opened_on":         "C",
        "status":            "D",
        "sale_status":       "E",
        "current_stage":     "F",
        "expected_delivery": "G",
        "delivered_on":      "H",
        "seller":            "I",
        # item
        "item_description":  "AB",
        "item_reference":    "AC",
        "quantity":          "AD",
        "original_value":    "AE",
        "adjustment_value":  "AF",
        "unit_value":        "AG",
        "gross_total":       "AH",
        "discount_total":    "AJ",
        "net_total":         "AK",
    },
    skip_rows=settings.service_orders_skip_rows,
)

MONEY_FIELDS = (
    "original_value",
    "adjustment_value",
    "unit_value",
    "gross_total",
    "discount_total",
    "net_total",
)
