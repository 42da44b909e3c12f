"""
Cross-reference enricher: attaches Product Master catalog attributes to sales
and service-order line items.

The Product Master rows carry the links as comma-separated edge lists, so they
are inverted once into two hash indexes (sale number → products, order
number → products) instead of being re-scanned per line.

Matching, per line:
  1. products mapped to the line's sale / order number
  2. exact item-reference match among them
  3. otherwise the first mapped product
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from painel.services.imports.parsers.layouts import PRODUCT_LAYOUT, SALES_LAYOUT
from painel.services.imports.records import (
    PRODUCTS_FILE,
    SALES_FILE,
    SERVICE_ORDERS_FILE,
    ErrorKind,
    ErrorRecord,
    ProductMaster,
    SalesLineItem,
    ServiceOrderLineItem,
)

logger = logging.getLogger(__name__)

ProductIndex = dict[int, list[ProductMaster]]


# ═══════════════════════════════════════════════════════════════
# Indexes
# ═══════════════════════════════════════════════════════════════

def build_indexes(products: list[ProductMaster]) -> tuple[ProductIndex, ProductIndex]:
    """Invert the adjacency lists into ``(by_sale, by_order)``."""
    by_sale: ProductIndex = {}
    by_order: ProductIndex = {}
    for product in products:
        for sale_number in product.sale_numbers:
            by_sale.setdefault(sale_number, []).append(product)
        for order_number in product.order_numbers:
            by_order.setdefault(order_number, []).append(product)
    return by_sale, by_order


def pick_product(candidates: list[ProductMaster], item_reference: str) -> ProductMaster:
    for product in candidates:
        if product.item_reference == item_reference:
            return product
    return candidates[0]


# ═══════════════════════════════════════════════════════════════
# Line enrichment
# ═══════════════════════════════════════════════════════════════

def enrich_sales(
    sales: list[SalesLineItem], by_sale: ProductIndex,
) -> tuple[list[SalesLineItem], list[ErrorRecord]]:
    enriched: list[SalesLineItem] = []
    errors: list[ErrorRecord] = []

    for sale in sales:
        candidates = by_sale.get(sale.sale_number)
        if not candidates:
            errors.append(ErrorRecord(
                kind=ErrorKind.ORPHAN_REFERENCE,
                file=SALES_FILE,
                line=sale.line,
                column=SALES_LAYOUT["sale_number"],
                value=sale.sale_number,
                description=f"sale {sale.sale_number} has no associated product",
            ))
            continue

        product = pick_product(candidates, sale.item_reference)
        sale.item_group = product.item_group
        sale.item_brand = product.item_brand
        sale.item_supplier = product.item_supplier
        sale.unit_cost = product.unit_cost
        enriched.append(sale)

    return enriched, errors


def service_order_unit_cost(line: ServiceOrderLineItem, product: ProductMaster) -> Decimal | None:
    """Catalog total cost spread over the order line's own quantity."""
    if product.total_cost is None:
        return None
    quantity = line.quantity or product.quantity
    if not quantity or quantity <= 0:
        return None
    return product.total_cost / quantity


def enrich_service_orders(
    lines: list[ServiceOrderLineItem], by_order: ProductIndex,
) -> tuple[list[ServiceOrderLineItem], list[ErrorRecord]]:
    enriched: list[ServiceOrderLineItem] = []
    errors: list[ErrorRecord] = []

    for line in lines:
        candidates = by_order.get(line.order_number)
        if not candidates:
            errors.append(ErrorRecord(
                kind=ErrorKind.ORPHAN_REFERENCE,
                file=SERVICE_ORDERS_FILE,
                line=line.line,
                value=line.order_number,
                description=(
                    f"service order {line.order_number} item "
                    f"'{line.item_reference}' has no associated product"
                ),
            ))
            continue

        product = pick_product(candidates, line.item_reference)
        line.item_group = product.item_group
        line.item_brand = product.item_brand
        line.item_supplier = product.item_supplier
        line.unit_cost = service_order_unit_cost(line, product)
        enriched.append(line)

    return enriched, errors


# ═══════════════════════════════════════════════════════════════
# Dangling catalog references
# ═══════════════════════════════════════════════════════════════

def find_orphan_references(
    products: list[ProductMaster],
    sales: list[SalesLineItem],
    lines: list[ServiceOrderLineItem],
) -> list[ErrorRecord]:
    """One error per adjacency entry naming a sale / order absent from the parsed files."""
    sale_numbers = {sale.sale_number for sale in sales}
    order_numbers = {line.order_number for line in lines}
    errors: list[ErrorRecord] = []

    for product in products:
        for sale_number in product.sale_numbers:
            if sale_number not in sale_numbers:
                errors.append(ErrorRecord(
                    kind=ErrorKind.ORPHAN_REFERENCE,
                    file=PRODUCTS_FILE,
                    line=product.line,
                    column=PRODUCT_LAYOUT["sale_numbers"],
                    value=sale_number,
                    description=(
                        f"product '{product.item_reference}' references "
                        f"nonexistent sale {sale_number}"
                    ),
                ))
        for order_number in product.order_numbers:
            if order_number not in order_numbers:
                errors.append(ErrorRecord(
                    kind=ErrorKind.ORPHAN_REFERENCE,
                    file=PRODUCTS_FILE,
                    line=product.line,
                    column=PRODUCT_LAYOUT["order_numbers"],
                    value=order_number,
                    description=(
                        f"product '{product.item_reference}' references "
                        f"nonexistent service order {order_number}"
                    ),
                ))

    return errors


# ═══════════════════════════════════════════════════════════════
# Stage wrapper
# ═══════════════════════════════════════════════════════════════

@dataclass
class EnrichmentResult:
    sales: list[SalesLineItem]
    service_orders: list[ServiceOrderLineItem]
    errors: list[ErrorRecord] = field(default_factory=list)


class CrossReferenceEnricher:
    """Builds the product indexes once and enriches both line sets against them."""

    def __init__(self, products: list[ProductMaster]):
        self.products = products
        self.by_sale, self.by_order = build_indexes(products)

    def run(
        self,
        sales: list[SalesLineItem],
        service_orders: list[ServiceOrderLineItem],
        check_orphans: bool = True,
    ) -> EnrichmentResult:
        enriched_sales, sale_errors = enrich_sales(sales, self.by_sale)
        enriched_orders, order_errors = enrich_service_orders(service_orders, self.by_order)
        orphan_errors = (
            find_orphan_references(self.products, sales, service_orders)
            if check_orphans else []
        )

        logger.info(
            "Enrichment: %d/%d sales lines, %d/%d service-order lines, %d orphan references",
            len(enriched_sales), len(sales),
            len(enriched_orders), len(service_orders),
            len(orphan_errors),
        )
        return EnrichmentResult(
            sales=enriched_sales,
            service_orders=enriched_orders,
            errors=sale_errors + order_errors + orphan_errors,
        )
