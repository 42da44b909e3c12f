"""
Integrity checks over the parsed sales and service-order sets.

Each check is independent and returns every violation it finds; nothing
short-circuits, so the caller can report the whole batch in one response.
"""

from __future__ import annotations

from painel.services.imports.parsers.base import normalize_name
from painel.services.imports.parsers.layouts import SALES_LAYOUT, SERVICE_ORDER_LAYOUT
from painel.services.imports.records import (
    SALES_FILE,
    SERVICE_ORDERS_FILE,
    ErrorKind,
    ErrorRecord,
    SalesLineItem,
    ServiceOrderLineItem,
)


def check_client_consistency(sales: list[SalesLineItem], company_name: str) -> list[ErrorRecord]:
    """Every non-blank client must name the company the batch was submitted for."""
    expected = normalize_name(company_name)
    errors: list[ErrorRecord] = []
    for sale in sales:
        if not sale.client:
            continue
        if normalize_name(sale.client) != expected:
            errors.append(ErrorRecord(
                kind=ErrorKind.INTEGRITY_MISMATCH,
                file=SALES_FILE,
                line=sale.line,
                column=SALES_LAYOUT["client"],
                value=sale.client,
                description=(
                    f"client '{sale.client}' on sale {sale.sale_number} "
                    f"does not match company '{company_name}'"
                ),
            ))
    return errors


def check_duplicate_sales(sales: list[SalesLineItem]) -> list[ErrorRecord]:
    seen: set[int] = set()
    errors: list[ErrorRecord] = []
    for sale in sales:
        if sale.sale_number in seen:
            errors.append(ErrorRecord(
                kind=ErrorKind.DUPLICATE_KEY,
                file=SALES_FILE,
                line=sale.line,
                column=SALES_LAYOUT["sale_number"],
                value=sale.sale_number,
                description=f"sale number {sale.sale_number} appears more than once",
            ))
        seen.add(sale.sale_number)
    return errors


def check_order_links(
    sales: list[SalesLineItem], lines: list[ServiceOrderLineItem],
) -> list[ErrorRecord]:
    """
    Sales ↔ service-order existence, checked in both directions.

    A sale naming an order that is not in the Service Order file is an
    orphan reference; an order that no sale names is an integrity mismatch.
    """
    referenced = {
        sale.order_number: sale
        for sale in reversed(sales)
        if sale.order_number is not None
    }
    parsed = {line.order_number: line for line in reversed(lines)}
    errors: list[ErrorRecord] = []

    for order_number in dict.fromkeys(s.order_number for s in sales if s.order_number is not None):
        if order_number not in parsed:
            sale = referenced[order_number]
            errors.append(ErrorRecord(
                kind=ErrorKind.ORPHAN_REFERENCE,
                file=SALES_FILE,
                line=sale.line,
                column=SALES_LAYOUT["order_number"],
                value=order_number,
                description=(
                    f"sale {sale.sale_number} references service order "
                    f"{order_number}, which is not in the service order file"
                ),
            ))

    for order_number in dict.fromkeys(line.order_number for line in lines):
        if order_number not in referenced:
            errors.append(ErrorRecord(
                kind=ErrorKind.INTEGRITY_MISMATCH,
                file=SERVICE_ORDERS_FILE,
                line=parsed[order_number].line,
                column=SERVICE_ORDER_LAYOUT["order_number"],
                value=order_number,
                description=f"service order {order_number} is not referenced by any sale",
            ))

    return errors
