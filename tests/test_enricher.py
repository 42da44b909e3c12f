from decimal import Decimal

from painel.services.imports.enricher import (
    CrossReferenceEnricher,
    build_indexes,
    enrich_sales,
    enrich_service_orders,
    find_orphan_references,
)
from painel.services.imports.records import (
    ErrorKind,
    ProductMaster,
    SalesLineItem,
    ServiceOrderLineItem,
)


def product(reference, sales=(), orders=(), quantity=2, total_cost="40.00", **fields):
    total = Decimal(total_cost) if total_cost is not None else None
    return ProductMaster(
        item_reference=reference,
        quantity=quantity,
        total_cost=total,
        unit_cost=total / quantity if total is not None and quantity else None,
        sale_numbers=list(sales),
        order_numbers=list(orders),
        **fields,
    )


# ═══════════════════════════════════════════════════════════════
# Indexes
# ═══════════════════════════════════════════════════════════════

def test_indexes_map_each_number_to_every_product_listing_it():
    a = product("SKU-A", sales=[1001, 1002], orders=[500])
    b = product("SKU-B", sales=[1001])

    by_sale, by_order = build_indexes([a, b])

    assert by_sale[1001] == [a, b]
    assert by_sale[1002] == [a]
    assert by_order == {500: [a]}


# ═══════════════════════════════════════════════════════════════
# Sales
# ═══════════════════════════════════════════════════════════════

def test_sale_takes_attributes_of_the_exactly_matching_product():
    a = product("SKU-A", sales=[1001], item_brand="Ray-Ban")
    b = product("SKU-B", sales=[1001], item_brand="Oakley", total_cost="90")
    by_sale, _ = build_indexes([a, b])

    enriched, errors = enrich_sales([SalesLineItem(sale_number=1001, item_reference="SKU-B")], by_sale)

    assert errors == []
    assert enriched[0].item_brand == "Oakley"
    assert enriched[0].unit_cost == Decimal("45")


def test_sale_falls_back_to_first_mapped_product():
    a = product("SKU-A", sales=[1001], item_group="Armações")
    b = product("SKU-B", sales=[1001], item_group="Lentes")
    by_sale, _ = build_indexes([a, b])

    enriched, _ = enrich_sales([SalesLineItem(sale_number=1001, item_reference="SKU-Z")], by_sale)

    assert enriched[0].item_group == "Armações"


def test_sale_without_product_is_excluded_with_an_orphan_error():
    by_sale, _ = build_indexes([product("SKU-A", sales=[1001])])
    sales = [
        SalesLineItem(sale_number=1001, item_reference="SKU-A"),
        SalesLineItem(sale_number=1009, item_reference="SKU-A", line=3),
    ]

    enriched, errors = enrich_sales(sales, by_sale)

    assert [sale.sale_number for sale in enriched] == [1001]
    [error] = errors
    assert error.kind == ErrorKind.ORPHAN_REFERENCE
    assert (error.file, error.line, error.value) == ("Sales", 3, 1009)


# ═══════════════════════════════════════════════════════════════
# Service orders
# ═══════════════════════════════════════════════════════════════

def test_service_order_unit_cost_uses_the_line_quantity():
    _, by_order = build_indexes([product("LENTE-1", orders=[500], quantity=2, total_cost="40")])
    line = ServiceOrderLineItem(order_number=500, item_reference="LENTE-1", quantity=4)

    enriched, errors = enrich_service_orders([line], by_order)

    assert errors == []
    assert enriched[0].unit_cost == Decimal("10")


def test_service_order_unit_cost_falls_back_to_product_quantity():
    _, by_order = build_indexes([product("LENTE-1", orders=[500], quantity=2, total_cost="40")])
    line = ServiceOrderLineItem(order_number=500, item_reference="LENTE-1", quantity=0)

    enriched, _ = enrich_service_orders([line], by_order)

    assert enriched[0].unit_cost == Decimal("20")


def test_service_order_unit_cost_is_null_without_a_divisor():
    _, by_order = build_indexes([product("LENTE-1", orders=[500], quantity=0, total_cost="40")])
    line = ServiceOrderLineItem(order_number=500, item_reference="LENTE-1", quantity=0)

    enriched, _ = enrich_service_orders([line], by_order)

    assert enriched[0].unit_cost is None


def test_service_order_line_without_product_is_excluded():
    _, by_order = build_indexes([product("LENTE-1", orders=[500])])
    line = ServiceOrderLineItem(order_number=777, item_reference="LENTE-1")

    enriched, errors = enrich_service_orders([line], by_order)

    assert enriched == []
    assert errors[0].kind == ErrorKind.ORPHAN_REFERENCE
    assert errors[0].value == 777


# ═══════════════════════════════════════════════════════════════
# Dangling catalog references
# ═══════════════════════════════════════════════════════════════

def test_one_orphan_error_per_dangling_adjacency_entry():
    products = [product("SKU-A", sales=[1001, 1002], orders=[500, 501])]
    products[0].line = 2
    sales = [SalesLineItem(sale_number=1001, item_reference="SKU-A")]
    lines = [ServiceOrderLineItem(order_number=500, item_reference="SKU-A")]

    errors = find_orphan_references(products, sales, lines)

    assert [(error.column, error.value) for error in errors] == [("R", 1002), ("S", 501)]
    assert all(error.kind == ErrorKind.ORPHAN_REFERENCE for error in errors)
    assert all(error.line == 2 for error in errors)


def test_enricher_run_combines_all_findings():
    products = [product("SKU-A", sales=[1001, 1002])]
    sales = [SalesLineItem(sale_number=1001, item_reference="SKU-A")]

    result = CrossReferenceEnricher(products).run(sales, [])

    assert [sale.unit_cost for sale in result.sales] == [Decimal("20")]
    assert [error.value for error in result.errors] == [1002]


def test_enricher_run_can_skip_the_orphan_check():
    products = [product("SKU-A", sales=[1001, 1002])]
    sales = [SalesLineItem(sale_number=1001, item_reference="SKU-A")]

    result = CrossReferenceEnricher(products).run(sales, [], check_orphans=False)

    assert result.errors == []
