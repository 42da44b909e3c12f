from datetime import date

from conftest import order_row, workbook_bytes
from painel.services.imports.parsers.service_order_parser import (
    HaveHeader,
    NoHeader,
    ServiceOrderParser,
    is_item_reference,
    step,
)
from painel.services.imports.records import ErrorKind


def parse(rows):
    return ServiceOrderParser().parse(workbook_bytes(rows))


HEADER_500 = order_row(
    order_number=500,
    opened_on=date(2024, 3, 1),
    status="Aberta",
    sale_status="Vendida",
    current_stage="Laboratório",
    expected_delivery=date(2024, 3, 10),
    seller="Ana",
)


# ═══════════════════════════════════════════════════════════════
# Full scans
# ═══════════════════════════════════════════════════════════════

def test_header_followed_by_two_items():
    outcome = parse([
        HEADER_500,
        order_row(item_reference="LENTE-1", item_description="Lente multifocal", quantity=2, net_total=300),
        order_row(item_reference="ARM-9", quantity=1, net_total=450),
    ])

    assert outcome.errors == []
    assert [line.item_reference for line in outcome.records] == ["LENTE-1", "ARM-9"]
    for line in outcome.records:
        assert line.order_number == 500
        assert line.opened_on == date(2024, 3, 1)
        assert line.status == "Aberta"
        assert line.sale_status == "Vendida"
        assert line.current_stage == "Laboratório"
        assert line.expected_delivery == date(2024, 3, 10)
        assert line.delivered_on is None
        assert line.seller == "Ana"
    assert [line.quantity for line in outcome.records] == [2, 1]
    assert [line.item_description for line in outcome.records] == ["Lente multifocal", None]


def test_new_header_closes_the_previous_group():
    outcome = parse([
        HEADER_500,
        order_row(item_reference="LENTE-1"),
        order_row(order_number=501, seller="Bruno"),
        order_row(item_reference="ARM-9"),
    ])

    assert [(line.order_number, line.seller) for line in outcome.records] == [
        (500, "Ana"),
        (501, "Bruno"),
    ]


def test_item_before_any_header_is_an_error():
    outcome = parse([
        order_row(item_reference="LENTE-1"),
        HEADER_500,
        order_row(item_reference="ARM-9"),
    ])

    assert [line.item_reference for line in outcome.records] == ["ARM-9"]
    [error] = outcome.errors
    assert error.kind == ErrorKind.PARSE
    assert error.line == 2
    assert error.value == "LENTE-1"


def test_placeholders_and_repeated_titles_are_ignored():
    outcome = parse([
        HEADER_500,
        order_row(item_reference="Referência"),
        order_row(item_reference="-"),
        order_row(item_reference="N/A"),
        order_row(item_reference="LENTE-1"),
    ])

    assert outcome.errors == []
    assert [line.item_reference for line in outcome.records] == ["LENTE-1"]


def test_quantity_defaults_to_one():
    outcome = parse([HEADER_500, order_row(item_reference="LENTE-1")])

    assert outcome.records[0].quantity == 1


# ═══════════════════════════════════════════════════════════════
# Transition function
# ═══════════════════════════════════════════════════════════════

def test_step_header_row_moves_to_have_header():
    state, item, error = step(NoHeader(), 2, {"A": 500, "I": "Ana"})

    assert isinstance(state, HaveHeader)
    assert state.header.order_number == 500
    assert item is None and error is None


def test_step_item_row_keeps_state_and_emits_item():
    state, _, _ = step(NoHeader(), 2, {"A": 500})
    next_state, item, error = step(state, 3, {"AC": "LENTE-1", "AD": 3})

    assert next_state == state
    assert (item.order_number, item.item_reference, item.quantity, item.line) == (500, "LENTE-1", 3, 3)
    assert error is None


def test_step_other_rows_leave_state_unchanged():
    state = NoHeader()
    assert step(state, 2, {"B": "Subtotal"}) == (state, None, None)
    assert step(state, 3, {"A": 0}) == (state, None, None)


def test_is_item_reference():
    assert is_item_reference("LENTE-1")
    assert not is_item_reference(None)
    assert not is_item_reference("...")
    assert not is_item_reference("CÓDIGO")
