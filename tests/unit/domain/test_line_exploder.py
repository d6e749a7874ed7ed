"""Tests for matching sale lines against warehouse movements."""
from decimal import Decimal

import pytest

from core.domain.enums import MovementType, OrderCategory
from core.domain.reconciliation import LineExploder
from tests.mocks.factories import make_movement, make_sale


@pytest.fixture
def exploder() -> LineExploder:
    return LineExploder(warehouse_map={"KHO01": "K01", "KHO02": "K02"})


def test_sale_split_across_two_movements_and_unmatched_line(exploder):
    """Qty 10 against movements of 6 and 4; an unmatched material keeps its quantity."""
    matched_sale = make_sale(qty=Decimal("10"), subtotal=Decimal("1000000"))
    unmatched_sale = make_sale(item_code="MN0002", qty=Decimal("3"))
    movements = [
        make_movement(qty=Decimal("-6"), doc_code="XK001"),
        make_movement(qty=Decimal("-4"), doc_code="XK002", stock_code="KHO02"),
    ]

    lines = exploder.explode_order([matched_sale, unmatched_sale], movements)

    assert [line.qty for line in lines] == [Decimal("6"), Decimal("4"), Decimal("3")]
    assert [line.warehouse_code for line in lines] == ["K01", "K02", None]
    assert lines[0].sale.subtotal == Decimal("600000")
    assert lines[1].sale.subtotal == Decimal("400000")
    assert lines[2].sale is unmatched_sale
    assert not lines[2].matched


@pytest.mark.parametrize(
    "sale_qty, movement_qtys",
    [
        ("10", ["-6", "-4"]),
        ("5", ["-3"]),
        ("5", ["-4", "-4"]),
        ("1", []),
        ("2.5", ["-1", "-1", "-1"]),
    ],
)
def test_quantity_is_conserved(exploder, sale_qty, movement_qtys):
    sale = make_sale(qty=Decimal(sale_qty))
    movements = [make_movement(qty=Decimal(q), doc_code=f"XK{i}") for i, q in enumerate(movement_qtys)]

    lines = exploder.explode(sale, movements)

    assert sum(line.qty for line in lines) == sale.qty


def test_shortfall_adds_unmatched_remainder_line(exploder):
    sale = make_sale(qty=Decimal("5"))

    lines = exploder.explode(sale, [make_movement(qty=Decimal("-3"))])

    assert [line.qty for line in lines] == [Decimal("3"), Decimal("2")]
    assert lines[0].matched
    assert not lines[1].matched
    assert lines[1].warehouse_code is None


def test_excess_movement_quantity_is_truncated(exploder):
    sale = make_sale(qty=Decimal("5"))
    movements = [make_movement(qty=Decimal("-4"), doc_code="A"), make_movement(qty=Decimal("-4"), doc_code="B")]

    lines = exploder.explode(sale, movements)

    assert [line.qty for line in lines] == [Decimal("4"), Decimal("1")]


def test_movements_of_other_orders_are_ignored(exploder):
    sale = make_sale(qty=Decimal("2"))

    lines = exploder.explode(sale, [make_movement(order_code="SO999", qty=Decimal("-2"))])

    assert len(lines) == 1
    assert not lines[0].matched


def test_transfers_and_carry_forward_are_not_matched(exploder):
    sale = make_sale(qty=Decimal("2"))
    movements = [
        make_movement(qty=Decimal("-2"), doc_type="STOCK_TRANSFER", movement_type=MovementType.TRANSFER),
        make_movement(item_code="TRUTONKEEP", qty=Decimal("-2")),
    ]

    lines = exploder.explode(sale, movements)

    assert len(lines) == 1
    assert not lines[0].matched


def test_falls_back_to_raw_item_code(exploder):
    sale = make_sale(item_code="X1", material_code="MAT1", qty=Decimal("1"))

    lines = exploder.explode(sale, [make_movement(item_code="X1", qty=Decimal("-1"))])

    assert lines[0].matched


def test_each_movement_is_consumed_once_per_order(exploder):
    first = make_sale(qty=Decimal("1"), position_index=0)
    second = make_sale(qty=Decimal("1"), position_index=1)

    lines = exploder.explode_order([first, second], [make_movement(qty=Decimal("-1"))])

    assert [line.matched for line in lines] == [True, False]


def test_card_split_matches_opposite_sides(exploder):
    positive = make_sale(qty=Decimal("2"), order_type_label="08. Tách thẻ")
    negative = make_sale(qty=Decimal("-2"), order_type_label="08. Tách thẻ", position_index=1)
    stock_out = make_movement(qty=Decimal("-2"), doc_code="XK001")
    stock_in = make_movement(
        qty=Decimal("2"),
        doc_code="NK001",
        doc_type="SALE_RETURN",
        movement_type=MovementType.IN,
        stock_code="KHO02",
    )

    lines = exploder.explode_order([positive, negative], [stock_in, stock_out], OrderCategory.CARD_SPLIT)

    assert lines[0].movement is stock_out
    assert lines[0].qty == Decimal("2")
    assert lines[1].movement is stock_in
    assert lines[1].qty == Decimal("-2")


def test_card_split_requires_equal_quantity(exploder):
    sale = make_sale(qty=Decimal("2"))

    lines = exploder.explode(sale, [make_movement(qty=Decimal("-1"))], OrderCategory.CARD_SPLIT)

    assert len(lines) == 1
    assert not lines[0].matched


def test_unmapped_warehouse_code_is_kept(exploder):
    sale = make_sale(qty=Decimal("1"))

    lines = exploder.explode(sale, [make_movement(qty=Decimal("-1"), stock_code="KHO99")])

    assert lines[0].warehouse_code == "KHO99"
