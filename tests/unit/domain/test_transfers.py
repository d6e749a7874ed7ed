"""Tests for transfer grouping."""
from decimal import Decimal

from core.domain.enums import MovementType
from core.domain.reconciliation import group_transfers
from tests.mocks.factories import make_movement


def _transfer(**overrides):
    values = {
        "doc_type": "STOCK_TRANSFER",
        "movement_type": MovementType.TRANSFER,
        "qty": Decimal("1"),
        "stock_code": "KHO01",
        "related_stock_code": "KHO02",
    }
    values.update(overrides)
    return make_movement(**values)


def test_transfers_grouped_per_order():
    movements = [
        _transfer(item_code="MN0001"),
        _transfer(item_code="MN0002"),
        _transfer(order_code="SO002", stock_code="KHO02", related_stock_code="KHO01"),
    ]

    grouping = group_transfers(movements, {"KHO01": "K01", "KHO02": "K02"})

    assert grouping.skipped == 0
    assert [r.order_code for r in grouping.requests] == ["SO001", "SO002"]
    first = grouping.requests[0]
    assert (first.source_warehouse, first.target_warehouse) == ("K01", "K02")
    assert [m.item_code for m in first.lines] == ["MN0001", "MN0002"]


def test_transfer_without_related_stock_code_is_skipped():
    grouping = group_transfers([_transfer(related_stock_code=None)])

    assert grouping.requests == []
    assert grouping.skipped == 1


def test_non_transfer_movements_are_ignored():
    grouping = group_transfers([make_movement(), _transfer(item_code="TRUTONKEEP")])

    assert grouping.requests == []
    assert grouping.skipped == 0


def test_unmapped_codes_pass_through():
    grouping = group_transfers([_transfer(stock_code="A", related_stock_code="B")])

    assert grouping.requests[0].source_warehouse == "A"
    assert grouping.requests[0].target_warehouse == "B"
