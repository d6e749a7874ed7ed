"""
Stock movement reconciliation.

Explodes one sale line into the posting lines the ledger expects, one per
matched stock-out movement, while conserving the sale quantity.
"""
import logging
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Sequence

from core.domain.enums import MovementType, OrderCategory
from core.domain.value_objects import CanonicalSale, PostingLine, WarehouseMovement
from ledger_sdk.utils.numbers import ZERO

logger = logging.getLogger(__name__)


class LineExploder:
    """
    Match sale lines against warehouse movements of the same order.

    Matching is by (order code, resolved material code), falling back to
    (order code, raw item code). Card-split orders additionally require
    the movement quantity to equal the sale quantity, since one split
    order carries two lines with the same material and opposite signs.

    Usage:
        exploder = LineExploder(warehouse_map={"KHO01": "K01"})
        lines = exploder.explode(sale, movements)
        assert sum(line.qty for line in lines) == sale.qty
    """

    def __init__(self, warehouse_map: Optional[Mapping[str, str]] = None):
        self.warehouse_map = dict(warehouse_map or {})

    def explode(
        self,
        sale: CanonicalSale,
        movements: Iterable[WarehouseMovement],
        category: OrderCategory = OrderCategory.UNKNOWN,
    ) -> list[PostingLine]:
        candidates = [m for m in movements if self._eligible(m, sale, category)]
        matched = self._match(sale, candidates, category)
        return self._allocate(sale, matched)

    def explode_order(
        self,
        sales: Sequence[CanonicalSale],
        movements: Iterable[WarehouseMovement],
        category: OrderCategory = OrderCategory.UNKNOWN,
    ) -> list[PostingLine]:
        """
        Explode every line of one order.

        Each movement is consumed by at most one sale line, in line order.
        """
        pool = list(movements)
        lines: list[PostingLine] = []
        for sale in sales:
            exploded = self.explode(sale, pool, category)
            used = {id(line.movement) for line in exploded if line.movement is not None}
            pool = [m for m in pool if id(m) not in used]
            lines.extend(exploded)
        return lines

    def map_warehouse(self, code: Optional[str]) -> Optional[str]:
        """Translate a warehouse code; unmapped codes are returned unchanged."""
        if not code:
            return None
        return self.warehouse_map.get(code, code)

    # ==========================================================================
    # MATCHING
    # ==========================================================================

    @staticmethod
    def _eligible(movement: WarehouseMovement, sale: CanonicalSale, category: OrderCategory) -> bool:
        if movement.order_code != sale.order_code:
            return False
        if movement.is_carry_forward or movement.is_transfer:
            return False
        if category is OrderCategory.CARD_SPLIT:
            return True
        return movement.is_stock_out

    @staticmethod
    def _match(
        sale: CanonicalSale,
        candidates: list[WarehouseMovement],
        category: OrderCategory,
    ) -> list[WarehouseMovement]:
        material = sale.resolved_material_code
        matched = [m for m in candidates if (m.material_code or m.item_code) == material]
        if not matched:
            matched = [m for m in candidates if m.item_code == sale.item_code]

        if category is OrderCategory.CARD_SPLIT:
            matched = [m for m in matched if _same_split_side(sale, m)]
        return matched

    # ==========================================================================
    # ALLOCATION
    # ==========================================================================

    def _allocate(self, sale: CanonicalSale, matched: list[WarehouseMovement]) -> list[PostingLine]:
        total = abs(sale.qty)
        if not matched or total == ZERO:
            return [PostingLine(sale=sale, qty=sale.qty)]

        sign = Decimal(-1) if sale.qty < 0 else Decimal(1)
        remaining = total
        lines: list[PostingLine] = []
        for movement in matched:
            if remaining <= ZERO:
                break
            take = min(abs(movement.qty), remaining)
            if take == ZERO:
                continue
            lines.append(
                PostingLine(
                    sale=self._portion(sale, take, total, sign),
                    qty=sign * take,
                    warehouse_code=self.map_warehouse(movement.stock_code),
                    batch_serial=movement.batch_serial,
                    movement=movement,
                )
            )
            remaining -= take

        if not lines:
            return [PostingLine(sale=sale, qty=sale.qty)]

        if remaining > ZERO:
            logger.warning(
                f"[EXPLODE] {sale.order_code}/{sale.item_code}: movements cover "
                f"{total - remaining} of {total}, adding remainder line"
            )
            lines.append(
                PostingLine(sale=self._portion(sale, remaining, total, sign), qty=sign * remaining)
            )
        return lines

    @staticmethod
    def _portion(sale: CanonicalSale, take: Decimal, total: Decimal, sign: Decimal) -> CanonicalSale:
        if take == total:
            return sale
        return sale.scaled(sign * take, take / total)


def _same_split_side(sale: CanonicalSale, movement: WarehouseMovement) -> bool:
    """Card split: equal magnitude, stock-out for positive lines and stock-in for negative ones."""
    if abs(movement.qty) != abs(sale.qty):
        return False
    if sale.qty < 0:
        return movement.movement_type is MovementType.IN or movement.qty > 0
    return movement.is_stock_out
