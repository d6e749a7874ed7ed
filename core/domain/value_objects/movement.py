"""Warehouse movement and posting line value objects."""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from core.domain.enums import MovementType
from .sale import CanonicalSale

SALE_STOCKOUT = "SALE_STOCKOUT"
STOCK_TRANSFER = "STOCK_TRANSFER"
# Pseudo item used upstream to carry forward prepaid balances; never stock.
CARRY_FORWARD_ITEM = "TRUTONKEEP"


@dataclass(frozen=True)
class WarehouseMovement:
    """
    Independently reported stock movement.

    `order_code` is the sales order the movement belongs to (feed `so_code`);
    `doc_code` is the warehouse document that produced it.
    """
    order_code: str
    item_code: str
    qty: Decimal
    movement_type: MovementType = MovementType.OUT
    material_code: Optional[str] = None
    doc_code: str = ""
    doc_type: str = ""
    stock_code: str = ""
    related_stock_code: Optional[str] = None
    batch_serial: Optional[str] = None
    trans_date: Optional[date] = None

    @property
    def is_stock_out(self) -> bool:
        return self.doc_type == SALE_STOCKOUT or self.qty < 0

    @property
    def is_transfer(self) -> bool:
        return self.doc_type == STOCK_TRANSFER or self.movement_type is MovementType.TRANSFER

    @property
    def is_carry_forward(self) -> bool:
        return self.item_code.strip().upper() == CARRY_FORWARD_ITEM

    @property
    def composite_key(self) -> str:
        """Content-derived key used by the movement feed for idempotent storage."""
        return "|".join(
            [
                self.doc_code,
                self.item_code,
                format(self.qty.normalize(), "f") if self.qty else "0",
                self.stock_code,
                self.movement_type.value,
                self.batch_serial or "",
            ]
        )


@dataclass(frozen=True)
class PostingLine:
    """
    One ledger detail line produced by exploding a sale.

    `sale` is the sale scaled to this line's quantity. `movement` is None
    for unmatched lines, which also carry no warehouse code.
    """
    sale: CanonicalSale
    qty: Decimal
    warehouse_code: Optional[str] = None
    batch_serial: Optional[str] = None
    movement: Optional[WarehouseMovement] = None

    @property
    def matched(self) -> bool:
        return self.movement is not None


@dataclass(frozen=True)
class TransferRequest:
    """Multi-line warehouse transfer posted as a single ledger request."""
    order_code: str
    source_warehouse: str
    target_warehouse: str
    lines: tuple[WarehouseMovement, ...]
