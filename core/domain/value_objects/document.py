"""Order document: everything the posting pipeline needs for one order."""
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from .accounting import AccountingResolution
from .lookups import PaymentRecord, ProductInfo
from .movement import PostingLine, TransferRequest, WarehouseMovement


@dataclass(frozen=True)
class ResolvedLine:
    """A posting line together with its accounting treatment."""
    line: PostingLine
    resolution: AccountingResolution
    product: Optional[ProductInfo] = None
    warehouse_code: str = ""
    batch_no: Optional[str] = None
    serial_no: Optional[str] = None

    @property
    def material_code(self) -> str:
        if self.product is not None and self.product.material_code:
            return self.product.material_code
        return self.line.sale.resolved_material_code


@dataclass(frozen=True)
class OrderDocument:
    """
    Assembled order, ready to be mapped to ledger payloads.

    Attributes:
        company_code: Ledger company code (ma_dvcs) of the order's branch
        stock_movements: Release/receipt movements of the order
        transfers: Grouped inter-warehouse transfers
        allow_without_stock_codes: Order may complete without any warehouse code
        warehouse_map: Channel to ledger warehouse codes, for stock payloads
    """
    order_code: str
    order_date: Optional[date]
    customer_code: str
    company_code: str
    branch_code: str
    lines: tuple[ResolvedLine, ...]
    payments: tuple[PaymentRecord, ...] = ()
    stock_movements: tuple[WarehouseMovement, ...] = ()
    transfers: tuple[TransferRequest, ...] = ()
    allow_without_stock_codes: bool = False
    warehouse_map: dict = field(default_factory=dict)

    @property
    def warehouse_codes(self) -> set[str]:
        return {line.warehouse_code for line in self.lines if line.warehouse_code}
