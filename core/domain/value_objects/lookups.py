"""Collaborator lookup results (catalog, branch, promotion, payment)."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ledger_sdk.utils.numbers import ZERO


@dataclass(frozen=True)
class ProductInfo:
    """
    Catalog entry for a material.

    Attributes:
        material_code: Ledger material code
        unit: Unit of measure
        product_type: Ledger product type ('I', 'S', 'V')
        product_group: Catalog group, e.g. '03TPCN', 'DIVU', 'VOUC'
        material_type: Catalog material type ('94' marks e-code materials)
        track_inventory / track_batch / track_serial: Stock tracking flags
    """
    material_code: str
    unit: str = ""
    product_type: Optional[str] = None
    product_group: str = ""
    material_type: str = ""
    track_inventory: bool = True
    track_batch: bool = False
    track_serial: bool = False

    @property
    def is_ecode(self) -> bool:
        return self.material_type == "94"

    @property
    def uses_batch(self) -> bool:
        """Batch/lot number when the material tracks batches and not serials."""
        return self.track_batch and not self.track_serial


@dataclass(frozen=True)
class BranchInfo:
    ledger_company_code: Optional[str]
    ledger_branch_code: Optional[str]


@dataclass(frozen=True)
class PromotionInfo:
    code: str
    discount_account: Optional[str] = None
    expense_account: Optional[str] = None
    fee_code: Optional[str] = None


@dataclass(frozen=True)
class PaymentRecord:
    """
    Payment line of an order (feed `cashio`).

    `method_code` is the channel's form-of-payment code: CASH, VOUCHER,
    ECOIN, or a bank/card method.
    """
    order_code: str
    method_code: str
    amount: Decimal = ZERO
    ref_no: Optional[str] = None
    period_code: Optional[str] = None
    branch_code: Optional[str] = None

    @property
    def normalized_method(self) -> str:
        return (self.method_code or "").strip().upper()


@dataclass(frozen=True)
class PaymentMethodInfo:
    code: str
    document_type: Optional[str] = None
    bank_unit: Optional[str] = None
    partner_code: Optional[str] = None
