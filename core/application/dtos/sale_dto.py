"""
DTOs for raw sale events.

Field aliases follow the channel feed (camelCase / snake_case mix as sent
by the POS systems); Python attribute names are used everywhere else.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.domain.exceptions import MalformedSaleEventError
from core.domain.value_objects import CanonicalSale, NaturalKey
from ledger_sdk.utils.numbers import ZERO, to_decimal

_MONEY_FIELDS = (
    "qty",
    "unit_price",
    "subtotal",
    "line_total",
    "revenue",
    "disc_amt",
    "grade_disc_amt",
    "other_disc_amt",
    "promo_disc_amt",
    "policy_disc_amt",
    "voucher_amount",
    "coupon_amount",
    "voucher_dp1_amount",
    "voucher_dp2_amount",
    "voucher_dp3_amount",
    "wallet_amount",
    "tax_amount",
)


class RawSaleEvent(BaseModel):
    """One reported sale line, exactly as received from a source feed."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        frozen=True,
        json_schema_extra={
            "example": {
                "docCode": "SO-2511-0001",
                "docDate": "2025-11-03",
                "branchCode": "TTM01",
                "itemCode": "MN0001",
                "qty": 1,
                "giaBan": 250000,
                "revenue": 200000,
                "grade_discamt": 50000,
                "ordertype": "01.Thường",
            }
        },
    )

    order_code: Optional[str] = Field(default=None, alias="docCode")
    order_date: Optional[date] = Field(default=None, alias="docDate")
    branch_code: str = Field(default="", alias="branchCode")
    item_code: Optional[str] = Field(default=None, alias="itemCode")
    item_name: str = Field(default="", alias="itemName")
    material_code: Optional[str] = Field(default=None, alias="materialCode")
    order_type_label: str = Field(default="", alias="ordertype")
    product_type: Optional[str] = Field(default=None, alias="productType")
    brand: str = Field(default="", alias="brand")
    category_tags: str = Field(default="", alias="categoryTags")
    sale_type: str = Field(default="RETAIL", alias="saleType")

    customer_code: str = Field(default="", alias="partnerCode")
    customer_source: str = Field(default="", alias="order_source")
    is_employee: bool = Field(default=False, alias="isEmployee")
    is_marketplace: bool = Field(default=False, alias="isMarketplace")

    qty: Decimal = Field(default=ZERO, alias="qty")
    unit_price: Decimal = Field(default=ZERO, alias="giaBan")
    subtotal: Decimal = Field(default=ZERO, alias="tienHang")
    line_total: Decimal = Field(default=ZERO, alias="linetotal")
    revenue: Decimal = Field(default=ZERO, alias="revenue")
    disc_amt: Decimal = Field(default=ZERO, alias="disc_amt")
    grade_disc_amt: Decimal = Field(default=ZERO, alias="grade_discamt")
    other_disc_amt: Decimal = Field(default=ZERO, alias="other_discamt")
    promo_disc_amt: Decimal = Field(default=ZERO, alias="disc_ctkm")
    policy_disc_amt: Decimal = Field(default=ZERO, alias="disc_tm")
    voucher_amount: Decimal = Field(default=ZERO, alias="paid_by_voucher_ecode_ecoin_bp")
    coupon_amount: Decimal = Field(default=ZERO, alias="thanhToanCoupon")
    voucher_dp1_amount: Decimal = Field(default=ZERO, alias="voucherDp1")
    voucher_dp2_amount: Decimal = Field(default=ZERO, alias="voucherDp2")
    voucher_dp3_amount: Decimal = Field(default=ZERO, alias="voucherDp3")
    wallet_amount: Decimal = Field(default=ZERO, alias="thanhToanTkTienAo")
    tax_amount: Decimal = Field(default=ZERO, alias="tienThue")
    extra_discounts: Dict[int, Decimal] = Field(default_factory=dict, alias="extraDiscounts")
    discount_codes: Dict[int, str] = Field(default_factory=dict, alias="discountCodes")

    promo_code: Optional[str] = Field(default=None, alias="promCode")
    gift_code: Optional[str] = Field(default=None, alias="maCtkmTangHang")
    discount_reason: Optional[str] = Field(default=None, alias="discountReason")
    serial: Optional[str] = Field(default=None, alias="serial")
    source_native_id: Optional[str] = Field(default=None, alias="api_id")
    position_index: Optional[int] = Field(default=None, alias="positionIndex")
    warehouse_code: Optional[str] = Field(default=None, alias="maKho")
    department_code: Optional[str] = Field(default=None, alias="boPhan")
    discount_account: Optional[str] = Field(default=None, alias="tkChietKhau")
    expense_account: Optional[str] = Field(default=None, alias="tkChiPhi")
    fee_code: Optional[str] = Field(default=None, alias="maPhi")

    @field_validator(*_MONEY_FIELDS, mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> Decimal:
        return to_decimal(v)

    @field_validator("extra_discounts", mode="before")
    @classmethod
    def coerce_extra_discounts(cls, v: Any) -> Dict[int, Decimal]:
        return {int(k): to_decimal(amount) for k, amount in (v or {}).items()}

    @field_validator("order_date", mode="before")
    @classmethod
    def coerce_order_date(cls, v: Any) -> Any:
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str):
            v = v.strip()
            return v[:10] or None
        return v

    @field_validator("source_native_id", mode="before")
    @classmethod
    def coerce_native_id(cls, v: Any) -> Optional[str]:
        if v is None or v == "":
            return None
        return str(v)

    @field_validator("order_code", "item_code", "promo_code", "serial", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        text = str(v).strip()
        return text or None

    def natural_key(self, position_index: int = 0) -> NaturalKey:
        return NaturalKey.from_parts(
            order_code=self.order_code or "",
            item_code=self.item_code or "",
            qty=self.qty,
            unit_price=self.unit_price,
            disc_amt=self.disc_amt,
            grade_disc_amt=self.grade_disc_amt,
            other_disc_amt=self.other_disc_amt,
            revenue=self.revenue,
            promo_code=self.promo_code,
            serial=self.serial,
            customer_id=self.customer_code,
            source_native_id=self.source_native_id,
            position_index=self._position(position_index),
        )

    def to_canonical(self, position_index: int = 0) -> CanonicalSale:
        """
        Convert to a CanonicalSale.

        Args:
            position_index: Line position within the order, used when the
                feed does not send one

        Raises:
            MalformedSaleEventError: If order code or item code is missing
        """
        if not self.order_code:
            raise MalformedSaleEventError("missing order code", self.order_code)
        if not self.item_code:
            raise MalformedSaleEventError("missing item code", self.order_code)

        data = self.model_dump(by_alias=False, exclude={"position_index"})
        return CanonicalSale(
            natural_key=str(self.natural_key(position_index)),
            position_index=self._position(position_index),
            **data,
        )

    def _position(self, fallback: int) -> int:
        return self.position_index if self.position_index is not None else fallback
