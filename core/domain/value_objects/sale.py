"""
Sale value objects.

CanonicalSale is the deduplicated, persisted form of one reported sale line.
Its natural key is derived only from business fields, so the same logical
event always maps to the same key.
"""
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from typing import Mapping, Optional

from ledger_sdk.utils.numbers import ZERO

NULL_TOKEN = "null"
KEY_SEPARATOR = "|"


def _key_number(value: Decimal) -> str:
    normalized = value.normalize()
    if normalized == 0:
        return "0"
    return format(normalized, "f")


@dataclass(frozen=True)
class NaturalKey:
    """
    Opaque uniqueness key of a CanonicalSale.

    Ordered parts: orderCode, itemCode, qty, unitPrice, discAmt,
    gradeDiscAmt, otherDiscAmt, revenue, promoCode|"null", serial|"null",
    customerId, sourceNativeId|"null", positionIndex.
    """
    value: str

    def __post_init__(self):
        if not self.value:
            raise ValueError("Natural key cannot be empty")

    @classmethod
    def from_parts(
        cls,
        order_code: str,
        item_code: str,
        qty: Decimal,
        unit_price: Decimal,
        disc_amt: Decimal,
        grade_disc_amt: Decimal,
        other_disc_amt: Decimal,
        revenue: Decimal,
        promo_code: Optional[str],
        serial: Optional[str],
        customer_id: str,
        source_native_id: Optional[str],
        position_index: int,
    ) -> "NaturalKey":
        parts = [
            order_code,
            item_code,
            _key_number(qty),
            _key_number(unit_price),
            _key_number(disc_amt),
            _key_number(grade_disc_amt),
            _key_number(other_disc_amt),
            _key_number(revenue),
            promo_code or NULL_TOKEN,
            serial or NULL_TOKEN,
            customer_id or "",
            source_native_id or NULL_TOKEN,
            str(position_index),
        ]
        return cls(value=KEY_SEPARATOR.join(parts))

    def __str__(self) -> str:
        return self.value


# Monetary attributes that follow the quantity when a line is split.
MONETARY_FIELDS = (
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

# Descriptive fields refreshed when an already-known event is re-ingested.
DESCRIPTIVE_FIELDS = (
    "item_name",
    "material_code",
    "order_type_label",
    "product_type",
    "brand",
    "category_tags",
)


@dataclass(frozen=True)
class CanonicalSale:
    """
    Deduplicated sale line.

    Amount fields mirror the channel feed:
        subtotal: goods value before discounts (feed `tienHang`)
        promo_disc_amt: promotion-program discount (feed `disc_ctkm`)
        policy_disc_amt: policy discount, wholesale (feed `disc_tm`)
        voucher_amount: voucher / e-code payment (feed `paid_by_voucher_ecode_ecoin_bp`)
        wallet_amount: virtual-wallet payment (bucket 11)
        extra_discounts: pass-through amounts for buckets 9..22
        discount_codes: codes already attached upstream, keyed by bucket index
    """
    natural_key: str
    order_code: str
    item_code: str
    qty: Decimal
    branch_code: str = ""
    order_date: Optional[date] = None
    material_code: Optional[str] = None
    item_name: str = ""
    order_type_label: str = ""
    product_type: Optional[str] = None
    brand: str = ""
    category_tags: str = ""
    sale_type: str = "RETAIL"
    customer_code: str = ""
    customer_source: str = ""
    is_employee: bool = False
    is_marketplace: bool = False
    unit_price: Decimal = ZERO
    subtotal: Decimal = ZERO
    line_total: Decimal = ZERO
    revenue: Decimal = ZERO
    disc_amt: Decimal = ZERO
    grade_disc_amt: Decimal = ZERO
    other_disc_amt: Decimal = ZERO
    promo_disc_amt: Decimal = ZERO
    policy_disc_amt: Decimal = ZERO
    voucher_amount: Decimal = ZERO
    coupon_amount: Decimal = ZERO
    voucher_dp1_amount: Decimal = ZERO
    voucher_dp2_amount: Decimal = ZERO
    voucher_dp3_amount: Decimal = ZERO
    wallet_amount: Decimal = ZERO
    tax_amount: Decimal = ZERO
    extra_discounts: Mapping[int, Decimal] = field(default_factory=dict)
    discount_codes: Mapping[int, str] = field(default_factory=dict)
    promo_code: Optional[str] = None
    gift_code: Optional[str] = None
    discount_reason: Optional[str] = None
    serial: Optional[str] = None
    source_native_id: Optional[str] = None
    position_index: int = 0
    warehouse_code: Optional[str] = None
    department_code: Optional[str] = None
    discount_account: Optional[str] = None
    expense_account: Optional[str] = None
    fee_code: Optional[str] = None
    posted: bool = False

    def __post_init__(self):
        if not self.order_code:
            raise ValueError("Sale order code cannot be empty")
        if not self.item_code:
            raise ValueError("Sale item code cannot be empty")

    @property
    def is_wholesale(self) -> bool:
        return (self.sale_type or "").strip().upper() in ("WHOLESALE", "WS")

    @property
    def is_cancellation(self) -> bool:
        """Cancellation orders carry the `_X` suffix on their order code."""
        return self.order_code.upper().endswith("_X")

    @property
    def resolved_material_code(self) -> str:
        return self.material_code or self.item_code

    def scaled(self, qty: Decimal, ratio: Decimal) -> "CanonicalSale":
        """
        Copy of this sale carrying `qty` with every amount scaled by `ratio`.

        Unit price is left unchanged.
        """
        changes = {name: getattr(self, name) * ratio for name in MONETARY_FIELDS}
        changes["extra_discounts"] = {
            index: amount * ratio for index, amount in self.extra_discounts.items()
        }
        return replace(self, qty=qty, **changes)

    def with_descriptive_fields_from(self, other: "CanonicalSale") -> "CanonicalSale":
        """Refresh descriptive fields from a re-ingested copy, keeping key and posted flag."""
        return replace(self, **{name: getattr(other, name) for name in DESCRIPTIVE_FIELDS})

    def descriptive_differs(self, other: "CanonicalSale") -> bool:
        return any(getattr(self, name) != getattr(other, name) for name in DESCRIPTIVE_FIELDS)

