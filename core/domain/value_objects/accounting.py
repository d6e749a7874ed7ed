"""
Accounting resolution value objects.

CRITICAL: This file must contain ZERO imports from:
- sqlalchemy
- pydantic
- aiohttp
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterator, Optional

from core.domain.enums import OrderCategory
from ledger_sdk.utils.numbers import ZERO, is_zero

BUCKET_COUNT = 22


@dataclass(frozen=True)
class DiscountBucket:
    """One (code, amount) discount slot of a posting line."""
    code: Optional[str] = None
    amount: Decimal = ZERO

    @property
    def is_empty(self) -> bool:
        return not self.code and is_zero(self.amount)


EMPTY_BUCKET = DiscountBucket()


@dataclass(frozen=True)
class DiscountBuckets:
    """
    The 22 positional discount slots (ck01..ck22).

    Indexing is 1-based to match the ledger field names:
        buckets[5] -> (ma_ck05, ck05_nt)
    """
    slots: tuple[DiscountBucket, ...] = field(
        default_factory=lambda: (EMPTY_BUCKET,) * BUCKET_COUNT
    )

    def __post_init__(self):
        if len(self.slots) != BUCKET_COUNT:
            raise ValueError(
                f"Expected {BUCKET_COUNT} discount buckets, got {len(self.slots)}"
            )

    @classmethod
    def empty(cls) -> "DiscountBuckets":
        return cls()

    @classmethod
    def from_mapping(cls, buckets: dict[int, DiscountBucket]) -> "DiscountBuckets":
        slots = [EMPTY_BUCKET] * BUCKET_COUNT
        for index, bucket in buckets.items():
            slots[_position(index)] = bucket
        return cls(slots=tuple(slots))

    def __getitem__(self, index: int) -> DiscountBucket:
        return self.slots[_position(index)]

    def __iter__(self) -> Iterator[DiscountBucket]:
        return iter(self.slots)

    def __len__(self) -> int:
        return BUCKET_COUNT

    def non_empty(self) -> dict[int, DiscountBucket]:
        return {i: b for i, b in enumerate(self.slots, start=1) if not b.is_empty}


def _position(index: int) -> int:
    if not 1 <= index <= BUCKET_COUNT:
        raise IndexError(f"Discount bucket index out of range: {index}")
    return index - 1


@dataclass(frozen=True)
class AccountTriple:
    """Discount account, expense account and fee code for one line."""
    discount_account: Optional[str] = None
    expense_account: Optional[str] = None
    fee_code: Optional[str] = None


@dataclass(frozen=True)
class PromotionCodes:
    """
    Promotion codes of a line.

    Attributes:
        code01: Primary promotion code (ma_ck01)
        gift_code: Gift-quantity promotion code (ma_ctkm_th)
        pre_derived: Code was rewritten from another prefix; no suffix rules applied
    """
    code01: Optional[str] = None
    gift_code: Optional[str] = None
    pre_derived: bool = False


@dataclass(frozen=True)
class PriceResolution:
    unit_price: Decimal
    subtotal: Decimal


@dataclass(frozen=True)
class AccountingResolution:
    """
    Complete accounting treatment of one posting line.

    Fully determined by the resolver inputs; equal inputs give equal values.
    """
    category: OrderCategory
    accounts: AccountTriple
    buckets: DiscountBuckets
    promotion: PromotionCodes
    tax_code: str
    transaction_type: str
    price: PriceResolution
    is_gift_line: bool = False
    gift_flag: Optional[str] = None
