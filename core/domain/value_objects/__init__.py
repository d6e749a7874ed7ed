"""Domain value objects."""

from .accounting import (
    BUCKET_COUNT,
    EMPTY_BUCKET,
    AccountingResolution,
    AccountTriple,
    DiscountBucket,
    DiscountBuckets,
    PriceResolution,
    PromotionCodes,
)
from .audit import AuditRecord
from .document import OrderDocument, ResolvedLine
from .lookups import BranchInfo, PaymentMethodInfo, PaymentRecord, ProductInfo, PromotionInfo
from .movement import PostingLine, TransferRequest, WarehouseMovement
from .sale import CanonicalSale, NaturalKey

__all__ = [
    "BUCKET_COUNT",
    "EMPTY_BUCKET",
    "AccountingResolution",
    "AccountTriple",
    "AuditRecord",
    "BranchInfo",
    "CanonicalSale",
    "DiscountBucket",
    "DiscountBuckets",
    "NaturalKey",
    "OrderDocument",
    "PaymentMethodInfo",
    "PaymentRecord",
    "PostingLine",
    "PriceResolution",
    "ProductInfo",
    "PromotionCodes",
    "PromotionInfo",
    "ResolvedLine",
    "TransferRequest",
    "WarehouseMovement",
]
