"""Domain layer - pure domain models and interfaces."""

from .enums import AuditStatus, IngestOutcome, MovementType, OrderCategory, PostingState, ProductKind
from .value_objects import (
    AccountingResolution,
    AuditRecord,
    CanonicalSale,
    DiscountBucket,
    DiscountBuckets,
    NaturalKey,
    PostingLine,
    WarehouseMovement,
)

__all__ = [
    "AccountingResolution",
    "AuditRecord",
    "AuditStatus",
    "CanonicalSale",
    "DiscountBucket",
    "DiscountBuckets",
    "IngestOutcome",
    "MovementType",
    "NaturalKey",
    "OrderCategory",
    "PostingLine",
    "PostingState",
    "ProductKind",
    "WarehouseMovement",
]
