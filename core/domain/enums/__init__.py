"""Domain enumerations."""

from .audit_status import AuditStatus
from .ingest_outcome import IngestOutcome
from .movement_type import MovementType
from .order_category import OrderCategory
from .posting_state import POSTING_SEQUENCE, PostingState
from .product_kind import ProductKind

__all__ = [
    "AuditStatus",
    "IngestOutcome",
    "MovementType",
    "OrderCategory",
    "POSTING_SEQUENCE",
    "PostingState",
    "ProductKind",
]
