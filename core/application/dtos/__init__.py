"""Application DTOs."""

from .movement_dto import RawMovement
from .sale_dto import RawSaleEvent
from .summary_dto import BatchSummary, IngestSummary, OrderFailure

__all__ = [
    "BatchSummary",
    "IngestSummary",
    "OrderFailure",
    "RawMovement",
    "RawSaleEvent",
]
