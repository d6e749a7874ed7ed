"""DTOs returned by batch operations."""
from datetime import datetime
from typing import List, Optional, Set

from pydantic import BaseModel, Field

from core.domain.enums import PostingState
from ledger_sdk.utils.datetime import utc_now


class IngestSummary(BaseModel):
    """Result of one ingestion batch."""

    created: int = 0
    updated: int = 0
    skipped: int = 0
    malformed: int = 0
    material_codes: Set[str] = Field(default_factory=set, description="Distinct material codes seen")
    branch_codes: Set[str] = Field(default_factory=set, description="Distinct branch codes seen")

    @property
    def total(self) -> int:
        return self.created + self.updated + self.skipped + self.malformed


class OrderFailure(BaseModel):
    order_code: str = Field(..., description="Failed order")
    error: str = Field(..., description="Failure reason")
    furthest_state: PostingState = Field(
        default=PostingState.PENDING, description="Last state reached before the failure"
    )


class BatchSummary(BaseModel):
    """Result of one posting batch."""

    total: int = Field(default=0, ge=0, description="Orders attempted")
    success: int = Field(default=0, ge=0, description="Orders that reached DONE")
    failed: int = Field(default=0, ge=0, description="Orders that failed")
    errors: List[OrderFailure] = Field(default_factory=list, description="Bounded failure list")
    execution_time_seconds: Optional[float] = Field(default=None)
    timestamp: datetime = Field(default_factory=utc_now)
