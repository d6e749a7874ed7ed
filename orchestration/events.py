"""Pipeline events - Event, EventMetadata."""

from dataclasses import dataclass
from datetime import datetime

POSTING_STARTED = "posting.started"
STEP_SUCCEEDED = "posting.step.succeeded"
STEP_DUPLICATE = "posting.step.duplicate"
STEP_SKIPPED = "posting.step.skipped"
STEP_FAILED = "posting.step.failed"
POSTING_FINISHED = "posting.finished"


@dataclass
class EventMetadata:
    """Metadata for an event."""

    order_code: str
    pipeline: str
    timestamp: datetime


@dataclass
class Event:
    """Event emitted while an order moves through the posting pipeline."""

    name: str
    payload: dict[str, object]
    metadata: EventMetadata
