from enum import Enum


class IngestOutcome(str, Enum):
    """Result of ingesting one raw sale event."""

    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
