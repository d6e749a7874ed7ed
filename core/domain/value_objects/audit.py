"""Audit record value object."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from core.domain.enums import AuditStatus
from ledger_sdk.utils.datetime import utc_now


@dataclass(frozen=True)
class AuditRecord:
    """
    One external ledger call, successful or not.

    Append-only: records are never updated after they are written.
    """
    order_code: str
    step: str
    status: AuditStatus
    request_payload: Any = None
    response_payload: Any = None
    error_message: Optional[str] = None
    timestamp: datetime = field(default_factory=utc_now)
