"""
Audit Status Enum.

Outcome of a single external ledger call.
"""
from enum import Enum


class AuditStatus(str, Enum):
    """Audit record status values."""

    SUCCESS = "SUCCESS"
    DUPLICATE = "DUPLICATE"
    ERROR = "ERROR"
