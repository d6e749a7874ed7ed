"""
Posting State Enum.

States of the per-order posting state machine. FAILED is absorbing and
reachable from every other state.
"""
from enum import Enum


class PostingState(str, Enum):
    """Posting pipeline states."""

    PENDING = "PENDING"
    CUSTOMER_OK = "CUSTOMER_OK"
    ORDER_SUBMITTED = "ORDER_SUBMITTED"
    INVOICE_SUBMITTED = "INVOICE_SUBMITTED"
    PAYMENT_PROCESSED = "PAYMENT_PROCESSED"
    WAREHOUSE_POSTED = "WAREHOUSE_POSTED"
    DONE = "DONE"
    FAILED = "FAILED"

    @property
    def rank(self) -> int:
        """Position in the forward sequence (-1 for FAILED)."""
        if self is PostingState.FAILED:
            return -1
        return POSTING_SEQUENCE.index(self)


POSTING_SEQUENCE = (
    PostingState.PENDING,
    PostingState.CUSTOMER_OK,
    PostingState.ORDER_SUBMITTED,
    PostingState.INVOICE_SUBMITTED,
    PostingState.PAYMENT_PROCESSED,
    PostingState.WAREHOUSE_POSTED,
    PostingState.DONE,
)
