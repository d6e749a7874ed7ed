"""External ledger adapter: HTTP client, response interpretation, payloads."""

from .client import HttpLedgerClient
from .duplicate_errors import (
    DuplicateErrorDetector,
    synthesize_generic_response,
    synthesize_invoice_response,
    synthesize_sales_order_response,
)
from .outcome import CallOutcome, interpret
from .payload_mapper import LedgerPayloadMapper, clean_payload, collect_promotion_codes

__all__ = [
    "CallOutcome",
    "DuplicateErrorDetector",
    "HttpLedgerClient",
    "LedgerPayloadMapper",
    "clean_payload",
    "collect_promotion_codes",
    "interpret",
    "synthesize_generic_response",
    "synthesize_invoice_response",
    "synthesize_sales_order_response",
]
