"""
Duplicate-object error detection.

The ledger reports "already exists" only in human-readable messages. All
substring matching lives here so it can be swapped for a structured error
code once the ledger exposes one. The pattern list is configurable and not
assumed to be exhaustive.
"""
from typing import Any, Iterable, Iterator, Optional

from core.settings.modules.pipeline_settings import DEFAULT_DUPLICATE_PATTERNS

_MESSAGE_KEYS = ("message", "error", "errors", "detail", "details", "msg")

SALES_ORDER_DUPLICATE_RESPONSE = {"status": 1}
INVOICE_DUPLICATE_MESSAGE = "Duplicate - proceeding to payment"


class DuplicateErrorDetector:
    """
    Usage:
        detector = DuplicateErrorDetector()
        detector.is_duplicate({"status": 0, "message": "Chứng từ đã tồn tại"})  # True
    """

    def __init__(self, patterns: Optional[Iterable[str]] = None):
        source = DEFAULT_DUPLICATE_PATTERNS if patterns is None else patterns
        self.patterns = tuple(p.casefold() for p in source if p)

    def matches(self, text: Optional[str]) -> bool:
        if not text:
            return False
        folded = text.casefold()
        return any(pattern in folded for pattern in self.patterns)

    def is_duplicate(self, response: Any = None, message: Optional[str] = None) -> bool:
        """True if the message or any nested message of the response matches."""
        if self.matches(message):
            return True
        return any(self.matches(text) for text in _messages(response))


def _messages(value: Any) -> Iterator[str]:
    if isinstance(value, str):
        yield value
    elif isinstance(value, dict):
        for key in _MESSAGE_KEYS:
            if key in value:
                yield from _messages(value[key])
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from _messages(item)


# =============================================================================
# SYNTHESIZED RESPONSES
# =============================================================================
# The real identifier cannot be recovered from a duplicate-error response,
# so downstream steps receive these in place of the ledger's answer.

def synthesize_sales_order_response(message: Optional[str] = None) -> dict:
    return dict(SALES_ORDER_DUPLICATE_RESPONSE)


def synthesize_invoice_response(message: Optional[str] = None) -> list:
    return [{"status": 1, "message": INVOICE_DUPLICATE_MESSAGE, "guid": None}]


def synthesize_generic_response(message: Optional[str] = None) -> dict:
    return {"status": 1, "message": message}
