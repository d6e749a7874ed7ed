"""
Ledger response interpretation.

The ledger answers either with an array whose first element carries the
status, or with a single object. Both shapes normalize to one CallOutcome.
"""
from dataclasses import dataclass
from typing import Any, Optional

SUCCESS_STATUS = 1
INVALID_RESPONSE_MESSAGE = "Invalid response from ledger"


@dataclass(frozen=True)
class CallOutcome:
    success: bool
    message: Optional[str] = None
    status: Optional[int] = None


def interpret(response: Any) -> CallOutcome:
    """
    Decide success from a ledger response body.

    Examples:
        interpret([{"status": 1, "message": "OK"}])   # success
        interpret({"status": 0, "message": "..."})    # failure
        interpret("<html>")                           # failure, invalid response
    """
    body = response
    if isinstance(response, list):
        if not response:
            return CallOutcome(success=False, message=INVALID_RESPONSE_MESSAGE)
        body = response[0]

    if not isinstance(body, dict) or "status" not in body:
        return CallOutcome(success=False, message=INVALID_RESPONSE_MESSAGE)

    status = _as_int(body.get("status"))
    message = body.get("message")
    return CallOutcome(
        success=status == SUCCESS_STATUS,
        message=str(message) if message is not None else None,
        status=status,
    )


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
