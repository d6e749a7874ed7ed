"""
Domain exceptions.

Taxonomy:
- ValidationError: hard failure of one order caused by missing configuration.
  Never retried automatically.
- LedgerCallError: transport/HTTP failure of an external call. Retried per
  step policy, then reported; re-run later with retry_failed.
- MalformedSaleEventError: raw event rejected at ingestion (skipped, counted).
"""
from typing import Any, Optional


class ReconciliationError(Exception):
    """Base class for all reconciliation and posting errors."""


class MalformedSaleEventError(ReconciliationError):
    def __init__(self, reason: str, order_code: Optional[str] = None):
        self.reason = reason
        self.order_code = order_code
        super().__init__(f"Malformed sale event ({order_code or '?'}): {reason}")


class ValidationError(ReconciliationError):
    """
    Order cannot be posted until upstream configuration is fixed.

    Attributes:
        order_code: Affected order
        linkage: The missing configuration link, e.g. "branch:B01 -> ledger company code"
    """

    def __init__(self, order_code: str, linkage: str, message: Optional[str] = None):
        self.order_code = order_code
        self.linkage = linkage
        super().__init__(message or f"Order {order_code}: missing {linkage}")


class UnknownPromotionCodeError(ValidationError):
    def __init__(self, order_code: str, codes: list[str]):
        self.codes = codes
        super().__init__(
            order_code,
            linkage=f"promotion codes {', '.join(codes)}",
            message=f"Order {order_code}: unknown promotion code(s): {', '.join(codes)}",
        )


class UnmappedPaymentMethodError(ValidationError):
    def __init__(self, order_code: str, method_code: str, document_type: Optional[str]):
        self.method_code = method_code
        self.document_type = document_type
        super().__init__(
            order_code,
            linkage=f"payment method {method_code} -> document type",
            message=(
                f"Order {order_code}: payment method {method_code} has "
                f"unsupported document type {document_type!r}"
            ),
        )


class LedgerCallError(ReconciliationError):
    """External ledger call failed before a usable response was received."""

    def __init__(self, endpoint: str, message: str, status: Optional[int] = None):
        self.endpoint = endpoint
        self.status = status
        super().__init__(f"Ledger call {endpoint} failed: {message}")


class LedgerAuthError(LedgerCallError):
    pass


class LedgerRejectedError(ReconciliationError):
    """The ledger answered with a non-success, non-duplicate status."""

    def __init__(self, endpoint: str, message: str, response: Any = None):
        self.endpoint = endpoint
        self.response = response
        super().__init__(f"Ledger rejected {endpoint}: {message}")
