"""Orchestration layer - the per-order posting pipeline with eventing."""

from typing import Optional

from core.application.interfaces import ILedgerClient, IPaymentMethodDirectory, IPromotionDirectory
from core.domain.repositories import AuditRepository
from core.infrastructure.adapters.ledger import DuplicateErrorDetector

from .bus import EventBusProtocol, InMemoryEventBus
from .events import Event, EventMetadata
from .models import PipelineResult, PostingContext, StepOutput, StepResult
from .pipeline import PostingPipeline
from .posting import AuditedLedgerCall, OrderPostingSteps
from .steps import Activity, PipelineDefinition, PipelineStep, RetryPolicy

__all__ = [
    "Activity",
    "AuditedLedgerCall",
    "Event",
    "EventBusProtocol",
    "EventMetadata",
    "InMemoryEventBus",
    "OrderPostingSteps",
    "PipelineDefinition",
    "PipelineResult",
    "PipelineStep",
    "PostingContext",
    "PostingPipeline",
    "RetryPolicy",
    "StepOutput",
    "StepResult",
    "create_posting_steps",
]


def create_posting_steps(
    client: ILedgerClient,
    audit: AuditRepository,
    promotions: IPromotionDirectory,
    payment_methods: IPaymentMethodDirectory,
    retry_policy: Optional[RetryPolicy] = None,
    duplicate_patterns: Optional[list[str]] = None,
) -> OrderPostingSteps:
    """Create the order posting steps with an audited, duplicate-tolerant ledger call.

    Args:
        client: Ledger client
        audit: Audit repository, one record per ledger call
        promotions: Promotion directory used to validate invoice codes
        payment_methods: Payment-method directory used to route payments
        retry_policy: Optional retry policy for transient ledger failures
        duplicate_patterns: Optional duplicate-object message patterns

    Returns:
        OrderPostingSteps instance
    """
    ledger_call = AuditedLedgerCall(client, audit, DuplicateErrorDetector(duplicate_patterns))
    return OrderPostingSteps(
        ledger_call=ledger_call,
        promotions=promotions,
        payment_methods=payment_methods,
        retry_policy=retry_policy,
    )
