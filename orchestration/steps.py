"""Pipeline definitions - Activity, RetryPolicy, PipelineStep, PipelineDefinition."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from core.domain.enums import PostingState
from core.domain.exceptions import LedgerCallError

from .models import PostingContext

# Type alias for pipeline activities
Activity = Callable[[PostingContext], Awaitable[object]]


@dataclass
class RetryPolicy:
    """
    Retry policy for pipeline steps.

    Only exceptions listed in `retry_on` are retried; anything else fails
    the step on the first attempt.
    """

    max_attempts: int = 3
    backoff_seconds: float = 0.0
    retry_on: tuple[type[BaseException], ...] = (LedgerCallError,)


@dataclass
class PipelineStep:
    """
    A single step of the posting pipeline.

    A non-blocking step that fails is recorded, but the order still moves
    on to `target_state`.
    """

    name: str
    target_state: PostingState
    activity: Activity
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    blocking: bool = True


@dataclass
class PipelineDefinition:
    """Definition of a posting pipeline."""

    name: str
    steps: list[PipelineStep]
