"""Orchestration models - PostingContext, StepOutput, StepResult, PipelineResult."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from core.domain.enums import PostingState
from core.domain.value_objects import OrderDocument


@dataclass
class PostingContext:
    """State shared by the steps of one order's posting run."""

    order_code: str
    document: OrderDocument
    started_at: datetime
    results: dict[str, Any] = field(default_factory=dict)


@dataclass
class StepOutput:
    """
    What an activity hands back to the pipeline.

    Activities may also return a plain value, which counts as a regular success.
    """

    value: Any = None
    duplicate: bool = False
    skipped: bool = False


@dataclass
class StepResult:
    """Result of one pipeline step."""

    name: str
    state: PostingState
    success: bool
    attempts: int
    duration_ms: int
    error: str | None = None
    output: object = None
    duplicate: bool = False
    skipped: bool = False


@dataclass
class PipelineResult:
    """
    Result of posting one order.

    `state` is DONE or FAILED; `furthest_state` is the last state reached
    before the pipeline stopped.
    """

    order_code: str
    state: PostingState
    furthest_state: PostingState
    started_at: datetime
    finished_at: datetime
    steps: list[StepResult]
    error: Optional[str] = None
    failed_step: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state is PostingState.DONE

    def step(self, name: str) -> Optional[StepResult]:
        for result in self.steps:
            if result.name == name:
                return result
        return None
