"""Posting pipeline - runs one order through its steps with retries and events."""

import asyncio
from typing import Optional

from core.domain.enums import AuditStatus, PostingState
from core.domain.exceptions import LedgerCallError, LedgerRejectedError, ReconciliationError
from core.domain.repositories import AuditRepository
from core.domain.value_objects import AuditRecord
from ledger_sdk.logging import get_logger
from ledger_sdk.utils.datetime import utc_now

from . import events
from .bus import EventBusProtocol
from .events import Event, EventMetadata
from .models import PipelineResult, PostingContext, StepOutput, StepResult
from .steps import PipelineDefinition, PipelineStep

# Ledger call failures are audited where the call is made.
_AUDITED_AT_CALL_SITE = (LedgerCallError, LedgerRejectedError)


class PostingPipeline:
    """
    Per-order posting state machine.

    Steps run strictly in order. A blocking step failure ends the run in
    FAILED, keeping the furthest state reached; completing every step ends
    it in DONE. Re-running an order replays every step, which is safe
    because the ledger calls behind the steps are duplicate tolerant.
    """

    def __init__(
        self,
        event_bus: EventBusProtocol,
        audit: Optional[AuditRepository] = None,
    ) -> None:
        self._event_bus = event_bus
        self._audit = audit
        self._logger = get_logger("orchestration.pipeline")

    async def run(self, definition: PipelineDefinition, ctx: PostingContext) -> PipelineResult:
        started_at = utc_now()
        furthest = PostingState.PENDING
        step_results: list[StepResult] = []
        failed: Optional[StepResult] = None

        self._logger.info(
            f"[PIPELINE] {ctx.order_code}: starting {definition.name} "
            f"({len(definition.steps)} steps)"
        )
        await self._publish(
            events.POSTING_STARTED,
            ctx,
            definition,
            {"step_count": len(definition.steps)},
        )

        for step in definition.steps:
            result = await self._execute_step(ctx, definition, step)
            step_results.append(result)

            if not result.success and step.blocking:
                failed = result
                self._logger.warning(
                    f"[PIPELINE] {ctx.order_code}: step {step.name} failed at "
                    f"{furthest.value}: {result.error}"
                )
                break

            if not result.success:
                self._logger.warning(
                    f"[PIPELINE] {ctx.order_code}: non-blocking step {step.name} "
                    f"failed, continuing: {result.error}"
                )
            ctx.results[step.name] = result.output
            furthest = step.target_state

        if failed is None:
            furthest = PostingState.DONE
            state = PostingState.DONE
        else:
            state = PostingState.FAILED

        finished_at = utc_now()
        pipeline_result = PipelineResult(
            order_code=ctx.order_code,
            state=state,
            furthest_state=furthest,
            started_at=started_at,
            finished_at=finished_at,
            steps=step_results,
            error=failed.error if failed else None,
            failed_step=failed.name if failed else None,
        )

        await self._publish(
            events.POSTING_FINISHED,
            ctx,
            definition,
            {
                "state": state.value,
                "furthest_state": furthest.value,
                "failed_step": pipeline_result.failed_step,
            },
        )
        self._logger.info(
            f"[PIPELINE] {ctx.order_code}: finished {state.value} "
            f"(furthest {furthest.value}, "
            f"{int((finished_at - started_at).total_seconds() * 1000)}ms)"
        )
        return pipeline_result

    async def _execute_step(
        self, ctx: PostingContext, definition: PipelineDefinition, step: PipelineStep
    ) -> StepResult:
        step_started_at = utc_now()
        policy = step.retry_policy
        attempts = 0
        last_error: Optional[BaseException] = None

        for attempt in range(1, policy.max_attempts + 1):
            attempts = attempt
            try:
                output = await step.activity(ctx)
            except policy.retry_on as exc:
                last_error = exc
                self._logger.warning(
                    f"[PIPELINE] {ctx.order_code}: {step.name} attempt "
                    f"{attempt}/{policy.max_attempts} failed: {exc}"
                )
                if attempt < policy.max_attempts and policy.backoff_seconds > 0:
                    await asyncio.sleep(policy.backoff_seconds)
                continue
            except Exception as exc:
                last_error = exc
                break
            return await self._succeeded(ctx, definition, step, output, attempts, step_started_at)

        error = str(last_error) if last_error else "Unknown error"
        if last_error is not None and not isinstance(last_error, _AUDITED_AT_CALL_SITE):
            if not isinstance(last_error, ReconciliationError):
                self._logger.error(
                    f"[PIPELINE] {ctx.order_code}: unexpected error in {step.name}",
                    exc_info=last_error,
                )
            await self._audit_failure(ctx, step, error)

        await self._publish(
            events.STEP_FAILED,
            ctx,
            definition,
            {"step_name": step.name, "attempts": attempts, "error": error},
        )
        return StepResult(
            name=step.name,
            state=step.target_state,
            success=False,
            attempts=attempts,
            duration_ms=_elapsed_ms(step_started_at),
            error=error,
        )

    async def _succeeded(
        self,
        ctx: PostingContext,
        definition: PipelineDefinition,
        step: PipelineStep,
        output: object,
        attempts: int,
        step_started_at,
    ) -> StepResult:
        duplicate = skipped = False
        if isinstance(output, StepOutput):
            duplicate, skipped = output.duplicate, output.skipped
            output = output.value

        if skipped:
            name = events.STEP_SKIPPED
        elif duplicate:
            name = events.STEP_DUPLICATE
        else:
            name = events.STEP_SUCCEEDED
        await self._publish(name, ctx, definition, {"step_name": step.name, "attempts": attempts})

        return StepResult(
            name=step.name,
            state=step.target_state,
            success=True,
            attempts=attempts,
            duration_ms=_elapsed_ms(step_started_at),
            output=output,
            duplicate=duplicate,
            skipped=skipped,
        )

    async def _audit_failure(self, ctx: PostingContext, step: PipelineStep, error: str) -> None:
        if self._audit is None:
            return
        await self._audit.append(
            AuditRecord(
                order_code=ctx.order_code,
                step=step.name,
                status=AuditStatus.ERROR,
                error_message=error,
            )
        )

    async def _publish(
        self,
        name: str,
        ctx: PostingContext,
        definition: PipelineDefinition,
        payload: dict[str, object],
    ) -> None:
        metadata = EventMetadata(
            order_code=ctx.order_code,
            pipeline=definition.name,
            timestamp=utc_now(),
        )
        await self._event_bus.publish(Event(name=name, payload=payload, metadata=metadata))


def _elapsed_ms(started_at) -> int:
    return int((utc_now() - started_at).total_seconds() * 1000)
