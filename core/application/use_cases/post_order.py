"""
Post Order Use Case.

Posts one order to the external ledger.

Flow:
1. Load the order's sales and warehouse movements
2. Prefetch lookups (unless the batch already did)
3. Build the order document (explode lines, resolve accounting)
4. Run the posting pipeline
5. Mark the sales posted once the order reaches DONE
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.application.interfaces import IPaymentMethodDirectory
from core.application.services.document_builder import OrderDocumentBuilder
from core.application.services.lookup_prefetcher import LookupCache, LookupPrefetcher
from core.domain.enums import AuditStatus, PostingState
from core.domain.exceptions import ValidationError
from core.domain.value_objects import AuditRecord, CanonicalSale, WarehouseMovement
from core.infrastructure.database import create_uow
from ledger_sdk.utils.datetime import utc_now
from orchestration import OrderPostingSteps, PostingContext, PostingPipeline, StepResult


logger = logging.getLogger(__name__)

VALIDATE_STEP = "validate"


# =============================================================================
# REQUEST / RESPONSE
# =============================================================================

@dataclass
class PostOrderRequest:
    """
    Input for the post order use case.

    `lookups` is passed by batch runs that prefetched them for every order.
    """
    order_code: str
    lookups: Optional[LookupCache] = None


@dataclass
class PostOrderResponse:
    order_code: str
    success: bool
    state: PostingState
    furthest_state: PostingState = PostingState.PENDING
    steps: List[StepResult] = field(default_factory=list)
    error: Optional[str] = None
    failed_step: Optional[str] = None
    timestamp: datetime = field(default_factory=utc_now)


# =============================================================================
# USE CASE
# =============================================================================

class PostOrderUseCase:
    """
    Use case for posting one order.

    Validation failures (missing configuration) fail the order before any
    ledger call and are audited under the "validate" step. Ledger failures
    are audited per call by the pipeline steps.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        builder: OrderDocumentBuilder,
        steps: OrderPostingSteps,
        pipeline: PostingPipeline,
        payment_methods: IPaymentMethodDirectory,
        prefetcher: Optional[LookupPrefetcher] = None,
    ):
        self._session_factory = session_factory
        self.builder = builder
        self.steps = steps
        self.pipeline = pipeline
        self.payment_methods = payment_methods
        self.prefetcher = prefetcher

    async def execute(self, request: PostOrderRequest) -> PostOrderResponse:
        order_code = request.order_code
        logger.info(f"[PIPELINE] Posting order {order_code}")

        async with create_uow(self._session_factory) as uow:
            sales = await uow.sales.find_by_order(order_code)
            movements = await uow.movements.find_by_order(order_code)

        try:
            if not sales:
                raise ValidationError(order_code, "sales lines", f"Order {order_code}: no sales lines stored")
            lookups = request.lookups or await self._prefetch(order_code, sales, movements)
            payments = await self.payment_methods.get_payments(order_code)
            document = self.builder.build(sales, movements, lookups, payments)
        except ValidationError as e:
            logger.error(f"[PIPELINE] {order_code}: validation failed: {e}")
            await self._audit_validation(order_code, str(e))
            return PostOrderResponse(
                order_code=order_code,
                success=False,
                state=PostingState.FAILED,
                error=str(e),
                failed_step=VALIDATE_STEP,
            )

        ctx = PostingContext(order_code=order_code, document=document, started_at=utc_now())
        result = await self.pipeline.run(self.steps.definition(), ctx)

        if result.succeeded:
            async with create_uow(self._session_factory) as uow:
                marked = await uow.sales.mark_posted(order_code)
                await uow.commit()
            logger.info(f"[PIPELINE] ✅ {order_code} posted ({marked} line(s) marked)")
        else:
            logger.error(
                f"[PIPELINE] ❌ {order_code} failed at {result.failed_step} "
                f"(furthest {result.furthest_state.value}): {result.error}"
            )

        return PostOrderResponse(
            order_code=order_code,
            success=result.succeeded,
            state=result.state,
            furthest_state=result.furthest_state,
            steps=result.steps,
            error=result.error,
            failed_step=result.failed_step,
        )

    async def _prefetch(
        self,
        order_code: str,
        sales: List[CanonicalSale],
        movements: List[WarehouseMovement],
    ) -> LookupCache:
        if self.prefetcher is None:
            return LookupCache()
        return await self.prefetcher.prefetch(
            material_codes={s.resolved_material_code for s in sales},
            branch_codes={s.branch_code for s in sales},
            warehouse_codes=order_warehouse_codes(sales, movements),
            order_codes=[order_code],
        )

    async def _audit_validation(self, order_code: str, error: str) -> None:
        async with create_uow(self._session_factory) as uow:
            await uow.audit.append(
                AuditRecord(
                    order_code=order_code,
                    step=VALIDATE_STEP,
                    status=AuditStatus.ERROR,
                    error_message=error,
                )
            )


def order_warehouse_codes(sales, movements) -> set[str]:
    """Channel warehouse codes referenced by an order, for the mapping lookup."""
    codes = {s.warehouse_code for s in sales if s.warehouse_code}
    for m in movements:
        codes.add(m.stock_code)
        if m.related_stock_code:
            codes.add(m.related_stock_code)
    return {code for code in codes if code}
