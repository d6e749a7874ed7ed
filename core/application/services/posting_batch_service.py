"""
Posting Batch Service.

Posts many orders concurrently with a bounded worker pool. One order's
failure never aborts its siblings; the batch returns a structured summary.
"""
import asyncio
import time
from datetime import date
from typing import Iterable, List, Optional
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.application.dtos import BatchSummary, OrderFailure
from core.application.services.lookup_prefetcher import LookupCache, LookupPrefetcher
from core.application.use_cases.post_order import (
    PostOrderRequest,
    PostOrderResponse,
    PostOrderUseCase,
    order_warehouse_codes,
)
from core.domain.enums import AuditStatus, PostingState
from core.infrastructure.database import create_uow


logger = logging.getLogger(__name__)


class PostingBatchService:
    """
    Batch posting facade over PostOrderUseCase.

    Usage:
        service = PostingBatchService(use_case, session_factory, prefetcher)

        summary = await service.post_date_range(date(2025, 11, 1), date(2025, 11, 30))
        # later, after fixing configuration or a ledger outage
        summary = await service.retry_failed(date(2025, 11, 1), date(2025, 11, 30))
    """

    def __init__(
        self,
        use_case: PostOrderUseCase,
        session_factory: async_sessionmaker[AsyncSession],
        prefetcher: Optional[LookupPrefetcher] = None,
        concurrency: int = 5,
        max_error_entries: int = 50,
    ):
        self.use_case = use_case
        self._session_factory = session_factory
        self.prefetcher = prefetcher
        self.concurrency = concurrency
        self.max_error_entries = max_error_entries

    async def post_orders(self, order_codes: Iterable[str]) -> BatchSummary:
        """Post the given orders, in order of first appearance."""
        codes = list(dict.fromkeys(order_codes))
        started = time.monotonic()
        summary = BatchSummary(total=len(codes))
        if not codes:
            return summary

        logger.info(f"[BATCH] Posting {len(codes)} order(s), concurrency {self.concurrency}")
        lookups = await self._prefetch(codes)
        semaphore = asyncio.Semaphore(self.concurrency)

        async def post_one(code: str) -> PostOrderResponse:
            async with semaphore:
                try:
                    return await self.use_case.execute(PostOrderRequest(order_code=code, lookups=lookups))
                except Exception as e:
                    logger.error(f"[BATCH] {code}: unexpected error: {e}", exc_info=True)
                    return PostOrderResponse(
                        order_code=code,
                        success=False,
                        state=PostingState.FAILED,
                        error=str(e),
                    )

        responses = await asyncio.gather(*(post_one(code) for code in codes))

        for response in responses:
            if response.success:
                summary.success += 1
                continue
            summary.failed += 1
            if len(summary.errors) < self.max_error_entries:
                summary.errors.append(
                    OrderFailure(
                        order_code=response.order_code,
                        error=response.error or "Unknown error",
                        furthest_state=response.furthest_state,
                    )
                )

        summary.execution_time_seconds = round(time.monotonic() - started, 3)
        logger.info(
            f"[BATCH] Done: {summary.success}/{summary.total} posted, "
            f"{summary.failed} failed in {summary.execution_time_seconds}s"
        )
        return summary

    async def post_date_range(self, date_from: date, date_to: date) -> BatchSummary:
        """Post every not-yet-posted order dated within [date_from, date_to]."""
        async with create_uow(self._session_factory) as uow:
            codes = await uow.sales.find_order_codes(date_from, date_to, unposted_only=True)
        return await self.post_orders(codes)

    async def retry_failed(self, date_from: date, date_to: date) -> BatchSummary:
        """
        Re-run only the orders whose latest audit outcome is an error and
        which are not yet posted.
        """
        codes: List[str] = []
        async with create_uow(self._session_factory) as uow:
            candidates = await uow.sales.find_order_codes(date_from, date_to, unposted_only=True)
            for code in candidates:
                latest = await uow.audit.latest_for_order(code)
                if latest is not None and latest.status is AuditStatus.ERROR:
                    codes.append(code)

        logger.info(f"[BATCH] Retrying {len(codes)} failed order(s) of {len(candidates)} unposted")
        return await self.post_orders(codes)

    async def _prefetch(self, codes: List[str]) -> Optional[LookupCache]:
        if self.prefetcher is None:
            return None

        materials, branches, warehouses = set(), set(), set()
        async with create_uow(self._session_factory) as uow:
            for code in codes:
                sales = await uow.sales.find_by_order(code)
                movements = await uow.movements.find_by_order(code)
                materials.update(s.resolved_material_code for s in sales)
                branches.update(s.branch_code for s in sales)
                warehouses.update(order_warehouse_codes(sales, movements))

        return await self.prefetcher.prefetch(materials, branches, warehouses, codes)
