"""Tests for batch posting, failure isolation and retry of failed orders."""
import asyncio
from datetime import date

import pytest

from core.application.services.posting_batch_service import PostingBatchService
from core.application.use_cases import PostOrderResponse
from core.bootstrap import build_services
from core.domain.enums import PostingState
from core.infrastructure.database import DatabaseSettings, create_uow
from core.settings import AppSettings, LedgerSettings, PipelineSettings
from tests.mocks.factories import raw_event

NOVEMBER = (date(2025, 11, 1), date(2025, 11, 30))


class ExplodingUseCase:
    """Use case stand-in that raises for one order code."""

    def __init__(self, failing_code: str):
        self.failing_code = failing_code
        self.requests = []

    async def execute(self, request):
        self.requests.append(request)
        if request.order_code == self.failing_code:
            raise RuntimeError("boom")
        return PostOrderResponse(order_code=request.order_code, success=True, state=PostingState.DONE)


class TrackingUseCase:
    """Counts how many orders are being posted at the same time."""

    def __init__(self, inner):
        self.inner = inner
        self.in_flight = 0
        self.peak = 0

    async def execute(self, request):
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(0)
            return await self.inner.execute(request)
        finally:
            self.in_flight -= 1


async def _posted(services, order_code):
    async with create_uow(services.session_factory) as uow:
        sales = await uow.sales.find_by_order(order_code)
    return bool(sales) and all(sale.posted for sale in sales)


@pytest.mark.asyncio
async def test_batch_summary_isolates_failures(services):
    await services.normalizer.ingest_batch(
        [
            raw_event(docCode="SO001"),
            raw_event(docCode="SO002", branchCode="NOCO"),
            raw_event(docCode="SO003"),
        ]
    )

    summary = await services.batch.post_date_range(*NOVEMBER)

    assert summary.total == 3
    assert summary.success == 2
    assert summary.failed == 1
    assert [e.order_code for e in summary.errors] == ["SO002"]
    assert summary.errors[0].furthest_state is PostingState.PENDING
    assert summary.execution_time_seconds is not None
    assert await _posted(services, "SO001")
    assert not await _posted(services, "SO002")


@pytest.mark.asyncio
async def test_concurrent_batch_keeps_orders_isolated(tmp_path, collaborators, ledger_client):
    settings = AppSettings(
        ledger=LedgerSettings(base_url="http://ledger.test/api"),
        pipeline=PipelineSettings(concurrency=3, max_attempts=1, backoff_seconds=0.0),
        database=DatabaseSettings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'store.db'}"),
    )
    services = build_services(collaborators, settings=settings, ledger_client=ledger_client)
    try:
        await services.prepare_store()
        await services.normalizer.ingest_batch(
            [
                raw_event(docCode="SO001"),
                raw_event(docCode="SO002", branchCode="NOCO"),
                raw_event(docCode="SO003", qty=2),
                raw_event(docCode="SO004", branchCode="NOCO"),
                raw_event(docCode="SO005", qty=3),
            ]
        )
        tracking = TrackingUseCase(services.post_order)
        batch = PostingBatchService(
            tracking, services.session_factory, services.batch.prefetcher, concurrency=3
        )

        summary = await batch.post_date_range(*NOVEMBER)

        posted = {code: await _posted(services, code) for code in ("SO001", "SO002", "SO003", "SO004", "SO005")}
    finally:
        await services.close()

    assert tracking.peak == 3
    assert summary.total == 5
    assert summary.success == 3
    assert summary.failed == 2
    assert [e.order_code for e in summary.errors] == ["SO002", "SO004"]
    assert posted == {"SO001": True, "SO002": False, "SO003": True, "SO004": False, "SO005": True}

    invoices = {payload["so_ct"]: payload for payload in ledger_client.payloads("salesInvoice")}
    assert sorted(invoices) == ["SO001", "SO003", "SO005"]
    assert [len(invoices[code]["detail"]) for code in ("SO001", "SO003", "SO005")] == [1, 1, 1]


@pytest.mark.asyncio
async def test_date_range_skips_posted_orders_and_other_dates(services, ledger_client):
    await services.normalizer.ingest_batch(
        [raw_event(docCode="SO001"), raw_event(docCode="SO009", docDate="2025-12-01")]
    )
    await services.batch.post_date_range(*NOVEMBER)
    calls = len(ledger_client.calls)

    summary = await services.batch.post_date_range(*NOVEMBER)

    assert summary.total == 0
    assert len(ledger_client.calls) == calls
    assert not await _posted(services, "SO009")


@pytest.mark.asyncio
async def test_retry_failed_reruns_only_orders_ending_in_error(services, ledger_client):
    await services.normalizer.ingest_batch(
        [
            raw_event(docCode="SO001"),
            raw_event(docCode="SO002"),
            raw_event(docCode="SO003", docDate="2025-11-20"),
        ]
    )
    ledger_client.script("salesInvoice", {"status": 0, "message": "Lỗi hệ thống"})
    await services.batch.post_orders(["SO002"])
    assert not await _posted(services, "SO002")

    summary = await services.batch.retry_failed(*NOVEMBER)

    # SO001 and SO003 have no audit trail yet, SO002's latest record is an error.
    assert summary.total == 1
    assert summary.success == 1
    assert await _posted(services, "SO002")
    assert not await _posted(services, "SO001")


@pytest.mark.asyncio
async def test_retry_failed_after_validation_error(services):
    await services.normalizer.ingest_batch([raw_event(docCode="SO002", branchCode="NOCO")])
    await services.batch.post_date_range(*NOVEMBER)

    summary = await services.batch.retry_failed(*NOVEMBER)

    assert summary.total == 1
    assert summary.failed == 1
    assert summary.errors[0].error.endswith("missing branch:NOCO -> ledger company code")


@pytest.mark.asyncio
async def test_error_list_is_bounded(services, session_factory):
    await services.normalizer.ingest_batch(
        [raw_event(docCode=f"SO00{i}", branchCode="NOCO") for i in range(3)]
    )
    batch = PostingBatchService(services.post_order, session_factory, concurrency=1, max_error_entries=2)

    summary = await batch.post_date_range(*NOVEMBER)

    assert summary.failed == 3
    assert len(summary.errors) == 2


@pytest.mark.asyncio
async def test_unexpected_exception_fails_only_its_order(session_factory):
    use_case = ExplodingUseCase("BOOM")
    batch = PostingBatchService(use_case, session_factory, concurrency=2)

    summary = await batch.post_orders(["SO001", "BOOM", "SO001", "SO002"])

    assert summary.total == 3
    assert summary.success == 2
    assert summary.failed == 1
    assert summary.errors[0].order_code == "BOOM"
    assert summary.errors[0].error == "boom"
    assert [r.order_code for r in use_case.requests] == ["SO001", "BOOM", "SO002"]


@pytest.mark.asyncio
async def test_empty_batch(session_factory):
    batch = PostingBatchService(ExplodingUseCase("BOOM"), session_factory)

    summary = await batch.post_orders([])

    assert summary.total == 0
    assert summary.errors == []
