"""
Dedup Normalizer.

Turns raw sale events into CanonicalSale rows keyed by their natural key,
so re-running ingestion for the same period never creates duplicate lines.
"""
from collections import Counter
from typing import Any, Iterable, Mapping, Union
import logging

from pydantic import ValidationError as SchemaError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.application.dtos import IngestSummary, RawMovement, RawSaleEvent
from core.domain.enums import IngestOutcome
from core.domain.exceptions import MalformedSaleEventError
from core.domain.repositories import SaleRepository
from core.domain.value_objects import CanonicalSale, WarehouseMovement
from core.infrastructure.database import create_uow


logger = logging.getLogger(__name__)

RawEventInput = Union[RawSaleEvent, Mapping[str, Any]]


class DedupNormalizer:
    """
    Idempotent ingestion of sale events and warehouse movements.

    Usage:
        normalizer = DedupNormalizer(session_factory)
        summary = await normalizer.ingest_batch(events)
        # summary.material_codes / summary.branch_codes feed the lookup prefetch
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def ingest(self, raw: RawEventInput, position_index: int = 0) -> IngestOutcome:
        """
        Ingest a single raw sale event in its own transaction.

        A malformed event (no order code or item code) is logged and
        reported as SKIPPED without touching the store.
        """
        try:
            sale = _parse(raw).to_canonical(position_index)
        except (MalformedSaleEventError, SchemaError) as exc:
            logger.warning(f"[INGEST] Skipping malformed event: {exc}")
            return IngestOutcome.SKIPPED
        async with create_uow(self._session_factory) as uow:
            outcome = await self._upsert(uow.sales, sale)
            await uow.commit()
        return outcome

    async def ingest_batch(self, events: Iterable[RawEventInput]) -> IngestSummary:
        """
        Ingest a batch of raw sale events in one transaction.

        The position index of an event without an explicit one is the number
        of earlier events of the same order in this batch, so lines of one
        order that are otherwise identical keep distinct keys while a re-run
        of the same batch reproduces the same keys.

        Malformed events are counted and skipped; they never abort the batch.
        """
        summary = IngestSummary()
        seen_per_order: Counter = Counter()

        async with create_uow(self._session_factory) as uow:
            for raw in events:
                try:
                    event = _parse(raw)
                    position = seen_per_order[event.order_code]
                    sale = event.to_canonical(position)
                except (MalformedSaleEventError, SchemaError) as exc:
                    summary.malformed += 1
                    logger.warning(f"[INGEST] Skipping malformed event: {exc}")
                    continue

                seen_per_order[sale.order_code] += 1
                outcome = await self._upsert(uow.sales, sale)
                if outcome is IngestOutcome.CREATED:
                    summary.created += 1
                elif outcome is IngestOutcome.UPDATED:
                    summary.updated += 1
                else:
                    summary.skipped += 1

                summary.material_codes.add(sale.resolved_material_code)
                if sale.branch_code:
                    summary.branch_codes.add(sale.branch_code)

            await uow.commit()

        logger.info(
            f"[INGEST] Batch done: {summary.created} created, {summary.updated} updated, "
            f"{summary.skipped} unchanged, {summary.malformed} malformed"
        )
        return summary

    async def ingest_movements(self, movements: Iterable[Union[RawMovement, Mapping[str, Any]]]) -> int:
        """
        Store warehouse movements, ignoring ones already stored.

        Returns:
            Number of newly stored movements
        """
        stored = 0
        async with create_uow(self._session_factory) as uow:
            for raw in movements:
                try:
                    movement = _parse_movement(raw)
                except SchemaError as exc:
                    logger.warning(f"[INGEST] Skipping malformed movement: {exc}")
                    continue
                if await uow.movements.add(movement):
                    stored += 1
            await uow.commit()

        logger.info(f"[INGEST] Movements stored: {stored}")
        return stored

    async def _upsert(self, sales: SaleRepository, sale: CanonicalSale) -> IngestOutcome:
        existing = await sales.get_by_natural_key(sale.natural_key)
        if existing is None:
            await sales.add(sale)
            return IngestOutcome.CREATED

        if not existing.descriptive_differs(sale):
            return IngestOutcome.SKIPPED

        await sales.update_descriptive(existing.with_descriptive_fields_from(sale))
        logger.debug(f"[INGEST] Refreshed descriptive fields of {sale.natural_key}")
        return IngestOutcome.UPDATED


def _parse(raw: RawEventInput) -> RawSaleEvent:
    if isinstance(raw, RawSaleEvent):
        return raw
    return RawSaleEvent.model_validate(raw)


def _parse_movement(raw: Union[RawMovement, Mapping[str, Any]]) -> WarehouseMovement:
    if not isinstance(raw, RawMovement):
        raw = RawMovement.model_validate(raw)
    return raw.to_domain()
