"""
SQLAlchemy Audit Repository Implementation.

Audit records are written through their own session and committed
immediately, so a failed posting leaves its trail even when the caller's
transaction is rolled back.
"""
from typing import Any, List, Optional
import json
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.domain.enums import AuditStatus
from core.domain.repositories import AuditRepository
from core.domain.value_objects import AuditRecord
from core.infrastructure.database.models import AuditRecordModel


logger = logging.getLogger(__name__)


def _jsonable(payload: Any) -> Any:
    """Round-trip through json so Decimals and dates are stored as strings."""
    if payload is None:
        return None
    return json.loads(json.dumps(payload, default=str))


class SQLAlchemyAuditRepository(AuditRepository):

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def append(self, record: AuditRecord) -> None:
        async with self._session_factory() as session:
            session.add(
                AuditRecordModel(
                    order_code=record.order_code,
                    step=record.step,
                    status=record.status.value,
                    request_payload=_jsonable(record.request_payload),
                    response_payload=_jsonable(record.response_payload),
                    error_message=record.error_message,
                    timestamp=record.timestamp,
                )
            )
            await session.commit()
        logger.debug(f"[AUDIT] {record.order_code} {record.step} {record.status.value}")

    async def find_by_order(self, order_code: str) -> List[AuditRecord]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(AuditRecordModel)
                .where(AuditRecordModel.order_code == order_code)
                .order_by(AuditRecordModel.timestamp, AuditRecordModel.id)
            )
            return [self._to_domain(model) for model in result.scalars().all()]

    async def latest_for_order(self, order_code: str) -> Optional[AuditRecord]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(AuditRecordModel)
                .where(AuditRecordModel.order_code == order_code)
                .order_by(AuditRecordModel.timestamp.desc(), AuditRecordModel.id.desc())
                .limit(1)
            )
            model = result.scalar_one_or_none()
            return self._to_domain(model) if model is not None else None

    @staticmethod
    def _to_domain(model: AuditRecordModel) -> AuditRecord:
        return AuditRecord(
            order_code=model.order_code,
            step=model.step,
            status=AuditStatus(model.status),
            request_payload=model.request_payload,
            response_payload=model.response_payload,
            error_message=model.error_message,
            timestamp=model.timestamp,
        )
