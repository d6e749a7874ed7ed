"""
Unit of Work Pattern Implementation.

Manages database transactions and repository lifecycle.
"""
from typing import Optional
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.infrastructure.database.repositories import (
    SQLAlchemyAuditRepository,
    SQLAlchemyMovementRepository,
    SQLAlchemySaleRepository,
)


logger = logging.getLogger(__name__)


class UnitOfWork:
    """
    Unit of Work pattern implementation.

    Sales and movements share the unit's session and are committed
    together. The audit repository writes through its own sessions and is
    durable on every append.

    Usage:
        async with create_uow(session_factory) as uow:
            existing = await uow.sales.get_by_natural_key(key)
            await uow.sales.add(sale)
            await uow.commit()
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """
        Initialize Unit of Work.

        Args:
            session_factory: SQLAlchemy async session factory
        """
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None
        self._sales: Optional[SQLAlchemySaleRepository] = None
        self._movements: Optional[SQLAlchemyMovementRepository] = None
        self._audit: Optional[SQLAlchemyAuditRepository] = None

    async def __aenter__(self) -> "UnitOfWork":
        self._session = self._session_factory()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Rolls back if an exception occurred, then closes the session."""
        if exc_type is not None:
            logger.error(f"Transaction failed: {exc_val}")
            await self.rollback()
        await self._session.close()
        self._session = None
        self._sales = None
        self._movements = None

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("UnitOfWork not initialized. Use async context manager.")
        return self._session

    @property
    def sales(self) -> SQLAlchemySaleRepository:
        if self._sales is None:
            self._sales = SQLAlchemySaleRepository(self.session)
        return self._sales

    @property
    def movements(self) -> SQLAlchemyMovementRepository:
        if self._movements is None:
            self._movements = SQLAlchemyMovementRepository(self.session)
        return self._movements

    @property
    def audit(self) -> SQLAlchemyAuditRepository:
        if self._audit is None:
            self._audit = SQLAlchemyAuditRepository(self._session_factory)
        return self._audit

    async def commit(self) -> None:
        try:
            await self.session.commit()
            logger.debug("✅ Transaction committed")
        except Exception as e:
            logger.error(f"❌ Commit failed: {e}")
            await self.rollback()
            raise

    async def rollback(self) -> None:
        await self.session.rollback()
        logger.warning("Transaction rolled back")


def create_uow(session_factory: async_sessionmaker[AsyncSession]) -> UnitOfWork:
    """Create a new Unit of Work instance."""
    return UnitOfWork(session_factory)
