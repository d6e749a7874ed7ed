"""
Store configuration.

Settings for the sales / movements / audit store plus engine and session
factory construction. The store only needs SQLite (aiosqlite) locally; any
async SQLAlchemy URL works in deployments.
"""
from typing import Optional
import logging

from pydantic_settings import BaseSettings
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)


logger = logging.getLogger(__name__)


class DatabaseSettings(BaseSettings):
    """Store settings, read from DB_* environment variables or .env."""

    database_url: str = "sqlite+aiosqlite:///./reconciliation.db"

    # Server databases only; SQLite ignores pooling
    pool_size: int = 5
    max_overflow: int = 10
    pool_recycle: int = 1800

    echo_sql: bool = False

    model_config = {
        "env_file": ".env",
        "env_prefix": "DB_",
        "extra": "ignore",
    }

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


def create_engine(settings: Optional[DatabaseSettings] = None) -> AsyncEngine:
    """
    Create the async engine for the store.

    Args:
        settings: Defaults to DatabaseSettings() read from the environment

    Returns:
        Async engine; pooled unless the URL is SQLite
    """
    settings = settings or DatabaseSettings()
    logger.info(f"[INGEST] Opening store: {settings.database_url}")

    if settings.is_sqlite:
        return create_async_engine(settings.database_url, echo=settings.echo_sql)

    return create_async_engine(
        settings.database_url,
        echo=settings.echo_sql,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_recycle=settings.pool_recycle,
        pool_pre_ping=True,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: repositories map rows to frozen value objects after commit
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_database(engine: AsyncEngine) -> None:
    """Create the sales, movements and audit tables when missing."""
    from core.infrastructure.database.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("[INGEST] Store tables ready")
