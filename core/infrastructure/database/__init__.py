"""Database layer: settings, engine, ORM models, repositories and unit of work."""

from .config import DatabaseSettings, create_engine, create_session_factory, init_database
from .unit_of_work import UnitOfWork, create_uow

__all__ = [
    "DatabaseSettings",
    "UnitOfWork",
    "create_engine",
    "create_session_factory",
    "create_uow",
    "init_database",
]
