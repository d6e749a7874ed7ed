"""SQLAlchemy repository implementations."""

from .audit_repository import SQLAlchemyAuditRepository
from .movement_repository import SQLAlchemyMovementRepository
from .sale_repository import SQLAlchemySaleRepository

__all__ = [
    "SQLAlchemyAuditRepository",
    "SQLAlchemyMovementRepository",
    "SQLAlchemySaleRepository",
]
