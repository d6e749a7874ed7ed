"""Repository interfaces."""

from .audit_repository import AuditRepository
from .movement_repository import MovementRepository
from .sale_repository import SaleRepository

__all__ = ["AuditRepository", "MovementRepository", "SaleRepository"]
