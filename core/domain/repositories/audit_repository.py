"""Repository interface for the posting audit trail."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..value_objects import AuditRecord


class AuditRepository(ABC):
    """Append-only log of external ledger calls."""

    @abstractmethod
    async def append(self, record: AuditRecord) -> None:
        """Persist one audit record.

        Must be durable on return, independently of any surrounding
        unit of work, so failed calls remain visible.
        """
        pass

    @abstractmethod
    async def find_by_order(self, order_code: str) -> List[AuditRecord]:
        """Audit records of an order, oldest first."""
        pass

    @abstractmethod
    async def latest_for_order(self, order_code: str) -> Optional[AuditRecord]:
        """Most recent audit record of an order, if any."""
        pass
