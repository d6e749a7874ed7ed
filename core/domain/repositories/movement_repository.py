"""Repository interface for warehouse movements."""

from abc import ABC, abstractmethod
from typing import List

from ..value_objects import WarehouseMovement


class MovementRepository(ABC):
    """Read side of the warehouse movement feed."""

    @abstractmethod
    async def find_by_order(self, order_code: str) -> List[WarehouseMovement]:
        """Movements recorded against a sales order."""
        pass

    @abstractmethod
    async def add(self, movement: WarehouseMovement) -> bool:
        """Store a movement unless its composite key is already known.

        Returns:
            True if inserted, False if it already existed
        """
        pass
