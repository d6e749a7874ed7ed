"""Repository interface for canonical sales."""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from ..value_objects import CanonicalSale


class SaleRepository(ABC):
    """Abstract store of deduplicated sale lines."""

    @abstractmethod
    async def get_by_natural_key(self, natural_key: str) -> Optional[CanonicalSale]:
        """Retrieve a sale by its natural key.

        Args:
            natural_key: NaturalKey value

        Returns:
            CanonicalSale if found, None otherwise
        """
        pass

    @abstractmethod
    async def add(self, sale: CanonicalSale) -> None:
        """Insert a new sale. The natural key must not exist yet."""
        pass

    @abstractmethod
    async def update_descriptive(self, sale: CanonicalSale) -> None:
        """Overwrite descriptive fields of an existing sale.

        Key fields and the posted flag are never written.
        """
        pass

    @abstractmethod
    async def find_by_order(self, order_code: str) -> List[CanonicalSale]:
        """All lines of one order, in position order."""
        pass

    @abstractmethod
    async def find_order_codes(
        self,
        date_from: date,
        date_to: date,
        unposted_only: bool = False,
    ) -> List[str]:
        """Distinct order codes with an order date in [date_from, date_to].

        Args:
            date_from: First order date, inclusive
            date_to: Last order date, inclusive
            unposted_only: Only orders with at least one unposted line

        Returns:
            Sorted order codes
        """
        pass

    @abstractmethod
    async def mark_posted(self, order_code: str) -> int:
        """Flag every line of an order as posted.

        Returns:
            Number of lines updated
        """
        pass
