"""Application layer interfaces."""
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Set

from core.domain.value_objects import (
    BranchInfo,
    PaymentMethodInfo,
    PaymentRecord,
    ProductInfo,
    PromotionInfo,
)


class ILedgerClient(ABC):
    """
    Interface for external ledger calls.

    Implementations return the decoded JSON body of the response, whatever
    its shape (array or object). Deciding success from that body is the
    caller's job.
    """

    @abstractmethod
    async def call(self, endpoint: str, payload: Dict[str, Any]) -> Any:
        """
        POST a payload to a ledger endpoint.

        Args:
            endpoint: Endpoint name, e.g. "salesInvoice"
            payload: JSON-serializable request body

        Returns:
            Decoded response body

        Raises:
            LedgerCallError: If no usable response was received
        """
        pass

    async def close(self) -> None:
        """Release transport resources. Default: nothing to release."""
        pass


class ICatalogService(ABC):
    """Material catalog lookup."""

    @abstractmethod
    async def get_material(self, code: str) -> Optional[ProductInfo]:
        """
        Get catalog entry for a material code.

        Returns:
            ProductInfo if found, None otherwise
        """
        pass

    async def get_materials(self, codes: Iterable[str]) -> Dict[str, ProductInfo]:
        """Bulk lookup. Default implementation calls get_material per code."""
        found: Dict[str, ProductInfo] = {}
        for code in codes:
            info = await self.get_material(code)
            if info is not None:
                found[code] = info
        return found


class IBranchService(ABC):
    """Branch metadata lookup (ledger company and branch codes)."""

    @abstractmethod
    async def get_branch(self, code: str) -> Optional[BranchInfo]:
        pass


class IPromotionDirectory(ABC):
    """Promotion codes known to the ledger."""

    @abstractmethod
    async def get_promotion(self, code: str) -> Optional[PromotionInfo]:
        """
        Get a promotion entry.

        Returns:
            PromotionInfo if the code is known, None otherwise
        """
        pass


class IPaymentMethodDirectory(ABC):
    """Payment records of orders and the declared document type of each method."""

    @abstractmethod
    async def get_payments(self, order_code: str) -> List[PaymentRecord]:
        pass

    @abstractmethod
    async def get_payment_method(self, code: str) -> Optional[PaymentMethodInfo]:
        pass


class IWarehouseCodeMapper(ABC):
    """Translation of channel warehouse codes to ledger warehouse codes."""

    @abstractmethod
    async def get_mapping(self, codes: Iterable[str]) -> Dict[str, str]:
        """
        Map warehouse codes.

        Returns:
            {channel code: ledger code} for the codes that have a mapping
        """
        pass


class IOrderFeeDirectory(ABC):
    """Marketplace fee records. An order with a fee record is a marketplace order."""

    @abstractmethod
    async def get_marketplace_orders(self, order_codes: Iterable[str]) -> Set[str]:
        """Subset of order codes that have a companion fee record."""
        pass


__all__ = [
    "IBranchService",
    "ICatalogService",
    "ILedgerClient",
    "IOrderFeeDirectory",
    "IPaymentMethodDirectory",
    "IPromotionDirectory",
    "IWarehouseCodeMapper",
]
