"""Collaborator directory adapters."""

from .in_memory import (
    InMemoryBranchService,
    InMemoryCatalog,
    InMemoryOrderFeeDirectory,
    InMemoryPaymentMethodDirectory,
    InMemoryPromotionDirectory,
    InMemoryWarehouseCodeMapper,
)

__all__ = [
    "InMemoryBranchService",
    "InMemoryCatalog",
    "InMemoryOrderFeeDirectory",
    "InMemoryPaymentMethodDirectory",
    "InMemoryPromotionDirectory",
    "InMemoryWarehouseCodeMapper",
]
