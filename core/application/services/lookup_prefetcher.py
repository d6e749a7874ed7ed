"""
Lookup prefetch.

Collaborator lookups (catalog, branch metadata, warehouse mapping) are
fetched once per batch for every distinct key, with a bounded number of
concurrent requests and a short timeout. Every lookup is best effort: a
timeout or error leaves the key missing and is logged.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Iterable, Optional, Set, TypeVar
import logging

from core.application.interfaces import (
    IBranchService,
    ICatalogService,
    IOrderFeeDirectory,
    IWarehouseCodeMapper,
)
from core.domain.value_objects import BranchInfo, ProductInfo


logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class LookupCache:
    """Per-batch lookup results. Built fresh for every batch run."""

    products: Dict[str, ProductInfo] = field(default_factory=dict)
    branches: Dict[str, BranchInfo] = field(default_factory=dict)
    warehouse_map: Dict[str, str] = field(default_factory=dict)
    marketplace_order_codes: Set[str] = field(default_factory=set)


class LookupPrefetcher:
    """
    Usage:
        prefetcher = LookupPrefetcher(catalog, branches, warehouse_mapper)
        cache = await prefetcher.prefetch(material_codes, branch_codes, warehouse_codes)
    """

    def __init__(
        self,
        catalog: ICatalogService,
        branches: IBranchService,
        warehouse_mapper: IWarehouseCodeMapper,
        fee_directory: Optional[IOrderFeeDirectory] = None,
        concurrency: int = 5,
        timeout_seconds: float = 5.0,
    ):
        self.catalog = catalog
        self.branches = branches
        self.warehouse_mapper = warehouse_mapper
        self.fee_directory = fee_directory
        self.concurrency = concurrency
        self.timeout_seconds = timeout_seconds

    async def prefetch(
        self,
        material_codes: Iterable[str],
        branch_codes: Iterable[str],
        warehouse_codes: Iterable[str] = (),
        order_codes: Iterable[str] = (),
    ) -> LookupCache:
        semaphore = asyncio.Semaphore(self.concurrency)
        materials = sorted({code for code in material_codes if code})
        branch_keys = sorted({code for code in branch_codes if code})

        products = await self._fetch_each(semaphore, "material", materials, self.catalog.get_material)
        branches = await self._fetch_each(semaphore, "branch", branch_keys, self.branches.get_branch)

        warehouses = sorted({code for code in warehouse_codes if code})
        warehouse_map = {}
        if warehouses:
            warehouse_map = await self._best_effort(
                semaphore, "warehouse mapping", lambda: self.warehouse_mapper.get_mapping(warehouses)
            ) or {}

        marketplace_orders: Set[str] = set()
        orders = sorted(set(order_codes))
        if self.fee_directory is not None and orders:
            marketplace_orders = await self._best_effort(
                semaphore, "fee records", lambda: self.fee_directory.get_marketplace_orders(orders)
            ) or set()

        logger.info(
            f"[BATCH] Prefetched {len(products)}/{len(materials)} materials, "
            f"{len(branches)}/{len(branch_keys)} branches, "
            f"{len(warehouse_map)} warehouse mappings"
        )
        return LookupCache(
            products=products,
            branches=branches,
            warehouse_map=dict(warehouse_map),
            marketplace_order_codes=set(marketplace_orders),
        )

    async def _fetch_each(
        self,
        semaphore: asyncio.Semaphore,
        kind: str,
        codes: list[str],
        fetch: Callable[[str], Awaitable[Optional[T]]],
    ) -> Dict[str, T]:
        results = await asyncio.gather(
            *(self._best_effort(semaphore, f"{kind} {code}", lambda code=code: fetch(code)) for code in codes)
        )
        return {code: value for code, value in zip(codes, results) if value is not None}

    async def _best_effort(
        self,
        semaphore: asyncio.Semaphore,
        label: str,
        call: Callable[[], Awaitable[T]],
    ) -> Optional[T]:
        async with semaphore:
            try:
                return await asyncio.wait_for(call(), timeout=self.timeout_seconds)
            except asyncio.TimeoutError:
                logger.warning(f"[BATCH] Lookup {label} timed out after {self.timeout_seconds}s")
            except Exception as e:
                logger.warning(f"[BATCH] Lookup {label} failed: {e}")
        return None
