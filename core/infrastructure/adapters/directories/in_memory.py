"""
In-memory collaborator directories.

Dictionary-backed implementations of the lookup interfaces, for local runs,
tests and deployments that load reference data up front.
"""
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Set

from core.application.interfaces import (
    IBranchService,
    ICatalogService,
    IOrderFeeDirectory,
    IPaymentMethodDirectory,
    IPromotionDirectory,
    IWarehouseCodeMapper,
)
from core.domain.value_objects import (
    BranchInfo,
    PaymentMethodInfo,
    PaymentRecord,
    ProductInfo,
    PromotionInfo,
)


logger = logging.getLogger(__name__)


class InMemoryCatalog(ICatalogService):
    def __init__(self, products: Optional[Mapping[str, ProductInfo]] = None):
        self._products: Dict[str, ProductInfo] = dict(products or {})

    def add(self, product: ProductInfo) -> None:
        self._products[product.material_code] = product

    async def get_material(self, code: str) -> Optional[ProductInfo]:
        return self._products.get(code)


class InMemoryBranchService(IBranchService):
    def __init__(self, branches: Optional[Mapping[str, BranchInfo]] = None):
        self._branches: Dict[str, BranchInfo] = dict(branches or {})

    async def get_branch(self, code: str) -> Optional[BranchInfo]:
        return self._branches.get(code)


class InMemoryPromotionDirectory(IPromotionDirectory):
    """
    Known promotion codes.

    Codes are matched case-insensitively.
    """

    def __init__(self, promotions: Optional[Iterable[PromotionInfo]] = None):
        self._promotions: Dict[str, PromotionInfo] = {}
        for promotion in promotions or ():
            self.add(promotion)

    def add(self, promotion: PromotionInfo) -> None:
        self._promotions[promotion.code.upper()] = promotion

    async def get_promotion(self, code: str) -> Optional[PromotionInfo]:
        promotion = self._promotions.get((code or "").upper())
        if promotion is None:
            logger.info(f"[DIRECTORY] Promotion not found: {code}")
        return promotion


class InMemoryPaymentMethodDirectory(IPaymentMethodDirectory):
    """Payment records per order plus the document type of each payment method."""

    def __init__(
        self,
        payments: Optional[Iterable[PaymentRecord]] = None,
        methods: Optional[Iterable[PaymentMethodInfo]] = None,
    ):
        self._payments: Dict[str, List[PaymentRecord]] = {}
        self._methods: Dict[str, PaymentMethodInfo] = {}
        for payment in payments or ():
            self.add_payment(payment)
        for method in methods or ():
            self._methods[method.code.upper()] = method

    def add_payment(self, payment: PaymentRecord) -> None:
        self._payments.setdefault(payment.order_code, []).append(payment)

    async def get_payments(self, order_code: str) -> List[PaymentRecord]:
        return list(self._payments.get(order_code, []))

    async def get_payment_method(self, code: str) -> Optional[PaymentMethodInfo]:
        return self._methods.get((code or "").upper())


class InMemoryWarehouseCodeMapper(IWarehouseCodeMapper):
    def __init__(self, mapping: Optional[Mapping[str, str]] = None):
        self._mapping: Dict[str, str] = dict(mapping or {})

    async def get_mapping(self, codes: Iterable[str]) -> Dict[str, str]:
        return {code: self._mapping[code] for code in codes if code in self._mapping}


class InMemoryOrderFeeDirectory(IOrderFeeDirectory):
    def __init__(self, order_codes: Optional[Iterable[str]] = None):
        self._order_codes: Set[str] = set(order_codes or ())

    async def get_marketplace_orders(self, order_codes: Iterable[str]) -> Set[str]:
        return {code for code in order_codes if code in self._order_codes}
