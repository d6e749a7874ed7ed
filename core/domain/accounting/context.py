"""Normalized inputs shared by the resolver sub-functions."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from core.domain.enums import OrderCategory, ProductKind
from core.domain.value_objects import CanonicalSale, PriceResolution, ProductInfo
from .rule_tables import RuleTables

_CENT = Decimal("0.01")


@dataclass(frozen=True)
class LineContext:
    """
    Everything a resolution rule may look at for one posting line.

    Attributes:
        sale: The (possibly exploded) sale line
        product: Catalog entry, None when the catalog had no match
        category: Classified order type
        brand: Lower-cased brand name
        company_code: Ledger company code of the branch (falls back to branch code)
        is_wholesale: Wholesale accounting branch
        is_marketplace: Explicit marketplace flag or companion fee record
        price: Reconciled price and subtotal
        tables: Rule tables in effect
    """
    sale: CanonicalSale
    product: Optional[ProductInfo]
    category: OrderCategory
    brand: str
    company_code: str
    is_wholesale: bool
    is_marketplace: bool
    price: PriceResolution
    tables: RuleTables

    @property
    def product_kind(self) -> Optional[ProductKind]:
        kind = ProductKind.parse(self.sale.product_type)
        if kind is None and self.product is not None:
            kind = ProductKind.parse(self.product.product_type)
        return kind

    @property
    def product_group(self) -> str:
        return (self.product.product_group if self.product else "").upper()

    @property
    def is_ecode(self) -> bool:
        return bool(self.product and self.product.is_ecode)

    @property
    def is_point_exchange(self) -> bool:
        return self.category is OrderCategory.POINT_EXCHANGE

    @property
    def is_gift_line(self) -> bool:
        """Zero price and zero subtotal. Point-exchange lines are never gift lines."""
        if self.is_point_exchange:
            return False
        return abs(self.price.unit_price) < _CENT and abs(self.price.subtotal) < _CENT

    @property
    def is_free_gift(self) -> bool:
        return self.product_group == "GIFT" or self.is_gift_line

    @property
    def wholesale_category(self) -> str:
        return self.tables.wholesale_category(self.product_group)
