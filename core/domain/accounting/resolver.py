"""
Accounting rule resolver.

Composes classification, pricing, promotion codes, account resolution and
bucket assignment into one AccountingResolution per posting line. The
resolver performs no I/O: every collaborator result (catalog entry, branch
company code, payment records) is passed in by the caller.
"""
from typing import Iterable, Optional

from core.domain.enums import OrderCategory, ProductKind
from core.domain.value_objects import AccountingResolution, CanonicalSale, PaymentRecord, ProductInfo
from .accounts import resolve_accounts
from .buckets import assign_buckets
from .context import LineContext
from .order_types import OrderTypeClassifier
from .pricing import resolve_price, resolve_transaction_type
from .promotion_codes import resolve_promotion_codes
from .rule_tables import DEFAULT_RULE_TABLES, RuleTables

GIFT_FLAG = "1"


class AccountingRuleResolver:
    """
    Pure accounting resolver.

    Example:
        resolver = AccountingRuleResolver()
        resolution = resolver.resolve(sale, product=product, company_code="TTM")
        resolution.buckets[3]  # DiscountBucket(code='VIP MP', amount=Decimal('50000'))
    """

    def __init__(
        self,
        tables: RuleTables = DEFAULT_RULE_TABLES,
        classifier: Optional[OrderTypeClassifier] = None,
    ):
        self.tables = tables
        self.classifier = classifier or OrderTypeClassifier()

    def context_for(
        self,
        sale: CanonicalSale,
        product: Optional[ProductInfo] = None,
        order_type_label: Optional[str] = None,
        brand: Optional[str] = None,
        is_wholesale: Optional[bool] = None,
        company_code: Optional[str] = None,
        is_marketplace: bool = False,
    ) -> LineContext:
        label = sale.order_type_label if order_type_label is None else order_type_label
        category = self.classifier.classify(label)
        return LineContext(
            sale=sale,
            product=product,
            category=category,
            brand=(sale.brand if brand is None else brand or "").strip().lower(),
            company_code=(company_code or sale.branch_code or "").strip().upper(),
            is_wholesale=sale.is_wholesale if is_wholesale is None else is_wholesale,
            is_marketplace=is_marketplace or sale.is_marketplace or category is OrderCategory.MARKETPLACE,
            price=resolve_price(sale, category),
            tables=self.tables,
        )

    def resolve(
        self,
        sale: CanonicalSale,
        product: Optional[ProductInfo] = None,
        order_type_label: Optional[str] = None,
        brand: Optional[str] = None,
        is_wholesale: Optional[bool] = None,
        company_code: Optional[str] = None,
        payments: Iterable[PaymentRecord] = (),
        is_marketplace: bool = False,
    ) -> AccountingResolution:
        """
        Resolve the accounting treatment of one posting line.

        Label, brand and wholesale flag default to the values carried by the
        sale. Never raises: unmatched combinations degrade to empty or
        pass-through values.
        """
        ctx = self.context_for(
            sale, product, order_type_label, brand, is_wholesale, company_code, is_marketplace
        )
        promotion = resolve_promotion_codes(ctx)
        kind = ctx.product_kind
        return AccountingResolution(
            category=ctx.category,
            accounts=resolve_accounts(ctx),
            buckets=assign_buckets(ctx, promotion, tuple(payments)),
            promotion=promotion,
            tax_code=self.tables.default_tax_code,
            transaction_type=resolve_transaction_type(
                sale, ctx.category, kind, ctx.price, ctx.is_wholesale, product
            ),
            price=ctx.price,
            is_gift_line=ctx.is_gift_line,
            gift_flag=_gift_flag(ctx, kind),
        )


def _gift_flag(ctx: LineContext, kind: Optional[ProductKind]) -> Optional[str]:
    if not ctx.is_gift_line:
        return None
    if kind is ProductKind.SERVICE or ctx.category is OrderCategory.INVESTMENT:
        return None
    return GIFT_FLAG
