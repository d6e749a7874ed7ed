"""
Account triple resolution.

Each rule is a small pure function returning a complete AccountTriple or
None when it does not apply. Retail rules are tried in order and the first
match wins; when none matches, the values already attached to the sale are
passed through unchanged (upstream systems sometimes pre-compute them).
"""
from typing import Callable, Optional

from core.domain.enums import OrderCategory, ProductKind
from core.domain.value_objects import AccountTriple
from .context import LineContext

AccountRule = Callable[[LineContext], Optional[AccountTriple]]


def resolve_accounts(ctx: LineContext) -> AccountTriple:
    if ctx.is_wholesale:
        return wholesale_accounts(ctx)
    for rule in RETAIL_ACCOUNT_RULES:
        triple = rule(ctx)
        if triple is not None:
            return triple
    return passthrough_accounts(ctx)


def passthrough_accounts(ctx: LineContext) -> AccountTriple:
    sale = ctx.sale
    return AccountTriple(
        discount_account=sale.discount_account,
        expense_account=sale.expense_account,
        fee_code=sale.fee_code,
    )


def wholesale_accounts(ctx: LineContext) -> AccountTriple:
    key = (ctx.wholesale_category, ctx.is_ecode)
    triple = ctx.tables.wholesale_accounts.get(key)
    return triple if triple is not None else passthrough_accounts(ctx)


def _exchange(ctx: LineContext) -> Optional[AccountTriple]:
    if ctx.category.is_exchange:
        return ctx.tables.exchange_accounts
    return None


def _birthday(ctx: LineContext) -> Optional[AccountTriple]:
    if ctx.category is OrderCategory.BIRTHDAY_GIFT:
        return ctx.tables.birthday_accounts
    return None


def _gift_with_promotion(ctx: LineContext) -> Optional[AccountTriple]:
    if ctx.is_gift_line and (ctx.sale.promo_code or "").strip():
        gift = ctx.tables.gift_promotion_accounts
        return AccountTriple(
            discount_account=ctx.sale.discount_account,
            expense_account=gift.expense_account,
            fee_code=gift.fee_code,
        )
    return None


def _with_discount_account(ctx: LineContext, account: Optional[str]) -> Optional[AccountTriple]:
    if not account:
        return None
    return AccountTriple(
        discount_account=account,
        expense_account=ctx.sale.expense_account,
        fee_code=ctx.sale.fee_code,
    )


def _kind_key(ctx: LineContext) -> str:
    kind = ctx.product_kind
    return kind.value if kind in (ProductKind.GOODS, ProductKind.SERVICE) else ""


def _vip_discount(ctx: LineContext) -> Optional[AccountTriple]:
    if ctx.sale.grade_disc_amt > 0:
        return _with_discount_account(ctx, ctx.tables.vip_discount_accounts.get(_kind_key(ctx)))
    return None


def _voucher_payment(ctx: LineContext) -> Optional[AccountTriple]:
    if ctx.sale.voucher_amount <= 0:
        return None
    if ctx.is_free_gift:
        return _with_discount_account(ctx, ctx.tables.voucher_gift_discount_account)
    return _with_discount_account(ctx, ctx.tables.voucher_discount_accounts.get(_kind_key(ctx)))


def _purchase_discount(ctx: LineContext) -> Optional[AccountTriple]:
    if ctx.sale.other_disc_amt > 0:
        return _with_discount_account(ctx, ctx.tables.purchase_discount_accounts.get(_kind_key(ctx)))
    return None


def _promotion_code(ctx: LineContext) -> Optional[AccountTriple]:
    if (ctx.sale.promo_code or "").strip():
        return _with_discount_account(ctx, ctx.tables.purchase_discount_accounts.get(_kind_key(ctx)))
    return None


RETAIL_ACCOUNT_RULES: tuple[AccountRule, ...] = (
    _exchange,
    _birthday,
    _gift_with_promotion,
    _vip_discount,
    _voucher_payment,
    _purchase_discount,
    _promotion_code,
)
