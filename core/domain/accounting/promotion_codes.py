"""
Promotion-code resolution.

Computes the primary promotion code (ma_ck01) and the gift-quantity code
(ma_ctkm_th) of a line, plus the bucket codes that depend on brand or
branch literals (voucher, VIP tier, virtual wallet).
"""
import re
from typing import Optional

from core.domain.enums import OrderCategory
from core.domain.value_objects import PromotionCodes
from ledger_sdk.utils.numbers import is_zero
from .context import LineContext

_TYPE_SUFFIX = re.compile(r"\.(I|S|V)$")

# Gift lines of these categories carry the cut promotion code as gift code
_CUT_GIFT_CATEGORIES = (
    OrderCategory.STANDARD_RETAIL,
    OrderCategory.ACCOUNT_SALE,
    OrderCategory.MARKETPLACE,
)


def cut_promotion_code(code: Optional[str]) -> Optional[str]:
    """Display form of a promotion code: everything before the first '-'."""
    if not code:
        return None
    return code.split("-")[0] or code


def strip_type_suffix(code: str) -> str:
    return _TYPE_SUFFIX.sub("", code)


def rewrite_prefix(code: str, rewrites: tuple[tuple[str, str], ...]) -> tuple[str, bool]:
    """
    Apply the first matching prefix rewrite (case-insensitive).

    Returns:
        (code, pre_derived) where pre_derived is True when a rewrite applied
    """
    for source, target in rewrites:
        if code.upper().startswith(source.upper()):
            return target + code[len(source):], True
    return code, False


def resolve_promotion_codes(ctx: LineContext) -> PromotionCodes:
    sale = ctx.sale
    tables = ctx.tables
    code, pre_derived = rewrite_prefix((sale.promo_code or "").strip(), tables.promotion_prefix_rewrites)
    display = code if pre_derived else cut_promotion_code(code)

    if ctx.is_point_exchange:
        gift_code = tables.point_exchange_gift_codes.get(
            ctx.company_code, tables.point_exchange_default_gift_code
        )
        return PromotionCodes(code01=None, gift_code=gift_code, pre_derived=pre_derived)

    code01 = None
    if ctx.is_wholesale and sale.discount_reason and sale.promo_disc_amt > 0:
        code01 = f"{sale.discount_reason}.{ctx.wholesale_category}"

    if ctx.is_gift_line:
        return PromotionCodes(
            code01=code01,
            gift_code=_gift_code(ctx, display),
            pre_derived=pre_derived,
        )

    if ctx.is_wholesale:
        return PromotionCodes(code01=code01, gift_code=sale.gift_code, pre_derived=pre_derived)

    if ctx.is_marketplace:
        code01 = tables.marketplace_code01_by_brand.get(ctx.brand)

    employee_discount = sale.is_employee and sale.other_disc_amt > 0
    if employee_discount and not ctx.is_marketplace and not code01:
        code01 = tables.employee_discount_code(ctx.company_code, _kind_value(ctx))

    if not code01:
        code01 = display or None

    # Employee discount literals are posted as-is, whichever path produced them
    if code01 and employee_discount and _is_employee_literal(tables, code01):
        return PromotionCodes(code01=code01, gift_code=sale.gift_code, pre_derived=pre_derived)

    kind = ctx.product_kind
    if code01 and kind is not None and not (pre_derived or ctx.is_marketplace):
        if not code01.endswith(kind.suffix):
            code01 = code01 + kind.suffix

    return PromotionCodes(code01=code01, gift_code=sale.gift_code, pre_derived=pre_derived)


def _kind_value(ctx: LineContext) -> Optional[str]:
    kind = ctx.product_kind
    return kind.value if kind is not None else None


def _is_employee_literal(tables, code: str) -> bool:
    return tables.is_employee_discount_code(code) or code.endswith(".CK521")


def _gift_code(ctx: LineContext, display: Optional[str]) -> Optional[str]:
    tables = ctx.tables
    if ctx.category is OrderCategory.INVESTMENT:
        return tables.investment_gift_code
    if ctx.category is OrderCategory.DEALER_WHOLESALE:
        return tables.dealer_gift_codes.get(ctx.wholesale_category, tables.dealer_default_gift_code)
    if ctx.category in _CUT_GIFT_CATEGORIES and display:
        return strip_type_suffix(display)
    return ctx.sale.gift_code


def resolve_voucher_code(ctx: LineContext) -> Optional[str]:
    """Code of bucket 5 (voucher payment), None when no label applies."""
    if ctx.is_wholesale:
        return None
    sale = ctx.sale
    tables = ctx.tables

    if sale.is_employee and ctx.company_code in tables.employee_voucher_companies:
        return tables.employee_voucher_code

    if sale.customer_source.strip().lower() in tables.marketplace_customer_sources:
        return tables.marketplace_voucher_by_brand.get(ctx.brand, tables.marketplace_voucher_label)

    if is_zero(sale.revenue) and is_zero(sale.line_total or sale.subtotal):
        return None

    codes = tables.brand_voucher_codes.get(ctx.brand)
    kind = ctx.product_kind
    if not codes or kind is None:
        return tables.default_voucher_code
    if ctx.is_free_gift and f"{kind.value}:gift" in codes:
        return codes[f"{kind.value}:gift"]
    return codes.get(kind.value, tables.default_voucher_code)


def resolve_vip_code(ctx: LineContext) -> Optional[str]:
    """Code of bucket 3 (VIP-tier discount)."""
    sale = ctx.sale
    tables = ctx.tables
    if sale.grade_disc_amt <= 0:
        return sale.discount_codes.get(3)

    group = ctx.product_group
    if ctx.brand == "f3":
        return tables.f3_vip_codes.get(group, tables.f3_vip_codes["*"])
    if group == "DIVU":
        return tables.vip_service_code
    if group == "VOUC":
        return tables.vip_voucher_code

    product = ctx.product
    material = ((product.material_code if product else None) or sale.material_code or "").upper()
    untracked_serial = product is not None and not product.track_inventory and product.track_serial
    if material.startswith("E.") or "VC" in material or "VC" in sale.item_code.upper() or untracked_serial:
        return tables.vip_voucher_code
    return tables.vip_goods_code


def resolve_wallet_label(ctx: LineContext) -> Optional[str]:
    """
    Virtual-wallet (bucket 11) label: YYMM + brand code + ".TKDV".

    e.g. an order dated 2025-11-03 for brand menard -> "2511MN.TKDV"
    """
    order_date = ctx.sale.order_date
    if order_date is None:
        return None
    return f"{order_date:%y%m}{ctx.tables.brand_code(ctx.brand)}.TKDV"
