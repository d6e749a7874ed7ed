"""
Price, transaction-type and line-attribute rules.

All functions are pure and total.
"""
from decimal import Decimal
from typing import Optional

from core.domain.enums import OrderCategory, ProductKind
from core.domain.value_objects import CanonicalSale, PriceResolution, ProductInfo
from ledger_sdk.utils.numbers import ZERO

# Categories whose recorded price is trusted as-is.
_PRICE_TRUSTED = (
    OrderCategory.STANDARD_RETAIL,
    OrderCategory.POINT_EXCHANGE,
    OrderCategory.CONTAINER_EXCHANGE,
    OrderCategory.INVESTMENT,
)


def resolve_price(sale: CanonicalSale, category: OrderCategory) -> PriceResolution:
    """
    Reconcile unit price and subtotal.

    Subtotal priority: explicit subtotal, line total, revenue. For order types
    other than standard retail and exchanges, a zero recorded price is rebuilt
    from the gross amount (line total, or subtotal plus all discounts) so that
    price x quantity stays consistent with the postings. Point-exchange lines
    are posted at zero.
    """
    if category is OrderCategory.POINT_EXCHANGE:
        return PriceResolution(unit_price=ZERO, subtotal=ZERO)

    qty = abs(sale.qty)
    subtotal = sale.subtotal or sale.line_total or sale.revenue or ZERO
    price = sale.unit_price or ZERO

    if category not in _PRICE_TRUSTED and price == 0 and qty > 0:
        gross = sale.line_total or sale.subtotal
        if not gross:
            gross = subtotal + discount_total(sale)
        if gross > 0:
            price = gross / qty

    if price == 0 and subtotal > 0 and qty > 0:
        price = subtotal / qty

    if subtotal == 0 and price != 0:
        subtotal = price * qty

    return PriceResolution(unit_price=price, subtotal=subtotal)


def discount_total(sale: CanonicalSale) -> Decimal:
    purchase = sale.other_disc_amt or sale.promo_disc_amt
    return purchase + sale.policy_disc_amt + sale.grade_disc_amt + sale.voucher_amount


def resolve_transaction_type(
    sale: CanonicalSale,
    category: OrderCategory,
    kind: Optional[ProductKind],
    price: PriceResolution,
    is_wholesale: bool,
    product: Optional[ProductInfo],
) -> str:
    """Ledger transaction type (loai_gd)."""
    if category in (OrderCategory.SERVICE_CONVERSION, OrderCategory.CARD_SPLIT):
        return "11" if sale.qty < 0 else "12"

    if is_wholesale and product is not None and product.is_ecode:
        return "04"

    if category is OrderCategory.STANDARD_RETAIL:
        if kind is ProductKind.GOODS:
            return "01"
        if kind is ProductKind.SERVICE and sale.qty > 0:
            return "02"
        if kind is ProductKind.VOUCHER:
            return "03"

    if category is OrderCategory.FEE_WAIVED_SERVICE and kind is ProductKind.SERVICE:
        return "06" if price.unit_price == 0 else "01"

    return "01"


def resolve_warehouse_code(
    category: OrderCategory,
    movement_warehouse: Optional[str],
    sale_warehouse: Optional[str],
    department_code: Optional[str],
) -> str:
    """
    Warehouse code of a posting line.

    Card-split orders always post to the department's virtual warehouse.
    """
    if category is OrderCategory.CARD_SPLIT:
        return f"B{department_code or ''}"
    return movement_warehouse or sale_warehouse or ""


def resolve_batch_serial(
    batch_serial: Optional[str], product: Optional[ProductInfo]
) -> tuple[Optional[str], Optional[str]]:
    """
    Split a movement batch/serial value into (ma_lo, so_serial).

    Batch number when the material tracks batches and not serials, serial
    number otherwise.
    """
    if not batch_serial:
        return None, None
    if product is not None and product.uses_batch:
        return batch_serial, None
    if product is not None and product.track_serial:
        return None, batch_serial
    return None, None
