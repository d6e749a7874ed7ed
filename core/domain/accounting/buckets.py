"""
Discount-bucket (ck01..ck22) assignment.

Buckets have fixed positional meaning:
    1 purchase discount       2 policy discount (wholesale)
    3 VIP-tier discount       4 coupon payment
    5 voucher payment         6 secondary voucher
    7, 8 further voucher tiers
    9..22 pass-through amounts, 11 virtual wallet, 15 marketplace voucher
"""
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional

from core.domain.enums import OrderCategory
from core.domain.value_objects import (
    DiscountBucket,
    DiscountBuckets,
    PaymentRecord,
    PromotionCodes,
)
from ledger_sdk.utils.numbers import ZERO, is_zero
from .context import LineContext
from .promotion_codes import resolve_vip_code, resolve_voucher_code, resolve_wallet_label

PURCHASE = 1
POLICY = 2
VIP = 3
COUPON = 4
VOUCHER = 5
VOUCHER_DP1 = 6
VOUCHER_DP2 = 7
VOUCHER_DP3 = 8
WALLET = 11
MARKETPLACE_VOUCHER = 15
PASS_THROUGH = range(9, 23)


class PaymentRouting(str, Enum):
    """Which payment method decides the voucher/wallet split of an order."""
    E_WALLET = "e_wallet"
    VOUCHER = "voucher"
    RECORDED = "recorded"


def payment_routing(payments: Iterable[PaymentRecord], ctx: LineContext) -> PaymentRouting:
    methods = {payment.normalized_method for payment in payments}
    if methods & ctx.tables.e_wallet_method_codes:
        return PaymentRouting.E_WALLET
    if methods & ctx.tables.voucher_method_codes:
        return PaymentRouting.VOUCHER
    return PaymentRouting.RECORDED


def e_wallet_amount(payments: Iterable[PaymentRecord], ctx: LineContext) -> Decimal:
    """Amount of the first e-wallet payment record, zero when there is none."""
    for payment in payments:
        if payment.normalized_method in ctx.tables.e_wallet_method_codes:
            return payment.amount
    return ZERO


def _bucket(code: Optional[str], amount: Decimal) -> Optional[DiscountBucket]:
    if is_zero(amount):
        return None
    return DiscountBucket(code=code or None, amount=amount)


def assign_buckets(
    ctx: LineContext,
    promotion: PromotionCodes,
    payments: Iterable[PaymentRecord] = (),
) -> DiscountBuckets:
    if ctx.category is OrderCategory.PROMO_SHIPMENT:
        return DiscountBuckets.empty()

    sale = ctx.sale
    codes = sale.discount_codes
    slots: dict[int, DiscountBucket] = {}

    def put(index: int, bucket: Optional[DiscountBucket]) -> None:
        if bucket is None:
            slots.pop(index, None)
        else:
            slots[index] = bucket

    for index in PASS_THROUGH:
        put(index, _bucket(codes.get(index), sale.extra_discounts.get(index, ZERO)))

    # Bucket 1 keeps its promotion code even at zero amount.
    if not ctx.is_point_exchange:
        purchase = sale.promo_disc_amt if ctx.is_wholesale else (sale.other_disc_amt or sale.promo_disc_amt)
        if promotion.code01 or not is_zero(purchase):
            put(PURCHASE, DiscountBucket(code=promotion.code01, amount=purchase))

    policy_code = codes.get(POLICY)
    if ctx.is_wholesale and sale.policy_disc_amt > 0:
        policy_code = ctx.tables.wholesale_policy_codes.get(
            (ctx.wholesale_category, ctx.is_ecode), policy_code
        )
    put(POLICY, _bucket(policy_code, sale.policy_disc_amt))

    put(VIP, _bucket(resolve_vip_code(ctx), sale.grade_disc_amt))
    put(COUPON, _bucket(codes.get(COUPON) or ctx.tables.coupon_code, sale.coupon_amount))
    put(VOUCHER, _bucket(resolve_voucher_code(ctx) or codes.get(VOUCHER), sale.voucher_amount))
    put(VOUCHER_DP1, _bucket(codes.get(VOUCHER_DP1), sale.voucher_dp1_amount))
    put(VOUCHER_DP2, _bucket(codes.get(VOUCHER_DP2) or ctx.tables.voucher_dp2_code, sale.voucher_dp2_amount))
    put(VOUCHER_DP3, _bucket(codes.get(VOUCHER_DP3) or ctx.tables.voucher_dp3_code, sale.voucher_dp3_amount))

    wallet_code = codes.get(WALLET) or resolve_wallet_label(ctx)
    put(WALLET, _bucket(wallet_code, sale.wallet_amount or sale.extra_discounts.get(WALLET, ZERO)))

    routing = payment_routing(payments, ctx)
    if routing is PaymentRouting.E_WALLET:
        paid = sale.wallet_amount or e_wallet_amount(payments, ctx) or sale.voucher_amount
        put(WALLET, _bucket(wallet_code, paid))
        put(VOUCHER, None)
    elif routing is PaymentRouting.VOUCHER:
        put(WALLET, None)
        if ctx.is_wholesale or ctx.is_marketplace:
            put(VOUCHER, None)

    if ctx.is_marketplace:
        amount = sale.voucher_amount or sale.voucher_dp1_amount
        put(MARKETPLACE_VOUCHER, _bucket(ctx.tables.marketplace_voucher_label, amount))
        put(VOUCHER, None)
        put(VOUCHER_DP1, None)

    if ctx.is_point_exchange:
        put(PURCHASE, None)
        put(VOUCHER, None)

    return DiscountBuckets.from_mapping(slots)
