"""
Tests for the accounting rule resolver.

Covers account triples, promotion codes and discount-bucket assignment,
including the documented example scenarios.
"""
from datetime import date
from decimal import Decimal

import pytest

from core.domain.accounting import AccountingRuleResolver, RuleTables
from core.domain.enums import OrderCategory
from core.domain.value_objects import AccountTriple, DiscountBucket, PaymentRecord
from tests.mocks.factories import make_product, make_sale


@pytest.fixture
def resolver() -> AccountingRuleResolver:
    return AccountingRuleResolver()


# =============================================================================
# EXAMPLE SCENARIOS
# =============================================================================

def test_vip_discount_on_goods(resolver):
    """Standard retail goods line with a VIP-tier discount fills bucket 3 only."""
    sale = make_sale(order_type_label="01.Thường", product_type="I", grade_disc_amt=Decimal("50000"))

    resolution = resolver.resolve(sale, product=make_product(), company_code="TTM")

    assert resolution.category is OrderCategory.STANDARD_RETAIL
    assert resolution.accounts.discount_account == "521113"
    assert resolution.buckets.non_empty() == {3: DiscountBucket(code="VIP MP", amount=Decimal("50000"))}


def test_vip_discount_on_service(resolver):
    sale = make_sale(item_code="DV0001", product_type="S", grade_disc_amt=Decimal("20000"))
    product = make_product(material_code="DV0001", product_type="S", product_group="DIVU")

    resolution = resolver.resolve(sale, product=product, company_code="TTM")

    assert resolution.accounts.discount_account == "521132"
    assert resolution.buckets[3] == DiscountBucket(code="VIP DV MAT", amount=Decimal("20000"))


def test_point_exchange_maps_branch_gift_code_and_clears_buckets(resolver):
    sale = make_sale(
        order_type_label="03.Đổi điểm",
        promo_code="R601KM-2511",
        other_disc_amt=Decimal("5000"),
        voucher_amount=Decimal("100000"),
    )

    resolution = resolver.resolve(sale, product=make_product(), company_code="TTM")

    assert resolution.category is OrderCategory.POINT_EXCHANGE
    assert resolution.promotion.gift_code == "TTM.KMDIEM"
    assert resolution.promotion.code01 is None
    assert resolution.buckets[1].is_empty
    assert resolution.buckets[5].is_empty
    assert resolution.accounts == AccountTriple(expense_account="64191", fee_code="161010")
    assert resolution.price.unit_price == Decimal("0")


def test_wholesale_ecode_policy_discount(resolver):
    sale = make_sale(sale_type="WHOLESALE", policy_disc_amt=Decimal("1000"))
    product = make_product(product_group="03TPCN", material_type="94")

    resolution = resolver.resolve(sale, product=product, company_code="TTM")

    assert resolution.buckets[2] == DiscountBucket(code="CKCSBH.E.TPCN", amount=Decimal("1000"))
    assert resolution.accounts.fee_code == "CKCSBH.E.TPCN"
    assert resolution.transaction_type == "04"


# =============================================================================
# PROPERTIES
# =============================================================================

def test_resolution_is_deterministic(resolver):
    sale = make_sale(
        grade_disc_amt=Decimal("50000"),
        other_disc_amt=Decimal("10000"),
        voucher_amount=Decimal("30000"),
        promo_code="R601KM-2511",
    )
    product = make_product()
    payments = [PaymentRecord(order_code="SO001", method_code="CASH", amount=Decimal("160000"))]

    first = resolver.resolve(sale, product=product, company_code="TTM", payments=payments)
    second = resolver.resolve(sale, product=product, company_code="TTM", payments=payments)

    assert first == second


def test_e_wallet_payment_clears_voucher_bucket(resolver):
    sale = make_sale(voucher_amount=Decimal("30000"))
    payments = [PaymentRecord(order_code="SO001", method_code="ECOIN", amount=Decimal("30000"))]

    resolution = resolver.resolve(sale, product=make_product(), company_code="TTM", payments=payments)

    assert resolution.buckets[5].is_empty
    assert resolution.buckets[11] == DiscountBucket(code="2511MN.TKDV", amount=Decimal("30000"))


def test_e_wallet_bucket_takes_the_e_wallet_payment_amount(resolver):
    payments = [PaymentRecord(order_code="SO001", method_code="ECOIN", amount=Decimal("30000"))]
    with_voucher = make_sale(voucher_amount=Decimal("100"))
    without_amounts = make_sale()

    first = resolver.resolve(with_voucher, product=make_product(), company_code="TTM", payments=payments)
    second = resolver.resolve(without_amounts, product=make_product(), company_code="TTM", payments=payments)

    assert first.buckets[11] == DiscountBucket(code="2511MN.TKDV", amount=Decimal("30000"))
    assert second.buckets[11].amount == Decimal("30000")
    assert first.buckets[5].is_empty


def test_recorded_wallet_amount_wins_over_e_wallet_payment(resolver):
    sale = make_sale(wallet_amount=Decimal("15000"))
    payments = [PaymentRecord(order_code="SO001", method_code="ecoin", amount=Decimal("30000"))]

    resolution = resolver.resolve(sale, product=make_product(), company_code="TTM", payments=payments)

    assert resolution.buckets[11].amount == Decimal("15000")


def test_voucher_payment_clears_wallet_bucket(resolver):
    sale = make_sale(voucher_amount=Decimal("30000"), wallet_amount=Decimal("15000"))
    payments = [PaymentRecord(order_code="SO001", method_code="voucher", amount=Decimal("30000"))]

    resolution = resolver.resolve(sale, product=make_product(), company_code="TTM", payments=payments)

    assert resolution.buckets[11].is_empty
    assert resolution.buckets[5] == DiscountBucket(code="VC HB", amount=Decimal("30000"))


def test_voucher_payment_suppressed_for_wholesale(resolver):
    sale = make_sale(sale_type="WHOLESALE", voucher_amount=Decimal("30000"))
    payments = [PaymentRecord(order_code="SO001", method_code="VOUCHER", amount=Decimal("30000"))]

    resolution = resolver.resolve(sale, product=make_product(), company_code="TTM", payments=payments)

    assert resolution.buckets[5].is_empty
    assert resolution.buckets[11].is_empty


def test_without_payment_records_recorded_amounts_are_used(resolver):
    sale = make_sale(voucher_amount=Decimal("30000"), wallet_amount=Decimal("15000"))

    resolution = resolver.resolve(sale, product=make_product(), company_code="TTM")

    assert resolution.buckets[5].amount == Decimal("30000")
    assert resolution.buckets[11].amount == Decimal("15000")


def test_resolver_never_raises_on_empty_input(resolver):
    sale = make_sale(
        order_type_label="",
        product_type=None,
        brand="",
        unit_price=Decimal("0"),
        subtotal=Decimal("0"),
        revenue=Decimal("0"),
        order_date=None,
    )

    resolution = resolver.resolve(sale)

    assert resolution.category is OrderCategory.UNKNOWN
    assert resolution.tax_code == "00"
    assert resolution.transaction_type == "01"
    assert resolution.buckets.non_empty() == {}


# =============================================================================
# PROMOTION CODES
# =============================================================================

def test_promotion_code_cut_and_suffixed(resolver):
    sale = make_sale(promo_code="R601KM-2511", other_disc_amt=Decimal("10000"))

    resolution = resolver.resolve(sale, product=make_product(), company_code="TTM")

    assert resolution.promotion.code01 == "R601KM.I"
    assert resolution.buckets[1] == DiscountBucket(code="R601KM.I", amount=Decimal("10000"))
    assert resolution.accounts.discount_account == "521111"


def test_rewritten_prefix_is_pre_derived(resolver):
    sale = make_sale(promo_code="PRMN2511")

    resolution = resolver.resolve(sale, product=make_product(), company_code="TTM")

    assert resolution.promotion.pre_derived is True
    assert resolution.promotion.code01 == "RMN2511"


def test_employee_discount_code(resolver):
    sale = make_sale(is_employee=True, other_disc_amt=Decimal("10000"), voucher_amount=Decimal("5000"))

    resolution = resolver.resolve(sale, product=make_product(), company_code="TTM")

    assert resolution.buckets[1] == DiscountBucket(code="2505MN.CK521", amount=Decimal("10000"))
    assert resolution.buckets[5].code == "2505MN.CK511"


def test_employee_literal_promotion_code_keeps_no_suffix(resolver):
    sale = make_sale(is_employee=True, other_disc_amt=Decimal("1000"), promo_code="2505MN.CK521")

    resolution = resolver.resolve(sale, product=make_product(), company_code="BTH")

    assert resolution.promotion.code01 == "2505MN.CK521"
    assert resolution.buckets[1] == DiscountBucket(code="2505MN.CK521", amount=Decimal("1000"))


def test_employee_literal_is_suffixed_for_non_employees(resolver):
    sale = make_sale(other_disc_amt=Decimal("1000"), promo_code="2505MN.CK521")

    resolution = resolver.resolve(sale, product=make_product(), company_code="BTH")

    assert resolution.promotion.code01 == "2505MN.CK521.I"


def test_gift_line_derives_gift_code(resolver):
    sale = make_sale(
        promo_code="R601KM.I-2511",
        unit_price=Decimal("0"),
        subtotal=Decimal("0"),
        revenue=Decimal("0"),
        discount_account="5211999",
    )

    resolution = resolver.resolve(sale, product=make_product(), company_code="TTM")

    assert resolution.is_gift_line
    assert resolution.gift_flag == "1"
    assert resolution.promotion.gift_code == "R601KM"
    assert resolution.accounts == AccountTriple("5211999", "64191", "161010")


@pytest.mark.parametrize("label", ["Bán tài khoản", "Sàn TMĐT"])
def test_account_and_marketplace_gift_lines_derive_gift_code(resolver, label):
    sale = make_sale(
        order_type_label=label,
        promo_code="R601KM.S-2511",
        gift_code="SN2511",
        unit_price=Decimal("0"),
        subtotal=Decimal("0"),
        revenue=Decimal("0"),
    )

    resolution = resolver.resolve(sale, product=make_product(), company_code="TTM")

    assert resolution.promotion.gift_code == "R601KM"


def test_birthday_gift_line_keeps_upstream_gift_code(resolver):
    sale = make_sale(
        order_type_label="Tặng sinh nhật",
        promo_code="R601KM.I-2511",
        gift_code="SN2511",
        unit_price=Decimal("0"),
        subtotal=Decimal("0"),
        revenue=Decimal("0"),
    )

    resolution = resolver.resolve(sale, product=make_product(), company_code="TTM")

    assert resolution.is_gift_line
    assert resolution.promotion.gift_code == "SN2511"


def test_dealer_wholesale_gift_literal(resolver):
    sale = make_sale(
        order_type_label="Bán buôn kênh Đại lý",
        sale_type="WHOLESALE",
        unit_price=Decimal("0"),
        subtotal=Decimal("0"),
        revenue=Decimal("0"),
    )

    supplements = resolver.resolve(sale, product=make_product(product_group="03TPCN"), company_code="TTM")
    cosmetics = resolver.resolve(sale, product=make_product(product_group="01MP"), company_code="TTM")

    assert supplements.promotion.gift_code == "TT BB DAI LY"
    assert cosmetics.promotion.gift_code == "KM BB DAI LY"


def test_marketplace_order_overrides_code01_and_uses_bucket_15(resolver):
    sale = make_sale(promo_code="R601KM-2511", voucher_amount=Decimal("20000"), voucher_dp1_amount=Decimal("5000"))

    resolution = resolver.resolve(sale, product=make_product(), company_code="TTM", is_marketplace=True)

    assert resolution.promotion.code01 == "TTM.R601ECOM"
    assert resolution.buckets[15] == DiscountBucket(code="VC CTKM SÀN", amount=Decimal("20000"))
    assert resolution.buckets[5].is_empty
    assert resolution.buckets[6].is_empty


def test_promo_shipment_forces_every_bucket_empty(resolver):
    sale = make_sale(
        order_type_label="Xuất hàng khuyến mãi",
        sale_type="WHOLESALE",
        policy_disc_amt=Decimal("1000"),
        voucher_amount=Decimal("2000"),
        extra_discounts={12: Decimal("300")},
    )

    resolution = resolver.resolve(sale, product=make_product(), company_code="TTM")

    assert resolution.buckets.non_empty() == {}


# =============================================================================
# BUCKETS AND TABLES
# =============================================================================

def test_pass_through_buckets_keep_upstream_codes(resolver):
    sale = make_sale(extra_discounts={12: Decimal("300")}, discount_codes={12: "CK12"})

    resolution = resolver.resolve(sale, product=make_product(), company_code="TTM")

    assert resolution.buckets[12] == DiscountBucket(code="CK12", amount=Decimal("300"))


def test_wallet_label_needs_an_order_date(resolver):
    dated = make_sale(wallet_amount=Decimal("1000"), brand="labhair", order_date=date(2025, 1, 9))
    undated = make_sale(wallet_amount=Decimal("1000"), order_date=None)

    assert resolver.resolve(dated).buckets[11].code == "2501LHV.TKDV"
    assert resolver.resolve(undated).buckets[11].code is None


def test_rule_tables_can_be_overridden():
    tables = RuleTables(vip_goods_code="VIP CUSTOM")
    sale = make_sale(grade_disc_amt=Decimal("1000"))

    resolution = AccountingRuleResolver(tables=tables).resolve(sale, product=make_product())

    assert resolution.buckets[3].code == "VIP CUSTOM"


def test_rule_tables_mapping_defaults_and_overrides():
    defaults = RuleTables()
    tables = RuleTables(marketplace_code01_by_brand={"menard": "TTM.ECOM"})
    sale = make_sale(promo_code="R601KM-2511")

    resolution = AccountingRuleResolver(tables=tables).resolve(
        sale, product=make_product(), company_code="TTM", is_marketplace=True
    )

    assert defaults.marketplace_code01_by_brand["menard"] == "TTM.R601ECOM"
    assert defaults.vip_discount_accounts == RuleTables().vip_discount_accounts
    assert resolution.promotion.code01 == "TTM.ECOM"
