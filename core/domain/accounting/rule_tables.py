"""
Accounting rule tables.

CRITICAL: These values are the ledger's chart-of-accounts and promotion
catalog conventions. Change them together with the accounting team.

Every per-brand / per-branch literal used by the resolver lives here so the
resolver itself only expresses control flow. A deployment can override any
table by constructing RuleTables(...) with different values.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from core.domain.value_objects.accounting import AccountTriple


# ==============================================================================
# RETAIL ACCOUNTS
# ==============================================================================

EXCHANGE_ACCOUNTS = AccountTriple(expense_account="64191", fee_code="161010")
BIRTHDAY_ACCOUNTS = AccountTriple(expense_account="64192", fee_code="162010")
GIFT_PROMOTION_ACCOUNTS = AccountTriple(expense_account="64191", fee_code="161010")

# Keyed by ledger product type ("I" goods, "S" service).
VIP_DISCOUNT_ACCOUNTS = MappingProxyType({"I": "521113", "S": "521132"})
VOUCHER_DISCOUNT_ACCOUNTS = MappingProxyType({"I": "5211611", "S": "5211621"})
VOUCHER_GIFT_DISCOUNT_ACCOUNT = "5211631"
PURCHASE_DISCOUNT_ACCOUNTS = MappingProxyType({"I": "521111", "S": "521131"})


# ==============================================================================
# WHOLESALE
# ==============================================================================

# (marker found in the catalog product group, wholesale category); else "MP".
WHOLESALE_CATEGORY_MARKERS = (("03TPCN", "TPCN"), ("11MMOC", "CCDC"))
WHOLESALE_DEFAULT_CATEGORY = "MP"

# (category, is_ecode) -> bucket 2 policy code
WHOLESALE_POLICY_CODES = MappingProxyType({
    ("MP", False): "CKCSBH.MP",
    ("TPCN", False): "CKCSBH.TPCN",
    ("CCDC", False): "CKCSBH.CCDC",
    ("MP", True): "CKCSBH.E.MP",
    ("TPCN", True): "CKCSBH.E.TPCN",
    ("CCDC", True): "CKCSBH.E.CCDC",
})

# (category, is_ecode) -> account triple
WHOLESALE_ACCOUNTS = MappingProxyType({
    ("MP", False): AccountTriple("5211141", "64191", "CKCSBH.MP"),
    ("TPCN", False): AccountTriple("5211142", "64191", "CKCSBH.TPCN"),
    ("CCDC", False): AccountTriple("5211143", "64191", "CKCSBH.CCDC"),
    ("MP", True): AccountTriple("5211144", "64191", "CKCSBH.E.MP"),
    ("TPCN", True): AccountTriple("5211145", "64191", "CKCSBH.E.TPCN"),
    ("CCDC", True): AccountTriple("5211146", "64191", "CKCSBH.E.CCDC"),
})

# Dealer-channel wholesale gift codes by wholesale category.
DEALER_GIFT_CODES = MappingProxyType({"TPCN": "TT BB DAI LY"})
DEALER_DEFAULT_GIFT_CODE = "KM BB DAI LY"


# ==============================================================================
# PROMOTION CODES
# ==============================================================================

# (source prefix, replacement prefix). Rewritten codes are "pre-derived".
PROMOTION_PREFIX_REWRITES = (("PRMN", "RMN"),)

POINT_EXCHANGE_GIFT_CODES = MappingProxyType({
    "TTM": "TTM.KMDIEM",
    "AMA": "TTM.KMDIEM",
    "TSG": "TTM.KMDIEM",
    "FBV": "FBV.KMDIEM",
    "BTH": "BTH.KMDIEM",
    "CDV": "CDV.KMDIEM",
    "LHV": "LHV.KMDIEM",
})
POINT_EXCHANGE_DEFAULT_GIFT_CODE = "TTM.KMDIEM"
INVESTMENT_GIFT_CODE = "TT DAU TU"

MARKETPLACE_CODE01_BY_BRAND = MappingProxyType({
    "menard": "TTM.R601ECOM",
    "yaman": "BTH.R601ECOM",
})

# company -> {product type or "*": code}; employee orders with purchase discount.
EMPLOYEE_DISCOUNT_CODES = MappingProxyType({
    "TTM": {"*": "2505MN.CK521"},
    "TSG": {"*": "2505MN.CK521"},
    "THP": {"*": "2505MN.CK521"},
    "FBV": {"I": "SPQTNV", "S": "DVQTNV"},
    "LHV": {"I": "R504SANPHAM", "S": "R504DICHVU"},
})


# ==============================================================================
# VOUCHER (BUCKET 5) CODES
# ==============================================================================

EMPLOYEE_VOUCHER_COMPANIES = frozenset({"TTM", "TSG", "THP"})
EMPLOYEE_VOUCHER_CODE = "2505MN.CK511"

MARKETPLACE_CUSTOMER_SOURCES = frozenset({"shopee", "lazada", "tiktok"})
MARKETPLACE_VOUCHER_BY_BRAND = MappingProxyType({
    "menard": "TTM.R601ECOM",
    "yaman": "BTH.R601ECOM",
    "cdv": "CDV.R601ECOM",
    "chando": "CDV.R601ECOM",
})
MARKETPLACE_VOUCHER_LABEL = "VC CTKM SÀN"

# brand -> {"<type>" | "<type>:gift": code}
BRAND_VOUCHER_CODES = MappingProxyType({
    "yaman": {"I": "YVC.HB", "S": "YVC.DV"},
    "facialbar": {"I": "FBV TT VCDV", "S": "FBV TT VCHH"},
    "f3": {"I": "FBV TT VCDV", "S": "FBV TT VCHH"},
    "labhair": {"I:gift": "LHVTT.VCKM", "I": "LHVTT.VCHB", "S": "LHVTT.VCDV"},
    "menard": {"I:gift": "VC KM", "I": "VC HB", "S": "VC DV", "V": "VC KM"},
})
DEFAULT_VOUCHER_CODE = "VOUCHER"


# ==============================================================================
# OTHER BUCKET CODES
# ==============================================================================

BRAND_CODES = MappingProxyType({
    "menard": "MN",
    "f3": "FBV",
    "facialbar": "FBV",
    "chando": "CDV",
    "labhair": "LHV",
    "yaman": "BTH",
})
DEFAULT_BRAND_CODE = "MN"

COUPON_CODE = "COUPON"
VOUCHER_DP2_CODE = "VOUCHER_DP2"
VOUCHER_DP3_CODE = "VOUCHER_DP3"

# Bucket 3 (VIP tier) codes.
F3_VIP_CODES = MappingProxyType({"DIVU": "FBV CKVIP DV", "*": "FBV CKVIP SP"})
VIP_SERVICE_CODE = "VIP DV MAT"
VIP_VOUCHER_CODE = "VIP VC MP"
VIP_GOODS_CODE = "VIP MP"

DEFAULT_TAX_CODE = "00"

# Payment-method codes that are settled as discount buckets rather than receipts.
E_WALLET_METHOD_CODES = frozenset({"ECOIN"})
VOUCHER_METHOD_CODES = frozenset({"VOUCHER"})


@dataclass(frozen=True)
class RuleTables:
    """
    Bundle of every lookup table consumed by the accounting resolver.

    Defaults are the production tables above.
    """
    exchange_accounts: AccountTriple = EXCHANGE_ACCOUNTS
    birthday_accounts: AccountTriple = BIRTHDAY_ACCOUNTS
    gift_promotion_accounts: AccountTriple = GIFT_PROMOTION_ACCOUNTS
    vip_discount_accounts: Mapping[str, str] = field(default_factory=lambda: VIP_DISCOUNT_ACCOUNTS)
    voucher_discount_accounts: Mapping[str, str] = field(default_factory=lambda: VOUCHER_DISCOUNT_ACCOUNTS)
    voucher_gift_discount_account: str = VOUCHER_GIFT_DISCOUNT_ACCOUNT
    purchase_discount_accounts: Mapping[str, str] = field(default_factory=lambda: PURCHASE_DISCOUNT_ACCOUNTS)

    wholesale_category_markers: tuple[tuple[str, str], ...] = WHOLESALE_CATEGORY_MARKERS
    wholesale_default_category: str = WHOLESALE_DEFAULT_CATEGORY
    wholesale_policy_codes: Mapping[tuple[str, bool], str] = field(default_factory=lambda: WHOLESALE_POLICY_CODES)
    wholesale_accounts: Mapping[tuple[str, bool], AccountTriple] = field(default_factory=lambda: WHOLESALE_ACCOUNTS)
    dealer_gift_codes: Mapping[str, str] = field(default_factory=lambda: DEALER_GIFT_CODES)
    dealer_default_gift_code: str = DEALER_DEFAULT_GIFT_CODE

    promotion_prefix_rewrites: tuple[tuple[str, str], ...] = PROMOTION_PREFIX_REWRITES
    point_exchange_gift_codes: Mapping[str, str] = field(default_factory=lambda: POINT_EXCHANGE_GIFT_CODES)
    point_exchange_default_gift_code: str = POINT_EXCHANGE_DEFAULT_GIFT_CODE
    investment_gift_code: str = INVESTMENT_GIFT_CODE
    marketplace_code01_by_brand: Mapping[str, str] = field(default_factory=lambda: MARKETPLACE_CODE01_BY_BRAND)
    employee_discount_codes: Mapping[str, Mapping[str, str]] = field(default_factory=lambda: EMPLOYEE_DISCOUNT_CODES)

    employee_voucher_companies: frozenset = EMPLOYEE_VOUCHER_COMPANIES
    employee_voucher_code: str = EMPLOYEE_VOUCHER_CODE
    marketplace_customer_sources: frozenset = MARKETPLACE_CUSTOMER_SOURCES
    marketplace_voucher_by_brand: Mapping[str, str] = field(default_factory=lambda: MARKETPLACE_VOUCHER_BY_BRAND)
    marketplace_voucher_label: str = MARKETPLACE_VOUCHER_LABEL
    brand_voucher_codes: Mapping[str, Mapping[str, str]] = field(default_factory=lambda: BRAND_VOUCHER_CODES)
    default_voucher_code: str = DEFAULT_VOUCHER_CODE

    brand_codes: Mapping[str, str] = field(default_factory=lambda: BRAND_CODES)
    default_brand_code: str = DEFAULT_BRAND_CODE
    coupon_code: str = COUPON_CODE
    voucher_dp2_code: str = VOUCHER_DP2_CODE
    voucher_dp3_code: str = VOUCHER_DP3_CODE
    f3_vip_codes: Mapping[str, str] = field(default_factory=lambda: F3_VIP_CODES)
    vip_service_code: str = VIP_SERVICE_CODE
    vip_voucher_code: str = VIP_VOUCHER_CODE
    vip_goods_code: str = VIP_GOODS_CODE
    default_tax_code: str = DEFAULT_TAX_CODE
    e_wallet_method_codes: frozenset = E_WALLET_METHOD_CODES
    voucher_method_codes: frozenset = VOUCHER_METHOD_CODES

    def wholesale_category(self, product_group: Optional[str]) -> str:
        group = (product_group or "").upper()
        for marker, category in self.wholesale_category_markers:
            if marker in group:
                return category
        return self.wholesale_default_category

    def brand_code(self, brand: Optional[str]) -> str:
        return self.brand_codes.get((brand or "").strip().lower(), self.default_brand_code)

    def employee_discount_code(self, company: str, product_type: Optional[str]) -> Optional[str]:
        codes = self.employee_discount_codes.get(company)
        if not codes:
            return None
        return codes.get(product_type or "") or codes.get("*")

    def is_employee_discount_code(self, code: Optional[str]) -> bool:
        if not code:
            return False
        return any(code in codes.values() for codes in self.employee_discount_codes.values())


DEFAULT_RULE_TABLES = RuleTables()
