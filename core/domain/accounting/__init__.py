"""
Accounting rules: order-type classification and the pure resolver that
turns a posting line into its ledger accounting treatment.
"""

from .order_types import DEFAULT_ORDER_TYPE_RULES, LabelRule, MatchMode, OrderTypeClassifier, classify_order_type, normalize_label
from .promotion_codes import cut_promotion_code
from .pricing import resolve_batch_serial, resolve_warehouse_code
from .resolver import AccountingRuleResolver
from .rule_tables import DEFAULT_RULE_TABLES, RuleTables

__all__ = [
    "AccountingRuleResolver",
    "DEFAULT_ORDER_TYPE_RULES",
    "DEFAULT_RULE_TABLES",
    "LabelRule",
    "MatchMode",
    "OrderTypeClassifier",
    "RuleTables",
    "classify_order_type",
    "cut_promotion_code",
    "normalize_label",
    "resolve_batch_serial",
    "resolve_warehouse_code",
]
