"""
Order-type classification.

Channels send the order type as free text ("01.Thường", "03. Đổi điểm",
"08.  Tách thẻ", ...). Labels are normalized (case, diacritics, spacing)
and matched against an ordered rule table. The first matching rule wins,
so table order is priority order. Labels no rule matches classify as
UNKNOWN.
"""
import re
import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping, Optional, Sequence

from core.domain.enums import OrderCategory

_SPACES = re.compile(r"\s+")
_NUMBERED = re.compile(r"^(\d+)\.\s*")


def normalize_label(label: Optional[str]) -> str:
    """
    Normalize a free-text label for matching.

    "08.  Tách thẻ" -> "08. tach the"
    "01.Thường"     -> "01. thuong"
    """
    text = (label or "").replace("đ", "d").replace("Đ", "D")
    text = unicodedata.normalize("NFKD", text)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = _SPACES.sub(" ", text.casefold()).strip()
    return _NUMBERED.sub(r"\1. ", text)


class MatchMode(str, Enum):
    PREFIX = "prefix"
    CONTAINS = "contains"
    EXACT = "exact"


@dataclass(frozen=True)
class LabelRule:
    """One (pattern, category) entry of the classification table."""
    pattern: str
    category: OrderCategory
    mode: MatchMode = MatchMode.CONTAINS

    def matches(self, normalized: str) -> bool:
        pattern = normalize_label(self.pattern)
        if not pattern:
            return False
        if self.mode is MatchMode.PREFIX:
            return normalized.startswith(pattern)
        if self.mode is MatchMode.EXACT:
            return normalized == pattern
        return pattern in normalized


DEFAULT_ORDER_TYPE_RULES: tuple[LabelRule, ...] = (
    LabelRule("Đổi điểm", OrderCategory.POINT_EXCHANGE),
    LabelRule("đổi vỏ", OrderCategory.CONTAINER_EXCHANGE),
    LabelRule("Đầu tư", OrderCategory.INVESTMENT),
    LabelRule("Tặng sinh nhật", OrderCategory.BIRTHDAY_GIFT),
    LabelRule("Đổi DV", OrderCategory.SERVICE_CONVERSION),
    LabelRule("Đổi thẻ KEEP->Thẻ DV", OrderCategory.SERVICE_CONVERSION),
    LabelRule("Tách thẻ", OrderCategory.CARD_SPLIT),
    LabelRule("Bán buôn kênh Đại lý", OrderCategory.DEALER_WHOLESALE),
    LabelRule("Xuất hàng khuyến mãi", OrderCategory.PROMO_SHIPMENT),
    LabelRule("Bán tài khoản", OrderCategory.ACCOUNT_SALE),
    LabelRule("Sàn TMDT", OrderCategory.MARKETPLACE),
    LabelRule("Sàn TMĐT", OrderCategory.MARKETPLACE),
    LabelRule("Làm dịch vụ", OrderCategory.FEE_WAIVED_SERVICE),
    LabelRule("01.", OrderCategory.STANDARD_RETAIL, MatchMode.PREFIX),
    LabelRule("01 ", OrderCategory.STANDARD_RETAIL, MatchMode.PREFIX),
    LabelRule("Thường", OrderCategory.STANDARD_RETAIL, MatchMode.EXACT),
)


class OrderTypeClassifier:
    """
    Pure, total classifier over a fixed rule table.

    Usage:
        classifier = OrderTypeClassifier()
        classifier.classify("03. Đổi điểm")  # OrderCategory.POINT_EXCHANGE
    """

    def __init__(self, rules: Sequence[LabelRule] = DEFAULT_ORDER_TYPE_RULES):
        self._rules = tuple(rules)

    @property
    def rules(self) -> tuple[LabelRule, ...]:
        return self._rules

    def classify(self, label: Optional[str]) -> OrderCategory:
        normalized = normalize_label(label)
        if not normalized:
            return OrderCategory.UNKNOWN
        for rule in self._rules:
            if rule.matches(normalized):
                return rule.category
        return OrderCategory.UNKNOWN

    @classmethod
    def from_entries(cls, entries: Iterable[Mapping[str, str]]) -> "OrderTypeClassifier":
        """
        Build a classifier from configuration data.

        Args:
            entries: Ordered mappings with keys "pattern", "category" and
                optional "mode" ("prefix" | "contains" | "exact")
        """
        rules = [
            LabelRule(
                pattern=entry["pattern"],
                category=OrderCategory(entry["category"]),
                mode=MatchMode(entry.get("mode", MatchMode.CONTAINS.value)),
            )
            for entry in entries
        ]
        return cls(rules)


_DEFAULT_CLASSIFIER = OrderTypeClassifier()


def classify_order_type(label: Optional[str]) -> OrderCategory:
    """Classify a label with the default rule table."""
    return _DEFAULT_CLASSIFIER.classify(label)
