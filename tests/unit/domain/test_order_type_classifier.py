"""Tests for order-type label classification."""

import pytest

from core.domain.accounting import OrderTypeClassifier, classify_order_type, normalize_label
from core.domain.enums import OrderCategory


@pytest.mark.parametrize(
    "label, expected",
    [
        ("03. Đổi điểm", OrderCategory.POINT_EXCHANGE),
        ("03.Đổi điểm", OrderCategory.POINT_EXCHANGE),
        ("Đổi vỏ chai", OrderCategory.CONTAINER_EXCHANGE),
        ("06. Đầu tư", OrderCategory.INVESTMENT),
        ("05. Tặng sinh nhật", OrderCategory.BIRTHDAY_GIFT),
        ("01.Thường", OrderCategory.STANDARD_RETAIL),
        ("Thường", OrderCategory.STANDARD_RETAIL),
        ("04. Đổi DV", OrderCategory.SERVICE_CONVERSION),
        ("Đổi thẻ KEEP->Thẻ DV", OrderCategory.SERVICE_CONVERSION),
        ("08. Tách thẻ", OrderCategory.CARD_SPLIT),
        ("07. Bán tài khoản", OrderCategory.ACCOUNT_SALE),
        ("9. Sàn TMDT", OrderCategory.MARKETPLACE),
        ("02. Làm dịch vụ", OrderCategory.FEE_WAIVED_SERVICE),
        ("Bán buôn kênh Đại lý", OrderCategory.DEALER_WHOLESALE),
        ("Xuất hàng khuyến mãi", OrderCategory.PROMO_SHIPMENT),
    ],
)
def test_classifies_known_labels(label, expected):
    assert classify_order_type(label) is expected


def test_matching_ignores_case_and_accents():
    assert classify_order_type("03. DOI DIEM") is OrderCategory.POINT_EXCHANGE
    assert classify_order_type("08.  tach the") is OrderCategory.CARD_SPLIT


@pytest.mark.parametrize("label", [None, "", "   ", "something else entirely"])
def test_unmatched_labels_are_unknown(label):
    assert classify_order_type(label) is OrderCategory.UNKNOWN


def test_rule_order_breaks_ties():
    """A label mentioning both point exchange and standard retail is a point exchange."""
    assert classify_order_type("01. Đổi điểm") is OrderCategory.POINT_EXCHANGE


def test_classifier_from_configuration_entries():
    classifier = OrderTypeClassifier.from_entries(
        [
            {"pattern": "B2B", "category": "dealer_wholesale", "mode": "prefix"},
            {"pattern": "retail", "category": "standard_retail"},
        ]
    )

    assert classifier.classify("B2B order") is OrderCategory.DEALER_WHOLESALE
    assert classifier.classify("order B2B") is OrderCategory.UNKNOWN
    assert classifier.classify("Retail store") is OrderCategory.STANDARD_RETAIL


def test_normalize_label():
    assert normalize_label("08.  Tách thẻ") == "08. tach the"
    assert normalize_label("01.Thường") == "01. thuong"
