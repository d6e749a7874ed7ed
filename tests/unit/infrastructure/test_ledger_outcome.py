"""Tests for ledger response interpretation and duplicate detection."""
import pytest

from core.infrastructure.adapters.ledger import (
    DuplicateErrorDetector,
    interpret,
    synthesize_invoice_response,
    synthesize_sales_order_response,
)
from core.infrastructure.adapters.ledger.outcome import INVALID_RESPONSE_MESSAGE


@pytest.mark.parametrize(
    "response, success, status",
    [
        ([{"status": 1, "message": "OK"}], True, 1),
        ({"status": "1"}, True, 1),
        ([{"status": 0, "message": "Lỗi"}], False, 0),
        ({"status": 2}, False, 2),
    ],
)
def test_interpret_array_and_object_shapes(response, success, status):
    outcome = interpret(response)

    assert outcome.success is success
    assert outcome.status == status


@pytest.mark.parametrize("response", [[], None, "<html>", {"message": "no status"}, [42]])
def test_interpret_invalid_response(response):
    outcome = interpret(response)

    assert not outcome.success
    assert outcome.message == INVALID_RESPONSE_MESSAGE


def test_detector_matches_vietnamese_message_case_insensitively():
    detector = DuplicateErrorDetector()

    assert detector.is_duplicate({"status": 0, "message": "Chứng từ SO001 ĐÃ TỒN TẠI"})
    assert detector.is_duplicate(message="Violation of PRIMARY KEY constraint 'PK_D81'")
    assert not detector.is_duplicate({"status": 0, "message": "Thiếu mã kho"})


def test_detector_searches_nested_messages():
    detector = DuplicateErrorDetector()
    response = [{"status": 0, "errors": [{"detail": "Record already exists"}]}]

    assert detector.is_duplicate(response)


def test_detector_with_custom_patterns():
    detector = DuplicateErrorDetector(patterns=["trùng"])

    assert detector.is_duplicate(message="Số chứng từ bị trùng")
    assert not detector.is_duplicate(message="already exists")


def test_synthesized_responses_interpret_as_success():
    assert interpret(synthesize_sales_order_response()).success
    invoice = synthesize_invoice_response("đã tồn tại")
    assert interpret(invoice).success
    assert invoice[0]["guid"] is None
