"""Tests for ledger payload mapping."""
from datetime import date
from decimal import Decimal

import pytest

from core.domain.accounting import AccountingRuleResolver
from core.domain.enums import MovementType
from core.domain.value_objects import (
    OrderDocument,
    PaymentMethodInfo,
    PaymentRecord,
    PostingLine,
    ResolvedLine,
)
from core.infrastructure.adapters.ledger import LedgerPayloadMapper, clean_payload, collect_promotion_codes
from core.infrastructure.adapters.ledger.payload_mapper import normalize_bucket1_code, normalize_customer_code
from tests.mocks.factories import make_movement, make_product, make_sale


@pytest.fixture
def mapper() -> LedgerPayloadMapper:
    return LedgerPayloadMapper()


@pytest.fixture
def document() -> OrderDocument:
    sale = make_sale(grade_disc_amt=Decimal("50000"), customer_code="NV123")
    product = make_product()
    resolved = ResolvedLine(
        line=PostingLine(sale=sale, qty=sale.qty),
        resolution=AccountingRuleResolver().resolve(sale, product=product, company_code="TTM"),
        product=product,
        warehouse_code="K01",
    )
    return OrderDocument(
        order_code="SO001",
        order_date=date(2025, 11, 3),
        customer_code="NV123",
        company_code="TTM",
        branch_code="TTM01",
        lines=(resolved,),
    )


def test_clean_payload_drops_empty_fields_but_keeps_batch_and_serial():
    payload = {
        "a": None,
        "b": "",
        "c": 0,
        "ma_lo": "",
        "so_serial": None,
        "detail": [{"x": None, "y": "1"}],
    }

    assert clean_payload(payload) == {
        "c": 0,
        "ma_lo": "",
        "so_serial": None,
        "detail": [{"y": "1"}],
    }


def test_employee_prefix_is_stripped_from_customer_code():
    assert normalize_customer_code("NV123") == "123"
    assert normalize_customer_code(" KH001 ") == "KH001"
    assert normalize_customer_code(None) == ""


def test_sales_invoice_payload(mapper, document):
    payload = mapper.sales_invoice_payload(document)

    assert payload["ma_dvcs"] == "TTM"
    assert payload["ma_kh"] == "123"
    assert payload["so_ct"] == "SO001"
    assert payload["ngay_ct"] == "2025-11-03"
    assert payload["ma_nt"] == "VND"
    assert payload["ty_gia"] == 1
    assert payload["ma_kenh"] == "TTM01"

    detail = payload["detail"][0]
    assert detail["dong"] == 1
    assert detail["ma_vt"] == "MN0001"
    assert detail["ma_kho"] == "K01"
    assert detail["tk_chiet_khau"] == "521113"
    assert detail["ma_ck03"] == "VIP MP"
    assert detail["ck03_nt"] == 50000.0
    assert "ma_ck05" not in detail
    assert detail["ck05_nt"] == 0.0
    assert detail["ma_lo"] == ""
    assert detail["so_serial"] == ""


def test_credit_advice_carries_bank_details(mapper, document):
    payment = PaymentRecord(order_code="SO001", method_code="visa", amount=Decimal("200000"), ref_no="REF1")
    method = PaymentMethodInfo(code="VISA", document_type="Giấy báo có", bank_unit="VCB", partner_code="NH01")

    payload = mapper.credit_advice_payload(document, payment, method)

    assert payload["ma_httt"] == "VISA"
    assert payload["tien"] == 200000.0
    assert payload["so_tham_chieu"] == "REF1"
    assert payload["ma_ngan_hang"] == "VCB"
    assert payload["ma_doi_tac"] == "NH01"
    assert "ky" not in payload


def test_stock_payload_maps_warehouses(mapper, document):
    movements = [make_movement(qty=Decimal("-2"), batch_serial="LOT1")]

    payload = mapper.stock_payload(document, "XK001", MovementType.OUT, movements, {"KHO01": "K01"})

    assert payload["so_ct"] == "XK001"
    assert payload["so_ct_goc"] == "SO001"
    assert payload["ma_nx"] == "1111"
    assert payload["detail"] == [
        {"ma_vt": "MN0001", "ma_kho": "K01", "so_luong": 2.0, "ma_lo": "LOT1", "so_serial": ""}
    ]


def test_stock_receipt_reason(mapper, document):
    payload = mapper.stock_payload(document, "NK001", MovementType.IN, [make_movement(qty=Decimal("1"))])

    assert payload["ma_nx"] == "1112"


@pytest.mark.parametrize(
    "code, expected",
    [
        ("FBV TT VCHB-2511", "VC HB"),
        ("VCKM", "VC KM"),
        ("R601ECOM-X.I", "R601ECOM"),
        ("R601KM.I", "R601KM.I"),
    ],
)
def test_normalize_bucket1_code(code, expected):
    assert normalize_bucket1_code(code) == expected


def test_collect_promotion_codes_skips_voucher_bucket_and_investment_gift():
    payload = {
        "detail": [
            {"ma_ctkm_th": "TT DAU TU", "ma_ck01": "FBV TT VCHB-2511", "ma_ck03": "VIP MP", "ma_ck05": "VC DV"},
            {"ma_ctkm_th": "R601KM", "ma_ck01": "R601KM.I"},
        ]
    }

    assert collect_promotion_codes(payload) == ["R601KM", "R601KM.I", "VC HB", "VIP MP"]
