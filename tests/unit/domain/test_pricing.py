"""Tests for price reconciliation, transaction type and line attributes."""

from decimal import Decimal

from core.domain.accounting import resolve_batch_serial, resolve_warehouse_code
from core.domain.accounting.pricing import resolve_price, resolve_transaction_type
from core.domain.enums import OrderCategory, ProductKind
from core.domain.value_objects import PriceResolution
from tests.mocks.factories import make_product, make_sale


class TestResolvePrice:

    def test_standard_retail_keeps_recorded_price(self):
        sale = make_sale(qty=Decimal("2"), unit_price=Decimal("100"), subtotal=Decimal("200"))

        price = resolve_price(sale, OrderCategory.STANDARD_RETAIL)

        assert price == PriceResolution(unit_price=Decimal("100"), subtotal=Decimal("200"))

    def test_subtotal_falls_back_to_line_total_then_revenue(self):
        sale = make_sale(subtotal=Decimal("0"), line_total=Decimal("0"), revenue=Decimal("180"))

        price = resolve_price(sale, OrderCategory.STANDARD_RETAIL)

        assert price.subtotal == Decimal("180")

    def test_zero_price_rebuilt_from_gross_for_non_standard_orders(self):
        sale = make_sale(
            qty=Decimal("2"),
            unit_price=Decimal("0"),
            subtotal=Decimal("150"),
            line_total=Decimal("0"),
            revenue=Decimal("150"),
            other_disc_amt=Decimal("30"),
            grade_disc_amt=Decimal("20"),
        )

        price = resolve_price(sale, OrderCategory.SERVICE_CONVERSION)

        assert price.unit_price == Decimal("75")
        assert price.subtotal == Decimal("150")

    def test_zero_price_standard_retail_derived_from_subtotal(self):
        sale = make_sale(qty=Decimal("4"), unit_price=Decimal("0"), subtotal=Decimal("100"))

        price = resolve_price(sale, OrderCategory.STANDARD_RETAIL)

        assert price.unit_price == Decimal("25")

    def test_point_exchange_posts_at_zero(self):
        price = resolve_price(make_sale(), OrderCategory.POINT_EXCHANGE)

        assert price == PriceResolution(unit_price=Decimal("0"), subtotal=Decimal("0"))

    def test_subtotal_rebuilt_from_price(self):
        sale = make_sale(
            qty=Decimal("3"),
            unit_price=Decimal("10"),
            subtotal=Decimal("0"),
            line_total=Decimal("0"),
            revenue=Decimal("0"),
        )

        assert resolve_price(sale, OrderCategory.STANDARD_RETAIL).subtotal == Decimal("30")


class TestTransactionType:

    def _type(self, sale, category, kind, unit_price="100", is_wholesale=False, product=None):
        price = PriceResolution(unit_price=Decimal(unit_price), subtotal=Decimal(unit_price))
        return resolve_transaction_type(sale, category, kind, price, is_wholesale, product)

    def test_service_conversion_depends_on_sign(self):
        assert self._type(make_sale(qty=Decimal("-1")), OrderCategory.SERVICE_CONVERSION, None) == "11"
        assert self._type(make_sale(qty=Decimal("1")), OrderCategory.CARD_SPLIT, None) == "12"

    def test_wholesale_ecode(self):
        product = make_product(material_type="94")
        assert self._type(
            make_sale(), OrderCategory.UNKNOWN, ProductKind.GOODS, is_wholesale=True, product=product
        ) == "04"

    def test_standard_retail_by_product_kind(self):
        sale = make_sale()
        assert self._type(sale, OrderCategory.STANDARD_RETAIL, ProductKind.GOODS) == "01"
        assert self._type(sale, OrderCategory.STANDARD_RETAIL, ProductKind.SERVICE) == "02"
        assert self._type(sale, OrderCategory.STANDARD_RETAIL, ProductKind.VOUCHER) == "03"

    def test_fee_waived_service(self):
        sale = make_sale()
        assert self._type(sale, OrderCategory.FEE_WAIVED_SERVICE, ProductKind.SERVICE, unit_price="0") == "06"
        assert self._type(sale, OrderCategory.FEE_WAIVED_SERVICE, ProductKind.SERVICE) == "01"

    def test_default(self):
        assert self._type(make_sale(), OrderCategory.UNKNOWN, None) == "01"


def test_card_split_uses_department_warehouse():
    assert resolve_warehouse_code(OrderCategory.CARD_SPLIT, "K01", "K02", "123") == "B123"


def test_warehouse_code_prefers_movement_then_sale():
    assert resolve_warehouse_code(OrderCategory.STANDARD_RETAIL, "K01", "K02", None) == "K01"
    assert resolve_warehouse_code(OrderCategory.STANDARD_RETAIL, None, "K02", None) == "K02"
    assert resolve_warehouse_code(OrderCategory.STANDARD_RETAIL, None, None, None) == ""


def test_batch_or_serial_by_tracking_flags():
    batch_product = make_product(track_batch=True)
    serial_product = make_product(track_serial=True)

    assert resolve_batch_serial("LOT1", batch_product) == ("LOT1", None)
    assert resolve_batch_serial("SN1", serial_product) == (None, "SN1")
    assert resolve_batch_serial("X", make_product()) == (None, None)
    assert resolve_batch_serial(None, batch_product) == (None, None)
