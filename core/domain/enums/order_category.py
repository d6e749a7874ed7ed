"""
Order Category Enum.

Closed set of order types recognized by the accounting rules. Free-text
order-type labels are mapped onto exactly one member by
core.domain.accounting.order_types.classify_order_type.
"""
from enum import Enum


class OrderCategory(str, Enum):
    """Order type categories."""

    POINT_EXCHANGE = "point_exchange"
    CONTAINER_EXCHANGE = "container_exchange"
    INVESTMENT = "investment"
    BIRTHDAY_GIFT = "birthday_gift"
    SERVICE_CONVERSION = "service_conversion"
    CARD_SPLIT = "card_split"
    DEALER_WHOLESALE = "dealer_wholesale"
    PROMO_SHIPMENT = "promo_shipment"
    ACCOUNT_SALE = "account_sale"
    MARKETPLACE = "marketplace"
    FEE_WAIVED_SERVICE = "fee_waived_service"
    STANDARD_RETAIL = "standard_retail"
    UNKNOWN = "unknown"

    @property
    def is_exchange(self) -> bool:
        return self in (
            OrderCategory.POINT_EXCHANGE,
            OrderCategory.CONTAINER_EXCHANGE,
            OrderCategory.INVESTMENT,
        )

    @property
    def is_service_like(self) -> bool:
        """Service orders, including conversions and card splits."""
        return self in (
            OrderCategory.FEE_WAIVED_SERVICE,
            OrderCategory.SERVICE_CONVERSION,
            OrderCategory.CARD_SPLIT,
        )
