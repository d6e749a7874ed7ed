from enum import Enum


class ProductKind(str, Enum):
    """Ledger product type: goods, service or voucher."""

    GOODS = "I"
    SERVICE = "S"
    VOUCHER = "V"

    @classmethod
    def parse(cls, value: str | None) -> "ProductKind | None":
        normalized = (value or "").strip().upper()
        for member in cls:
            if member.value == normalized:
                return member
        return None

    @property
    def suffix(self) -> str:
        """Promotion-code suffix for this product type."""
        return f".{self.value}"
