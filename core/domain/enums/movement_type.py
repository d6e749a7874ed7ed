from enum import Enum


class MovementType(str, Enum):
    """Warehouse movement direction (feed `iotype`)."""

    IN = "I"
    OUT = "O"
    TRANSFER = "T"

    @classmethod
    def parse(cls, value: str | None) -> "MovementType":
        """Parse a feed io type, defaulting to OUT for unknown values."""
        normalized = (value or "").strip().upper()
        for member in cls:
            if member.value == normalized:
                return member
        return cls.OUT
