from ledger_sdk.utils.datetime import utc_now
from ledger_sdk.utils.numbers import ZERO, is_zero, to_decimal

__all__ = ["ZERO", "is_zero", "to_decimal", "utc_now"]
