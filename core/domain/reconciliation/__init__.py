"""Stock movement reconciliation."""

from .line_exploder import LineExploder
from .transfers import TransferGrouping, group_transfers

__all__ = ["LineExploder", "TransferGrouping", "group_transfers"]
