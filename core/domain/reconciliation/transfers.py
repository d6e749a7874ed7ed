"""Grouping of inter-warehouse transfer movements into ledger requests."""
import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from core.domain.value_objects import TransferRequest, WarehouseMovement

logger = logging.getLogger(__name__)


@dataclass
class TransferGrouping:
    requests: list[TransferRequest] = field(default_factory=list)
    skipped: int = 0


def group_transfers(
    movements: Iterable[WarehouseMovement],
    warehouse_map: Optional[Mapping[str, str]] = None,
) -> TransferGrouping:
    """
    Group transfer movements by order code.

    All transfer movements of one order become one multi-line request;
    source and target warehouses come from the first line. Transfers
    without a related stock code cannot be posted and are counted as
    skipped.
    """
    mapping = warehouse_map or {}
    grouped: dict[str, list[WarehouseMovement]] = {}
    result = TransferGrouping()

    for movement in movements:
        if not movement.is_transfer or movement.is_carry_forward:
            continue
        if not movement.related_stock_code:
            logger.warning(
                f"[TRANSFER] {movement.order_code}/{movement.doc_code}: "
                f"no related stock code, skipping"
            )
            result.skipped += 1
            continue
        grouped.setdefault(movement.order_code, []).append(movement)

    for order_code, lines in grouped.items():
        first = lines[0]
        result.requests.append(
            TransferRequest(
                order_code=order_code,
                source_warehouse=mapping.get(first.stock_code, first.stock_code),
                target_warehouse=mapping.get(first.related_stock_code, first.related_stock_code),
                lines=tuple(lines),
            )
        )
    return result
