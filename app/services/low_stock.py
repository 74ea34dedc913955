import logging
from typing import Any

from app.models.inventory import InventoryItem

log = logging.getLogger(__name__)


def is_low_stock(quantity: int, threshold: int) -> bool:
    """An item is low on stock when its quantity is strictly below its threshold."""
    return quantity < threshold


async def reconcile_low_stock(item: InventoryItem, conn: Any = None) -> bool:
    """
    Brings the stored is_low_stock flag in line with quantity and threshold.

    Writes only when the flag actually changes, so calling it again on an
    unchanged item is a no-op. Returns True if a write happened. Database
    errors propagate to the caller.
    """
    flag = is_low_stock(item.quantity, item.low_stock_threshold)
    if flag == item.is_low_stock:
        return False

    item.is_low_stock = flag
    await item.save(update_fields=["is_low_stock", "updated_at"], using_db=conn)

    if flag:
        # No push channel exists; the log line is the alert
        log.warning(
            f"LOW STOCK: item {item.id} ({item.name}) has {item.quantity} left, threshold {item.low_stock_threshold}"
        )
    else:
        log.info(f"Item {item.id} ({item.name}) is no longer low on stock.")
    return True
