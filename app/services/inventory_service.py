import logging
from typing import Any, Dict, Iterable, List
from uuid import UUID

from app.core.config import DEFAULT_LOW_STOCK_THRESHOLD
from app.core.errors import InvalidArgumentError, NotFoundError
from app.models.inventory import InventoryItem
from app.models.supplier import Supplier
from app.services.low_stock import reconcile_low_stock

log = logging.getLogger(__name__)


async def load_suppliers(items: Iterable[InventoryItem]) -> Dict[UUID, Supplier]:
    """
    Fetches the suppliers referenced by items in one query.
    Ids of deleted suppliers are simply absent from the result.
    """
    supplier_ids = {item.supplier_id for item in items if item is not None}
    if not supplier_ids:
        return {}
    suppliers = await Supplier.filter(id__in=list(supplier_ids))
    return {s.id: s for s in suppliers}


async def create_item(values: Dict[str, Any]) -> InventoryItem:
    values = {k: v for k, v in values.items() if v is not None}
    values.setdefault("low_stock_threshold", DEFAULT_LOW_STOCK_THRESHOLD)
    item = await InventoryItem.create(**values)
    await reconcile_low_stock(item)
    log.info(f"Created item {item.id} ({item.name}).")
    return item


async def get_item(item_id: UUID) -> InventoryItem:
    item = await InventoryItem.get_or_none(id=item_id)
    if item is None:
        raise NotFoundError("Item not found")
    return item


async def list_items() -> List[InventoryItem]:
    return await InventoryItem.all().order_by("created_at")


async def list_low_stock_items() -> List[InventoryItem]:
    return await InventoryItem.filter(is_low_stock=True).order_by("quantity")


async def update_item(item_id: UUID, values: Dict[str, Any]) -> InventoryItem:
    """Applies the provided fields and re-evaluates the low stock flag."""
    item = await get_item(item_id)
    item.update_from_dict({k: v for k, v in values.items() if v is not None})
    await item.save()
    await reconcile_low_stock(item)
    return item


async def delete_item(item_id: UUID) -> None:
    deleted = await InventoryItem.filter(id=item_id).delete()
    if not deleted:
        raise NotFoundError("Item not found")
    log.info(f"Deleted item {item_id}.")


async def bulk_delete_items(ids: List[UUID]) -> int:
    deleted = await InventoryItem.filter(id__in=ids).delete()
    log.info(f"Bulk delete removed {deleted} of {len(ids)} requested items.")
    return deleted


async def set_threshold(item_id: UUID, threshold: Any) -> InventoryItem:
    """
    Sets an item's low stock threshold and re-evaluates its flag.

    Changing only the threshold can flip the flag, so the evaluator always
    runs before the item is returned.
    """
    # bool is an int subclass but never a valid threshold
    if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold < 0:
        raise InvalidArgumentError(
            "Invalid low stock threshold value",
            details=[{
                "field": "lowStockThreshold",
                "message": "Low stock threshold must be a non-negative integer",
            }],
        )

    item = await get_item(item_id)
    item.low_stock_threshold = threshold
    await item.save(update_fields=["low_stock_threshold", "updated_at"])
    await reconcile_low_stock(item)
    return item
