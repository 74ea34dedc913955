"""
Bulk synchronization of inventory items.

A batch is applied in two phases. The write phase runs inside one
transaction and either fully succeeds or raises StoreFailure. The
reconcile phase then runs the low-stock evaluator over every affected
record; a failure on one record is recorded in the SyncResult and the
remaining records are still evaluated.
"""
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

from tortoise.exceptions import BaseORMException
from tortoise.transactions import in_transaction

from app.core.config import DEFAULT_LOW_STOCK_THRESHOLD
from app.core.errors import InvalidArgumentError, StoreFailure
from app.models.inventory import InventoryItem
from app.services.low_stock import reconcile_low_stock

log = logging.getLogger(__name__)

# Fields a new record cannot be created without
REQUIRED_ON_CREATE = ("supplier_id", "price")


@dataclass
class ItemDescriptor:
    """Incoming item data. None means the field was not provided."""
    name: Optional[str] = None
    quantity: Optional[int] = None
    supplier_id: Optional[UUID] = None
    price: Optional[float] = None
    description: Optional[str] = None
    low_stock_threshold: Optional[int] = None

    def present_fields(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class SyncFailure:
    item_id: str
    name: str
    error: str


@dataclass
class SyncResult:
    created: int = 0
    updated: int = 0
    skipped: int = 0
    failures: List[SyncFailure] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        """Data was written but some items could not be reconciled."""
        return bool(self.failures)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "partial": self.partial,
            "failures": [
                {"itemId": f.item_id, "name": f.name, "error": f.error} for f in self.failures
            ],
        }


async def reconcile_all(items: Iterable[InventoryItem], result: SyncResult) -> None:
    """Runs the evaluator over each item in turn, collecting failures into result."""
    for item in items:
        try:
            await reconcile_low_stock(item)
        except BaseORMException as e:
            log.warning(f"Low stock check failed for item {item.id} ({item.name}): {e}")
            result.failures.append(SyncFailure(item_id=str(item.id), name=item.name, error=str(e)))


async def create_items(descriptors: Sequence[ItemDescriptor]) -> Tuple[SyncResult, List[InventoryItem]]:
    """Creates every descriptor as a new record, then reconciles them."""
    result = SyncResult()
    try:
        async with in_transaction() as conn:
            created = []
            for descriptor in descriptors:
                values = descriptor.present_fields()
                values.setdefault("low_stock_threshold", DEFAULT_LOW_STOCK_THRESHOLD)
                created.append(await InventoryItem.create(using_db=conn, **values))
    except BaseORMException as e:
        raise StoreFailure(f"Bulk create failed: {e}") from e

    result.created = len(created)
    await reconcile_all(created, result)
    return result, created


async def sync_by_id(
    updates: Sequence[Tuple[UUID, ItemDescriptor]]
) -> Tuple[SyncResult, List[Optional[InventoryItem]]]:
    """
    Applies each descriptor to the record with the given id.

    Fields the descriptor leaves out keep their stored values. Ids that do
    not resolve produce a None slot, are counted as skipped and are left
    out of the reconcile phase. An id may repeat; its entries apply in
    order and the record is reconciled once, from its final stored state.
    """
    result = SyncResult()
    resolved: List[Optional[UUID]] = []
    try:
        async with in_transaction() as conn:
            for item_id, descriptor in updates:
                item = await InventoryItem.get_or_none(id=item_id).using_db(conn)
                if item is None:
                    result.skipped += 1
                    resolved.append(None)
                    continue
                item.update_from_dict(descriptor.present_fields())
                await item.save(using_db=conn)
                result.updated += 1
                resolved.append(item.id)
    except BaseORMException as e:
        raise StoreFailure(f"Bulk update failed: {e}") from e

    updated_ids = list(dict.fromkeys(i for i in resolved if i is not None))
    if not updated_ids:
        return result, [None] * len(resolved)

    # Fresh read: earlier copies of a repeated id hold superseded values
    affected = {item.id: item for item in await InventoryItem.filter(id__in=updated_ids)}
    await reconcile_all(affected.values(), result)
    return result, [affected.get(i) if i is not None else None for i in resolved]


async def sync_by_name(descriptors: Sequence[ItemDescriptor]) -> SyncResult:
    """
    Upserts descriptors keyed by item name.

    A descriptor whose name matches a stored record overwrites that
    record's fields with the ones it provides; otherwise a new record is
    created with defaults for what is missing. When several records share
    a name, the oldest one is updated. Every record carrying one of the
    batch's names is reconciled afterwards.
    """
    result = SyncResult()
    names = []
    for position, descriptor in enumerate(descriptors, start=1):
        if not descriptor.name:
            raise InvalidArgumentError(
                "Every row must have a name",
                details=[{"row": position, "field": "name", "message": "Name is required"}],
            )
        if descriptor.name not in names:
            names.append(descriptor.name)

    if not names:
        return result

    try:
        async with in_transaction() as conn:
            existing = await InventoryItem.filter(name__in=names).order_by("created_at").using_db(conn)
            by_name: Dict[str, InventoryItem] = {}
            for item in existing:
                by_name.setdefault(item.name, item)

            for position, descriptor in enumerate(descriptors, start=1):
                values = descriptor.present_fields()
                item = by_name.get(descriptor.name)
                if item is not None:
                    item.update_from_dict(values)
                    await item.save(using_db=conn)
                    result.updated += 1
                    continue

                missing = [f for f in REQUIRED_ON_CREATE if f not in values]
                if missing:
                    # Raising here rolls back anything this batch already wrote
                    raise InvalidArgumentError(
                        f"Row {position} ('{descriptor.name}') matches no item and cannot create one",
                        details=[
                            {"row": position, "field": f, "message": f"{f} is required for a new item"}
                            for f in missing
                        ],
                    )
                values.setdefault("low_stock_threshold", DEFAULT_LOW_STOCK_THRESHOLD)
                by_name[descriptor.name] = await InventoryItem.create(using_db=conn, **values)
                result.created += 1
    except BaseORMException as e:
        raise StoreFailure(f"Inventory sync failed: {e}") from e

    affected = await InventoryItem.filter(name__in=names)
    await reconcile_all(affected, result)
    log.info(
        f"Synced {len(descriptors)} rows by name: {result.created} created, "
        f"{result.updated} updated, {len(result.failures)} reconcile failures"
    )
    return result
