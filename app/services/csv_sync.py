import logging
from typing import Dict, Iterator, List, Set
from uuid import UUID

from app.models.inventory import InventoryItem
from app.models.supplier import Supplier
from app.services.csv_codec import COL_NAME, COL_SUPPLIER, COL_SUPPLIER_ID, iter_export, parse_uuid, row_to_descriptor
from app.services.inventory_service import load_suppliers
from app.services.sync_engine import SyncResult, sync_by_name

log = logging.getLogger(__name__)


async def _stored_names(rows: List[Dict[str, str]]) -> Set[str]:
    names = list({row.get(COL_NAME) for row in rows if row.get(COL_NAME)})
    if not names:
        return set()
    return set(await InventoryItem.filter(name__in=names).values_list("name", flat=True))


async def _supplier_ids_by_name(rows: List[Dict[str, str]]) -> Dict[str, UUID]:
    """Resolves the Supplier name column for rows lacking a usable Supplier ID."""
    names = {
        row.get(COL_SUPPLIER)
        for row in rows
        if row.get(COL_SUPPLIER) and parse_uuid(row.get(COL_SUPPLIER_ID)) is None
    }
    if not names:
        return {}
    resolved: Dict[str, UUID] = {}
    for supplier in await Supplier.filter(name__in=list(names)).order_by("created_at"):
        resolved.setdefault(supplier.name, supplier.id)
    return resolved


async def import_inventory_csv(rows: List[Dict[str, str]]) -> SyncResult:
    """
    Upserts parsed CSV rows by item name.

    Supplier names are only looked up for rows that will create an item.
    Names are not unique, so a row updating a stored item keeps its
    supplier unless it gives an explicit Supplier ID.
    """
    stored = await _stored_names(rows)
    new_rows = [row for row in rows if row.get(COL_NAME) not in stored]
    supplier_ids = await _supplier_ids_by_name(new_rows)
    descriptors = [
        row_to_descriptor(row, None if row.get(COL_NAME) in stored else supplier_ids)
        for row in rows
    ]
    result = await sync_by_name(descriptors)
    log.info(f"CSV import of {len(rows)} rows finished: {result.to_dict()}")
    return result


async def export_inventory_csv() -> Iterator[str]:
    items = await InventoryItem.all().order_by("created_at")
    suppliers = await load_suppliers(items)
    return iter_export(items, suppliers)
