import logging
import os
import shutil
from typing import Dict, Optional
from uuid import UUID, uuid4

from fastapi import APIRouter, File, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse

from app.core.config import UPLOAD_DIR
from app.core.errors import InvalidArgumentError
from app.models.inventory import InventoryItem
from app.models.supplier import Supplier
from app.schemas.inventory import (
    BulkCreateRequest,
    BulkDeleteRequest,
    BulkUpdateRequest,
    ItemCreateRequest,
    ItemResponse,
    ItemUpdateRequest,
    ThresholdRequest,
)
from app.schemas.response import BatchData, ImportData, SuccessResponse, SyncResultData
from app.schemas.supplier import SupplierResponse
from app.services import inventory_service
from app.services.csv_codec import read_rows
from app.services.csv_sync import export_inventory_csv, import_inventory_csv
from app.services.sync_engine import ItemDescriptor, create_items, sync_by_id

log = logging.getLogger("uvicorn")

router = APIRouter()


def _item_data(item: Optional[InventoryItem], suppliers: Dict[UUID, Supplier]):
    """Serializes an item with its supplier embedded (None if the supplier is gone)."""
    if item is None:
        return None
    data = ItemResponse.model_validate(item)
    supplier = suppliers.get(item.supplier_id)
    data.supplier = SupplierResponse.model_validate(supplier) if supplier else None
    return data.model_dump(mode="json", by_alias=True)


async def _items_data(items):
    suppliers = await inventory_service.load_suppliers(items)
    return [_item_data(item, suppliers) for item in items]


# ----------- Collection & bulk routes (registered before /{item_id}) -----------

@router.post("", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_item_endpoint(payload: ItemCreateRequest):
    """Creates a single inventory item and flags it if it starts out low on stock."""
    item = await inventory_service.create_item(payload.model_dump())
    return SuccessResponse(data=(await _items_data([item]))[0])


@router.get("", response_model=SuccessResponse)
async def list_items_endpoint():
    items = await inventory_service.list_items()
    return SuccessResponse(data=await _items_data(items))


@router.post("/bulk", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def bulk_create_endpoint(payload: BulkCreateRequest):
    """Creates many items in one transaction, then checks each for low stock."""
    descriptors = [ItemDescriptor(**entry.model_dump()) for entry in payload.items]
    result, items = await create_items(descriptors)
    log.info(f"Bulk created {result.created} items.")
    data = BatchData(items=await _items_data(items), result=SyncResultData.model_validate(result))
    return SuccessResponse(data=data.model_dump(by_alias=True))


@router.put("/bulk", response_model=SuccessResponse)
async def bulk_update_endpoint(payload: BulkUpdateRequest):
    """
    Updates many items by id. Unknown ids come back as null entries and are
    counted as skipped instead of failing the request.
    """
    updates = [(entry.id, ItemDescriptor(**entry.update.model_dump())) for entry in payload.items]
    result, items = await sync_by_id(updates)
    log.info(f"Bulk update: {result.updated} updated, {result.skipped} skipped.")
    data = BatchData(items=await _items_data(items), result=SyncResultData.model_validate(result))
    return SuccessResponse(data=data.model_dump(by_alias=True))


@router.delete("/bulk", response_model=SuccessResponse)
async def bulk_delete_endpoint(payload: BulkDeleteRequest):
    deleted = await inventory_service.bulk_delete_items(payload.ids)
    return SuccessResponse(data={"deleted": deleted, "message": f"{deleted} items deleted"})


@router.get("/export/csv")
async def export_csv_endpoint():
    """Downloads the whole inventory as inventory.csv."""
    rows = await export_inventory_csv()
    return StreamingResponse(
        rows,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="inventory.csv"'},
    )


def _spool_and_read(upload, upload_path: str):
    """Copies the upload to disk and parses it. Blocking, so run off the event loop."""
    os.makedirs(os.path.dirname(upload_path), exist_ok=True)
    with open(upload_path, "wb") as out:
        shutil.copyfileobj(upload, out)
    try:
        with open(upload_path, newline="", encoding="utf-8-sig") as fh:
            return read_rows(fh)
    except UnicodeDecodeError as e:
        raise InvalidArgumentError("CSV file must be UTF-8 encoded") from e


@router.post("/import/csv", response_model=SuccessResponse)
async def import_csv_endpoint(file: UploadFile = File(...)):
    """
    Upserts items from an uploaded CSV, matching rows to items by name.
    The uploaded copy is removed once the import finishes, whatever the outcome.
    """
    upload_path = os.path.join(UPLOAD_DIR, f"{uuid4().hex}.csv")
    try:
        rows = await run_in_threadpool(_spool_and_read, file.file, upload_path)
        result = await import_inventory_csv(rows)
    finally:
        if os.path.exists(upload_path):
            os.remove(upload_path)

    message = "Inventory updated successfully from CSV file."
    if result.partial:
        message = "Inventory updated from CSV file, but some low stock checks failed."
    data = ImportData(message=message, result=SyncResultData.model_validate(result))
    return SuccessResponse(data=data.model_dump(by_alias=True))


@router.get("/alerts/low-stock", response_model=SuccessResponse)
async def low_stock_alerts_endpoint():
    """Lists every item currently flagged as low on stock."""
    items = await inventory_service.list_low_stock_items()
    return SuccessResponse(data=await _items_data(items))


# ----------- Single item routes -----------

@router.get("/{item_id}", response_model=SuccessResponse)
async def get_item_endpoint(item_id: UUID):
    item = await inventory_service.get_item(item_id)
    return SuccessResponse(data=(await _items_data([item]))[0])


@router.put("/{item_id}", response_model=SuccessResponse)
async def update_item_endpoint(item_id: UUID, payload: ItemUpdateRequest):
    item = await inventory_service.update_item(item_id, payload.model_dump(exclude_none=True))
    return SuccessResponse(data=(await _items_data([item]))[0])


@router.delete("/{item_id}", response_model=SuccessResponse)
async def delete_item_endpoint(item_id: UUID):
    await inventory_service.delete_item(item_id)
    return SuccessResponse(data={"message": "Item deleted successfully"})


@router.put("/{item_id}/threshold", response_model=SuccessResponse)
async def set_threshold_endpoint(item_id: UUID, payload: ThresholdRequest):
    """Sets the low stock threshold; the item's flag is re-evaluated immediately."""
    item = await inventory_service.set_threshold(item_id, payload.low_stock_threshold)
    return SuccessResponse(data=(await _items_data([item]))[0])
