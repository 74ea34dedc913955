import logging
from fastapi import APIRouter, HTTPException, status
from app.models.supplier import Supplier
from app.schemas.response import SuccessResponse
from app.schemas.supplier import SupplierRequest, SupplierResponse, SupplierUpdateRequest
from uuid import UUID

log = logging.getLogger("uvicorn")

router = APIRouter()


def _supplier_data(supplier: Supplier):
    return SupplierResponse.model_validate(supplier).model_dump(mode="json", by_alias=True)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def add_supplier(supplier_data: SupplierRequest):
    """Creates a new supplier record."""
    supplier = await Supplier.create(**supplier_data.model_dump())
    log.info(f"Supplier '{supplier.name}' created with id {supplier.id}.")
    return SuccessResponse(data=_supplier_data(supplier))


@router.get("", response_model=SuccessResponse)
async def list_suppliers():
    suppliers = await Supplier.all().order_by("created_at")
    return SuccessResponse(data=[_supplier_data(s) for s in suppliers])


@router.get("/{supplier_id}", response_model=SuccessResponse)
async def get_supplier(supplier_id: UUID):
    supplier = await Supplier.get_or_none(id=supplier_id)
    if not supplier:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Supplier not found")
    return SuccessResponse(data=_supplier_data(supplier))


@router.put("/{supplier_id}", response_model=SuccessResponse)
async def update_supplier(supplier_id: UUID, supplier_data: SupplierUpdateRequest):
    supplier = await Supplier.get_or_none(id=supplier_id)
    if not supplier:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Supplier not found")

    supplier.update_from_dict(supplier_data.model_dump(exclude_none=True))
    await supplier.save()
    return SuccessResponse(data=_supplier_data(supplier))


@router.delete("/{supplier_id}", response_model=SuccessResponse)
async def delete_supplier(supplier_id: UUID):
    """
    Deletes a supplier. Items referencing it are left as they are and will
    show a null supplier from then on.
    """
    deleted = await Supplier.filter(id=supplier_id).delete()
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Supplier not found")
    log.info(f"Supplier {supplier_id} deleted.")
    return SuccessResponse(data={"message": "Supplier deleted successfully"})
