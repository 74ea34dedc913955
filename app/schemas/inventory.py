import uuid
from datetime import datetime
from typing import List, Optional
from pydantic import Field, field_validator

from app.schemas.response import CamelModel
from app.schemas.supplier import SupplierResponse


class ItemCreateRequest(CamelModel):
    """Schema for creating a single inventory item."""
    name: str = Field(..., min_length=1, description="Item name, also the match key for CSV imports.")
    quantity: int = Field(..., ge=0, description="Units in stock.")
    supplier_id: uuid.UUID = Field(..., description="ID of the supplier providing this item.")
    price: float = Field(..., ge=0, description="Unit price.")
    description: Optional[str] = None
    low_stock_threshold: Optional[int] = Field(None, ge=0, description="Stock level below which the item is flagged.")


class ItemUpdateRequest(CamelModel):
    """Partial update: only the provided fields change."""
    name: Optional[str] = Field(None, min_length=1)
    quantity: Optional[int] = Field(None, ge=0)
    supplier_id: Optional[uuid.UUID] = None
    price: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    low_stock_threshold: Optional[int] = Field(None, ge=0)


class BulkCreateRequest(CamelModel):
    items: List[ItemCreateRequest] = Field(..., min_length=1)


class BulkUpdateEntry(CamelModel):
    id: uuid.UUID
    update: ItemUpdateRequest

    @field_validator("update")
    @classmethod
    def update_not_empty(cls, value: ItemUpdateRequest) -> ItemUpdateRequest:
        if not value.model_dump(exclude_none=True):
            raise ValueError("Each update must have update data")
        return value


class BulkUpdateRequest(CamelModel):
    items: List[BulkUpdateEntry] = Field(..., min_length=1)


class BulkDeleteRequest(CamelModel):
    ids: List[uuid.UUID] = Field(..., min_length=1)


class ThresholdRequest(CamelModel):
    # Range is checked by the threshold setter so the rule lives in one place
    low_stock_threshold: int


class ItemResponse(CamelModel):
    id: uuid.UUID
    name: str
    quantity: int
    supplier_id: uuid.UUID
    supplier: Optional[SupplierResponse] = None
    price: float
    description: Optional[str] = None
    low_stock_threshold: int
    is_low_stock: bool
    created_at: datetime
    updated_at: datetime

