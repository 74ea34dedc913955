import uuid
from datetime import datetime
from typing import Optional
from pydantic import Field

from app.schemas.response import CamelModel


class SupplierRequest(CamelModel):
    name: str = Field(..., min_length=1, description="Supplier name.")
    contact_info: str = Field(..., min_length=1, description="Phone number, email or contact person.")
    address: Optional[str] = None


class SupplierUpdateRequest(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    contact_info: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = None


class SupplierResponse(CamelModel):
    id: uuid.UUID
    name: str
    contact_info: str
    address: Optional[str] = None
    created_at: datetime
    updated_at: datetime
