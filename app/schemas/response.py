from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, List, Optional
import uuid

def _rid():
    return uuid.uuid4().hex


class CamelModel(BaseModel):
    """Base schema exchanging camelCase JSON while accepting snake_case too."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class SuccessResponse(BaseModel):
    """Simple success response wrapper with just data, success, and request_id"""
    success: Optional[bool] = Field(default=True)
    request_id: str = Field(default_factory=_rid)
    data: Optional[Any] = None


class SyncFailureData(CamelModel):
    """An item whose low stock check failed after its data was written."""
    item_id: str
    name: str
    error: str


class SyncResultData(CamelModel):
    created: int = 0
    updated: int = 0
    skipped: int = 0
    partial: bool = False
    failures: List[SyncFailureData] = Field(default_factory=list)


class BatchData(CamelModel):
    """Body of bulk create/update responses: one slot per request entry."""
    items: List[Optional[Any]]
    result: SyncResultData


class ImportData(CamelModel):
    message: str
    result: SyncResultData
