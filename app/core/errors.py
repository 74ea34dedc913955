from typing import Any, Dict, List, Optional


class InventoryError(Exception):
    """Base class for errors the API reports with a structured body."""
    status_code = 500
    code = "server_error"

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidArgumentError(InventoryError):
    """Input is malformed or out of range. Raised before anything is written."""
    status_code = 400
    code = "validation_error"


class NotFoundError(InventoryError):
    status_code = 404
    code = "not_found"


class StoreFailure(InventoryError):
    """A call to the database failed."""
    status_code = 500
    code = "store_error"
