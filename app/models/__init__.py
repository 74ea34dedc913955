# app/models/__init__.py
from .inventory import InventoryItem
from .supplier import Supplier

# Export all models
__all__ = [
    "InventoryItem",
    "Supplier",
]
