from tortoise import fields, models
import uuid


class InventoryItem(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    # Upsert key for CSV imports; not unique at the database level
    name = fields.CharField(max_length=255, db_index=True)
    quantity = fields.IntField(default=0)
    # Plain reference: deleting a supplier leaves items pointing at it
    supplier_id = fields.UUIDField()
    price = fields.FloatField()
    description = fields.TextField(null=True)
    low_stock_threshold = fields.IntField(default=5)
    is_low_stock = fields.BooleanField(default=False) # Derived from quantity < low_stock_threshold
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "inventory_items"
        indexes = [
            ("is_low_stock",),  # Low stock alert listing
            ("supplier_id",),
        ]
