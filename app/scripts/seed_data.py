# scripts/seed_data.py
import asyncio
from app.core.db import init_db, close_db
from app.models.supplier import Supplier
from app.services.sync_engine import ItemDescriptor, sync_by_name

async def seed():
    # Create suppliers
    acme, _ = await Supplier.get_or_create(name="Acme Hardware", defaults={"contact_info": "orders@acme.example", "address": "12 Forge Lane"})
    north, _ = await Supplier.get_or_create(name="Northwind Supplies", defaults={"contact_info": "+1 555 0100"})
    print("Suppliers:", str(acme.id), str(north.id))

    # Upsert by name so re-running resets the quantities instead of duplicating items
    result = await sync_by_name([
        ItemDescriptor(name="Hex Bolt M8", quantity=250, supplier_id=acme.id, price=0.12, low_stock_threshold=100),
        ItemDescriptor(name="Wood Screw 40mm", quantity=3, supplier_id=acme.id, price=0.05),
        ItemDescriptor(name="Packing Tape", quantity=12, supplier_id=north.id, price=2.49, description="48mm clear"),
    ])
    print("Inventory seeded:", result.to_dict())

async def main():
    await init_db()
    await seed()
    await close_db()

if __name__ == "__main__":
    asyncio.run(main())
