import csv
import io
import pytest
from fastapi.testclient import TestClient
from unittest.mock import patch, AsyncMock
from uuid import uuid4

from tortoise.exceptions import OperationalError

from app.main import app
from app.models.inventory import InventoryItem

ITEMS = "/api/v1/items"
SUPPLIERS = "/api/v1/suppliers"


@pytest.fixture
def sync_client():
    return TestClient(app)


def item_body(supplier, **overrides):
    body = {"name": "Hex Bolt", "quantity": 3, "supplierId": str(supplier.id), "price": 0.12}
    body.update(overrides)
    return body


class TestValidation:
    """Requests rejected before any database access."""

    def test_create_item_rejects_bad_fields(self, sync_client):
        response = sync_client.post(ITEMS, json={"name": "", "quantity": -1, "supplierId": "nope", "price": -3})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "validation_error"
        fields = {d["field"] for d in body["error"]["details"]}
        assert fields == {"name", "quantity", "supplierId", "price"}

    def test_bulk_create_requires_items(self, sync_client):
        response = sync_client.post(f"{ITEMS}/bulk", json={"items": []})
        assert response.status_code == 400

    def test_bulk_update_requires_update_data(self, sync_client):
        response = sync_client.put(f"{ITEMS}/bulk", json={"items": [{"id": str(uuid4()), "update": {}}]})
        assert response.status_code == 400

    def test_invalid_item_id(self, sync_client):
        response = sync_client.get(f"{ITEMS}/not-a-uuid")
        assert response.status_code == 400

    def test_negative_threshold(self, sync_client):
        with patch('app.services.inventory_service.get_item', new_callable=AsyncMock) as mock_get_item:
            response = sync_client.put(f"{ITEMS}/{uuid4()}/threshold", json={"lowStockThreshold": -2})

            assert response.status_code == 400
            assert response.json()["error"]["details"][0]["field"] == "lowStockThreshold"
            mock_get_item.assert_not_called()

    def test_import_requires_file(self, sync_client):
        response = sync_client.post(f"{ITEMS}/import/csv")
        assert response.status_code == 400


@pytest.mark.asyncio
class TestItemRoutes:
    async def test_create_and_get_item(self, client, supplier):
        response = await client.post(ITEMS, json=item_body(supplier))

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["isLowStock"] is True
        assert data["lowStockThreshold"] == 5
        assert data["supplier"]["name"] == "Acme Hardware"

        response = await client.get(f"{ITEMS}/{data['id']}")
        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Hex Bolt"

    async def test_get_missing_item(self, client):
        response = await client.get(f"{ITEMS}/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "not_found"

    async def test_update_item(self, client, supplier):
        created = (await client.post(ITEMS, json=item_body(supplier))).json()["data"]

        response = await client.put(f"{ITEMS}/{created['id']}", json={"quantity": 50})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["quantity"] == 50
        assert data["isLowStock"] is False
        assert data["price"] == 0.12

    async def test_update_missing_item(self, client):
        response = await client.put(f"{ITEMS}/{uuid4()}", json={"quantity": 1})
        assert response.status_code == 404

    async def test_bulk_create(self, client, supplier):
        payload = {"items": [item_body(supplier), item_body(supplier, name="Tape", quantity=10)]}

        response = await client.post(f"{ITEMS}/bulk", json=payload)

        assert response.status_code == 201
        data = response.json()["data"]
        assert [i["isLowStock"] for i in data["items"]] == [True, False]
        assert data["result"]["created"] == 2

    async def test_bulk_update_with_unknown_id(self, client, supplier):
        created = (await client.post(ITEMS, json=item_body(supplier, quantity=20))).json()["data"]
        payload = {"items": [
            {"id": created["id"], "update": {"quantity": 2}},
            {"id": str(uuid4()), "update": {"quantity": 9}},
        ]}

        response = await client.put(f"{ITEMS}/bulk", json=payload)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["items"][0]["quantity"] == 2
        assert data["items"][0]["isLowStock"] is True
        assert data["items"][1] is None
        assert data["result"]["skipped"] == 1
        assert data["result"]["updated"] == 1

    async def test_delete_and_bulk_delete(self, client, supplier):
        ids = []
        for name in ("A", "B", "C"):
            ids.append((await client.post(ITEMS, json=item_body(supplier, name=name))).json()["data"]["id"])

        response = await client.delete(f"{ITEMS}/{ids[0]}")
        assert response.status_code == 200
        assert (await client.delete(f"{ITEMS}/{ids[0]}")).status_code == 404

        response = await client.request("DELETE", f"{ITEMS}/bulk", json={"ids": ids})
        assert response.status_code == 200
        assert response.json()["data"]["deleted"] == 2
        assert await InventoryItem.all().count() == 0

    async def test_low_stock_alerts(self, client, supplier):
        await client.post(ITEMS, json=item_body(supplier, name="Low", quantity=1))
        await client.post(ITEMS, json=item_body(supplier, name="Plenty", quantity=100))

        response = await client.get(f"{ITEMS}/alerts/low-stock")

        assert response.status_code == 200
        assert [i["name"] for i in response.json()["data"]] == ["Low"]

    async def test_set_threshold(self, client, supplier):
        created = (await client.post(ITEMS, json=item_body(supplier, quantity=8))).json()["data"]

        response = await client.put(f"{ITEMS}/{created['id']}/threshold", json={"lowStockThreshold": 10})

        assert response.status_code == 200
        assert response.json()["data"]["isLowStock"] is True

    async def test_dangling_supplier_is_null(self, client, supplier):
        created = (await client.post(ITEMS, json=item_body(supplier))).json()["data"]
        assert (await client.delete(f"{SUPPLIERS}/{supplier.id}")).status_code == 200

        response = await client.get(f"{ITEMS}/{created['id']}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["supplier"] is None
        assert data["supplierId"] == str(supplier.id)


@pytest.mark.asyncio
class TestCsvRoutes:
    async def test_export_csv(self, client, supplier):
        await client.post(ITEMS, json=item_body(supplier))

        response = await client.get(f"{ITEMS}/export/csv")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'filename="inventory.csv"' in response.headers["content-disposition"]
        rows = list(csv.DictReader(io.StringIO(response.text)))
        assert rows[0]["Name"] == "Hex Bolt"
        assert rows[0]["Supplier"] == "Acme Hardware"
        assert rows[0]["Is Low Stock"] == "true"

    async def test_import_csv_reports_result_and_cleans_up(self, client, supplier, upload_dir):
        await client.post(ITEMS, json=item_body(supplier, quantity=2))
        text = f"Name,Quantity,Supplier ID,Price\nHex Bolt,40,,\nTape,1,{supplier.id},2.49\n"

        response = await client.post(f"{ITEMS}/import/csv", files={"file": ("stock.csv", text, "text/csv")})

        assert response.status_code == 200
        result = response.json()["data"]["result"]
        assert (result["created"], result["updated"], result["partial"]) == (1, 1, False)
        assert (await InventoryItem.get(name="Hex Bolt")).is_low_stock is False
        assert (await InventoryItem.get(name="Tape")).is_low_stock is True
        assert list(upload_dir.iterdir()) == []

    async def test_import_csv_rejected_row_cleans_up(self, client, upload_dir):
        text = "Name,Quantity\nUnknown,5\n"

        response = await client.post(f"{ITEMS}/import/csv", files={"file": ("stock.csv", text, "text/csv")})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "validation_error"
        assert await InventoryItem.all().count() == 0
        assert list(upload_dir.iterdir()) == []

    async def test_import_csv_rejects_non_utf8_and_cleans_up(self, client, upload_dir):
        content = "Name,Quantity\nCaf\xe9 Mug,5\n".encode("latin-1")

        response = await client.post(f"{ITEMS}/import/csv", files={"file": ("stock.csv", content, "text/csv")})

        assert response.status_code == 400
        assert "UTF-8" in response.json()["error"]["message"]
        assert list(upload_dir.iterdir()) == []

    async def test_import_csv_reports_check_failures(self, client, supplier):
        text = f"Name,Quantity,Supplier ID,Price\nHex Bolt,1,{supplier.id},0.12\n"

        with patch("app.services.sync_engine.reconcile_low_stock", AsyncMock(side_effect=OperationalError("timeout"))):
            response = await client.post(f"{ITEMS}/import/csv", files={"file": ("stock.csv", text, "text/csv")})

        assert response.status_code == 200
        result = response.json()["data"]["result"]
        assert result["partial"] is True
        assert result["created"] == 1
        assert result["failures"][0]["name"] == "Hex Bolt"
        assert result["failures"][0]["error"] == "timeout"
        assert "itemId" in result["failures"][0]

    async def test_import_csv_without_name_column(self, client):
        response = await client.post(f"{ITEMS}/import/csv", files={"file": ("stock.csv", "Qty\n1\n", "text/csv")})
        assert response.status_code == 400


@pytest.mark.asyncio
class TestSupplierRoutes:
    async def test_supplier_crud(self, client):
        response = await client.post(SUPPLIERS, json={"name": "Northwind", "contactInfo": "+1 555 0100"})
        assert response.status_code == 201
        supplier_id = response.json()["data"]["id"]

        response = await client.put(f"{SUPPLIERS}/{supplier_id}", json={"address": "1 Harbour Rd"})
        assert response.status_code == 200
        assert response.json()["data"]["address"] == "1 Harbour Rd"
        assert response.json()["data"]["contactInfo"] == "+1 555 0100"

        response = await client.get(SUPPLIERS)
        assert [s["name"] for s in response.json()["data"]] == ["Northwind"]

        assert (await client.delete(f"{SUPPLIERS}/{supplier_id}")).status_code == 200
        response = await client.get(f"{SUPPLIERS}/{supplier_id}")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "http_error"

    async def test_supplier_requires_contact_info(self, client):
        response = await client.post(SUPPLIERS, json={"name": "Northwind"})
        assert response.status_code == 400
