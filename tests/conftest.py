import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.core.db import close_db, init_db
from app.main import app
from app.models.supplier import Supplier


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory SQLite database for each test."""
    await init_db("sqlite://:memory:")
    yield
    await close_db()


@pytest_asyncio.fixture
async def supplier(db):
    return await Supplier.create(name="Acme Hardware", contact_info="orders@acme.example")


@pytest_asyncio.fixture
async def client(db):
    # ASGITransport skips the lifespan, so the test database set up above is used
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    """Keep uploaded CSV copies out of the working directory."""
    path = tmp_path / "uploads"
    monkeypatch.setattr("app.api.v1.items.UPLOAD_DIR", str(path))
    return path
