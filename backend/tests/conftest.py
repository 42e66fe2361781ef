"""
Doula JSON Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped, fresh per test):
    data_dir ─→ store ─→ bookings_service
        │          └──→ test_app ─→ test_client
        └──→ test_settings ─┘
"""

import os
import tempfile

# Override settings BEFORE any doula_api import: importing doula_api.main
# builds the default app, which creates its data directory.
os.environ["DATA_DIR"] = tempfile.mkdtemp(prefix="doula_api_test_")
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from doula_api.config import Settings
from doula_api.main import create_app
from doula_api.services.collection_store import CollectionStore
from doula_api.services.record_service import RecordService


@pytest.fixture
def data_dir(tmp_path):
    """A fresh, empty data directory for each test."""
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def store(data_dir):
    return CollectionStore(data_dir)


@pytest.fixture
def bookings_service(store):
    return RecordService("bookings", store)


@pytest.fixture
def test_settings(data_dir):
    return Settings(data_dir=str(data_dir))


@pytest.fixture
def test_app(test_settings, store):
    return create_app(app_settings=test_settings, store=store)


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    HTTPX AsyncClient talking to a fresh app over ASGITransport.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/api/bookings")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def write_raw(data_dir):
    """Put arbitrary text into a collection file (for corrupt-file tests)."""

    def _write(name, text):
        path = data_dir / f"{name}.json"
        path.write_text(text, encoding="utf-8")
        return path

    return _write
