"""
Doula JSON Backend — HTTP Route Tests
========================================

What:  End-to-end tests of the generated collection routes, GET /api/all,
       /health and the middleware, through the ASGI app.
How:   httpx AsyncClient over ASGITransport; each test gets its own data
       directory and app instance.
"""

import json
import time

import pytest
from httpx import ASGITransport, AsyncClient

from doula_api.config import Settings
from doula_api.main import create_app

COLLECTIONS = ["bookings", "doulas", "services", "paychecks"]


class TestListRoute:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", COLLECTIONS)
    async def test_fresh_collection_is_empty(self, test_client, data_dir, name):
        """GET on a collection with no file yet returns [] and creates the file."""
        response = await test_client.get(f"/api/{name}")

        assert response.status_code == 200
        assert response.json() == []
        assert (data_dir / f"{name}.json").read_text(encoding="utf-8") == "[]"

    @pytest.mark.asyncio
    async def test_corrupt_file_returns_read_error(self, test_client, write_raw):
        write_raw("bookings", "not json")

        response = await test_client.get("/api/bookings")

        assert response.status_code == 500
        assert response.json() == {"error": "read error"}

    @pytest.mark.asyncio
    async def test_unknown_collection_is_404(self, test_client):
        response = await test_client.get("/api/clients")

        assert response.status_code == 404


class TestCreateRoute:

    @pytest.mark.asyncio
    async def test_create_assigns_id(self, test_client):
        before = int(time.time() * 1000)
        response = await test_client.post("/api/bookings", json={"client": "Ann"})
        after = int(time.time() * 1000)

        assert response.status_code == 201
        body = response.json()
        assert before <= body["id"] <= after
        assert body["client"] == "Ann"

        listed = await test_client.get("/api/bookings")
        assert listed.json() == [body]

    @pytest.mark.asyncio
    async def test_create_preserves_supplied_id(self, test_client):
        response = await test_client.post("/api/services", json={"id": "5", "name": "Postpartum"})

        assert response.status_code == 201
        assert response.json() == {"id": "5", "name": "Postpartum"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("supplied_id", [[], {}])
    async def test_create_keeps_empty_container_id(self, test_client, supplied_id):
        """Empty lists and objects are truthy ids and are stored as sent."""
        response = await test_client.post("/api/bookings", json={"id": supplied_id, "n": 1})

        assert response.status_code == 201
        assert response.json() == {"id": supplied_id, "n": 1}

    @pytest.mark.asyncio
    async def test_create_without_body(self, test_client):
        response = await test_client.post("/api/paychecks")

        assert response.status_code == 201
        assert set(response.json()) == {"id"}

    @pytest.mark.asyncio
    async def test_create_rejects_non_object_body(self, test_client):
        response = await test_client.post("/api/paychecks", json=[1, 2])

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_corrupt_file_returns_write_error(self, test_client, write_raw):
        """A read failure during create is still reported as a write error."""
        path = write_raw("paychecks", '{"not": "an array"}')

        response = await test_client.post("/api/paychecks", json={"amount": 100})

        assert response.status_code == 500
        assert response.json() == {"error": "write error"}
        assert path.read_text(encoding="utf-8") == '{"not": "an array"}'


class TestUpdateRoute:

    @pytest.mark.asyncio
    async def test_merge_onto_existing_record(self, test_client):
        await test_client.post("/api/doulas", json={"id": 1, "name": "Ann", "phone": "555"})

        response = await test_client.put("/api/doulas/1", json={"id": 2, "name": "Jane"})

        assert response.status_code == 200
        assert response.json() == {"id": 1, "name": "Jane", "phone": "555"}
        listed = await test_client.get("/api/doulas")
        assert listed.json() == [{"id": 1, "name": "Jane", "phone": "555"}]

    @pytest.mark.asyncio
    async def test_update_unknown_id(self, test_client):
        response = await test_client.put("/api/doulas/42", json={"name": "Jane"})

        assert response.status_code == 404
        assert response.json() == {"error": "not found"}

    @pytest.mark.asyncio
    async def test_update_non_numeric_id(self, test_client):
        await test_client.post("/api/doulas", json={"id": "abc", "name": "Ann"})

        response = await test_client.put("/api/doulas/abc", json={"name": "Jane"})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_skips_non_object_elements(self, test_client, write_raw):
        path = write_raw("bookings", '["x", {"id": 2}]')

        response = await test_client.put("/api/bookings/2", json={"n": 1})

        assert response.status_code == 200
        assert response.json() == {"id": 2, "n": 1}
        assert json.loads(path.read_text(encoding="utf-8")) == ["x", {"id": 2, "n": 1}]

    @pytest.mark.asyncio
    async def test_corrupt_file_returns_update_error(self, test_client, write_raw):
        write_raw("doulas", "[")

        response = await test_client.put("/api/doulas/1", json={"name": "Jane"})

        assert response.status_code == 500
        assert response.json() == {"error": "update error"}


class TestDeleteRoute:

    @pytest.mark.asyncio
    async def test_delete_unknown_id_leaves_file(self, test_client, data_dir):
        await test_client.get("/api/services")

        response = await test_client.delete("/api/services/999999")

        assert response.status_code == 404
        assert response.json() == {"error": "not found"}
        assert (data_dir / "services.json").read_text(encoding="utf-8") == "[]"

    @pytest.mark.asyncio
    async def test_delete_matches_string_id(self, test_client):
        await test_client.post("/api/services", json={"id": "7"})

        response = await test_client.delete("/api/services/7")

        assert response.status_code == 200
        assert response.json() == {"success": True}

    @pytest.mark.asyncio
    async def test_delete_skips_non_object_elements(self, test_client, write_raw):
        path = write_raw("bookings", '[1, {"id": 2}]')

        response = await test_client.delete("/api/bookings/2")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert json.loads(path.read_text(encoding="utf-8")) == [1]

    @pytest.mark.asyncio
    async def test_delete_unknown_id_among_non_object_elements(self, test_client, write_raw):
        write_raw("bookings", '[1, "x", null]')

        response = await test_client.delete("/api/bookings/1")

        assert response.status_code == 404
        assert response.json() == {"error": "not found"}

    @pytest.mark.asyncio
    async def test_corrupt_file_returns_delete_error(self, test_client, write_raw):
        write_raw("services", "{")

        response = await test_client.delete("/api/services/1")

        assert response.status_code == 500
        assert response.json() == {"error": "delete error"}


class TestDoulaLifecycle:

    @pytest.mark.asyncio
    async def test_create_list_delete(self, test_client):
        created = await test_client.post("/api/doulas", json={"name": "Acme Doula"})
        assert created.status_code == 201
        record = created.json()
        assert record["name"] == "Acme Doula"
        assert isinstance(record["id"], int)

        listed = await test_client.get("/api/doulas")
        assert record in listed.json()

        deleted = await test_client.delete(f"/api/doulas/{record['id']}")
        assert deleted.status_code == 200
        assert deleted.json() == {"success": True}

        listed = await test_client.get("/api/doulas")
        assert listed.json() == []


class TestAggregateRoute:

    @pytest.mark.asyncio
    async def test_all_collections_in_one_response(self, test_client):
        for index, name in enumerate(COLLECTIONS, start=1):
            await test_client.post(f"/api/{name}", json={"id": index, "kind": name})

        response = await test_client.get("/api/all")

        assert response.status_code == 200
        assert response.json() == {
            name: [{"id": index, "kind": name}]
            for index, name in enumerate(COLLECTIONS, start=1)
        }

    @pytest.mark.asyncio
    async def test_all_on_fresh_store(self, test_client):
        response = await test_client.get("/api/all")

        assert response.json() == {name: [] for name in COLLECTIONS}

    @pytest.mark.asyncio
    async def test_one_bad_file_fails_everything(self, test_client, write_raw):
        write_raw("services", "???")

        response = await test_client.get("/api/all")

        assert response.status_code == 500
        assert response.json() == {"error": "read error"}


class TestHealthAndMiddleware:

    @pytest.mark.asyncio
    async def test_health(self, test_client, data_dir):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["storage"] == "writable"
        assert body["collections"] == COLLECTIONS
        assert body["data_dir"] == str(data_dir.resolve())

    @pytest.mark.asyncio
    async def test_cors_allows_any_origin(self, test_client):
        response = await test_client.get("/api/bookings", headers={"Origin": "http://elsewhere.example"})

        assert response.headers["access-control-allow-origin"] == "*"

    @pytest.mark.asyncio
    async def test_cors_preflight(self, test_client):
        response = await test_client.options(
            "/api/bookings/1",
            headers={
                "Origin": "http://elsewhere.example",
                "Access-Control-Request-Method": "PUT",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, test_client):
        response = await test_client.get("/api/bookings", headers={"X-Request-ID": "abc12345"})

        assert response.headers["x-request-id"] == "abc12345"

    @pytest.mark.asyncio
    async def test_request_id_generated(self, test_client):
        response = await test_client.get("/api/bookings")

        assert len(response.headers["x-request-id"]) == 8


class TestConfiguredCollections:

    @pytest.mark.asyncio
    async def test_routes_follow_settings(self, data_dir, store):
        app = create_app(
            app_settings=Settings(data_dir=str(data_dir), collections=["clients"]),
            store=store,
        )
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            created = await client.post("/api/clients", json={"id": 1})
            missing = await client.get("/api/bookings")
            everything = await client.get("/api/all")

        assert created.status_code == 201
        assert missing.status_code == 404
        assert everything.json() == {"clients": [{"id": 1}]}
        assert json.loads((data_dir / "clients.json").read_text(encoding="utf-8")) == [{"id": 1}]
