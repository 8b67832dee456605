"""
Integration Tests: API Endpoints

Tests for the v1 storage RPC methods, health endpoints and metrics,
including request validation and error mapping.
"""

import base64
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from app import create_app
from config.settings import Settings, StorageSettings


def b64(content: bytes) -> str:
    return base64.b64encode(content).decode("ascii")


def _app_with(storage_root: Path, **storage):
    settings = Settings(environment="test", storage=StorageSettings(root=storage_root, **storage))
    return create_app(settings)


def _client(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


# =============================================================================
# Storage RPC Tests
# =============================================================================

class TestStorageEndpoints:
    """Test CreateFile, ReadFile, UpdateFile, DeleteFile and ListFiles."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_hello_world_lifecycle(self, client: AsyncClient, storage_root: Path):
        """Test the create, read, update, delete sequence."""
        response = await client.post("/v1/storage/CreateFile", json={"file": b64(b"hello"), "extension": ""})
        assert response.status_code == 200
        created = response.json()
        assert created["extension"] == ".txt"
        assert len(created["id"]) == 16
        assert (storage_root / f"{created['id']}.txt").read_bytes() == b"hello"

        key = {"id": created["id"], "extension": ".txt"}

        response = await client.post("/v1/storage/ReadFile", json=key)
        assert response.status_code == 200
        assert base64.b64decode(response.json()["file"]) == b"hello"

        response = await client.post("/v1/storage/UpdateFile", json={**key, "file": b64(b"world")})
        assert response.status_code == 200
        assert response.json() == {}

        response = await client.post("/v1/storage/ReadFile", json=key)
        assert base64.b64decode(response.json()["file"]) == b"world"

        response = await client.post("/v1/storage/DeleteFile", json=key)
        assert response.status_code == 200

        response = await client.post("/v1/storage/ReadFile", json=key)
        assert response.status_code == 404
        assert response.json()["error"]["status"] == "NOT_FOUND"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_create_extension_normalization(self, client: AsyncClient):
        """Test extension handling on create."""
        for given, expected in ((None, ".txt"), ("pdf", ".pdf"), (".png", ".png")):
            body = {"file": b64(b"x")}
            if given is not None:
                body["extension"] = given

            response = await client.post("/v1/storage/CreateFile", json=body)

            assert response.status_code == 200
            assert response.json()["extension"] == expected

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_create_empty_file(self, client: AsyncClient):
        """Test that an absent payload stores an empty file."""
        response = await client.post("/v1/storage/CreateFile", json={})
        created = response.json()

        response = await client.post("/v1/storage/ReadFile", json=created)

        assert response.status_code == 200
        assert response.json()["file"] == ""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_read_unknown(self, client: AsyncClient):
        """Test not found error body."""
        response = await client.post("/v1/storage/ReadFile", json={"id": "doesnotexist0000", "extension": "txt"})

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == 404
        assert error["status"] == "NOT_FOUND"
        assert error["type"] == "ObjectNotFoundError"
        assert "doesnotexist0000.txt" in error["message"]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_delete_missing(self, client: AsyncClient):
        """Test that deleting a missing object is an internal error."""
        response = await client.post("/v1/storage/DeleteFile", json={"id": "doesnotexist0000", "extension": ".txt"})

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["status"] == "INTERNAL"
        assert error["message"].startswith("Failed to delete file")

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_update_missing_creates(self, client: AsyncClient, storage_root: Path):
        """Test default update semantics for a missing object."""
        response = await client.post(
            "/v1/storage/UpdateFile",
            json={"id": "handpickedid0001", "extension": "txt", "file": b64(b"new")}
        )

        assert response.status_code == 200
        assert (storage_root / "handpickedid0001.txt").read_bytes() == b"new"

    @pytest.mark.integration
    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", [
        {"id": "../../etc/passwd", "extension": ""},
        {"id": "abc", "extension": "/../../x"},
        {"id": "", "extension": ".txt"},
        {"id": "nul\x00byte", "extension": ".txt"},
    ])
    async def test_invalid_key(self, client: AsyncClient, key):
        """Test invalid id or extension."""
        response = await client.post("/v1/storage/ReadFile", json=key)

        assert response.status_code == 400
        assert response.json()["error"]["status"] == "INVALID_ARGUMENT"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_dotted_id(self, client: AsyncClient, storage_root: Path):
        """Test that dotted IDs are ordinary keys."""
        response = await client.post("/v1/storage/ReadFile", json={"id": "un.known", "extension": ".txt"})
        assert response.status_code == 404
        assert response.json()["error"]["status"] == "NOT_FOUND"

        response = await client.post(
            "/v1/storage/UpdateFile",
            json={"id": "my.file", "extension": ".txt", "file": b64(b"mine")}
        )
        assert response.status_code == 200
        assert (storage_root / "my.file.txt").read_bytes() == b"mine"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_name_too_long(self, client: AsyncClient):
        """Test that a name the filesystem rejects is an internal error."""
        response = await client.post("/v1/storage/ReadFile", json={"id": "x" * 300, "extension": ".txt"})

        assert response.status_code == 500
        assert response.json()["error"]["status"] == "INTERNAL"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_create_any_extension(self, client: AsyncClient, storage_root: Path):
        """Test create with a long extension and with a bare dot."""
        for extension in ("e" * 40, "."):
            response = await client.post("/v1/storage/CreateFile", json={"file": b64(b"x"), "extension": extension})

            assert response.status_code == 200
            created = response.json()
            assert (storage_root / f"{created['id']}{created['extension']}").exists()

        assert created["extension"] == "."

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_invalid_base64(self, client: AsyncClient):
        """Test request validation of file content."""
        response = await client.post("/v1/storage/CreateFile", json={"file": "not base64!!"})

        assert response.status_code == 422

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_missing_id(self, client: AsyncClient):
        """Test request validation of the key."""
        response = await client.post("/v1/storage/ReadFile", json={"extension": ".txt"})

        assert response.status_code == 422

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_list_files(self, client: AsyncClient):
        """Test listing with and without a request body."""
        ids = []
        for ext in ("txt", "md"):
            response = await client.post("/v1/storage/CreateFile", json={"file": b64(b"abc"), "extension": ext})
            ids.append(response.json()["id"])

        response = await client.post("/v1/storage/ListFiles", json={})
        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert sorted(f["id"] for f in data["files"]) == sorted(ids)
        assert all(f["size_bytes"] == 3 for f in data["files"])

        response = await client.post("/v1/storage/ListFiles")
        assert response.status_code == 200
        assert response.json()["count"] == 2


class TestStorageConfiguration:
    """Test storage settings reflected over HTTP."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_strict_update(self, storage_root: Path):
        """Test strict update of a missing object."""
        async with _client(_app_with(storage_root, strict_update=True)) as client:
            response = await client.post(
                "/v1/storage/UpdateFile",
                json={"id": "handpickedid0001", "extension": ".txt", "file": b64(b"x")}
            )

        assert response.status_code == 404
        assert not (storage_root / "handpickedid0001.txt").exists()

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_size_limit(self, storage_root: Path):
        """Test payload limit."""
        async with _client(_app_with(storage_root, max_file_size_mb=0)) as client:
            response = await client.post("/v1/storage/CreateFile", json={"file": b64(b"x")})

        assert response.status_code == 413
        assert response.json()["error"]["status"] == "RESOURCE_EXHAUSTED"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_file_mode(self, storage_root: Path):
        """Test configured permission bits."""
        async with _client(_app_with(storage_root, file_mode="600")) as client:
            response = await client.post("/v1/storage/CreateFile", json={"file": b64(b"x")})

        created = response.json()
        path = storage_root / f"{created['id']}{created['extension']}"
        assert path.stat().st_mode & 0o777 == 0o600


# =============================================================================
# Health Endpoint Tests
# =============================================================================

class TestHealthEndpoints:
    """Test health check endpoints."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_root_health(self, client: AsyncClient):
        """Test root-level health check."""
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["storage"]["healthy"] is True

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_health_check(self, client: AsyncClient):
        """Test component health check."""
        response = await client.get("/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] in ("healthy", "degraded")
        components = {c["component"]: c for c in data["components"]}
        assert components["storage"]["status"] == "healthy"
        assert "disk" in components

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_component(self, client: AsyncClient):
        """Test single component lookup."""
        response = await client.get("/v1/health/component/storage")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

        response = await client.get("/v1/health/component/database")
        assert response.status_code == 404

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_probes(self, client: AsyncClient):
        """Test readiness and liveness."""
        response = await client.get("/v1/health/ready")
        assert response.status_code == 200
        assert response.json() == {"ready": True}

        response = await client.get("/v1/health/live")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_unhealthy_when_root_missing(self, client: AsyncClient, storage_root: Path):
        """Test 503 once the storage directory is gone."""
        storage_root.rmdir()

        assert (await client.get("/health")).status_code == 503
        assert (await client.get("/v1/health/ready")).status_code == 503

        response = await client.get("/v1/health")
        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"


# =============================================================================
# Service Endpoint Tests
# =============================================================================

class TestServiceEndpoints:
    """Test banner and metrics."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_banner(self, client: AsyncClient):
        """Test root banner."""
        response = await client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "FileStore"
        assert data["status"] == "running"
        assert data["environment"] == "test"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_metrics(self, client: AsyncClient):
        """Test Prometheus exposition after an operation."""
        await client.post("/v1/storage/CreateFile", json={"file": b64(b"x")})
        await client.post("/v1/storage/ReadFile", json={"id": "doesnotexist0000", "extension": ".txt"})

        response = await client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert 'filestore_operations_total{operation="create",status="OK"}' in response.text
        assert 'filestore_operations_total{operation="read",status="NOT_FOUND"}' in response.text
        assert "filestore_operation_duration_seconds_bucket" in response.text

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_metrics_disabled(self, storage_root: Path):
        """Test that /metrics is absent when disabled."""
        settings = Settings(
            environment="test",
            storage=StorageSettings(root=storage_root),
            monitoring={"metrics_enabled": False},
        )
        async with _client(create_app(settings)) as client:
            response = await client.get("/metrics")

        assert response.status_code == 404
