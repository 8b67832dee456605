"""
Pytest Configuration and Shared Fixtures

Provides test settings pointing at a temporary storage directory, a file
store, the FastAPI app and an async HTTP client bound to it.
"""

import os
import tempfile
from pathlib import Path
from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Test environment setup
os.environ["FILESTORE_ENVIRONMENT"] = "test"
os.environ.pop("FILESTORE_CONFIG", None)
os.environ.pop("STORAGE_ROOT", None)

from app import create_app
from api.dependencies import set_file_store, set_health_checker
from config.settings import get_settings, reload_settings
from data.storage import FileStore


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that exercise the HTTP surface"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take significant time to run"
    )


# =============================================================================
# Temporary Directory Fixtures
# =============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def storage_root(temp_dir: Path, monkeypatch) -> Path:
    """Storage directory for the test, exported through STORAGE_ROOT."""
    root = temp_dir / "files"
    monkeypatch.setenv("STORAGE_ROOT", str(root))
    reload_settings()
    return root


# =============================================================================
# Settings Fixtures
# =============================================================================

@pytest.fixture
def test_settings(storage_root: Path):
    """Settings for the test environment with a temporary storage root."""
    return get_settings()


@pytest.fixture(autouse=True)
def reset_state():
    """Reset cached settings and app-level singletons after each test."""
    yield
    set_file_store(None)
    set_health_checker(None)
    reload_settings()


# =============================================================================
# Storage Fixtures
# =============================================================================

@pytest.fixture
def file_store(storage_root: Path) -> FileStore:
    """File store over the temporary storage directory."""
    return FileStore(root=storage_root)


# =============================================================================
# FastAPI App Fixtures
# =============================================================================

@pytest.fixture
def app(test_settings):
    """Create FastAPI app for testing."""
    return create_app(test_settings)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# =============================================================================
# Test Data Factories
# =============================================================================

@pytest.fixture
def input_file_factory(temp_dir: Path):
    """Factory for creating local input files."""
    def create(filename: str = "input.txt", content: bytes = b"Test content") -> Path:
        file_path = temp_dir / filename
        file_path.write_bytes(content)
        return file_path
    return create
