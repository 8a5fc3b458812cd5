"""Shared pytest fixtures and configuration."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from geometry_api.config import Settings
from geometry_api.main import create_app
from geometry_api.services.geometry_service import GeometryService
from geometry_api.services.store_memory import MemoryStore


@pytest.fixture
def memory_store() -> MemoryStore:
    """Empty in-memory store."""
    return MemoryStore()


@pytest.fixture
def service(memory_store: MemoryStore) -> GeometryService:
    """Service over an empty in-memory store."""
    return GeometryService(memory_store, strict_topology=True, max_page_size=100)


@pytest.fixture
def test_settings() -> Settings:
    """Settings with test-safe defaults."""
    return Settings(
        GEOMETRY_STORE="memory",
        LOG_LEVEL="DEBUG",
        DEFAULT_PAGE_SIZE=10,
        MAX_PAGE_SIZE=50,
    )


@pytest.fixture
def client(test_settings: Settings) -> Iterator[TestClient]:
    """Test client with the application lifespan running."""
    with TestClient(create_app(test_settings)) as test_client:
        yield test_client
