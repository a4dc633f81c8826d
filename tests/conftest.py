"""Pytest fixtures for event planner tests.

This module provides test fixtures that ensure:
1. No external network calls are made (the REST backend runs in-process
   through an ASGI transport, or connections are refused outright)
2. The relational store is a fresh in-memory SQLite database per test
3. On-device storage lives in a per-test temporary directory
"""

import os

import httpx
import pytest

# Set test environment BEFORE importing application modules
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("API_BASE_URL", "http://testserver/api")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from event_planner.config import Settings, get_settings_uncached
from event_planner.database.connection import close_db, create_tables, init_db
from event_planner.services.event_service import EventService, build_event_service
from event_planner.storage.identity import IdentityResolver
from event_planner.storage.local import FileStorage, MemoryStorage
from event_planner.storage.mirror import EventMirror

USER_ID = "5b3c4a1e-8f0d-4b7a-9c2e-1d6f3a9b8c70"


def refusing_transport() -> httpx.MockTransport:
    """Transport for an unreachable backend: every request fails to connect."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    return httpx.MockTransport(handler)


# =============================================================================
# Test Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset settings cache before each test to ensure clean state."""
    from event_planner.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(tmp_path, monkeypatch) -> Settings:
    """Settings with on-device storage in a temporary directory."""
    monkeypatch.setenv("STORAGE_DIR", str(tmp_path / "storage"))
    return get_settings_uncached()


@pytest.fixture
async def database(settings: Settings):
    """Fresh in-memory relational store with tables created."""
    await init_db(settings)
    await create_tables()
    yield
    await close_db()


# =============================================================================
# On-device Storage Fixtures
# =============================================================================


@pytest.fixture
def session_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def persistent_storage(settings: Settings) -> FileStorage:
    return FileStorage(settings.storage_dir)


@pytest.fixture
def mirror(persistent_storage: FileStorage, settings: Settings) -> EventMirror:
    return EventMirror(persistent_storage, settings.events_storage_key)


@pytest.fixture
def identity(
    session_storage: MemoryStorage,
    persistent_storage: FileStorage,
    settings: Settings,
) -> IdentityResolver:
    return IdentityResolver(
        session_storage, persistent_storage, key=settings.identity_storage_key
    )


@pytest.fixture
def signed_in(identity: IdentityResolver) -> str:
    """Sign in USER_ID in persistent storage."""
    identity.remember({"id": USER_ID, "email": "planner@example.com"})
    return USER_ID


# =============================================================================
# Backend Fixtures
# =============================================================================


@pytest.fixture
def app(database):
    """REST backend app bound to the test database."""
    from event_planner.api.app import create_app

    return create_app()


@pytest.fixture
async def online_client(app):
    """HTTP client routed to the in-process REST backend."""
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app)) as client:
        yield client


@pytest.fixture
async def offline_client():
    """HTTP client for which the backend is unreachable."""
    async with httpx.AsyncClient(transport=refusing_transport()) as client:
        yield client


@pytest.fixture
def online_service(
    settings: Settings,
    online_client: httpx.AsyncClient,
    session_storage: MemoryStorage,
    persistent_storage: FileStorage,
) -> EventService:
    return build_event_service(
        settings, session_storage, persistent_storage, client=online_client
    )


@pytest.fixture
def offline_service(
    settings: Settings,
    offline_client: httpx.AsyncClient,
    session_storage: MemoryStorage,
    persistent_storage: FileStorage,
    database,
) -> EventService:
    return build_event_service(
        settings, session_storage, persistent_storage, client=offline_client
    )
