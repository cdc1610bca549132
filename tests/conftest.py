# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up environment variables before any imports
# - Provides a fake MongoDB client so no test needs a real server
# - Builds isolated apps (own settings, own limiter, tmp directories)
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.pop("MONGODB_URI", None)
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "false")

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from lib.mongo_client import MongoDatabase


# =============================================================================
# Fake MongoDB Client
# =============================================================================

class FakeAdmin:
    """Stands in for AsyncMongoClient.admin."""

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.commands: list[str] = []

    async def command(self, name: str):
        self.commands.append(name)
        if self.error:
            raise self.error
        return {"ok": 1.0}


class FakeMongoClient:
    """Records how it was built; ping succeeds unless `error` is given."""

    def __init__(self, uri: str, error: Exception | None = None, **kwargs):
        self.uri = uri
        self.kwargs = kwargs
        self.admin = FakeAdmin(error)
        self.closed = False

    async def close(self):
        self.closed = True


class FakeClientFactory:
    """Callable passed as MongoDatabase(client_factory=...)."""

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.clients: list[FakeMongoClient] = []

    def __call__(self, uri: str, **kwargs) -> FakeMongoClient:
        client = FakeMongoClient(uri, error=self.error, **kwargs)
        self.clients.append(client)
        return client


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def client_factory():
    """Fake client factory whose ping succeeds."""
    return FakeClientFactory()


@pytest.fixture
def make_settings(tmp_path):
    """Build Settings pointing at tmp directories, with overrides."""
    def _make(**overrides) -> Settings:
        values = {
            "UPLOADS_DIR": str(tmp_path / "uploads"),
            "PUBLIC_DIR": str(tmp_path / "public"),
            "MONGODB_URI": None,
        }
        values.update(overrides)
        return Settings(**values)
    return _make


@pytest.fixture
def make_app(make_settings, client_factory):
    """Build an isolated app; the database uses the fake client factory."""
    def _make(database: MongoDatabase | None = None, **overrides):
        settings = make_settings(**overrides)
        if database is None:
            database = MongoDatabase(
                settings.MONGODB_URI,
                timeout_ms=settings.MONGODB_TIMEOUT_MS,
                client_factory=client_factory,
            )
        return create_app(settings=settings, database=database)
    return _make


@pytest.fixture
def client(make_app):
    """TestClient for a default app, with startup and shutdown run."""
    with TestClient(make_app()) as test_client:
        yield test_client
