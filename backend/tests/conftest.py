"""
RecipeBox Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Reusable storage backends and an HTTP client wired to a fresh app.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── test_settings:   Settings for the in-memory backend
    ├── memory_backend:  Backend with one MemoryStorage per resource
    ├── sql_backend:     Backend over a throwaway SQLite file (aiosqlite)
    ├── storage:         the recipes Storage, parametrized over memory and sql
    ├── test_client:     HTTPX AsyncClient against create_app(memory_backend)
    └── sample_recipe:   a recipe payload
"""

import os

# Override settings for testing BEFORE any recipebox imports
# Why: importing recipebox.main builds the default app; keep it off MongoDB
os.environ["DATA_BACKEND"] = "memory"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from recipebox.config import Settings
from recipebox.storage import create_memory_backend, create_sql_backend


@pytest.fixture
def test_settings():
    """Settings pointing at the in-memory backend with the default page size."""
    return Settings(data_backend="memory", page_size=10, log_level="WARNING")


@pytest.fixture
def memory_backend():
    """A fresh in-memory backend (recipes + categories)."""
    return create_memory_backend()


@pytest_asyncio.fixture
async def sql_backend(tmp_path):
    """
    SQL backend over a SQLite file in tmp_path.

    startup() creates the records table; close() disposes the engine.
    """
    settings = Settings(
        data_backend="sql",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'recipebox_test.db'}",
        log_level="WARNING",
    )
    backend = create_sql_backend(settings)
    await backend.startup()
    yield backend
    await backend.close()


@pytest_asyncio.fixture(params=["memory", "sql"])
async def storage(request, tmp_path):
    """
    The recipes Storage of each variant that runs without a server.

    Tests using this fixture run once per variant.
    """
    if request.param == "memory":
        yield create_memory_backend().storage_for("recipes")
        return

    settings = Settings(
        data_backend="sql",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'storage_test.db'}",
        log_level="WARNING",
    )
    backend = create_sql_backend(settings)
    await backend.startup()
    yield backend.storage_for("recipes")
    await backend.close()


@pytest.fixture
def app(test_settings, memory_backend):
    """A fresh app with its own in-memory backend."""
    from recipebox.main import create_app

    return create_app(settings=test_settings, backend=memory_backend)


@pytest_asyncio.fixture
async def test_client(app):
    """
    Async HTTP test client for endpoint testing.

    Uses ASGITransport to route requests directly to the app (no server).
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_recipe():
    """A recipe payload as a client would send it."""
    return {
        "name": "Pasta",
        "description": "Weeknight tomato pasta",
        "ingredients": "spaghetti, tomatoes, garlic, olive oil",
        "category": "Italian",
    }
