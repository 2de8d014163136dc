"""
RecipeBox Backend — Application, Health & Configuration Tests
===============================================================

What:  Tests for /health, the app lifespan, backend selection, and Settings.
Why:   Misconfiguration and unreachable stores must show up in /health and
       at startup, not as confusing errors on the first request.
"""

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient, ASGITransport
from pydantic import ValidationError as PydanticValidationError

from recipebox.config import Settings
from recipebox.main import create_app
from recipebox.storage import Backend, create_backend, create_memory_backend
from recipebox.storage.memory import MemoryStorage


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["backend"] == "memory"
        assert body["storage"] == "connected"

    @pytest.mark.asyncio
    async def test_unreachable_storage_returns_503(self, test_settings):
        async def probe() -> bool:
            raise ConnectionError("connection refused")

        backend = Backend(
            name="mongodb",
            storages={"recipes": MemoryStorage("recipes"), "categories": MemoryStorage("categories")},
            probe=probe,
        )
        app = create_app(settings=test_settings, backend=backend)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"
        assert response.json()["storage"] == "disconnected"

    @pytest.mark.asyncio
    async def test_sql_backend_ping(self, sql_backend):
        assert await sql_backend.ping() is True


class TestLifespan:

    @pytest.mark.asyncio
    async def test_startup_and_close_hooks_run(self, test_settings):
        on_startup = AsyncMock()
        on_close = AsyncMock()
        backend = Backend(
            name="memory",
            storages=create_memory_backend().storages,
            on_startup=on_startup,
            on_close=on_close,
        )
        app = create_app(settings=test_settings, backend=backend)

        async with app.router.lifespan_context(app):
            on_startup.assert_awaited_once()
            on_close.assert_not_awaited()

        on_close.assert_awaited_once()


class TestBackendSelection:

    def test_memory(self):
        backend = create_backend(Settings(data_backend="memory"))

        assert backend.name == "memory"
        assert set(backend.storages) == {"recipes", "categories"}

    @pytest.mark.asyncio
    async def test_mongodb_builds_without_connecting(self):
        backend = create_backend(
            Settings(data_backend="mongodb", mongo_url="mongodb://localhost:1")
        )

        assert backend.name == "mongodb"
        assert backend.storage_for("recipes").collection == "recipes"
        await backend.close()

    @pytest.mark.asyncio
    async def test_sql(self, tmp_path):
        backend = create_backend(
            Settings(
                data_backend="sql",
                database_url=f"sqlite+aiosqlite:///{tmp_path / 'select.db'}",
            )
        )

        assert backend.name == "sql"
        await backend.close()


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DATA_BACKEND", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        settings = Settings(_env_file=None)

        assert settings.data_backend == "mongodb"
        assert settings.page_size == 10
        assert settings.log_level == "INFO"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("DATA_BACKEND", "SQL")
        monkeypatch.setenv("PAGE_SIZE", "25")

        settings = Settings(_env_file=None)

        assert settings.data_backend == "sql"
        assert settings.page_size == 25

    def test_unknown_backend_rejected(self):
        with pytest.raises(PydanticValidationError):
            Settings(data_backend="cassandra")

    def test_invalid_log_level_rejected(self):
        with pytest.raises(PydanticValidationError):
            Settings(log_level="LOUD")

    def test_cors_origins_list(self):
        settings = Settings(cors_origins="http://a.test, http://b.test")

        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_production_check_flags_missing_database_url(self):
        settings = Settings(data_backend="sql", database_url="")

        with pytest.raises(ValueError):
            settings.validate_required_for_production()
