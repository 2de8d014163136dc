"""
RecipeBox Backend — Storage Layer & Backend Factory
=====================================================

What:  Builds the configured storage variant and owns its connection handle.
Why:   The connection (MongoDB client or SQLAlchemy engine) is created once
       per process and injected into the app, instead of being a lazily
       initialized module global. Tests pass a Backend of their own.
How:   create_backend(settings) selects on settings.data_backend and returns
       a Backend holding one Storage per resource.

Variant Inventory:
    - MemoryStorage: process-local dicts (tests, demos)
    - MongoStorage:  one MongoDB collection per resource
    - SqlStorage:    one shared `records` table, scoped by collection
"""

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional

from recipebox.config import Settings
from recipebox.resources import RESOURCES
from recipebox.storage.base import Page, Record, SearchResult, Storage
from recipebox.storage.memory import MemoryStorage

logger = logging.getLogger(__name__)

Hook = Callable[[], Awaitable[None]]
Probe = Callable[[], Awaitable[bool]]


async def _noop() -> None:
    return None


async def _always_up() -> bool:
    return True


@dataclass
class Backend:
    """
    The selected storage variant plus the lifecycle of its connection.

    Attributes:
        name:      "memory", "mongodb" or "sql" (reported by /health)
        storages:  resource name → Storage
        on_startup / on_close / probe: connection lifecycle hooks
    """

    name: str
    storages: Dict[str, Storage]
    on_startup: Hook = field(default=_noop)
    on_close: Hook = field(default=_noop)
    probe: Probe = field(default=_always_up)

    def storage_for(self, resource: str) -> Storage:
        return self.storages[resource]

    async def startup(self) -> None:
        await self.on_startup()

    async def ping(self) -> bool:
        """True when the store answers; never raises."""
        try:
            return await self.probe()
        except Exception as e:
            logger.warning("Storage ping failed (%s): %s", self.name, str(e))
            return False

    async def close(self) -> None:
        await self.on_close()


def create_memory_backend(resources: Optional[List[str]] = None) -> Backend:
    names = resources or [resource.name for resource in RESOURCES]
    return Backend(name="memory", storages={name: MemoryStorage(name) for name in names})


def create_mongo_backend(settings: Settings) -> Backend:
    from pymongo import AsyncMongoClient

    from recipebox.storage.mongodb import MongoStorage

    # No I/O here: the client connects on its first operation
    client = AsyncMongoClient(
        settings.mongo_url,
        serverSelectionTimeoutMS=settings.mongo_server_selection_timeout_ms,
        connect=False,
    )
    database = client[settings.mongo_db]

    async def probe() -> bool:
        await client.admin.command("ping")
        return True

    async def close() -> None:
        await client.close()

    return Backend(
        name="mongodb",
        storages={
            resource.name: MongoStorage(database[resource.name]) for resource in RESOURCES
        },
        on_close=close,
        probe=probe,
    )


def create_sql_backend(settings: Settings) -> Backend:
    from sqlalchemy import text

    from recipebox.database import (
        build_engine,
        build_session_factory,
        create_tables,
        dispose_engine,
    )
    from recipebox.storage.sql import SqlStorage

    engine = build_engine(settings)
    session_factory = build_session_factory(engine)

    async def startup() -> None:
        await create_tables(engine)

    async def probe() -> bool:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def close() -> None:
        await dispose_engine(engine)

    return Backend(
        name="sql",
        storages={
            resource.name: SqlStorage(session_factory, resource.name) for resource in RESOURCES
        },
        on_startup=startup,
        on_close=close,
        probe=probe,
    )


def create_backend(settings: Settings) -> Backend:
    """Build the backend named by settings.data_backend."""
    if settings.data_backend == "memory":
        backend = create_memory_backend()
    elif settings.data_backend == "mongodb":
        backend = create_mongo_backend(settings)
    elif settings.data_backend == "sql":
        backend = create_sql_backend(settings)
    else:
        raise ValueError(f"Unknown data backend '{settings.data_backend}'")
    logger.info("Storage backend: %s", backend.name)
    return backend


__all__ = [
    "Backend",
    "Page",
    "Record",
    "SearchResult",
    "Storage",
    "create_backend",
    "create_memory_backend",
    "create_mongo_backend",
    "create_sql_backend",
]
