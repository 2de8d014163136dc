"""
RecipeBox Backend — SQL Storage
=================================

What:  Storage variant over the shared `records` table (DATA_BACKEND=sql).
Why:   Lets the same routers run on PostgreSQL (asyncpg) or SQLite (aiosqlite)
       when no document store is available.
How:   One short-lived AsyncSession per call, committed before returning.
       Every query is scoped with `collection == self.collection`.

Name handling:
    A string `name` goes into the indexed `name` column so search and ordering
    stay in SQL; any other value (None, numbers) stays in the JSON `data`
    column like every other field.

Error mapping:
    SQLAlchemyError (any) → StorageError (original error logged server-side)
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Tuple

from sqlalchemy import asc, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from recipebox.exceptions import NotFoundError, StorageError
from recipebox.models.record import RecordRow
from recipebox.storage.base import (
    Page,
    Record,
    SearchResult,
    Storage,
    check_limit,
    clean_payload,
    next_page_token,
    normalize_term,
    parse_page_token,
    require_term,
)

logger = logging.getLogger(__name__)


def _escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def split_name(data: Record) -> Tuple[Optional[str], bool, Record]:
    """
    Separate `name` from the rest of a payload.

    Returns (name, has_name_column, data) where has_name_column tells whether
    the payload carried a string name destined for the column.
    """
    fields = clean_payload(data)
    if isinstance(fields.get("name"), str):
        return fields.pop("name"), True, fields
    return None, False, fields


class SqlStorage(Storage):
    """Storage scoped to one collection of the `records` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], collection: str):
        super().__init__(collection)
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        """
        Session for one storage call: commit on success, roll back on error.

        Our own NotFoundError passes through untouched; driver errors are
        wrapped in StorageError.
        """
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error("SQL %s on %s failed: %s", operation, self.collection, str(e))
                raise StorageError(
                    context={
                        "collection": self.collection,
                        "operation": operation,
                        "original_error": type(e).__name__,
                    }
                ) from e
            except Exception:
                await session.rollback()
                raise

    async def _get_row(self, session: AsyncSession, record_id: str) -> RecordRow:
        result = await session.execute(
            select(RecordRow).where(
                RecordRow.id == record_id,
                RecordRow.collection == self.collection,
            )
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError(resource=self.collection, resource_id=record_id)
        return row

    def _scoped(self, term: Optional[str]):
        query = select(RecordRow).where(RecordRow.collection == self.collection)
        if term is not None:
            query = query.where(
                RecordRow.name.ilike(f"%{_escape_like(term)}%", escape="\\")
            )
        return query

    async def read(self, record_id: str) -> Record:
        async with self._session("read") as session:
            row = await self._get_row(session, record_id)
        return row.to_record()

    async def list(
        self,
        limit: int,
        page_token: Optional[str] = None,
        search_term: Optional[str] = None,
    ) -> Page:
        check_limit(limit)
        offset = parse_page_token(page_token)
        query = (
            self._scoped(normalize_term(search_term))
            .order_by(asc(RecordRow.created_at), asc(RecordRow.id))
            .offset(offset)
            .limit(limit)
        )
        async with self._session("list") as session:
            result = await session.execute(query)
            rows = list(result.scalars().all())
        return Page(
            items=[row.to_record() for row in rows],
            next_page_token=next_page_token(offset, len(rows), limit),
            search_term=search_term,
        )

    async def search(self, limit: int, term: str) -> SearchResult:
        term = require_term(term)
        check_limit(limit)
        query = self._scoped(term).order_by(asc(RecordRow.name), asc(RecordRow.id)).limit(limit)
        async with self._session("search") as session:
            result = await session.execute(query)
            rows = list(result.scalars().all())
        return SearchResult(
            items=[row.to_record() for row in rows],
            has_more=len(rows) == limit,
        )

    async def create(self, data: Record) -> Record:
        name, _, fields = split_name(data)
        row = RecordRow(collection=self.collection, name=name, data=fields)
        async with self._session("create") as session:
            session.add(row)
            await session.flush()
        logger.debug("Created %s %s", self.collection, row.id)
        return row.to_record()

    async def update(self, record_id: str, data: Record) -> Record:
        name, has_name_column, fields = split_name(data)
        async with self._session("update") as session:
            row = await self._get_row(session, record_id)
            merged = dict(row.data or {})
            merged.update(fields)
            if has_name_column:
                merged.pop("name", None)
                row.name = name
            elif "name" in fields:
                row.name = None
            # Reassign so the JSON column is flagged dirty
            row.data = merged
        return row.to_record()

    async def delete(self, record_id: str) -> None:
        async with self._session("delete") as session:
            await session.execute(
                delete(RecordRow).where(
                    RecordRow.id == record_id,
                    RecordRow.collection == self.collection,
                )
            )
