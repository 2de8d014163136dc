"""
RecipeBox Backend — In-Memory Storage
=======================================

What:  Storage variant keeping records in a process-local dict.
Why:   Zero-dependency backend for tests and demos (DATA_BACKEND=memory).
How:   Insertion-ordered dict of id → record copy. Every value handed out is a
       copy, so callers can never mutate stored state by accident.

Concurrency:
    All operations complete without awaiting anything, so under asyncio no
    other request can interleave inside one call. No lock is needed.
"""

import copy
import logging
from typing import Dict, Optional
from uuid import uuid4

from recipebox.exceptions import NotFoundError
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
    term_pattern,
)

logger = logging.getLogger(__name__)


class MemoryStorage(Storage):
    """Dict-backed Storage for one collection."""

    def __init__(self, collection: str):
        super().__init__(collection)
        self._records: Dict[str, Record] = {}

    def _out(self, record_id: str) -> Record:
        return {"id": record_id, **copy.deepcopy(self._records[record_id])}

    def _matching(self, term: Optional[str]):
        if term is None:
            return list(self._records)
        pattern = term_pattern(term)
        return [
            record_id
            for record_id, record in self._records.items()
            if pattern.search(str(record.get("name") or ""))
        ]

    async def read(self, record_id: str) -> Record:
        if record_id not in self._records:
            raise NotFoundError(resource=self.collection, resource_id=record_id)
        return self._out(record_id)

    async def list(
        self,
        limit: int,
        page_token: Optional[str] = None,
        search_term: Optional[str] = None,
    ) -> Page:
        check_limit(limit)
        offset = parse_page_token(page_token)
        ids = self._matching(normalize_term(search_term))[offset:offset + limit]
        return Page(
            items=[self._out(record_id) for record_id in ids],
            next_page_token=next_page_token(offset, len(ids), limit),
            search_term=search_term,
        )

    async def search(self, limit: int, term: str) -> SearchResult:
        term = require_term(term)
        check_limit(limit)
        ids = sorted(
            self._matching(term),
            key=lambda record_id: str(self._records[record_id].get("name") or ""),
        )[:limit]
        return SearchResult(
            items=[self._out(record_id) for record_id in ids],
            has_more=len(ids) == limit,
        )

    async def create(self, data: Record) -> Record:
        record_id = uuid4().hex
        self._records[record_id] = copy.deepcopy(clean_payload(data))
        logger.debug("Created %s %s", self.collection, record_id)
        return self._out(record_id)

    async def update(self, record_id: str, data: Record) -> Record:
        if record_id not in self._records:
            raise NotFoundError(resource=self.collection, resource_id=record_id)
        self._records[record_id].update(copy.deepcopy(clean_payload(data)))
        return self._out(record_id)

    async def delete(self, record_id: str) -> None:
        self._records.pop(record_id, None)
