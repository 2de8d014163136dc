"""
RecipeBox Backend — MongoDB Storage
=====================================

What:  Storage variant over one MongoDB collection (DATA_BACKEND=mongodb).
Why:   Records are schemaless documents; a document store holds them as-is.
How:   PyMongo's asyncio client. The client is built once by the backend
       factory and shared by every collection and request; it connects on
       its first operation.

Identifier translation:
    MongoDB keys documents by `_id` (an ObjectId). On the way out `_id` is
    popped and re-attached as a string `id`. On the way in, ids that are not
    valid ObjectIds cannot name any document, so they are reported as
    not-found rather than as a server error.

Error mapping:
    bson InvalidId        → NotFoundError
    PyMongoError (any)    → StorageError (driver message kept in context)
"""

import logging
import re
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, ReturnDocument
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from recipebox.exceptions import NotFoundError, StorageError
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


def from_mongo(document: Dict[str, Any]) -> Record:
    """Replace the internal `_id` with a public string `id`."""
    record = dict(document)
    record["id"] = str(record.pop("_id"))
    return record


def name_filter(term: Optional[str]) -> Dict[str, Any]:
    """Query document matching `term` anywhere in `name`, ignoring case."""
    if term is None:
        return {}
    return {"name": {"$regex": re.escape(term), "$options": "i"}}


class MongoStorage(Storage):
    """Storage backed by a single AsyncCollection."""

    def __init__(self, collection: AsyncCollection):
        super().__init__(collection.name)
        self._collection = collection

    def _object_id(self, record_id: str) -> ObjectId:
        try:
            return ObjectId(record_id)
        except (InvalidId, TypeError):
            raise NotFoundError(resource=self.collection, resource_id=record_id)

    @contextmanager
    def _driver_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except PyMongoError as e:
            logger.error("MongoDB %s on %s failed: %s", operation, self.collection, str(e))
            raise StorageError(
                context={
                    "collection": self.collection,
                    "operation": operation,
                    "original_error": type(e).__name__,
                    "detail": str(e),
                }
            ) from e

    async def read(self, record_id: str) -> Record:
        oid = self._object_id(record_id)
        with self._driver_errors("read"):
            document = await self._collection.find_one({"_id": oid})
        if document is None:
            raise NotFoundError(resource=self.collection, resource_id=record_id)
        return from_mongo(document)

    async def list(
        self,
        limit: int,
        page_token: Optional[str] = None,
        search_term: Optional[str] = None,
    ) -> Page:
        check_limit(limit)
        offset = parse_page_token(page_token)
        with self._driver_errors("list"):
            cursor = self._collection.find(
                name_filter(normalize_term(search_term)),
                sort=[("_id", ASCENDING)],
                skip=offset,
                limit=limit,
            )
            documents = await cursor.to_list(length=limit)
        return Page(
            items=[from_mongo(document) for document in documents],
            next_page_token=next_page_token(offset, len(documents), limit),
            search_term=search_term,
        )

    async def search(self, limit: int, term: str) -> SearchResult:
        term = require_term(term)
        check_limit(limit)
        with self._driver_errors("search"):
            cursor = self._collection.find(
                name_filter(term),
                sort=[("name", ASCENDING)],
                limit=limit,
            )
            documents = await cursor.to_list(length=limit)
        return SearchResult(
            items=[from_mongo(document) for document in documents],
            has_more=len(documents) == limit,
        )

    async def create(self, data: Record) -> Record:
        document = clean_payload(data)
        with self._driver_errors("create"):
            result = await self._collection.insert_one(document)
        document["_id"] = result.inserted_id
        logger.debug("Created %s %s", self.collection, result.inserted_id)
        return from_mongo(document)

    async def update(self, record_id: str, data: Record) -> Record:
        changes = clean_payload(data)
        if not changes:
            # MongoDB rejects an empty $set; nothing to merge
            return await self.read(record_id)
        oid = self._object_id(record_id)
        with self._driver_errors("update"):
            document = await self._collection.find_one_and_update(
                {"_id": oid},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        if document is None:
            raise NotFoundError(resource=self.collection, resource_id=record_id)
        return from_mongo(document)

    async def delete(self, record_id: str) -> None:
        try:
            oid = ObjectId(record_id)
        except (InvalidId, TypeError):
            return
        with self._driver_errors("delete"):
            await self._collection.delete_one({"_id": oid})
