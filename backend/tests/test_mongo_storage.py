"""
RecipeBox Backend — MongoDB Storage Tests
===========================================

What:  Unit tests for MongoStorage against a mocked AsyncCollection.
Why:   Verifies identifier translation, query shapes, and error mapping
       without a running MongoDB server.
How:   The collection's coroutine methods are AsyncMocks; `find` returns a
       cursor mock whose `to_list` is an AsyncMock.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import ServerSelectionTimeoutError

from recipebox.exceptions import NotFoundError, StorageError, ValidationError
from recipebox.storage.mongodb import MongoStorage, from_mongo, name_filter


def make_collection(documents=None):
    """Mock AsyncCollection named 'recipes'."""
    collection = MagicMock()
    collection.name = "recipes"
    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=documents or [])
    collection.find = MagicMock(return_value=cursor)
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock()
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.delete_one = AsyncMock()
    return collection


class TestHelpers:

    def test_from_mongo_replaces_object_id(self):
        oid = ObjectId()

        record = from_mongo({"_id": oid, "name": "Pasta"})

        assert record == {"id": str(oid), "name": "Pasta"}

    def test_name_filter_escapes_regex(self):
        assert name_filter("a.b") == {"name": {"$regex": r"a\.b", "$options": "i"}}

    def test_name_filter_without_term(self):
        assert name_filter(None) == {}


class TestMongoStorage:

    def setup_method(self):
        self.oid = ObjectId()
        self.collection = make_collection()
        self.storage = MongoStorage(self.collection)

    def test_collection_name(self):
        assert self.storage.collection == "recipes"

    @pytest.mark.asyncio
    async def test_read_translates_id(self):
        self.collection.find_one.return_value = {"_id": self.oid, "name": "Pasta"}

        record = await self.storage.read(str(self.oid))

        assert record == {"id": str(self.oid), "name": "Pasta"}
        self.collection.find_one.assert_awaited_once_with({"_id": self.oid})

    @pytest.mark.asyncio
    async def test_read_missing_raises_not_found(self):
        with pytest.raises(NotFoundError):
            await self.storage.read(str(self.oid))

    @pytest.mark.asyncio
    async def test_read_invalid_id_raises_not_found_without_query(self):
        with pytest.raises(NotFoundError):
            await self.storage.read("not-an-object-id")

        self.collection.find_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_driver_error_becomes_storage_error(self):
        self.collection.find_one.side_effect = ServerSelectionTimeoutError("no servers")

        with pytest.raises(StorageError) as exc_info:
            await self.storage.read(str(self.oid))

        assert exc_info.value.context["operation"] == "read"
        assert exc_info.value.context["original_error"] == "ServerSelectionTimeoutError"

    @pytest.mark.asyncio
    async def test_create_strips_ids_and_returns_inserted_id(self):
        self.collection.insert_one.return_value = MagicMock(inserted_id=self.oid)

        record = await self.storage.create({"_id": "x", "id": "y", "name": "Pasta"})

        assert record == {"id": str(self.oid), "name": "Pasta"}
        self.collection.insert_one.assert_awaited_once_with({"name": "Pasta", "_id": self.oid})

    @pytest.mark.asyncio
    async def test_update_uses_set(self):
        self.collection.find_one_and_update.return_value = {"_id": self.oid, "name": "Penne"}

        record = await self.storage.update(str(self.oid), {"name": "Penne", "id": "z"})

        assert record == {"id": str(self.oid), "name": "Penne"}
        self.collection.find_one_and_update.assert_awaited_once_with(
            {"_id": self.oid},
            {"$set": {"name": "Penne"}},
            return_document=ReturnDocument.AFTER,
        )

    @pytest.mark.asyncio
    async def test_update_missing_raises_not_found(self):
        with pytest.raises(NotFoundError):
            await self.storage.update(str(self.oid), {"name": "Ghost"})

    @pytest.mark.asyncio
    async def test_update_with_empty_payload_reads(self):
        self.collection.find_one.return_value = {"_id": self.oid, "name": "Pasta"}

        record = await self.storage.update(str(self.oid), {"id": "ignored"})

        assert record["name"] == "Pasta"
        self.collection.find_one_and_update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete(self):
        await self.storage.delete(str(self.oid))

        self.collection.delete_one.assert_awaited_once_with({"_id": self.oid})

    @pytest.mark.asyncio
    async def test_delete_invalid_id_is_ignored(self):
        await self.storage.delete("not-an-object-id")

        self.collection.delete_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_list_full_page_returns_token(self):
        documents = [{"_id": ObjectId(), "name": f"R{i}"} for i in range(2)]
        self.collection.find.return_value.to_list.return_value = documents

        page = await self.storage.list(2, page_token="4")

        assert page.next_page_token == "6"
        assert [record["name"] for record in page.items] == ["R0", "R1"]
        self.collection.find.assert_called_once_with(
            {}, sort=[("_id", ASCENDING)], skip=4, limit=2
        )

    @pytest.mark.asyncio
    async def test_list_with_term_filters_by_name(self):
        page = await self.storage.list(10, search_term=" pas ")

        assert page.items == []
        assert page.next_page_token is None
        assert page.search_term == " pas "
        self.collection.find.assert_called_once_with(
            name_filter("pas"), sort=[("_id", ASCENDING)], skip=0, limit=10
        )

    @pytest.mark.asyncio
    async def test_list_invalid_token(self):
        with pytest.raises(ValidationError):
            await self.storage.list(10, page_token="next")

        self.collection.find.assert_not_called()

    @pytest.mark.asyncio
    async def test_search_sorts_by_name_and_reports_has_more(self):
        documents = [{"_id": ObjectId(), "name": "Pasta"}]
        self.collection.find.return_value.to_list.return_value = documents

        result = await self.storage.search(1, "pas")

        assert result.has_more is True
        assert result.items[0]["name"] == "Pasta"
        self.collection.find.assert_called_once_with(
            name_filter("pas"), sort=[("name", ASCENDING)], limit=1
        )

    @pytest.mark.asyncio
    async def test_search_empty_term_never_queries(self):
        with pytest.raises(ValidationError):
            await self.storage.search(10, "")

        self.collection.find.assert_not_called()
