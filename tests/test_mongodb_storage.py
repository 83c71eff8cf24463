"""Tests for the MongoDB backend's error mapping and ownership checks."""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

from shortlink.errors import (
    OperationalFailure,
    UnauthorizedError,
    URLExistsError,
    URLNotFoundError,
    UserExistsError,
    UserNotFoundError,
)
from shortlink.storage.mongodb import MongoStorage


def make_collection() -> MagicMock:
    collection = MagicMock()
    collection.count_documents = AsyncMock(return_value=0)
    collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id="oid-1"))
    collection.find_one = AsyncMock(return_value=None)
    collection.delete_one = AsyncMock()
    collection.delete_many = AsyncMock()
    collection.create_index = AsyncMock()
    return collection


@pytest.fixture
def collections():
    return {"urls": make_collection(), "users": make_collection()}


@pytest.fixture
def session():
    session = MagicMock()

    async def run(callback):
        return await callback(session)

    session.with_transaction = AsyncMock(side_effect=run)
    return session


@pytest.fixture
def client(collections, session):
    """Mocked AsyncMongoClient."""
    client = MagicMock()
    client.__getitem__.return_value.__getitem__.side_effect = collections.__getitem__
    client.start_session.return_value.__aenter__.return_value = session
    client.admin.command = AsyncMock(return_value={"ok": 1})
    client.close = AsyncMock()
    return client


@pytest.fixture
def db(client) -> MongoStorage:
    return MongoStorage(
        db_config="mongodb://localhost:27017",
        database="test",
        logger=logging.getLogger("test.mongodb"),
        client=client,
    )


@pytest.mark.asyncio
class TestMongoURLs:
    """URL operations."""

    async def test_save_url(self, db, collections):
        assert await db.save_url("https://example.com", "abc123", 7) == "oid-1"

        collections["urls"].insert_one.assert_awaited_once_with(
            {"alias": "abc123", "url": "https://example.com", "user_id": 7}
        )

    async def test_save_url_existing_alias(self, db, collections):
        collections["urls"].count_documents.return_value = 1

        with pytest.raises(URLExistsError) as exc_info:
            await db.save_url("https://example.com", "abc123", 7)

        assert exc_info.value.backend == "mongodb"
        collections["urls"].insert_one.assert_not_awaited()

    async def test_save_url_lost_race(self, db, collections):
        collections["urls"].insert_one.side_effect = DuplicateKeyError("E11000 duplicate key")

        with pytest.raises(URLExistsError):
            await db.save_url("https://example.com", "abc123", 7)

    async def test_save_url_server_unreachable(self, db, collections):
        collections["urls"].count_documents.side_effect = ServerSelectionTimeoutError("no servers")

        with pytest.raises(OperationalFailure) as exc_info:
            await db.save_url("https://example.com", "abc123", 7)

        assert isinstance(exc_info.value.__cause__, ServerSelectionTimeoutError)

    async def test_get_url(self, db, collections):
        collections["urls"].find_one.return_value = {
            "_id": "oid-1", "alias": "abc123", "url": "https://example.com", "user_id": 7,
        }

        assert await db.get_url("abc123", 7) == "https://example.com"

    async def test_get_url_not_found(self, db):
        with pytest.raises(URLNotFoundError):
            await db.get_url("abc123", 7)

    async def test_get_url_other_owner(self, db, collections):
        collections["urls"].find_one.return_value = {
            "_id": "oid-1", "alias": "abc123", "url": "https://example.com", "user_id": 8,
        }

        with pytest.raises(UnauthorizedError):
            await db.get_url("abc123", 7)

    async def test_delete_url(self, db, collections):
        collections["urls"].find_one.return_value = {"_id": "oid-1", "user_id": 7}

        await db.delete_url("abc123", 7)

        collections["urls"].delete_one.assert_awaited_once_with({"alias": "abc123"})

    async def test_delete_url_other_owner(self, db, collections):
        collections["urls"].find_one.return_value = {"_id": "oid-1", "user_id": 8}

        with pytest.raises(UnauthorizedError):
            await db.delete_url("abc123", 7)

        collections["urls"].delete_one.assert_not_awaited()


@pytest.mark.asyncio
class TestMongoUsers:
    """User operations."""

    async def test_save_user_stores_relational_id(self, db, collections):
        await db.save_user("alice", "hash", 42)

        collections["users"].insert_one.assert_awaited_once_with(
            {"nickname": "alice", "password_hash": "hash", "user_id": 42}
        )

    async def test_save_user_existing_nickname(self, db, collections):
        collections["users"].count_documents.return_value = 1

        with pytest.raises(UserExistsError):
            await db.save_user("alice", "hash", 42)

    async def test_get_user_uses_user_id_field(self, db, collections):
        collections["users"].find_one.return_value = {
            "_id": "65f0c0ffee0000000000beef", "nickname": "alice", "password_hash": "hash", "user_id": 42,
        }

        assert await db.get_user("alice") == (42, "hash")

    async def test_get_user_not_found(self, db):
        with pytest.raises(UserNotFoundError):
            await db.get_user("alice")

    async def test_delete_user_cascade_in_transaction(self, db, collections, session):
        collections["users"].find_one.return_value = {"_id": "oid-9", "user_id": 42}

        await db.delete_user_by_nickname("alice")

        session.with_transaction.assert_awaited_once()
        collections["urls"].delete_many.assert_awaited_once_with({"user_id": 42}, session=session)
        collections["users"].delete_one.assert_awaited_once_with({"user_id": 42}, session=session)

    async def test_delete_unknown_user(self, db, collections):
        with pytest.raises(UserNotFoundError):
            await db.delete_user_by_nickname("alice")

        collections["urls"].delete_many.assert_not_awaited()


@pytest.mark.asyncio
class TestMongoLifecycle:
    """Schema, health and shutdown."""

    async def test_ensure_schema_creates_unique_indexes(self, db, collections):
        await db.ensure_schema()

        unique = [
            call.args[0]
            for name in ("urls", "users")
            for call in collections[name].create_index.await_args_list
            if call.kwargs.get("unique")
        ]
        assert [("alias", 1)] in unique
        assert [("nickname", 1)] in unique

    async def test_health_check(self, db, client):
        assert await db.health_check() is True

        client.admin.command.side_effect = ServerSelectionTimeoutError("no servers")
        assert await db.health_check() is False

    async def test_close(self, db, client):
        await db.close()

        client.close.assert_awaited_once()
