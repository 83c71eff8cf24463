"""MongoDB implementation of the document backend."""

import logging
from typing import Any, Iterator, Optional, Tuple
from contextlib import contextmanager

from pymongo import ASCENDING, AsyncMongoClient
from pymongo.errors import DuplicateKeyError

from .base import DocumentStorage
from .models import ShortLink, UserAccount
from ..errors import (
    OperationalFailure,
    StorageError,
    UnauthorizedError,
    URLExistsError,
    URLNotFoundError,
    UserExistsError,
    UserNotFoundError,
)


class MongoStorage(DocumentStorage):
    """MongoDB storage for links and users.

    Uniqueness is checked with ``count_documents`` before every insert. The
    unique indexes created by ``ensure_schema`` catch the writer that loses a
    race between check and insert.

    Users are correlated with the relational backend through their
    ``user_id`` field. The native ``_id`` is never used as a user identifier.
    """

    name = "mongodb"

    URLS_COLLECTION = "urls"
    USERS_COLLECTION = "users"

    def __init__(
        self,
        db_config: str,
        database: str = "url_shortener",
        connection_timeout_seconds: int = 30,
        logger: Optional[logging.Logger] = None,
        client: Optional[AsyncMongoClient] = None,
    ):
        """Initialize MongoDB storage.

        Args:
            db_config: MongoDB connection string
            database: Database name
            connection_timeout_seconds: Server selection and connect timeout in seconds
            logger: Optional logger instance
            client: Optional pre-built client (shares its connection pool)
        """
        super().__init__(db_config)

        self.logger = logger or logging.getLogger(__name__)
        self.database_name = database

        timeout_ms = connection_timeout_seconds * 1000
        self.client = client or AsyncMongoClient(
            db_config,
            serverSelectionTimeoutMS=timeout_ms,
            connectTimeoutMS=timeout_ms,
        )
        self.db = self.client[database]

    @property
    def urls(self):
        return self.db[self.URLS_COLLECTION]

    @property
    def users(self):
        return self.db[self.USERS_COLLECTION]

    @contextmanager
    def _translate_errors(self, op: str) -> Iterator[None]:
        """Re-raise driver errors as ``OperationalFailure``."""
        try:
            yield
        except StorageError:
            raise
        except Exception as e:
            self.logger.error(f"{op} failed: {e}")
            raise OperationalFailure(str(e), backend=self.name, op=op) from e

    async def ensure_schema(self) -> None:
        """Create unique indexes on alias and nickname."""
        op = "storage.mongodb.ensure_schema"

        with self._translate_errors(op):
            self.logger.info("Creating urls/users indexes if not exist...")
            await self.urls.create_index([("alias", ASCENDING)], unique=True)
            await self.urls.create_index([("user_id", ASCENDING)])
            await self.users.create_index([("nickname", ASCENDING)], unique=True)
            await self.users.create_index([("user_id", ASCENDING)])
            self.logger.info("Index creation completed successfully")

    async def save_url(self, url: str, alias: str, user_id: int) -> Any:
        """Insert a URL document.

        The owner is not checked against the users collection.

        Returns:
            The inserted document's ``_id``
        """
        op = "storage.mongodb.save_url"

        with self._translate_errors(op):
            count = await self.urls.count_documents({"alias": alias})
            if count > 0:
                raise URLExistsError(backend=self.name, op=op)

            link = ShortLink(alias=alias, target_url=url, owner_id=user_id)
            try:
                result = await self.urls.insert_one(link.to_document())
            except DuplicateKeyError as e:
                raise URLExistsError(backend=self.name, op=op) from e

            self.logger.debug(f"Inserted url document {result.inserted_id}: {alias} -> {url}")
            return result.inserted_id

    async def get_url(self, alias: str, user_id: int) -> str:
        op = "storage.mongodb.get_url"

        with self._translate_errors(op):
            doc = await self.urls.find_one({"alias": alias})
            if doc is None:
                raise URLNotFoundError(backend=self.name, op=op)

            link = ShortLink.from_document(doc)
            if link.owner_id != user_id:
                raise UnauthorizedError(backend=self.name, op=op)

            return link.target_url

    async def delete_url(self, alias: str, user_id: int) -> None:
        op = "storage.mongodb.delete_url"

        with self._translate_errors(op):
            doc = await self.urls.find_one({"alias": alias}, {"user_id": 1})
            if doc is None:
                raise URLNotFoundError(backend=self.name, op=op)

            if doc.get("user_id") != user_id:
                raise UnauthorizedError(backend=self.name, op=op)

            await self.urls.delete_one({"alias": alias})
            self.logger.debug(f"Deleted url document: {alias}")

    async def save_user(self, nickname: str, password_hash: str, user_id: int) -> Any:
        """Insert a user document carrying the relational ``user_id``.

        Returns:
            The inserted document's ``_id`` (opaque, not a user identifier)
        """
        op = "storage.mongodb.save_user"

        with self._translate_errors(op):
            count = await self.users.count_documents({"nickname": nickname})
            if count > 0:
                raise UserExistsError(backend=self.name, op=op)

            user = UserAccount(nickname=nickname, password_hash=password_hash, user_id=user_id)
            try:
                result = await self.users.insert_one(user.to_document())
            except DuplicateKeyError as e:
                raise UserExistsError(backend=self.name, op=op) from e

            self.logger.debug(f"Inserted user document {result.inserted_id} for {nickname} ({user_id})")
            return result.inserted_id

    async def get_user(self, nickname: str) -> Tuple[int, str]:
        """Get a user by nickname.

        Returns:
            Tuple of (user_id field, password_hash)
        """
        op = "storage.mongodb.get_user"

        with self._translate_errors(op):
            doc = await self.users.find_one({"nickname": nickname})
            if doc is None:
                raise UserNotFoundError(backend=self.name, op=op)

            user = UserAccount.from_document(doc)
            return user.user_id, user.password_hash

    async def delete_user_by_nickname(self, nickname: str) -> None:
        """Delete a user and its URLs inside one multi-document transaction.

        Requires a replica set or sharded cluster.
        """
        op = "storage.mongodb.delete_user_by_nickname"

        async def cascade(session) -> int:
            doc = await self.users.find_one(
                {"nickname": nickname},
                {"user_id": 1},
                session=session,
            )
            if doc is None:
                raise UserNotFoundError(backend=self.name, op=op)

            user_id = doc["user_id"]
            await self.urls.delete_many({"user_id": user_id}, session=session)
            await self.users.delete_one({"user_id": user_id}, session=session)
            return user_id

        with self._translate_errors(op):
            async with self.client.start_session() as session:
                user_id = await session.with_transaction(cascade)

            self.logger.debug(f"Deleted user document {nickname} ({user_id}) and its urls")

    async def health_check(self) -> bool:
        """Check if database is healthy.

        Returns:
            True if healthy, False otherwise
        """
        try:
            await self.client.admin.command("ping")
            return True
        except Exception as e:
            self.logger.error(f"Health check failed: {e}")
            return False

    async def close(self) -> None:
        """Close the client and its connection pool."""
        try:
            await self.client.close()
            self.logger.debug("Closed MongoDB client")
        except Exception as e:
            self.logger.error(f"Error closing MongoDB client: {e}")
