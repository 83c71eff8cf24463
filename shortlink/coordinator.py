"""
Dual-backend write/read coordinator.

Every operation talks to the relational backend first and the document
backend second, sequentially, on the caller's task. Cancelling that task
aborts whichever backend call is in flight. Nothing is retried and nothing
written to the relational backend is rolled back when the document backend
fails afterwards: the error is raised to the caller, and the relational
state stands as the ground truth.
"""

import logging
from typing import Dict, NamedTuple, Optional

from .errors import OperationalFailure, StorageError
from .storage.base import DocumentStorage, RelationalStorage


class UserLookup(NamedTuple):
    """Outcome of a user lookup across both backends.

    Unpacks as ``(user_id, password_hash, error)``. A lookup can carry data
    and an error at the same time; callers that need the password hash
    must treat an empty ``password_hash`` as a failure.
    """

    user_id: int
    password_hash: str
    error: Optional[StorageError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        """Raise the carried error, if any."""
        if self.error is not None:
            raise self.error


class DualStorage:
    """Keeps links and users in a relational and a document backend."""

    def __init__(
        self,
        relational: RelationalStorage,
        document: DocumentStorage,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize the coordinator.

        Args:
            relational: Backend that assigns user ids and wins on reads
            document: Backend that mirrors every write and serves as failover
            logger: Optional logger
        """
        self.relational = relational
        self.document = document
        self.logger = logger or logging.getLogger(__name__)

    async def save_url(self, url: str, alias: str, user_id: int) -> None:
        """Save a URL in both backends.

        The document backend is only written after the relational write
        succeeded.

        Args:
            url: Target URL
            alias: Unique alias
            user_id: Owning user's identifier

        Raises:
            StorageError: The first backend error encountered
        """
        self.logger.info(f"attempting to save URL alias={alias} user_id={user_id}")

        try:
            await self.relational.save_url(url, alias, user_id)
        except StorageError as e:
            self.logger.error(f"failed to save URL in {self.relational.name}: {e}")
            raise

        try:
            await self.document.save_url(url, alias, user_id)
        except StorageError as e:
            self.logger.error(f"failed to save URL in {self.document.name}: {e}")
            raise

        self.logger.info(f"URL successfully saved in both databases alias={alias}")

    async def get_url(self, alias: str, user_id: int) -> str:
        """Get a URL, preferring the relational backend.

        Any relational failure, domain kind or not, falls back to the
        document backend, whose outcome is final.

        Args:
            alias: Alias to look up
            user_id: Requesting user's identifier

        Returns:
            The target URL

        Raises:
            StorageError: The document backend's error when both reads failed
        """
        self.logger.info(f"attempting to retrieve URL alias={alias} user_id={user_id}")

        try:
            url = await self.relational.get_url(alias, user_id)
        except StorageError as e:
            self.logger.error(f"failed to get URL from {self.relational.name} alias={alias}: {e}")
        else:
            self.logger.info(f"URL found in {self.relational.name} alias={alias}")
            return url

        try:
            url = await self.document.get_url(alias, user_id)
        except StorageError as e:
            self.logger.error(f"failed to get URL from {self.document.name} alias={alias}: {e}")
            raise

        self.logger.info(f"URL found in {self.document.name} alias={alias}")
        return url

    async def delete_url(self, alias: str, user_id: int) -> None:
        """Delete a URL from both backends.

        Raises:
            StorageError: The first backend error encountered
        """
        self.logger.info(f"attempting to delete URL alias={alias} user_id={user_id}")

        try:
            await self.relational.delete_url(alias, user_id)
        except StorageError as e:
            self.logger.error(f"failed to delete URL from {self.relational.name} alias={alias}: {e}")
            raise

        try:
            await self.document.delete_url(alias, user_id)
        except StorageError as e:
            self.logger.error(f"failed to delete URL from {self.document.name} alias={alias}: {e}")
            raise

        self.logger.info(f"URL successfully deleted from both databases alias={alias}")

    async def save_user(self, nickname: str, password_hash: str) -> int:
        """Register a user in both backends.

        The relational backend assigns the user id, which is then stored in
        the document backend as a plain field.

        Args:
            nickname: Unique nickname
            password_hash: Already hashed password

        Returns:
            The assigned user id

        Raises:
            StorageError: The first backend error encountered
        """
        self.logger.info(f"attempting to save user nickname={nickname}")

        try:
            user_id = await self.relational.save_user(nickname, password_hash)
        except StorageError as e:
            self.logger.error(f"failed to save user in {self.relational.name} nickname={nickname}: {e}")
            raise

        try:
            await self.document.save_user(nickname, password_hash, user_id)
        except StorageError as e:
            self.logger.error(f"failed to save user in {self.document.name} nickname={nickname}: {e}")
            raise

        self.logger.info(f"user successfully saved in both databases nickname={nickname} user_id={user_id}")
        return user_id

    async def get_user_by_nickname(self, nickname: str) -> UserLookup:
        """Look a user up in both backends and merge the outcomes.

        Both backends are always queried. Resolution:

        - both succeed: relational ``(user_id, password_hash)``, no error
        - both fail: ``(0, "", OperationalFailure)`` naming both causes
        - relational fails: document ``user_id``, empty hash, relational error
        - document fails: relational pair, document error

        Args:
            nickname: Nickname to look up

        Returns:
            UserLookup
        """
        self.logger.info(f"attempting to retrieve user nickname={nickname}")

        relational_error: Optional[StorageError] = None
        document_error: Optional[StorageError] = None
        relational_id, password_hash = 0, ""
        document_id = 0

        try:
            relational_id, password_hash = await self.relational.get_user(nickname)
        except StorageError as e:
            relational_error = e
            self.logger.error(f"failed to get user from {self.relational.name} nickname={nickname}: {e}")

        # The document password hash is never used
        try:
            document_id, _ = await self.document.get_user(nickname)
        except StorageError as e:
            document_error = e
            self.logger.error(f"failed to get user from {self.document.name} nickname={nickname}: {e}")

        if relational_error is None and document_error is None:
            self.logger.info(f"user found user_id={relational_id} nickname={nickname}")
            return UserLookup(relational_id, password_hash)

        if relational_error is not None and document_error is not None:
            self.logger.error(f"both databases returned errors nickname={nickname}")
            causes: Dict[str, BaseException] = {
                self.relational.name: relational_error,
                self.document.name: document_error,
            }
            return UserLookup(0, "", OperationalFailure.combine(causes, op="get_user_by_nickname"))

        if relational_error is not None:
            self.logger.info(f"user found in {self.document.name} user_id={document_id} nickname={nickname}")
            return UserLookup(
                document_id,
                "",
                OperationalFailure.combine({self.relational.name: relational_error}, op="get_user_by_nickname"),
            )

        self.logger.info(f"user found in {self.relational.name} user_id={relational_id} nickname={nickname}")
        return UserLookup(
            relational_id,
            password_hash,
            OperationalFailure.combine({self.document.name: document_error}, op="get_user_by_nickname"),
        )

    async def delete_user_by_nickname(self, nickname: str) -> None:
        """Delete a user and its URLs from both backends.

        Each backend cascades within its own transaction.

        Raises:
            StorageError: The first backend error encountered
        """
        self.logger.info(f"attempting to delete user nickname={nickname}")

        try:
            await self.relational.delete_user_by_nickname(nickname)
        except StorageError as e:
            self.logger.error(f"failed to delete user from {self.relational.name} nickname={nickname}: {e}")
            raise

        try:
            await self.document.delete_user_by_nickname(nickname)
        except StorageError as e:
            self.logger.error(f"failed to delete user from {self.document.name} nickname={nickname}: {e}")
            raise

        self.logger.info(f"user successfully deleted from both databases nickname={nickname}")

    async def ensure_schema(self) -> None:
        """Create tables and indexes in both backends."""
        await self.relational.ensure_schema()
        await self.document.ensure_schema()

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.

        Returns:
            Dictionary with health status per backend
        """
        relational_healthy = await self.relational.health_check()
        document_healthy = await self.document.health_check()

        return {
            self.relational.name: relational_healthy,
            self.document.name: document_healthy,
            "overall": relational_healthy and document_healthy,
        }

    async def close(self) -> None:
        """Close both backends."""
        await self.relational.close()
        await self.document.close()
