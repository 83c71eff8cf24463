"""Pytest configuration and fixtures."""

import pytest
from typing import Dict, Optional, Tuple

from shortlink.coordinator import DualStorage
from shortlink.errors import (
    OperationalFailure,
    UnauthorizedError,
    URLExistsError,
    URLNotFoundError,
    UserExistsError,
    UserNotFoundError,
)
from shortlink.storage.base import DocumentStorage, RelationalStorage
from shortlink.storage.models import ShortLink, UserAccount
from shortlink.common.logging_config import setup_logging


class InMemoryBackend:
    """Shared state and failure injection for the in-memory backends.

    ``down`` makes every call fail like an unreachable server; ``fail_on``
    makes single operations fail with the given error.
    """

    name = "memory"

    def _init_state(self):
        self.users: Dict[str, UserAccount] = {}
        self.links: Dict[str, ShortLink] = {}
        self.down = False
        self.fail_on: Dict[str, Exception] = {}
        self.calls = []

    def _enter(self, op: str):
        self.calls.append(op)
        if self.down:
            raise OperationalFailure("connection refused", backend=self.name, op=op)
        if op in self.fail_on:
            raise self.fail_on[op]

    async def get_url(self, alias: str, user_id: int) -> str:
        self._enter("get_url")
        link = self.links.get(alias)
        if link is None:
            raise URLNotFoundError(backend=self.name)
        if link.owner_id != user_id:
            raise UnauthorizedError(backend=self.name)
        return link.target_url

    async def delete_url(self, alias: str, user_id: int) -> None:
        self._enter("delete_url")
        link = self.links.get(alias)
        if link is None:
            raise URLNotFoundError(backend=self.name)
        if link.owner_id != user_id:
            raise UnauthorizedError(backend=self.name)
        del self.links[alias]

    async def get_user(self, nickname: str) -> Tuple[int, str]:
        self._enter("get_user")
        user = self.users.get(nickname)
        if user is None:
            raise UserNotFoundError(backend=self.name)
        return user.user_id, user.password_hash

    def _insert_link(self, url: str, alias: str, user_id: int) -> None:
        if alias in self.links:
            raise URLExistsError(backend=self.name)
        self.links[alias] = ShortLink(alias=alias, target_url=url, owner_id=user_id)

    def _cascade(self, nickname: str) -> UserAccount:
        user = self.users.get(nickname)
        if user is None:
            raise UserNotFoundError(backend=self.name)
        for alias in [a for a, link in self.links.items() if link.owner_id == user.user_id]:
            del self.links[alias]
        del self.users[nickname]
        return user

    async def ensure_schema(self) -> None:
        self._enter("ensure_schema")

    async def health_check(self) -> bool:
        return not self.down

    async def close(self) -> None:
        self.calls.append("close")


class InMemoryRelational(InMemoryBackend, RelationalStorage):
    """Relational stand-in: assigns ids, checks owners, blocks deleting link-less users."""

    name = "postgres"

    def __init__(self):
        RelationalStorage.__init__(self, "memory://postgres")
        self._init_state()
        self._next_id = 1

    async def save_url(self, url: str, alias: str, user_id: int) -> None:
        self._enter("save_url")
        if not any(user.user_id == user_id for user in self.users.values()):
            raise OperationalFailure("foreign key violation", backend=self.name)
        self._insert_link(url, alias, user_id)

    async def save_user(self, nickname: str, password_hash: str) -> int:
        self._enter("save_user")
        if nickname in self.users:
            raise UserExistsError(backend=self.name)
        user_id = self._next_id
        self._next_id += 1
        self.users[nickname] = UserAccount(nickname, password_hash, user_id)
        return user_id

    async def delete_user_by_nickname(self, nickname: str) -> None:
        self._enter("delete_user_by_nickname")
        user = self.users.get(nickname)
        if user is None:
            raise UserNotFoundError(backend=self.name)
        if not any(link.owner_id == user.user_id for link in self.links.values()):
            raise OperationalFailure("no URLs found for user", backend=self.name)
        self._cascade(nickname)


class InMemoryDocument(InMemoryBackend, DocumentStorage):
    """Document stand-in: stores the relational id as a plain field."""

    name = "mongodb"

    def __init__(self):
        DocumentStorage.__init__(self, "memory://mongodb")
        self._init_state()

    async def save_url(self, url: str, alias: str, user_id: int) -> None:
        self._enter("save_url")
        self._insert_link(url, alias, user_id)

    async def save_user(self, nickname: str, password_hash: str, user_id: int) -> str:
        self._enter("save_user")
        if nickname in self.users:
            raise UserExistsError(backend=self.name)
        self.users[nickname] = UserAccount(nickname, password_hash, user_id)
        return f"doc-{nickname}"

    async def delete_user_by_nickname(self, nickname: str) -> None:
        self._enter("delete_user_by_nickname")
        self._cascade(nickname)


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def relational() -> InMemoryRelational:
    return InMemoryRelational()


@pytest.fixture
def document() -> InMemoryDocument:
    return InMemoryDocument()


@pytest.fixture
def storage(relational, document, logger) -> DualStorage:
    """Create coordinator over the in-memory backends."""
    return DualStorage(relational=relational, document=document, logger=logger)


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]


@pytest.fixture
def register_user(storage):
    """Register a user through the coordinator and return its id."""
    async def _register(nickname: str, password_hash: Optional[str] = None) -> int:
        return await storage.save_user(nickname, password_hash or f"hash-{nickname}")
    return _register
