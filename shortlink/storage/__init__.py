"""Storage backends for the URL shortener."""

from .base import StorageBackend, RelationalStorage, DocumentStorage
from .postgres import PostgresStorage
from .mongodb import MongoStorage
from .models import ShortLink, UserAccount

__all__ = [
    "StorageBackend",
    "RelationalStorage",
    "DocumentStorage",
    "PostgresStorage",
    "MongoStorage",
    "ShortLink",
    "UserAccount",
]
