"""Abstract base classes for the storage backends driven by the coordinator."""

from abc import ABC, abstractmethod
from typing import Any, Tuple


class StorageBackend(ABC):
    """Operations shared by the relational and document backends.
    
    Implementations translate driver errors into ``shortlink.errors`` before
    returning: ``NotFoundError``, ``AlreadyExistsError`` and
    ``UnauthorizedError`` for the domain cases and ``OperationalFailure``
    for everything else.
    """
    
    #: Short name used in logs and combined error messages
    name: str = "storage"
    
    def __init__(self, db_config: str):
        """Initialize backend.
        
        Args:
            db_config: Database connection string
        """
        self.db_config = db_config
    
    @abstractmethod
    async def save_url(self, url: str, alias: str, user_id: int) -> Any:
        """Store a new short link.
        
        Args:
            url: Target URL
            alias: Unique alias
            user_id: Owning user's identifier
            
        Raises:
            URLExistsError: If the alias is taken
            OperationalFailure: On any other backend failure
        """
        pass
    
    @abstractmethod
    async def get_url(self, alias: str, user_id: int) -> str:
        """Get the target URL of an alias owned by ``user_id``.
        
        Args:
            alias: Alias to look up
            user_id: Requesting user's identifier
            
        Returns:
            The target URL
            
        Raises:
            URLNotFoundError: If the alias does not exist
            UnauthorizedError: If the alias belongs to another user
            OperationalFailure: On any other backend failure
        """
        pass
    
    @abstractmethod
    async def delete_url(self, alias: str, user_id: int) -> None:
        """Delete an alias owned by ``user_id``.
        
        Raises:
            URLNotFoundError: If the alias does not exist
            UnauthorizedError: If the alias belongs to another user
            OperationalFailure: On any other backend failure
        """
        pass
    
    @abstractmethod
    async def get_user(self, nickname: str) -> Tuple[int, str]:
        """Get a user's identifier and password hash.
        
        Args:
            nickname: Nickname to look up
            
        Returns:
            Tuple of (user_id, password_hash)
            
        Raises:
            UserNotFoundError: If no such user exists
            OperationalFailure: On any other backend failure
        """
        pass
    
    @abstractmethod
    async def delete_user_by_nickname(self, nickname: str) -> None:
        """Delete a user together with every URL it owns, atomically.
        
        Raises:
            UserNotFoundError: If no such user exists
            OperationalFailure: On any other backend failure
        """
        pass
    
    @abstractmethod
    async def ensure_schema(self) -> None:
        """Create tables, collections and indexes if they don't exist."""
        pass
    
    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the backend is reachable.
        
        Returns:
            True if healthy, False otherwise
        """
        pass
    
    @abstractmethod
    async def close(self) -> None:
        """Close backend connections."""
        pass


class RelationalStorage(StorageBackend):
    """Backend that assigns canonical user identifiers."""
    
    @abstractmethod
    async def save_user(self, nickname: str, password_hash: str) -> int:
        """Create a user.
        
        Args:
            nickname: Unique nickname
            password_hash: Already hashed password
            
        Returns:
            The newly assigned numeric user identifier
            
        Raises:
            UserExistsError: If the nickname is taken
            OperationalFailure: On any other backend failure
        """
        pass


class DocumentStorage(StorageBackend):
    """Backend that stores the identifier assigned by the relational side."""
    
    @abstractmethod
    async def save_user(self, nickname: str, password_hash: str, user_id: int) -> Any:
        """Create a user document carrying ``user_id`` as a plain field.
        
        Args:
            nickname: Unique nickname
            password_hash: Already hashed password
            user_id: Identifier assigned by the relational backend
            
        Returns:
            The store's native document identifier (opaque)
            
        Raises:
            UserExistsError: If the nickname is taken
            OperationalFailure: On any other backend failure
        """
        pass
