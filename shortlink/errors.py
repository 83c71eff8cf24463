"""
Storage error taxonomy shared by both backends and the coordinator.

Callers branch on the class (``NotFoundError``, ``AlreadyExistsError``,
``UnauthorizedError``) regardless of which backend raised it. Anything else a
backend driver raises is wrapped in ``OperationalFailure`` with the original
exception chained as ``__cause__``.
"""

from typing import Dict, Optional


class StorageError(Exception):
    """
    Base storage error class.
    
    Attributes:
        message: Error message (default: "Storage error")
        backend: Name of the backend that produced the error, if any
        op: Operation name for diagnostics, if any
    """
    message: str = "Storage error"
    
    def __init__(
        self,
        message: Optional[str] = None,
        backend: Optional[str] = None,
        op: Optional[str] = None,
    ):
        """
        Initialize storage error.
        
        Args:
            message: Error message (overrides default)
            backend: Backend name ("postgres", "mongodb")
            op: Operation that failed
        """
        self.message = message or self.message
        self.backend = backend
        self.op = op
        super().__init__(self.message)
    
    def __str__(self) -> str:
        if self.op:
            return f"{self.op}: {self.message}"
        return self.message


class NotFoundError(StorageError):
    """Lookup key absent."""
    message = "Not found"


class URLNotFoundError(NotFoundError):
    message = "Url not found"


class UserNotFoundError(NotFoundError):
    message = "User not found"


class AlreadyExistsError(StorageError):
    """Uniqueness violation on the lookup key."""
    message = "Already exists"


class URLExistsError(AlreadyExistsError):
    message = "Url exists"


class UserExistsError(AlreadyExistsError):
    message = "User exists"


class UnauthorizedError(StorageError):
    """Lookup key exists but belongs to another owner."""
    message = "Unauthorized"


class OperationalFailure(StorageError):
    """
    Opaque backend failure (connectivity, constraint, transaction abort).
    
    Only meant for logging. When several backends failed at once, ``causes``
    maps backend name to the error each one raised.
    """
    message = "Storage operation failed"
    
    def __init__(
        self,
        message: Optional[str] = None,
        backend: Optional[str] = None,
        op: Optional[str] = None,
        causes: Optional[Dict[str, BaseException]] = None,
    ):
        super().__init__(message, backend=backend, op=op)
        self.causes = causes or {}
    
    @classmethod
    def combine(
        cls,
        causes: Dict[str, BaseException],
        op: Optional[str] = None,
    ) -> "OperationalFailure":
        """
        Build one error naming every failed backend.
        
        Args:
            causes: Mapping of backend name to the error it raised
            op: Operation that failed
            
        Returns:
            OperationalFailure whose message lists each backend and its cause
        """
        message = ", ".join(f"{backend} error: {error}" for backend, error in causes.items())
        return cls(message, op=op, causes=dict(causes))
