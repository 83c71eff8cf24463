"""Data models for stored links and users."""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class ShortLink:
    """A shortened URL owned by one user."""
    
    alias: str
    target_url: str
    owner_id: int
    
    def to_document(self) -> Dict[str, Any]:
        """Convert to the document-store layout."""
        return {
            "alias": self.alias,
            "url": self.target_url,
            "user_id": self.owner_id,
        }
    
    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "ShortLink":
        """Create from a document or a relational row mapping."""
        return cls(
            alias=data["alias"],
            target_url=data["url"],
            owner_id=int(data["user_id"]),
        )


@dataclass
class UserAccount:
    """A registered user.
    
    ``user_id`` is assigned by the relational backend and copied into the
    document backend as a plain field.
    """
    
    nickname: str
    password_hash: str
    user_id: int = 0
    
    def to_document(self) -> Dict[str, Any]:
        """Convert to the document-store layout."""
        return {
            "nickname": self.nickname,
            "password_hash": self.password_hash,
            "user_id": self.user_id,
        }
    
    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "UserAccount":
        """Create from a document or a relational row mapping."""
        return cls(
            nickname=data["nickname"],
            password_hash=data["password_hash"],
            user_id=int(data["user_id"]),
        )
