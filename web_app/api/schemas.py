"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, Field, field_validator
from typing import Dict, Optional
from datetime import datetime

from shortlink.auth import PasswordHasher
from shortlink.common.validators import is_valid_alias, is_valid_nickname, is_valid_url


class Credentials(BaseModel):
    """Nickname and password, used by register and login."""

    nickname: str = Field(..., description="User nickname", min_length=1, max_length=64)
    password: str = Field(..., description="Plain text password", min_length=1)

    @field_validator('nickname')
    @classmethod
    def validate_nickname(cls, v: str) -> str:
        is_valid, error = is_valid_nickname(v)
        if not is_valid:
            raise ValueError(error)
        return v

    @field_validator('password')
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v.encode("utf-8")) > PasswordHasher.MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {PasswordHasher.MAX_PASSWORD_BYTES} bytes")
        return v

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"nickname": "alice", "password": "correct horse battery staple"}
            ]
        }
    }


class SaveURLRequest(BaseModel):
    """Request to save a URL under an alias."""

    url: str = Field(..., description="The URL to shorten", min_length=1, max_length=2048)
    alias: Optional[str] = Field(None, description="Optional alias; generated when omitted")

    @field_validator('url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        is_valid, error = is_valid_url(v)
        if not is_valid:
            raise ValueError(error)
        return v

    @field_validator('alias')
    @classmethod
    def validate_alias(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return None
        is_valid, error = is_valid_alias(v)
        if not is_valid:
            raise ValueError(error)
        return v

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"url": "https://example.com/very/long/path/to/resource"},
                {"url": "https://github.com/user/repo", "alias": "myrepo"},
            ]
        }
    }


class StatusResponse(BaseModel):
    """Plain success response."""

    status: str = Field("OK", description="Always 'OK' on success")


class SaveURLResponse(StatusResponse):
    """Response after saving a URL."""

    alias: str = Field(..., description="Alias the URL was saved under")


class LoginResponse(StatusResponse):
    """Response after a successful login."""

    token: str = Field(..., description="Bearer token")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    backends: Dict[str, str] = Field(..., description="Status per storage backend")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error response."""

    status: str = Field("Error", description="Always 'Error'")
    error: str = Field(..., description="Error message")
