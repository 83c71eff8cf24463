"""Common utilities for the URL shortener."""

from .validators import is_valid_url, is_valid_alias, is_valid_nickname
from .logging_config import setup_logging

__all__ = [
    "is_valid_url",
    "is_valid_alias",
    "is_valid_nickname",
    "setup_logging",
]
