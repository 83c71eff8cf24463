"""Core business logic for the dual-store URL shortener."""

from .alias import AliasGenerator
from .coordinator import DualStorage, UserLookup

__all__ = ["AliasGenerator", "DualStorage", "UserLookup"]
