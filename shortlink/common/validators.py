"""Validation utilities for the URL shortener."""

import re
from urllib.parse import urlparse
from typing import Tuple


ALIAS_PATTERN = re.compile(r'^[a-zA-Z0-9_-]+$')

RESERVED_ALIASES = {
    "api", "health", "login", "register", "redirect", "url", "user",
}


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate a URL.
    
    Args:
        url: The URL to validate
        
    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL is required"
    
    if len(url) > 2048:
        return False, "URL is too long (max 2048 characters)"
    
    try:
        result = urlparse(url)
    except ValueError as e:
        return False, f"Invalid URL format: {e}"
    
    if result.scheme not in ("http", "https"):
        return False, "URL must use http or https protocol"
    
    if not result.netloc:
        return False, "URL must have a valid domain"
    
    return True, ""


def is_valid_alias(alias: str, min_length: int = 4, max_length: int = 20) -> Tuple[bool, str]:
    """Validate a user supplied alias.
    
    Args:
        alias: The alias to validate
        min_length: Minimum length for alias
        max_length: Maximum length for alias
        
    Returns:
        Tuple of (is_valid, error_message)
    """
    if not alias or not isinstance(alias, str):
        return False, "Alias is required"
    
    if len(alias) < min_length:
        return False, f"Alias must be at least {min_length} characters"
    
    if len(alias) > max_length:
        return False, f"Alias must be at most {max_length} characters"
    
    if not ALIAS_PATTERN.match(alias):
        return False, "Alias can only contain letters, numbers, hyphens, and underscores"
    
    if alias.lower() in RESERVED_ALIASES:
        return False, f"'{alias}' is a reserved word and cannot be used"
    
    return True, ""


def is_valid_nickname(nickname: str, max_length: int = 64) -> Tuple[bool, str]:
    """Validate a nickname.
    
    Returns:
        Tuple of (is_valid, error_message)
    """
    if not nickname or not isinstance(nickname, str) or not nickname.strip():
        return False, "Nickname is required"
    
    if len(nickname) > max_length:
        return False, f"Nickname must be at most {max_length} characters"
    
    if nickname != nickname.strip():
        return False, "Nickname cannot start or end with whitespace"
    
    return True, ""
