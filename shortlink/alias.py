"""Alias generation for links saved without one."""

import secrets
import string
from typing import Optional


class AliasGenerator:
    """Generate random aliases."""
    
    # Base62 characters (alphanumeric, case-sensitive)
    BASE62_CHARS = string.ascii_letters + string.digits  # a-zA-Z0-9
    
    def __init__(self, default_length: int = 6):
        """Initialize alias generator.
        
        Args:
            default_length: Default length for generated aliases
        """
        self.default_length = default_length
    
    def generate(self, length: Optional[int] = None) -> str:
        """Generate a random alias.
        
        Args:
            length: Length of the alias (uses default if not specified)
            
        Returns:
            Random alias
        """
        length = length or self.default_length
        return ''.join(secrets.choice(self.BASE62_CHARS) for _ in range(length))
