"""Password hashing and access tokens.

The signing secret is handed to ``TokenManager`` by whoever builds it
(normally from ``Config``); nothing here reads process-wide state.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt


class AuthenticationError(Exception):
    """Raised when a token is missing, malformed, expired or badly signed."""


class PasswordHasher:
    """bcrypt password hashing."""

    # bcrypt only looks at the first 72 bytes
    MAX_PASSWORD_BYTES = 72

    def __init__(self, rounds: int = 12):
        """Initialize hasher.

        Args:
            rounds: bcrypt cost factor
        """
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a password.

        Raises:
            ValueError: If the password is longer than bcrypt accepts
        """
        raw = password.encode("utf-8")
        if len(raw) > self.MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {self.MAX_PASSWORD_BYTES} bytes")
        return bcrypt.hashpw(raw, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Check a password against a stored hash.

        An empty or malformed hash never verifies.
        """
        if not password_hash:
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            return False


class TokenManager:
    """Issue and validate HS256 access tokens carrying the user's nickname."""

    ALGORITHM = "HS256"

    def __init__(self, secret: str, ttl_minutes: int = 5):
        """Initialize token manager.

        Args:
            secret: Signing secret
            ttl_minutes: Token lifetime in minutes
        """
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self.secret = secret
        self.ttl = timedelta(minutes=ttl_minutes)

    def issue(self, nickname: str, now: Optional[datetime] = None) -> str:
        """Issue a token for ``nickname``.

        Args:
            nickname: Authenticated user's nickname
            now: Issue time (defaults to current UTC time)

        Returns:
            Encoded JWT
        """
        now = now or datetime.now(timezone.utc)
        claims = {
            "username": nickname,
            "iat": now,
            "exp": now + self.ttl,
        }
        return jwt.encode(claims, self.secret, algorithm=self.ALGORITHM)

    def validate(self, token: str) -> str:
        """Validate a token.

        Args:
            token: Encoded JWT

        Returns:
            The nickname stored in the token

        Raises:
            AuthenticationError: If the token is invalid or expired
        """
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.ALGORITHM],
                options={"require": ["exp", "username"]},
            )
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(str(e)) from e

        nickname = claims["username"]
        if not isinstance(nickname, str) or not nickname:
            raise AuthenticationError("token has no username")
        return nickname
