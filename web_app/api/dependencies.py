"""FastAPI dependencies shared by the API routes."""

import logging
from dataclasses import dataclass
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, Request, status

from shortlink.auth import AuthenticationError, PasswordHasher, TokenManager
from shortlink.alias import AliasGenerator
from shortlink.coordinator import DualStorage
from shortlink.errors import UserNotFoundError

logger = logging.getLogger("shortlink.web")


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity taken from a verified bearer token."""

    nickname: str


def get_storage(request: Request) -> DualStorage:
    return request.app.state.storage


def get_token_manager(request: Request) -> TokenManager:
    return request.app.state.token_manager


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_alias_generator(request: Request) -> AliasGenerator:
    return request.app.state.alias_generator


async def get_current_user(
    tokens: Annotated[TokenManager, Depends(get_token_manager)],
    authorization: Annotated[Optional[str], Header()] = None,
) -> AuthenticatedUser:
    """Verify the ``Authorization: Bearer <token>`` header.

    Raises:
        HTTPException: 401 if the header is missing, malformed or invalid
    """
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header is missing",
        )

    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer" or not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token format",
        )

    try:
        nickname = tokens.validate(token)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {e}",
        )

    return AuthenticatedUser(nickname=nickname)


async def get_owner_id(
    user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    storage: Annotated[DualStorage, Depends(get_storage)],
) -> int:
    """Resolve the authenticated user's numeric id.

    A lookup that produced an id together with an error (one backend down)
    is accepted; the error is only logged.
    """
    lookup = await storage.get_user_by_nickname(user.nickname)
    if not lookup.user_id:
        raise lookup.error or UserNotFoundError()

    if lookup.error is not None:
        logger.warning(f"owner {user.nickname} resolved with a partial failure: {lookup.error}")

    return lookup.user_id


Storage = Annotated[DualStorage, Depends(get_storage)]
CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user)]
OwnerID = Annotated[int, Depends(get_owner_id)]
