"""API routes implementation."""

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import RedirectResponse
from starlette.concurrency import run_in_threadpool

from shortlink.alias import AliasGenerator
from shortlink.auth import PasswordHasher, TokenManager

from .dependencies import (
    CurrentUser,
    OwnerID,
    Storage,
    get_alias_generator,
    get_password_hasher,
    get_token_manager,
)
from .schemas import (
    Credentials,
    ErrorResponse,
    HealthResponse,
    LoginResponse,
    SaveURLRequest,
    SaveURLResponse,
    StatusResponse,
)

router = APIRouter()
logger = logging.getLogger("shortlink.web")

AUTH_ERRORS = {
    401: {"model": ErrorResponse, "description": "Missing or invalid token"},
}


@router.post(
    "/register",
    response_model=StatusResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        409: {"model": ErrorResponse, "description": "User already exists"},
        500: {"model": ErrorResponse, "description": "Storage failure"},
    },
    summary="Register user",
)
async def register(
    body: Credentials,
    storage: Storage,
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
):
    """Register a new user in both backends."""
    password_hash = await run_in_threadpool(hasher.hash, body.password)

    user_id = await storage.save_user(body.nickname, password_hash)

    logger.info(f"user registered successfully nickname={body.nickname} user_id={user_id}")
    return StatusResponse()


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        401: {"model": ErrorResponse, "description": "Wrong login or password"},
    },
    summary="Log in",
)
async def login(
    body: Credentials,
    storage: Storage,
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    tokens: Annotated[TokenManager, Depends(get_token_manager)],
):
    """Check credentials and issue a bearer token."""
    lookup = await storage.get_user_by_nickname(body.nickname)

    # Credentials only ever come from the relational backend
    if not lookup.password_hash:
        logger.error(f"login failed for {body.nickname}: {lookup.error}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Wrong login or password",
        )

    if lookup.error is not None:
        logger.warning(f"login for {body.nickname} with a partial failure: {lookup.error}")

    verified = await run_in_threadpool(hasher.verify, body.password, lookup.password_hash)
    if not verified:
        logger.error(f"login failed for {body.nickname}: wrong password")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Wrong login or password",
        )

    logger.info(f"user login successfully nickname={body.nickname}")
    return LoginResponse(token=tokens.issue(body.nickname))


@router.post(
    "/url/save",
    response_model=SaveURLResponse,
    responses={
        **AUTH_ERRORS,
        400: {"model": ErrorResponse, "description": "Invalid request"},
        409: {"model": ErrorResponse, "description": "Alias already exists"},
        500: {"model": ErrorResponse, "description": "Storage failure"},
    },
    summary="Save URL",
    description="Save a URL for the authenticated user. An alias is generated when omitted.",
)
async def save_url(
    body: SaveURLRequest,
    storage: Storage,
    owner_id: OwnerID,
    generator: Annotated[AliasGenerator, Depends(get_alias_generator)],
):
    """Save a URL in both backends."""
    alias = body.alias or generator.generate()

    await storage.save_url(body.url, alias, owner_id)

    logger.info(f"url added alias={alias} user_id={owner_id}")
    return SaveURLResponse(alias=alias)


@router.get(
    "/redirect/{alias}",
    status_code=status.HTTP_302_FOUND,
    response_class=RedirectResponse,
    responses={
        **AUTH_ERRORS,
        403: {"model": ErrorResponse, "description": "Alias belongs to another user"},
        404: {"model": ErrorResponse, "description": "Alias not found"},
    },
    summary="Redirect to target URL",
)
async def redirect(alias: str, storage: Storage, owner_id: OwnerID):
    """Redirect the owner of ``alias`` to its target URL."""
    url = await storage.get_url(alias, owner_id)

    logger.info(f"got url alias={alias} url={url}")
    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)


@router.delete(
    "/url/{alias}",
    response_model=StatusResponse,
    responses={
        **AUTH_ERRORS,
        403: {"model": ErrorResponse, "description": "Alias belongs to another user"},
        404: {"model": ErrorResponse, "description": "Alias not found"},
    },
    summary="Delete URL",
)
async def delete_url(alias: str, storage: Storage, owner_id: OwnerID):
    """Delete a URL from both backends."""
    await storage.delete_url(alias, owner_id)

    logger.info(f"url deleted alias={alias} user_id={owner_id}")
    return StatusResponse()


@router.delete(
    "/user/{nickname}",
    response_model=StatusResponse,
    responses={
        **AUTH_ERRORS,
        403: {"model": ErrorResponse, "description": "Cannot delete another user's account"},
        500: {"model": ErrorResponse, "description": "Storage failure"},
    },
    summary="Delete user",
    description="Delete the authenticated user and every URL it owns.",
)
async def delete_user(nickname: str, storage: Storage, user: CurrentUser):
    """Delete the caller's own account."""
    if nickname != user.nickname:
        logger.error(
            f"unauthorized attempt to delete another user's account "
            f"auth_nickname={user.nickname} nickname={nickname}"
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="unauthorized action",
        )

    await storage.delete_user_by_nickname(nickname)

    logger.info(f"user deleted successfully nickname={nickname}")
    return StatusResponse()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if both storage backends are reachable.",
)
async def health_check(storage: Storage):
    """Health check endpoint."""
    health = await storage.health_check()
    overall = health.pop("overall")

    return HealthResponse(
        status="healthy" if overall else "unhealthy",
        backends={name: "healthy" if ok else "unhealthy" for name, ok in health.items()},
        timestamp=datetime.now(timezone.utc),
    )
