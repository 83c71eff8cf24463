"""
Exception handlers for consistent error responses.

Storage errors are mapped by kind. Operational failures never leak backend
details to the client; they are logged and answered with a generic 500.
"""

import logging
from typing import Tuple

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shortlink.errors import (
    AlreadyExistsError,
    NotFoundError,
    OperationalFailure,
    StorageError,
    UnauthorizedError,
    URLExistsError,
    URLNotFoundError,
    UserExistsError,
    UserNotFoundError,
)

logger = logging.getLogger("shortlink.web")

# Most specific first
STORAGE_ERROR_RESPONSES = [
    (URLNotFoundError, status.HTTP_404_NOT_FOUND, "url not found"),
    (UserNotFoundError, status.HTTP_404_NOT_FOUND, "user not found"),
    (NotFoundError, status.HTTP_404_NOT_FOUND, "not found"),
    (URLExistsError, status.HTTP_409_CONFLICT, "url already exists"),
    (UserExistsError, status.HTTP_409_CONFLICT, "user already exists"),
    (AlreadyExistsError, status.HTTP_409_CONFLICT, "already exists"),
    (UnauthorizedError, status.HTTP_403_FORBIDDEN, "unauthorized"),
]


def error_body(message: str) -> dict:
    return {"status": "Error", "error": message}


def storage_error_response(error: StorageError) -> Tuple[int, str]:
    """Map a storage error to (status code, client message)."""
    if not isinstance(error, OperationalFailure):
        for error_class, status_code, message in STORAGE_ERROR_RESPONSES:
            if isinstance(error, error_class):
                return status_code, message
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "storage failure"


async def handle_storage_error(request: Request, exc: StorageError) -> JSONResponse:
    status_code, message = storage_error_response(exc)
    if status_code >= 500:
        logger.error(f"Storage failure in {request.url.path}: {exc}")
    else:
        logger.warning(f"Storage error in {request.url.path}: {exc}")
    return JSONResponse(error_body(message), status_code=status_code)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        error_body(str(exc.detail)),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"field {field} is not valid: {first.get('msg', 'invalid value')}" if field else first.get("msg", "invalid request")
    else:
        message = "invalid request"
    logger.warning(f"Invalid request to {request.url.path}: {message}")
    return JSONResponse(error_body(message), status_code=status.HTTP_400_BAD_REQUEST)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers on ``app``."""
    app.add_exception_handler(StorageError, handle_storage_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
