"""Request logging middleware."""

import time
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from typing import Callable, Optional


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request, at a level that follows the status code.

    2xx/3xx are INFO, 4xx WARNING, 5xx and unhandled exceptions ERROR.
    """

    def __init__(self, app, logger: Optional[logging.Logger] = None):
        super().__init__(app)
        self.logger = logger or logging.getLogger("shortlink.web")

    async def dispatch(self, request: Request, call_next: Callable):
        start = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        route = f"{request.method} {request.url.path}"

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            self.logger.error(f"{route} from {client_ip} raised {type(e).__name__} after {duration_ms:.2f}ms")
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        self.logger.log(level, f"{route} from {client_ip} -> {response.status_code} ({duration_ms:.2f}ms)")

        return response
