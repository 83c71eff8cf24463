"""Middleware for the URL shortener web app."""

from .logging import LoggingMiddleware
from .error_handling import register_exception_handlers

__all__ = ["LoggingMiddleware", "register_exception_handlers"]
