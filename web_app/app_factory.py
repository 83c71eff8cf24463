"""FastAPI application factory."""

from typing import Optional

from fastapi import FastAPI

from shortlink.alias import AliasGenerator
from shortlink.auth import PasswordHasher, TokenManager
from shortlink.coordinator import DualStorage

from .api import api_router
from .middleware import LoggingMiddleware, register_exception_handlers


def create_app(
    storage_instance: Optional[DualStorage],
    config,
    token_manager: Optional[TokenManager] = None,
    password_hasher: Optional[PasswordHasher] = None,
    alias_generator: Optional[AliasGenerator] = None,
) -> FastAPI:
    """Create and configure FastAPI application.
    
    Args:
        storage_instance: Coordinator shared by every request (may be set later, e.g. in lifespan)
        config: Configuration instance
        token_manager: Optional token manager (built from config if omitted)
        password_hasher: Optional password hasher (built from config if omitted)
        alias_generator: Optional alias generator (built from config if omitted)
        
    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="URL Shortener",
        description="URL shortener backed by PostgreSQL and MongoDB",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )
    
    # Store instances in app state for access in routes
    app.state.storage = storage_instance
    app.state.config = config
    app.state.token_manager = token_manager or TokenManager(
        secret=config.jwt_secret,
        ttl_minutes=config.jwt_ttl_minutes,
    )
    app.state.password_hasher = password_hasher or PasswordHasher(rounds=config.bcrypt_rounds)
    app.state.alias_generator = alias_generator or AliasGenerator(default_length=config.alias_length)
    
    app.add_middleware(LoggingMiddleware)
    register_exception_handlers(app)
    
    app.include_router(api_router, tags=["API"])
    
    return app
