#!/usr/bin/env python3
"""
Main entry point for the dual-store URL shortener service.

Concurrency: requests are served with async I/O (FastAPI + asyncpg pool +
pymongo's asyncio client). One ``DualStorage`` is created per worker process
at startup and shared by every request. Set WORKERS > 1 for multi-process
scaling; each worker opens its own backend pools.

Usage:
    python app.py

Environment variables:
    POSTGRES_URL - PostgreSQL connection URL
    MONGODB_URL - MongoDB connection URL (replica set, for transactions)
    MONGODB_DATABASE - MongoDB database name
    CREATE_TABLES - Set to 'true' to create tables/indexes on startup
    JWT_SECRET - Token signing secret
    PORT - Port to listen on
    WORKERS - Number of uvicorn worker processes (default 1)
    LOG_LEVEL - Logging level
"""

import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import load_config
from shortlink.coordinator import DualStorage
from shortlink.storage.postgres import PostgresStorage
from shortlink.storage.mongodb import MongoStorage
from shortlink.common.logging_config import setup_logging
from web_app import create_app


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting URL shortener service...")

    relational = PostgresStorage(
        db_config=config.postgres_url,
        pool_max_size=config.postgres_pool_max_size,
        connection_timeout_seconds=config.connection_timeout_seconds,
        logger=logger.getChild("postgres"),
    )
    document = MongoStorage(
        db_config=config.mongodb_url,
        database=config.mongodb_database,
        connection_timeout_seconds=config.connection_timeout_seconds,
        logger=logger.getChild("mongodb"),
    )
    storage = DualStorage(
        relational=relational,
        document=document,
        logger=logger.getChild("storage"),
    )

    if config.create_tables:
        logger.info("Table creation enabled via CREATE_TABLES")
        await storage.ensure_schema()

    health = await storage.health_check()
    if not health["overall"]:
        logger.warning(f"Starting with unhealthy backends: {health}")

    app.state.storage = storage

    logger.info("Service started successfully")

    yield

    logger.info("Shutting down URL shortener service...")

    await storage.close()

    logger.info("Service stopped")


def main():
    """Main entry point."""
    config = load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info("URL Shortener Service")
    logger.info(f"Configuration: {config.model_dump(exclude={'jwt_secret', 'postgres_url', 'mongodb_url'})}")

    if config.jwt_secret == "change-me":
        logger.warning("JWT_SECRET is not set; using the built-in development secret")

    # Storage is created in lifespan
    app = create_app(
        storage_instance=None,
        config=config,
    )

    app.state.logger = logger
    app.router.lifespan_context = lifespan

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        workers=config.workers,
        log_level=config.log_level.lower(),
        access_log=True,
    )

    server = uvicorn.Server(uvicorn_config)

    # Setup signal handlers for graceful shutdown
    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
