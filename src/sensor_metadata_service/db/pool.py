"""Asyncpg connection pool helpers."""
from __future__ import annotations

import asyncpg  # type: ignore[import-untyped]
import structlog
from aiohttp import web

from sensor_metadata_service.settings import Settings

logger = structlog.get_logger(__name__)

DB_POOL_KEY = web.AppKey("db_pool", asyncpg.Pool)


async def create_pool(settings: Settings) -> asyncpg.Pool:
    """Open an asyncpg pool for the configured database."""
    pool = await asyncpg.create_pool(
        dsn=settings.database_dsn,
        max_size=settings.db_pool_size,
    )
    logger.info(
        "db_pool_opened",
        host=settings.db_host,
        port=settings.db_port,
        database=settings.db_name,
        max_size=settings.db_pool_size,
    )
    return pool


async def close_pool(app: web.Application) -> None:
    """Close pool on shutdown."""
    pool = app.get(DB_POOL_KEY)
    if pool is not None:
        await pool.close()
        logger.info("db_pool_closed")

