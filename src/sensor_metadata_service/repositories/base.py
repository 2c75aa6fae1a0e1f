"""Shared asyncpg repository helpers."""
from __future__ import annotations

from typing import Any

from asyncpg import Pool, Record  # type: ignore[import-untyped]


class BaseRepository:
    """Thin wrapper around an asyncpg pool."""

    def __init__(self, pool: Pool):
        self._pool = pool

    async def _fetchrow(self, query: str, *args: Any) -> Record | None:
        return await self._pool.fetchrow(query, *args)

    async def _execute(self, query: str, *args: Any) -> str:
        return await self._pool.execute(query, *args)
