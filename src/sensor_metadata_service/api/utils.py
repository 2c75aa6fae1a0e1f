"""Helper utilities for API handlers."""
from __future__ import annotations

from typing import Any

from aiohttp import web


class InvalidPayloadError(Exception):
    """Request body is not a JSON object."""


def error_response(status: int, message: str) -> web.Response:
    return web.json_response({"message": message}, status=status)


async def read_json(request: web.Request) -> dict[str, Any]:
    try:
        data = await request.json()
    except ValueError as exc:
        raise InvalidPayloadError("Invalid JSON payload") from exc
    if not isinstance(data, dict):
        raise InvalidPayloadError("JSON body must be an object")
    return data


def query_param(request: web.Request, name: str) -> str | None:
    """Return a query parameter, treating an empty value as missing."""
    value = request.rel_url.query.get(name)
    return value or None
