"""Application middlewares."""
from __future__ import annotations

from typing import Awaitable, Callable

import structlog
from aiohttp import web

from sensor_metadata_service.api.utils import error_response

logger = structlog.get_logger(__name__)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@web.middleware
async def error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Render unhandled errors as the JSON error envelope."""
    try:
        return await handler(request)
    except web.HTTPException as exc:
        if exc.status < 400:
            raise
        return error_response(exc.status, exc.reason)
    except Exception:
        logger.exception("unhandled_error", method=request.method, path=request.path)
        return error_response(500, "Internal server error")
