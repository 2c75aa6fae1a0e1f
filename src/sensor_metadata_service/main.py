"""aiohttp application entrypoint."""
from __future__ import annotations

import httpx
from aiohttp import web
from aiohttp_cors import ResourceOptions, setup as cors_setup

from sensor_metadata_service.api.dependencies import SENSOR_REPOSITORY_KEY
from sensor_metadata_service.api.middleware import error_middleware
from sensor_metadata_service.api.routes.sensors import routes as sensor_routes
from sensor_metadata_service.clients.geocoding import MapboxGeocodingClient
from sensor_metadata_service.db.pool import DB_POOL_KEY, close_pool, create_pool
from sensor_metadata_service.logging_config import configure_logging
from sensor_metadata_service.repositories.sensor_metadata import (
    PostgresSensorMetadataRepository,
    SensorMetadataRepository,
)
from sensor_metadata_service.settings import Settings, settings as default_settings

SETTINGS_KEY = web.AppKey("settings", Settings)
HTTP_CLIENT_KEY = web.AppKey("http_client", httpx.AsyncClient)


async def init_resources(app: web.Application) -> None:
    """Open the database pool and geocoding HTTP client, then build the repository."""
    cfg = app[SETTINGS_KEY]
    pool = await create_pool(cfg)
    app[DB_POOL_KEY] = pool
    client = httpx.AsyncClient()
    app[HTTP_CLIENT_KEY] = client
    geocoder = MapboxGeocodingClient(
        client,
        base_url=str(cfg.geocoding_base_url),
        api_key=cfg.api_key.get_secret_value(),
    )
    app[SENSOR_REPOSITORY_KEY] = PostgresSensorMetadataRepository(pool, geocoder)


async def close_http_client(app: web.Application) -> None:
    client = app.get(HTTP_CLIENT_KEY)
    if client is not None:
        await client.aclose()


async def healthcheck(request: web.Request) -> web.Response:
    """Health check endpoint."""
    cfg = request.app[SETTINGS_KEY]
    return web.json_response({"status": "ok", "service": cfg.app_name, "env": cfg.env})


def create_app(
    *,
    cfg: Settings | None = None,
    repository: SensorMetadataRepository | None = None,
) -> web.Application:
    """Create aiohttp application.

    When ``repository`` is given it is used as-is and no database or geocoding
    connections are opened.
    """
    cfg = cfg or default_settings
    app = web.Application(middlewares=[error_middleware])
    app[SETTINGS_KEY] = cfg

    cors = cors_setup(
        app,
        defaults={
            origin: ResourceOptions(
                allow_credentials=True,
                expose_headers="*",
                allow_headers="*",
                allow_methods="*",
            )
            for origin in cfg.cors_origins
        },
    )

    app.router.add_get("/health", healthcheck)
    app.add_routes(sensor_routes)

    if repository is not None:
        app[SENSOR_REPOSITORY_KEY] = repository
    else:
        app.on_startup.append(init_resources)
        app.on_cleanup.append(close_http_client)
        app.on_cleanup.append(close_pool)

    for route in list(app.router.routes()):
        cors.add(route)

    return app


def main() -> None:
    """Run the application."""
    configure_logging(default_settings.log_level, json_logs=default_settings.json_logs)
    web.run_app(
        create_app(),
        host=default_settings.host,
        port=default_settings.port,
        access_log=None,
    )


if __name__ == "__main__":
    main()
