"""Application-scoped dependencies shared by handlers."""
from __future__ import annotations

from aiohttp import web

from sensor_metadata_service.repositories.sensor_metadata import SensorMetadataRepository

SENSOR_REPOSITORY_KEY = web.AppKey("sensor_repository", SensorMetadataRepository)


def get_sensor_repository(request: web.Request) -> SensorMetadataRepository:
    try:
        return request.app[SENSOR_REPOSITORY_KEY]
    except KeyError as exc:
        raise RuntimeError("Sensor repository not initialized") from exc
