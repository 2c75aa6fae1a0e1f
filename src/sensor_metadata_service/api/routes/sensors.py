"""Sensor metadata endpoints."""
from __future__ import annotations

from typing import Any, Sequence

import structlog
from aiohttp import web
from pydantic import ValidationError

from sensor_metadata_service.api.dependencies import get_sensor_repository
from sensor_metadata_service.api.utils import (
    InvalidPayloadError,
    error_response,
    query_param,
    read_json,
)
from sensor_metadata_service.core.exceptions import (
    GeocodingError,
    InvalidCoordinatesError,
    NotFoundError,
)
from sensor_metadata_service.domain.models import SensorMetadata
from sensor_metadata_service.domain.validation import (
    SENSOR_METADATA_RULES,
    SENSOR_METADATA_UPDATE_RULES,
    FieldRule,
    format_violations,
    validate_payload,
)

logger = structlog.get_logger(__name__)

routes = web.RouteTableDef()


class PayloadError(Exception):
    """Request body could not be turned into a SensorMetadata."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def _drop_nulls(data: dict[str, Any]) -> dict[str, Any]:
    """JSON ``null`` means "not supplied", so the model defaults apply."""
    return {
        key: _drop_nulls(value) if isinstance(value, dict) else value
        for key, value in data.items()
        if value is not None
    }


async def _read_sensor(request: web.Request, rules: Sequence[FieldRule]) -> SensorMetadata:
    try:
        data: dict[str, Any] = await read_json(request)
    except InvalidPayloadError as exc:
        raise PayloadError("Invalid request payload") from exc

    violations = validate_payload(data, rules)
    if violations:
        raise PayloadError(format_violations(violations))

    data = _drop_nulls(data)
    data.pop("distance", None)
    try:
        return SensorMetadata.model_validate(data)
    except ValidationError as exc:
        logger.info("sensor_payload_rejected", errors=exc.errors(include_url=False))
        raise PayloadError("Invalid request payload") from exc


@routes.post("/sensors")
async def create_sensor_metadata(request: web.Request) -> web.Response:
    try:
        sensor = await _read_sensor(request, SENSOR_METADATA_RULES)
    except PayloadError as exc:
        return error_response(400, exc.message)

    repo = get_sensor_repository(request)
    try:
        await repo.create(sensor)
    except Exception:
        logger.exception("sensor_metadata_create_failed", name=sensor.name)
        return error_response(500, "Failed to create sensor metadata")

    return web.Response(status=201)


@routes.get("/sensors")
async def get_sensor_metadata(request: web.Request) -> web.Response:
    name = query_param(request, "name")
    if name is None:
        return error_response(400, "Missing 'name' parameter")

    repo = get_sensor_repository(request)
    try:
        sensor = await repo.get_by_name(name)
    except NotFoundError:
        return error_response(404, "Sensor metadata not found")
    except Exception:
        logger.exception("sensor_metadata_lookup_failed", name=name)
        return error_response(404, "Sensor metadata not found")

    return web.json_response(sensor.to_dict())


@routes.put("/sensors")
async def update_sensor_metadata(request: web.Request) -> web.Response:
    """Replace name, location and tags of the sensor whose ``id`` is in the body."""
    try:
        sensor = await _read_sensor(request, SENSOR_METADATA_UPDATE_RULES)
    except PayloadError as exc:
        return error_response(400, exc.message)

    repo = get_sensor_repository(request)
    try:
        await repo.update(sensor)
    except Exception:
        logger.exception("sensor_metadata_update_failed", sensor_id=sensor.id)
        return error_response(500, "Failed to update sensor metadata")

    return web.Response(status=200)


@routes.get("/sensors/nearest")
async def get_nearest_sensor_metadata(request: web.Request) -> web.Response:
    latitude = query_param(request, "latitude")
    longitude = query_param(request, "longitude")
    if latitude is None or longitude is None:
        return error_response(400, "Missing 'latitude' or 'longitude' parameter")

    repo = get_sensor_repository(request)
    try:
        sensor = await repo.get_nearest(latitude, longitude)
    except InvalidCoordinatesError:
        return error_response(400, "Invalid 'latitude' or 'longitude' parameter")
    except NotFoundError:
        return error_response(404, "No nearest sensor found")
    except Exception:
        logger.exception(
            "nearest_sensor_lookup_failed", latitude=latitude, longitude=longitude
        )
        return error_response(404, "No nearest sensor found")

    return web.json_response(sensor.to_dict())


@routes.get("/sensors/nearest/city")
async def get_nearest_sensor_by_city(request: web.Request) -> web.Response:
    city = query_param(request, "city")
    if city is None:
        return error_response(400, "Missing 'city' parameter")

    repo = get_sensor_repository(request)
    try:
        sensor = await repo.get_nearest_by_city(city)
    except NotFoundError:
        return error_response(404, "No nearest sensor found")
    except GeocodingError:
        return error_response(502, "Geocoding lookup failed")
    except Exception:
        logger.exception("nearest_sensor_by_city_failed", city=city)
        return error_response(404, "No nearest sensor found")

    return web.json_response(sensor.to_dict())
