"""Sensor metadata repository backed by asyncpg."""
from __future__ import annotations

from typing import Protocol

import structlog
from asyncpg import Pool, Record  # type: ignore[import-untyped]
from asyncpg.exceptions import DataError  # type: ignore[import-untyped]

from sensor_metadata_service.clients.geocoding import Geocoder
from sensor_metadata_service.core.exceptions import InvalidCoordinatesError, NotFoundError
from sensor_metadata_service.domain.models import SensorMetadata
from sensor_metadata_service.repositories.base import BaseRepository

logger = structlog.get_logger(__name__)


class SensorMetadataRepository(Protocol):
    """Operations the HTTP handlers need from sensor metadata storage."""

    async def create(self, sensor: SensorMetadata) -> int: ...

    async def get_by_name(self, name: str) -> SensorMetadata: ...

    async def update(self, sensor: SensorMetadata) -> None: ...

    async def get_nearest(self, latitude: str, longitude: str) -> SensorMetadata: ...

    async def get_nearest_by_city(self, city: str) -> SensorMetadata: ...


class PostgresSensorMetadataRepository(BaseRepository):
    """Sensor metadata stored in the ``sensor_metadata`` table.

    Distance queries rely on the ``cube`` and ``earthdistance`` extensions.
    """

    def __init__(self, pool: Pool, geocoder: Geocoder):
        super().__init__(pool)
        self._geocoder = geocoder

    @staticmethod
    def _to_model(record: Record) -> SensorMetadata:
        return SensorMetadata.from_row(dict(record))

    async def create(self, sensor: SensorMetadata) -> int:
        record = await self._fetchrow(
            """
            INSERT INTO sensor_metadata (name, location_latitude, location_longitude, tags)
            VALUES ($1, $2, $3, $4)
            RETURNING id
            """,
            sensor.name,
            sensor.location.latitude,
            sensor.location.longitude,
            sensor.tags,
        )
        assert record is not None
        sensor_id = int(record["id"])
        logger.info("sensor_metadata_created", sensor_id=sensor_id, name=sensor.name)
        return sensor_id

    async def get_by_name(self, name: str) -> SensorMetadata:
        record = await self._fetchrow(
            """
            SELECT id, name, location_latitude, location_longitude, tags
            FROM sensor_metadata
            WHERE name = $1
            """,
            name,
        )
        if record is None:
            raise NotFoundError("Sensor metadata not found")
        return self._to_model(record)

    async def update(self, sensor: SensorMetadata) -> None:
        status = await self._execute(
            """
            UPDATE sensor_metadata
            SET name = $1,
                location_latitude = $2,
                location_longitude = $3,
                tags = $4
            WHERE id = $5
            """,
            sensor.name,
            sensor.location.latitude,
            sensor.location.longitude,
            sensor.tags,
            sensor.id,
        )
        # asyncpg returns the command tag, e.g. "UPDATE 1"
        if status.endswith(" 0"):
            logger.debug("sensor_metadata_update_no_rows", sensor_id=sensor.id)

    async def get_nearest(self, latitude: str, longitude: str) -> SensorMetadata:
        """Closest sensor to the point, with its great-circle distance in metres.

        Coordinates are bound as text and cast by PostgreSQL.
        """
        try:
            record = await self._fetchrow(
                """
                SELECT id, name, location_latitude, location_longitude, tags,
                       earth_distance(
                           ll_to_earth($1::text::float8, $2::text::float8),
                           ll_to_earth(location_latitude, location_longitude)
                       ) AS distance
                FROM sensor_metadata
                ORDER BY distance
                LIMIT 1
                """,
                latitude,
                longitude,
            )
        except DataError as exc:
            raise InvalidCoordinatesError(
                f"Invalid coordinates: {latitude!r}, {longitude!r}"
            ) from exc
        if record is None:
            raise NotFoundError("Sensor metadata not found")
        return self._to_model(record)

    async def locate_city(self, city: str) -> str:
        """Resolve a city name to a ``"latitude,longitude"`` string."""
        result = await self._geocoder.geocode(city)
        feature = result.first()
        if feature is None:
            raise NotFoundError(f"No geocoding result for city {city!r}")
        logger.debug("city_located", city=city, place_name=feature.place_name)
        return "%f,%f" % (feature.latitude, feature.longitude)

    async def get_nearest_by_city(self, city: str) -> SensorMetadata:
        latitude, longitude = (await self.locate_city(city)).split(",")
        return await self.get_nearest(latitude, longitude)
