from __future__ import annotations

import math

import pytest

from sensor_metadata_service.core.exceptions import (
    GeocodingError,
    InvalidCoordinatesError,
    NotFoundError,
)
from sensor_metadata_service.domain.models import SensorMetadata
from sensor_metadata_service.main import create_app

# Radius used by PostgreSQL's earth() function
EARTH_RADIUS_M = 6378168.0


def _great_circle(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    p1, p2 = math.radians(lat1), math.radians(lat2)
    dp = p2 - p1
    dl = math.radians(lon2 - lon1)
    a = math.sin(dp / 2) ** 2 + math.cos(p1) * math.cos(p2) * math.sin(dl / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(a)))


class FakeSensorRepository:
    """In-memory stand-in for PostgresSensorMetadataRepository."""

    def __init__(self) -> None:
        self.rows: dict[int, SensorMetadata] = {}
        self.cities: dict[str, tuple[float, float]] = {}
        self.calls: list[str] = []
        self.fail_with: Exception | None = None
        self.geocoding_down = False
        self._next_id = 1

    def _maybe_fail(self, op: str) -> None:
        self.calls.append(op)
        if self.fail_with is not None:
            raise self.fail_with

    async def create(self, sensor: SensorMetadata) -> int:
        self._maybe_fail("create")
        sensor_id = self._next_id
        self._next_id += 1
        self.rows[sensor_id] = sensor.model_copy(update={"id": sensor_id, "distance": None})
        return sensor_id

    async def get_by_name(self, name: str) -> SensorMetadata:
        self._maybe_fail("get_by_name")
        for row in self.rows.values():
            if row.name == name:
                return row
        raise NotFoundError("Sensor metadata not found")

    async def update(self, sensor: SensorMetadata) -> None:
        self._maybe_fail("update")
        if sensor.id in self.rows:
            self.rows[sensor.id] = sensor.model_copy(update={"distance": None})

    async def get_nearest(self, latitude: str, longitude: str) -> SensorMetadata:
        self._maybe_fail("get_nearest")
        try:
            lat, lon = float(latitude), float(longitude)
        except ValueError as exc:
            raise InvalidCoordinatesError("bad coordinates") from exc
        if not self.rows:
            raise NotFoundError("Sensor metadata not found")
        best = min(
            self.rows.values(),
            key=lambda s: _great_circle(lat, lon, s.location.latitude, s.location.longitude),
        )
        distance = _great_circle(lat, lon, best.location.latitude, best.location.longitude)
        return best.model_copy(update={"distance": distance})

    async def get_nearest_by_city(self, city: str) -> SensorMetadata:
        self._maybe_fail("get_nearest_by_city")
        if self.geocoding_down:
            raise GeocodingError("Geocoding provider unreachable")
        if city not in self.cities:
            raise NotFoundError(f"No geocoding result for city {city!r}")
        lat, lon = self.cities[city]
        return await self.get_nearest("%f" % lat, "%f" % lon)


@pytest.fixture
def fake_repo() -> FakeSensorRepository:
    return FakeSensorRepository()


@pytest.fixture
async def service_client(aiohttp_client, fake_repo):
    app = create_app(repository=fake_repo)
    return await aiohttp_client(app)
