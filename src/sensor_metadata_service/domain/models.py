"""Pydantic models representing sensor metadata and geocoder responses."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Location(BaseModel):
    """GPS position of a sensor."""

    latitude: float
    longitude: float


class SensorMetadata(BaseModel):
    """Sensor metadata record."""

    id: int = 0
    name: str
    location: Location
    tags: list[str] = Field(default_factory=list)
    # Metres; only populated by nearest-sensor queries
    distance: float | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> SensorMetadata:
        """Create SensorMetadata from a sensor_metadata row."""
        return cls(
            id=row["id"],
            name=row["name"],
            location=Location(
                latitude=row["location_latitude"],
                longitude=row["location_longitude"],
            ),
            tags=list(row.get("tags") or []),
            distance=row.get("distance"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dict, omitting distance unless it was computed."""
        data = self.model_dump()
        if self.distance is None:
            data.pop("distance")
        return data


class GeocodeGeometry(BaseModel):
    # [longitude, latitude]
    coordinates: list[float] = Field(min_length=2)


class GeocodeFeature(BaseModel):
    geometry: GeocodeGeometry
    place_name: str = ""

    @property
    def latitude(self) -> float:
        return self.geometry.coordinates[1]

    @property
    def longitude(self) -> float:
        return self.geometry.coordinates[0]


class GeocodeResult(BaseModel):
    """Candidate places returned by the geocoding provider for one query."""

    features: list[GeocodeFeature] = Field(default_factory=list)

    def first(self) -> GeocodeFeature | None:
        return self.features[0] if self.features else None
