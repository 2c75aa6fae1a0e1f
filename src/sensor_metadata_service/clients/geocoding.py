"""Mapbox geocoding client."""
from __future__ import annotations

from typing import Protocol
from urllib.parse import quote

import httpx
import structlog
from pydantic import ValidationError

from sensor_metadata_service.core.exceptions import GeocodingError
from sensor_metadata_service.domain.models import GeocodeResult

logger = structlog.get_logger(__name__)

GEOCODING_PATH = "/geocoding/v5/mapbox.places/{query}.json"


class Geocoder(Protocol):
    async def geocode(self, city: str) -> GeocodeResult: ...


class MapboxGeocodingClient:
    """Forward geocoding of place names through the Mapbox places API."""

    def __init__(self, client: httpx.AsyncClient, *, base_url: str, api_key: str):
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key

    def _url(self, city: str) -> str:
        return self._base_url + GEOCODING_PATH.format(query=quote(city, safe=""))

    async def geocode(self, city: str) -> GeocodeResult:
        try:
            resp = await self._client.get(
                self._url(city), params={"access_token": self._api_key}
            )
            resp.raise_for_status()
            return GeocodeResult.model_validate(resp.json())
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "geocoding_bad_status", city=city, status=exc.response.status_code
            )
            raise GeocodingError(
                f"Geocoding provider answered {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("geocoding_unreachable", city=city, error=type(exc).__name__)
            raise GeocodingError("Geocoding provider unreachable") from exc
        except (ValueError, ValidationError) as exc:
            logger.warning("geocoding_malformed_response", city=city)
            raise GeocodingError("Malformed geocoding response") from exc
