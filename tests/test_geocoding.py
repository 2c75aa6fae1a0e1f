from __future__ import annotations

import httpx
import pytest

from sensor_metadata_service.clients.geocoding import MapboxGeocodingClient
from sensor_metadata_service.core.exceptions import GeocodingError

PARIS = {
    "features": [
        {"geometry": {"coordinates": [2.3522, 48.8566]}, "place_name": "Paris, France"}
    ]
}


def _client(handler) -> MapboxGeocodingClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return MapboxGeocodingClient(http, base_url="https://api.mapbox.com/", api_key="pk.test")


async def test_geocode_builds_encoded_request():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=PARIS)

    result = await _client(handler).geocode("São Paulo/Centro")

    assert result.first() is not None
    request = seen[0]
    assert request.method == "GET"
    assert request.url.host == "api.mapbox.com"
    assert request.url.raw_path.decode().startswith(
        "/geocoding/v5/mapbox.places/S%C3%A3o%20Paulo%2FCentro.json"
    )
    assert request.url.params["access_token"] == "pk.test"


async def test_geocode_parses_candidates():
    result = await _client(lambda request: httpx.Response(200, json=PARIS)).geocode("Paris")
    first = result.first()
    assert first is not None
    assert (first.latitude, first.longitude) == (48.8566, 2.3522)


async def test_geocode_empty_feature_list():
    result = await _client(lambda request: httpx.Response(200, json={"features": []})).geocode(
        "Atlantis"
    )
    assert result.first() is None


async def test_geocode_error_status():
    client = _client(lambda request: httpx.Response(401, json={"message": "Not Authorized"}))
    with pytest.raises(GeocodingError, match="401"):
        await client.geocode("Paris")


async def test_geocode_transport_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(GeocodingError, match="unreachable"):
        await _client(handler).geocode("Paris")


@pytest.mark.parametrize(
    "content",
    [
        b"<html>oops</html>",
        b'{"features": [{"geometry": {"coordinates": [1.0]}, "place_name": "x"}]}',
    ],
)
async def test_geocode_malformed_body(content):
    client = _client(lambda request: httpx.Response(200, content=content))
    with pytest.raises(GeocodingError, match="Malformed"):
        await client.geocode("Paris")
