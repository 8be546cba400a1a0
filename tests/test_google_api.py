from __future__ import annotations

import pytest

from pyparkit.api.google import GoogleMapsApi
from pyparkit.exceptions import BackendError, ConfigError
from pyparkit.models import LatLng

class _FakeResponse:
    def __init__(self, *, status: int = 200, json_data: object | None = None) -> None:
        self.status = status
        self._json_data = json_data

    async def json(self) -> object:
        return self._json_data


class _FakeRequestContext:
    def __init__(self, response: _FakeResponse) -> None:
        self._response = response

    async def __aenter__(self) -> _FakeResponse:
        return self._response

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        return False


class _RecordingSession:
    def __init__(self, *payloads: object) -> None:
        self._payloads = list(payloads)
        self.requests: list[tuple[str, str, dict]] = []

    def request(self, method: str, url: str, **kwargs) -> _FakeRequestContext:
        self.requests.append((method, url, kwargs))
        return _FakeRequestContext(_FakeResponse(json_data=self._payloads.pop(0)))


def _api(session: _RecordingSession, api_key: str | None = "maps-key") -> GoogleMapsApi:
    return GoogleMapsApi(session, api_key=api_key)


@pytest.mark.asyncio
async def test_geocode_place_id() -> None:
    session = _RecordingSession(
        {"status": "OK", "results": [{"geometry": {"location": {"lat": 52.37, "lng": 4.89}}}]}
    )

    location = await _api(session).geocode_place_id("place-1")

    method, url, kwargs = session.requests[0]
    assert method == "GET"
    assert url == "https://maps.googleapis.com/maps/api/geocode/json"
    assert kwargs["params"] == {"place_id": "place-1", "key": "maps-key"}
    assert location == LatLng(lat=52.37, lng=4.89)


@pytest.mark.asyncio
async def test_geocode_zero_results_is_none() -> None:
    session = _RecordingSession({"status": "ZERO_RESULTS", "results": []})
    assert await _api(session).geocode_place_id("place-1") is None


@pytest.mark.asyncio
async def test_missing_api_key_is_config_error() -> None:
    session = _RecordingSession()
    with pytest.raises(ConfigError):
        await _api(session, api_key=None).geocode_place_id("place-1")
    assert session.requests == []


@pytest.mark.asyncio
async def test_route_returns_overview_polyline() -> None:
    session = _RecordingSession(
        {"status": "OK", "routes": [{"overview_polyline": {"points": "_p~iF~ps|U"}}]}
    )

    encoded = await _api(session).route(LatLng(38.5, -120.2), LatLng(40.7, -120.95))

    params = session.requests[0][2]["params"]
    assert params["origin"] == "38.5,-120.2"
    assert params["destination"] == "40.7,-120.95"
    assert params["mode"] == "driving"
    assert encoded == "_p~iF~ps|U"


@pytest.mark.asyncio
async def test_route_without_result_is_backend_error() -> None:
    session = _RecordingSession({"status": "ZERO_RESULTS", "routes": []})
    with pytest.raises(BackendError):
        await _api(session).route(LatLng(0, 0), LatLng(1, 1))
