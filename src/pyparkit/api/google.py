"""Google Maps geocoding and directions used by route search."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from ..const import DIRECTIONS_ENDPOINT, GEOCODE_ENDPOINT, GOOGLE_MAPS_BASE_URL
from ..exceptions import BackendError, ConfigError
from ..models import LatLng
from .base import BaseApi

_LOGGER = logging.getLogger(__name__)


class GoogleMapsApi(BaseApi):
    """Resolves place identifiers and driving routes."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        *,
        api_key: str | None,
        base_url: str = GOOGLE_MAPS_BASE_URL,
        timeout: aiohttp.ClientTimeout | None = None,
        retry_count: int = 0,
    ) -> None:
        super().__init__(session, base_url=base_url, timeout=timeout, retry_count=retry_count)
        self._api_key = api_key

    async def geocode_place_id(self, place_id: str) -> LatLng | None:
        """Return the coordinates of a place, or ``None`` when it cannot be resolved."""
        place_id_value = self._require_id(place_id, "place_id")
        data = await self._request_json(
            "GET",
            GEOCODE_ENDPOINT,
            params={"place_id": place_id_value, "key": self._require_api_key()},
        )
        if not isinstance(data, dict) or data.get("status") != "OK":
            _LOGGER.debug(
                "geocode_place_id returned status %s",
                data.get("status") if isinstance(data, dict) else None,
            )
            return None
        results = data.get("results")
        if not isinstance(results, list) or not results:
            return None
        return self._map_location(results[0])

    async def route(self, origin: LatLng, destination: LatLng) -> str:
        """Return the encoded overview polyline of a driving route."""
        data = await self._request_json(
            "GET",
            DIRECTIONS_ENDPOINT,
            params={
                "origin": f"{origin.lat},{origin.lng}",
                "destination": f"{destination.lat},{destination.lng}",
                "mode": "driving",
                "key": self._require_api_key(),
            },
        )
        if not isinstance(data, dict):
            raise BackendError("Directions response was not a JSON object.")
        status = data.get("status")
        if status != "OK":
            raise BackendError(f"Directions request failed: {status}.")
        routes = data.get("routes")
        if not isinstance(routes, list) or not routes or not isinstance(routes[0], dict):
            raise BackendError("Directions response did not contain a route.")
        overview = routes[0].get("overview_polyline")
        points = overview.get("points") if isinstance(overview, dict) else overview
        if not isinstance(points, str) or not points:
            raise BackendError("Directions response did not contain a polyline.")
        return points

    def _require_api_key(self) -> str:
        if not self._api_key:
            raise ConfigError("A Google Maps API key is required for geocoding and routing.")
        return self._api_key

    def _map_location(self, result: Any) -> LatLng | None:
        if not isinstance(result, dict):
            return None
        geometry = result.get("geometry")
        location = geometry.get("location") if isinstance(geometry, dict) else None
        if not isinstance(location, dict):
            return None
        lat = location.get("lat")
        lng = location.get("lng")
        if not isinstance(lat, int | float) or not isinstance(lng, int | float):
            raise BackendError("Geocoding result included invalid coordinates.")
        return LatLng(lat=float(lat), lng=float(lng))
