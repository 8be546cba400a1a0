"""Map viewport to place query synchronization.

Viewport movement is debounced, every new query cancels the one in flight,
and results are reconciled into markers. Query failures are logged and leave
the previous results in place.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from .api.google import GoogleMapsApi
from .api.map import MapApi
from .const import (
    DEBOUNCE_DELAY,
    DEFAULT_RADIUS_KM,
    MARKER_STAGGER_DELAY,
    MIN_RADIUS_KM,
    RESULT_LIMIT,
    ROUTE_BUFFER_KM,
)
from .exceptions import ConfigError, ParkitError
from .markers import MarkerReconciler
from .models import GeoRegion, LatLng, MarkerUpdate, PlaceSummary
from .util import decode_polyline, midpoint, query_radius_km, region_from_points

_LOGGER = logging.getLogger(__name__)

MarkerListener = Callable[[MarkerUpdate], None]


class PlaceQuery(Protocol):
    async def fetch(self, map_api: MapApi) -> list[PlaceSummary]: ...


@dataclass(frozen=True, slots=True)
class NearbyQuery:
    """Places within a radius around a point."""

    center: LatLng
    radius_km: float = DEFAULT_RADIUS_KM
    limit: int = RESULT_LIMIT

    async def fetch(self, map_api: MapApi) -> list[PlaceSummary]:
        return await map_api.nearby(
            self.center.lat,
            self.center.lng,
            radius_km=self.radius_km,
            limit=self.limit,
        )


@dataclass(frozen=True, slots=True)
class AlongRouteQuery:
    """Places within a buffer around an encoded route polyline."""

    encoded_polyline: str
    buffer_km: float = ROUTE_BUFFER_KM
    limit: int = RESULT_LIMIT

    async def fetch(self, map_api: MapApi) -> list[PlaceSummary]:
        return await map_api.along_route(
            self.encoded_polyline,
            buffer_km=self.buffer_km,
            limit=self.limit,
        )


class ViewportSynchronizer:
    """Owns the debounce timer, the in-flight query and the current results."""

    def __init__(
        self,
        map_api: MapApi,
        *,
        geocoder: GoogleMapsApi | None = None,
        debounce_delay: float = DEBOUNCE_DELAY,
        min_radius_km: int = MIN_RADIUS_KM,
        stagger_delay: float = MARKER_STAGGER_DELAY,
    ) -> None:
        self._map_api = map_api
        self._geocoder = geocoder
        self._debounce_delay = debounce_delay
        self._min_radius_km = min_radius_km
        self._reconciler = MarkerReconciler(stagger_delay)
        self._listeners: list[MarkerListener] = []
        self._debounce_task: asyncio.Task[list[PlaceSummary] | None] | None = None
        self._query_task: asyncio.Task[list[PlaceSummary] | None] | None = None
        self._last_query: PlaceQuery | None = None
        self._places: tuple[PlaceSummary, ...] = ()
        self._markers = MarkerUpdate(markers=(), new_ids=())
        self._center: LatLng | None = None
        self._route_polyline: str | None = None
        self._route_region: GeoRegion | None = None
        self._loading = False
        self._intent = 0

    @property
    def places(self) -> tuple[PlaceSummary, ...]:
        return self._places

    @property
    def markers(self) -> MarkerUpdate:
        return self._markers

    @property
    def center(self) -> LatLng | None:
        return self._center

    @property
    def route_polyline(self) -> str | None:
        return self._route_polyline

    @property
    def route_region(self) -> GeoRegion | None:
        return self._route_region

    @property
    def loading(self) -> bool:
        return self._loading

    def find_place(self, place_id: str) -> PlaceSummary | None:
        for place in self._places:
            if place.id == place_id:
                return place
        return None

    def add_listener(self, listener: MarkerListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def nearby_query_for_region(self, region: GeoRegion) -> NearbyQuery:
        return NearbyQuery(
            center=region.center,
            radius_km=query_radius_km(region, minimum_km=self._min_radius_km),
        )

    def on_bounds_settled(self, region: GeoRegion) -> asyncio.Task[list[PlaceSummary] | None]:
        """Schedule a nearby query once the viewport has been still for the debounce delay."""
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
        self._debounce_task = asyncio.create_task(self._debounced_query(region))
        return self._debounce_task

    async def on_location_resolved(self, coordinates: LatLng) -> list[PlaceSummary] | None:
        self._center = coordinates
        self._route_polyline = None
        self._route_region = None
        return await self.run_query(NearbyQuery(center=coordinates))

    async def on_place_selected(self, place_id: str) -> list[PlaceSummary] | None:
        geocoder = self._require_geocoder()
        intent = self._next_intent()
        try:
            coordinates = await geocoder.geocode_place_id(place_id)
        except ParkitError as exc:
            _LOGGER.warning("Resolving place %s failed: %s", place_id, exc)
            return None
        if coordinates is None:
            _LOGGER.warning("Place %s could not be resolved", place_id)
            return None
        if self._is_stale(intent):
            _LOGGER.debug("Resolved place %s superseded by a newer request", place_id)
            return None
        return await self.on_location_resolved(coordinates)

    async def on_route_requested(
        self,
        origin_id: str,
        destination_id: str,
    ) -> list[PlaceSummary] | None:
        geocoder = self._require_geocoder()
        intent = self._next_intent()
        try:
            origin, destination = await asyncio.gather(
                geocoder.geocode_place_id(origin_id),
                geocoder.geocode_place_id(destination_id),
            )
            if origin is None or destination is None:
                _LOGGER.warning("Route endpoints could not be resolved")
                return None
            if self._is_stale(intent):
                _LOGGER.debug("Route %s -> %s superseded", origin_id, destination_id)
                return None
            encoded = await geocoder.route(origin, destination)
            path = decode_polyline(encoded)
        except ParkitError as exc:
            _LOGGER.warning("Route search failed: %s", exc)
            return None
        if self._is_stale(intent):
            _LOGGER.debug("Route %s -> %s superseded", origin_id, destination_id)
            return None
        self._route_polyline = encoded
        self._route_region = region_from_points(path or [origin, destination])
        self._center = midpoint(origin, destination)
        return await self.run_query(AlongRouteQuery(encoded_polyline=encoded))

    async def refresh(self) -> list[PlaceSummary] | None:
        """Re-run the last query, e.g. after a booking changed availability."""
        if self._last_query is not None:
            return await self.run_query(self._last_query)
        if self._center is not None:
            return await self.run_query(NearbyQuery(center=self._center))
        return None

    async def run_query(self, query: PlaceQuery) -> list[PlaceSummary] | None:
        """Issue ``query`` now, cancelling any query still in flight.

        Returns ``None`` when the query failed or was superseded.
        """
        task = self._start_query(query)
        await asyncio.wait({task})
        if task.cancelled():
            return None
        return task.result()

    async def close(self) -> None:
        pending = [
            task
            for task in (self._debounce_task, self._query_task)
            if task is not None and not task.done()
        ]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.wait(pending)
        self._loading = False

    async def _debounced_query(self, region: GeoRegion) -> list[PlaceSummary] | None:
        await asyncio.sleep(self._debounce_delay)
        return await self.run_query(self.nearby_query_for_region(region))

    def _start_query(self, query: PlaceQuery) -> asyncio.Task[list[PlaceSummary] | None]:
        if self._query_task is not None and not self._query_task.done():
            self._query_task.cancel()
        self._last_query = query
        self._next_intent()
        self._loading = True
        task = asyncio.create_task(self._execute(query))
        self._query_task = task
        return task

    async def _execute(self, query: PlaceQuery) -> list[PlaceSummary] | None:
        try:
            places = await query.fetch(self._map_api)
        except asyncio.CancelledError:
            _LOGGER.debug("Superseded place query cancelled: %s", query)
            raise
        except ParkitError as exc:
            _LOGGER.warning("Place query failed, keeping previous results: %s", exc)
            return None
        finally:
            if asyncio.current_task() is self._query_task:
                self._loading = False
        self._apply(places)
        return places

    def _apply(self, places: list[PlaceSummary]) -> None:
        self._places = tuple(places)
        self._markers = self._reconciler.reconcile(places)
        _LOGGER.debug(
            "Applied %s places, %s new markers",
            len(self._places),
            len(self._markers.new_ids),
        )
        for listener in list(self._listeners):
            listener(self._markers)

    def _next_intent(self) -> int:
        self._intent += 1
        return self._intent

    def _is_stale(self, intent: int) -> bool:
        return intent != self._intent

    def _require_geocoder(self) -> GoogleMapsApi:
        if self._geocoder is None:
            raise ConfigError("A geocoder is required for place and route search.")
        return self._geocoder
