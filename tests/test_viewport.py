from __future__ import annotations

import asyncio

import pytest

from pyparkit.exceptions import BackendError, ConfigError
from pyparkit.models import GeoRegion, LatLng, PlaceCategory, PlaceSummary
from pyparkit.util import query_radius_km
from pyparkit.viewport import AlongRouteQuery, NearbyQuery, ViewportSynchronizer

ROUTE_POLYLINE = "_p~iF~ps|U_ulLnnqC_mqNvxq`@"


def _places(*ids: str) -> list[PlaceSummary]:
    return [
        PlaceSummary(id=place_id, name=place_id, lat=52.0, lng=4.0, category=PlaceCategory.PARKING)
        for place_id in ids
    ]


def _region(lat: float, lng: float, span: float = 0.1) -> GeoRegion:
    return GeoRegion(
        north_east=LatLng(lat + span, lng + span),
        south_west=LatLng(lat - span, lng - span),
    )


async def _settle() -> None:
    for _ in range(10):
        await asyncio.sleep(0)


class _FakeMapApi:
    def __init__(self, *results: object) -> None:
        self._results = list(results)
        self.nearby_calls: list[tuple[float, float, float, int]] = []
        self.route_calls: list[tuple[str, float, int]] = []

    async def nearby(self, lat, lng, radius_km=10, limit=50):
        self.nearby_calls.append((lat, lng, radius_km, limit))
        return self._next()

    async def along_route(self, encoded_polyline, buffer_km=2, limit=50):
        self.route_calls.append((encoded_polyline, buffer_km, limit))
        return self._next()

    def _next(self):
        result = self._results.pop(0) if self._results else []
        if isinstance(result, Exception):
            raise result
        return result


class _GatedMapApi:
    """Each nearby call blocks until the test releases it."""

    def __init__(self) -> None:
        self.gates: list[asyncio.Event] = []
        self.responses: dict[int, list[PlaceSummary]] = {}
        self.cancelled = 0

    async def nearby(self, lat, lng, radius_km=10, limit=50):
        index = len(self.gates)
        gate = asyncio.Event()
        self.gates.append(gate)
        try:
            await gate.wait()
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        return self.responses[index]

    def release(self, index: int, places: list[PlaceSummary]) -> None:
        self.responses[index] = places
        self.gates[index].set()


class _FakeGeocoder:
    def __init__(self, locations: dict[str, LatLng], polyline: str = ROUTE_POLYLINE) -> None:
        self._locations = locations
        self._polyline = polyline
        self.routes: list[tuple[LatLng, LatLng]] = []

    async def geocode_place_id(self, place_id: str) -> LatLng | None:
        return self._locations.get(place_id)

    async def route(self, origin: LatLng, destination: LatLng) -> str:
        self.routes.append((origin, destination))
        return self._polyline


class _GatedGeocoder(_FakeGeocoder):
    """Place lookups block until the test opens the gate for that place id."""

    def __init__(
        self,
        locations: dict[str, LatLng],
        polylines: dict[LatLng, str] | None = None,
    ) -> None:
        super().__init__(locations)
        self._polylines = polylines or {}
        self._gates: dict[str, asyncio.Event] = {}

    async def geocode_place_id(self, place_id: str) -> LatLng | None:
        await self._gates.setdefault(place_id, asyncio.Event()).wait()
        return await super().geocode_place_id(place_id)

    async def route(self, origin: LatLng, destination: LatLng) -> str:
        await super().route(origin, destination)
        return self._polylines.get(origin, ROUTE_POLYLINE)

    def open(self, *place_ids: str) -> None:
        for place_id in place_ids:
            self._gates.setdefault(place_id, asyncio.Event()).set()


@pytest.mark.asyncio
async def test_debounce_issues_one_query_for_last_region() -> None:
    api = _FakeMapApi(_places("a"))
    sync = ViewportSynchronizer(api, debounce_delay=0.01)

    first = sync.on_bounds_settled(_region(10, 10))
    second = sync.on_bounds_settled(_region(20, 20))
    last = sync.on_bounds_settled(_region(52.37, 4.89))

    assert [place.id for place in await last] == ["a"]
    assert first.cancelled()
    assert second.cancelled()
    assert len(api.nearby_calls) == 1
    lat, lng, radius_km, limit = api.nearby_calls[0]
    assert (lat, lng) == pytest.approx((52.37, 4.89))
    assert radius_km == query_radius_km(_region(52.37, 4.89), minimum_km=5)
    assert limit == 50


@pytest.mark.asyncio
async def test_small_viewport_uses_minimum_radius() -> None:
    api = _FakeMapApi()
    sync = ViewportSynchronizer(api, debounce_delay=0)

    await sync.on_bounds_settled(_region(52.37, 4.89, span=0.001))

    assert api.nearby_calls[0][2] == 5


@pytest.mark.asyncio
async def test_new_query_cancels_query_in_flight() -> None:
    api = _GatedMapApi()
    sync = ViewportSynchronizer(api)

    first = asyncio.create_task(sync.run_query(NearbyQuery(center=LatLng(1, 1))))
    await _settle()
    assert sync.loading is True
    second = asyncio.create_task(sync.run_query(NearbyQuery(center=LatLng(2, 2))))
    await _settle()

    api.release(1, _places("b"))

    assert [place.id for place in await second] == ["b"]
    assert await first is None
    assert api.cancelled == 1
    assert [place.id for place in sync.places] == ["b"]
    assert sync.loading is False


@pytest.mark.asyncio
async def test_failed_query_keeps_previous_results() -> None:
    api = _FakeMapApi(_places("a", "b"), BackendError("down"))
    sync = ViewportSynchronizer(api)
    updates = []
    sync.add_listener(updates.append)

    await sync.on_location_resolved(LatLng(52.37, 4.89))
    result = await sync.refresh()

    assert result is None
    assert [place.id for place in sync.places] == ["a", "b"]
    assert len(updates) == 1
    assert sync.loading is False


@pytest.mark.asyncio
async def test_listener_receives_marker_updates_until_removed() -> None:
    api = _FakeMapApi(_places("a"), _places("a", "b"), _places("c"))
    sync = ViewportSynchronizer(api)
    updates = []
    remove = sync.add_listener(updates.append)

    await sync.run_query(NearbyQuery(center=LatLng(0, 0)))
    await sync.run_query(NearbyQuery(center=LatLng(0, 0)))
    remove()
    await sync.run_query(NearbyQuery(center=LatLng(0, 0)))

    assert [update.new_ids for update in updates] == [("a",), ("b",)]
    assert sync.markers.new_ids == ("c",)


@pytest.mark.asyncio
async def test_place_selected_recenters_and_queries_default_radius() -> None:
    api = _FakeMapApi(_places("a"))
    geocoder = _FakeGeocoder({"place-1": LatLng(52.37, 4.89)})
    sync = ViewportSynchronizer(api, geocoder=geocoder)

    await sync.on_place_selected("place-1")

    assert sync.center == LatLng(52.37, 4.89)
    assert api.nearby_calls == [(52.37, 4.89, 10, 50)]
    assert sync.find_place("a") is not None
    assert sync.find_place("missing") is None


@pytest.mark.asyncio
async def test_unresolved_place_is_ignored() -> None:
    api = _FakeMapApi()
    sync = ViewportSynchronizer(api, geocoder=_FakeGeocoder({}))

    assert await sync.on_place_selected("unknown") is None
    assert api.nearby_calls == []


@pytest.mark.asyncio
async def test_route_search_queries_along_route() -> None:
    api = _FakeMapApi(_places("r1"))
    origin = LatLng(38.5, -120.2)
    destination = LatLng(43.252, -126.453)
    geocoder = _FakeGeocoder({"origin": origin, "destination": destination})
    sync = ViewportSynchronizer(api, geocoder=geocoder)

    places = await sync.on_route_requested("origin", "destination")

    assert [place.id for place in places] == ["r1"]
    assert geocoder.routes == [(origin, destination)]
    assert api.route_calls == [(ROUTE_POLYLINE, 2, 50)]
    assert sync.route_polyline == ROUTE_POLYLINE
    assert sync.route_region == GeoRegion(
        north_east=LatLng(43.252, -120.2),
        south_west=LatLng(38.5, -126.453),
    )
    assert sync.center is not None
    assert (sync.center.lat, sync.center.lng) == pytest.approx((40.876, -123.3265))


@pytest.mark.asyncio
async def test_route_with_unresolved_endpoint_is_ignored() -> None:
    api = _FakeMapApi()
    geocoder = _FakeGeocoder({"origin": LatLng(38.5, -120.2)})
    sync = ViewportSynchronizer(api, geocoder=geocoder)

    assert await sync.on_route_requested("origin", "nowhere") is None
    assert geocoder.routes == []
    assert api.route_calls == []
    assert sync.route_polyline is None


@pytest.mark.asyncio
async def test_newer_route_wins_over_slower_older_route() -> None:
    api = _FakeMapApi(_places("fresh"), _places("stale"))
    newer_origin = LatLng(40.7, -120.95)
    newer_polyline = "_p~iF~ps|U"
    geocoder = _GatedGeocoder(
        {
            "o1": LatLng(38.5, -120.2),
            "d1": LatLng(43.252, -126.453),
            "o2": newer_origin,
            "d2": LatLng(41.0, -121.0),
        },
        polylines={newer_origin: newer_polyline},
    )
    sync = ViewportSynchronizer(api, geocoder=geocoder)

    first = asyncio.create_task(sync.on_route_requested("o1", "d1"))
    await _settle()
    second = asyncio.create_task(sync.on_route_requested("o2", "d2"))
    await _settle()
    geocoder.open("o2", "d2")
    assert [place.id for place in await second] == ["fresh"]
    geocoder.open("o1", "d1")

    assert await first is None
    assert [place.id for place in sync.places] == ["fresh"]
    assert api.route_calls == [(newer_polyline, 2, 50)]
    assert geocoder.routes == [(newer_origin, LatLng(41.0, -121.0))]
    assert sync.route_polyline == newer_polyline


@pytest.mark.asyncio
async def test_pending_place_selection_is_dropped_after_newer_location() -> None:
    api = _FakeMapApi(_places("n1"), _places("stale"))
    geocoder = _GatedGeocoder({"slow": LatLng(38.5, -120.2)})
    sync = ViewportSynchronizer(api, geocoder=geocoder)

    pending = asyncio.create_task(sync.on_place_selected("slow"))
    await _settle()
    await sync.on_location_resolved(LatLng(52.37, 4.89))
    geocoder.open("slow")

    assert await pending is None
    assert sync.center == LatLng(52.37, 4.89)
    assert len(api.nearby_calls) == 1
    assert [place.id for place in sync.places] == ["n1"]


@pytest.mark.asyncio
async def test_location_resolved_clears_route() -> None:
    api = _FakeMapApi(_places("r1"), _places("n1"))
    geocoder = _FakeGeocoder({"a": LatLng(38.5, -120.2), "b": LatLng(40.7, -120.95)})
    sync = ViewportSynchronizer(api, geocoder=geocoder)

    await sync.on_route_requested("a", "b")
    await sync.on_location_resolved(LatLng(52.37, 4.89))

    assert sync.route_polyline is None
    assert sync.route_region is None
    assert [place.id for place in sync.places] == ["n1"]


@pytest.mark.asyncio
async def test_refresh_reruns_last_query() -> None:
    api = _FakeMapApi(_places("r1"), _places("r1", "r2"))
    sync = ViewportSynchronizer(api)

    await sync.run_query(AlongRouteQuery(encoded_polyline=ROUTE_POLYLINE))
    await sync.refresh()

    assert len(api.route_calls) == 2
    assert sync.markers.new_ids == ("r2",)


@pytest.mark.asyncio
async def test_refresh_without_context_does_nothing() -> None:
    sync = ViewportSynchronizer(_FakeMapApi())
    assert await sync.refresh() is None


@pytest.mark.asyncio
async def test_search_without_geocoder_is_config_error() -> None:
    sync = ViewportSynchronizer(_FakeMapApi())
    with pytest.raises(ConfigError):
        await sync.on_place_selected("place-1")


@pytest.mark.asyncio
async def test_close_cancels_pending_debounce() -> None:
    api = _FakeMapApi()
    sync = ViewportSynchronizer(api, debounce_delay=10)

    task = sync.on_bounds_settled(_region(52.37, 4.89))
    await sync.close()

    assert task.cancelled()
    assert api.nearby_calls == []
