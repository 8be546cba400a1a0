"""Marker reconciliation for place result sets."""

from __future__ import annotations

from collections.abc import Iterable

from .const import MARKER_STAGGER_DELAY
from .models import Marker, MarkerUpdate, PlaceSummary


class MarkerReconciler:
    """Tracks the previous result set so only new places animate in.

    The marker list is rebuilt wholesale on every update; identity is kept
    only through place ids.
    """

    def __init__(self, stagger_delay: float = MARKER_STAGGER_DELAY) -> None:
        self._stagger_delay = stagger_delay
        self._previous_ids: frozenset[str] = frozenset()

    @property
    def previous_ids(self) -> frozenset[str]:
        return self._previous_ids

    def reconcile(self, places: Iterable[PlaceSummary]) -> MarkerUpdate:
        ordered = list(places)
        current_ids = frozenset(place.id for place in ordered)
        new_ids: list[str] = []
        for place in ordered:
            if place.id not in self._previous_ids and place.id not in new_ids:
                new_ids.append(place.id)
        positions = {place_id: index for index, place_id in enumerate(new_ids)}
        markers = tuple(
            Marker(
                id=place.id,
                lat=place.lat,
                lng=place.lng,
                name=place.name,
                category=place.category,
                price_per_hour=place.price_per_hour,
                is_new=place.id in positions,
                animation_delay=positions.get(place.id, 0) * self._stagger_delay,
            )
            for place in ordered
        )
        self._previous_ids = current_ids
        return MarkerUpdate(markers=markers, new_ids=tuple(new_ids))

    def reset(self) -> None:
        self._previous_ids = frozenset()
