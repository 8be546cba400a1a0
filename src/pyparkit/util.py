"""Shared utilities for validation, normalization and geometry."""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import UTC, date, datetime
from typing import Any

from .exceptions import ValidationError
from .models import GeoRegion, LatLng

EARTH_RADIUS_KM = 6371.0


def parse_timestamp(value: str) -> datetime:
    if not isinstance(value, str) or not value:
        raise ValidationError("Timestamp must be a non-empty string.")
    raw = value.strip()
    if raw.endswith("Z"):
        raw = f"{raw[:-1]}+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise ValidationError("Timestamp is not a valid ISO 8601 value.") from exc
    if parsed.tzinfo is None:
        raise ValidationError("Timestamp must include timezone information.")
    return parsed.astimezone(UTC)


def format_utc_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        raise ValidationError("Timestamp must include timezone information.")
    normalized = value.astimezone(UTC).replace(microsecond=0)
    return normalized.isoformat().replace("+00:00", "Z")


def parse_day(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Date must be a date or a YYYY-MM-DD string.")
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise ValidationError("Date must use the YYYY-MM-DD format.") from exc


def parse_int(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return 0
        try:
            return int(stripped)
        except ValueError:
            return 0
    return 0


def parse_float(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return 0.0
    return 0.0


def haversine_km(origin: LatLng, target: LatLng) -> float:
    d_lat = math.radians(target.lat - origin.lat)
    d_lng = math.radians(target.lng - origin.lng)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(origin.lat))
        * math.cos(math.radians(target.lat))
        * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def query_radius_km(region: GeoRegion, *, minimum_km: int) -> int:
    """Whole-km radius from the region center to its north-east corner."""
    radius = math.ceil(haversine_km(region.center, region.north_east))
    return max(radius, minimum_km)


def region_from_points(points: Iterable[LatLng]) -> GeoRegion:
    collected = list(points)
    if not collected:
        raise ValidationError("At least one point is required to build a region.")
    return GeoRegion(
        north_east=LatLng(
            lat=max(point.lat for point in collected),
            lng=max(point.lng for point in collected),
        ),
        south_west=LatLng(
            lat=min(point.lat for point in collected),
            lng=min(point.lng for point in collected),
        ),
    )


def midpoint(first: LatLng, second: LatLng) -> LatLng:
    return LatLng(lat=(first.lat + second.lat) / 2, lng=(first.lng + second.lng) / 2)


def decode_polyline(encoded: str, *, precision: int = 5) -> list[LatLng]:
    """Decode a Google encoded polyline string."""
    if not isinstance(encoded, str):
        raise ValidationError("Encoded polyline must be a string.")
    factor = 10**precision
    points: list[LatLng] = []
    index = lat = lng = 0
    length = len(encoded)
    while index < length:
        deltas: list[int] = []
        for _ in range(2):
            shift = result = 0
            while True:
                if index >= length:
                    raise ValidationError("Encoded polyline is truncated.")
                byte = ord(encoded[index]) - 63
                if not 0 <= byte <= 63:
                    raise ValidationError("Encoded polyline contains invalid characters.")
                index += 1
                result |= (byte & 0x1F) << shift
                shift += 5
                if byte < 0x20:
                    break
            deltas.append(~(result >> 1) if result & 1 else result >> 1)
        lat += deltas[0]
        lng += deltas[1]
        points.append(LatLng(lat=lat / factor, lng=lng / factor))
    return points
