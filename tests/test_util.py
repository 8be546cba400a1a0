from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from pyparkit.exceptions import ValidationError
from pyparkit.models import GeoRegion, LatLng
from pyparkit.util import (
    decode_polyline,
    format_utc_timestamp,
    haversine_km,
    midpoint,
    parse_day,
    parse_float,
    parse_int,
    parse_timestamp,
    query_radius_km,
    region_from_points,
)


def test_format_utc_timestamp_converts_offset() -> None:
    dt = datetime(2024, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
    assert format_utc_timestamp(dt) == "2024-01-01T10:00:00Z"


def test_format_utc_timestamp_requires_timezone() -> None:
    with pytest.raises(ValidationError):
        format_utc_timestamp(datetime(2024, 1, 1, 12, 0))


def test_parse_timestamp_accepts_zulu() -> None:
    assert parse_timestamp("2024-01-01T10:00:00.000Z") == datetime(2024, 1, 1, 10, tzinfo=UTC)


def test_parse_timestamp_rejects_naive() -> None:
    with pytest.raises(ValidationError):
        parse_timestamp("2024-01-01T10:00:00")


def test_parse_day() -> None:
    assert parse_day("2030-01-15") == date(2030, 1, 15)
    assert parse_day(date(2030, 1, 15)) == date(2030, 1, 15)
    assert parse_day(datetime(2030, 1, 15, 8, tzinfo=UTC)) == date(2030, 1, 15)
    with pytest.raises(ValidationError):
        parse_day("15/01/2030")


def test_parse_numbers_default_to_zero() -> None:
    assert parse_int("7") == 7
    assert parse_int(None) == 0
    assert parse_int(True) == 0
    assert parse_int("x") == 0
    assert parse_float("2.5") == 2.5
    assert parse_float(None) == 0.0


def test_haversine_one_degree_latitude() -> None:
    distance = haversine_km(LatLng(0, 0), LatLng(1, 0))
    assert distance == pytest.approx(111.19, abs=0.01)


def test_query_radius_rounds_up() -> None:
    region = GeoRegion(north_east=LatLng(1, 1), south_west=LatLng(-1, -1))
    assert query_radius_km(region, minimum_km=5) == 158


def test_query_radius_has_minimum() -> None:
    region = GeoRegion(
        north_east=LatLng(52.3701, 4.9001),
        south_west=LatLng(52.3699, 4.8999),
    )
    assert query_radius_km(region, minimum_km=5) == 5


def test_region_rejects_inverted_corners() -> None:
    with pytest.raises(ValidationError):
        GeoRegion(north_east=LatLng(1, 1), south_west=LatLng(2, 0))


def test_decode_polyline() -> None:
    points = decode_polyline("_p~iF~ps|U_ulLnnqC_mqNvxq`@")
    assert points == [
        LatLng(38.5, -120.2),
        LatLng(40.7, -120.95),
        LatLng(43.252, -126.453),
    ]


def test_decode_polyline_rejects_truncated_input() -> None:
    with pytest.raises(ValidationError):
        decode_polyline("_p~iF~ps|U_")


def test_region_from_points_and_midpoint() -> None:
    region = region_from_points([LatLng(38.5, -120.2), LatLng(43.252, -126.453)])
    assert region.north_east == LatLng(43.252, -120.2)
    assert region.south_west == LatLng(38.5, -126.453)
    assert midpoint(LatLng(0, 0), LatLng(2, 4)) == LatLng(1, 2)
    with pytest.raises(ValidationError):
        region_from_points([])
