from datetime import UTC, date, datetime, timedelta
from itertools import product
from zoneinfo import ZoneInfo

import pytest

from pyparkit.exceptions import ValidationError
from pyparkit.models import FeatureCounts, FeatureSelection, PricingInfo, TimeSlot, VehicleType
from pyparkit.pricing import (
    available_count,
    available_features,
    build_booking_interval,
    compute_hourly_rate,
    compute_total_price,
    find_gaps,
    format_12_hour,
    is_slot_selectable,
)

DAY = date(2030, 1, 15)
PRICING = PricingInfo(hourly_rate=5, covered_hourly_rate=2, charging_hourly_rate=3)


def _slot(
    hour: int,
    *,
    basic: int = 0,
    covered: int = 0,
    charging: int = 0,
    both: int = 0,
    past: bool = False,
) -> TimeSlot:
    start = datetime(2030, 1, 15, hour, tzinfo=UTC)
    return TimeSlot(
        start_time=start,
        end_time=start + timedelta(hours=1),
        hour=hour,
        is_past=past,
        basic_available=basic,
        covered_available=covered,
        charging_available=charging,
        covered_and_charging_available=both,
    )


def test_covered_only_counts_covered_and_combined_spots() -> None:
    slot = _slot(9, covered=2, both=1)
    assert is_slot_selectable(slot, FeatureSelection(covered=True))
    assert available_count(slot, FeatureSelection(covered=True)) == 3


def test_charging_only_counts_combined_spots() -> None:
    slot = _slot(9, covered=2, both=1)
    assert available_count(slot, FeatureSelection(charging=True)) == 1
    assert is_slot_selectable(slot, FeatureSelection(charging=True))


def test_charging_only_without_chargers_is_not_selectable() -> None:
    slot = _slot(9, basic=3, covered=2)
    assert not is_slot_selectable(slot, FeatureSelection(charging=True))


def test_both_features_need_combined_spots() -> None:
    slot = _slot(9, covered=4, charging=4)
    assert not is_slot_selectable(slot, FeatureSelection(covered=True, charging=True))
    assert is_slot_selectable(_slot(9, both=1), FeatureSelection(covered=True, charging=True))


def test_no_features_sums_everything() -> None:
    slot = _slot(9, basic=1, covered=2, charging=3, both=4)
    assert available_count(slot, FeatureSelection()) == 10


def test_past_slot_is_never_selectable() -> None:
    slot = _slot(9, basic=5, covered=5, charging=5, both=5, past=True)
    for covered, charging in product((False, True), repeat=2):
        assert not is_slot_selectable(slot, FeatureSelection(covered=covered, charging=charging))


def test_selectability_matches_relevant_sum() -> None:
    for counts in product((0, 1), repeat=4):
        basic, covered, charging, both = counts
        slot = _slot(9, basic=basic, covered=covered, charging=charging, both=both)
        assert is_slot_selectable(slot, FeatureSelection()) == (sum(counts) > 0)
        assert is_slot_selectable(slot, FeatureSelection(covered=True)) == (covered + both > 0)
        assert is_slot_selectable(slot, FeatureSelection(charging=True)) == (charging + both > 0)
        assert is_slot_selectable(slot, FeatureSelection(covered=True, charging=True)) == (
            both > 0
        )


def test_hourly_rate_adds_surcharges() -> None:
    assert compute_hourly_rate(FeatureSelection(), PRICING) == 5
    assert compute_hourly_rate(FeatureSelection(covered=True), PRICING) == 7
    assert compute_hourly_rate(FeatureSelection(charging=True), PRICING) == 8
    assert compute_hourly_rate(FeatureSelection(covered=True, charging=True), PRICING) == 10


def test_total_price_is_linear_in_hours() -> None:
    features = FeatureSelection(covered=True, charging=True)
    assert compute_total_price({9, 10, 11}, features, PRICING) == 30
    assert compute_total_price(set(), features, PRICING) == 0


def test_pricing_rejects_negative_rates() -> None:
    with pytest.raises(ValidationError):
        PricingInfo(hourly_rate=-1)


def test_booking_interval_for_contiguous_hours() -> None:
    interval = build_booking_interval({9, 10, 11}, DAY)
    assert interval.start == datetime(2030, 1, 15, 9, tzinfo=UTC)
    assert interval.end == datetime(2030, 1, 15, 12, tzinfo=UTC)
    assert interval.hours == 3


def test_booking_interval_last_hour_ends_next_midnight() -> None:
    interval = build_booking_interval([23], DAY)
    assert interval.end == datetime(2030, 1, 16, 0, tzinfo=UTC)


def test_booking_interval_uses_timezone() -> None:
    tz = ZoneInfo("Europe/Amsterdam")
    interval = build_booking_interval([9], DAY, tz)
    assert interval.start == datetime(2030, 1, 15, 9, tzinfo=tz)
    assert interval.start.astimezone(UTC).hour == 8


def test_booking_interval_rejects_gaps() -> None:
    assert find_gaps([9, 12, 10]) == [11]
    with pytest.raises(ValidationError) as exc_info:
        build_booking_interval({9, 17}, DAY)
    assert exc_info.value.user_message == "Please select consecutive time slots."


def test_booking_interval_rejects_empty_and_invalid_hours() -> None:
    with pytest.raises(ValidationError):
        build_booking_interval([], DAY)
    with pytest.raises(ValidationError):
        build_booking_interval([24], DAY)


def test_available_features_hides_charging_for_bikes() -> None:
    counts = FeatureCounts(total=4, covered=1, charging=2)
    assert available_features(counts, VehicleType.CAR) == FeatureSelection(
        covered=True, charging=True
    )
    assert available_features(counts, VehicleType.BIKE) == FeatureSelection(
        covered=True, charging=False
    )
    assert available_features(FeatureCounts(total=2, basic=2), None) == FeatureSelection()


def test_format_12_hour() -> None:
    assert format_12_hour(0) == "12 AM"
    assert format_12_hour(9) == "9 AM"
    assert format_12_hour(12) == "12 PM"
    assert format_12_hour(17) == "5 PM"
