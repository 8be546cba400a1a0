"""Slot availability and price computation."""

from __future__ import annotations

from collections.abc import Collection, Iterable
from datetime import UTC, date, datetime, time, timedelta, tzinfo

from .const import HOURS_PER_DAY
from .exceptions import ValidationError
from .models import (
    BookingInterval,
    FeatureCounts,
    FeatureSelection,
    PricingInfo,
    TimeSlot,
    VehicleType,
)


def available_count(slot: TimeSlot, features: FeatureSelection) -> int:
    """Spots usable for the requested features in this slot.

    Covered-and-charging spots satisfy either single-feature request.
    """
    if features.covered and features.charging:
        return slot.covered_and_charging_available
    if features.covered:
        return slot.covered_available + slot.covered_and_charging_available
    if features.charging:
        return slot.charging_available + slot.covered_and_charging_available
    return (
        slot.basic_available
        + slot.covered_available
        + slot.charging_available
        + slot.covered_and_charging_available
    )


def is_slot_selectable(slot: TimeSlot, features: FeatureSelection) -> bool:
    if slot.is_past:
        return False
    return available_count(slot, features) > 0


def compute_hourly_rate(features: FeatureSelection, pricing: PricingInfo) -> float:
    rate = pricing.hourly_rate
    if features.covered:
        rate += pricing.covered_hourly_rate
    if features.charging:
        rate += pricing.charging_hourly_rate
    return rate


def compute_total_price(
    selection: Collection[int],
    features: FeatureSelection,
    pricing: PricingInfo,
) -> float:
    return len(selection) * compute_hourly_rate(features, pricing)


def normalize_hours(hours: Iterable[int]) -> tuple[int, ...]:
    normalized: set[int] = set()
    for hour in hours:
        if isinstance(hour, bool) or not isinstance(hour, int):
            raise ValidationError("Hours must be integers.")
        if not 0 <= hour < HOURS_PER_DAY:
            raise ValidationError("Hours must be between 0 and 23.")
        normalized.add(hour)
    return tuple(sorted(normalized))


def find_gaps(hours: Iterable[int]) -> list[int]:
    """Return the unselected hours lying between the first and last selected hour."""
    ordered = normalize_hours(hours)
    if not ordered:
        return []
    selected = set(ordered)
    return [hour for hour in range(ordered[0], ordered[-1] + 1) if hour not in selected]


def build_booking_interval(
    selection: Iterable[int],
    day: date,
    tz: tzinfo = UTC,
) -> BookingInterval:
    """Build the ``[first, last + 1)`` hour window for a contiguous selection.

    Selections with gaps are rejected instead of silently booking the hours
    in between.
    """
    ordered = normalize_hours(selection)
    if not ordered:
        raise ValidationError("At least one hour must be selected.")
    gaps = find_gaps(ordered)
    if gaps:
        raise ValidationError(
            "Selected hours must be consecutive.",
            detail=f"Unselected hours inside the selection: {gaps}.",
            user_message="Please select consecutive time slots.",
        )
    midnight = datetime.combine(day, time(0), tzinfo=tz)
    return BookingInterval(
        start=midnight + timedelta(hours=ordered[0]),
        end=midnight + timedelta(hours=ordered[-1] + 1),
    )


def available_features(
    counts: FeatureCounts,
    vehicle_type: VehicleType | None,
) -> FeatureSelection:
    """Which optional features can be offered for this location and vehicle."""
    covered = counts.covered + counts.covered_and_charging > 0
    charging = (
        vehicle_type is not VehicleType.BIKE
        and counts.charging + counts.covered_and_charging > 0
    )
    return FeatureSelection(covered=covered, charging=charging)


def format_12_hour(hour: int) -> str:
    if hour == 0:
        return "12 AM"
    if hour == 12:
        return "12 PM"
    if hour < 12:
        return f"{hour} AM"
    return f"{hour - 12} PM"
