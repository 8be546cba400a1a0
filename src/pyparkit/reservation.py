"""Reservation session for one location: vehicle, date, features, hours, submit."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, date, datetime, tzinfo
from enum import StrEnum

from .api.map import MapApi
from .api.user import UserApi
from .const import GENERIC_BOOKING_ERROR, MISSING_SLOTS_MESSAGE, MISSING_VEHICLE_MESSAGE
from .exceptions import ParkitError, ValidationError
from .models import (
    Booking,
    BookingInterval,
    BookingSummary,
    FeatureSelection,
    SlotAvailability,
    TimeSlot,
    Vehicle,
)
from .pricing import (
    available_features,
    build_booking_interval,
    compute_hourly_rate,
    compute_total_price,
    is_slot_selectable,
)
from .util import parse_day

_LOGGER = logging.getLogger(__name__)

BookedCallback = Callable[[Booking], Awaitable[None] | None]


class ReservationState(StrEnum):
    IDLE = "idle"
    VEHICLE_CHOSEN = "vehicle_chosen"
    SLOTS_LOADING = "slots_loading"
    SLOTS_READY = "slots_ready"
    SELECTION_CHANGED = "selection_changed"
    SUMMARY_REVIEW = "summary_review"
    SUBMITTING = "submitting"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class ReservationSession:
    """State for reserving hours at a single location.

    Changing the vehicle, date or features always clears the hour selection
    and reloads availability; a selection made under another filter is never
    kept.
    """

    def __init__(
        self,
        location_id: str,
        *,
        map_api: MapApi,
        user_api: UserApi,
        tz: tzinfo = UTC,
        on_booked: BookedCallback | None = None,
    ) -> None:
        if not isinstance(location_id, str) or not location_id.strip():
            raise ValidationError("location_id is required.")
        self._location_id = location_id.strip()
        self._map_api = map_api
        self._user_api = user_api
        self._tz = tz
        self._on_booked = on_booked
        self._state = ReservationState.IDLE
        self._vehicles: tuple[Vehicle, ...] = ()
        self._vehicle: Vehicle | None = None
        self._day = self._today()
        self._features = FeatureSelection()
        self._availability: SlotAvailability | None = None
        self._selected: list[int] = []
        self._error_message: str | None = None
        self._booking: Booking | None = None
        self._slots_task: asyncio.Task[SlotAvailability] | None = None

    @property
    def location_id(self) -> str:
        return self._location_id

    @property
    def state(self) -> ReservationState:
        return self._state

    @property
    def vehicles(self) -> tuple[Vehicle, ...]:
        return self._vehicles

    @property
    def vehicle(self) -> Vehicle | None:
        return self._vehicle

    @property
    def day(self) -> date:
        return self._day

    @property
    def features(self) -> FeatureSelection:
        return self._features

    @property
    def availability(self) -> SlotAvailability | None:
        return self._availability

    @property
    def slots(self) -> tuple[TimeSlot, ...]:
        return self._availability.slots if self._availability else ()

    @property
    def selected_hours(self) -> tuple[int, ...]:
        return tuple(self._selected)

    @property
    def error_message(self) -> str | None:
        return self._error_message

    @property
    def booking(self) -> Booking | None:
        return self._booking

    @property
    def offered_features(self) -> FeatureSelection:
        if self._availability is None:
            return FeatureSelection()
        vehicle_type = self._vehicle.type if self._vehicle else None
        return available_features(self._availability.feature_counts, vehicle_type)

    @property
    def hourly_rate(self) -> float:
        if self._availability is None:
            return 0.0
        return compute_hourly_rate(self._features, self._availability.pricing)

    @property
    def total_price(self) -> float:
        if self._availability is None:
            return 0.0
        return compute_total_price(self._selected, self._features, self._availability.pricing)

    async def load_vehicles(self) -> tuple[Vehicle, ...]:
        self._vehicles = tuple(await self._user_api.get_vehicles())
        return self._vehicles

    async def select_vehicle(self, vehicle_id: str) -> SlotAvailability | None:
        vehicle = self._find_vehicle(vehicle_id)
        if vehicle is None:
            raise ValidationError("vehicle_id is not one of the user's vehicles.")
        self._vehicle = vehicle
        self._selected.clear()
        self._state = ReservationState.VEHICLE_CHOSEN
        return await self.load_slots()

    async def set_date(self, day: date | str) -> SlotAvailability | None:
        self._day = parse_day(day)
        return await self._invalidate()

    async def set_features(
        self,
        *,
        covered: bool | None = None,
        charging: bool | None = None,
    ) -> SlotAvailability | None:
        self._features = FeatureSelection(
            covered=self._features.covered if covered is None else covered,
            charging=self._features.charging if charging is None else charging,
        )
        return await self._invalidate()

    async def load_slots(self) -> SlotAvailability | None:
        """Load availability for the current vehicle, date and features.

        A newer load cancels this one; a superseded load returns ``None`` and
        leaves the session untouched.
        """
        self._selected.clear()
        self._error_message = None
        self._state = ReservationState.SLOTS_LOADING
        if self._slots_task is not None and not self._slots_task.done():
            self._slots_task.cancel()
        vehicle_type = self._vehicle.type if self._vehicle else None
        task = asyncio.create_task(
            self._map_api.slots(self._location_id, self._day, vehicle_type)
        )
        self._slots_task = task
        await asyncio.wait({task})
        if task.cancelled() or task is not self._slots_task:
            _LOGGER.debug("Superseded slot load for %s dropped", self._location_id)
            return None
        try:
            availability = task.result()
        except ParkitError:
            self._error_message = "Failed to load available time slots"
            self._state = (
                ReservationState.VEHICLE_CHOSEN if self._vehicle else ReservationState.IDLE
            )
            raise
        self._availability = availability
        self._selected.clear()
        self._state = ReservationState.SLOTS_READY
        return availability

    def is_selectable(self, hour: int) -> bool:
        slot = self._slot(hour)
        return slot is not None and is_slot_selectable(slot, self._features)

    def toggle_slot(self, hour: int) -> bool:
        """Add or remove ``hour``; returns False when the hour cannot be selected."""
        if self._state not in (ReservationState.SLOTS_READY, ReservationState.SELECTION_CHANGED):
            return False
        if hour in self._selected:
            self._selected.remove(hour)
        elif self.is_selectable(hour):
            self._selected.append(hour)
            self._selected.sort()
        else:
            return False
        self._state = ReservationState.SELECTION_CHANGED
        return True

    def clear_selection(self) -> None:
        self._selected.clear()
        if self._state is ReservationState.SELECTION_CHANGED:
            self._state = ReservationState.SLOTS_READY

    def booking_interval(self) -> BookingInterval:
        return build_booking_interval(self._selected, self._day, self._tz)

    def review(self) -> BookingSummary:
        vehicle = self._validate_submission()
        summary = BookingSummary(
            location_id=self._location_id,
            vehicle=vehicle,
            day=self._day,
            hours=tuple(self._selected),
            interval=self.booking_interval(),
            features=self._features,
            hourly_rate=self.hourly_rate,
            total_price=self.total_price,
        )
        self._state = ReservationState.SUMMARY_REVIEW
        return summary

    def back_to_selection(self) -> None:
        if self._state is ReservationState.SUMMARY_REVIEW:
            self._state = ReservationState.SELECTION_CHANGED

    async def submit(self) -> Booking:
        if self._state is ReservationState.SUBMITTING:
            raise ValidationError("A booking is already being submitted.")
        self._error_message = None
        try:
            vehicle = self._validate_submission()
            interval = self.booking_interval()
        except ValidationError as exc:
            self._error_message = exc.user_message or str(exc)
            raise
        total_price = self.total_price
        self._state = ReservationState.SUBMITTING
        _LOGGER.debug(
            "Submitting booking location=%s hours=%s",
            self._location_id,
            self._selected,
        )
        try:
            booking = await self._user_api.create_booking(
                vehicle_id=vehicle.id,
                location_id=self._location_id,
                start_time=interval.start,
                end_time=interval.end,
                total_price=total_price,
                features=self._features,
            )
        except ParkitError as exc:
            self._state = ReservationState.FAILED
            self._error_message = exc.user_message or GENERIC_BOOKING_ERROR
            _LOGGER.debug("Booking submission failed: %s", exc)
            raise
        self._booking = booking
        self._state = ReservationState.CONFIRMED
        if self._on_booked is not None:
            result = self._on_booked(booking)
            if inspect.isawaitable(result):
                await result
        return booking

    def reset(self) -> None:
        if self._slots_task is not None and not self._slots_task.done():
            self._slots_task.cancel()
        self._slots_task = None
        self._state = ReservationState.IDLE
        self._vehicle = None
        self._day = self._today()
        self._features = FeatureSelection()
        self._availability = None
        self._selected.clear()
        self._error_message = None
        self._booking = None

    async def _invalidate(self) -> SlotAvailability | None:
        self._selected.clear()
        if self._vehicle is None:
            return None
        return await self.load_slots()

    def _validate_submission(self) -> Vehicle:
        if self._vehicle is None:
            raise ValidationError(MISSING_VEHICLE_MESSAGE, user_message=MISSING_VEHICLE_MESSAGE)
        if not self._selected:
            raise ValidationError(MISSING_SLOTS_MESSAGE, user_message=MISSING_SLOTS_MESSAGE)
        return self._vehicle

    def _find_vehicle(self, vehicle_id: str) -> Vehicle | None:
        for vehicle in self._vehicles:
            if vehicle.id == vehicle_id:
                return vehicle
        return None

    def _slot(self, hour: int) -> TimeSlot | None:
        if self._availability is None:
            return None
        return self._availability.slot_for_hour(hour)

    def _today(self) -> date:
        return datetime.now(self._tz).date()
