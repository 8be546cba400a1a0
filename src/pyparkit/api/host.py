"""Host-side listing and booking management endpoints."""

from __future__ import annotations

import logging
import re
from typing import Any
from urllib.parse import urlsplit

from ..const import (
    HOST_AUTO_ACCEPT_ENDPOINT,
    HOST_BIKE_PARKING_ENDPOINT,
    HOST_BIKE_PARKINGS_ENDPOINT,
    HOST_BOOKING_ENDPOINT,
    HOST_BOOKINGS_ENDPOINT,
    HOST_CAR_PARKING_ENDPOINT,
    HOST_CAR_PARKINGS_ENDPOINT,
    HOST_PARKING_SPOTS_ENDPOINT,
    HOST_PRICING_ENDPOINT,
    HOST_PROFILE_ENDPOINT,
    HOST_REGISTER_ENDPOINT,
    MISSING_SPOTS_MESSAGE,
)
from ..exceptions import BackendError, ValidationError
from ..models import (
    Booking,
    BookingStatus,
    HostProfile,
    HostRegistration,
    ParkingSpot,
    PricingInfo,
    SpotDraft,
    SpotKind,
)
from ..util import parse_float
from .base import BaseApi
from .mapping import coerce_id, map_booking, map_booking_list, unwrap

_LOGGER = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_PHONE_RE = re.compile(r"^\+\d{1,4}\d{6,15}$")


def _invalid(message: str) -> ValidationError:
    return ValidationError(message, user_message=message)


class HostApi(BaseApi):
    """Endpoints available to a land owner."""

    async def get_profile(self) -> HostProfile | None:
        """Return the host profile, or ``None`` when the user is not a host."""
        data = await self._request_json("GET", HOST_PROFILE_ENDPOINT, auth_required=True)
        if not isinstance(data, dict) or not data.get("isHost"):
            return None
        owner = data.get("landOwner")
        if not isinstance(owner, dict):
            raise BackendError("Backend response included invalid host data.")
        return self._map_profile(owner)

    async def register(self, registration: HostRegistration) -> HostProfile | None:
        """Register the signed-in user as a host with their first parking spots.

        Returns the new profile when the backend echoes it back.
        """
        payload = self._registration_payload(registration)
        _LOGGER.debug(
            "register started with %s car and %s bike spots",
            len(payload["carparkings"]),
            len(payload["bikeparkings"]),
        )
        data = await self._request_json(
            "POST",
            HOST_REGISTER_ENDPOINT,
            json=payload,
            auth_required=True,
        )
        owner = data.get("landOwner") if isinstance(data, dict) else None
        if not isinstance(owner, dict):
            return None
        return self._map_profile(owner)

    async def list_bookings(self) -> list[Booking]:
        data = await self._request_json("GET", HOST_BOOKINGS_ENDPOINT, auth_required=True)
        return map_booking_list(data)

    async def update_booking_status(
        self,
        booking_id: str,
        status: BookingStatus | str,
    ) -> Booking:
        booking_id_value = self._require_id(booking_id, "booking_id")
        try:
            status_value = BookingStatus(str(status).upper())
        except ValueError as exc:
            raise ValidationError(f"Unknown booking status {status!r}.") from exc
        _LOGGER.debug("update_booking_status %s -> %s", booking_id_value, status_value)
        data = await self._request_json(
            "PATCH",
            HOST_BOOKING_ENDPOINT.format(booking_id=booking_id_value),
            json={"status": status_value.value},
            auth_required=True,
        )
        return map_booking(unwrap(data, "booking"))

    async def list_parking_spots(self) -> list[ParkingSpot]:
        data = await self._request_json("GET", HOST_PARKING_SPOTS_ENDPOINT, auth_required=True)
        if not isinstance(data, dict):
            raise BackendError("Backend response included invalid parking spots.")
        spots = self._map_spot_list(data.get("carParkings"), SpotKind.CAR)
        spots.extend(self._map_spot_list(data.get("bikeParkings"), SpotKind.BIKE))
        return spots

    async def create_parking_spot(
        self,
        kind: SpotKind | str,
        *,
        covered: bool = False,
        charging: bool = False,
    ) -> ParkingSpot | None:
        """Add a spot to the host's listing; new spots start out available."""
        spot_kind = self._normalize_kind(kind)
        payload = self._spot_flags(spot_kind, covered=covered, charging=charging)
        payload["available"] = True
        endpoint = (
            HOST_CAR_PARKINGS_ENDPOINT if spot_kind is SpotKind.CAR else HOST_BIKE_PARKINGS_ENDPOINT
        )
        data = await self._request_json("POST", endpoint, json=payload, auth_required=True)
        spot = unwrap(data, "parking")
        if not isinstance(spot, dict) or spot.get("id") is None:
            return None
        return self._map_spot(spot, spot_kind)

    async def update_parking_spot(
        self,
        kind: SpotKind | str,
        spot_id: str,
        *,
        covered: bool | None = None,
        charging: bool | None = None,
        available: bool | None = None,
    ) -> ParkingSpot:
        """PATCH only the flags that are given."""
        spot_kind = self._normalize_kind(kind)
        spot_id_value = self._require_id(spot_id, "spot_id")
        payload = self._spot_flags(
            spot_kind,
            covered=covered,
            charging=charging,
            available=available,
        )
        if not payload:
            raise ValidationError("Nothing to update.")
        endpoint = (
            HOST_CAR_PARKING_ENDPOINT if spot_kind is SpotKind.CAR else HOST_BIKE_PARKING_ENDPOINT
        )
        data = await self._request_json(
            "PATCH",
            endpoint.format(spot_id=spot_id_value),
            json=payload,
            auth_required=True,
        )
        return self._map_spot(unwrap(data, "parking"), spot_kind)

    async def set_spot_availability(
        self,
        kind: SpotKind | str,
        spot_id: str,
        available: bool,
    ) -> ParkingSpot:
        if not isinstance(available, bool):
            raise ValidationError("available must be a boolean.")
        return await self.update_parking_spot(kind, spot_id, available=available)

    async def update_pricing(self, pricing: PricingInfo) -> None:
        payload = {
            "hourlyRate": pricing.hourly_rate,
            "dailyRate": pricing.daily_rate,
            "coveredHourlyRate": pricing.covered_hourly_rate,
            "coveredDailyRate": pricing.covered_daily_rate,
            "chargingHourlyRate": pricing.charging_hourly_rate,
            "chargingDailyRate": pricing.charging_daily_rate,
        }
        await self._request_json("PATCH", HOST_PRICING_ENDPOINT, json=payload, auth_required=True)

    async def set_auto_accept(self, enabled: bool) -> None:
        if not isinstance(enabled, bool):
            raise ValidationError("enabled must be a boolean.")
        await self._request_json(
            "PATCH",
            HOST_AUTO_ACCEPT_ENDPOINT,
            json={"autoAccept": enabled},
            auth_required=True,
        )

    def _spot_flags(self, kind: SpotKind, **flags: bool | None) -> dict[str, bool]:
        payload: dict[str, bool] = {}
        for name, value in flags.items():
            if value is None:
                continue
            if not isinstance(value, bool):
                raise ValidationError(f"{name} must be a boolean.")
            payload[name] = value
        if kind is SpotKind.BIKE and payload.pop("charging", False):
            raise ValidationError("Bike spots cannot offer charging.")
        return payload

    def _spot_draft_payload(self, spot: SpotDraft, kind: SpotKind) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "covered": spot.covered,
            "available": spot.available,
            "hourlyRate": spot.hourly_rate,
            "dailyRate": spot.daily_rate,
        }
        if kind is SpotKind.CAR:
            payload["charging"] = spot.charging
        elif spot.charging:
            raise _invalid("Bike spots cannot offer charging.")
        return payload

    def _registration_payload(self, registration: HostRegistration) -> dict[str, Any]:
        name = registration.name.strip()
        if not name:
            raise _invalid("Name is required")
        if len(name) > 100:
            raise _invalid("Name is too long")
        email = registration.email.strip()
        if not _EMAIL_RE.match(email):
            raise _invalid("Please enter a valid email")
        phone = registration.phone.strip()
        if len(phone) < 8:
            raise _invalid("Phone number is too short")
        if not _PHONE_RE.match(phone):
            raise _invalid("Phone must be in international format with country code")
        about = registration.about.strip()
        if not about:
            raise _invalid("Please describe your parking space")
        if len(about) > 1000:
            raise _invalid("Description is too long")
        address = registration.address.strip()
        if not address:
            raise _invalid("Address is required")
        if len(address) > 500:
            raise _invalid("Address is too long")
        coordinates = registration.coordinates
        if not (-90 <= coordinates.lat <= 90 and -180 <= coordinates.lng <= 180):
            raise _invalid("Please select a location on the map")
        if not registration.car_spots and not registration.bike_spots:
            raise _invalid(MISSING_SPOTS_MESSAGE)
        images = []
        for url in registration.images:
            parts = urlsplit(url)
            if parts.scheme not in ("http", "https") or not parts.netloc:
                raise _invalid("Please enter a valid URL")
            images.append({"url": url})
        payload: dict[str, Any] = {
            "name": name,
            "email": email,
            "phone": phone,
            "about": about,
            "address": address,
            "coordinates": f"{coordinates.lat},{coordinates.lng}",
            "carparkings": [
                self._spot_draft_payload(spot, SpotKind.CAR) for spot in registration.car_spots
            ],
            "bikeparkings": [
                self._spot_draft_payload(spot, SpotKind.BIKE) for spot in registration.bike_spots
            ],
        }
        if images:
            payload["images"] = images
        return payload

    def _map_profile(self, data: dict[str, Any]) -> HostProfile:
        return HostProfile(
            id=coerce_id(data.get("id"), "land owner id"),
            name=str(data.get("name") or ""),
            auto_accept=data.get("autoAccept") is True,
        )

    def _normalize_kind(self, kind: SpotKind | str) -> SpotKind:
        try:
            return SpotKind(str(kind).lower())
        except ValueError as exc:
            raise ValidationError("kind must be 'car' or 'bike'.") from exc

    def _map_spot_list(self, raw: Any, kind: SpotKind) -> list[ParkingSpot]:
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise BackendError("Backend response included invalid parking spots.")
        return [self._map_spot(item, kind) for item in raw if isinstance(item, dict)]

    def _map_spot(self, data: Any, kind: SpotKind) -> ParkingSpot:
        if not isinstance(data, dict):
            raise BackendError("Backend response included invalid parking spot data.")
        return ParkingSpot(
            id=coerce_id(data.get("id"), "parking spot id"),
            kind=kind,
            covered=data.get("covered") is True,
            # Bike spots never carry chargers.
            charging=kind is SpotKind.CAR and data.get("charging") is True,
            available=data.get("available") is not False,
            hourly_rate=parse_float(data.get("hourlyRate")),
            daily_rate=parse_float(data.get("dailyRate")),
            is_booked=data.get("isBooked") is True,
            is_manually_occupied=data.get("isManuallyOccupied") is True,
        )
