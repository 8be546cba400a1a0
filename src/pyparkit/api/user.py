"""Endpoints for the signed-in driver."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from ..const import RATINGS_ENDPOINT, USER_BOOKINGS_ENDPOINT, USER_DETAILS_ENDPOINT
from ..exceptions import BackendError, ValidationError
from ..models import Booking, FeatureSelection, UserDetails, Vehicle, VehicleDraft, VehicleType
from ..util import format_utc_timestamp
from .base import BaseApi
from .mapping import map_booking, map_booking_list, map_user_details, map_vehicle_list, unwrap

_LOGGER = logging.getLogger(__name__)


class UserApi(BaseApi):
    """Vehicles, bookings and ratings for the authenticated user."""

    async def get_vehicles(self) -> list[Vehicle]:
        _LOGGER.debug("get_vehicles started")
        data = await self._request_json("GET", USER_DETAILS_ENDPOINT, auth_required=True)
        if not isinstance(data, dict):
            raise BackendError("Backend response included invalid user details.")
        user = data.get("user")
        vehicles = map_vehicle_list(user.get("vehicles") if isinstance(user, dict) else None)
        _LOGGER.debug("get_vehicles completed with %s vehicles", len(vehicles))
        return vehicles

    async def get_details(self) -> UserDetails:
        data = await self._request_json("GET", USER_DETAILS_ENDPOINT, auth_required=True)
        return map_user_details(data)

    async def update_details(
        self,
        *,
        name: str | None,
        email: str | None,
        vehicles: Iterable[VehicleDraft] = (),
    ) -> UserDetails:
        """Save the profile; any ``vehicles`` given are added to the user's list."""
        payload: dict[str, Any] = {"name": name, "email": email}
        drafts = [self._vehicle_payload(vehicle) for vehicle in vehicles]
        if drafts:
            payload["vehicles"] = drafts
        _LOGGER.debug("update_details started with %s new vehicles", len(drafts))
        data = await self._request_json(
            "POST",
            USER_DETAILS_ENDPOINT,
            json=payload,
            auth_required=True,
        )
        return map_user_details(data)

    async def add_vehicle(
        self,
        make: str,
        model: str,
        license_plate: str,
        *,
        vehicle_type: VehicleType | str = VehicleType.CAR,
        year: int | None = None,
    ) -> UserDetails:
        """Register a vehicle, resending the current name and email alongside it."""
        vehicle = VehicleDraft(
            make=make,
            model=model,
            license_plate=license_plate,
            type=vehicle_type,
            year=year,
        )
        self._vehicle_payload(vehicle)
        details = await self.get_details()
        return await self.update_details(
            name=details.name,
            email=details.email,
            vehicles=[vehicle],
        )

    async def create_booking(
        self,
        *,
        vehicle_id: str,
        location_id: str,
        start_time: datetime,
        end_time: datetime,
        total_price: float,
        features: FeatureSelection,
    ) -> Booking:
        """Create a booking; the backend decides whether the spots are still free."""
        vehicle_id_value = self._require_id(vehicle_id, "vehicle_id")
        location_id_value = self._require_id(location_id, "location_id")
        if end_time <= start_time:
            raise ValidationError("end_time must be after start_time.")
        if total_price < 0:
            raise ValidationError("total_price must be non-negative.")
        payload = {
            "vehicleId": vehicle_id_value,
            "landOwnerId": location_id_value,
            "startTime": format_utc_timestamp(start_time),
            "endTime": format_utc_timestamp(end_time),
            "totalPrice": total_price,
            "hasCoveredParking": features.covered,
            "hasChargingStation": features.charging,
        }
        _LOGGER.debug("create_booking started location=%s", location_id_value)
        data = await self._request_json(
            "POST",
            USER_BOOKINGS_ENDPOINT,
            json=payload,
            auth_required=True,
        )
        booking = map_booking(unwrap(data, "booking"))
        _LOGGER.debug("create_booking completed id=%s", booking.id)
        return booking

    async def list_bookings(self) -> list[Booking]:
        data = await self._request_json("GET", USER_BOOKINGS_ENDPOINT, auth_required=True)
        return map_booking_list(data)

    async def submit_rating(
        self,
        land_owner_id: str,
        rating: int,
        review: str | None = None,
    ) -> None:
        land_owner_id_value = self._require_id(land_owner_id, "land_owner_id")
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise ValidationError("Please select a rating", user_message="Please select a rating")
        review_value = review.strip() if isinstance(review, str) else None
        payload = {
            "landOwnerId": land_owner_id_value,
            "rating": rating,
            "review": review_value or None,
        }
        await self._request_json("POST", RATINGS_ENDPOINT, json=payload, auth_required=True)

    def _vehicle_payload(self, vehicle: VehicleDraft) -> dict[str, Any]:
        fields = {
            "make": vehicle.make,
            "model": vehicle.model,
            "license_plate": vehicle.license_plate,
        }
        for name, value in fields.items():
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"{name} is required.")
        year = vehicle.year
        if year is not None and (type(year) is not int or year < 1900):
            raise ValidationError("year must be a four digit year.")
        try:
            vehicle_type = VehicleType(str(vehicle.type).upper())
        except ValueError as exc:
            raise ValidationError(f"Unknown vehicle type {vehicle.type!r}.") from exc
        payload: dict[str, Any] = {
            "make": vehicle.make.strip(),
            "model": vehicle.model.strip(),
            "licensePlate": vehicle.license_plate.strip().upper(),
            "type": vehicle_type.value,
        }
        if year is not None:
            payload["year"] = year
        return payload
