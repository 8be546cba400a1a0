"""Response mappers shared by the user and host APIs."""

from __future__ import annotations

from typing import Any

from ..exceptions import BackendError, ValidationError
from ..models import Booking, BookingStatus, Party, UserDetails, Vehicle, VehicleType
from ..util import parse_float, parse_int, parse_timestamp


def coerce_id(value: Any, field: str) -> str:
    if value is None:
        raise BackendError(f"Backend response missing {field}.")
    text = str(value).strip()
    if not text:
        raise BackendError(f"Backend response missing {field}.")
    return text


def map_vehicle(data: Any) -> Vehicle:
    if not isinstance(data, dict):
        raise BackendError("Backend response included invalid vehicle data.")
    raw_type = str(data.get("type") or VehicleType.CAR).upper()
    try:
        vehicle_type = VehicleType(raw_type)
    except ValueError as exc:
        raise BackendError(f"Backend returned unknown vehicle type {raw_type!r}.") from exc
    year = data.get("year")
    return Vehicle(
        id=coerce_id(data.get("id"), "vehicle id"),
        make=str(data.get("make") or ""),
        model=str(data.get("model") or ""),
        license_plate=str(data.get("licensePlate") or ""),
        type=vehicle_type,
        year=parse_int(year) if year is not None else None,
    )


def map_vehicle_list(data: Any) -> list[Vehicle]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise BackendError("Backend response included invalid vehicles.")
    return [map_vehicle(item) for item in data if isinstance(item, dict)]


def map_user_details(data: Any) -> UserDetails:
    if not isinstance(data, dict):
        raise BackendError("Backend response included invalid user details.")
    user = data.get("user")
    if not isinstance(user, dict):
        raise BackendError("Backend response included invalid user details.")
    return UserDetails(
        id=coerce_id(user.get("id"), "user id"),
        name=user.get("name") or None,
        email=user.get("email") or None,
        vehicles=tuple(map_vehicle_list(user.get("vehicles"))),
    )


def map_party(data: Any) -> Party | None:
    if not isinstance(data, dict):
        return None
    return Party(
        id=coerce_id(data.get("id"), "party id"),
        name=data.get("name") or None,
        email=data.get("email") or None,
    )


def map_booking(data: Any) -> Booking:
    if not isinstance(data, dict):
        raise BackendError("Backend response included invalid booking data.")
    booking_id = coerce_id(data.get("id"), "booking id")
    start_raw = data.get("startTime")
    end_raw = data.get("endTime")
    if not isinstance(start_raw, str) or not isinstance(end_raw, str):
        raise BackendError("Backend response missing booking times.")
    raw_status = str(data.get("status") or BookingStatus.PENDING).upper()
    try:
        status = BookingStatus(raw_status)
    except ValueError as exc:
        raise BackendError(f"Backend returned unknown booking status {raw_status!r}.") from exc
    created_raw = data.get("createdAt")
    try:
        start = parse_timestamp(start_raw)
        end = parse_timestamp(end_raw)
        created_at = parse_timestamp(created_raw) if isinstance(created_raw, str) else None
    except ValidationError as exc:
        raise BackendError("Backend returned invalid booking times.") from exc
    vehicle_raw = data.get("vehicle")
    return Booking(
        id=booking_id,
        start_time=start,
        end_time=end,
        total_price=parse_float(data.get("totalPrice")),
        status=status,
        land_owner=map_party(data.get("landOwner")),
        user=map_party(data.get("user")),
        vehicle=map_vehicle(vehicle_raw) if isinstance(vehicle_raw, dict) else None,
        created_at=created_at,
    )


def map_booking_list(data: Any) -> list[Booking]:
    if not isinstance(data, dict):
        raise BackendError("Backend response included invalid bookings.")
    raw = data.get("bookings")
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise BackendError("Backend response included invalid bookings.")
    return [map_booking(item) for item in raw if isinstance(item, dict)]


def unwrap(data: Any, key: str) -> Any:
    """Return ``data[key]`` when the backend wraps a record, else ``data``."""
    if isinstance(data, dict) and isinstance(data.get(key), dict):
        return data[key]
    return data
