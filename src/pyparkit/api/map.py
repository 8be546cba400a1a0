"""Place discovery and slot availability endpoints."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from ..const import (
    ALONG_ROUTE_ENDPOINT,
    DEFAULT_RADIUS_KM,
    DEFAULT_VEHICLE_TYPE,
    NEARBY_ENDPOINT,
    RESULT_LIMIT,
    ROUTE_BUFFER_KM,
    SLOTS_ENDPOINT,
)
from ..exceptions import BackendError, ValidationError
from ..models import (
    FeatureCounts,
    PlaceCategory,
    PlaceSummary,
    PricingInfo,
    SlotAvailability,
    TimeSlot,
    VehicleType,
)
from ..util import parse_day, parse_float, parse_int, parse_timestamp
from .base import BaseApi
from .mapping import coerce_id

_LOGGER = logging.getLogger(__name__)


class MapApi(BaseApi):
    """Public map endpoints; none of them require authentication."""

    async def nearby(
        self,
        lat: float,
        lng: float,
        radius_km: float = DEFAULT_RADIUS_KM,
        limit: int = RESULT_LIMIT,
    ) -> list[PlaceSummary]:
        _LOGGER.debug("nearby started lat=%s lng=%s radius=%s", lat, lng, radius_km)
        self._validate_coordinates(lat, lng)
        if radius_km <= 0:
            raise ValidationError("radius_km must be positive.")
        data = await self._request_json(
            "GET",
            NEARBY_ENDPOINT,
            params={"lat": lat, "lng": lng, "radiusKm": radius_km, "limit": limit},
        )
        places = self._map_place_list(data, along_route=False)
        _LOGGER.debug("nearby completed with %s places", len(places))
        return places

    async def along_route(
        self,
        encoded_polyline: str,
        buffer_km: float = ROUTE_BUFFER_KM,
        limit: int = RESULT_LIMIT,
    ) -> list[PlaceSummary]:
        _LOGGER.debug("along_route started buffer=%s", buffer_km)
        if not isinstance(encoded_polyline, str) or not encoded_polyline:
            raise ValidationError("encoded_polyline is required.")
        payload = {"encodedPolyline": encoded_polyline, "bufferKm": buffer_km, "limit": limit}
        data = await self._request_json("POST", ALONG_ROUTE_ENDPOINT, json=payload)
        places = self._map_place_list(data, along_route=True)
        _LOGGER.debug("along_route completed with %s places", len(places))
        return places

    async def slots(
        self,
        location_id: str,
        day: date | str,
        vehicle_type: VehicleType | str | None = None,
    ) -> SlotAvailability:
        location_id_value = self._require_id(location_id, "location_id")
        day_value = parse_day(day)
        vehicle_value = str(vehicle_type or DEFAULT_VEHICLE_TYPE)
        _LOGGER.debug("slots started location=%s date=%s", location_id_value, day_value)
        data = await self._request_json(
            "GET",
            SLOTS_ENDPOINT.format(location_id=location_id_value),
            params={"date": day_value.isoformat(), "vehicleType": vehicle_value},
        )
        availability = self._map_slot_availability(data)
        _LOGGER.debug("slots completed with %s slots", len(availability.slots))
        return availability

    def _validate_coordinates(self, lat: float, lng: float) -> None:
        if not -90 <= lat <= 90:
            raise ValidationError("lat must be between -90 and 90.")
        if not -180 <= lng <= 180:
            raise ValidationError("lng must be between -180 and 180.")

    def _map_place_list(self, data: Any, *, along_route: bool) -> list[PlaceSummary]:
        if not isinstance(data, dict):
            raise BackendError("Backend response included invalid place data.")
        raw = data.get("places")
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise BackendError("Backend response included invalid place data.")
        places: list[PlaceSummary] = []
        for item in raw:
            if not isinstance(item, dict):
                continue
            try:
                places.append(self._map_place(item, along_route=along_route))
            except BackendError as exc:
                _LOGGER.warning("Skipping place %s: %s", item.get("id"), exc)
        return places

    def _map_place(self, data: dict[str, Any], *, along_route: bool) -> PlaceSummary:
        place_id = coerce_id(data.get("id"), "place id")
        lat = data.get("lat")
        lng = data.get("lng")
        if isinstance(lat, bool) or not isinstance(lat, int | float):
            raise BackendError("Backend response included invalid place coordinates.")
        if isinstance(lng, bool) or not isinstance(lng, int | float):
            raise BackendError("Backend response included invalid place coordinates.")
        has_charging = data.get("hasCharging") is True
        distance_raw = data.get("distanceFromRoute" if along_route else "distanceKm")
        price_raw = data.get("pricePerHour")
        counts_raw = data.get("featureCounts")
        return PlaceSummary(
            id=place_id,
            name=str(data.get("name") or ""),
            lat=float(lat),
            lng=float(lng),
            category=PlaceCategory.CHARGING if has_charging else PlaceCategory.PARKING,
            address=data.get("address") or "Address not available",
            description=data.get("description") or None,
            phone=data.get("phone") or None,
            rating=parse_float(data.get("rating")),
            capacity=parse_int(data.get("capacity")),
            available_spots=parse_int(data.get("availableSpots")),
            car_spots=parse_int(data.get("carSpots")),
            bike_spots=parse_int(data.get("bikeSpots")),
            total_car_spots=parse_int(data.get("totalCarSpots")),
            total_bike_spots=parse_int(data.get("totalBikeSpots")),
            available_car_spots=parse_int(data.get("availableCarSpots")),
            available_bike_spots=parse_int(data.get("availableBikeSpots")),
            total_car_charging_spots=parse_int(data.get("totalCarChargingSpots")),
            available_car_charging_spots=parse_int(data.get("availableCarChargingSpots")),
            price_per_hour=parse_float(price_raw) if price_raw is not None else None,
            amenities=self._string_tuple(data.get("amenities")),
            images=self._string_tuple(data.get("images")),
            has_charging=has_charging,
            has_covered=data.get("hasCovered") is True,
            distance_km=parse_float(distance_raw) if distance_raw is not None else None,
            along_route=along_route,
            feature_counts=(
                self._map_feature_counts(counts_raw) if isinstance(counts_raw, dict) else None
            ),
        )

    def _map_slot_availability(self, data: Any) -> SlotAvailability:
        if not isinstance(data, dict):
            raise BackendError("Backend response included invalid slot data.")
        raw_slots = data.get("slots") or []
        if not isinstance(raw_slots, list):
            raise BackendError("Backend response included invalid slot data.")
        slots = [self._map_slot(item) for item in raw_slots if isinstance(item, dict)]
        slots.sort(key=lambda slot: slot.hour)
        pricing_raw = data.get("pricing")
        counts_raw = data.get("featureCounts")
        return SlotAvailability(
            slots=tuple(slots),
            pricing=self._map_pricing(pricing_raw) if isinstance(pricing_raw, dict) else PricingInfo(),
            feature_counts=(
                self._map_feature_counts(counts_raw)
                if isinstance(counts_raw, dict)
                else FeatureCounts()
            ),
        )

    def _map_slot(self, data: dict[str, Any]) -> TimeSlot:
        hour = data.get("hour")
        if isinstance(hour, bool) or not isinstance(hour, int) or not 0 <= hour <= 23:
            raise BackendError("Backend response included an invalid slot hour.")
        start_raw = data.get("startTime")
        end_raw = data.get("endTime")
        if not isinstance(start_raw, str) or not isinstance(end_raw, str):
            raise BackendError("Backend response missing slot times.")
        try:
            start = parse_timestamp(start_raw)
            end = parse_timestamp(end_raw)
        except ValidationError as exc:
            raise BackendError("Backend returned invalid slot times.") from exc
        return TimeSlot(
            start_time=start,
            end_time=end,
            hour=hour,
            time_label=str(data.get("timeLabel") or ""),
            available_spots=parse_int(data.get("availableSpots")),
            total_spots=parse_int(data.get("totalSpots")),
            is_available=data.get("isAvailable") is True,
            is_past=data.get("isPast") is True,
            basic_available=parse_int(data.get("basicAvailable")),
            covered_available=parse_int(data.get("coveredAvailable")),
            charging_available=parse_int(data.get("chargingAvailable")),
            covered_and_charging_available=parse_int(data.get("coveredAndChargingAvailable")),
        )

    def _map_pricing(self, data: dict[str, Any]) -> PricingInfo:
        try:
            return PricingInfo(
                hourly_rate=parse_float(data.get("hourlyRate")),
                daily_rate=parse_float(data.get("dailyRate")),
                covered_hourly_rate=parse_float(data.get("coveredHourlyRate")),
                covered_daily_rate=parse_float(data.get("coveredDailyRate")),
                charging_hourly_rate=parse_float(data.get("chargingHourlyRate")),
                charging_daily_rate=parse_float(data.get("chargingDailyRate")),
            )
        except ValidationError as exc:
            raise BackendError("Backend returned invalid pricing data.") from exc

    def _map_feature_counts(self, data: dict[str, Any]) -> FeatureCounts:
        return FeatureCounts(
            total=parse_int(data.get("total")),
            basic=parse_int(data.get("basic")),
            covered=parse_int(data.get("covered")),
            charging=parse_int(data.get("charging")),
            covered_and_charging=parse_int(data.get("coveredAndCharging")),
        )

    def _string_tuple(self, value: Any) -> tuple[str, ...]:
        if not isinstance(value, list):
            return ()
        return tuple(item for item in value if isinstance(item, str))
