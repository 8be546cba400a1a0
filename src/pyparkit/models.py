"""Public data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum

from .exceptions import ValidationError


class PlaceCategory(StrEnum):
    PARKING = "parking"
    CHARGING = "charging"


class VehicleType(StrEnum):
    CAR = "CAR"
    BIKE = "BIKE"
    TRUCK = "TRUCK"
    VAN = "VAN"


class BookingStatus(StrEnum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class SpotKind(StrEnum):
    CAR = "car"
    BIKE = "bike"


@dataclass(frozen=True, slots=True)
class LatLng:
    lat: float
    lng: float


@dataclass(frozen=True, slots=True)
class GeoRegion:
    """Rectangular map extent; antimeridian wraparound is not supported."""

    north_east: LatLng
    south_west: LatLng

    def __post_init__(self) -> None:
        if self.north_east.lat < self.south_west.lat:
            raise ValidationError("north_east.lat must not be below south_west.lat.")
        if self.north_east.lng < self.south_west.lng:
            raise ValidationError("north_east.lng must not be west of south_west.lng.")

    @property
    def center(self) -> LatLng:
        return LatLng(
            lat=(self.north_east.lat + self.south_west.lat) / 2,
            lng=(self.north_east.lng + self.south_west.lng) / 2,
        )


@dataclass(frozen=True, slots=True)
class FeatureCounts:
    total: int = 0
    basic: int = 0
    covered: int = 0
    charging: int = 0
    covered_and_charging: int = 0


@dataclass(frozen=True, slots=True)
class PlaceSummary:
    id: str
    name: str
    lat: float
    lng: float
    category: PlaceCategory
    address: str = "Address not available"
    description: str | None = None
    phone: str | None = None
    rating: float = 0.0
    capacity: int = 0
    available_spots: int = 0
    car_spots: int = 0
    bike_spots: int = 0
    total_car_spots: int = 0
    total_bike_spots: int = 0
    available_car_spots: int = 0
    available_bike_spots: int = 0
    total_car_charging_spots: int = 0
    available_car_charging_spots: int = 0
    price_per_hour: float | None = None
    amenities: tuple[str, ...] = ()
    images: tuple[str, ...] = ()
    has_charging: bool = False
    has_covered: bool = False
    distance_km: float | None = None
    along_route: bool = False
    feature_counts: FeatureCounts | None = None

    @property
    def coordinates(self) -> LatLng:
        return LatLng(lat=self.lat, lng=self.lng)

    @property
    def distance_label(self) -> str | None:
        if self.distance_km is None:
            return None
        suffix = " from route" if self.along_route else ""
        return f"{self.distance_km:.1f} km{suffix}"


@dataclass(frozen=True, slots=True)
class PricingInfo:
    hourly_rate: float = 0.0
    daily_rate: float = 0.0
    covered_hourly_rate: float = 0.0
    covered_daily_rate: float = 0.0
    charging_hourly_rate: float = 0.0
    charging_daily_rate: float = 0.0

    def __post_init__(self) -> None:
        for name in self.__slots__:
            if getattr(self, name) < 0:
                raise ValidationError(f"{name} must be non-negative.")


@dataclass(frozen=True, slots=True)
class TimeSlot:
    start_time: datetime
    end_time: datetime
    hour: int
    time_label: str = ""
    available_spots: int = 0
    total_spots: int = 0
    is_available: bool = False
    is_past: bool = False
    basic_available: int = 0
    covered_available: int = 0
    charging_available: int = 0
    covered_and_charging_available: int = 0


@dataclass(frozen=True, slots=True)
class SlotAvailability:
    slots: tuple[TimeSlot, ...]
    pricing: PricingInfo = field(default_factory=PricingInfo)
    feature_counts: FeatureCounts = field(default_factory=FeatureCounts)

    def slot_for_hour(self, hour: int) -> TimeSlot | None:
        for slot in self.slots:
            if slot.hour == hour:
                return slot
        return None


@dataclass(frozen=True, slots=True)
class FeatureSelection:
    covered: bool = False
    charging: bool = False


@dataclass(frozen=True, slots=True)
class BookingInterval:
    start: datetime
    end: datetime

    @property
    def hours(self) -> int:
        return int((self.end - self.start).total_seconds() // 3600)


@dataclass(frozen=True, slots=True)
class Vehicle:
    id: str
    make: str
    model: str
    license_plate: str
    type: VehicleType = VehicleType.CAR
    year: int | None = None


@dataclass(frozen=True, slots=True)
class VehicleDraft:
    """A vehicle the user is about to register; the backend assigns the id."""

    make: str
    model: str
    license_plate: str
    type: VehicleType = VehicleType.CAR
    year: int | None = None


@dataclass(frozen=True, slots=True)
class Party:
    id: str
    name: str | None = None
    email: str | None = None


@dataclass(frozen=True, slots=True)
class Booking:
    id: str
    start_time: datetime
    end_time: datetime
    total_price: float
    status: BookingStatus
    land_owner: Party | None = None
    user: Party | None = None
    vehicle: Vehicle | None = None
    created_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class BookingSummary:
    location_id: str
    vehicle: Vehicle
    day: date
    hours: tuple[int, ...]
    interval: BookingInterval
    features: FeatureSelection
    hourly_rate: float
    total_price: float


@dataclass(frozen=True, slots=True)
class Marker:
    id: str
    lat: float
    lng: float
    name: str
    category: PlaceCategory
    price_per_hour: float | None = None
    is_new: bool = False
    animation_delay: float = 0.0


@dataclass(frozen=True, slots=True)
class MarkerUpdate:
    markers: tuple[Marker, ...]
    new_ids: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ParkingSpot:
    id: str
    kind: SpotKind
    covered: bool = False
    charging: bool = False
    available: bool = True
    hourly_rate: float = 0.0
    daily_rate: float = 0.0
    is_booked: bool = False
    is_manually_occupied: bool = False


@dataclass(frozen=True, slots=True)
class HostProfile:
    id: str
    name: str
    auto_accept: bool = False


@dataclass(frozen=True, slots=True)
class SpotDraft:
    """A parking spot offered while registering as a host."""

    covered: bool = False
    charging: bool = False
    available: bool = True
    hourly_rate: float = 0.0
    daily_rate: float = 0.0

    def __post_init__(self) -> None:
        if self.hourly_rate < 0 or self.daily_rate < 0:
            raise ValidationError("Spot rates must be non-negative.")


@dataclass(frozen=True, slots=True)
class HostRegistration:
    name: str
    email: str
    phone: str
    about: str
    address: str
    coordinates: LatLng
    car_spots: tuple[SpotDraft, ...] = ()
    bike_spots: tuple[SpotDraft, ...] = ()
    images: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class UserDetails:
    id: str
    name: str | None = None
    email: str | None = None
    vehicles: tuple[Vehicle, ...] = ()
