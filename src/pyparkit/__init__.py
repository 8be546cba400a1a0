"""pyparkit package."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .client import Client
from .config import Settings
from .exceptions import (
    AuthError,
    BackendError,
    ConfigError,
    NetworkError,
    ParkitError,
    ValidationError,
)
from .models import (
    Booking,
    FeatureSelection,
    GeoRegion,
    LatLng,
    PlaceSummary,
    PricingInfo,
    TimeSlot,
)
from .reservation import ReservationSession, ReservationState
from .viewport import AlongRouteQuery, NearbyQuery, ViewportSynchronizer

try:
    __version__ = version("pyparkit")
except PackageNotFoundError:  # pragma: no cover - not installed
    __version__ = "0.0.0"

__all__ = [
    "AlongRouteQuery",
    "AuthError",
    "BackendError",
    "Booking",
    "Client",
    "ConfigError",
    "FeatureSelection",
    "GeoRegion",
    "LatLng",
    "NearbyQuery",
    "NetworkError",
    "ParkitError",
    "PlaceSummary",
    "PricingInfo",
    "ReservationSession",
    "ReservationState",
    "Settings",
    "TimeSlot",
    "ValidationError",
    "ViewportSynchronizer",
    "__version__",
]
