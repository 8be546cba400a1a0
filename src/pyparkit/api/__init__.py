"""HTTP clients for the Parkit backend and Google Maps."""

from .base import BaseApi
from .google import GoogleMapsApi
from .host import HostApi
from .map import MapApi
from .user import UserApi

__all__ = ["BaseApi", "GoogleMapsApi", "HostApi", "MapApi", "UserApi"]
