"""Client facade wiring settings, the HTTP session and the API objects."""

from __future__ import annotations

import aiohttp

from .api.google import GoogleMapsApi
from .api.host import HostApi
from .api.map import MapApi
from .api.user import UserApi
from .config import Settings
from .reservation import BookedCallback, ReservationSession
from .viewport import ViewportSynchronizer


class Client:
    """Facade for the Parkit backend."""

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        *,
        settings: Settings | None = None,
        access_token: str | None = None,
    ) -> None:
        self._session = session
        self._owns_session = session is None
        self._settings = settings or Settings.from_env()
        self._timeout = aiohttp.ClientTimeout(total=self._settings.timeout)
        self._access_token = access_token
        self._map: MapApi | None = None
        self._user: UserApi | None = None
        self._host: HostApi | None = None
        self._google: GoogleMapsApi | None = None

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
            self._map = self._user = self._host = self._google = None

    @property
    def settings(self) -> Settings:
        return self._settings

    def set_access_token(self, access_token: str | None) -> None:
        self._access_token = access_token
        for api in (self._user, self._host):
            if api is not None:
                api.set_access_token(access_token)

    @property
    def map(self) -> MapApi:
        if self._map is None:
            self._map = MapApi(self._ensure_session(), **self._api_kwargs())
        return self._map

    @property
    def user(self) -> UserApi:
        if self._user is None:
            self._user = UserApi(
                self._ensure_session(),
                access_token=self._access_token,
                **self._api_kwargs(),
            )
        return self._user

    @property
    def host(self) -> HostApi:
        if self._host is None:
            self._host = HostApi(
                self._ensure_session(),
                access_token=self._access_token,
                **self._api_kwargs(),
            )
        return self._host

    @property
    def google(self) -> GoogleMapsApi:
        if self._google is None:
            self._google = GoogleMapsApi(
                self._ensure_session(),
                api_key=self._settings.google_maps_api_key,
                timeout=self._timeout,
                retry_count=self._settings.retry_count,
            )
        return self._google

    def viewport(self, **kwargs) -> ViewportSynchronizer:
        return ViewportSynchronizer(self.map, geocoder=self.google, **kwargs)

    def reservation(
        self,
        location_id: str,
        *,
        on_booked: BookedCallback | None = None,
    ) -> ReservationSession:
        return ReservationSession(
            location_id,
            map_api=self.map,
            user_api=self.user,
            tz=self._settings.tzinfo(),
            on_booked=on_booked,
        )

    def _api_kwargs(self) -> dict:
        return {
            "base_url": self._settings.backend_url,
            "timeout": self._timeout,
            "retry_count": self._settings.retry_count,
        }

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session
