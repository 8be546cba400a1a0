"""Environment-driven settings."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .const import DEFAULT_BACKEND_URL
from .exceptions import ConfigError

ENV_PREFIX = "PARKIT_"


@dataclass(frozen=True, slots=True)
class Settings:
    backend_url: str = DEFAULT_BACKEND_URL
    google_maps_api_key: str | None = None
    timeout: float = 30.0
    retry_count: int = 0
    timezone: str = "UTC"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        backend_url = _first(env, "PARKIT_BACKEND_URL", "NEXT_PUBLIC_BACKEND_URL")
        api_key = _first(env, "PARKIT_GOOGLE_MAPS_API_KEY", "NEXT_PUBLIC_GOOGLE_MAPS_API_KEY")
        settings = cls(
            backend_url=backend_url or DEFAULT_BACKEND_URL,
            google_maps_api_key=api_key,
            timeout=_parse_positive_float(env.get(f"{ENV_PREFIX}TIMEOUT"), 30.0, "TIMEOUT"),
            retry_count=_parse_retry_count(env.get(f"{ENV_PREFIX}RETRY_COUNT")),
            timezone=(env.get(f"{ENV_PREFIX}TIMEZONE") or "UTC").strip(),
        )
        # Fail early on an unknown zone name.
        settings.tzinfo()
        return settings

    def tzinfo(self) -> tzinfo:
        if self.timezone.upper() == "UTC":
            return UTC
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigError(f"Unknown timezone {self.timezone!r}.") from exc


def _first(env: Mapping[str, str], *names: str) -> str | None:
    for name in names:
        value = env.get(name)
        if value and value.strip():
            return value.strip()
    return None


def _parse_positive_float(raw: str | None, default: float, name: str) -> float:
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{ENV_PREFIX}{name} must be a number.") from exc
    if value <= 0:
        raise ConfigError(f"{ENV_PREFIX}{name} must be positive.")
    return value


def _parse_retry_count(raw: str | None) -> int:
    if raw is None or not raw.strip():
        return 0
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{ENV_PREFIX}RETRY_COUNT must be an integer.") from exc
    return max(0, value)
