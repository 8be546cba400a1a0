"""Library exceptions."""

from __future__ import annotations


class ParkitError(Exception):
    """Base exception for the library."""

    error_type = "unknown"
    default_code: str | None = None

    def __init__(
        self,
        message: str | None = None,
        *,
        error_code: str | None = None,
        detail: str | None = None,
        user_message: str | None = None,
    ) -> None:
        text = message or detail or ""
        super().__init__(text)
        self.error_code = error_code or self.default_code
        self.detail = detail or text
        self.user_message = user_message


class AuthError(ParkitError):
    """Raised when authentication fails or is missing."""

    error_type = "auth"
    default_code = "auth_error"


class NetworkError(ParkitError):
    """Raised when network communication fails."""

    error_type = "network"
    default_code = "network_error"


class TimeoutError(NetworkError):  # noqa: A001
    """Raised when a request times out."""

    default_code = "timeout"


class ValidationError(ParkitError):
    """Raised when inputs fail validation."""

    error_type = "validation"
    default_code = "validation_error"


class ConfigError(ValidationError):
    """Raised when settings are missing or invalid."""

    error_type = "config"
    default_code = "config_error"


class BackendError(ParkitError):
    """Raised when the backend returns an error or an unusable response."""

    error_type = "backend"
    default_code = "backend_error"


class NotFoundError(BackendError):
    default_code = "not_found"


class RateLimitError(BackendError):
    default_code = "rate_limit"


class ServiceUnavailableError(BackendError):
    default_code = "service_unavailable"
