"""Shared HTTP behavior for backend API clients."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import aiohttp

from ..const import AUTH_REQUIRED_MESSAGE, DEFAULT_HEADERS
from ..exceptions import (
    AuthError,
    BackendError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    ServiceUnavailableError,
    TimeoutError as RequestTimeoutError,
    ValidationError,
)

_LOGGER = logging.getLogger(__name__)
_DEFAULT_TIMEOUT = aiohttp.ClientTimeout(total=30)


class BaseApi:
    """Base class for API clients sharing one aiohttp session."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        *,
        base_url: str,
        access_token: str | None = None,
        timeout: aiohttp.ClientTimeout | None = None,
        retry_count: int = 0,
    ) -> None:
        if session is None:
            raise ValidationError("Session is required.")
        self._session = session
        self._base_url = self._normalize_base_url(base_url)
        self._access_token = access_token
        self._timeout = timeout or _DEFAULT_TIMEOUT
        self._retry_count = max(0, retry_count)

    @property
    def base_url(self) -> str:
        return self._base_url

    def set_access_token(self, access_token: str | None) -> None:
        self._access_token = access_token or None

    def _build_url(self, path: str) -> str:
        if not isinstance(path, str) or not path:
            raise ValidationError("Path must be a non-empty string.")
        if path.startswith("http://") or path.startswith("https://"):
            raise ValidationError("Use relative paths when building backend requests.")
        normalized_path = path if path.startswith("/") else f"/{path}"
        return f"{self._base_url}{normalized_path}"

    def _build_headers(self, *, auth_required: bool) -> dict[str, str]:
        headers = dict(DEFAULT_HEADERS)
        if auth_required:
            if not self._access_token:
                raise AuthError(AUTH_REQUIRED_MESSAGE, user_message=AUTH_REQUIRED_MESSAGE)
            headers["Authorization"] = f"Bearer {self._access_token}"
        return headers

    async def _request_json(
        self,
        method: str,
        path: str,
        *,
        json: Any | None = None,
        params: Mapping[str, Any] | None = None,
        auth_required: bool = False,
    ) -> Any:
        url = self._build_url(path)
        headers = self._build_headers(auth_required=auth_required)
        request_kwargs: dict[str, Any] = {"headers": headers}
        if json is not None:
            request_kwargs["json"] = json
        if params is not None:
            request_kwargs["params"] = self._encode_params(params)
        return await self._request(method, url, **request_kwargs)

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        retries = self._retry_count if method.upper() == "GET" else 0
        attempts = retries + 1
        for attempt in range(attempts):
            try:
                async with self._session.request(
                    method,
                    url,
                    timeout=self._timeout,
                    ssl=True,
                    **kwargs,
                ) as response:
                    await self._raise_for_status(response)
                    if response.status == 204:
                        return None
                    try:
                        return await response.json()
                    except (aiohttp.ContentTypeError, ValueError) as exc:
                        raise BackendError("Response did not contain valid JSON.") from exc
            except (aiohttp.ClientError, TimeoutError) as exc:
                if attempt < attempts - 1:
                    _LOGGER.debug(
                        "%s %s failed on attempt %s/%s, retrying",
                        method,
                        url,
                        attempt + 1,
                        attempts,
                    )
                    continue
                raise self._wrap_transport_error(exc) from exc
        raise BackendError("Request failed.")

    def _wrap_transport_error(self, exc: BaseException) -> NetworkError:
        if isinstance(exc, aiohttp.ClientError):
            return NetworkError("Network request failed.", detail=str(exc) or None)
        return RequestTimeoutError("Network request timed out.")

    async def _raise_for_status(self, response: aiohttp.ClientResponse) -> None:
        if 200 <= response.status < 300:
            return
        message = await self._error_message_from_response(response)
        detail = f"Backend request failed with status {response.status}."
        if response.status in (401, 403):
            raise AuthError(message or "Authentication failed.", detail=detail, user_message=message)
        if response.status == 404:
            raise NotFoundError(message or detail, detail=detail, user_message=message)
        if response.status == 429:
            raise RateLimitError(message or detail, detail=detail, user_message=message)
        if response.status >= 500:
            raise ServiceUnavailableError(message or detail, detail=detail, user_message=message)
        raise BackendError(message or detail, detail=detail, user_message=message)

    async def _error_message_from_response(self, response: aiohttp.ClientResponse) -> str | None:
        try:
            data = await response.json()
        except (aiohttp.ContentTypeError, ValueError):
            return None
        if not isinstance(data, dict):
            return None
        error = data.get("error")
        if isinstance(error, str) and error.strip():
            return error.strip()
        return None

    def _encode_params(self, params: Mapping[str, Any]) -> dict[str, str]:
        encoded: dict[str, str] = {}
        for key, value in params.items():
            if value is None:
                continue
            if isinstance(value, bool):
                encoded[key] = "true" if value else "false"
            else:
                encoded[key] = str(value)
        return encoded

    def _normalize_base_url(self, base_url: str) -> str:
        if not isinstance(base_url, str) or not base_url.strip():
            raise ValidationError("base_url must be a non-empty string.")
        return base_url.strip().rstrip("/")

    def _require_id(self, value: Any, field: str) -> str:
        if value is None:
            raise ValidationError(f"{field} is required.")
        text = str(value).strip()
        if not text:
            raise ValidationError(f"{field} is required.")
        return text
