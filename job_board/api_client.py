"""Gateway to the backend REST API.

Attaches the bearer token, turns non-2xx answers into :class:`ApiError` and
401 answers into :class:`AuthExpiredError`. Translating an error into the
text shown to the user is done by :func:`handle_api_error`.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from job_board.config import settings

logger = logging.getLogger(__name__)

FALLBACK_ERROR_MESSAGE = "An unexpected error occurred"
MALFORMED_RESPONSE_MESSAGE = "The server returned an unexpected response"


class ApiError(Exception):
    def __init__(self, status_code: int, payload: Any = None, message: Optional[str] = None):
        self.status_code = status_code
        self.payload = payload
        super().__init__(message or f"Request failed with status code {status_code}")


class AuthExpiredError(ApiError):
    """The backend rejected the bearer token (HTTP 401)."""


def _parse_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def handle_api_error(error: BaseException) -> str:
    """Server message first, then joined field errors, then a generic fallback."""
    if isinstance(error, ApiError):
        payload = error.payload if isinstance(error.payload, dict) else {}
        message = payload.get("message")
        if message:
            return str(message)
        errors = payload.get("errors")
        if isinstance(errors, dict) and errors:
            return ", ".join(str(v) for v in errors.values())
        if isinstance(errors, list) and errors:
            return ", ".join(str(v) for v in errors)
        return str(error) or FALLBACK_ERROR_MESSAGE
    if isinstance(error, httpx.HTTPError):
        return str(error) or FALLBACK_ERROR_MESSAGE
    if isinstance(error, ValidationError):
        return MALFORMED_RESPONSE_MESSAGE
    return FALLBACK_ERROR_MESSAGE


class ApiClient:
    """Thin async wrapper around one shared ``httpx.AsyncClient``."""

    def __init__(self, http: httpx.AsyncClient, token: Optional[str] = None):
        self._http = http
        self.token = token

    def with_token(self, token: Optional[str]) -> "ApiClient":
        return ApiClient(self._http, token)

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        response = await self._http.request(method, path, params=params, json=json, headers=headers)
        logger.debug(f"{method} {path} -> {response.status_code}")

        if response.status_code == 401:
            self.token = None
            raise AuthExpiredError(401, _parse_body(response), "Session expired, please log in again")
        if response.is_error:
            payload = _parse_body(response)
            logger.warning(f"API {method} {path} failed: status={response.status_code} body={payload!r}")
            raise ApiError(response.status_code, payload)
        return _parse_body(response)

    async def get(self, path: str, **kwargs) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs) -> Any:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs) -> Any:
        return await self.request("DELETE", path, **kwargs)


def create_http_client(transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=settings.api_base_url,
        timeout=settings.api_timeout_seconds,
        headers={"Content-Type": "application/json", "Accept": "application/json"},
        transport=transport,
    )
