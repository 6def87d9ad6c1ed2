"""
Shared async HTTP transport for the collaborator APIs.

Wraps httpx.AsyncClient with the configured base URL and fixed timeout,
attaches the bearer token, and converts every failure into the careslot
error taxonomy so callers never see raw httpx exceptions:

    401            -> AuthError
    403            -> PermissionDeniedError
    timeout, 5xx   -> NetworkOrServerError
    other 4xx      -> RequestRejectedError (server message preserved)
"""

from typing import Any, Callable, Optional

import httpx

from careslot.cancellation import CancellationToken
from careslot.config import settings
from careslot.errors import (
    AuthError,
    NetworkOrServerError,
    PermissionDeniedError,
    RequestRejectedError,
)
from careslot.logging_context import get_request_logger

logger = get_request_logger(__name__)

TokenProvider = Callable[[], Optional[str]]


def _server_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase or f"HTTP {response.status_code}"


class ApiClient:
    """Thin JSON client used by the directory, booking and interaction clients."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        token_provider: Optional[TokenProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._token_provider = token_provider
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.api.base_url,
            timeout=timeout_seconds or settings.api.timeout_seconds,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        token = self._token_provider() if self._token_provider else None
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def request(
        self,
        method: str,
        path: str,
        json: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> dict[str, Any]:
        """Send a request and return the decoded JSON object body."""
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        logger.debug("API request: %s %s", method, path)
        try:
            response = await self._client.request(
                method, path, json=json, params=params, headers=self._headers()
            )
        except httpx.TimeoutException as exc:
            logger.warning("API timeout: %s %s", method, path)
            raise NetworkOrServerError(f"Request timed out: {method} {path}") from exc
        except httpx.TransportError as exc:
            logger.warning("API transport error: %s %s: %s", method, path, exc)
            raise NetworkOrServerError(f"Network error: {exc}") from exc

        status = response.status_code
        logger.debug("API response: %s %s -> %d", method, path, status)
        if status == 401:
            raise AuthError(_server_message(response), status)
        if status == 403:
            raise PermissionDeniedError(_server_message(response), status)
        if status >= 500:
            logger.error("API server error: %s %s -> %d", method, path, status)
            raise NetworkOrServerError(_server_message(response), status)
        if status >= 400:
            raise RequestRejectedError(_server_message(response), status)

        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError as exc:
            raise NetworkOrServerError(f"Malformed JSON from {path}", status) from exc
        if not isinstance(body, dict):
            raise NetworkOrServerError(f"Unexpected response shape from {path}", status)
        return body

    async def get(self, path: str, **kwargs: Any) -> dict[str, Any]:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, json: Optional[dict[str, Any]] = None, **kwargs: Any) -> dict[str, Any]:
        return await self.request("POST", path, json=json if json is not None else {}, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> dict[str, Any]:
        return await self.request("DELETE", path, **kwargs)
