"""HTTP access to upstream services with an allow-list of failure kinds.

Every upstream call made by pulseops goes through UpstreamClient, so
callers only ever have to handle two things:

    UpstreamUnavailableError  timeout, connection failure, non-2xx status
    MalformedPayloadError     body that cannot be decoded

Both subclass UpstreamError.  Callers catch UpstreamError and fall back.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0


class UpstreamError(Exception):
    """Base class for upstream failures callers are expected to absorb."""


class UpstreamUnavailableError(UpstreamError):
    """The upstream could not be reached or answered with an error status."""

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None) -> None:
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Upstream {url} unavailable: {reason}")


class MalformedPayloadError(UpstreamError):
    """The upstream answered but the payload could not be decoded."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Malformed payload from {url}: {reason}")


class UpstreamClient:
    """Thin async wrapper over httpx that maps failures onto UpstreamError.

    Args:
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests pass httpx.MockTransport).
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    async def _request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[dict[str, str]] = None,
        json: Any = None,
    ) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.request(method, url, headers=headers, json=json)
        except httpx.TimeoutException as exc:
            raise UpstreamUnavailableError(url, "timed out") from exc
        except httpx.HTTPError as exc:
            raise UpstreamUnavailableError(url, str(exc) or type(exc).__name__) from exc

        if response.is_error:
            raise UpstreamUnavailableError(
                url, f"HTTP {response.status_code}", status_code=response.status_code,
            )
        return response

    async def get_bytes(self, url: str, *, headers: Optional[dict[str, str]] = None) -> bytes:
        response = await self._request("GET", url, headers=headers)
        return response.content

    async def get_json(self, url: str, *, headers: Optional[dict[str, str]] = None) -> Any:
        response = await self._request("GET", url, headers=headers)
        return _decode_json(url, response)

    async def post_json(
        self,
        url: str,
        payload: dict[str, Any],
        *,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        response = await self._request("POST", url, headers=headers, json=payload)
        return _decode_json(url, response)


def _decode_json(url: str, response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise MalformedPayloadError(url, f"invalid JSON: {exc}") from exc


def bearer(api_key: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {api_key}"}
