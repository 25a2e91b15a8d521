"""Pluggable async HTTP transport.

Every network call in concept-poster goes through an HttpTransport so the
upload engine and the platform adapters can be exercised against an
httpx.MockTransport (or any fake) without touching the network. The
transport performs no retries; retry policy belongs to the caller.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping

import httpx

from ..constants import TIMEOUT_HTTP_DEFAULT

_logger = logging.getLogger("http_transport")


class HttpTransportError(Exception):
    """Network-level failure (connect, read, timeout) with no HTTP response."""

    def __init__(self, message: str, method: str = "", url: str = ""):
        super().__init__(message)
        self.method = method
        self.url = url


@dataclass(frozen=True)
class HttpResponse:
    """Status, headers and raw body of a completed request."""

    status_code: int
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Decode the body as JSON, returning None when it is not JSON."""
        if not self.body:
            return None
        try:
            return json.loads(self.body)
        except ValueError:
            return None


class HttpTransport(ABC):
    """Abstract request/response interface."""

    @abstractmethod
    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        data: Mapping[str, Any] | None = None,
        json_body: Any = None,
        content: bytes | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        """Send one request.

        Args:
            method: HTTP method.
            url: Absolute URL.
            headers: Request headers.
            params: Query string parameters.
            data: Form fields (sent url-encoded).
            json_body: JSON body.
            content: Raw bytes body.
            timeout: Per-request timeout in seconds.

        Returns:
            HttpResponse for any HTTP status, including 4xx/5xx.

        Raises:
            HttpTransportError: When no response was received.
        """
        ...

    async def aclose(self) -> None:
        """Release pooled connections."""
        return None

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


class HttpxTransport(HttpTransport):
    """HttpTransport backed by httpx.AsyncClient.

    Usage:
        async with HttpxTransport() as http:
            response = await http.request("GET", url)

        # In tests
        http = HttpxTransport(transport=httpx.MockTransport(handler))
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = TIMEOUT_HTTP_DEFAULT,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(transport=transport, timeout=timeout)

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        data: Mapping[str, Any] | None = None,
        json_body: Any = None,
        content: bytes | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        kwargs: dict[str, Any] = {}
        if headers:
            kwargs["headers"] = dict(headers)
        if params:
            kwargs["params"] = {k: v for k, v in params.items() if v is not None}
        if data is not None:
            kwargs["data"] = {k: _form_value(v) for k, v in data.items() if v is not None}
        if json_body is not None:
            kwargs["json"] = json_body
        if content is not None:
            kwargs["content"] = content
        if timeout is not None:
            kwargs["timeout"] = timeout

        try:
            response = await self._client.request(method.upper(), url, **kwargs)
        except httpx.TransportError as e:
            _logger.warning(f"{method.upper()} {_strip_query(url)} failed: {e}")
            raise HttpTransportError(str(e) or type(e).__name__, method=method, url=url) from e

        _logger.debug(f"{method.upper()} {_strip_query(url)} -> {response.status_code}")
        return HttpResponse(
            status_code=response.status_code,
            body=response.content,
            headers=dict(response.headers),
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def _form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _strip_query(url: str) -> str:
    # Query strings may carry access tokens
    return url.split("?", 1)[0]
