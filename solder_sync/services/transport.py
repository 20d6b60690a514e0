"""
HTTP access shared by every request of a reconciliation run.

A single ``httpx.AsyncClient`` is used for the whole run so its connection
pool caps concurrent downloads; requests beyond the cap wait for a free
connection instead of failing.
"""
from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Optional

import httpx

from solder_sync.domain.errors import TransportError

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONNECTIONS = 2
DEFAULT_TIMEOUT = 60.0
USER_AGENT = "solder-sync/0.1"


class HttpTransport:
    """Fetch bytes or JSON documents over HTTP(S)."""

    def __init__(
        self,
        max_connections: int = DEFAULT_MAX_CONNECTIONS,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.limits = httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_connections,
        )
        # httpx ignores client-level limits once a transport is given, so the
        # default transport carries the cap itself.
        if transport is None:
            transport = httpx.AsyncHTTPTransport(limits=self.limits)
        # Pool waits are unbounded so queued downloads never time out
        # while siblings hold the connections.
        self._client = httpx.AsyncClient(
            follow_redirects=True,
            timeout=httpx.Timeout(timeout, pool=None),
            headers={"User-Agent": USER_AGENT},
            transport=transport,
        )

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def iter_bytes(self, url: str) -> AsyncIterator[bytes]:
        """Stream the body of ``url`` chunk by chunk."""
        try:
            async with self._client.stream("GET", url) as response:
                response.raise_for_status()
                async for chunk in response.aiter_bytes():
                    yield chunk
        except httpx.HTTPError as e:
            raise TransportError(url, str(e) or type(e).__name__) from e

    async def fetch_json(self, url: str, params: Optional[dict] = None) -> Any:
        logger.debug(f"Fetching JSON from {url}")
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as e:
            raise TransportError(url, str(e) or type(e).__name__) from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        # Solder answers unknown modpacks/builds with an error document and a
        # 4xx status; hand those to the caller so the message survives.
        if response.is_error and not (isinstance(payload, dict) and "error" in payload):
            raise TransportError(url, f"HTTP {response.status_code}")
        if payload is None:
            raise TransportError(url, "response is not valid JSON")
        return payload
