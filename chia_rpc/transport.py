"""
Transport protocol and default httpx transport for RPC calls.

Defines the seam where concrete HTTP implementations plug in. Clients
depend on the JsonTransport protocol, not on httpx directly, so tests
can substitute a fake transport without touching decoding logic.

Concrete implementations:
    - HttpxTransport (default, one long-lived httpx.AsyncClient)
    - FakeTransport (tests, returns canned bodies)

Exchange contract:
    POST https://{host}:{port}/{endpoint} with a JSON object body
    (``{}`` when there are no parameters). Only HTTP 200 yields a body;
    the caller decodes it. No retries, no redirects.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Any, Protocol, runtime_checkable

import httpx

from chia_rpc.credentials import TransportCredentials
from chia_rpc.errors import BadStatusError, NetworkError, ResponseTooLargeError

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 300.0
DEFAULT_MAX_RESPONSE_BYTES = 50 * 1024 * 1024


def build_url(host: str, port: int, endpoint: str) -> str:
    """Map (host, port, endpoint) to the endpoint URL. No validation."""
    return f"https://{host}:{port}/{endpoint}"


@runtime_checkable
class JsonTransport(Protocol):
    """Async transport for JSON POST requests."""

    async def post(self, url: str, payload: dict[str, Any]) -> bytes:
        """Send ``payload`` as a JSON body and return the raw response body.

        Args:
            url: The endpoint URL.
            payload: Request parameters. An empty dict is sent as ``{}``.

        Returns:
            The raw body of a 200 response.

        Raises:
            NetworkError: DNS, connect, TLS, reset or timeout failure.
            BadStatusError: Any status other than 200.
            ResponseTooLargeError: The body exceeded the size cap.
        """
        ...


async def read_limited(chunks: AsyncIterator[bytes], limit: int, url: str) -> bytes:
    """Accumulate ``chunks`` and stop as soon as more than ``limit`` bytes arrive.

    Raises:
        ResponseTooLargeError: The cap was exceeded. Remaining chunks are
            not consumed.
    """
    body = bytearray()
    async for chunk in chunks:
        body.extend(chunk)
        if len(body) > limit:
            raise ResponseTooLargeError(limit, url)
    return bytes(body)


def _declared_length(response: httpx.Response) -> int | None:
    value = response.headers.get("Content-Length")
    if value is None or not value.isdigit():
        return None
    return int(value)


class HttpxTransport:
    """Default transport using a single long-lived httpx.AsyncClient.

    The client, and with it the TLS context and connection pool, is built
    once here and reused for every call. Call ``aclose()`` when done.

    Args:
        credentials: Mutual-TLS credentials from ``load_credentials``.
        timeout_s: Bound on the whole exchange, also used for httpx's
            connect/read/write/pool timeouts.
        max_response_bytes: Cap on the response body size.
    """

    def __init__(
        self,
        credentials: TransportCredentials,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        max_response_bytes: int = DEFAULT_MAX_RESPONSE_BYTES,
    ) -> None:
        self._credentials = credentials
        self._timeout_s = timeout_s
        self._max_response_bytes = max_response_bytes
        self._client = httpx.AsyncClient(
            verify=credentials.ssl_context,
            timeout=timeout_s,
        )

    @property
    def credentials(self) -> TransportCredentials:
        return self._credentials

    @property
    def timeout_s(self) -> float:
        return self._timeout_s

    @property
    def max_response_bytes(self) -> int:
        return self._max_response_bytes

    async def post(self, url: str, payload: dict[str, Any]) -> bytes:
        """Send the request and return the body of a 200 response."""
        log.debug("POST %s", url)
        try:
            async with asyncio.timeout(self._timeout_s):
                return await self._exchange(url, payload)
        except httpx.RequestError as e:
            raise NetworkError(f"Request to {url} failed: {e!r}", url=url) from e
        except TimeoutError as e:
            raise NetworkError(
                f"Request to {url} timed out after {self._timeout_s}s",
                url=url,
                details={"timeout_s": self._timeout_s},
            ) from e

    async def _exchange(self, url: str, payload: dict[str, Any]) -> bytes:
        async with self._client.stream(
            "POST",
            url,
            json=payload,
            headers={"Content-Type": "application/json"},
        ) as response:
            # Leaving the block closes the response without draining it.
            if response.status_code != httpx.codes.OK:
                raise BadStatusError(response.status_code, url)

            declared = _declared_length(response)
            if declared is not None and declared > self._max_response_bytes:
                raise ResponseTooLargeError(self._max_response_bytes, url)

            return await read_limited(
                response.aiter_bytes(), self._max_response_bytes, url
            )

    async def aclose(self) -> None:
        await self._client.aclose()
