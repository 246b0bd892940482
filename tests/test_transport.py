"""
Tests for URL building and the httpx transport.

Uses pytest-httpx to intercept requests made by HttpxTransport; the TLS
context is built from generated credentials but never used on the wire.

Test plan:
- build_url: exact https://{host}:{port}/{endpoint}
- Request: POST, JSON body, {} for no params, Content-Type header
- Status: only 200 returns a body; others raise BadStatusError(status, url)
- Size cap: declared and streamed bodies over the cap raise
  ResponseTooLargeError; the capped reader stops pulling chunks
- Network: connect errors, httpx timeouts and the overall deadline raise
  NetworkError with the cause chained
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator
from pathlib import Path

import httpx
import pytest
from pytest_httpx import HTTPXMock

from chia_rpc.credentials import load_credentials
from chia_rpc.errors import BadStatusError, NetworkError, ResponseTooLargeError
from chia_rpc.transport import (
    DEFAULT_MAX_RESPONSE_BYTES,
    DEFAULT_TIMEOUT_S,
    HttpxTransport,
    JsonTransport,
    build_url,
    read_limited,
)

URL = "https://localhost:8555/get_blockchain_state"


@pytest.fixture
def transport_factory(ssl_dir: Path):
    def make(**kwargs) -> HttpxTransport:
        return HttpxTransport(load_credentials(ssl_dir), **kwargs)

    return make


# ---------------------------------------------------------------------------
# build_url
# ---------------------------------------------------------------------------


class TestBuildUrl:
    @pytest.mark.parametrize(
        "host,port,endpoint,expected",
        [
            ("localhost", 8555, "get_blockchain_state", "https://localhost:8555/get_blockchain_state"),
            ("127.0.0.1", 9256, "get_wallets", "https://127.0.0.1:9256/get_wallets"),
            ("node.example", 1, "push_tx", "https://node.example:1/push_tx"),
            ("::1", 8555, "get_block", "https://::1:8555/get_block"),
        ],
    )
    def test_exact_format(self, host: str, port: int, endpoint: str, expected: str) -> None:
        assert build_url(host, port, endpoint) == expected

    def test_no_validation(self) -> None:
        assert build_url("", 0, "") == "https://:0/"


# ---------------------------------------------------------------------------
# HttpxTransport
# ---------------------------------------------------------------------------


class TestHttpxTransportDefaults:
    @pytest.mark.asyncio
    async def test_defaults(self, transport_factory) -> None:
        transport = transport_factory()
        try:
            assert transport.timeout_s == DEFAULT_TIMEOUT_S == 300.0
            assert transport.max_response_bytes == DEFAULT_MAX_RESPONSE_BYTES == 50 * 1024 * 1024
            assert transport.credentials.verify is True
            assert isinstance(transport, JsonTransport)
        finally:
            await transport.aclose()


class TestHttpxTransportRequest:
    @pytest.mark.asyncio
    async def test_returns_raw_body(self, httpx_mock: HTTPXMock, transport_factory) -> None:
        httpx_mock.add_response(method="POST", url=URL, content=b'{"success": true}')
        transport = transport_factory()
        try:
            body = await transport.post(URL, {})
        finally:
            await transport.aclose()
        assert body == b'{"success": true}'

    @pytest.mark.asyncio
    async def test_empty_params_send_empty_object(
        self, httpx_mock: HTTPXMock, transport_factory
    ) -> None:
        httpx_mock.add_response(method="POST", url=URL, json={"success": True})
        transport = transport_factory()
        try:
            await transport.post(URL, {})
        finally:
            await transport.aclose()

        request = httpx_mock.get_requests()[0]
        assert json.loads(request.content) == {}
        assert request.headers["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_sends_params_as_json(self, httpx_mock: HTTPXMock, transport_factory) -> None:
        url = "https://localhost:8555/get_coin_records_by_puzzle_hashes"
        httpx_mock.add_response(method="POST", url=url, json={"success": True})
        transport = transport_factory()
        params = {"puzzle_hashes": ["0x" + "aa" * 32, "0x" + "bb" * 32], "include_spent_coins": True}
        try:
            await transport.post(url, params)
        finally:
            await transport.aclose()

        assert json.loads(httpx_mock.get_requests()[0].content) == params

    @pytest.mark.asyncio
    async def test_reuses_one_client(self, httpx_mock: HTTPXMock, transport_factory) -> None:
        httpx_mock.add_response(method="POST", url=URL, json={"success": True})
        httpx_mock.add_response(method="POST", url=URL, json={"success": True})
        transport = transport_factory()
        try:
            client = transport._client
            await transport.post(URL, {})
            await transport.post(URL, {})
            assert transport._client is client
        finally:
            await transport.aclose()
        assert len(httpx_mock.get_requests()) == 2


class TestHttpxTransportStatus:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [201, 204, 301, 400, 404, 500, 503])
    async def test_non_200_raises(
        self, httpx_mock: HTTPXMock, transport_factory, status: int
    ) -> None:
        httpx_mock.add_response(method="POST", url=URL, status_code=status, text="whatever")
        transport = transport_factory()
        try:
            with pytest.raises(BadStatusError) as exc:
                await transport.post(URL, {})
        finally:
            await transport.aclose()

        assert exc.value.status == status
        assert exc.value.url == URL
        assert exc.value.details["status_code"] == status
        assert "whatever" not in str(exc.value)


class TestHttpxTransportSizeCap:
    @pytest.mark.asyncio
    async def test_oversized_body_rejected(self, httpx_mock: HTTPXMock, transport_factory) -> None:
        httpx_mock.add_response(method="POST", url=URL, content=b"x" * 2048)
        transport = transport_factory(max_response_bytes=1024)
        try:
            with pytest.raises(ResponseTooLargeError) as exc:
                await transport.post(URL, {})
        finally:
            await transport.aclose()
        assert exc.value.limit == 1024
        assert exc.value.url == URL

    @pytest.mark.asyncio
    async def test_body_at_cap_accepted(self, httpx_mock: HTTPXMock, transport_factory) -> None:
        httpx_mock.add_response(method="POST", url=URL, content=b"x" * 1024)
        transport = transport_factory(max_response_bytes=1024)
        try:
            body = await transport.post(URL, {})
        finally:
            await transport.aclose()
        assert len(body) == 1024


class TestReadLimited:
    @pytest.mark.asyncio
    async def test_stops_pulling_once_over_cap(self) -> None:
        pulled: list[int] = []

        async def chunks() -> AsyncIterator[bytes]:
            for i in range(10):
                pulled.append(i)
                yield b"x" * 100

        with pytest.raises(ResponseTooLargeError):
            await read_limited(chunks(), 250, URL)
        assert len(pulled) == 3

    @pytest.mark.asyncio
    async def test_joins_chunks_under_cap(self) -> None:
        async def chunks() -> AsyncIterator[bytes]:
            yield b'{"success":'
            yield b" true}"

        assert await read_limited(chunks(), 1024, URL) == b'{"success": true}'


class TestHttpxTransportNetworkErrors:
    @pytest.mark.asyncio
    async def test_connect_error(self, httpx_mock: HTTPXMock, transport_factory) -> None:
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"), method="POST", url=URL)
        transport = transport_factory()
        try:
            with pytest.raises(NetworkError) as exc:
                await transport.post(URL, {})
        finally:
            await transport.aclose()
        assert exc.value.url == URL
        assert isinstance(exc.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_httpx_timeout(self, httpx_mock: HTTPXMock, transport_factory) -> None:
        httpx_mock.add_exception(httpx.ReadTimeout("Request timed out"), method="POST", url=URL)
        transport = transport_factory()
        try:
            with pytest.raises(NetworkError) as exc:
                await transport.post(URL, {})
        finally:
            await transport.aclose()
        assert isinstance(exc.value.__cause__, httpx.TimeoutException)

    @pytest.mark.asyncio
    async def test_overall_deadline(self, httpx_mock: HTTPXMock, transport_factory) -> None:
        async def slow(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200, json={"success": True})

        httpx_mock.add_callback(slow, method="POST", url=URL)
        transport = transport_factory(timeout_s=0.05)
        try:
            with pytest.raises(NetworkError) as exc:
                await transport.post(URL, {})
        finally:
            await transport.aclose()
        assert exc.value.details["timeout_s"] == 0.05
        assert isinstance(exc.value.__cause__, TimeoutError)
