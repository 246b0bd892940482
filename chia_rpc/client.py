"""
Generic RPC client shared by the full node and wallet clients.

An RpcClient binds a host, a port and a transport. Each endpoint method
on a subclass builds a parameter dict and hands it, together with an
Endpoint descriptor, to ``call``; the transport performs the exchange
and ``decode_envelope`` turns the body into the method's return value.

Instances hold no per-call state and can serve any number of concurrent
calls. Use as an async context manager, or call ``aclose()``, to release
the underlying HTTP client.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar, Self, TypeVar, cast

from chia_rpc.credentials import load_credentials
from chia_rpc.envelope import Endpoint, decode_envelope
from chia_rpc.errors import InvalidArgumentError
from chia_rpc.transport import (
    DEFAULT_MAX_RESPONSE_BYTES,
    DEFAULT_TIMEOUT_S,
    HttpxTransport,
    JsonTransport,
    build_url,
)

if TYPE_CHECKING:
    from chia_rpc.config import ClientConfig

T = TypeVar("T")


class RpcClient:
    """Base client for one service.

    Args:
        host: Service host name or address.
        port: Service RPC port.
        ssl_path: SSL directory holding the client certificate and key.
            Required unless ``transport`` is given.
        transport: Injectable transport. Defaults to an HttpxTransport
            built from ``ssl_path``. Pass a fake for testing.
        timeout_s: Bound on each exchange.
        max_response_bytes: Cap on each response body.
        insecure_skip_verify: Disable server certificate verification.
            Development only.
        ca_path: Root CA override for server verification.

    Raises:
        CredentialIOError, CredentialFormatError: Credentials could not be
            loaded.
        InvalidArgumentError: Neither ``ssl_path`` nor ``transport`` given.
    """

    default_port: ClassVar[int]

    def __init__(
        self,
        host: str,
        port: int,
        ssl_path: str | Path | None = None,
        *,
        transport: JsonTransport | None = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        max_response_bytes: int = DEFAULT_MAX_RESPONSE_BYTES,
        insecure_skip_verify: bool = False,
        ca_path: str | Path | None = None,
    ) -> None:
        if transport is None:
            if ssl_path is None:
                raise InvalidArgumentError("ssl_path is required when no transport is given")
            credentials = load_credentials(
                ssl_path,
                insecure_skip_verify=insecure_skip_verify,
                ca_path=ca_path,
            )
            transport = HttpxTransport(
                credentials,
                timeout_s=timeout_s,
                max_response_bytes=max_response_bytes,
            )
        self._host = host
        self._port = port
        self._transport = transport

    @classmethod
    def from_config(cls, config: ClientConfig) -> Self:
        """Build a client from a validated ClientConfig."""
        return cls(
            config.host,
            config.port if config.port is not None else cls.default_port,
            config.ssl_path,
            timeout_s=config.timeout_s,
            max_response_bytes=config.max_response_bytes,
            insecure_skip_verify=config.insecure_skip_verify,
            ca_path=config.ca_path,
        )

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        return self._port

    @property
    def transport(self) -> JsonTransport:
        return self._transport

    def url(self, endpoint_name: str) -> str:
        return build_url(self._host, self._port, endpoint_name)

    async def call(self, endpoint: Endpoint[T], params: dict[str, Any] | None = None) -> T:
        """Issue one request and decode its envelope.

        ``params`` is sent as given; ``{}`` when omitted.
        """
        payload = {} if params is None else dict(params)
        raw = await self._transport.post(self.url(endpoint.name), payload)
        # None only comes back for absent_on_failure endpoints, whose T admits it.
        return cast(T, decode_envelope(raw, endpoint))

    async def aclose(self) -> None:
        close = getattr(self._transport, "aclose", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
