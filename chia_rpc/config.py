"""
Client configuration.

The clients take their settings as constructor arguments. ClientConfig
is the validated form of a plain mapping (e.g. loaded by an application
from its own config file), so callers can hand over a dict and get a
clear error instead of a failure on first request. No environment
variables or files are consulted here.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema  # type: ignore[import-untyped]

from chia_rpc.envelope import StrictValidator
from chia_rpc.transport import DEFAULT_MAX_RESPONSE_BYTES, DEFAULT_TIMEOUT_S

DEFAULT_HOST = "localhost"
DEFAULT_FULLNODE_PORT = 8555
DEFAULT_WALLET_PORT = 9256

CONFIG_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "required": ["ssl_path"],
    "properties": {
        "host": {
            "type": "string",
            "minLength": 1,
            "description": "Service host name or address",
        },
        "port": {
            "type": "integer",
            "minimum": 1,
            "maximum": 65535,
            "description": "Service RPC port (defaults per client)",
        },
        "ssl_path": {
            "type": "string",
            "minLength": 1,
            "description": "SSL directory with daemon/private_daemon.{crt,key}",
        },
        "ca_path": {
            "type": "string",
            "minLength": 1,
            "description": "Root CA override for server verification",
        },
        "timeout_s": {
            "type": "number",
            "exclusiveMinimum": 0,
            "description": "Bound on each request in seconds",
        },
        "max_response_bytes": {
            "type": "integer",
            "minimum": 1,
            "description": "Cap on each response body",
        },
        "insecure_skip_verify": {
            "type": "boolean",
            "description": "Disable server certificate verification (development only)",
        },
    },
}


class ConfigError(ValueError):
    """A configuration mapping does not match CONFIG_SCHEMA."""


@dataclass(frozen=True)
class ClientConfig:
    """Connection settings for one client.

    ``port`` left as None means the client's default port.
    """

    ssl_path: Path
    host: str = DEFAULT_HOST
    port: int | None = None
    timeout_s: float = DEFAULT_TIMEOUT_S
    max_response_bytes: int = DEFAULT_MAX_RESPONSE_BYTES
    insecure_skip_verify: bool = False
    ca_path: Path | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClientConfig:
        """Validate ``data`` and apply defaults.

        Raises:
            ConfigError: Unknown keys, missing ``ssl_path``, or values of
                the wrong type or range.
        """
        try:
            jsonschema.validate(instance=data, schema=CONFIG_SCHEMA, cls=StrictValidator)
        except jsonschema.ValidationError as e:
            where = ".".join(str(p) for p in e.absolute_path) or "config"
            raise ConfigError(f"{where}: {e.message}") from e

        ca_path = data.get("ca_path")
        return cls(
            ssl_path=Path(data["ssl_path"]),
            host=data.get("host", DEFAULT_HOST),
            port=data.get("port"),
            timeout_s=float(data.get("timeout_s", DEFAULT_TIMEOUT_S)),
            max_response_bytes=data.get("max_response_bytes", DEFAULT_MAX_RESPONSE_BYTES),
            insecure_skip_verify=data.get("insecure_skip_verify", False),
            ca_path=Path(ca_path) if ca_path is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "ssl_path": str(self.ssl_path),
            "host": self.host,
            "timeout_s": self.timeout_s,
            "max_response_bytes": self.max_response_bytes,
            "insecure_skip_verify": self.insecure_skip_verify,
        }
        if self.port is not None:
            result["port"] = self.port
        if self.ca_path is not None:
            result["ca_path"] = str(self.ca_path)
        return result
