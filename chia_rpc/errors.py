"""
Error taxonomy for the node and wallet RPC clients.

Every failure surfaces to the immediate caller as one of these exceptions.
The client layer does no local recovery and no retries; callers decide
whether a given error is worth retrying.

Hierarchy:
    RpcError
    ├── CredentialError           (local, fatal to client construction)
    │   ├── CredentialIOError
    │   └── CredentialFormatError
    ├── InvalidArgumentError      (local precondition, raised before I/O)
    ├── TransportError
    │   ├── NetworkError          (DNS, connect, TLS, reset, timeout)
    │   ├── BadStatusError        (HTTP status other than 200)
    │   └── ResponseTooLargeError (body exceeded the configured cap)
    └── DecodeError
        ├── JsonParseError        (not JSON, or unexpected shape)
        └── RemoteOperationFailedError  (well-formed, success == false)
"""

from __future__ import annotations

from typing import Any

# Response bodies are untrusted; only a bounded preview goes into details.
BODY_PREVIEW_CHARS = 200


class RpcError(Exception):
    """Base class for every error raised by this package.

    Attributes:
        error_code: Machine-readable category, stable across releases.
        details: Diagnostic context (URL, endpoint, status, ...).
    """

    error_code = "RPC_ERROR"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = details or {}


# =========================================================================
# Local errors
# =========================================================================


class CredentialError(RpcError):
    """The TLS credentials could not be loaded."""

    error_code = "CREDENTIALS"

    def __init__(self, message: str, *, path: str) -> None:
        super().__init__(message, details={"path": path})
        self.path = path


class CredentialIOError(CredentialError):
    """A certificate or key file could not be opened or read."""

    error_code = "CREDENTIALS_IO"


class CredentialFormatError(CredentialError):
    """A certificate or key file could not be parsed."""

    error_code = "CREDENTIALS_FORMAT"


class InvalidArgumentError(RpcError, ValueError):
    """A method was called with arguments that violate its preconditions."""

    error_code = "INVALID_ARGUMENT"


# =========================================================================
# Transport errors
# =========================================================================


class TransportError(RpcError):
    """The HTTPS exchange did not produce a usable response body."""

    error_code = "TRANSPORT"

    def __init__(self, message: str, *, url: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, details={"url": url, **(details or {})})
        self.url = url


class NetworkError(TransportError):
    """Transport-level failure; the cause is chained as ``__cause__``."""

    error_code = "NETWORK"


class BadStatusError(TransportError):
    """The service answered with an HTTP status other than 200."""

    error_code = "BAD_STATUS"

    def __init__(self, status: int, url: str) -> None:
        super().__init__(
            f"Bad status code {status} for URL {url}",
            url=url,
            details={"status_code": status},
        )
        self.status = status


class ResponseTooLargeError(TransportError):
    """The response body exceeded the configured size cap."""

    error_code = "RESPONSE_TOO_LARGE"

    def __init__(self, limit: int, url: str) -> None:
        super().__init__(
            f"Response from {url} exceeded {limit} bytes",
            url=url,
            details={"limit": limit},
        )
        self.limit = limit


# =========================================================================
# Decode errors
# =========================================================================


class DecodeError(RpcError):
    """A response body was received but could not be turned into a value."""

    error_code = "DECODE"


class JsonParseError(DecodeError):
    """The body is not valid JSON or does not match the expected shape.

    Attributes:
        body: The offending body text (decoded leniently).
        cause: The parser or validator diagnostic.
    """

    error_code = "INVALID_JSON"

    def __init__(self, endpoint: str, body: str, cause: str) -> None:
        super().__init__(
            f"Failed to parse response from {endpoint}: {cause}",
            details={
                "endpoint": endpoint,
                "cause": cause,
                "body_preview": body[:BODY_PREVIEW_CHARS],
            },
        )
        self.endpoint = endpoint
        self.body = body
        self.cause = cause


class RemoteOperationFailedError(DecodeError):
    """The service understood the request but reported ``success: false``."""

    error_code = "REMOTE_FAILED"

    def __init__(self, endpoint: str, remote_error: str | None = None) -> None:
        message = f"Remote operation {endpoint} failed"
        if remote_error:
            message = f"{message}: {remote_error}"
        super().__init__(
            message,
            details={"endpoint": endpoint, "remote_error": remote_error},
        )
        self.endpoint = endpoint
        self.remote_error = remote_error
