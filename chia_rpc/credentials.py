"""
TLS client credentials for the node and wallet services.

The services authenticate callers with a certificate/key pair issued by
their private CA. Credentials live under a single SSL directory at fixed
relative paths::

    <ssl_path>/daemon/private_daemon.crt   client certificate
    <ssl_path>/daemon/private_daemon.key   client private key
    <ssl_path>/ca/private_ca.crt           root CA for server verification

Loading happens once per client instance. Any missing or malformed file
fails client construction; nothing is deferred to the first request.

Verification policy:
    By default the server chain is verified against the root CA. Service
    certificates are issued for a fixed name rather than the host being
    dialled, so hostname matching is disabled while chain verification
    stays on. ``insecure_skip_verify=True`` turns verification off
    entirely and is meant for local development only.
"""

from __future__ import annotations

import logging
import ssl
from dataclasses import dataclass
from pathlib import Path

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.serialization import load_pem_private_key

from chia_rpc.errors import CredentialFormatError, CredentialIOError

log = logging.getLogger(__name__)

CERT_RELPATH = Path("daemon") / "private_daemon.crt"
KEY_RELPATH = Path("daemon") / "private_daemon.key"
CA_RELPATH = Path("ca") / "private_ca.crt"


@dataclass(frozen=True)
class TransportCredentials:
    """Immutable TLS client-authentication bundle.

    Attributes:
        cert_path: Client certificate file.
        key_path: Client private key file.
        ca_path: Root CA used to verify the server. None when
            verification is disabled.
        verify: Whether the server certificate chain is verified.
        ssl_context: Ready-to-use client context, shared by every request.
    """

    cert_path: Path
    key_path: Path
    ca_path: Path | None
    verify: bool
    ssl_context: ssl.SSLContext


def _read(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise CredentialIOError(f"Failed to read {path}: {e}", path=str(path)) from e


def _check_certificate(path: Path) -> None:
    try:
        x509.load_pem_x509_certificate(_read(path))
    except ValueError as e:
        raise CredentialFormatError(
            f"Failed to parse certificate file {path}: {e}", path=str(path)
        ) from e


def _check_private_key(path: Path) -> None:
    try:
        load_pem_private_key(_read(path), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise CredentialFormatError(
            f"Failed to parse private key file {path}: {e}", path=str(path)
        ) from e


def load_credentials(
    ssl_path: str | Path,
    *,
    insecure_skip_verify: bool = False,
    ca_path: str | Path | None = None,
) -> TransportCredentials:
    """Read the client certificate and key and build a TLS client context.

    Args:
        ssl_path: The service's SSL directory.
        insecure_skip_verify: Disable server certificate verification.
            Development only.
        ca_path: Root CA override. Defaults to ``ca/private_ca.crt``
            under ``ssl_path``. Ignored when verification is disabled.

    Returns:
        TransportCredentials holding the configured SSL context.

    Raises:
        CredentialIOError: A file could not be opened or read.
        CredentialFormatError: A file is not valid PEM, or the key does
            not match the certificate.
    """
    root = Path(ssl_path)
    cert_path = root / CERT_RELPATH
    key_path = root / KEY_RELPATH

    _check_certificate(cert_path)
    _check_private_key(key_path)

    if insecure_skip_verify:
        log.warning("Server certificate verification is disabled for %s", root)
        resolved_ca = None
        context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    else:
        resolved_ca = Path(ca_path) if ca_path is not None else root / CA_RELPATH
        _check_certificate(resolved_ca)
        try:
            context = ssl.create_default_context(
                ssl.Purpose.SERVER_AUTH, cafile=str(resolved_ca)
            )
        except ssl.SSLError as e:
            raise CredentialFormatError(
                f"Failed to load root certificate {resolved_ca}: {e}",
                path=str(resolved_ca),
            ) from e
        context.check_hostname = False
        context.verify_mode = ssl.CERT_REQUIRED

    try:
        context.load_cert_chain(certfile=str(cert_path), keyfile=str(key_path))
    except ssl.SSLError as e:
        raise CredentialFormatError(
            f"Certificate {cert_path} and key {key_path} do not form a valid pair: {e}",
            path=str(key_path),
        ) from e
    except OSError as e:
        raise CredentialIOError(f"Failed to read {cert_path}: {e}", path=str(cert_path)) from e

    return TransportCredentials(
        cert_path=cert_path,
        key_path=key_path,
        ca_path=resolved_ca,
        verify=not insecure_skip_verify,
        ssl_context=context,
    )
