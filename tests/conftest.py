"""Shared fixtures: a throwaway private CA and daemon certificate on disk."""

from __future__ import annotations

import datetime
import shutil
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
)
from cryptography.x509.oid import NameOID


def _name(common_name: str) -> x509.Name:
    return x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])


def _key_pem(key: ec.EllipticCurvePrivateKey) -> bytes:
    return key.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, NoEncryption())


def _certificate(
    subject: str,
    issuer: str,
    public_key: ec.EllipticCurvePublicKey,
    signing_key: ec.EllipticCurvePrivateKey,
    *,
    ca: bool,
) -> x509.Certificate:
    now = datetime.datetime.now(datetime.UTC)
    return (
        x509.CertificateBuilder()
        .subject_name(_name(subject))
        .issuer_name(_name(issuer))
        .public_key(public_key)
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=30))
        .add_extension(x509.BasicConstraints(ca=ca, path_length=None), critical=True)
        .sign(signing_key, hashes.SHA256())
    )


@pytest.fixture(scope="session")
def pki_template(tmp_path_factory: pytest.TempPathFactory) -> Path:
    """SSL directory laid out like a service's config/ssl folder."""
    root = tmp_path_factory.mktemp("ssl-template")
    (root / "ca").mkdir()
    (root / "daemon").mkdir()

    ca_key = ec.generate_private_key(ec.SECP256R1())
    ca_cert = _certificate("Test Private CA", "Test Private CA", ca_key.public_key(), ca_key, ca=True)

    daemon_key = ec.generate_private_key(ec.SECP256R1())
    daemon_cert = _certificate("Test Daemon", "Test Private CA", daemon_key.public_key(), ca_key, ca=False)

    (root / "ca" / "private_ca.crt").write_bytes(ca_cert.public_bytes(Encoding.PEM))
    (root / "daemon" / "private_daemon.crt").write_bytes(daemon_cert.public_bytes(Encoding.PEM))
    (root / "daemon" / "private_daemon.key").write_bytes(_key_pem(daemon_key))
    return root


@pytest.fixture
def ssl_dir(pki_template: Path, tmp_path: Path) -> Path:
    """Per-test copy of the SSL directory, safe to modify."""
    target = tmp_path / "ssl"
    shutil.copytree(pki_template, target)
    return target


@pytest.fixture
def other_key_pem() -> bytes:
    """A valid private key that matches no certificate in ``ssl_dir``."""
    return _key_pem(ec.generate_private_key(ec.SECP256R1()))
