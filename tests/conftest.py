"""Test fixtures."""

from __future__ import annotations

import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

from pkg_jwt.config.logging import configure_logging

configure_logging("warning")

_RSA_KEY = rsa.generate_private_key(public_exponent=65537, key_size=2048)
"""RSA key for RS256 signing and verification.

Generated once per test run since key generation is slow.
"""


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    return _RSA_KEY


@pytest.fixture(scope="session")
def rsa_private_pem() -> bytes:
    """PKCS#1 PEM (``BEGIN RSA PRIVATE KEY``)."""
    return _RSA_KEY.private_bytes(
        Encoding.PEM, PrivateFormat.TraditionalOpenSSL, NoEncryption()
    )


@pytest.fixture(scope="session")
def rsa_public_pem() -> bytes:
    return _RSA_KEY.public_key().public_bytes(
        Encoding.PEM, PublicFormat.SubjectPublicKeyInfo
    )
