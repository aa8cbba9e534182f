# tests/test_jwks.py
import json

import pytest
import requests
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)
from jwt.algorithms import RSAAlgorithm

from pkg_jwt.adapters.jwks.jwt_decoder import JWKSTokenDecoder
from pkg_jwt.adapters.jwks.key_source import JWKSKeySource
from pkg_jwt.application.token import new
from pkg_jwt.domain.constants import AlgorithmType
from pkg_jwt.domain.exceptions import (
    KeyFetchError,
    KeyParseFailureError,
    MalformedTokenError,
    SignatureMismatchError,
    UnsupportedAlgorithmError,
)

JWKS_URI = "https://issuer.example/.well-known/jwks.json"


class FakeResponse:
    def __init__(self, body, status_code=200):
        self._body = body
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._body


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []
        self.timeouts = []

    def get(self, url, timeout=None):
        self.calls.append(url)
        self.timeouts.append(timeout)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def jwks_body(rsa_private_key):
    jwk = json.loads(RSAAlgorithm.to_jwk(rsa_private_key.public_key()))
    jwk["kid"] = "key-1"
    return {"keys": [jwk]}


def _rs256_token(private_pem, kid="key-1"):
    token = new(AlgorithmType.RS256, {"sub": "alice"}, private_pem)
    if kid is not None:
        token.header.set("kid", kid)
    return token.encode().decode()


def test_key_source_returns_public_pem(rsa_private_key, jwks_body):
    session = FakeSession(FakeResponse(jwks_body))
    source = JWKSKeySource(JWKS_URI, session=session)

    pem = source.public_key_pem("key-1")

    assert pem == rsa_private_key.public_key().public_bytes(
        Encoding.PEM, PublicFormat.SubjectPublicKeyInfo
    )
    source.public_key_pem("key-1")
    assert session.calls == [JWKS_URI]
    assert session.timeouts == [10.0]


def test_key_source_refetches_after_ttl(jwks_body):
    session = FakeSession(FakeResponse(jwks_body))
    source = JWKSKeySource(JWKS_URI, cache_ttl_seconds=0, session=session)

    source.public_key_pem("key-1")
    source.public_key_pem("key-1")
    assert len(session.calls) == 2


def test_key_source_unknown_kid(jwks_body):
    source = JWKSKeySource(JWKS_URI, session=FakeSession(FakeResponse(jwks_body)))
    with pytest.raises(KeyParseFailureError):
        source.public_key_pem("key-2")


def test_key_source_invalid_jwk():
    body = {"keys": [{"kid": "key-1", "kty": "RSA"}]}
    source = JWKSKeySource(JWKS_URI, session=FakeSession(FakeResponse(body)))
    with pytest.raises(KeyParseFailureError):
        source.public_key_pem("key-1")


@pytest.mark.parametrize(
    "session",
    [
        FakeSession(error=requests.ConnectionError("unreachable")),
        FakeSession(FakeResponse({}, status_code=503)),
        FakeSession(FakeResponse(["not", "an", "object"])),
        FakeSession(FakeResponse({"keys": "not-a-list"})),
    ],
)
def test_key_source_fetch_errors(session):
    source = JWKSKeySource(JWKS_URI, session=session)
    with pytest.raises(KeyFetchError):
        source.public_key_pem("key-1")


def test_decoder_verifies_with_jwks_key(rsa_private_pem, jwks_body):
    decoder = JWKSTokenDecoder(JWKSKeySource(JWKS_URI, session=FakeSession(FakeResponse(jwks_body))))

    assert decoder.decode(_rs256_token(rsa_private_pem)) == {"sub": "alice"}


def test_decoder_rejects_other_signer(jwks_body):
    other = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    other_pem = other.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, NoEncryption())

    decoder = JWKSTokenDecoder(JWKSKeySource(JWKS_URI, session=FakeSession(FakeResponse(jwks_body))))
    with pytest.raises(SignatureMismatchError):
        decoder.decode(_rs256_token(other_pem))


def test_decoder_requires_kid(rsa_private_pem, jwks_body):
    decoder = JWKSTokenDecoder(JWKSKeySource(JWKS_URI, session=FakeSession(FakeResponse(jwks_body))))
    with pytest.raises(MalformedTokenError):
        decoder.decode(_rs256_token(rsa_private_pem, kid=None))


def test_decoder_requires_rs256(jwks_body):
    session = FakeSession(FakeResponse(jwks_body))
    decoder = JWKSTokenDecoder(JWKSKeySource(JWKS_URI, session=session))

    hs_token = new(AlgorithmType.HS256, {"sub": "alice"}, b"secret").encode().decode()
    with pytest.raises(UnsupportedAlgorithmError):
        decoder.decode(hs_token)
    assert session.calls == []
