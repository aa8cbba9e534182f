from __future__ import annotations

import hmac
from typing import TYPE_CHECKING, Any, Callable

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey
from jwt.algorithms import HMACAlgorithm, RSAAlgorithm
from jwt.exceptions import InvalidKeyError

from ...config.logging import get_logger
from ...domain import codec
from ...domain.exceptions import (
    Base64InvalidError,
    KeyParseFailureError,
    SignatureMismatchError,
    UnsupportedAlgorithmError,
)

if TYPE_CHECKING:
    from ...application.token import Token

logger = get_logger("pkg_jwt.algorithms")


class HMACSigning:
    """
    Adapter implementing HS256/HS384/HS512 on top of PyJWT's HMACAlgorithm.

    Validation re-signs the received header and payload and compares the
    resulting compact string against the received one in constant time.
    """

    def __init__(self, hash_alg: Callable[..., Any]) -> None:
        self._algorithm = HMACAlgorithm(hash_alg)

    def sign(self, token: Token, signing_input: bytes) -> bytes:
        return self._algorithm.sign(signing_input, self._prepare_key(token))

    def validate(self, token: Token) -> bool:
        signing_input = token.signing_input()
        expected = signing_input + b"." + codec.b64_encode(self.sign(token, signing_input))

        if not hmac.compare_digest(expected, token.raw or b""):
            raise SignatureMismatchError("Failed to validate token: signature mismatch")
        return True

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _prepare_key(self, token: Token) -> bytes:
        if token.key is None:
            raise KeyParseFailureError("HMAC algorithms require a secret key")
        try:
            return self._algorithm.prepare_key(token.key)
        except InvalidKeyError as exc:
            raise KeyParseFailureError(f"Unusable HMAC secret: {exc}") from exc


class RSASigning:
    """
    Adapter implementing RS256 on top of PyJWT's RSAAlgorithm.

    Signing needs a PEM RSA private key. Verification takes a PEM RSA public
    key; a private key is still accepted and its public half is used.
    """

    def __init__(self) -> None:
        self._algorithm = RSAAlgorithm(RSAAlgorithm.SHA256)

    def sign(self, token: Token, signing_input: bytes) -> bytes:
        key = self._load_key(token)
        if not isinstance(key, RSAPrivateKey):
            raise KeyParseFailureError("RS256 signing requires an RSA private key")
        return self._algorithm.sign(signing_input, key)

    def validate(self, token: Token) -> bool:
        key = self._load_key(token)
        if isinstance(key, RSAPrivateKey):
            logger.debug("rs256_verify_with_private_key")
            key = key.public_key()

        try:
            signature = token.signature.decode()
        except Base64InvalidError as exc:
            raise SignatureMismatchError(f"Failed to validate token: {exc}") from exc

        if not self._algorithm.verify(token.signing_input(), key, signature):
            raise SignatureMismatchError("Failed to validate token: RSA verification failed")
        return True

    def _load_key(self, token: Token) -> RSAPrivateKey | RSAPublicKey:
        if token.key is None:
            raise KeyParseFailureError("RS256 requires PEM-encoded RSA key material")
        try:
            key = self._algorithm.prepare_key(token.key)
        except (InvalidKeyError, UnsupportedAlgorithm, ValueError, TypeError) as exc:
            raise KeyParseFailureError(f"Could not parse RSA key: {exc}") from exc

        if not isinstance(key, (RSAPrivateKey, RSAPublicKey)):
            raise KeyParseFailureError(f"Expected an RSA key, got {type(key).__name__}")
        return key


def sign_none(token: Token, signing_input: bytes) -> bytes:
    return b""


def validate_none(token: Token) -> bool:
    """Unsecured JWT (RFC 7519 section 6): only accepted when enabled."""
    if not token.settings.allow_none_algorithm:
        raise UnsupportedAlgorithmError(
            'The "none" algorithm is disabled; enable allow_none_algorithm to accept it'
        )
    if not token.signature.is_empty():
        raise SignatureMismatchError('Tokens using "none" must have an empty signature')
    return True
