import json
import time
from typing import Any, Dict, List, Optional

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat
from jwt.algorithms import RSAAlgorithm
from jwt.exceptions import InvalidKeyError
from requests import RequestException, Session

from ...config.logging import get_logger
from ...domain.exceptions import KeyFetchError, KeyParseFailureError

logger = get_logger("pkg_jwt.jwks")


class JWKSKeySource:
    """
    Supplies PEM-encoded RSA public keys from a JWKS endpoint.

    Infrastructure layer:
    - Knows how to fetch a JWKS document (``requests``).
    - Knows how to turn a JWK into a PEM public key (PyJWT + cryptography).
    """

    def __init__(
        self,
        jwks_uri: str,
        cache_ttl_seconds: int = 300,
        session: Optional[Session] = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._jwks_uri = jwks_uri
        self._cache_ttl = cache_ttl_seconds
        self._timeout = timeout_seconds

        self._session = session or Session()
        self._jwks_keys: Optional[List[Dict[str, Any]]] = None
        self._jwks_last_fetched: float = 0.0

    def public_key_pem(self, kid: str) -> bytes:
        """
        Return the PEM public key for ``kid``.

        Raises:
            KeyFetchError
            KeyParseFailureError
        """
        jwks_keys = self._fetch_jwks_keys()
        jwk = next((k for k in jwks_keys if k.get("kid") == kid), None)
        if not jwk:
            raise KeyParseFailureError(f"No matching key found in JWKS for kid {kid!r}")

        try:
            key = RSAAlgorithm.from_jwk(json.dumps(jwk))
        except (InvalidKeyError, KeyError, ValueError) as exc:
            raise KeyParseFailureError(f"Invalid JWK for kid {kid!r}: {exc}") from exc

        if isinstance(key, RSAPrivateKey):
            key = key.public_key()
        if not isinstance(key, RSAPublicKey):
            raise KeyParseFailureError(f"JWK for kid {kid!r} is not an RSA key")

        return key.public_bytes(Encoding.PEM, PublicFormat.SubjectPublicKeyInfo)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _fetch_jwks_keys(self) -> List[Dict[str, Any]]:
        """
        Fetch JWKS keys with simple in-memory caching.
        """
        now = time.time()
        if self._jwks_keys is not None and (now - self._jwks_last_fetched) < self._cache_ttl:
            return self._jwks_keys

        try:
            response = self._session.get(self._jwks_uri, timeout=self._timeout)
            response.raise_for_status()
            body = response.json()
        except (RequestException, ValueError) as exc:
            raise KeyFetchError(f"Cannot fetch JWKS from {self._jwks_uri}: {exc}") from exc

        keys = body.get("keys", []) if isinstance(body, dict) else None
        if not isinstance(keys, list):
            raise KeyFetchError(f"JWKS from {self._jwks_uri} has no \"keys\" list")

        self._jwks_keys = [k for k in keys if isinstance(k, dict)]
        self._jwks_last_fetched = now
        logger.info("jwks_fetched", uri=self._jwks_uri, keys=len(self._jwks_keys))
        return self._jwks_keys
