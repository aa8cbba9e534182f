from typing import Any, Dict, Optional

from ...application.token import parse
from ...config.settings import JWTSettings
from ...domain.constants import AlgorithmType
from ...domain.exceptions import MalformedTokenError, UnsupportedAlgorithmError
from ...domain.ports import TokenDecoder
from .key_source import JWKSKeySource


class JWKSTokenDecoder(TokenDecoder):
    """
    Adapter implementing TokenDecoder for RS256 tokens signed by a JWKS issuer.

    The header ``kid`` selects the public key; only the public key is ever
    used for verification.
    """

    def __init__(
        self,
        key_source: JWKSKeySource,
        settings: Optional[JWTSettings] = None,
    ) -> None:
        self._key_source = key_source
        self._settings = settings or JWTSettings()

    # ------------------------------------------------------------------ #
    # Port implementation
    # ------------------------------------------------------------------ #

    def decode(self, token: str) -> Dict[str, Any]:
        """
        Decode and validate JWT token.

        Returns:
            Mapping of token claims (dict-like).

        Raises:
            UnsupportedAlgorithmError
            MalformedTokenError
            KeyFetchError
            KeyParseFailureError
            SignatureMismatchError
            ExpiredTokenError
        """
        parsed = parse(token, settings=self._settings)
        if parsed.algorithm is not AlgorithmType.RS256:
            raise UnsupportedAlgorithmError(
                f"Expected RS256 token, got {parsed.algorithm.value!r}"
            )

        kid = parsed.header.get("kid")
        if not isinstance(kid, str) or not kid:
            raise MalformedTokenError('Token header has no "kid"')

        parsed.key = self._key_source.public_key_pem(kid)
        parsed.validate()
        return parsed.claims.to_dict()
