from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping, Optional, Protocol

if TYPE_CHECKING:
    from ..application.token import Token


class SignFunc(Protocol):
    """
    Signing strategy: return the raw signature bytes for ``signing_input``.

    ``signing_input`` is exactly ``headerB64 + b"." + payloadB64``.
    """

    def __call__(self, token: Token, signing_input: bytes) -> bytes:
        ...


class ValidateFunc(Protocol):
    """
    Validation strategy: return ``True`` if the token signature holds.

    May return ``False`` or raise a ``ValidateError`` subclass on mismatch.
    """

    def __call__(self, token: Token) -> bool:
        ...


@dataclass(frozen=True, slots=True)
class AlgorithmStrategy:
    """The {sign, validate} pair registered for one algorithm."""

    sign: Optional[SignFunc] = None
    validate: Optional[ValidateFunc] = None


class TokenDecoder(Protocol):
    """
    Port for turning a compact token into verified claims.

    Implementations live in the application and adapters layers.
    """

    def decode(self, token: str) -> Mapping[str, Any]:
        """
        Decode and verify the given token.

        Should:
          - verify signature
          - check expiry
        Raises:
          - ExpiredTokenError
          - SignatureMismatchError
          - or other pkg_jwt errors
        """
        ...
