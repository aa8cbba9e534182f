from __future__ import annotations

from typing import Optional

from .constants import TokenType


class JWTError(Exception):
    """Base class for every error raised by pkg_jwt."""
    pass


# --- Claims ----------------------------------------------------------------


class ClaimError(JWTError):
    """Raised when a claim set operation fails."""
    pass


class DuplicateClaimError(ClaimError):
    """Raised when adding a claim whose name is already present."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Duplicate claims are forbidden: {key!r}")


class ClaimNotFoundError(ClaimError):
    """Raised when removing a claim that is not in the set."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Key {key!r} was not found in claim set")


class InvalidClaimValueError(ClaimError):
    """Raised when a value is not representable as JSON."""
    pass


# --- Codec -----------------------------------------------------------------


class CodecError(JWTError):
    """Raised when a header or payload cannot be (de)serialized."""
    pass


class Base64InvalidError(CodecError):
    """Raised when a segment is not valid unpadded base64url."""
    pass


class JsonInvalidError(CodecError):
    """Raised when a segment does not hold a JSON object."""
    pass


# --- Algorithms ------------------------------------------------------------


class AlgorithmError(JWTError):
    """Raised when an algorithm cannot be used."""
    pass


class UnsupportedAlgorithmError(AlgorithmError):
    """Raised when an algorithm is unknown or not allowed."""
    pass


class AlgorithmNotImplementedError(AlgorithmError):
    """Raised for recognized algorithms without an implementation (JWE, ES256)."""

    def __init__(self, message: str, token_type: Optional[TokenType] = None) -> None:
        self.token_type = token_type
        super().__init__(message)


# --- Token structure -------------------------------------------------------


class TokenError(JWTError):
    """Raised when a token is structurally unusable."""
    pass


class MalformedTokenError(TokenError):
    """Raised when a compact token does not have the expected shape."""
    pass


class MissingRawError(TokenError):
    """Raised when decoding a token that has no compact string."""
    pass


class MissingAlgorithmError(TokenError):
    """Raised when a header carries no usable ``alg`` property."""
    pass


# --- Signing ---------------------------------------------------------------


class SignError(JWTError):
    """Raised when a signature cannot be produced."""
    pass


class NoSignFuncError(SignError):
    """Raised when no signing strategy is available for the algorithm."""
    pass


class KeyParseFailureError(SignError):
    """Raised when key material is missing or cannot be loaded."""
    pass


# --- Validation ------------------------------------------------------------


class ValidateError(JWTError):
    """Raised when a token fails validation."""
    pass


class NoValidateFuncError(ValidateError):
    """Raised when no validation strategy is available for the algorithm."""
    pass


class SignatureMismatchError(ValidateError):
    """Raised when the signature does not match the token contents."""
    pass


class ExpiredTokenError(ValidateError):
    """Raised when the ``exp`` claim lies in the past."""
    pass


class InvalidExpirationError(ValidateError):
    """Raised when the ``exp`` claim cannot be interpreted as a timestamp."""
    pass


# --- Key sources -----------------------------------------------------------


class KeyFetchError(JWTError):
    """Raised when verification keys cannot be retrieved."""
    pass
