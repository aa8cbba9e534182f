"""
pkg_jwt

Compact JSON Web Tokens (RFC 7519 / RFC 7515): build, encode, parse and
verify signed tokens with pluggable signing algorithms.
"""

__version__ = "0.1.0"

from .domain.constants import AlgorithmType, RegisteredClaim, TokenState, TokenType
from .domain.claims import ClaimSet, new_claim_set
from .domain.entities import Header, Payload, Signature
from .domain.json_value import JsonValue, ensure_json_value
from .domain.exceptions import (
    JWTError,
    ClaimError,
    DuplicateClaimError,
    ClaimNotFoundError,
    InvalidClaimValueError,
    CodecError,
    Base64InvalidError,
    JsonInvalidError,
    AlgorithmError,
    UnsupportedAlgorithmError,
    AlgorithmNotImplementedError,
    TokenError,
    MalformedTokenError,
    MissingRawError,
    MissingAlgorithmError,
    SignError,
    NoSignFuncError,
    KeyParseFailureError,
    ValidateError,
    NoValidateFuncError,
    SignatureMismatchError,
    ExpiredTokenError,
    InvalidExpirationError,
    KeyFetchError,
)
from .domain.ports import AlgorithmStrategy, SignFunc, ValidateFunc, TokenDecoder

from .config.settings import JWTSettings

from .application.registry import AlgorithmRegistry, default_registry, determine_token_type
from .application.signer import Signer, new_signer
from .application.validator import Validator, new_validator
from .application.token import Token, new, parse
from .application.use_cases.issue_token import IssueTokenUseCase
from .application.use_cases.verify_token import VerifyTokenUseCase

# JWKS-backed adapter (optional to re-export)
from .adapters.jwks.key_source import JWKSKeySource
from .adapters.jwks.jwt_decoder import JWKSTokenDecoder

__all__ = [
    "__version__",
    # domain core
    "AlgorithmType",
    "RegisteredClaim",
    "TokenState",
    "TokenType",
    "ClaimSet",
    "new_claim_set",
    "Header",
    "Payload",
    "Signature",
    "JsonValue",
    "ensure_json_value",
    "AlgorithmStrategy",
    "SignFunc",
    "ValidateFunc",
    "TokenDecoder",
    # exceptions
    "JWTError",
    "ClaimError",
    "DuplicateClaimError",
    "ClaimNotFoundError",
    "InvalidClaimValueError",
    "CodecError",
    "Base64InvalidError",
    "JsonInvalidError",
    "AlgorithmError",
    "UnsupportedAlgorithmError",
    "AlgorithmNotImplementedError",
    "TokenError",
    "MalformedTokenError",
    "MissingRawError",
    "MissingAlgorithmError",
    "SignError",
    "NoSignFuncError",
    "KeyParseFailureError",
    "ValidateError",
    "NoValidateFuncError",
    "SignatureMismatchError",
    "ExpiredTokenError",
    "InvalidExpirationError",
    "KeyFetchError",
    # config
    "JWTSettings",
    # pipeline
    "AlgorithmRegistry",
    "default_registry",
    "determine_token_type",
    "Signer",
    "new_signer",
    "Validator",
    "new_validator",
    "Token",
    "new",
    "parse",
    # use cases
    "IssueTokenUseCase",
    "VerifyTokenUseCase",
    # adapters
    "JWKSKeySource",
    "JWKSTokenDecoder",
]
