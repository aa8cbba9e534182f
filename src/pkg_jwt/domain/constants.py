from enum import Enum


class AlgorithmType(str, Enum):
    HS256 = "HS256"
    HS384 = "HS384"
    HS512 = "HS512"
    RS256 = "RS256"
    ES256 = "ES256"
    NONE = "none"
    CUSTOM = "custom"


class TokenType(Enum):
    JWS = "JWS"
    JWE = "JWE"


class RegisteredClaim(str, Enum):
    """Claim names registered by RFC 7519, section 4.1."""

    ISSUER = "iss"
    SUBJECT = "sub"
    AUDIENCE = "aud"
    EXPIRATION_TIME = "exp"
    NOT_BEFORE = "nbf"
    ISSUED_AT = "iat"
    JWT_ID = "jti"


class TokenState(Enum):
    CONSTRUCTED = "constructed"
    ENCODED = "encoded"
    PARSED = "parsed"
    DECODED = "decoded"
    VERIFIED = "verified"
    REJECTED = "rejected"
    ENCODE_ERROR = "encode_error"
    DECODE_ERROR = "decode_error"


# Order matters: dispatch walks this tuple front to back.
JWS_ALGORITHMS = (
    AlgorithmType.HS256,
    AlgorithmType.HS384,
    AlgorithmType.HS512,
    AlgorithmType.RS256,
    AlgorithmType.ES256,
    AlgorithmType.NONE,
)

# Recognized but not implemented.
RESERVED_ALGORITHMS = frozenset({AlgorithmType.ES256})

# RFC 7518 key management identifiers (section 4.1).
JWE_ALGORITHMS = frozenset({
    "RSA1_5",
    "RSA-OAEP",
    "RSA-OAEP-256",
    "A128KW",
    "A192KW",
    "A256KW",
    "dir",
    "ECDH-ES",
    "ECDH-ES+A128KW",
    "ECDH-ES+A192KW",
    "ECDH-ES+A256KW",
    "A128GCMKW",
    "A192GCMKW",
    "A256GCMKW",
    "PBES2-HS256+A128KW",
    "PBES2-HS384+A192KW",
    "PBES2-HS512+A256KW",
})

TOKEN_TYPE_HEADER = "JWT"
