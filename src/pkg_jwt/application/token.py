from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from ..config.logging import get_logger
from ..config.settings import JWTSettings
from ..domain.claims import ClaimSet
from ..domain.constants import TOKEN_TYPE_HEADER, AlgorithmType, TokenState
from ..domain.entities import Header, Payload, Signature
from ..domain.exceptions import (
    JWTError,
    KeyParseFailureError,
    MalformedTokenError,
    MissingAlgorithmError,
    MissingRawError,
)
from ..domain.ports import AlgorithmStrategy, SignFunc, ValidateFunc
from .registry import AlgorithmRegistry, default_registry, determine_token_type, to_algorithm_type
from .signer import Signer
from .validator import Validator

logger = get_logger("pkg_jwt.token")

KeyMaterial = Union[bytes, bytearray, str]


def _key_bytes(key: Optional[KeyMaterial]) -> Optional[bytes]:
    if key is None:
        return None
    if isinstance(key, str):
        try:
            return key.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise KeyParseFailureError("Key string is not valid UTF-8 text") from exc
    if isinstance(key, (bytes, bytearray)):
        return bytes(key)
    raise KeyParseFailureError(f"Key material must be bytes or str, got {type(key).__name__}")


@dataclass(slots=True, eq=False)
class Token:
    """
    Aggregate of header, payload, signature and key material.

    A token is either built for encoding (``raw is None``) or parsed from a
    compact string (``raw`` set, header and payload decoded from it).

    Encoding updates the header/payload caches and the signature in place,
    so one instance must not be encoded from several threads at once.
    """

    header: Header
    payload: Payload
    signature: Signature = field(default_factory=Signature)
    key: Optional[bytes] = field(default=None, repr=False)
    raw: Optional[bytes] = field(default=None, repr=False)
    settings: JWTSettings = field(default_factory=JWTSettings)
    registry: AlgorithmRegistry = field(default_factory=default_registry, repr=False)
    state: TokenState = TokenState.CONSTRUCTED

    _algorithm: Optional[AlgorithmType] = field(default=None, init=False)
    _sign_func: Optional[SignFunc] = field(default=None, init=False, repr=False)
    _validate_func: Optional[ValidateFunc] = field(default=None, init=False, repr=False)

    # ---- accessors --------------------------------------------------------

    @property
    def algorithm(self) -> AlgorithmType:
        if self._algorithm is None:
            raise MissingAlgorithmError("Token has no algorithm; decode it first")
        return self._algorithm

    @property
    def claims(self) -> ClaimSet:
        return self.payload.claims

    def signing_input(self) -> bytes:
        """``headerB64 + b"." + payloadB64``, computing the caches if needed."""
        return self.header.to_base64() + b"." + self.payload.to_base64()

    # ---- strategy injection ----------------------------------------------

    def use_sign_func(self, sign_func: SignFunc) -> None:
        self._sign_func = sign_func

    def use_validate_func(self, validate_func: ValidateFunc) -> None:
        self._validate_func = validate_func

    def _registered_strategy(self) -> AlgorithmStrategy:
        return self.registry.strategy_for(self.algorithm) or AlgorithmStrategy()

    # ---- lifecycle --------------------------------------------------------

    def encode(self) -> bytes:
        """
        Serialize, sign and return ``header.payload.signature``.

        Raises:
            NoSignFuncError
            KeyParseFailureError
            AlgorithmNotImplementedError
        """
        sign_func = self._sign_func or self._registered_strategy().sign
        return Signer(token=self, sign_func=sign_func).sign()

    def decode(self) -> None:
        """
        Populate header, payload and signature from ``raw``.

        Raises:
            MissingRawError
            MalformedTokenError
            MissingAlgorithmError
            Base64InvalidError
            JsonInvalidError
            UnsupportedAlgorithmError
            AlgorithmNotImplementedError
        """
        if self.raw is None:
            raise MissingRawError("A compact token string must be supplied to be decoded")

        try:
            segments = self.raw.split(b".")
            if len(segments) != 3:
                raise MalformedTokenError(
                    f"Compact JWS needs 3 period-separated segments, got {len(segments)}"
                )

            header = Header.from_base64(segments[0])
            payload = Payload.from_base64(segments[1])

            alg = header.algorithm
            if not isinstance(alg, str) or not alg:
                raise MissingAlgorithmError('Header has no usable "alg" property')
            if header.type != TOKEN_TYPE_HEADER:
                raise MalformedTokenError(f'Header "typ" must be {TOKEN_TYPE_HEADER!r}')

            determine_token_type(alg)
            algorithm = to_algorithm_type(alg)
        except JWTError as exc:
            self.state = TokenState.DECODE_ERROR
            logger.debug("token_decode_failed", reason=type(exc).__name__)
            raise

        self.header = header
        self.payload = payload
        self.signature = Signature(segments[2])
        self._algorithm = algorithm
        self.state = TokenState.DECODED
        logger.debug("token_decoded", alg=algorithm.value, claims=len(payload.claims))

    def validate(self) -> bool:
        """
        Verify the signature, then ``exp``.

        Raises:
            MissingRawError for tokens that were never parsed.
            NoValidateFuncError
            SignatureMismatchError
            ExpiredTokenError
            or any decode error if the token was not decoded yet.
        """
        if self.raw is None:
            raise MissingRawError("Only parsed tokens can be validated")
        if self.state in (TokenState.PARSED, TokenState.DECODE_ERROR):
            self.decode()

        validate_func = self._validate_func or self._registered_strategy().validate
        return Validator(token=self, validate_func=validate_func).validate()


def new(
    algorithm: Union[AlgorithmType, str],
    claims: Union[ClaimSet, Mapping[str, Any], None] = None,
    key: Optional[KeyMaterial] = None,
    *,
    settings: Optional[JWTSettings] = None,
    registry: Optional[AlgorithmRegistry] = None,
) -> Token:
    """
    Build a token ready for ``encode()``.

    The algorithm is checked here rather than at encode time.

    Raises:
        UnsupportedAlgorithmError
        AlgorithmNotImplementedError for ES256 and JWE algorithms.
        InvalidClaimValueError / DuplicateClaimError for mapping claims.
    """
    alg = to_algorithm_type(algorithm)
    determine_token_type(alg)

    registry = registry or default_registry()
    registry.strategy_for(alg)

    if claims is None:
        claims = ClaimSet()
    elif not isinstance(claims, ClaimSet):
        claims = ClaimSet.from_mapping(claims)

    token = Token(
        header=Header.for_algorithm(alg),
        payload=Payload(claims),
        key=_key_bytes(key),
        settings=settings or JWTSettings(),
        registry=registry,
    )
    token._algorithm = alg
    return token


def parse(
    token_string: Union[str, bytes],
    key: Optional[KeyMaterial] = None,
    *,
    settings: Optional[JWTSettings] = None,
    registry: Optional[AlgorithmRegistry] = None,
    validate: bool = False,
) -> Token:
    """
    Decode a compact token and optionally validate it.

    Raises:
        any ``Token.decode`` error, and ``Token.validate`` errors when
        ``validate`` is true.
    """
    if isinstance(token_string, str):
        try:
            raw = token_string.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise MalformedTokenError("Token string is not valid UTF-8 text") from exc
    else:
        raw = bytes(token_string)

    token = Token(
        header=Header(),
        payload=Payload(),
        key=_key_bytes(key),
        raw=raw,
        settings=settings or JWTSettings(),
        registry=registry or default_registry(),
        state=TokenState.PARSED,
    )
    token.decode()
    if validate:
        token.validate()
    return token
