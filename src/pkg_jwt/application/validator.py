from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Callable, Optional

from ..config.logging import get_logger
from ..domain.constants import RegisteredClaim, TokenState
from ..domain.exceptions import (
    ExpiredTokenError,
    InvalidExpirationError,
    JWTError,
    NoValidateFuncError,
    SignatureMismatchError,
)
from ..domain.json_value import JsonValue
from ..domain.ports import ValidateFunc

if TYPE_CHECKING:
    from .token import Token

logger = get_logger("pkg_jwt.validator")

# datetime.fromisoformat before 3.11 only takes 3 or 6 fraction digits.
_FRACTION = re.compile(r"\.([0-9]+)")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_expiration(value: JsonValue) -> datetime:
    """
    Interpret an ``exp`` claim.

    RFC 3339 strings are the primary form (``Z`` or an explicit offset is
    required); RFC 7519 NumericDate numbers are accepted as well.

    Raises:
        InvalidExpirationError
    """
    if isinstance(value, bool):
        raise InvalidExpirationError(f"exp must be a timestamp, got {value!r}")

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise InvalidExpirationError(f"exp is out of range: {value!r}") from exc

    if isinstance(value, str):
        text = value.strip()
        if text[-1:] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        text = _FRACTION.sub(lambda m: "." + m.group(1).ljust(6, "0")[:6], text, count=1)
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise InvalidExpirationError(f"exp is not an RFC 3339 timestamp: {value!r}") from exc
        if parsed.tzinfo is None:
            raise InvalidExpirationError(f"exp has no UTC offset: {value!r}")
        return parsed

    raise InvalidExpirationError(f"exp must be a timestamp, got {type(value).__name__}")


@dataclass(slots=True)
class Validator:
    """
    Drives signature and claim verification for one decoded token.

    The strategy checks the signature; afterwards ``exp`` is enforced when
    present. The token ends up VERIFIED or REJECTED.
    """

    token: Token
    validate_func: Optional[ValidateFunc]
    clock: Callable[[], datetime] = field(default=_utcnow)

    def validate(self) -> bool:
        """
        Raises:
            NoValidateFuncError
            SignatureMismatchError
            ExpiredTokenError
            InvalidExpirationError
            or the error raised by the strategy
        """
        token = self.token
        try:
            if self.validate_func is None:
                raise NoValidateFuncError(
                    f"Unable to verify data without a validating function for {token.algorithm.value!r}"
                )
            if not self.validate_func(token):
                raise SignatureMismatchError("Failed to validate token signature")

            self._check_expiration()
        except JWTError as exc:
            token.state = TokenState.REJECTED
            logger.info("token_rejected", alg=token.algorithm.value, reason=type(exc).__name__)
            raise

        token.state = TokenState.VERIFIED
        return True

    def _check_expiration(self) -> None:
        claims = self.token.claims
        exp_key = RegisteredClaim.EXPIRATION_TIME.value
        if exp_key not in claims:
            return

        expiration = parse_expiration(claims[exp_key])
        leeway = timedelta(seconds=self.token.settings.leeway_seconds)
        if expiration + leeway < self.clock():
            raise ExpiredTokenError(f"Token has expired at {expiration.isoformat()}")


def new_validator(token: Token, validate_func: ValidateFunc) -> Validator:
    """
    Attach a caller-supplied validation strategy to ``token``.

    Later ``token.validate()`` calls use it in place of the registry entry.
    """
    if token is None:
        raise ValueError("Token structure must be supplied")

    token.use_validate_func(validate_func)
    return Validator(token=token, validate_func=validate_func)
