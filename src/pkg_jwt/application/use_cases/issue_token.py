from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Mapping, Optional, Union

from ...config.settings import JWTSettings
from ...domain.claims import ClaimSet
from ...domain.constants import AlgorithmType, RegisteredClaim
from ..token import KeyMaterial, new


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_rfc3339(moment: datetime) -> str:
    """UTC RFC 3339 timestamp with second precision and a ``Z`` suffix."""
    return moment.astimezone(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


@dataclass(slots=True)
class IssueTokenUseCase:
    """
    Application use case:
    - Build a claim set with ``iat``/``exp`` (RFC 3339) and optional
      ``iss``/``sub``/``aud``
    - Sign it with the configured algorithm and key

    Caller claims may not override the registered ones set here; a clash
    raises DuplicateClaimError.
    """

    algorithm: Union[AlgorithmType, str]
    key: Optional[KeyMaterial]
    settings: JWTSettings = field(default_factory=JWTSettings)
    clock: Callable[[], datetime] = field(default=_utcnow)

    def execute(
            self,
            claims: Optional[Mapping[str, Any]] = None,
            *,
            subject: Optional[str] = None,
            audience: Optional[Union[str, list[str]]] = None,
            lifetime: Optional[timedelta] = None,
    ) -> bytes:
        """
        Returns:
            The compact token.

        Raises:
            DuplicateClaimError
            InvalidClaimValueError
            UnsupportedAlgorithmError
            SignError subclasses
        """
        now = self.clock()
        if lifetime is None:
            lifetime = timedelta(seconds=self.settings.default_lifetime_seconds)

        claim_set = ClaimSet()
        if self.settings.issuer:
            claim_set.add(RegisteredClaim.ISSUER.value, self.settings.issuer)
        if subject is not None:
            claim_set.add(RegisteredClaim.SUBJECT.value, subject)
        if audience is not None:
            claim_set.add(RegisteredClaim.AUDIENCE.value, audience)
        claim_set.add(RegisteredClaim.ISSUED_AT.value, format_rfc3339(now))
        claim_set.add(RegisteredClaim.EXPIRATION_TIME.value, format_rfc3339(now + lifetime))

        for key, value in (claims or {}).items():
            claim_set.add(key, value)

        token = new(self.algorithm, claim_set, self.key, settings=self.settings)
        return token.encode()
