from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional

from ...config.settings import JWTSettings
from ...domain.constants import AlgorithmType
from ...domain.exceptions import JWTError, UnsupportedAlgorithmError, ValidateError
from ..token import KeyMaterial, parse


@dataclass(slots=True)
class VerifyTokenUseCase:
    """
    Application use case:
    - Parse a compact token
    - Reject algorithms outside ``allowed_algorithms`` (when given)
    - Validate signature and ``exp`` with a fixed key

    Satisfies the TokenDecoder port.
    """

    key: Optional[KeyMaterial]
    settings: JWTSettings = field(default_factory=JWTSettings)
    allowed_algorithms: Optional[FrozenSet[AlgorithmType]] = None

    def execute(self, token: str) -> Dict[str, Any]:
        """
        Returns:
            The verified claims.

        Raises:
            ExpiredTokenError
            SignatureMismatchError
            any other JWTError from parsing or validation
            ValidateError wrapping unexpected strategy failures
        """
        try:
            parsed = parse(token, self.key, settings=self.settings)

            if self.allowed_algorithms is not None and parsed.algorithm not in self.allowed_algorithms:
                raise UnsupportedAlgorithmError(
                    f"Algorithm {parsed.algorithm.value!r} is not allowed here"
                )

            parsed.validate()
        except JWTError:
            # let callers distinguish these explicitly
            raise
        except Exception as exc:
            raise ValidateError(f"Token validation failed: {exc}") from exc

        return parsed.claims.to_dict()

    def decode(self, token: str) -> Dict[str, Any]:
        return self.execute(token)
