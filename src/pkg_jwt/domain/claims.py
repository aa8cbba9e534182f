from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Mapping, Optional

from .exceptions import ClaimNotFoundError, DuplicateClaimError, InvalidClaimValueError
from .json_value import JsonObject, JsonValue, ensure_json_value


@dataclass(slots=True)
class ClaimSet:
    """
    Claim name -> JSON value mapping carried in a token payload.

    Keys are unique. The set only changes through ``add`` and ``remove``;
    every change bumps ``revision`` so serialization caches can tell when
    they are stale. Values are copied on the way in and out.
    """

    _claims: Dict[str, JsonValue] = field(default_factory=dict)
    revision: int = field(default=0, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self._claims, dict):
            raise InvalidClaimValueError(
                f"Claims must be a dict, got {type(self._claims).__name__}"
            )
        ensure_json_value(self._claims)
        self._claims = copy.deepcopy(self._claims)

    @classmethod
    def from_mapping(cls, claims: Mapping[str, Any]) -> "ClaimSet":
        claim_set = cls()
        for key, value in claims.items():
            claim_set.add(key, value)
        return claim_set

    # ---- mutation ---------------------------------------------------------

    def add(self, key: str, value: Any) -> None:
        """
        Raises:
            DuplicateClaimError if ``key`` is already present.
            InvalidClaimValueError if ``value`` is not a JSON value.
        """
        if not isinstance(key, str):
            raise InvalidClaimValueError(
                f"Claim names must be strings, got {type(key).__name__}"
            )
        if key in self._claims:
            raise DuplicateClaimError(key)

        self._claims[key] = copy.deepcopy(ensure_json_value(value, f"$.{key}"))
        self.revision += 1

    def remove(self, key: str) -> None:
        """
        Raises:
            ClaimNotFoundError if ``key`` is absent.
        """
        if key not in self._claims:
            raise ClaimNotFoundError(key)

        del self._claims[key]
        self.revision += 1

    # ---- read access ------------------------------------------------------

    def get(self, key: str, default: Optional[JsonValue] = None) -> Optional[JsonValue]:
        return copy.deepcopy(self._claims.get(key, default))

    def to_dict(self) -> JsonObject:
        return copy.deepcopy(self._claims)

    def __getitem__(self, key: str) -> JsonValue:
        return copy.deepcopy(self._claims[key])

    def __contains__(self, key: object) -> bool:
        return key in self._claims

    def __iter__(self) -> Iterator[str]:
        return iter(self._claims)

    def __len__(self) -> int:
        return len(self._claims)


def new_claim_set() -> ClaimSet:
    return ClaimSet()
