from __future__ import annotations

import copy
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

from . import codec
from .claims import ClaimSet
from .constants import TOKEN_TYPE_HEADER, AlgorithmType
from .exceptions import Base64InvalidError, InvalidClaimValueError, JsonInvalidError
from .json_value import JsonValue, ensure_json_value


class _CachedSegment:
    """
    Shared serialization for the two JSON segments of a compact token.

    Subclasses expose their JSON object and a revision number that changes
    whenever that object changes. The base64url form is cached together with
    the revision it was computed for; a stale cache is never returned.
    """

    __slots__ = ()

    def _json_object(self) -> Mapping[str, JsonValue]:
        raise NotImplementedError

    def _current_revision(self) -> int:
        raise NotImplementedError

    @property
    def raw(self) -> Optional[bytes]:
        """Cached base64url serialization, or ``None`` if absent or stale."""
        if self._raw is not None and self._cached_revision == self._current_revision():
            return self._raw
        return None

    def to_json(self) -> bytes:
        return codec.to_json(self._json_object())

    def to_base64(self) -> bytes:
        cached = self.raw
        if cached is not None:
            return cached

        self._raw = codec.b64_encode(self.to_json())
        self._cached_revision = self._current_revision()
        return self._raw

    def _adopt_raw(self, segment: bytes) -> None:
        # The object was just decoded from ``segment``, so it is the exact
        # serialization of the current state.
        self._raw = segment
        self._cached_revision = self._current_revision()


def _as_segment_bytes(segment: Union[bytes, str]) -> bytes:
    if isinstance(segment, str):
        try:
            return segment.encode("ascii")
        except UnicodeEncodeError as exc:
            raise Base64InvalidError("Segment contains non-ASCII characters") from exc
    return bytes(segment)


# ---- Header -----------------------------------------------------------------


@dataclass(slots=True)
class Header(_CachedSegment):
    """
    JOSE header: property name -> JSON value.

    Properties are changed through ``set`` and ``remove`` only, so the
    cached serialization can be invalidated. Values are copied on the way
    in and out.
    """

    _properties: Dict[str, JsonValue] = field(default_factory=dict)
    _revision: int = 0
    _raw: Optional[bytes] = field(default=None, repr=False)
    _cached_revision: int = field(default=-1, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self._properties, dict):
            raise InvalidClaimValueError(
                f"Header properties must be a dict, got {type(self._properties).__name__}"
            )
        ensure_json_value(self._properties)
        self._properties = copy.deepcopy(self._properties)

    @classmethod
    def for_algorithm(cls, algorithm: AlgorithmType) -> "Header":
        return cls({"alg": algorithm.value, "typ": TOKEN_TYPE_HEADER})

    @classmethod
    def from_json(cls, data: bytes) -> "Header":
        properties = codec.from_json(data)
        try:
            return cls(properties)
        except InvalidClaimValueError as exc:
            raise JsonInvalidError(str(exc)) from exc

    @classmethod
    def from_base64(cls, segment: Union[bytes, str]) -> "Header":
        """
        Raises:
            Base64InvalidError
            JsonInvalidError
        """
        segment = _as_segment_bytes(segment)
        header = cls.from_json(codec.b64_decode(segment))
        header._adopt_raw(segment)
        return header

    # ---- properties -------------------------------------------------------

    @property
    def properties(self) -> Mapping[str, JsonValue]:
        return MappingProxyType(copy.deepcopy(self._properties))

    @property
    def algorithm(self) -> Optional[JsonValue]:
        return self.get("alg")

    @property
    def type(self) -> Optional[JsonValue]:
        return self.get("typ")

    def get(self, name: str, default: Optional[JsonValue] = None) -> Optional[JsonValue]:
        return copy.deepcopy(self._properties.get(name, default))

    def set(self, name: str, value: Any) -> None:
        if not isinstance(name, str):
            raise InvalidClaimValueError(
                f"Header property names must be strings, got {type(name).__name__}"
            )
        self._properties[name] = copy.deepcopy(ensure_json_value(value, f"$.{name}"))
        self._revision += 1

    def remove(self, name: str) -> None:
        del self._properties[name]
        self._revision += 1

    def _json_object(self) -> Mapping[str, JsonValue]:
        return self._properties

    def _current_revision(self) -> int:
        return self._revision


# ---- Payload ----------------------------------------------------------------


@dataclass(slots=True)
class Payload(_CachedSegment):
    """Wraps the claim set; its cache follows the claim set revision."""

    _claims: ClaimSet = field(default_factory=ClaimSet)
    _raw: Optional[bytes] = field(default=None, repr=False)
    _cached_revision: int = field(default=-1, repr=False)

    @classmethod
    def from_json(cls, data: bytes) -> "Payload":
        try:
            return cls(ClaimSet.from_mapping(codec.from_json(data)))
        except InvalidClaimValueError as exc:
            raise JsonInvalidError(str(exc)) from exc

    @classmethod
    def from_base64(cls, segment: Union[bytes, str]) -> "Payload":
        """
        Raises:
            Base64InvalidError
            JsonInvalidError
        """
        segment = _as_segment_bytes(segment)
        payload = cls.from_json(codec.b64_decode(segment))
        payload._adopt_raw(segment)
        return payload

    @property
    def claims(self) -> ClaimSet:
        return self._claims

    def _json_object(self) -> Mapping[str, JsonValue]:
        return self._claims.to_dict()

    def _current_revision(self) -> int:
        return self._claims.revision


# ---- Signature --------------------------------------------------------------


@dataclass(slots=True)
class Signature:
    """Base64url-encoded signature; empty before signing and for ``none``."""

    raw: bytes = b""

    @classmethod
    def from_bytes(cls, signature: bytes) -> "Signature":
        return cls(codec.b64_encode(signature) if signature else b"")

    def is_empty(self) -> bool:
        return not self.raw

    def decode(self) -> bytes:
        """
        Return the signature bytes.

        Raises:
            Base64InvalidError if the segment is not the canonical encoding
            of its bytes.
        """
        decoded = codec.b64_decode(self.raw)
        if codec.b64_encode(decoded) != self.raw:
            raise Base64InvalidError("Signature segment is not canonical base64url")
        return decoded
