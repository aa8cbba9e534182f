"""
JSON <-> base64url (no padding) serialization shared by headers and payloads.

Base64url handling goes through PyJWT's helpers; this module adds the strict
alphabet check PyJWT leaves out and maps failures to codec errors.
"""

from __future__ import annotations

import binascii
import json
import re
from typing import Any, List, Mapping, Tuple, Union

from jwt.utils import base64url_decode, base64url_encode

from .exceptions import Base64InvalidError, JsonInvalidError
from .json_value import JsonObject

_B64URL_SEGMENT = re.compile(rb"[A-Za-z0-9_-]*")


def to_json(properties: Mapping[str, Any]) -> bytes:
    try:
        text = json.dumps(
            properties,
            separators=(",", ":"),
            sort_keys=True,
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as exc:
        raise JsonInvalidError(f"Cannot serialize to JSON: {exc}") from exc
    return text.encode("utf-8")


def b64_encode(data: bytes) -> bytes:
    return base64url_encode(data)


def b64_decode(segment: Union[bytes, str]) -> bytes:
    """
    Decode one unpadded base64url segment.

    Raises:
        Base64InvalidError
    """
    if isinstance(segment, str):
        try:
            segment = segment.encode("ascii")
        except UnicodeEncodeError as exc:
            raise Base64InvalidError("Segment contains non-ASCII characters") from exc

    if not _B64URL_SEGMENT.fullmatch(segment):
        raise Base64InvalidError("Segment contains characters outside base64url")
    if len(segment) % 4 == 1:
        raise Base64InvalidError("Segment length is not valid base64url")

    try:
        return base64url_decode(segment)
    except (binascii.Error, ValueError) as exc:
        raise Base64InvalidError(f"Invalid base64url segment: {exc}") from exc


def _reject_constant(name: str) -> Any:
    raise JsonInvalidError(f"{name} is not valid JSON")


def _unique_object(pairs: List[Tuple[str, Any]]) -> dict:
    obj: dict = {}
    for key, value in pairs:
        if key in obj:
            raise JsonInvalidError(f"Duplicate member {key!r} in JSON object")
        obj[key] = value
    return obj


def from_json(data: bytes) -> JsonObject:
    """
    Raises:
        JsonInvalidError if ``data`` is not UTF-8 JSON holding an object.
    """
    try:
        obj = json.loads(
            data.decode("utf-8"),
            parse_constant=_reject_constant,
            object_pairs_hook=_unique_object,
        )
    except UnicodeDecodeError as exc:
        raise JsonInvalidError("Segment is not UTF-8") from exc
    except json.JSONDecodeError as exc:
        raise JsonInvalidError(f"Malformed JSON: {exc}") from exc

    if not isinstance(obj, dict):
        raise JsonInvalidError(
            f"Expected a JSON object, got {type(obj).__name__}"
        )
    return obj
