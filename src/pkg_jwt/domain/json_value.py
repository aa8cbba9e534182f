from __future__ import annotations

import math
from typing import Any, Dict, List, Union

from .exceptions import InvalidClaimValueError

JsonScalar = Union[None, bool, int, float, str]
JsonValue = Union[JsonScalar, List["JsonValue"], Dict[str, "JsonValue"]]
JsonObject = Dict[str, JsonValue]


def ensure_json_value(value: Any, path: str = "$") -> JsonValue:
    """
    Check that ``value`` is one of the JSON value shapes and return it.

    Only ``None``, ``bool``, ``int``, finite ``float``, ``str``, ``list`` and
    ``dict`` with ``str`` keys are accepted, recursively. Nothing is coerced:
    a tuple is not an array and a datetime is not a string.

    Raises:
        InvalidClaimValueError
    """
    if value is None or isinstance(value, (bool, int, str)):
        return value

    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidClaimValueError(f"{path}: {value!r} is not a JSON number")
        return value

    if isinstance(value, list):
        for index, item in enumerate(value):
            ensure_json_value(item, f"{path}[{index}]")
        return value

    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise InvalidClaimValueError(
                    f"{path}: object keys must be strings, got {type(key).__name__}"
                )
            ensure_json_value(item, f"{path}.{key}")
        return value

    raise InvalidClaimValueError(
        f"{path}: {type(value).__name__} is not a JSON value"
    )
