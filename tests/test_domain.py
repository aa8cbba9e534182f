# tests/test_domain.py
import math
from datetime import datetime

import pytest

from pkg_jwt.domain import codec
from pkg_jwt.domain.claims import ClaimSet, new_claim_set
from pkg_jwt.domain.constants import AlgorithmType, RegisteredClaim
from pkg_jwt.domain.entities import Header, Payload, Signature
from pkg_jwt.domain.exceptions import (
    Base64InvalidError,
    ClaimNotFoundError,
    DuplicateClaimError,
    InvalidClaimValueError,
    JsonInvalidError,
)
from pkg_jwt.domain.json_value import ensure_json_value


def test_json_value_accepts_json_shapes():
    value = {"a": [1, 2.5, "x", None, True, {"b": []}], "c": {}}
    assert ensure_json_value(value) is value


@pytest.mark.parametrize(
    "value",
    [
        (1, 2),
        {"a"},
        b"bytes",
        datetime(2020, 1, 1),
        math.nan,
        math.inf,
        {1: "non-string key"},
        {"nested": [object()]},
    ],
)
def test_json_value_rejects_other_shapes(value):
    with pytest.raises(InvalidClaimValueError):
        ensure_json_value(value)


def test_claim_set_add_and_remove():
    claims = new_claim_set()
    assert len(claims) == 0

    claims.add(RegisteredClaim.AUDIENCE.value, "developers")
    claims.add("roles", ["admin", "dev"])
    assert claims["aud"] == "developers"
    assert "roles" in claims
    assert set(claims) == {"aud", "roles"}

    claims.remove("roles")
    assert "roles" not in claims
    assert claims.to_dict() == {"aud": "developers"}


def test_claim_set_rejects_duplicates():
    claims = new_claim_set()
    claims.add("aud", "x")

    with pytest.raises(DuplicateClaimError):
        claims.add("aud", "y")
    assert claims["aud"] == "x"


def test_claim_set_remove_missing():
    with pytest.raises(ClaimNotFoundError):
        new_claim_set().remove("aud")


def test_claim_set_rejects_non_json_values():
    claims = new_claim_set()
    with pytest.raises(InvalidClaimValueError):
        claims.add("when", datetime(2020, 1, 1))
    with pytest.raises(InvalidClaimValueError):
        claims.add(42, "value")
    assert len(claims) == 0


def test_claim_set_revision_and_copy():
    claims = ClaimSet.from_mapping({"nested": {"k": ["v"]}})
    start = claims.revision

    snapshot = claims.to_dict()
    snapshot["nested"]["k"].append("changed")
    assert claims["nested"] == {"k": ["v"]}

    claims.add("x", 1)
    claims.remove("x")
    assert claims.revision == start + 2


def test_claim_set_keeps_its_own_copy_of_values():
    roles = ["a"]
    claims = new_claim_set()
    claims.add("roles", roles)

    roles.append("b")
    roles.append(object())
    assert claims["roles"] == ["a"]

    claims["roles"].append("c")
    claims.get("roles").append("d")
    assert claims.to_dict() == {"roles": ["a"]}


def test_payload_is_not_changed_through_caller_values():
    roles = ["a"]
    claims = new_claim_set()
    claims.add("roles", roles)
    payload = Payload(claims)
    first = payload.to_base64()

    roles.append("b")
    assert payload.to_base64() == first
    assert Payload.from_base64(first).claims.to_dict() == {"roles": ["a"]}


def test_claim_set_constructor_checks_values():
    with pytest.raises(InvalidClaimValueError):
        ClaimSet({"x": object()})
    with pytest.raises(InvalidClaimValueError):
        ClaimSet({1: "x"})
    with pytest.raises(InvalidClaimValueError):
        ClaimSet(["x"])

    source = {"roles": ["a"]}
    claims = ClaimSet(source)
    source["roles"].append("b")
    assert claims.to_dict() == {"roles": ["a"]}


# --- codec ---


def test_codec_json_is_compact_and_sorted():
    assert codec.to_json({"typ": "JWT", "alg": "HS256"}) == b'{"alg":"HS256","typ":"JWT"}'


def test_codec_base64_has_no_padding():
    assert codec.b64_encode(b"a") == b"YQ"
    assert codec.b64_decode("YQ") == b"a"
    assert codec.b64_decode(b"") == b""


@pytest.mark.parametrize("segment", ["YQ==", "a+b/", "Y", "ab!c", "é"])
def test_codec_rejects_bad_base64(segment):
    with pytest.raises(Base64InvalidError):
        codec.b64_decode(segment)


@pytest.mark.parametrize(
    "data",
    [b"not json", b"[1, 2]", b'"text"', b'{"a": NaN}', b'{"a": 1, "a": 2}', b"\xff\xfe"],
)
def test_codec_rejects_bad_json(data):
    with pytest.raises(JsonInvalidError):
        codec.from_json(data)


# --- header / payload / signature ---


def test_header_for_algorithm():
    header = Header.for_algorithm(AlgorithmType.HS256)
    assert header.properties == {"alg": "HS256", "typ": "JWT"}
    assert header.to_base64() == b"eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9"


def test_header_cache_is_invalidated_on_change():
    header = Header.for_algorithm(AlgorithmType.RS256)
    assert header.raw is None

    first = header.to_base64()
    assert header.raw == first
    assert header.to_base64() is first

    header.set("kid", "key-1")
    assert header.raw is None
    second = header.to_base64()
    assert second != first
    assert Header.from_base64(second).get("kid") == "key-1"

    header.remove("kid")
    assert header.to_base64() == first


def test_header_keeps_its_own_copy_of_values():
    crit = ["exp"]
    header = Header.for_algorithm(AlgorithmType.HS256)
    header.set("crit", crit)
    first = header.to_base64()

    crit.append("nbf")
    header.get("crit").append("iat")
    header.properties["crit"].append("jti")

    assert header.get("crit") == ["exp"]
    assert header.to_base64() == first


def test_header_constructor_checks_values():
    with pytest.raises(InvalidClaimValueError):
        Header({"alg": object()})
    with pytest.raises(InvalidClaimValueError):
        Header({"alg": "HS256"}).set(1, "x")


def test_header_from_base64_keeps_received_segment():
    # Not sorted, with whitespace: re-serializing would change it.
    segment = codec.b64_encode(b'{ "typ": "JWT", "alg": "HS256" }')
    header = Header.from_base64(segment)
    assert header.algorithm == "HS256"
    assert header.to_base64() == segment


def test_payload_cache_follows_claim_set():
    claims = new_claim_set()
    claims.add("aud", "developers")
    payload = Payload(claims)

    assert payload.to_base64() == b"eyJhdWQiOiJkZXZlbG9wZXJzIn0"

    claims.add("sub", "alice")
    assert payload.raw is None
    assert Payload.from_base64(payload.to_base64()).claims.to_dict() == {
        "aud": "developers",
        "sub": "alice",
    }


def test_payload_from_base64_rejects_non_object():
    with pytest.raises(JsonInvalidError):
        Payload.from_base64(codec.b64_encode(b"[]"))


def test_signature_roundtrip_and_canonical_check():
    signature = Signature.from_bytes(b"\x00\x01\x02")
    assert signature.raw == b"AAEC"
    assert signature.decode() == b"\x00\x01\x02"
    assert Signature.from_bytes(b"").is_empty()

    # "AAF" decodes to the same two bytes as "AAE" but sets padding bits.
    assert Signature.from_bytes(b"\x00\x01").raw == b"AAE"
    with pytest.raises(Base64InvalidError):
        Signature(b"AAF").decode()
