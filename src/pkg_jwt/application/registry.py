from __future__ import annotations

from functools import lru_cache
from types import MappingProxyType
from typing import Iterator, Mapping, Optional, Union

from jwt.algorithms import HMACAlgorithm

from ..adapters.pyjwt.algorithms import HMACSigning, RSASigning, sign_none, validate_none
from ..domain.constants import (
    JWE_ALGORITHMS,
    JWS_ALGORITHMS,
    RESERVED_ALGORITHMS,
    AlgorithmType,
    TokenType,
)
from ..domain.exceptions import AlgorithmNotImplementedError, UnsupportedAlgorithmError
from ..domain.ports import AlgorithmStrategy


def to_algorithm_type(alg: Union[AlgorithmType, str]) -> AlgorithmType:
    """
    Accept an ``AlgorithmType`` or its plain string form.

    Raises:
        AlgorithmNotImplementedError for JWE key management algorithms.
        UnsupportedAlgorithmError for anything else that is not known.
    """
    if isinstance(alg, AlgorithmType):
        return alg
    if isinstance(alg, str):
        try:
            return AlgorithmType(alg)
        except ValueError:
            pass
        if alg in JWE_ALGORITHMS:
            raise AlgorithmNotImplementedError(
                f"Algorithm {alg!r} identifies a JWE, which is not implemented",
                token_type=TokenType.JWE,
            )
    raise UnsupportedAlgorithmError(f"Unsupported algorithm: {alg!r}")


def determine_token_type(alg: Union[AlgorithmType, str]) -> TokenType:
    """
    Classify an ``alg`` value as JWS (or fail).

    Known JWS algorithms are checked in order first; ``custom`` passes
    through as JWS without further checks.
    """
    algorithm = to_algorithm_type(alg)

    for candidate in JWS_ALGORITHMS:
        if candidate is algorithm:
            return TokenType.JWS

    if algorithm is AlgorithmType.CUSTOM:
        return TokenType.JWS

    raise UnsupportedAlgorithmError(f"Unable to determine token type for {alg!r}")


class AlgorithmRegistry:
    """
    Immutable ``AlgorithmType -> AlgorithmStrategy`` mapping.

    Built once and only read afterwards, so one instance can be shared
    between threads without locking.
    """

    __slots__ = ("_strategies",)

    def __init__(self, strategies: Mapping[AlgorithmType, AlgorithmStrategy]) -> None:
        self._strategies = MappingProxyType(dict(strategies))

    def strategy_for(self, alg: AlgorithmType) -> Optional[AlgorithmStrategy]:
        """
        Return the registered strategy, or ``None`` if there is none.

        Raises:
            AlgorithmNotImplementedError for reserved algorithms.
        """
        if alg in RESERVED_ALGORITHMS:
            raise AlgorithmNotImplementedError(f"Algorithm {alg.value!r} is not implemented")
        return self._strategies.get(alg)

    def __contains__(self, alg: object) -> bool:
        return alg in self._strategies

    def __iter__(self) -> Iterator[AlgorithmType]:
        return iter(self._strategies)

    def __len__(self) -> int:
        return len(self._strategies)


def _builtin_strategies() -> dict[AlgorithmType, AlgorithmStrategy]:
    hs256 = HMACSigning(HMACAlgorithm.SHA256)
    hs384 = HMACSigning(HMACAlgorithm.SHA384)
    hs512 = HMACSigning(HMACAlgorithm.SHA512)
    rs256 = RSASigning()

    return {
        AlgorithmType.HS256: AlgorithmStrategy(sign=hs256.sign, validate=hs256.validate),
        AlgorithmType.HS384: AlgorithmStrategy(sign=hs384.sign, validate=hs384.validate),
        AlgorithmType.HS512: AlgorithmStrategy(sign=hs512.sign, validate=hs512.validate),
        AlgorithmType.RS256: AlgorithmStrategy(sign=rs256.sign, validate=rs256.validate),
        AlgorithmType.NONE: AlgorithmStrategy(sign=sign_none, validate=validate_none),
    }


@lru_cache(maxsize=None)
def default_registry() -> AlgorithmRegistry:
    """The process-wide registry of built-in algorithms."""
    return AlgorithmRegistry(_builtin_strategies())
