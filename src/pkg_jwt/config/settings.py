from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class JWTSettings:
    """
    Token handling settings.

    Host code decides how to construct this (env, config file, etc.).
    The defaults are the safe ones: unsigned ``none`` tokens are refused.
    """
    allow_none_algorithm: bool = False
    leeway_seconds: int = 0

    # Used when issuing tokens
    default_lifetime_seconds: int = 3600
    issuer: Optional[str] = None

    def __post_init__(self) -> None:
        if self.leeway_seconds < 0:
            raise ValueError(f"leeway_seconds must be >= 0, got {self.leeway_seconds}")
        if self.default_lifetime_seconds <= 0:
            raise ValueError(
                f"default_lifetime_seconds must be > 0, got {self.default_lifetime_seconds}"
            )
