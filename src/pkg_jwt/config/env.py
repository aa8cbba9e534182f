from __future__ import annotations

import os

from .settings import JWTSettings


def settings_from_env() -> JWTSettings:
    def _bool(key: str, default: bool = False) -> bool:
        raw = os.getenv(key)
        if raw is None:
            return default
        return str(raw).strip().lower() in {"1", "true", "yes", "on"}

    def _int(key: str, default: int) -> int:
        raw = os.getenv(key)
        if raw is None or not raw.strip():
            return default
        try:
            return int(raw.strip())
        except ValueError as exc:
            raise RuntimeError(f"{key} must be an integer, got {raw!r}") from exc

    return JWTSettings(
        allow_none_algorithm=_bool("JWT_ALLOW_NONE_ALGORITHM", False),
        leeway_seconds=_int("JWT_LEEWAY_SECONDS", 0),
        default_lifetime_seconds=_int("JWT_DEFAULT_LIFETIME_SECONDS", 3600),
        issuer=os.getenv("JWT_ISSUER") or None,
    )
