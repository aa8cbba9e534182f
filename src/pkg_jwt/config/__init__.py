"""
pkg_jwt.config

- JWTSettings: validation / issuing settings (``none`` opt-in, leeway, lifetime).
- settings_from_env: build JWTSettings from ``JWT_*`` environment variables.
- configure_logging / get_logger: structlog wiring.
"""

from __future__ import annotations

from .env import settings_from_env
from .logging import configure_logging, get_logger
from .settings import JWTSettings

__all__ = [
    "JWTSettings",
    "settings_from_env",
    "configure_logging",
    "get_logger",
]
