"""Application configuration helpers."""

from __future__ import annotations

from .engine import (
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_ENVIRONMENT_KEY,
    EngineConfig,
    get_engine_config,
)
from .env import optional_env_var, optional_int_env_var
from .errors import ConfigurationError
from .logging import configure_logging

__all__ = [
    "DEFAULT_CACHE_TTL_SECONDS",
    "DEFAULT_ENVIRONMENT_KEY",
    "ConfigurationError",
    "EngineConfig",
    "configure_logging",
    "get_engine_config",
    "optional_env_var",
    "optional_int_env_var",
]
