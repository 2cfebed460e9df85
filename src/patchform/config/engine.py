"""Engine configuration helpers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final

from .env import optional_env_var, optional_int_env_var
from .errors import ConfigurationError

DEFAULT_CACHE_TTL_SECONDS: Final[int] = 60
DEFAULT_ENVIRONMENT_KEY: Final[str] = "apiextensions.crossplane.io/environment"

CACHE_TTL_ENV_VAR: Final[str] = "PATCHFORM_CACHE_TTL_SECONDS"
ENVIRONMENT_KEY_ENV_VAR: Final[str] = "PATCHFORM_ENVIRONMENT_KEY"
LOG_LEVEL_ENV_VAR: Final[str] = "PATCHFORM_LOG_LEVEL"


@dataclass(frozen=True, slots=True)
class EngineConfig:
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS
    environment_context_key: str = DEFAULT_ENVIRONMENT_KEY
    log_level: int = logging.INFO

    @classmethod
    def from_environment(cls) -> EngineConfig:
        """Build a config from ``PATCHFORM_*`` variables, falling back to defaults."""

        ttl = optional_int_env_var(CACHE_TTL_ENV_VAR, minimum=0)
        key = optional_env_var(ENVIRONMENT_KEY_ENV_VAR)
        level = optional_env_var(LOG_LEVEL_ENV_VAR)
        return cls(
            cache_ttl_seconds=DEFAULT_CACHE_TTL_SECONDS if ttl is None else ttl,
            environment_context_key=key or DEFAULT_ENVIRONMENT_KEY,
            log_level=logging.INFO if level is None else _parse_log_level(level),
        )


def _parse_log_level(value: str) -> int:
    level = logging.getLevelNamesMapping().get(value.upper())
    if level is None:
        raise ConfigurationError(f"{LOG_LEVEL_ENV_VAR} is not a known log level: {value!r}")
    return level


def get_engine_config() -> EngineConfig:
    return EngineConfig.from_environment()
