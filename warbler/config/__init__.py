"""Config loading and validation."""

from .schema import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_PATH,
    ENV_PREFIX,
    AppConfig,
    load_config,
)

__all__ = [
    "AppConfig",
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "load_config",
]
