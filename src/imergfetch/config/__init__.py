"""Configuration models and loaders for imergfetch."""

from .loader import (
    ConfigError,
    DEFAULT_CONFIG_PATH,
    PASSWORD_ENV,
    USERNAME_ENV,
    dump_example_config,
    load_config,
    require_credentials,
)
from .models import MAX_PARALLELISM, Credentials, ImergConfig, NamingConfig, RuntimeConfig

__all__ = [
    "ConfigError",
    "Credentials",
    "DEFAULT_CONFIG_PATH",
    "ImergConfig",
    "MAX_PARALLELISM",
    "NamingConfig",
    "PASSWORD_ENV",
    "RuntimeConfig",
    "USERNAME_ENV",
    "dump_example_config",
    "load_config",
    "require_credentials",
]
