"""Config loading entry points for imergfetch."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from .models import Credentials, ImergConfig

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for earlier interpreters
    import tomli as tomllib  # type: ignore[assignment]

DEFAULT_CONFIG_PATH = Path(__file__).resolve().with_name("default.yaml")
USERNAME_ENV = "IMERGFETCH_USERNAME"
PASSWORD_ENV = "IMERGFETCH_PASSWORD"


class ConfigError(RuntimeError):
    """Raised when configuration files cannot be loaded or validated."""


def load_config(
    path: Path | None = None,
    *,
    overrides: Mapping[str, Any] | None = None,
) -> ImergConfig:
    """Load the imergfetch configuration applying optional overrides.

    Precedence, lowest first: packaged defaults, ``path``, ``overrides``
    (dotted keys allowed), then credentials from the environment.
    """

    default_data = _expect_mapping(_read_structured_file(DEFAULT_CONFIG_PATH), DEFAULT_CONFIG_PATH)

    if path:
        config_data = _expect_mapping(_read_structured_file(path), path)
    else:
        config_data = {}

    merged: dict[str, Any] = _deep_merge(default_data, config_data)

    if overrides:
        merged = _deep_merge(merged, _expand_override_keys(overrides))

    env_credentials = _credentials_from_env()
    if env_credentials:
        merged = _deep_merge(merged, {"credentials": env_credentials})

    try:
        return ImergConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def require_credentials(config: ImergConfig) -> Credentials:
    """Return the configured credentials, raising if none were supplied."""

    if config.credentials is None:
        raise ConfigError(
            f"No archive credentials configured; set {USERNAME_ENV} and {PASSWORD_ENV} "
            "or add a 'credentials' section to the config file."
        )
    return config.credentials


def dump_example_config(dest: Path) -> None:
    """Write the default configuration to ``dest``."""

    if dest.suffix.lower() == ".toml":
        raise ConfigError("TOML export is not supported yet; use a YAML destination.")

    dest.parent.mkdir(parents=True, exist_ok=True)

    merged = _read_structured_file(DEFAULT_CONFIG_PATH)
    if dest.suffix.lower() in {".json"}:
        dest.write_text(json.dumps(merged, indent=2), encoding="utf-8")
        return
    dest.write_text(
        yaml.safe_dump(merged, sort_keys=False),
        encoding="utf-8",
    )


def _credentials_from_env() -> dict[str, str]:
    found: dict[str, str] = {}
    username = os.getenv(USERNAME_ENV)
    password = os.getenv(PASSWORD_ENV)
    if username:
        found["username"] = username
    if password:
        found["password"] = password
    return found


def _expect_mapping(payload: Any, source: Path) -> dict[str, Any]:
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise ConfigError(f"Expected mapping data in {source}, got {type(payload)!r}.")
    return dict(payload)


def _read_structured_file(path: Path) -> Any:
    """Return the parsed contents of a YAML/TOML/JSON file."""

    if not path.exists():
        raise ConfigError(f"Config file {path} does not exist.")

    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")

    if suffix in {".yaml", ".yml"}:
        return yaml.safe_load(text) or {}
    if suffix == ".toml":
        return tomllib.loads(text)
    if suffix == ".json":
        return json.loads(text)

    raise ConfigError(f"Unsupported config format for {path}")


def _deep_merge(base: Mapping[str, Any], extra: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge two mappings returning a new dictionary."""

    result: dict[str, Any] = {key: value for key, value in base.items()}
    for key, value in extra.items():
        if (
            key in result
            and isinstance(result[key], Mapping)
            and isinstance(value, Mapping)
        ):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _expand_override_keys(overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Support dotted-notation overrides like ``runtime.parallelism``."""

    result: dict[str, Any] = {}
    for key, value in overrides.items():
        converted = _expand_single_override(key, value)
        result = _deep_merge(result, converted)
    return result


def _expand_single_override(key: Any, value: Any) -> dict[str, Any]:
    if isinstance(key, str) and "." in key:
        parts = key.split(".")
        cursor: dict[str, Any] = {}
        root = cursor
        for segment in parts[:-1]:
            next_cursor: dict[str, Any] = {}
            cursor[segment] = next_cursor
            cursor = next_cursor
        cursor[parts[-1]] = value
        return root
    return {key: value}


__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "PASSWORD_ENV",
    "USERNAME_ENV",
    "dump_example_config",
    "load_config",
    "require_credentials",
]
