"""Configuration management for stacval.

This module provides hierarchical configuration with the following precedence
(highest to lowest):
1. CLI argument
2. Environment variable (STACVAL_<KEY>)
3. Config file (`.stacval.yaml` in the working directory, or --config PATH)
4. Built-in default

Usage:
    from stacval.config import get_setting, load_settings, list_settings

    # Get a single raw setting with full precedence resolution
    timeout = get_setting("timeout", cli_value=cli_timeout)

    # Get every validator setting, typed
    settings = load_settings(max_workers=cli_workers)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from stacval.errors import ConfigInvalidStructureError, ConfigParseError
from stacval.fetch import DEFAULT_USER_AGENT

# Config file name (looked up in the working directory)
CONFIG_FILENAME = ".stacval.yaml"

# Known settings and their built-in defaults
DEFAULTS: dict[str, Any] = {
    "timeout": None,
    "max_workers": 1,
    "strict_temporal": True,
    "user_agent": DEFAULT_USER_AGENT,
}

KNOWN_SETTINGS: frozenset[str] = frozenset(DEFAULTS)

# CLI option that sets each key, for error messages
CLI_OPTIONS: dict[str, str] = {
    "timeout": "--timeout",
    "max_workers": "--workers",
    "strict_temporal": "--strict-temporal",
}

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True)
class ValidatorSettings:
    """Resolved settings for building a Validator.

    Attributes:
        timeout: Seconds allowed per validation call, or None for no limit.
        max_workers: Schemas checked concurrently.
        strict_temporal: Enforce datetime or start/end on Item properties.
        user_agent: User-Agent sent when fetching schemas.
    """

    timeout: float | None = None
    max_workers: int = 1
    strict_temporal: bool = True
    user_agent: str = DEFAULT_USER_AGENT

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "timeout": self.timeout,
            "max_workers": self.max_workers,
            "strict_temporal": self.strict_temporal,
            "user_agent": self.user_agent,
        }


def get_config_path(directory: Path | None = None) -> Path:
    """Get the default config file path.

    Args:
        directory: Directory to look in (default: working directory).

    Returns:
        Path to .stacval.yaml
    """
    return (directory if directory is not None else Path.cwd()) / CONFIG_FILENAME


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from a YAML file.

    Args:
        config_path: File to load (default: .stacval.yaml in the working
            directory).

    Returns:
        Config dictionary. Returns empty dict if the file doesn't exist
        or is empty.

    Raises:
        ConfigParseError: If the file is not valid YAML.
        ConfigInvalidStructureError: If the top level is not a mapping.
    """
    config_file = config_path if config_path is not None else get_config_path()

    if not config_file.exists():
        return {}

    content = config_file.read_text()
    if not content.strip():
        return {}

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigParseError(str(config_file), str(e)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigInvalidStructureError(
            str(config_file), f"expected a mapping, got {type(data).__name__}"
        )
    return data


def _get_env_var_name(key: str) -> str:
    """Convert a setting key to environment variable name.

    Args:
        key: Setting key (e.g., "max_workers")

    Returns:
        Environment variable name (e.g., "STACVAL_MAX_WORKERS")
    """
    return f"STACVAL_{key.upper()}"


def get_setting(
    key: str,
    cli_value: Any | None = None,
    config_path: Path | None = None,
) -> Any | None:
    """Resolve a raw setting with full precedence.

    Values are returned as found: environment values are strings, file
    values are whatever YAML produced. Use load_settings() for typed values.

    Args:
        key: Setting key (e.g., "timeout", "max_workers")
        cli_value: Value passed via CLI argument (highest precedence)
        config_path: Config file to read (default: .stacval.yaml)

    Returns:
        Resolved value, or the built-in default.
    """
    # 1. CLI argument takes highest precedence
    if cli_value is not None:
        return cli_value

    # 2. Environment variable
    env_value = os.environ.get(_get_env_var_name(key))
    if env_value is not None:
        return env_value

    # 3. Config file
    config = load_config(config_path)
    if key in config:
        return config[key]

    # 4. Default
    return DEFAULTS.get(key)


def _get_setting_source(key: str, cli_value: Any | None, config_path: Path | None) -> str:
    """Determine the source of a setting's value.

    Returns:
        Source string: "cli", "env", "file", or "default"
    """
    if cli_value is not None:
        return "cli"
    if _get_env_var_name(key) in os.environ:
        return "env"
    if key in load_config(config_path):
        return "file"
    return "default"


def _coerce(key: str, value: Any, source: str) -> Any:
    """Convert a raw setting value to its declared type.

    Raises:
        ConfigInvalidStructureError: If the value cannot be converted.
    """
    if value is None:
        if key == "timeout":
            return None
        raise ConfigInvalidStructureError(source, f"{key} must not be null")

    try:
        if key == "timeout":
            if isinstance(value, bool):
                raise ValueError(value)
            timeout = float(value)
            if timeout <= 0:
                raise ValueError(value)
            return timeout
        if key == "max_workers":
            if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
                raise ValueError(value)
            workers = int(value)
            if workers < 1:
                raise ValueError(value)
            return workers
        if key == "strict_temporal":
            if isinstance(value, bool):
                return value
            text = str(value).strip().lower()
            if text in _TRUE_STRINGS:
                return True
            if text in _FALSE_STRINGS:
                return False
            raise ValueError(value)
    except (TypeError, ValueError) as e:
        raise ConfigInvalidStructureError(source, f"invalid value for {key}: {value!r}") from e

    return str(value)


def load_settings(
    *,
    config_path: Path | None = None,
    **cli_values: Any,
) -> ValidatorSettings:
    """Resolve every known setting into a ValidatorSettings.

    Args:
        config_path: Config file to read (default: .stacval.yaml).
        **cli_values: CLI values keyed by setting name; None means unset.

    Returns:
        ValidatorSettings with typed values.

    Raises:
        ConfigParseError: If the config file is not valid YAML.
        ConfigInvalidStructureError: If a value has the wrong type.
    """
    unknown = set(cli_values) - KNOWN_SETTINGS
    if unknown:
        raise TypeError(f"Unknown settings: {', '.join(sorted(unknown))}")

    resolved: dict[str, Any] = {}
    for key in sorted(KNOWN_SETTINGS):
        cli_value = cli_values.get(key)
        value = get_setting(key, cli_value=cli_value, config_path=config_path)
        source = _get_setting_source(key, cli_value, config_path)
        origin = {
            "cli": CLI_OPTIONS.get(key, f"--{key.replace('_', '-')}"),
            "env": _get_env_var_name(key),
            "file": str(config_path if config_path is not None else get_config_path()),
            "default": "default",
        }[source]
        resolved[key] = _coerce(key, value, origin)
    return ValidatorSettings(**resolved)


def list_settings(config_path: Path | None = None) -> dict[str, dict[str, Any]]:
    """List all settings with their sources.

    Returns a dictionary mapping setting keys to their resolved values
    and sources (env, file, default). Unknown keys found in the config
    file are listed too.

    Args:
        config_path: Config file to read (default: .stacval.yaml).

    Returns:
        Dict mapping setting keys to {"value": ..., "source": ...}
    """
    result: dict[str, dict[str, Any]] = {}
    all_keys = set(load_config(config_path)) | KNOWN_SETTINGS

    for key in sorted(all_keys):
        result[key] = {
            "value": get_setting(key, config_path=config_path),
            "source": _get_setting_source(key, None, config_path),
        }
    return result
