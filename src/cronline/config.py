"""Configuration for the crontab backends and the CLI.

Values are merged from three sources, later ones overriding earlier ones:

    defaults  <  config file (YAML or JSON)  <  CRONLINE_* environment

Example file:
    crontab_command: /usr/bin/crontab
    user: deploy
    use_sudo: true
    timeout: 10
    log_level: INFO

Usage:
    >>> config = load_config("cronline.yaml")
    >>> backend = config.create_backend()
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

from cronline.backends import SystemCrontab
from cronline.errors import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "CRONLINE_"

# Environment variable suffix -> config key
ENV_KEYS: dict[str, str] = {
    "COMMAND": "crontab_command",
    "USER": "user",
    "USE_SUDO": "use_sudo",
    "TIMEOUT": "timeout",
    "LOG_LEVEL": "log_level",
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class CronlineConfig:
    """Settings for reaching the system crontab."""

    crontab_command: str = "crontab"
    user: str | None = None
    use_sudo: bool = False
    timeout: float = 30.0
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        errors = []
        if not self.crontab_command:
            errors.append("crontab_command must not be empty")
        if self.timeout <= 0:
            errors.append("timeout must be positive")
        if self.log_level.upper() not in LOG_LEVELS:
            errors.append(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        if errors:
            raise ConfigError(f"Configuration validation failed: {', '.join(errors)}")
        self.log_level = self.log_level.upper()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CronlineConfig":
        """Build a config from a mapping, coercing simple types."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        values: dict[str, Any] = {}
        for key, value in data.items():
            if key == "user":
                values[key] = None if value in (None, "") else str(value)
            elif value is None:
                continue
            elif key == "use_sudo":
                values[key] = _parse_bool(key, value)
            elif key == "timeout":
                values[key] = _parse_float(key, value)
            else:
                values[key] = str(value)
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def create_backend(self) -> SystemCrontab:
        """Build the system crontab backend these settings describe."""
        return SystemCrontab(
            command=self.crontab_command,
            user=self.user,
            use_sudo=self.use_sudo,
            timeout=self.timeout,
        )


# =============================================================================
# Value Parsing
# =============================================================================


def _parse_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("true", "yes", "1", "on"):
        return True
    if text in ("false", "no", "0", "off", ""):
        return False
    raise ConfigError(f"Invalid boolean for {key}: {value!r}")


def _parse_float(key: str, value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid number for {key}: {value!r}") from e


# =============================================================================
# Sources
# =============================================================================


def read_config_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML or JSON config file into a dict."""
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    content = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    try:
        if suffix in (".yaml", ".yml"):
            data = yaml.safe_load(content) or {}
        elif suffix == ".json":
            data = json.loads(content)
        else:
            raise ConfigError(f"Unsupported file format: {suffix}")
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"Failed to parse {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {path} must be a mapping")
    return data


def read_env(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Collect ``CRONLINE_*`` variables as config keys."""
    environ = os.environ if environ is None else environ
    return {
        key: environ[f"{ENV_PREFIX}{suffix}"]
        for suffix, key in ENV_KEYS.items()
        if f"{ENV_PREFIX}{suffix}" in environ
    }


def load_config(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> CronlineConfig:
    """Merge defaults, an optional file and the environment.

    Raises:
        ConfigError: If a source is unreadable or a value is invalid.
    """
    data: dict[str, Any] = {}
    if path is not None:
        data.update(read_config_file(path))
        logger.debug("Loaded configuration file %s", path)
    data.update(read_env(environ))
    return CronlineConfig.from_dict(data)
