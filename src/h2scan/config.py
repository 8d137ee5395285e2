"""
Configuration management for h2scan.

Values are looked up in order of priority:
1. Environment variables (highest priority)
2. ``.env`` file in the working directory
3. Global config file (~/.h2scan/config.yml)
4. Default values (lowest priority)

Command line flags given explicitly override all of these.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from h2scan.errors import ConfigError
from h2scan.scanner.models import Direction, ScanConfig

logger = logging.getLogger(__name__)

ENV_KEYS = (
    "H2SCAN_ADDR",
    "H2SCAN_PORT",
    "H2SCAN_THREADS",
    "H2SCAN_TIMEOUT",
    "H2SCAN_COUNT",
    "H2SCAN_SHOW_FAIL",
    "H2SCAN_OUTPUT",
    "H2SCAN_RESULTS_FILE",
    "H2SCAN_DOMAINS_FILE",
    "H2SCAN_LOG_LEVEL",
)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def get_global_config_path() -> Path:
    return Path.home() / ".h2scan" / "config.yml"


def load_env_file(env_path: Path) -> dict[str, str]:
    """Load environment variables from .env file."""
    env_vars = {}
    if env_path.exists():
        with open(env_path) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    # Remove quotes if present
                    value = value.strip().strip("\"'")
                    env_vars[key.strip()] = value
    return env_vars


def load_global_config() -> dict[str, Any]:
    """Load global configuration from ~/.h2scan/config.yml.

    Keys may be written either as ``H2SCAN_PORT`` or as plain ``port``.
    """
    config_path = get_global_config_path()
    if not config_path.exists():
        return {}
    with open(config_path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a mapping", config_path)
        return {}
    normalized = {}
    for key, value in data.items():
        name = str(key).upper()
        if not name.startswith("H2SCAN_"):
            name = f"H2SCAN_{name}"
        normalized[name] = value
    return normalized


def get_config(key: str, default: Any = None, env_file: Path | None = None) -> Any:
    """
    Get configuration value with priority:
    1. Environment variable
    2. .env file
    3. Global config file
    4. Default value
    """
    env_value = os.environ.get(key)
    if env_value:
        return env_value

    env_config = load_env_file(env_file or Path.cwd() / ".env")
    if key in env_config:
        return env_config[key]

    global_config = load_global_config()
    if key in global_config:
        return global_config[key]

    return default


def _as_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigError(f"{key} must be a boolean, got {value!r}")


def _as_number(key: str, value: Any, kind: type) -> Any:
    try:
        return kind(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be a number, got {value!r}") from exc


def get_log_level(env_file: Path | None = None) -> str:
    return str(get_config("H2SCAN_LOG_LEVEL", "INFO", env_file)).upper()


def load_scan_config(env_file: Path | None = None, **overrides: Any) -> ScanConfig:
    """Build a validated ScanConfig from layered settings plus explicit overrides.

    Overrides set to None are ignored so unset CLI flags fall through.
    """
    defaults = ScanConfig()
    config = ScanConfig(
        start=str(get_config("H2SCAN_ADDR", defaults.start, env_file)),
        port=get_config("H2SCAN_PORT", defaults.port, env_file),
        threads=_as_number(
            "H2SCAN_THREADS", get_config("H2SCAN_THREADS", defaults.threads, env_file), int
        ),
        timeout=_as_number(
            "H2SCAN_TIMEOUT", get_config("H2SCAN_TIMEOUT", defaults.timeout, env_file), float
        ),
        count=_as_number(
            "H2SCAN_COUNT", get_config("H2SCAN_COUNT", defaults.count, env_file), int
        ),
        show_fail=_as_bool(
            "H2SCAN_SHOW_FAIL", get_config("H2SCAN_SHOW_FAIL", defaults.show_fail, env_file)
        ),
        output=_as_bool("H2SCAN_OUTPUT", get_config("H2SCAN_OUTPUT", defaults.output, env_file)),
        results_file=Path(get_config("H2SCAN_RESULTS_FILE", defaults.results_file, env_file)),
        domains_file=Path(get_config("H2SCAN_DOMAINS_FILE", defaults.domains_file, env_file)),
    )
    for name, value in overrides.items():
        if value is None:
            continue
        if not hasattr(config, name):
            raise ConfigError(f"Unknown scan setting: {name}")
        setattr(config, name, value)

    if not isinstance(config.direction, Direction):
        raise ConfigError(f"Invalid direction: {config.direction!r}")
    return config.validate()
