"""Configuration loading and precedence for cargox.

Precedence, highest first: CLI flags, environment variables, the YAML config
file, then the defaults in ``Constants``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from constants import Constants

logger = logging.getLogger(__name__)

KNOWN_KEYS = ("registry_url", "request_timeout", "http_retry_max", "build_from_source", "quiet")


@dataclass
class Settings:
    """Effective runtime settings after all sources are merged."""

    registry_url: str = Constants.REGISTRY_URL_CRATES
    request_timeout: int = Constants.REQUEST_TIMEOUT
    http_retry_max: int = Constants.HTTP_RETRY_MAX
    build_from_source: bool = False
    quiet: bool = False


def resolve_config_path(cli_path: Optional[str], install_root: Path,
                        env: Optional[Mapping[str, str]] = None) -> Optional[Path]:
    """Pick the config file: --config, then CARGOX_CONFIG, then <install_root>/config.yml."""
    env = os.environ if env is None else env
    if cli_path:
        return Path(cli_path).expanduser()
    if env.get(Constants.ENV_CONFIG):
        return Path(env[Constants.ENV_CONFIG]).expanduser()
    default = Path(install_root) / Constants.CONFIG_FILE_NAME
    return default if default.is_file() else None


def load_config_file(path: Optional[Path]) -> Dict[str, Any]:
    """Load a YAML mapping from ``path``.

    A missing file, unreadable file, parse error or non-mapping document is
    logged and yields an empty config.
    """
    if path is None:
        return {}
    if not path.is_file():
        logger.warning("Config file not found: %s", path)
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.error("Failed to load config %s: %s", path, e)
        return {}

    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.error("Config %s must be a mapping, got %s", path, type(data).__name__)
        return {}

    for key in data:
        if key not in KNOWN_KEYS:
            logger.warning("Ignoring unknown config key '%s' in %s", key, path)
    return data


def _coerce_int(value: Any, key: str, default: int) -> int:
    try:
        result = int(value)
    except (TypeError, ValueError):
        logger.warning("Config key '%s' must be an integer; using %s", key, default)
        return default
    if result <= 0:
        logger.warning("Config key '%s' must be positive; using %s", key, default)
        return default
    return result


def _coerce_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    logger.warning("Config key '%s' must be true or false; ignoring %r", key, value)
    return False


def build_settings(args: Any, file_config: Mapping[str, Any],
                   env: Optional[Mapping[str, str]] = None) -> Settings:
    """Merge CLI args, environment and file config into Settings."""
    env = os.environ if env is None else env
    settings = Settings()

    if file_config.get("registry_url"):
        settings.registry_url = str(file_config["registry_url"])
    if env.get(Constants.ENV_REGISTRY_URL):
        settings.registry_url = env[Constants.ENV_REGISTRY_URL]

    if "request_timeout" in file_config:
        settings.request_timeout = _coerce_int(
            file_config["request_timeout"], "request_timeout", settings.request_timeout
        )
    if "http_retry_max" in file_config:
        settings.http_retry_max = _coerce_int(
            file_config["http_retry_max"], "http_retry_max", settings.http_retry_max
        )

    settings.build_from_source = bool(getattr(args, "BUILD_FROM_SOURCE", False)) or _coerce_bool(
        file_config.get("build_from_source", False), "build_from_source"
    )
    settings.quiet = bool(getattr(args, "QUIET", False)) or _coerce_bool(
        file_config.get("quiet", False), "quiet"
    )
    return settings


def apply_http_overrides(settings: Settings) -> None:
    """Push HTTP tunables onto Constants, where the HTTP client reads them."""
    Constants.REQUEST_TIMEOUT = settings.request_timeout
    Constants.HTTP_RETRY_MAX = settings.http_retry_max
