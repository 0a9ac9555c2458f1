"""Install-root discovery and versioned binary paths.

The managed install root is resolved once by the entry point and then passed
explicitly to the catalog, resolver, installer and executor.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Mapping, Optional

import semantic_version

from constants import Constants
from errors import InstallRootError

logger = logging.getLogger(__name__)


def _platform_data_dir(env: Mapping[str, str]) -> Optional[Path]:
    """Per-user data location for this platform, or None if it can't be derived."""
    home = env.get("HOME") or env.get("USERPROFILE")
    if sys.platform.startswith("win"):
        base = env.get("LOCALAPPDATA") or env.get("APPDATA")
        return Path(base) / Constants.APP_NAME if base else None
    if sys.platform == "darwin":
        if not home:
            return None
        return Path(home) / "Library" / "Application Support" / Constants.APP_NAME
    xdg = env.get("XDG_DATA_HOME")
    if xdg and os.path.isabs(xdg):
        return Path(xdg) / Constants.APP_NAME
    if not home:
        return None
    return Path(home) / ".local" / "share" / Constants.APP_NAME


def _fallback_dir(env: Mapping[str, str]) -> Optional[Path]:
    home = env.get("HOME") or env.get("USERPROFILE")
    if not home:
        return None
    return Path(home) / ".local" / "share" / Constants.APP_NAME


def _create(path: Path, label: str) -> Path:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise InstallRootError(f"failed to create {label}: {path}") from exc
    return path.absolute()


def get_install_root(override: Optional[str] = None,
                     env: Optional[Mapping[str, str]] = None) -> Path:
    """Return the managed install root, creating it when missing.

    Priority: explicit ``override``, then CARGOX_INSTALL_DIR, then the
    platform data directory, then ``~/.local/share/cargox``. Cargo's own
    CARGO_INSTALL_ROOT is never consulted.

    Raises:
        InstallRootError: If no location can be determined or created.
    """
    env = os.environ if env is None else env

    if override:
        return _create(Path(override).expanduser(), "install directory")

    from_env = env.get(Constants.ENV_INSTALL_DIR)
    if from_env:
        return _create(Path(from_env).expanduser(), "install directory")

    data_dir = _platform_data_dir(env)
    if data_dir is not None:
        return _create(data_dir, "data directory")

    fallback = _fallback_dir(env)
    if fallback is not None:
        logger.debug("Using fallback install directory %s", fallback)
        return _create(fallback, "fallback directory")

    raise InstallRootError("unable to determine install directory")


def bin_dir(install_root: Path) -> Path:
    """Directory holding the versioned binaries."""
    return Path(install_root) / Constants.BIN_DIR_NAME


def ensure_bin_dir(install_root: Path) -> Path:
    """Create the bin directory if needed and return it."""
    path = bin_dir(install_root)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise InstallRootError(f"failed to create binary directory {path}") from exc
    return path


def executable_suffix() -> str:
    """Platform executable suffix ('.exe' on Windows, '' elsewhere)."""
    return Constants.WINDOWS_EXE_SUFFIX if sys.platform.startswith("win") else ""


def versioned_binary_name(binary: str, version: semantic_version.Version) -> str:
    """``<binary>-<version>`` without any platform suffix."""
    return f"{binary}-{version}"


def versioned_binary_path(install_root: Path, binary: str,
                          version: semantic_version.Version) -> Path:
    """Deterministic location of an installed ``binary`` at ``version``."""
    return bin_dir(install_root) / (versioned_binary_name(binary, version) + executable_suffix())
