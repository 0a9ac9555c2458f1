"""Installed catalog: versioned binaries found in the managed bin directory.

The directory is scanned on every call. The installer may add a file between
two lookups, so nothing here is cached.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

import semantic_version

from common.logging_utils import extra_context, is_debug_enabled
from paths import bin_dir, executable_suffix
from .models import InstalledBinary, Requirement

logger = logging.getLogger(__name__)


def _version_from_name(file_name: str, binary: str) -> Optional[semantic_version.Version]:
    """Parse ``<binary>-<version>[suffix]`` into a version, or None."""
    suffix = executable_suffix()
    if suffix and file_name.lower().endswith(suffix):
        file_name = file_name[:-len(suffix)]

    prefix = f"{binary}-"
    if not file_name.startswith(prefix):
        return None
    try:
        return semantic_version.Version(file_name[len(prefix):])
    except ValueError:
        return None


def list_installed(install_root: Path, binary: str) -> List[InstalledBinary]:
    """Return installed versions of ``binary``, ascending by version.

    A missing bin directory yields an empty list. Entries that are not
    regular files or whose suffix is not a semantic version are skipped.
    """
    directory = bin_dir(install_root)
    try:
        entries = list(os.scandir(directory))
    except FileNotFoundError:
        return []

    installed: List[InstalledBinary] = []
    for entry in entries:
        if not entry.is_file():
            continue
        version = _version_from_name(entry.name, binary)
        if version is None:
            continue
        installed.append(InstalledBinary(version=version, path=Path(entry.path)))

    installed.sort(key=lambda item: item.version)

    if is_debug_enabled(logger):
        logger.debug(
            "Scanned installed binaries",
            extra=extra_context(
                event="catalog_scan",
                component="catalog",
                binary=binary,
                count=len(installed)
            )
        )
    return installed


def latest_installed(install_root: Path, binary: str) -> Optional[InstalledBinary]:
    """Highest installed version of ``binary``, or None."""
    installed = list_installed(install_root, binary)
    return installed[-1] if installed else None


def find_matching(install_root: Path, binary: str,
                  requirement: Requirement) -> Optional[InstalledBinary]:
    """Highest installed version of ``binary`` satisfying ``requirement``, or None."""
    for entry in reversed(list_installed(install_root, binary)):
        if requirement.matches(entry.version):
            return entry
    return None
