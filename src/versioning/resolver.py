"""Run-plan resolver: decide whether to reuse a cached binary or install one.

The registry is only consulted when no local binary can satisfy the request
(or ``force`` is set); local directory scans are cheap, registry round-trips
are not.
"""

from __future__ import annotations

import logging
from pathlib import Path

from typing import Protocol

import semantic_version

from .catalog import find_matching, latest_installed
from .models import (
    InstallAndRun,
    Latest,
    Requirement,
    RunPlan,
    Target,
    Unspecified,
    UseInstalled,
)

logger = logging.getLogger(__name__)


class RegistryOracle(Protocol):
    """Remote source of truth for which versions of a crate exist."""

    def latest_version(self, crate_name: str) -> semantic_version.Version:
        ...

    def highest_matching_version(self, crate_name: str,
                                 requirement: Requirement) -> semantic_version.Version:
        ...


def resolve_run_plan(target: Target, install_root: Path, registry: RegistryOracle,
                     force: bool = False) -> RunPlan:
    """Pick the action for ``target``.

    Args:
        target: Parsed crate, version spec and binary name.
        install_root: Managed install directory.
        registry: Version oracle; errors it raises propagate unchanged.
        force: Ignore installed binaries and always consult the registry.

    Returns:
        UseInstalled or InstallAndRun.
    """
    spec = target.version
    if isinstance(spec, Unspecified):
        return _resolve_unspecified(target, install_root, registry, force)
    if isinstance(spec, Latest):
        return _resolve_latest(target, install_root, registry, force)
    if isinstance(spec, Requirement):
        return _resolve_requirement(target, install_root, registry, force, spec)
    raise TypeError(f"unsupported version spec: {spec!r}")


def _resolve_unspecified(target: Target, install_root: Path, registry: RegistryOracle,
                         force: bool) -> RunPlan:
    if not force:
        installed = latest_installed(install_root, target.binary)
        if installed is not None:
            logger.info("Using installed %s %s", target.binary, installed.version)
            return UseInstalled(path=installed.path)

    version = registry.latest_version(target.crate_name)
    return InstallAndRun(version=version)


def _resolve_latest(target: Target, install_root: Path, registry: RegistryOracle,
                    force: bool) -> RunPlan:
    remote = registry.latest_version(target.crate_name)
    if force:
        return InstallAndRun(version=remote)

    installed = latest_installed(install_root, target.binary)
    # An installed build newer than the registry's latest (e.g. a prerelease)
    # is kept rather than downgraded.
    if installed is not None and installed.version >= remote:
        if installed.version > remote:
            logger.debug(
                "Installed %s %s is newer than registry latest %s; keeping it",
                target.binary, installed.version, remote,
            )
        logger.info("Installed %s %s is up to date", target.binary, installed.version)
        return UseInstalled(path=installed.path)

    return InstallAndRun(version=remote)


def _resolve_requirement(target: Target, install_root: Path, registry: RegistryOracle,
                         force: bool, requirement: Requirement) -> RunPlan:
    if not force:
        installed = find_matching(install_root, target.binary, requirement)
        if installed is not None:
            logger.info(
                "Using installed %s %s (matches %s)", target.binary, installed.version, requirement
            )
            return UseInstalled(path=installed.path)

    version = registry.highest_matching_version(target.crate_name, requirement)
    return InstallAndRun(version=version)
