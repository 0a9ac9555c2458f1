"""Installer: fetch a crate binary with cargo-binstall (or cargo install).

The tool installs into a throwaway staging root under the install directory,
then the requested binary is moved to ``bin/<binary>-<version>``.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import subprocess
import tempfile
from pathlib import Path
from typing import List

import semantic_version

from constants import Constants
from errors import InstallFailed
from paths import ensure_bin_dir, executable_suffix, versioned_binary_path
from versioning.models import Target

logger = logging.getLogger(__name__)


def binstall_available() -> bool:
    """True when the cargo-binstall subcommand is on PATH."""
    return shutil.which(f"{Constants.CARGO_COMMAND}-{Constants.BINSTALL_SUBCOMMAND}") is not None


def _make_executable(path: Path) -> None:
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


class Installer:
    """Installs a specific crate version into the managed bin directory."""

    def __init__(self, install_root: Path, build_from_source: bool = False, quiet: bool = False):
        self.install_root = Path(install_root)
        self.build_from_source = build_from_source
        self.quiet = quiet

    def build_command(self, target: Target, version: semantic_version.Version,
                      staging_root: Path, from_source: bool) -> List[str]:
        """Command line for installing ``target`` at ``version`` into ``staging_root``."""
        exact = f"={version}"
        if from_source:
            return [
                Constants.CARGO_COMMAND, Constants.INSTALL_SUBCOMMAND,
                "--root", str(staging_root),
                "--version", exact,
                "--bin", target.binary,
                "--locked",
                "--force",
                target.crate_name,
            ]
        return [
            Constants.CARGO_COMMAND, Constants.BINSTALL_SUBCOMMAND,
            "--no-confirm",
            "--force",
            "--root", str(staging_root),
            "--version", exact,
            target.crate_name,
        ]

    def _use_source_build(self) -> bool:
        if self.build_from_source:
            return True
        if not binstall_available():
            logger.warning(
                "cargo-binstall not found on PATH; falling back to building from source"
            )
            return True
        return False

    def _run(self, cmd: List[str], target: Target) -> None:
        logger.info("Installing: %s", " ".join(cmd))
        output = subprocess.DEVNULL if self.quiet else None
        try:
            result = subprocess.run(cmd, stdout=output, stderr=output, check=False)  # noqa: S603
        except OSError as exc:
            raise InstallFailed(f"failed to run {cmd[0]} to install '{target.crate_name}'") from exc
        if result.returncode != 0:
            raise InstallFailed(
                f"installing '{target.crate_name}' failed with exit code {result.returncode}"
            )

    def install(self, target: Target, version: semantic_version.Version) -> Path:
        """Install ``target`` at ``version`` and return the versioned binary path.

        Raises:
            InstallFailed: If cargo is missing, the install fails, or the
                expected binary was not produced.
        """
        if shutil.which(Constants.CARGO_COMMAND) is None:
            raise InstallFailed(f"'{Constants.CARGO_COMMAND}' not found on PATH")

        destination = versioned_binary_path(self.install_root, target.binary, version)
        ensure_bin_dir(self.install_root)
        staging = Path(tempfile.mkdtemp(prefix="cargox-install-", dir=str(self.install_root)))
        try:
            cmd = self.build_command(target, version, staging, self._use_source_build())
            self._run(cmd, target)

            produced = staging / Constants.BIN_DIR_NAME / (target.binary + executable_suffix())
            if not produced.is_file():
                raise InstallFailed(
                    f"crate '{target.crate_name}' {version} did not provide a binary named "
                    f"'{target.binary}'"
                )
            try:
                os.replace(str(produced), str(destination))
                _make_executable(destination)
            except OSError as exc:
                raise InstallFailed(f"failed to move installed binary to {destination}") from exc
        finally:
            shutil.rmtree(staging, ignore_errors=True)

        logger.info("Installed %s %s to %s", target.binary, version, destination)
        return destination
