"""Error types raised while resolving, installing and running a crate binary.

Every error keeps its underlying cause on ``__cause__`` (raise ... from exc)
so the entry point can render the full chain.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class CargoxError(Exception):
    """Base class for all cargox failures surfaced to the caller."""


class InvalidVersionSpec(CargoxError, ValueError):
    """Raised when a ``crate[@version]`` spec cannot be parsed."""

    def __init__(self, message: str, spec: str):
        super().__init__(message)
        self.spec = spec


class RegistryError(CargoxError):
    """Raised when the crate registry cannot be queried or returns bad data."""

    def __init__(self, message: str, crate: Optional[str] = None):
        super().__init__(message)
        self.crate = crate


class NoMatchingVersion(CargoxError):
    """Raised when no published version satisfies a valid requirement."""

    def __init__(self, crate: str, requirement: str):
        super().__init__(f"no published version of '{crate}' satisfies '{requirement}'")
        self.crate = crate
        self.requirement = requirement


class InstallFailed(CargoxError):
    """Raised when the installer could not produce the requested binary."""


class InstallRootError(CargoxError):
    """Raised when the managed install directory cannot be determined or created."""


class PathEscape(CargoxError):
    """Raised when a binary resolves outside the managed install directory.

    This is a security refusal, never an I/O condition: nothing is spawned.
    """

    def __init__(self, path: Path, root: Path):
        super().__init__(f"refusing to execute binary outside install dir: {path}")
        self.path = path
        self.root = root


class ExecutionFailed(CargoxError):
    """Raised when the binary could not be spawned or waited on."""
