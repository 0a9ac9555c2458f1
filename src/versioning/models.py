"""Data models for version specs, run targets and run plans."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

import semantic_version


@dataclass(frozen=True)
class Unspecified:
    """No version given: use whatever is installed, else the latest release."""


@dataclass(frozen=True)
class Latest:
    """Explicit ``@latest``: always check the registry for the newest release."""


@dataclass(frozen=True)
class Requirement:
    """A Cargo-style semver requirement such as ``^1.2`` or ``>=1, <2``."""
    raw: str
    spec: semantic_version.NpmSpec = field(compare=False, repr=False)

    def matches(self, version: semantic_version.Version) -> bool:
        """Return True if ``version`` satisfies this requirement."""
        return self.spec.match(version)

    def __str__(self) -> str:
        return self.raw


# Closed set; every consumer dispatches over all three explicitly.
VersionSpec = Union[Unspecified, Latest, Requirement]


@dataclass(frozen=True)
class Target:
    """What the user asked to run."""
    crate_name: str
    version: VersionSpec
    binary: str


@dataclass(frozen=True)
class InstalledBinary:
    """A versioned binary found in the managed bin directory."""
    version: semantic_version.Version
    path: Path


@dataclass(frozen=True)
class UseInstalled:
    """Run an already-present binary unchanged."""
    path: Path


@dataclass(frozen=True)
class InstallAndRun:
    """Install ``version`` first, then run it from its derived path."""
    version: semantic_version.Version


RunPlan = Union[UseInstalled, InstallAndRun]
