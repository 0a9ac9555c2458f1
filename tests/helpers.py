"""Test helpers shared across cargox test modules."""

import os
import stat
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import pytest
import semantic_version

from paths import ensure_bin_dir, executable_suffix

posix_only = pytest.mark.skipif(sys.platform.startswith("win"), reason="POSIX shell scripts")


def make_binary(install_root: Path, name: str, content: str = "#!/bin/sh\nexit 0\n") -> Path:
    """Create an executable file named ``name`` in the bin directory."""
    path = ensure_bin_dir(install_root) / (name + executable_suffix())
    path.write_text(content)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def write_script(path: Path, body: str) -> Path:
    """Write an executable POSIX shell script."""
    path.write_text("#!/bin/sh\n" + body)
    os.chmod(path, 0o755)
    return path


class FakeRegistry:
    """Registry oracle double that records every call."""

    def __init__(self, latest: Optional[str] = None, matching: Optional[str] = None,
                 error: Optional[Exception] = None):
        self.latest = latest
        self.matching = matching
        self.error = error
        self.calls: List[Tuple[str, ...]] = []

    def latest_version(self, crate_name):
        self.calls.append(("latest_version", crate_name))
        if self.error is not None:
            raise self.error
        return semantic_version.Version(self.latest)

    def highest_matching_version(self, crate_name, requirement):
        self.calls.append(("highest_matching_version", crate_name, str(requirement)))
        if self.error is not None:
            raise self.error
        return semantic_version.Version(self.matching)
