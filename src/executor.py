"""Sandboxed executor: run a resolved binary only if it lives in the install root.

Binary paths come from directory scans and registry-supplied version strings,
so both are treated as untrusted until their canonical form is shown to sit
inside the canonical install root.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Sequence

from errors import ExecutionFailed, PathEscape

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExitStatus:
    """How the child finished: a numeric exit code, or the signal that killed it."""

    code: Optional[int] = None
    signal: Optional[int] = None

    @classmethod
    def from_returncode(cls, returncode: int) -> "ExitStatus":
        """Build from ``Popen.returncode`` (negative means killed by signal on POSIX)."""
        if returncode < 0 and os.name == "posix":
            return cls(signal=-returncode)
        return cls(code=returncode)

    @property
    def success(self) -> bool:
        return self.code == 0


def _is_within(path: Path, root: Path) -> bool:
    return path == root or root in path.parents


def ensure_within_root(binary_path: Path, install_root: Path) -> Path:
    """Return the canonical binary path, refusing anything outside the root.

    Raises:
        PathEscape: If the canonical binary is not the root or a descendant of it.
        ExecutionFailed: If the root or the binary cannot be resolved.
    """
    try:
        root = Path(install_root).resolve(strict=True)
    except OSError as exc:
        raise ExecutionFailed(f"failed to canonicalize {install_root}") from exc

    # Non-strict so a dangling symlink that points outside is still reported
    # as an escape rather than as a missing file.
    binary = Path(binary_path).resolve()
    if not _is_within(binary, root):
        logger.error("Refusing to execute %s: outside install dir %s", binary, root)
        raise PathEscape(binary, root)

    if not binary.is_file():
        raise ExecutionFailed(f"binary not found: {binary}")
    return binary


@contextmanager
def _child_owns_sigint() -> Iterator[None]:
    """Ignore SIGINT in this process while the child runs.

    The terminal delivers Ctrl-C to the whole foreground process group, so
    the child receives it directly and decides how to exit.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return
    previous = signal.signal(signal.SIGINT, signal.SIG_IGN)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous if previous is not None else signal.SIG_DFL)


def execute(binary_path: Path, args: Sequence[str], install_root: Path) -> ExitStatus:
    """Run ``binary_path`` with ``args`` and wait for it.

    Arguments are passed as-is with no shell; stdin, stdout and stderr are
    inherited. A terminal interrupt is left to the child.

    Raises:
        PathEscape: If the binary resolves outside ``install_root``.
        ExecutionFailed: If the process could not be started.
    """
    binary = ensure_within_root(binary_path, install_root)
    cmd = [str(binary)] + list(args)

    logger.info("Running: %s", binary)
    logger.debug("Binary arguments: %r", list(args))
    try:
        process = subprocess.Popen(cmd)  # noqa: S603
    except OSError as exc:
        raise ExecutionFailed(f"failed to execute {binary_path}") from exc

    with _child_owns_sigint():
        returncode = process.wait()

    return ExitStatus.from_returncode(returncode)
