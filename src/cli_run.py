"""Run pipeline: resolve a plan, install if needed, then execute the binary.

Maps the outcome (a child exit status or a cargox error) to a process exit
code for the entry point.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, List, Sequence

from cli_config import apply_http_overrides, build_settings, load_config_file, resolve_config_path
from constants import ExitCodes
from errors import (
    CargoxError,
    ExecutionFailed,
    InstallFailed,
    InvalidVersionSpec,
    NoMatchingVersion,
    PathEscape,
    RegistryError,
)
from executor import ExitStatus, execute
from installer import Installer
from paths import get_install_root, versioned_binary_path
from registry.crates import CratesRegistry
from versioning.models import InstallAndRun, RunPlan, Target, UseInstalled
from versioning.parser import build_target
from versioning.resolver import RegistryOracle, resolve_run_plan

logger = logging.getLogger(__name__)

_ERROR_EXIT_CODES = (
    (InvalidVersionSpec, ExitCodes.INVALID_SPEC),
    (NoMatchingVersion, ExitCodes.REGISTRY_ERROR),
    (RegistryError, ExitCodes.REGISTRY_ERROR),
    (InstallFailed, ExitCodes.INSTALL_ERROR),
    (PathEscape, ExitCodes.PATH_ESCAPE),
    (ExecutionFailed, ExitCodes.EXECUTION_ERROR),
)


def execute_plan(plan: RunPlan, target: Target, install_root: Path, installer: Any,
                 binary_args: Sequence[str]) -> ExitStatus:
    """Carry out a RunPlan.

    For InstallAndRun the binary path is re-derived from (binary, version)
    after installing; the installer's return value is not trusted.
    """
    if isinstance(plan, UseInstalled):
        return execute(plan.path, binary_args, install_root)
    if isinstance(plan, InstallAndRun):
        installer.install(target, plan.version)
        binary_path = versioned_binary_path(install_root, target.binary, plan.version)
        return execute(binary_path, binary_args, install_root)
    raise TypeError(f"unsupported run plan: {plan!r}")


def run_target(target: Target, install_root: Path, registry: RegistryOracle, installer: Any,
               binary_args: Sequence[str], force: bool = False) -> ExitStatus:
    """Resolve and execute ``target``; returns the child's exit status."""
    plan = resolve_run_plan(target, install_root, registry, force=force)
    logger.debug("Run plan for %s: %r", target.crate_name, plan)
    return execute_plan(plan, target, install_root, installer, binary_args)


def render_error(err: BaseException) -> List[str]:
    """Human-readable lines for ``err`` and each exception in its cause chain."""
    lines = [f"error: {err}"]
    cause = err.__cause__
    while cause is not None:
        lines.append(f"  caused by: {cause}")
        cause = cause.__cause__
    return lines


def exit_code_for_error(err: CargoxError) -> int:
    for error_type, code in _ERROR_EXIT_CODES:
        if isinstance(err, error_type):
            return code.value
    return ExitCodes.GENERAL_ERROR.value


def exit_code_for_status(status: ExitStatus) -> int:
    """Child exit code, or GENERAL_ERROR if the child was killed by a signal."""
    if status.code is not None:
        return status.code
    sys.stderr.write("process terminated by signal\n")
    return ExitCodes.GENERAL_ERROR.value


def run_command(args: Any) -> None:
    """Entry point for running a crate binary.

    Args:
        args: Parsed CLI arguments namespace.
    """
    exit_code = ExitCodes.GENERAL_ERROR.value
    try:
        target = build_target(args.CRATE_SPEC, getattr(args, "BIN", None))
        install_root = get_install_root(getattr(args, "INSTALL_DIR", None))

        config_path = resolve_config_path(getattr(args, "CONFIG", None), install_root)
        settings = build_settings(args, load_config_file(config_path))
        apply_http_overrides(settings)
        if settings.quiet and not getattr(args, "LOG_LEVEL", None):
            logging.getLogger().setLevel(logging.ERROR)

        registry = CratesRegistry(settings.registry_url)
        installer = Installer(
            install_root, build_from_source=settings.build_from_source, quiet=settings.quiet
        )

        status = run_target(
            target,
            install_root,
            registry,
            installer,
            getattr(args, "BINARY_ARGS", []),
            force=bool(getattr(args, "FORCE", False)),
        )
        exit_code = exit_code_for_status(status)
    except CargoxError as err:
        for line in render_error(err):
            sys.stderr.write(line + "\n")
        exit_code = exit_code_for_error(err)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        exit_code = ExitCodes.INTERRUPTED.value

    sys.exit(exit_code)
