"""Argument parsing functionality for cargox."""

import argparse
import sys
from typing import List, Optional, Sequence, Tuple

from constants import Constants

# Options that consume the following token as their value.
_VALUE_OPTIONS = ("--bin", "--install-dir", "-c", "--config", "--loglevel", "--logfile")


def build_parser() -> argparse.ArgumentParser:
    """Build the cargox argument parser."""
    parser = argparse.ArgumentParser(
        prog="cargox",
        description="Run Cargo binaries on demand, installing them via cargo-binstall when missing.",
        add_help=True,
        allow_abbrev=False,
    )

    parser.add_argument("CRATE_SPEC",
                        metavar="crate[@version]",
                        help="Crate to run, optionally suffixed with @version",
                        type=str)
    parser.add_argument("-V", "--version",
                        action="version",
                        version=f"%(prog)s {Constants.VERSION}")
    parser.add_argument("--bin",
                        dest="BIN",
                        metavar="NAME",
                        help="Execute this binary from the crate (defaults to crate name)",
                        action="store",
                        type=str)
    parser.add_argument("-f", "--force",
                        dest="FORCE",
                        help="Force reinstall; ignore any existing binary",
                        action="store_true")
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Suppress installer output",
                        action="store_true")
    parser.add_argument("-s", "--build-from-source",
                        dest="BUILD_FROM_SOURCE",
                        help="Build from source using `cargo install` instead of `cargo-binstall`",
                        action="store_true")
    parser.add_argument("--install-dir",
                        dest="INSTALL_DIR",
                        help=f"Managed install directory (overrides {Constants.ENV_INSTALL_DIR})",
                        action="store",
                        type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML)",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=Constants.LOG_LEVELS)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    return parser


def split_argv(argv: Sequence[str]) -> Tuple[List[str], List[str]]:
    """Split argv at the crate spec.

    Everything up to and including the first positional token belongs to
    cargox; everything after it is passed to the binary untouched, so
    ``cargox bat --help`` shows bat's help, not ours.
    """
    skip_next = False
    for idx, arg in enumerate(argv):
        if skip_next:
            skip_next = False
            continue
        if arg in _VALUE_OPTIONS:
            skip_next = True
            continue
        if not arg.startswith("-"):
            return list(argv[:idx + 1]), list(argv[idx + 1:])
    return list(argv), []


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parses the arguments passed to the program.

    Args:
        argv: Arguments without the program name; defaults to sys.argv[1:].

    Returns:
        Namespace with cargox options and BINARY_ARGS for the executed binary.
    """
    if argv is None:
        argv = sys.argv[1:]

    own_args, binary_args = split_argv(argv)
    ns = build_parser().parse_args(own_args)
    ns.BINARY_ARGS = binary_args
    return ns
