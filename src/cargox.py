"""cargox - run Cargo binaries on demand.

Installs the requested crate version into a managed directory when it is not
already there, then runs it with the remaining arguments.

    Returns:
        int: Exit code (the binary's own exit code when it ran)
"""
import logging
from typing import Any, Optional, Sequence

from args import parse_args
from cli_run import run_command
from common.logging_utils import add_file_handler, configure_logging


def _setup_logging(args: Any) -> None:
    """Configure logging based on CLI arguments.

    Args:
        args: Parsed CLI arguments.
    """
    # CLI --loglevel wins over CARGOX_LOG_LEVEL; --quiet only lowers the default
    level_name = getattr(args, "LOG_LEVEL", None)
    if not level_name and getattr(args, "QUIET", False):
        level_name = "ERROR"

    level = getattr(logging, str(level_name).upper(), None) if level_name else None
    configure_logging(level)

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        add_file_handler(log_file)
        logging.getLogger(__name__).info("Logging to file: %s", log_file)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main function of the program."""
    args = parse_args(argv)
    _setup_logging(args)
    logging.getLogger(__name__).debug("Arguments parsed: %s", args)
    run_command(args)


if __name__ == "__main__":
    main()
