"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    A child's own exit code is passed through unchanged; these only apply
    when cargox itself fails before or while launching the binary.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    GENERAL_ERROR = 1
    INVALID_SPEC = 2
    REGISTRY_ERROR = 3
    INSTALL_ERROR = 4
    PATH_ESCAPE = 5
    EXECUTION_ERROR = 6
    INTERRUPTED = 130


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    APP_NAME = "cargox"
    VERSION = "0.1.0"
    REGISTRY_URL_CRATES = "https://crates.io"
    CRATES_API_PATH = "/api/v1/crates/"
    USER_AGENT = "cargox (https://github.com/cargox/cargox)"
    LATEST_TOKEN = "latest"
    BIN_DIR_NAME = "bin"
    CONFIG_FILE_NAME = "config.yml"
    WINDOWS_EXE_SUFFIX = ".exe"

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
    LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    DEFAULT_LOG_LEVEL = "WARNING"

    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
    HTTP_CACHE_TTL_SEC = 300

    # Environment variables
    ENV_INSTALL_DIR = "CARGOX_INSTALL_DIR"
    ENV_LOG_LEVEL = "CARGOX_LOG_LEVEL"
    ENV_REGISTRY_URL = "CARGOX_REGISTRY_URL"
    ENV_CONFIG = "CARGOX_CONFIG"

    # Installer commands
    CARGO_COMMAND = "cargo"
    BINSTALL_SUBCOMMAND = "binstall"
    INSTALL_SUBCOMMAND = "install"
