"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    UNKNOWN_DEPENDENCY = 3
    DEPENDENCY_CYCLE = 4
    NOT_FOUND = 5


class PackageOrigin(Enum):
    """Where a package record was read from.

    Args:
        Enum (string): Origin tag carried by every package record.
    """

    LOCAL = "local"
    SYNC = "sync"
    REMOTE = "remote"
    UNKNOWN = "unknown"
    DATABASE = "database"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    Values may be overridden at runtime by pacgraph.config.apply_config.
    """

    AUR_RPC_URL = "https://aur.archlinux.org/rpc/"
    AUR_RPC_VERSION = 5
    # The RPC rejects URIs longer than ~4400 bytes; 150 names stays well below.
    AUR_BATCH_SIZE = 150
    AUR_MAX_WORKERS = 4

    PACMAN_ROOT = "/"
    PACMAN_DBPATH = "/var/lib/pacman/"
    PACMAN_CONFIG = "/etc/pacman.conf"

    CONFIG_ENV = "PACGRAPH_CONFIG"
    CONFIG_FILE = "~/.config/pacgraph/config.yaml"
    LOG_LEVEL_ENV = "PACGRAPH_LOG_LEVEL"
    LOG_FORMAT = "[%(levelname)s] %(message)s"

    DEPENDENCY_KINDS = ["all", "depends", "makedepends"]
    OUTPUT_FORMATS = ["text", "json", "dot"]

    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    USER_AGENT = "pacgraph/0.1"
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
