"""Constants used in the project."""

import os
from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    INDEX_ERROR = 2
    CONFIG_ERROR = 3
    BROKEN_INSTALLED = 4


class RepoKinds(Enum):
    """Repository kinds accepted in configuration.

    Args:
        Enum (string): Repository kinds.
    """

    REMOTE = "remote"
    LOCAL = "local"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    INDEX_FILE_NAME = "00-index.tar"
    DESCRIPTION_FILE_EXT = ".cabal"
    PREFERRED_VERSIONS_FILE = "preferred-versions"
    PREFERRED_VERSIONS_ENABLED = False
    BROKEN_PACKAGE_SUFFIX = "-broken"
    INDEX_STALE_THRESHOLD_DAYS = 15
    UPDATE_COMMAND = "hackport update"
    MAX_WORKERS = 1

    # Installed package scopes, most preferred first
    DEFAULT_SCOPE_PREFERENCE = ["user", "global"]

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_LEVEL_ENV_VAR = "HACKINDEX_LOG_LEVEL"
    CONFIG_ENV_VAR = "HACKINDEX_CONFIG"
    DEFAULT_CONFIG_PATHS = [
        "./hackindex.yml",
        "./hackindex.yaml",
        "~/.config/hackindex/hackindex.yml",
        "~/.config/hackindex/hackindex.yaml",
    ]


def _find_default_config() -> str:
    """Return the first existing config path from the environment or default locations, or ''."""
    env_path = os.environ.get(Constants.CONFIG_ENV_VAR, "").strip()
    if env_path:
        return os.path.expanduser(env_path)
    for candidate in Constants.DEFAULT_CONFIG_PATHS:
        path = os.path.expanduser(candidate)
        if os.path.isfile(path):
            return path
    return ""
