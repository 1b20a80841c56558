"""Stable constants shared across drctl layers."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Final

# Config file discovery.
CONFIG_FILENAMES: Final[tuple[str, ...]] = (".drctl.yaml", ".drctl.yml")
GLOBAL_CONFIG_DIR: Final[PurePosixPath] = PurePosixPath(".config/drctl")
GLOBAL_CONFIG_FILENAMES: Final[tuple[str, ...]] = ("config.yaml", "config.yml")

# Environment variables consulted by the resolver and lifecycle service.
ENV_REPO: Final[str] = "DRCTL_REPO"
ENV_CONFIG: Final[str] = "DRCTL_CONFIG"
ENV_GIT: Final[str] = "DRCTL_GIT"
ENV_TEMPLATE: Final[str] = "DRCTL_TEMPLATE"
ENV_REVIEWER: Final[str] = "DRCTL_REVIEWER"
ENV_LOG_LEVEL: Final[str] = "DRCTL_LOG_LEVEL"
ENV_LOG_FORMAT: Final[str] = "DRCTL_LOG_FORMAT"

# Repository layout.
TEMPLATES_DIR: Final[str] = "templates"
DECISION_SUFFIX: Final[str] = ".md"
DEFAULT_INDEX_FILENAME: Final[str] = "index.md"

# Record defaults.
INITIAL_VERSION: Final[str] = "1.0"
DEFAULT_REVIEW_INTERVAL_MONTHS: Final[int] = 12
COMMIT_PREFIX: Final[str] = "drctl:"

__all__ = [
    "COMMIT_PREFIX",
    "CONFIG_FILENAMES",
    "DECISION_SUFFIX",
    "DEFAULT_INDEX_FILENAME",
    "DEFAULT_REVIEW_INTERVAL_MONTHS",
    "ENV_CONFIG",
    "ENV_GIT",
    "ENV_LOG_FORMAT",
    "ENV_LOG_LEVEL",
    "ENV_REPO",
    "ENV_REVIEWER",
    "ENV_TEMPLATE",
    "GLOBAL_CONFIG_DIR",
    "GLOBAL_CONFIG_FILENAMES",
    "INITIAL_VERSION",
    "TEMPLATES_DIR",
]
