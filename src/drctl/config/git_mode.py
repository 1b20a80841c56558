"""Git mode detection and the CLI > env > config override cascade."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Final

from drctl.config.schema import GitMode, GitModeSource

if TYPE_CHECKING:
    from collections.abc import Sequence

_ENABLED_VALUES: Final[frozenset[str]] = frozenset({"enabled", "enable", "on", "true", "1", "yes"})
_DISABLED_VALUES: Final[frozenset[str]] = frozenset(
    {"disabled", "disable", "off", "false", "0", "no"}
)

__all__ = [
    "GitModeResolution",
    "coerce_git_mode",
    "find_git_root",
    "resolve_git_mode",
]


@dataclass(frozen=True, slots=True)
class GitModeResolution:
    """Final git mode plus its provenance."""

    mode: GitMode
    source: GitModeSource
    override_cleared: GitModeSource | None = None
    detected_git_root: Path | None = None


def find_git_root(start: str | os.PathLike[str]) -> Path | None:
    """Walk upward from ``start`` and return the first directory holding a ``.git`` entry."""

    current = Path(os.path.abspath(start))
    while True:
        if (current / ".git").exists():
            return current
        parent = current.parent
        if parent == current:
            return None
        current = parent


def coerce_git_mode(value: object) -> GitMode | None:
    """Map loose config/env spellings onto ``GitMode``; unknown values become ``None``."""

    if isinstance(value, GitMode):
        return value
    if isinstance(value, bool):
        return GitMode.ENABLED if value else GitMode.DISABLED
    if isinstance(value, int):
        if value == 1:
            return GitMode.ENABLED
        if value == 0:
            return GitMode.DISABLED
        return None
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _ENABLED_VALUES:
            return GitMode.ENABLED
        if normalized in _DISABLED_VALUES:
            return GitMode.DISABLED
    return None


def resolve_git_mode(
    root: str | os.PathLike[str],
    *,
    git_flag: GitMode | None = None,
    git_env: GitMode | None = None,
    git_config: GitMode | None = None,
) -> GitModeResolution:
    """Combine ``.git`` detection with the override cascade.

    The first non-None override wins. A winning ``disabled`` is ignored when a
    ``.git`` ancestor exists; the ignored source is reported as ``override_cleared``.
    """

    git_root = find_git_root(root)
    detected = GitMode.ENABLED if git_root is not None else GitMode.DISABLED

    cascade: Sequence[tuple[GitMode | None, GitModeSource]] = (
        (git_flag, GitModeSource.CLI),
        (git_env, GitModeSource.ENV),
        (git_config, GitModeSource.CONFIG),
    )
    for value, source in cascade:
        if value is None:
            continue
        if value is GitMode.DISABLED and git_root is not None:
            return GitModeResolution(
                mode=GitMode.ENABLED,
                source=GitModeSource.DETECTED,
                override_cleared=source,
                detected_git_root=git_root,
            )
        return GitModeResolution(mode=value, source=source, detected_git_root=git_root)

    return GitModeResolution(
        mode=detected,
        source=GitModeSource.DETECTED,
        detected_git_root=git_root,
    )
