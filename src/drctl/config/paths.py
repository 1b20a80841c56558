"""
drctl — path resolution utilities.

File: src/drctl/config/paths.py
Last updated: 2026-10-19

Purpose
- Expand environment variables and ``~`` in user-supplied path strings.
- Decide whether a repo selector is an alias name or a literal directory.
- Pick a fallback decisions root when no repository is configured.

Functional requirements
- ``${VAR}`` and ``$VAR`` expand to the variable value, or ``""`` when unset.
- Relative inputs resolve against an explicit base directory, never implicitly against cwd.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import TYPE_CHECKING, Final

from drctl.config.schema import RepoResolutionSource

if TYPE_CHECKING:
    from collections.abc import Mapping

FALLBACK_DIR_NAME: Final[str] = "decisions"

_DRIVE_PREFIX_RE: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z]:")
_ENV_NAME_RE: Final[re.Pattern[str]] = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

PathLike = str | os.PathLike[str]

__all__ = [
    "FALLBACK_DIR_NAME",
    "expand_env_vars",
    "expand_tilde",
    "looks_like_path",
    "resolve_path",
    "resolve_template_path",
    "select_fallback_root",
]


def expand_env_vars(text: str, environ: Mapping[str, str] | None = None) -> str:
    """Expand ``${VAR}`` and ``$VAR`` references; unset variables become empty strings.

    A lone ``$``, an empty ``${}`` and an unterminated ``${`` are kept literally.
    """

    env_map = os.environ if environ is None else environ
    pieces: list[str] = []
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char != "$" or index + 1 >= length:
            pieces.append(char)
            index += 1
            continue

        next_char = text[index + 1]
        if next_char == "{":
            end_brace = text.find("}", index + 2)
            if end_brace == -1 or end_brace == index + 2:
                pieces.append(char)
                index += 1
                continue
            pieces.append(env_map.get(text[index + 2 : end_brace], ""))
            index = end_brace + 1
            continue

        match = _ENV_NAME_RE.match(text, index + 1)
        if match is None:
            pieces.append(char)
            index += 1
            continue
        pieces.append(env_map.get(match.group(0), ""))
        index = match.end()
    return "".join(pieces)


def expand_tilde(text: str) -> str:
    """Expand a leading ``~`` or ``~/`` to the current user's home directory."""

    if text == "~":
        return str(Path.home())
    if text.startswith("~/"):
        return os.path.join(str(Path.home()), text[2:])
    return text


def resolve_path(
    text: str,
    base_dir: PathLike,
    *,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """Resolve ``text`` into an absolute, normalized path.

    Expansion order is environment variables, then ``~``, then separator
    normalization. Relative results are joined onto ``base_dir``.
    """

    expanded = expand_tilde(expand_env_vars(text, environ))
    normalized = expanded.replace("\\", os.sep)
    if os.path.isabs(normalized):
        return Path(os.path.normpath(normalized))
    return Path(os.path.normpath(os.path.join(os.path.abspath(base_dir), normalized)))


def looks_like_path(text: str) -> bool:
    """Return True when ``text`` reads as a filesystem path rather than an alias."""

    return (
        "/" in text
        or "\\" in text
        or text.startswith(".")
        or text.startswith("~")
        or _DRIVE_PREFIX_RE.match(text) is not None
    )


def select_fallback_root(cwd: PathLike) -> tuple[Path, RepoResolutionSource]:
    """Choose ``<cwd>/decisions`` or ``~/decisions`` when nothing is configured.

    The cwd variant wins when it exists, and also when neither exists.
    """

    local_dir = Path(os.path.normpath(os.path.join(os.path.abspath(cwd), FALLBACK_DIR_NAME)))
    home_dir = Path.home() / FALLBACK_DIR_NAME

    if local_dir.exists() or not home_dir.exists():
        return local_dir, RepoResolutionSource.FALLBACK_CWD
    return home_dir, RepoResolutionSource.FALLBACK_HOME


def resolve_template_path(
    repo_root: PathLike,
    template: str,
    *,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """Resolve a configured template path relative to the repository root."""

    expanded = expand_tilde(expand_env_vars(template, environ))
    if os.path.isabs(expanded):
        return Path(os.path.normpath(expanded))
    return Path(os.path.normpath(os.path.join(os.path.abspath(repo_root), expanded)))

