"""
drctl — filesystem utilities

File: src/drctl/utils/fs.py
Last updated: 2026-10-19

Purpose
- Whole-file writes for decision records, templates, config, and the index.
- Lexical containment and posix-relative path helpers.

Functional requirements
- Writes go to a temp file in the destination directory and replace the target in one step,
  so an interrupted write never leaves a half-written record behind.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path

PathLike = str | os.PathLike[str]

__all__ = [
    "atomic_write",
    "is_within",
    "posix_relative",
]


def atomic_write(path: PathLike, data: str, *, encoding: str = "utf-8") -> None:
    """Replace ``path`` with ``data``, creating parent directories as needed."""

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_name = tempfile.mkstemp(
        prefix=f".{target.name}.",
        suffix=".tmp",
        dir=str(target.parent),
    )
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="\n") as file_handle:
            file_handle.write(data)
        os.replace(temp_path, target)
    except Exception:
        with contextlib.suppress(OSError):
            temp_path.unlink(missing_ok=True)
        raise


def is_within(child: PathLike, parent: PathLike) -> bool:
    """Return ``True`` if ``child`` is ``parent`` or lies beneath it.

    The comparison is lexical on normalized absolute paths; neither path has to exist.
    """

    child_abs = Path(os.path.normpath(os.path.abspath(child)))
    parent_abs = Path(os.path.normpath(os.path.abspath(parent)))
    try:
        child_abs.relative_to(parent_abs)
    except ValueError:
        return False
    return True


def posix_relative(path: PathLike, root: PathLike) -> str:
    """Return ``path`` relative to ``root`` using forward slashes."""

    return Path(os.path.relpath(os.path.abspath(path), os.path.abspath(root))).as_posix()
