"""Lenient semantic-version bumping for decision records."""

from __future__ import annotations

from enum import StrEnum
from typing import Final

_COMPONENTS: Final[int] = 3

__all__ = ["BumpLevel", "InvalidVersionError", "bump_version"]


class BumpLevel(StrEnum):
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"


class InvalidVersionError(ValueError):
    """Raised when a version string has a non-numeric component."""


_LEVEL_INDEX: Final[dict[BumpLevel, int]] = {
    BumpLevel.MAJOR: 0,
    BumpLevel.MINOR: 1,
    BumpLevel.PATCH: 2,
}


def bump_version(version: str, level: BumpLevel | str) -> str:
    """Bump ``version`` at ``level``; missing trailing components count as 0.

    >>> bump_version("1.0", "patch")
    '1.0.1'
    """

    target = _LEVEL_INDEX[BumpLevel(level)]
    raw_parts = str(version).strip().split(".")
    if len(raw_parts) > _COMPONENTS:
        raise InvalidVersionError(f'Invalid semantic version supplied: "{version}"')

    numbers: list[int] = []
    for part in raw_parts + ["0"] * (_COMPONENTS - len(raw_parts)):
        if not (part.isascii() and part.isdigit()):
            raise InvalidVersionError(f'Invalid semantic version supplied: "{version}"')
        numbers.append(int(part))

    numbers[target] += 1
    for index in range(target + 1, _COMPONENTS):
        numbers[index] = 0
    return ".".join(str(number) for number in numbers)
