"""Regression tests for filesystem helper edge cases."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from drctl.utils import atomic_write, is_within, posix_relative


def test_atomic_write_creates_parents_and_replaces(tmp_path: Path) -> None:
    target = tmp_path / "a" / "b" / "record.md"

    atomic_write(target, "first\n")
    atomic_write(target, "second\n")

    assert target.read_text(encoding="utf-8") == "second\n"
    assert sorted(path.name for path in target.parent.iterdir()) == ["record.md"]


def test_atomic_write_keeps_lf_newlines(tmp_path: Path) -> None:
    target = tmp_path / "index.md"

    atomic_write(target, "line one\nline two\n")

    assert target.read_bytes() == b"line one\nline two\n"


def test_atomic_write_cleans_up_temp_file_on_failure(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    target = tmp_path / "record.md"
    target.write_text("original\n", encoding="utf-8")

    def refuse(src: object, dst: object) -> None:
        raise OSError("replace refused")

    monkeypatch.setattr(os, "replace", refuse)

    with pytest.raises(OSError, match="replace refused"):
        atomic_write(target, "new\n")

    assert target.read_text(encoding="utf-8") == "original\n"
    assert [path.name for path in tmp_path.iterdir()] == ["record.md"]


@pytest.mark.parametrize(
    ("child", "expected"),
    [
        ("repo", True),
        ("repo/templates/adr.md", True),
        ("repo/../repo/x.md", True),
        ("repo-other/x.md", False),
        ("elsewhere/x.md", False),
    ],
)
def test_is_within(tmp_path: Path, child: str, expected: bool) -> None:
    assert is_within(tmp_path / child, tmp_path / "repo") is expected


def test_posix_relative(tmp_path: Path) -> None:
    root = tmp_path / "repo"

    assert posix_relative(root / "infra" / "a.md", root) == "infra/a.md"
    assert posix_relative(tmp_path / "shared" / "t.md", root) == "../shared/t.md"
