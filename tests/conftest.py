"""
drctl — shared pytest fixtures

File: tests/conftest.py
Last updated: 2026-10-19

Purpose
- Isolate every test from the developer's home directory, git config, and DRCTL_* env.
- Provide an in-memory git client and a ready-made repository context.
"""

from __future__ import annotations

import datetime as dt
import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from drctl.config.schema import GitMode, GitModeSource, RepoContext, RepoResolutionSource
from drctl.observability import configure_logging

FIXED_TODAY = dt.date(2025, 1, 15)


@dataclass
class FakeGitClient:
    """Records commits instead of running git."""

    staged: list[str] = field(default_factory=list)
    commits: list[tuple[tuple[str, ...], str]] = field(default_factory=list)
    error: Exception | None = None
    cwds: list[Path] = field(default_factory=list)

    def stage_and_commit(
        self,
        paths: Iterable[object],
        *,
        cwd: str | os.PathLike[str],
        message: str,
        allow_empty: bool = False,
    ) -> None:
        self.cwds.append(Path(cwd))
        if self.error is not None:
            raise self.error
        self.commits.append((tuple(str(path) for path in paths), message))

    def get_staged_files(self, cwd: str | os.PathLike[str]) -> list[str]:
        self.cwds.append(Path(cwd))
        return list(self.staged)

    @property
    def messages(self) -> list[str]:
        return [message for _, message in self.commits]


@pytest.fixture(autouse=True)
def home_dir(
    tmp_path: Path, tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> Path:
    env_root = tmp_path_factory.mktemp("env")
    home = env_root / "home"
    xdg = env_root / "xdg"
    home.mkdir()
    xdg.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(xdg))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    monkeypatch.setenv("GIT_AUTHOR_NAME", "drctl tests")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "drctl@example.invalid")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "drctl tests")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "drctl@example.invalid")
    for key in list(os.environ):
        if key.startswith("DRCTL_"):
            monkeypatch.delenv(key)
    monkeypatch.delenv("FORCE_COLOR", raising=False)
    monkeypatch.delenv("NO_COLOR", raising=False)
    configure_logging(level="WARNING", json_output=False)
    return home


@pytest.fixture
def fake_git() -> FakeGitClient:
    return FakeGitClient()


@pytest.fixture
def fixed_clock() -> dt.date:
    return FIXED_TODAY


@pytest.fixture
def repo_root(tmp_path: Path) -> Path:
    root = tmp_path / "work" / "decisions"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def repo_context(repo_root: Path) -> RepoContext:
    return RepoContext(
        root=repo_root,
        source=RepoResolutionSource.CLI,
        name="demo",
        git_mode=GitMode.ENABLED,
        git_mode_source=GitModeSource.CLI,
    )
