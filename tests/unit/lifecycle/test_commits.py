"""Unit tests for the git commit policy applied after record writes."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Any

import pytest

from drctl.config.schema import GitMode, RepoContext
from drctl.integration.git_client import GitCommandError
from drctl.lifecycle.commits import (
    GitDisabledNotice,
    NotAGitRepositoryError,
    StagingAreaError,
    commit_if_enabled,
)


def test_commits_exact_paths(repo_context: RepoContext, repo_root: Path, fake_git: Any) -> None:
    path = repo_root / "infra" / "a.md"

    assert commit_if_enabled(repo_context, fake_git, [path], "drctl: create a") is True
    assert fake_git.commits == [((str(path),), "drctl: create a")]
    assert fake_git.cwds == [repo_root, repo_root]


def test_git_runs_from_ancestor_git_root(
    repo_context: RepoContext, repo_root: Path, fake_git: Any
) -> None:
    git_root = repo_root.parent
    context = replace(repo_context, git_root=git_root)
    path = repo_root / "infra" / "a.md"

    assert commit_if_enabled(context, fake_git, [path], "drctl: create a") is True

    assert fake_git.cwds == [git_root, git_root]
    assert fake_git.commits == [((str(path),), "drctl: create a")]


def test_disabled_mode_notifies_and_skips(repo_context: RepoContext, fake_git: Any) -> None:
    notices: list[GitDisabledNotice] = []
    context = replace(repo_context, git_mode=GitMode.DISABLED)

    committed = commit_if_enabled(
        context, fake_git, ["a.md"], "drctl: create a", on_git_disabled=notices.append
    )

    assert committed is False
    assert notices == [GitDisabledNotice(context=context)]
    assert fake_git.commits == []


def test_empty_paths_do_not_commit(repo_context: RepoContext, fake_git: Any) -> None:
    assert commit_if_enabled(repo_context, fake_git, [], "drctl: nothing") is False
    assert fake_git.commits == []


def test_foreign_staged_changes_abort(repo_context: RepoContext, fake_git: Any) -> None:
    fake_git.staged = ["README.md", "src/app.py"]

    with pytest.raises(StagingAreaError) as excinfo:
        commit_if_enabled(repo_context, fake_git, ["a.md"], "drctl: create a")

    assert "README.md, src/app.py" in str(excinfo.value)
    assert "Commit or reset them" in str(excinfo.value)
    assert fake_git.commits == []


def _not_a_repo_error() -> GitCommandError:
    return GitCommandError(
        command=("git", "add", "--", "a.md"),
        returncode=128,
        stdout="",
        stderr="fatal: not a git repository (or any of the parent directories): .git",
    )


def test_missing_repository_hint_names_bootstrap_command(
    repo_context: RepoContext, fake_git: Any
) -> None:
    fake_git.error = _not_a_repo_error()

    with pytest.raises(NotAGitRepositoryError) as excinfo:
        commit_if_enabled(repo_context, fake_git, ["a.md"], "drctl: create a")

    message = str(excinfo.value)
    assert 'repo "demo"' in message
    assert '"drctl repo bootstrap demo"' in message
    assert isinstance(excinfo.value.__cause__, GitCommandError)


def test_unnamed_repository_hint_suggests_git_init(
    repo_context: RepoContext, fake_git: Any
) -> None:
    fake_git.error = _not_a_repo_error()
    context = replace(repo_context, name=None)

    with pytest.raises(NotAGitRepositoryError, match='"git init"'):
        commit_if_enabled(context, fake_git, ["a.md"], "drctl: create a")


def test_other_git_failures_propagate(repo_context: RepoContext, fake_git: Any) -> None:
    fake_git.error = GitCommandError(
        command=("git", "commit"),
        returncode=1,
        stdout="",
        stderr="error: gpg failed to sign the data",
    )

    with pytest.raises(GitCommandError, match="gpg failed"):
        commit_if_enabled(repo_context, fake_git, ["a.md"], "drctl: create a")
