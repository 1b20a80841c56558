"""Commit helper shared by every mutating lifecycle operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from drctl.config.schema import GitMode
from drctl.integration.git_client import GitClientError, is_not_git_repo_error

if TYPE_CHECKING:
    import os
    from collections.abc import Callable, Sequence

    from drctl.config.schema import RepoContext
    from drctl.integration.git_client import GitClient

logger = structlog.get_logger(__name__)

__all__ = [
    "GitDisabledNotice",
    "NotAGitRepositoryError",
    "StagingAreaError",
    "commit_if_enabled",
]


class StagingAreaError(GitClientError):
    """Raised when the index already holds changes drctl did not make."""


class NotAGitRepositoryError(GitClientError):
    """Raised when committing outside a git work tree; the message carries a bootstrap hint."""


@dataclass(frozen=True, slots=True)
class GitDisabledNotice:
    context: RepoContext


def commit_if_enabled(
    context: RepoContext,
    git_client: GitClient,
    paths: Sequence[str | os.PathLike[str]],
    message: str,
    *,
    on_git_disabled: Callable[[GitDisabledNotice], None] | None = None,
) -> bool:
    """Stage exactly ``paths`` and commit them; returns False when git mode is disabled."""

    if context.git_mode is GitMode.DISABLED:
        if on_git_disabled is not None:
            on_git_disabled(GitDisabledNotice(context=context))
        logger.debug("git.skipped", reason="disabled", message=message)
        return False
    if not paths:
        return False

    git_cwd = context.git_cwd
    staged = git_client.get_staged_files(git_cwd)
    if staged:
        raise StagingAreaError(
            f"Staging area contains unrelated changes in {git_cwd}: {', '.join(staged)}. "
            "Commit or reset them before running drctl."
        )

    try:
        git_client.stage_and_commit(paths, cwd=git_cwd, message=message)
    except GitClientError as exc:
        if not is_not_git_repo_error(exc):
            raise
        raise NotAGitRepositoryError(f"{exc}\n{_bootstrap_hint(context)}") from exc
    return True


def _bootstrap_hint(context: RepoContext) -> str:
    display_root = context.git_cwd
    if context.name:
        label = f'repo "{context.name}" ({display_root})'
        bootstrap = f"drctl repo bootstrap {context.name}"
    else:
        label = str(display_root)
        bootstrap = "git init"
    return (
        f'💡 Hint: initialise git in {label} via "{bootstrap}" '
        "before running this command again."
    )
