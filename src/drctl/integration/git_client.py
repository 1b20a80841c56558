"""Git subprocess client used by lifecycle commits and ``drctl repo bootstrap``."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import structlog

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

logger = structlog.get_logger(__name__)

__all__ = [
    "CommandResult",
    "GitClient",
    "GitClientError",
    "GitCommandError",
    "SubprocessGitClient",
    "init_git_repo",
    "is_not_git_repo_error",
    "parse_staged_files",
]


class GitClientError(RuntimeError):
    """Base error for git client failures."""


class GitCommandError(GitClientError):
    """Raised when a git subprocess exits non-zero or cannot be started."""

    def __init__(
        self,
        *,
        command: Sequence[str],
        returncode: int,
        stdout: str,
        stderr: str,
    ) -> None:
        self.command = tuple(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        detail = stderr.strip() or stdout.strip() or f"exit status {returncode}"
        super().__init__(f"Git command failed: {' '.join(command)}\n{detail}")


@dataclass(frozen=True, slots=True)
class CommandResult:
    command: tuple[str, ...]
    cwd: str
    returncode: int
    stdout: str
    stderr: str


class GitClient(Protocol):
    """What the lifecycle service needs from git."""

    def stage_and_commit(
        self,
        paths: Sequence[str | os.PathLike[str]],
        *,
        cwd: str | os.PathLike[str],
        message: str,
        allow_empty: bool = False,
    ) -> None: ...

    def get_staged_files(self, cwd: str | os.PathLike[str]) -> list[str]: ...


class SubprocessGitClient:
    """``GitClient`` backed by the ``git`` executable."""

    def __init__(self, *, env_overrides: Mapping[str, str] | None = None) -> None:
        self._env_overrides = dict(env_overrides or {})

    def stage_and_commit(
        self,
        paths: Sequence[str | os.PathLike[str]],
        *,
        cwd: str | os.PathLike[str],
        message: str,
        allow_empty: bool = False,
    ) -> None:
        if not paths:
            return
        run_cwd = Path(cwd)
        relative_paths = [_relative_to(path, run_cwd) for path in paths]
        self._run_git(["add", "--", *relative_paths], cwd=run_cwd)

        commit_args = ["commit", "-m", message]
        if allow_empty:
            commit_args.append("--allow-empty")
        self._run_git(commit_args, cwd=run_cwd)
        logger.info("git.commit", cwd=str(run_cwd), message=message, paths=relative_paths)

    def get_staged_files(self, cwd: str | os.PathLike[str]) -> list[str]:
        """Return paths with a staged (index) change; empty outside a git work tree."""

        try:
            result = self._run_git(["status", "--porcelain"], cwd=Path(cwd))
        except GitCommandError as exc:
            if is_not_git_repo_error(exc):
                return []
            raise
        return parse_staged_files(result.stdout)

    def init(self, cwd: str | os.PathLike[str]) -> None:
        self._run_git(["init"], cwd=Path(cwd))

    def _run_git(self, args: Sequence[str], *, cwd: Path) -> CommandResult:
        command = ("git", *args)
        env = os.environ.copy()
        env["GIT_TERMINAL_PROMPT"] = "0"
        env.update(self._env_overrides)

        try:
            completed = subprocess.run(
                command,
                cwd=cwd,
                env=env,
                text=True,
                capture_output=True,
                check=False,
            )
        except OSError as exc:
            raise GitCommandError(
                command=command, returncode=-1, stdout="", stderr=str(exc)
            ) from exc

        result = CommandResult(
            command=command,
            cwd=cwd.as_posix(),
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )
        if result.returncode != 0:
            raise GitCommandError(
                command=result.command,
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
            )
        return result


def parse_staged_files(porcelain: str) -> list[str]:
    """Extract index-changed paths from ``git status --porcelain`` output."""

    staged: list[str] = []
    for raw_line in porcelain.splitlines():
        line = raw_line.rstrip()
        if len(line) < 3:
            continue
        index_status = line[0]
        path = line[3:].strip()
        if path and index_status not in {" ", "?"}:
            staged.append(path)
    return staged


def is_not_git_repo_error(error: BaseException) -> bool:
    message = str(error).lower()
    return "not a git repository" in message or (
        "no such file or directory" in message and ".git" in message
    )


def init_git_repo(
    path: str | os.PathLike[str], *, client: SubprocessGitClient | None = None
) -> bool:
    """Run ``git init`` in ``path`` unless it already has ``.git``; True when created."""

    target = Path(path)
    if (target / ".git").exists():
        return False
    target.mkdir(parents=True, exist_ok=True)
    (client or SubprocessGitClient()).init(target)
    logger.info("git.init", path=str(target))
    return True


def _relative_to(path: str | os.PathLike[str], cwd: Path) -> str:
    relative = os.path.relpath(os.path.abspath(path), os.path.abspath(cwd))
    return "." if relative in {"", "."} else relative
