"""External tool integrations (git)."""

from drctl.integration.git_client import (
    GitClient,
    GitClientError,
    GitCommandError,
    SubprocessGitClient,
    init_git_repo,
    is_not_git_repo_error,
)

__all__ = [
    "GitClient",
    "GitClientError",
    "GitCommandError",
    "SubprocessGitClient",
    "init_git_repo",
    "is_not_git_repo_error",
]
