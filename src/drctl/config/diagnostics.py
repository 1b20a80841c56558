"""Read-only health report over every configured repository (``drctl config check``)."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from drctl.config.git_mode import find_git_root, resolve_git_mode
from drctl.config.loader import load_config_layers
from drctl.config.paths import resolve_template_path
from drctl.config.schema import (
    ConfigDiagnostics,
    GitModeSource,
    NormalizedRepo,
    RepoDiagnostic,
)
from drctl.constants import ENV_CONFIG
from drctl.utils.fs import is_within

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = ["diagnose_config"]


def diagnose_config(
    cwd: str | os.PathLike[str] | None = None,
    *,
    config_path: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> ConfigDiagnostics:
    """Inspect all configured repositories without selecting one."""

    env_map = os.environ if environ is None else environ
    base = Path(os.path.abspath(cwd if cwd is not None else os.getcwd()))
    layers = load_config_layers(
        base,
        explicit_config_path=config_path,
        env_config_path=env_map.get(ENV_CONFIG),
        environ=env_map,
    )
    default_repo_name = layers.default_repo_name

    warnings: list[str] = []
    repos: list[RepoDiagnostic] = []
    for repo in layers.combined_repos().values():
        diagnostic = _diagnose_repo(repo)
        repos.append(diagnostic)
        if diagnostic.exists:
            warnings.extend(_template_warnings(repo, env_map))

    if not repos:
        warnings.append("No repositories configured. Create a .drctl.yaml to get started.")

    for diagnostic in repos:
        if not diagnostic.exists:
            warnings.append(
                f'Repository "{diagnostic.name}" points to missing path: {diagnostic.root}'
            )
        elif (
            not diagnostic.git_initialized
            and diagnostic.git_mode_source is GitModeSource.DETECTED
        ):
            warnings.append(
                f'Repository "{diagnostic.name}" is not a git repository. '
                f'Run "drctl repo bootstrap {diagnostic.name}" to initialise git.'
            )

    if len(repos) > 1 and default_repo_name is None:
        warnings.append("Multiple repositories configured but no defaultRepo specified.")

    return ConfigDiagnostics(
        cwd=base,
        repos=tuple(repos),
        warnings=tuple(warnings),
        local_config_path=(
            layers.local_config_path
            if layers.local_config_path is not None and layers.local_config_path.is_file()
            else None
        ),
        global_config_path=layers.global_config_path,
        default_repo_name=default_repo_name,
    )


def _diagnose_repo(repo: NormalizedRepo) -> RepoDiagnostic:
    exists = repo.root.exists()
    git_root = find_git_root(repo.root) if exists else None
    resolution = resolve_git_mode(repo.root, git_config=repo.git_mode)
    return RepoDiagnostic(
        name=repo.name,
        root=repo.root,
        definition_source=repo.definition_source,
        config_path=repo.config_path,
        exists=exists,
        git_initialized=git_root is not None,
        git_mode=resolution.mode,
        git_mode_source=resolution.source,
        domain_map=dict(repo.domain_map),
        default_domain_dir=repo.default_domain_dir,
        default_template=repo.default_template,
        review_policy=repo.review_policy,
        git_root=git_root,
    )


def _template_warnings(repo: NormalizedRepo, environ: Mapping[str, str]) -> list[str]:
    if repo.default_template is None:
        return []
    template_path = resolve_template_path(repo.root, repo.default_template, environ=environ)
    if not template_path.exists():
        return [f'Template "{repo.default_template}" not found for repository "{repo.name}".']
    if not is_within(template_path, repo.root):
        return [
            f'Template "{repo.default_template}" for repository "{repo.name}" '
            f"is outside the repo root ({template_path})."
        ]
    return []
