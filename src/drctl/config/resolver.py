"""
drctl — repository context resolution.

File: src/drctl/config/resolver.py
Last updated: 2026-10-19

Purpose
- Pick exactly one target repository per invocation and attach its git mode.

What should be included in this file
- Requested-name selection: ``--repo`` > ``DRCTL_REPO`` > merged ``defaultRepo``.
- Path-like selectors that are not configured names resolve as literal directories.
- Single-repo inference, the multi-repo ambiguity error, and the filesystem fallback.
- Domain directory mapping for a resolved context.

Functional requirements
- Unknown names supplied via flag or env fail; an unknown ``defaultRepo`` falls through.
- Git mode precedence is ``--git/--no-git`` > ``DRCTL_GIT`` > repo ``git`` value > detection.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from drctl.config.git_mode import coerce_git_mode, resolve_git_mode
from drctl.config.loader import ConfigLayers, load_config_layers
from drctl.config.paths import looks_like_path, resolve_path, select_fallback_root
from drctl.config.schema import GitMode, NormalizedRepo, RepoContext, RepoResolutionSource
from drctl.constants import ENV_CONFIG, ENV_GIT, ENV_REPO

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = structlog.get_logger(__name__)

__all__ = [
    "RepoResolutionError",
    "ResolveRepoOptions",
    "build_context",
    "resolve_domain_dir",
    "resolve_repo_context",
]


class RepoResolutionError(ValueError):
    """Raised when no single repository can be selected."""


@dataclass(frozen=True, slots=True)
class ResolveRepoOptions:
    """Inputs for ``resolve_repo_context``.

    ``env_repo`` falls back to ``DRCTL_REPO`` in ``environ`` when left as None.
    """

    repo_flag: str | None = None
    env_repo: str | None = None
    cwd: str | os.PathLike[str] | None = None
    config_path: str | None = None
    git_mode_flag: GitMode | None = None
    environ: Mapping[str, str] | None = None


@dataclass(frozen=True, slots=True)
class _RequestedRepo:
    name: str
    source: RepoResolutionSource | None
    explicit: bool


def resolve_repo_context(options: ResolveRepoOptions | None = None) -> RepoContext:
    """Resolve the single repository this invocation targets."""

    opts = options if options is not None else ResolveRepoOptions()
    env_map = os.environ if opts.environ is None else opts.environ
    cwd = Path(os.path.abspath(opts.cwd if opts.cwd is not None else os.getcwd()))

    layers = load_config_layers(
        cwd,
        explicit_config_path=opts.config_path,
        env_config_path=env_map.get(ENV_CONFIG),
        environ=env_map,
    )
    env_repo = opts.env_repo if opts.env_repo is not None else env_map.get(ENV_REPO)
    requested = _requested_repo(_sanitize(opts.repo_flag), _sanitize(env_repo), layers)

    context, repo = _select_context(requested, layers, cwd, env_map)
    context = _attach_git_mode(
        context,
        git_flag=opts.git_mode_flag,
        git_env=coerce_git_mode(env_map.get(ENV_GIT)),
        git_config=repo.git_mode if repo is not None else None,
    )
    logger.debug(
        "repo.resolved",
        name=context.name,
        root=str(context.root),
        source=context.source.value,
        git_mode=context.git_mode.value,
        git_mode_source=context.git_mode_source.value,
    )
    return context


def resolve_domain_dir(context: RepoContext, domain: str) -> Path:
    """Return the absolute directory holding records for ``domain``."""

    override = context.domain_map.get(domain)
    if override:
        relative = override
    elif context.default_domain_dir:
        relative = os.path.join(context.default_domain_dir, domain)
    else:
        relative = domain
    return Path(os.path.normpath(os.path.join(context.root, relative)))


def build_context(repo: NormalizedRepo, source: RepoResolutionSource) -> RepoContext:
    """Project a configured repo into a context (git mode is attached separately)."""

    return RepoContext(
        root=repo.root,
        source=source,
        name=repo.name,
        definition_source=repo.definition_source,
        config_path=repo.config_path,
        domain_map=dict(repo.domain_map),
        default_domain_dir=repo.default_domain_dir,
        default_template=repo.default_template,
        review_policy=repo.review_policy,
    )


def _requested_repo(
    repo_flag: str | None,
    env_repo: str | None,
    layers: ConfigLayers,
) -> _RequestedRepo | None:
    default_name = layers.default_repo_name
    candidates = (
        (repo_flag, RepoResolutionSource.CLI, True),
        (env_repo, RepoResolutionSource.ENV, True),
        (
            default_name,
            layers.default_repo_source(default_name) if default_name is not None else None,
            False,
        ),
    )
    for name, source, explicit in candidates:
        if name is not None:
            return _RequestedRepo(name=name, source=source, explicit=explicit)
    return None


def _select_context(
    requested: _RequestedRepo | None,
    layers: ConfigLayers,
    cwd: Path,
    environ: Mapping[str, str],
) -> tuple[RepoContext, NormalizedRepo | None]:
    repos = layers.combined_repos()

    if requested is not None:
        repo = repos.get(requested.name)
        if repo is not None:
            source = requested.source or RepoResolutionSource.from_definition(
                repo.definition_source
            )
            return build_context(repo, source), repo

        if looks_like_path(requested.name):
            root = resolve_path(requested.name, cwd, environ=environ)
            return RepoContext(root=root, source=requested.source or RepoResolutionSource.CLI), None

        if requested.explicit:
            raise RepoResolutionError(f'Repository "{requested.name}" not found in configuration')

        # An unknown defaultRepo is ignored; selection continues as if none were set.
        logger.debug("repo.default_unresolved", name=requested.name)

    if len(repos) == 1:
        (repo,) = repos.values()
        source = RepoResolutionSource.from_definition(repo.definition_source)
        return build_context(repo, source), repo

    if len(repos) > 1:
        names = ", ".join(repos)
        raise RepoResolutionError(
            f"Multiple repositories configured ({names}). Specify one with --repo or DRCTL_REPO."
        )

    root, source = select_fallback_root(cwd)
    return RepoContext(root=root, source=source), None


def _attach_git_mode(
    context: RepoContext,
    *,
    git_flag: GitMode | None,
    git_env: GitMode | None,
    git_config: GitMode | None,
) -> RepoContext:
    resolution = resolve_git_mode(
        context.root,
        git_flag=git_flag,
        git_env=git_env,
        git_config=git_config,
    )
    return replace(
        context,
        git_mode=resolution.mode,
        git_mode_source=resolution.source,
        git_mode_override_cleared=resolution.override_cleared,
        git_root=resolution.detected_git_root,
    )


def _sanitize(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None
