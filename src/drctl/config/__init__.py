"""
drctl config package public API.

File: src/drctl/config/__init__.py
Last updated: 2026-10-19

Purpose
- Export config loading, repository context resolution, and diagnostics entrypoints.

Functional requirements
- Support layered ``.drctl.yaml`` files plus ``DRCTL_*`` environment overrides.
- Fail fast with clear load/resolution errors.
"""

from drctl.config.diagnostics import diagnose_config
from drctl.config.git_mode import (
    GitModeResolution,
    coerce_git_mode,
    find_git_root,
    resolve_git_mode,
)
from drctl.config.loader import ConfigLayers, ConfigLoadError, load_config_layers
from drctl.config.manage import create_repo_entry, switch_default_repo
from drctl.config.paths import (
    expand_env_vars,
    expand_tilde,
    looks_like_path,
    resolve_path,
    resolve_template_path,
    select_fallback_root,
)
from drctl.config.resolver import (
    RepoResolutionError,
    ResolveRepoOptions,
    resolve_domain_dir,
    resolve_repo_context,
)
from drctl.config.schema import (
    ConfigDiagnostics,
    GitMode,
    GitModeSource,
    NormalizedRepo,
    RepoContext,
    RepoDefinitionSource,
    RepoDiagnostic,
    RepoResolutionSource,
    ReviewPolicy,
)

__all__ = [
    "ConfigDiagnostics",
    "ConfigLayers",
    "ConfigLoadError",
    "GitMode",
    "GitModeResolution",
    "GitModeSource",
    "NormalizedRepo",
    "RepoContext",
    "RepoDefinitionSource",
    "RepoDiagnostic",
    "RepoResolutionError",
    "RepoResolutionSource",
    "ResolveRepoOptions",
    "ReviewPolicy",
    "coerce_git_mode",
    "create_repo_entry",
    "diagnose_config",
    "expand_env_vars",
    "expand_tilde",
    "find_git_root",
    "load_config_layers",
    "looks_like_path",
    "resolve_domain_dir",
    "resolve_git_mode",
    "resolve_path",
    "resolve_repo_context",
    "resolve_template_path",
    "select_fallback_root",
    "switch_default_repo",
]
