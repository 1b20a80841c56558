"""
drctl — configuration and repository-context shapes.

File: src/drctl/config/schema.py
Last updated: 2026-10-19

Purpose
- Define the normalized shapes produced by the config loader and consumed by the resolver.
- Define the resolved ``RepoContext`` that every command receives.

What should be included in this file
- Provenance enums (resolution source, definition layer, git mode source).
- Frozen dataclasses for normalized repos, layers, review policy, and diagnostics.

Non-functional requirements
- No filesystem access here; this module is pure data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from drctl.domain.models import ReviewType

if TYPE_CHECKING:
    from pathlib import Path

__all__ = [
    "ConfigDiagnostics",
    "ConfigLayer",
    "GitMode",
    "GitModeSource",
    "NormalizedRepo",
    "RepoContext",
    "RepoDefinitionSource",
    "RepoDiagnostic",
    "RepoResolutionSource",
    "ReviewPolicy",
]


class GitMode(StrEnum):
    ENABLED = "enabled"
    DISABLED = "disabled"


class GitModeSource(StrEnum):
    CLI = "cli"
    ENV = "env"
    CONFIG = "config"
    DETECTED = "detected"


class RepoDefinitionSource(StrEnum):
    LOCAL = "local"
    GLOBAL = "global"


class RepoResolutionSource(StrEnum):
    """How the active repository was selected for this invocation."""

    CLI = "cli"
    ENV = "env"
    LOCAL_CONFIG = "local-config"
    GLOBAL_CONFIG = "global-config"
    FALLBACK_CWD = "fallback-cwd"
    FALLBACK_HOME = "fallback-home"

    @classmethod
    def from_definition(cls, source: RepoDefinitionSource) -> RepoResolutionSource:
        if source is RepoDefinitionSource.LOCAL:
            return cls.LOCAL_CONFIG
        return cls.GLOBAL_CONFIG


@dataclass(frozen=True, slots=True)
class ReviewPolicy:
    """Per-repository review defaults (``reviewPolicy`` in ``.drctl.yaml``)."""

    default_type: ReviewType | None = None
    interval_months: int | None = None
    warn_before_days: int | None = None

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {}
        if self.default_type is not None:
            payload["defaultType"] = self.default_type.value
        if self.interval_months is not None:
            payload["intervalMonths"] = self.interval_months
        if self.warn_before_days is not None:
            payload["warnBeforeDays"] = self.warn_before_days
        return payload


@dataclass(frozen=True, slots=True)
class NormalizedRepo:
    """One named repository entry from a single config layer."""

    name: str
    root: Path
    definition_source: RepoDefinitionSource
    config_path: Path
    domain_map: dict[str, str] = field(default_factory=dict)
    default_domain_dir: str | None = None
    default_template: str | None = None
    review_policy: ReviewPolicy | None = None
    git_mode: GitMode | None = None


@dataclass(frozen=True, slots=True)
class ConfigLayer:
    """A parsed ``.drctl.yaml`` file (local or global)."""

    path: Path
    source: RepoDefinitionSource
    repos: dict[str, NormalizedRepo] = field(default_factory=dict)
    default_repo: str | None = None


@dataclass(frozen=True, slots=True)
class RepoContext:
    """Fully resolved target repository for one command invocation."""

    root: Path
    source: RepoResolutionSource
    name: str | None = None
    definition_source: RepoDefinitionSource | None = None
    config_path: Path | None = None
    domain_map: dict[str, str] = field(default_factory=dict)
    default_domain_dir: str | None = None
    default_template: str | None = None
    review_policy: ReviewPolicy | None = None
    git_mode: GitMode = GitMode.DISABLED
    git_mode_source: GitModeSource = GitModeSource.DETECTED
    git_mode_override_cleared: GitModeSource | None = None
    git_root: Path | None = None

    @property
    def git_cwd(self) -> Path:
        """Working directory for git invocations (the detected git root when known)."""

        return self.git_root if self.git_root is not None else self.root

    def to_dict(self) -> dict[str, object]:
        return {
            "root": str(self.root),
            "name": self.name,
            "source": self.source.value,
            "definitionSource": (
                self.definition_source.value if self.definition_source is not None else None
            ),
            "configPath": str(self.config_path) if self.config_path is not None else None,
            "domainMap": dict(sorted(self.domain_map.items())),
            "defaultDomainDir": self.default_domain_dir,
            "defaultTemplate": self.default_template,
            "reviewPolicy": self.review_policy.to_dict() if self.review_policy else None,
            "gitMode": self.git_mode.value,
            "gitModeSource": self.git_mode_source.value,
            "gitModeOverrideCleared": (
                self.git_mode_override_cleared.value
                if self.git_mode_override_cleared is not None
                else None
            ),
            "gitRoot": str(self.git_root) if self.git_root is not None else None,
        }


@dataclass(frozen=True, slots=True)
class RepoDiagnostic:
    name: str
    root: Path
    definition_source: RepoDefinitionSource
    config_path: Path
    exists: bool
    git_initialized: bool
    git_mode: GitMode
    git_mode_source: GitModeSource
    domain_map: dict[str, str] = field(default_factory=dict)
    default_domain_dir: str | None = None
    default_template: str | None = None
    review_policy: ReviewPolicy | None = None
    git_root: Path | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "root": str(self.root),
            "definitionSource": self.definition_source.value,
            "configPath": str(self.config_path),
            "exists": self.exists,
            "gitInitialized": self.git_initialized,
            "gitMode": self.git_mode.value,
            "gitModeSource": self.git_mode_source.value,
            "gitRoot": str(self.git_root) if self.git_root is not None else None,
            "domainMap": dict(sorted(self.domain_map.items())),
            "defaultDomainDir": self.default_domain_dir,
            "defaultTemplate": self.default_template,
            "reviewPolicy": self.review_policy.to_dict() if self.review_policy else None,
        }


@dataclass(frozen=True, slots=True)
class ConfigDiagnostics:
    """Read-only report over every configured repository."""

    cwd: Path
    repos: tuple[RepoDiagnostic, ...]
    warnings: tuple[str, ...]
    errors: tuple[str, ...] = ()
    local_config_path: Path | None = None
    global_config_path: Path | None = None
    default_repo_name: str | None = None

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, object]:
        return {
            "cwd": str(self.cwd),
            "localConfigPath": (
                str(self.local_config_path) if self.local_config_path is not None else None
            ),
            "globalConfigPath": (
                str(self.global_config_path) if self.global_config_path is not None else None
            ),
            "defaultRepoName": self.default_repo_name,
            "repos": [repo.to_dict() for repo in self.repos],
            "warnings": list(self.warnings),
            "errors": list(self.errors),
        }
