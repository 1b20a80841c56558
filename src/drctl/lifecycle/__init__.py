"""
drctl lifecycle package public API.

File: src/drctl/lifecycle/__init__.py
Last updated: 2026-10-19

Purpose
- Export the decision service, its result types, and the commit/template helpers it uses.
"""

from drctl.lifecycle.commits import (
    GitDisabledNotice,
    NotAGitRepositoryError,
    StagingAreaError,
    commit_if_enabled,
)
from drctl.lifecycle.service import (
    DecisionService,
    DecisionWriteResult,
    InvalidTransitionError,
    LifecycleError,
    RepoOptions,
    SupersedeResult,
)
from drctl.lifecycle.templates import (
    TEMPLATE_HYGIENE_PREFIX,
    collect_template_warnings,
    resolve_template_body,
)

__all__ = [
    "DecisionService",
    "DecisionWriteResult",
    "GitDisabledNotice",
    "InvalidTransitionError",
    "LifecycleError",
    "NotAGitRepositoryError",
    "RepoOptions",
    "StagingAreaError",
    "SupersedeResult",
    "TEMPLATE_HYGIENE_PREFIX",
    "collect_template_warnings",
    "commit_if_enabled",
    "resolve_template_body",
]
