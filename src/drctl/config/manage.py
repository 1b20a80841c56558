"""
drctl — config file editing for ``drctl repo new`` and ``drctl repo switch``.

File: src/drctl/config/manage.py
Last updated: 2026-10-19

Purpose
- Add repository entries and change ``defaultRepo`` in the nearest ``.drctl.yaml``.

Functional requirements
- A legacy flat ``repos`` block is rewritten into the keyed form on every write.
- Bare-string entries are rewritten as ``{path: <string>}``.
- Keys this module does not manage are written back unchanged.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
import yaml

from drctl.config.loader import (
    FLAT_REPO_KEYS,
    FlatRepos,
    classify_repos,
    find_local_config,
    read_config_document,
)
from drctl.config.paths import resolve_path
from drctl.config.resolver import RepoResolutionError
from drctl.constants import CONFIG_FILENAMES
from drctl.utils.fs import atomic_write

logger = structlog.get_logger(__name__)

__all__ = [
    "RepoEntryResult",
    "create_repo_entry",
    "normalize_repo_map",
    "switch_default_repo",
]


@dataclass(frozen=True, slots=True)
class RepoEntryResult:
    config_path: Path
    repo_root: Path


def create_repo_entry(
    cwd: str | os.PathLike[str],
    name: str,
    repo_path: str,
    *,
    set_default: bool = False,
    default_domain_dir: str | None = None,
    config_path: str | None = None,
) -> RepoEntryResult:
    """Add or replace repo ``name`` in the nearest (or explicit) config file."""

    base = Path(os.path.abspath(cwd))
    target = _target_config(base, config_path)
    document = read_config_document(target) if target.is_file() else {}

    repos = normalize_repo_map(document.get("repos"))
    entry: dict[str, Any] = {"path": repo_path}
    if default_domain_dir:
        entry["defaultDomainDir"] = default_domain_dir
    repos[name] = entry
    document["repos"] = repos
    if set_default:
        document["defaultRepo"] = name

    _write_document(target, document)
    logger.info("config.repo_added", name=name, config_path=str(target), default=set_default)
    return RepoEntryResult(config_path=target, repo_root=resolve_path(repo_path, target.parent))


def switch_default_repo(
    cwd: str | os.PathLike[str],
    name: str,
    *,
    config_path: str | None = None,
) -> Path:
    """Set ``defaultRepo`` to ``name``; the repo must be defined in that file."""

    base = Path(os.path.abspath(cwd))
    target = _target_config(base, config_path)
    if not target.is_file():
        raise RepoResolutionError(f"No config file found at {target}. Run drctl repo new first.")
    document = read_config_document(target)
    repos = normalize_repo_map(document.get("repos"))
    if name not in repos:
        known = ", ".join(repos) or "none"
        raise RepoResolutionError(
            f'Repository "{name}" is not defined in {target} (known: {known}).'
        )
    document["repos"] = repos
    document["defaultRepo"] = name
    _write_document(target, document)
    logger.info("config.default_switched", name=name, config_path=str(target))
    return target


def normalize_repo_map(raw: object) -> dict[str, dict[str, Any]]:
    """Return ``repos`` in keyed form, converting the flat shape and string shorthands."""

    normalized: dict[str, dict[str, Any]] = {}
    if not isinstance(raw, Mapping):
        return normalized

    shape = classify_repos(raw)
    if isinstance(shape, FlatRepos):
        entry: dict[str, Any] = {"path": raw["path"]}
        if isinstance(raw.get("defaultDomainDir"), str):
            entry["defaultDomainDir"] = raw["defaultDomainDir"]
        if isinstance(raw.get("domains"), Mapping):
            entry["domains"] = dict(raw["domains"])
        normalized[shape.name] = entry

    for key, value in raw.items():
        if isinstance(shape, FlatRepos) and key in FLAT_REPO_KEYS:
            continue
        if isinstance(value, Mapping):
            normalized[str(key)] = dict(value)
        elif isinstance(value, str):
            normalized[str(key)] = {"path": value}
    return normalized


def _target_config(cwd: Path, config_path: str | None) -> Path:
    if config_path is not None and config_path.strip():
        return resolve_path(config_path.strip(), cwd)
    found = find_local_config(cwd)
    return found if found is not None else cwd / CONFIG_FILENAMES[0]


def _write_document(path: Path, document: Mapping[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    text = yaml.safe_dump(
        dict(document),
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        width=100,
    )
    atomic_write(path, text)
