"""
drctl — layered ``.drctl.yaml`` loader.

File: src/drctl/config/loader.py
Last updated: 2026-10-19

Purpose
- Locate the local and global config layers and parse them into ``NormalizedRepo`` entries.

What should be included in this file
- Local layer discovery: explicit path, ``DRCTL_CONFIG``, then upward search from cwd.
- Global layer discovery: home dotfiles, then ``~/.config/drctl/config.y(a)ml``.
- A tagged union over the two accepted ``repos`` shapes (keyed and legacy flat),
  resolved once into ``NormalizedRepo``.
- Repo path resolution relative to the config file's directory.

Functional requirements
- An explicit or env-provided config path need not exist; a missing file means no local layer.
- The global layer is consulted only when no explicit/env path steered the local search.
- Local entries shadow global entries of the same name; local ``defaultRepo`` wins.

Non-functional requirements
- Invalid YAML fails with ``ConfigLoadError`` naming the file; unknown keys are ignored.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final

import structlog
import yaml

from drctl.config.git_mode import coerce_git_mode
from drctl.config.paths import resolve_path
from drctl.config.schema import (
    ConfigLayer,
    NormalizedRepo,
    RepoDefinitionSource,
    RepoResolutionSource,
    ReviewPolicy,
)
from drctl.constants import CONFIG_FILENAMES, GLOBAL_CONFIG_DIR, GLOBAL_CONFIG_FILENAMES
from drctl.domain.models import ReviewType

_REPO_PATH_KEYS: Final[tuple[str, ...]] = ("path", "root", "directory", "dir")
_DOMAIN_PATH_KEYS: Final[tuple[str, ...]] = ("path", "dir", "directory")
_DEFAULT_DOMAIN_DIR_KEYS: Final[tuple[str, ...]] = ("defaultDomainDir", "domainRoot")
_REVIEW_POLICY_KEYS: Final[tuple[str, ...]] = ("reviewPolicy", "review_policy")
FLAT_REPO_KEYS: Final[frozenset[str]] = frozenset({"name", "path", "defaultDomainDir", "domains"})

logger = structlog.get_logger(__name__)

__all__ = [
    "ConfigLayers",
    "ConfigLoadError",
    "FLAT_REPO_KEYS",
    "FlatRepos",
    "KeyedRepos",
    "RawRepos",
    "classify_repos",
    "combine_repo_layers",
    "find_local_config",
    "global_config_candidates",
    "load_config_layer",
    "load_config_layers",
    "read_config_document",
]


class ConfigLoadError(ValueError):
    """Raised when a config file cannot be read or parsed."""


@dataclass(frozen=True, slots=True)
class KeyedRepos:
    """``repos: {<name>: {path: ..., ...}}`` — the canonical shape."""

    entries: Mapping[str, object]


@dataclass(frozen=True, slots=True)
class FlatRepos:
    """Legacy single-repo shape: ``repos: {name: <n>, path: <p>, ...}``."""

    name: str
    path: str
    default_domain_dir: str | None = None
    domains: Mapping[str, object] = field(default_factory=dict)


RawRepos = KeyedRepos | FlatRepos


@dataclass(frozen=True, slots=True)
class ConfigLayers:
    """Both config layers as discovered for one cwd."""

    local_config_path: Path | None = None
    local: ConfigLayer | None = None
    global_config_path: Path | None = None
    global_layer: ConfigLayer | None = None

    @property
    def default_repo_name(self) -> str | None:
        if self.local is not None and self.local.default_repo is not None:
            return self.local.default_repo
        if self.global_layer is not None:
            return self.global_layer.default_repo
        return None

    def combined_repos(self) -> dict[str, NormalizedRepo]:
        return combine_repo_layers(self.global_layer, self.local)

    def default_repo_source(self, name: str) -> RepoResolutionSource | None:
        """Provenance of ``name`` when it was selected through ``defaultRepo``."""

        if self.local is not None and name in self.local.repos:
            return RepoResolutionSource.LOCAL_CONFIG
        if self.global_layer is not None and name in self.global_layer.repos:
            return RepoResolutionSource.GLOBAL_CONFIG
        return None


def load_config_layers(
    cwd: str | os.PathLike[str],
    *,
    explicit_config_path: str | None = None,
    env_config_path: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> ConfigLayers:
    """Discover and parse the local and global layers for ``cwd``."""

    base = Path(os.path.abspath(cwd))
    explicit = _clean(explicit_config_path)
    from_env = _clean(env_config_path) if explicit is None else None

    steered = explicit if explicit is not None else from_env
    if steered is not None:
        local_path: Path | None = resolve_path(steered, base, environ=environ)
    else:
        local_path = find_local_config(base)

    local_layer = None
    if local_path is not None and local_path.is_file():
        local_layer = load_config_layer(local_path, RepoDefinitionSource.LOCAL, environ=environ)

    global_path = None if steered is not None else _first_existing(global_config_candidates())
    global_layer = None
    if global_path is not None:
        global_layer = load_config_layer(global_path, RepoDefinitionSource.GLOBAL, environ=environ)

    return ConfigLayers(
        local_config_path=local_path,
        local=local_layer,
        global_config_path=global_path,
        global_layer=global_layer,
    )


def find_local_config(start: str | os.PathLike[str]) -> Path | None:
    """Search ``start`` and its ancestors for ``.drctl.yaml`` / ``.drctl.yml``."""

    current = Path(os.path.abspath(start))
    while True:
        for filename in CONFIG_FILENAMES:
            candidate = current / filename
            if candidate.is_file():
                return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def global_config_candidates() -> tuple[Path, ...]:
    home = Path.home()
    dotfiles = tuple(home / filename for filename in CONFIG_FILENAMES)
    xdg_style = tuple(home / GLOBAL_CONFIG_DIR / filename for filename in GLOBAL_CONFIG_FILENAMES)
    return dotfiles + xdg_style


def read_config_document(path: Path) -> dict[str, Any]:
    """Parse a YAML config file; a non-mapping document is treated as empty."""

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigLoadError(f"invalid YAML in {path}: {exc}") from exc
    if not isinstance(parsed, dict):
        return {}
    return parsed


def load_config_layer(
    path: Path,
    source: RepoDefinitionSource,
    *,
    environ: Mapping[str, str] | None = None,
) -> ConfigLayer:
    raw = read_config_document(path)
    base_dir = path.parent
    repos: dict[str, NormalizedRepo] = {}

    shape = classify_repos(raw.get("repos"))
    if isinstance(shape, FlatRepos):
        flat = _normalize_flat(shape, base_dir, path, source, environ)
        repos[flat.name] = flat
    elif isinstance(shape, KeyedRepos):
        for name, value in shape.entries.items():
            normalized = _normalize_keyed(str(name), value, base_dir, path, source, environ)
            if normalized is not None:
                repos[normalized.name] = normalized

    layer = ConfigLayer(
        path=path,
        source=source,
        repos=repos,
        default_repo=_first_string(raw.get("defaultRepo")),
    )
    logger.debug(
        "config.layer_loaded",
        path=str(path),
        source=source.value,
        repos=sorted(repos),
        default_repo=layer.default_repo,
    )
    return layer


def classify_repos(raw: object) -> RawRepos | None:
    """Sniff the ``repos`` block once and return the matching tagged shape."""

    if not isinstance(raw, Mapping) or not raw:
        return None
    name = raw.get("name")
    path = raw.get("path")
    if (
        set(raw).issubset(FLAT_REPO_KEYS)
        and isinstance(name, str)
        and isinstance(path, str)
        and name.strip()
        and path.strip()
    ):
        domains = raw.get("domains")
        return FlatRepos(
            name=name.strip(),
            path=path.strip(),
            default_domain_dir=_first_string(raw.get("defaultDomainDir")),
            domains=domains if isinstance(domains, Mapping) else {},
        )
    return KeyedRepos(entries=raw)


def combine_repo_layers(
    global_layer: ConfigLayer | None,
    local_layer: ConfigLayer | None,
) -> dict[str, NormalizedRepo]:
    """Merge layers into one name map; local entries replace global ones."""

    combined: dict[str, NormalizedRepo] = {}
    for layer in (global_layer, local_layer):
        if layer is None:
            continue
        for repo in layer.repos.values():
            combined[repo.name] = repo
    return combined


def _normalize_flat(
    shape: FlatRepos,
    base_dir: Path,
    config_path: Path,
    source: RepoDefinitionSource,
    environ: Mapping[str, str] | None,
) -> NormalizedRepo:
    return NormalizedRepo(
        name=shape.name,
        root=resolve_path(shape.path, base_dir, environ=environ),
        definition_source=source,
        config_path=config_path,
        domain_map=_normalize_domains(shape.domains),
        default_domain_dir=shape.default_domain_dir,
    )


def _normalize_keyed(
    name: str,
    value: object,
    base_dir: Path,
    config_path: Path,
    source: RepoDefinitionSource,
    environ: Mapping[str, str] | None,
) -> NormalizedRepo | None:
    if isinstance(value, str):
        value = {"path": value}
    if not isinstance(value, Mapping):
        logger.debug("config.repo_skipped", name=name, reason="entry is not a mapping")
        return None

    path_text = _first_of(value, _REPO_PATH_KEYS)
    if path_text is None:
        logger.debug("config.repo_skipped", name=name, reason="no path/root/directory/dir")
        return None

    domains = value.get("domains")
    return NormalizedRepo(
        name=name,
        root=resolve_path(path_text, base_dir, environ=environ),
        definition_source=source,
        config_path=config_path,
        domain_map=_normalize_domains(domains if isinstance(domains, Mapping) else {}),
        default_domain_dir=_first_of(value, _DEFAULT_DOMAIN_DIR_KEYS),
        default_template=_first_string(value.get("template")),
        review_policy=_normalize_review_policy(value),
        git_mode=coerce_git_mode(value.get("git")),
    )


def _normalize_domains(raw: Mapping[str, object]) -> dict[str, str]:
    domain_map: dict[str, str] = {}
    for domain, domain_value in raw.items():
        if isinstance(domain_value, str):
            directory = _first_string(domain_value)
        elif isinstance(domain_value, Mapping):
            directory = _first_of(domain_value, _DOMAIN_PATH_KEYS)
        else:
            directory = None
        if directory is not None:
            domain_map[str(domain)] = directory
    return domain_map


def _normalize_review_policy(raw: Mapping[str, object]) -> ReviewPolicy | None:
    policy_raw: object = None
    for key in _REVIEW_POLICY_KEYS:
        if key in raw:
            policy_raw = raw[key]
            break
    if not isinstance(policy_raw, Mapping):
        return None

    default_type: ReviewType | None = None
    type_text = _first_string(policy_raw.get("defaultType"))
    if type_text is not None and type_text in {item.value for item in ReviewType}:
        default_type = ReviewType(type_text)

    interval = _int_at_least(policy_raw.get("intervalMonths"), minimum=1)
    warn_before = _int_at_least(policy_raw.get("warnBeforeDays"), minimum=0)
    if default_type is None and interval is None and warn_before is None:
        return None
    return ReviewPolicy(
        default_type=default_type,
        interval_months=interval,
        warn_before_days=warn_before,
    )


def _int_at_least(value: object, *, minimum: int) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if value >= minimum else None


def _first_of(raw: Mapping[str, object], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        found = _first_string(raw.get(key))
        if found is not None:
            return found
    return None


def _first_string(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _first_existing(paths: tuple[Path, ...]) -> Path | None:
    for candidate in paths:
        if candidate.is_file():
            return candidate
    return None
