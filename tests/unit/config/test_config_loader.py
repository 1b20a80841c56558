"""
drctl — unit tests for the layered config loader

File: tests/unit/config/test_config_loader.py
Last updated: 2026-10-19

Purpose
- Validate discovery and parsing of local and global ``.drctl.yaml`` layers.

What this test file should cover
- Upward local discovery and the explicit/env override of it.
- Keyed and legacy flat ``repos`` shapes, string shorthands, skipped entries.
- Review policy coercion and git mode spellings.
- Local-over-global shadowing and ``defaultRepo`` precedence.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from drctl.config.loader import (
    ConfigLoadError,
    FlatRepos,
    KeyedRepos,
    classify_repos,
    find_local_config,
    load_config_layer,
    load_config_layers,
)
from drctl.config.schema import GitMode, RepoDefinitionSource, RepoResolutionSource, ReviewPolicy
from drctl.domain.models import ReviewType


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


KEYED_CONFIG = """\
defaultRepo: work
repos:
  work:
    path: ./work-decisions
    defaultDomainDir: domains
    domains:
      infra: platform/infra
      ops:
        dir: operations
    template: templates/custom.md
    git: off
    reviewPolicy:
      defaultType: scheduled
      intervalMonths: 6
      warnBeforeDays: 14
  personal: ~/personal-decisions
  broken: 42
  nopath:
    domains: {}
"""


def test_find_local_config_searches_ancestors(tmp_path: Path) -> None:
    config = _write(tmp_path / "proj" / ".drctl.yml", "repos: {}\n")
    nested = tmp_path / "proj" / "a" / "b"
    nested.mkdir(parents=True)

    assert find_local_config(nested) == config


def test_find_local_config_prefers_yaml_extension(tmp_path: Path) -> None:
    preferred = _write(tmp_path / ".drctl.yaml", "repos: {}\n")
    _write(tmp_path / ".drctl.yml", "repos: {}\n")

    assert find_local_config(tmp_path) == preferred


def test_keyed_repos_are_normalized(tmp_path: Path, home_dir: Path) -> None:
    config = _write(tmp_path / "proj" / ".drctl.yaml", KEYED_CONFIG)

    layer = load_config_layer(config, RepoDefinitionSource.LOCAL)

    assert sorted(layer.repos) == ["personal", "work"]
    assert layer.default_repo == "work"

    work = layer.repos["work"]
    assert work.root == tmp_path / "proj" / "work-decisions"
    assert work.config_path == config
    assert work.definition_source is RepoDefinitionSource.LOCAL
    assert work.domain_map == {"infra": "platform/infra", "ops": "operations"}
    assert work.default_domain_dir == "domains"
    assert work.default_template == "templates/custom.md"
    assert work.git_mode is GitMode.DISABLED
    assert work.review_policy == ReviewPolicy(
        default_type=ReviewType.SCHEDULED,
        interval_months=6,
        warn_before_days=14,
    )

    personal = layer.repos["personal"]
    assert personal.root == home_dir / "personal-decisions"
    assert personal.domain_map == {}
    assert personal.review_policy is None
    assert personal.git_mode is None


def test_alternate_path_keys_are_accepted(tmp_path: Path) -> None:
    config = _write(
        tmp_path / ".drctl.yaml",
        "repos:\n  a:\n    root: ./ra\n  b:\n    directory: ./rb\n  c:\n    dir: ./rc\n"
        "  d:\n    path: ./rd\n    domainRoot: nested\n",
    )

    layer = load_config_layer(config, RepoDefinitionSource.GLOBAL)

    assert {name: repo.root for name, repo in layer.repos.items()} == {
        "a": tmp_path / "ra",
        "b": tmp_path / "rb",
        "c": tmp_path / "rc",
        "d": tmp_path / "rd",
    }
    assert layer.repos["d"].default_domain_dir == "nested"


def test_flat_repos_shape(tmp_path: Path) -> None:
    config = _write(
        tmp_path / "proj" / ".drctl.yaml",
        "repos:\n  name: solo\n  path: ../solo-root\n  defaultDomainDir: dr\n"
        "  domains:\n    api: services/api\n",
    )

    layer = load_config_layer(config, RepoDefinitionSource.LOCAL)

    assert list(layer.repos) == ["solo"]
    solo = layer.repos["solo"]
    assert solo.root == tmp_path / "solo-root"
    assert solo.default_domain_dir == "dr"
    assert solo.domain_map == {"api": "services/api"}


def test_classify_repos_tags_both_shapes() -> None:
    assert isinstance(classify_repos({"name": "solo", "path": "./x"}), FlatRepos)
    assert isinstance(classify_repos({"solo": {"path": "./x"}}), KeyedRepos)
    # A mapping with extra keys is keyed even when it has name/path entries.
    assert isinstance(classify_repos({"name": "solo", "path": "./x", "other": "./y"}), KeyedRepos)
    assert classify_repos({}) is None
    assert classify_repos(["a"]) is None


def test_env_vars_expand_in_repo_paths(tmp_path: Path) -> None:
    config = _write(tmp_path / ".drctl.yaml", "repos:\n  team: ${TEAM_ROOT}/decisions\n")

    layer = load_config_layer(
        config,
        RepoDefinitionSource.LOCAL,
        environ={"TEAM_ROOT": str(tmp_path / "team")},
    )

    assert layer.repos["team"].root == tmp_path / "team" / "decisions"


def test_invalid_review_policy_values_are_dropped(tmp_path: Path) -> None:
    config = _write(
        tmp_path / ".drctl.yaml",
        "repos:\n  work:\n    path: ./w\n    review_policy:\n      defaultType: yearly\n"
        "      intervalMonths: 0\n      warnBeforeDays: -1\n",
    )

    layer = load_config_layer(config, RepoDefinitionSource.LOCAL)

    assert layer.repos["work"].review_policy is None


def test_invalid_yaml_names_the_file(tmp_path: Path) -> None:
    config = _write(tmp_path / ".drctl.yaml", "repos: [unclosed\n")

    with pytest.raises(ConfigLoadError, match=r"\.drctl\.yaml"):
        load_config_layer(config, RepoDefinitionSource.LOCAL)


def test_non_mapping_document_is_empty(tmp_path: Path) -> None:
    config = _write(tmp_path / ".drctl.yaml", "- just\n- a list\n")

    layer = load_config_layer(config, RepoDefinitionSource.LOCAL)

    assert layer.repos == {}
    assert layer.default_repo is None


def test_local_layer_shadows_global(tmp_path: Path, home_dir: Path) -> None:
    _write(
        home_dir / ".config" / "drctl" / "config.yaml",
        "defaultRepo: shared\nrepos:\n  shared: ./global-shared\n  personal: ./personal\n",
    )
    project = tmp_path / "proj"
    _write(project / ".drctl.yaml", "repos:\n  shared: ./local-shared\n")

    layers = load_config_layers(project)
    combined = layers.combined_repos()

    assert layers.global_config_path == home_dir / ".config" / "drctl" / "config.yaml"
    assert layers.local_config_path == project / ".drctl.yaml"
    assert combined["shared"].root == project / "local-shared"
    assert combined["shared"].definition_source is RepoDefinitionSource.LOCAL
    assert combined["personal"].definition_source is RepoDefinitionSource.GLOBAL
    assert layers.default_repo_name == "shared"
    assert layers.default_repo_source("shared") is RepoResolutionSource.LOCAL_CONFIG
    assert layers.default_repo_source("personal") is RepoResolutionSource.GLOBAL_CONFIG


def test_local_default_repo_wins(tmp_path: Path, home_dir: Path) -> None:
    _write(home_dir / ".drctl.yaml", "defaultRepo: personal\nrepos:\n  personal: ./p\n")
    project = tmp_path / "proj"
    _write(project / ".drctl.yaml", "defaultRepo: work\nrepos:\n  work: ./w\n")

    layers = load_config_layers(project)

    assert layers.default_repo_name == "work"


def test_explicit_config_path_skips_global_layer(tmp_path: Path, home_dir: Path) -> None:
    _write(home_dir / ".drctl.yaml", "repos:\n  personal: ./p\n")
    project = tmp_path / "proj"
    project.mkdir()

    layers = load_config_layers(project, explicit_config_path="./missing.yaml")

    assert layers.local_config_path == project / "missing.yaml"
    assert layers.local is None
    assert layers.global_layer is None
    assert layers.combined_repos() == {}


def test_env_config_path_is_used_when_no_explicit_path(tmp_path: Path) -> None:
    config = _write(tmp_path / "configs" / "team.yaml", "repos:\n  team: ./team\n")
    project = tmp_path / "proj"
    project.mkdir()

    layers = load_config_layers(project, env_config_path=str(config))

    assert layers.local_config_path == config
    assert list(layers.combined_repos()) == ["team"]


def test_explicit_config_path_beats_env(tmp_path: Path) -> None:
    explicit = _write(tmp_path / "explicit.yaml", "repos:\n  a: ./a\n")
    from_env = _write(tmp_path / "env.yaml", "repos:\n  b: ./b\n")

    layers = load_config_layers(
        tmp_path,
        explicit_config_path=str(explicit),
        env_config_path=str(from_env),
    )

    assert list(layers.combined_repos()) == ["a"]
