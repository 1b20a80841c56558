"""
drctl — CLI subprocess smoke contracts

File: tests/integration/test_cli_smoke.py
Last updated: 2026-10-19

Purpose
- Enforce end-to-end CLI behavior for ``python -m drctl`` in a fresh process.
- Verify exit codes, JSON output, files on disk, and git commits made by lifecycle commands.
"""

from __future__ import annotations

import json
import os
import shutil
import subprocess
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = PROJECT_ROOT / "src"

pytestmark = pytest.mark.integration

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not found")


def _run_cli(cwd: Path, *args: str) -> subprocess.CompletedProcess[str]:
    env = os.environ.copy()
    existing_pythonpath = env.get("PYTHONPATH")
    src_pythonpath = str(SRC_PATH)
    env["PYTHONPATH"] = (
        src_pythonpath
        if not existing_pythonpath
        else os.pathsep.join((src_pythonpath, existing_pythonpath))
    )
    env["PYTHONIOENCODING"] = "utf-8"
    env.setdefault("GIT_TERMINAL_PROMPT", "0")
    env.setdefault("GIT_CONFIG_NOSYSTEM", "1")
    return subprocess.run(
        [sys.executable, "-m", "drctl", *args],
        cwd=cwd,
        text=True,
        encoding="utf-8",
        capture_output=True,
        check=False,
        env=env,
    )


def _git(cwd: Path, *args: str) -> str:
    completed = subprocess.run(
        ["git", *args],
        cwd=cwd,
        text=True,
        capture_output=True,
        check=False,
    )
    if completed.returncode != 0:
        detail = completed.stderr.strip() or completed.stdout.strip()
        raise RuntimeError(f"git command failed: git {' '.join(args)}: {detail}")
    return completed.stdout


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root


def test_help_and_usage_errors(project: Path) -> None:
    help_result = _run_cli(project, "--help")
    assert help_result.returncode == 0
    assert "decision record CLI" in help_result.stdout

    unknown = _run_cli(project, "frobnicate")
    assert unknown.returncode == 2
    assert "invalid choice" in unknown.stderr

    bare = _run_cli(project)
    assert bare.returncode == 2
    assert "usage: drctl" in bare.stderr


def test_record_workflow_without_git(project: Path) -> None:
    created_repo = _run_cli(project, "repo", "new", "demo", "./decisions", "--default")
    assert created_repo.returncode == 0, created_repo.stderr
    assert (project / ".drctl.yaml").is_file()

    created = _run_cli(project, "decision", "new", "infra", "use-postgres", "--no-git")
    assert created.returncode == 0, created.stderr
    created_line = next(
        line for line in created.stdout.splitlines() if line.startswith("✅ Created ")
    )
    record_id = created_line.split()[2]
    assert record_id.endswith("--infra--use-postgres")

    accepted = _run_cli(project, "decision", "accept", record_id, "--no-git")
    assert accepted.returncode == 0, accepted.stderr
    assert "Template hygiene:" in accepted.stderr

    validated = _run_cli(project, "governance", "validate", "--json")
    assert validated.returncode == 0, validated.stderr
    assert json.loads(validated.stdout) == {"repo": "demo", "issues": []}

    indexed = _run_cli(project, "index")
    assert indexed.returncode == 0, indexed.stderr
    index_text = (project / "decisions" / "index.md").read_text(encoding="utf-8")
    assert f"1. [{record_id}](./infra/{record_id}.md)" in index_text

    listed = _run_cli(project, "decision", "list", "--json")
    assert listed.returncode == 0, listed.stderr
    (record,) = json.loads(listed.stdout)["decisions"]
    assert record["status"] == "accepted"
    assert [entry["note"] for entry in record["changelog"]] == [
        "Initial creation",
        "Marked as draft",
        "Marked as proposed",
        "Marked as accepted",
    ]


def test_error_exit_codes(project: Path) -> None:
    _run_cli(project, "repo", "new", "demo", "./decisions")

    missing = _run_cli(project, "decision", "accept", "DR--20250101--infra--nope", "--no-git")
    assert missing.returncode == 1
    assert missing.stderr.startswith("error: ")

    unknown_repo = _run_cli(project, "decision", "list", "--repo", "nope")
    assert unknown_repo.returncode == 2
    assert 'Repository "nope" not found in configuration' in unknown_repo.stderr


@requires_git
def test_bootstrap_then_commits_each_operation(project: Path) -> None:
    assert _run_cli(project, "repo", "new", "demo", "./decisions").returncode == 0

    bootstrap = _run_cli(project, "repo", "bootstrap", "demo")
    assert bootstrap.returncode == 0, bootstrap.stderr
    assert "✅ Initialised git repository at" in bootstrap.stdout
    assert (project / "decisions" / ".git").is_dir()

    again = _run_cli(project, "repo", "bootstrap", "demo")
    assert "✅ Git already initialised at" in again.stdout

    created = _run_cli(project, "decision", "new", "infra", "cache")
    assert created.returncode == 0, created.stderr
    assert "   Git: enabled (auto)" in created.stdout
    record_id = next(
        line for line in created.stdout.splitlines() if line.startswith("✅ Created ")
    ).split()[2]

    proposed = _run_cli(project, "decision", "propose", record_id)
    assert proposed.returncode == 0, proposed.stderr

    log = _git(project / "decisions", "log", "--format=%s").splitlines()
    assert log == [
        f"drctl: propose {record_id}",
        f"drctl: draft {record_id}",
        f"drctl: create {record_id}",
    ]
    assert _git(project / "decisions", "status", "--porcelain").strip() == ""


@requires_git
def test_unrelated_staged_changes_block_commit(project: Path) -> None:
    _run_cli(project, "repo", "new", "demo", "./decisions")
    _run_cli(project, "repo", "bootstrap", "demo")
    stray = project / "decisions" / "notes.txt"
    stray.write_text("work in progress\n", encoding="utf-8")
    _git(project / "decisions", "add", "notes.txt")

    result = _run_cli(project, "decision", "new", "infra", "cache")

    assert result.returncode == 3
    assert "Staging area contains unrelated changes" in result.stderr
    assert "notes.txt" in result.stderr
