"""Unit tests for repository-wide validation with file paths attached."""

from __future__ import annotations

from pathlib import Path

from drctl.config.schema import RepoContext
from drctl.governance import IssueCode, has_errors, validate_repository


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_clean_repository(repo_context: RepoContext, repo_root: Path) -> None:
    _write(
        repo_root / "infra" / "DR--20250115--infra--a.md",
        "---\nid: DR--20250115--infra--a\nversion: '1.0'\nstatus: draft\n"
        "changeType: creation\n---\n\nbody\n",
    )

    assert validate_repository(repo_context) == []


def test_issues_carry_file_paths(repo_context: RepoContext, repo_root: Path) -> None:
    broken = repo_root / "infra" / "DR--20250115--infra--a.md"
    _write(
        broken,
        "---\nid: DR--20250115--infra--a\nstatus: superseded\nchangeType: supersession\n---\n",
    )

    (issue,) = validate_repository(repo_context)

    assert issue.code is IssueCode.MISSING_SUPERSEDE_LINK
    assert issue.file_path == broken
    assert issue.to_dict()["filePath"] == str(broken)
    assert has_errors([issue])


def test_duplicate_ids_across_directories(repo_context: RepoContext, repo_root: Path) -> None:
    text = "---\nid: DR--20250115--infra--a\nstatus: draft\nchangeType: creation\n---\n"
    _write(repo_root / "infra" / "a.md", text)
    _write(repo_root / "archive" / "a-copy.md", text)

    issues = validate_repository(repo_context)

    assert [issue.code for issue in issues] == [IssueCode.DUPLICATE_ID]
    assert issues[0].file_path == repo_root / "archive" / "a-copy.md"


def test_missing_id_has_no_path(repo_context: RepoContext, repo_root: Path) -> None:
    _write(repo_root / "infra" / "x.md", "---\nstatus: draft\nchangeType: creation\n---\n")

    (issue,) = validate_repository(repo_context)

    assert issue.code is IssueCode.MISSING_ID
    assert issue.file_path is None
    assert issue.to_dict()["filePath"] is None


def test_empty_repository(repo_context: RepoContext) -> None:
    assert validate_repository(repo_context) == []
