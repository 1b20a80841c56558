"""Unit tests for template selection, in-repo copies, and hygiene warnings."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from drctl.config.schema import RepoContext
from drctl.domain.models import DecisionRecord
from drctl.lifecycle.templates import (
    DEFAULT_REQUIRED_HEADINGS,
    collect_template_warnings,
    emit_template_warnings,
    render_default_template,
    resolve_template_body,
)

RECORD_ID = "DR--20250115--infra--use-postgres"


def _record(template_used: str | None = None) -> DecisionRecord:
    return DecisionRecord(
        id=RECORD_ID,
        date_created="2025-01-15",
        version="1.0",
        status="draft",
        change_type="creation",
        domain="infra",
        slug="use-postgres",
        template_used=template_used,
    )


def test_default_template_has_every_heading() -> None:
    body = render_default_template(_record())

    assert body.startswith(f"# {RECORD_ID}\n\n")
    for heading in DEFAULT_REQUIRED_HEADINGS:
        assert f"\n{heading}\n" in body
    assert "| Option | Description | Outcome  | Rationale" in body
    assert "{{" not in body
    assert "{%" not in body


def test_candidate_order_prefers_explicit_path(repo_context: RepoContext, repo_root: Path) -> None:
    templates = repo_root / "templates"
    templates.mkdir()
    (templates / "flag.md").write_text("flag\n", encoding="utf-8")
    (templates / "env.md").write_text("env\n", encoding="utf-8")
    (templates / "repo.md").write_text("repo\n", encoding="utf-8")
    context = replace(repo_context, default_template="templates/repo.md")
    environ = {"DRCTL_TEMPLATE": "templates/env.md"}

    from_flag = resolve_template_body(
        _record(), context, template_path="templates/flag.md", environ=environ
    )
    from_env = resolve_template_body(_record(), context, environ=environ)
    from_repo = resolve_template_body(_record(), context, environ={})

    assert (from_flag.body, from_flag.template_used) == ("flag\n", "templates/flag.md")
    assert (from_env.body, from_env.template_used) == ("env\n", "templates/env.md")
    assert (from_repo.body, from_repo.template_used) == ("repo\n", "templates/repo.md")
    assert from_flag.copied_path is None


def test_explicit_env_template_argument_overrides_environ(
    repo_context: RepoContext, repo_root: Path
) -> None:
    (repo_root / "a.md").write_text("a\n", encoding="utf-8")

    resolved = resolve_template_body(
        _record(), repo_context, env_template="a.md", environ={"DRCTL_TEMPLATE": "missing.md"}
    )

    assert resolved.template_used == "a.md"


def test_missing_candidates_fall_back_to_default(repo_context: RepoContext) -> None:
    context = replace(repo_context, default_template="templates/gone.md")

    resolved = resolve_template_body(
        _record(), context, template_path="  ", environ={"DRCTL_TEMPLATE": "nope.md"}
    )

    assert resolved.template_used is None
    assert resolved.copied_path is None
    assert resolved.body == render_default_template(_record())


def test_external_template_is_copied_with_suffix_on_conflict(
    repo_context: RepoContext, repo_root: Path, tmp_path: Path
) -> None:
    external = tmp_path / "elsewhere" / "adr.md"
    external.parent.mkdir()
    external.write_text("external\n", encoding="utf-8")
    (repo_root / "templates").mkdir()
    (repo_root / "templates" / "adr.md").write_text("different\n", encoding="utf-8")
    (repo_root / "templates" / "adr-2.md").write_text("also different\n", encoding="utf-8")

    resolved = resolve_template_body(
        _record(), repo_context, template_path=str(external), environ={}
    )

    assert resolved.template_used == "templates/adr-3.md"
    assert resolved.copied_path == repo_root / "templates" / "adr-3.md"
    assert resolved.copied_path.read_text(encoding="utf-8") == "external\n"


def test_identical_copy_is_reused(
    repo_context: RepoContext, repo_root: Path, tmp_path: Path
) -> None:
    external = tmp_path / "elsewhere" / "adr.md"
    external.parent.mkdir()
    external.write_text("external\n", encoding="utf-8")
    (repo_root / "templates").mkdir()
    (repo_root / "templates" / "adr.md").write_text("external\n", encoding="utf-8")

    resolved = resolve_template_body(
        _record(), repo_context, template_path=str(external), environ={}
    )

    assert resolved.template_used == "templates/adr.md"
    assert resolved.copied_path is None


def test_default_body_reports_placeholders_and_table() -> None:
    record = _record()

    warnings = collect_template_warnings(record, render_default_template(record))

    assert warnings == [
        "Placeholder text from the default template is still present.",
        "The options table still contains placeholder rows.",
    ]


def test_filled_in_body_is_clean() -> None:
    body = "\n\n".join(f"{heading}\n\nWritten up." for heading in DEFAULT_REQUIRED_HEADINGS)

    assert collect_template_warnings(_record(), body) == []


def test_missing_headings_only_checked_for_default_template() -> None:
    body = "## 🧭 Context\n\nSome context.\n"

    default_warnings = collect_template_warnings(_record(), body)
    custom_warnings = collect_template_warnings(_record("templates/adr.md"), body)

    assert len(default_warnings) == 1
    assert default_warnings[0].startswith("Missing default template heading(s): ## ⚖️ Options")
    assert "## 🧭 Context," not in default_warnings[0]
    assert custom_warnings == []


def test_emit_prefixes_messages_and_calls_sink() -> None:
    seen: list[str] = []
    record = _record()

    messages = emit_template_warnings(record, render_default_template(record), seen.append)

    assert seen == messages
    assert all(message.startswith("Template hygiene: ") for message in messages)


def test_emit_without_sink_returns_messages() -> None:
    assert emit_template_warnings(_record("t.md"), "clean body\n", None) == []
