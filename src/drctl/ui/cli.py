"""Command-line interface router for drctl."""

from __future__ import annotations

import argparse
import json
import os
import sys
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from drctl.config import (
    GitMode,
    GitModeSource,
    RepoContext,
    RepoResolutionSource,
    ResolveRepoOptions,
    create_repo_entry,
    diagnose_config,
    resolve_repo_context,
    switch_default_repo,
)
from drctl.config.schema import ConfigDiagnostics, RepoDefinitionSource
from drctl.constants import DEFAULT_INDEX_FILENAME
from drctl.domain.models import ReviewOutcome, ReviewType
from drctl.governance import Severity, validate_repository
from drctl.indexing import generate_index
from drctl.integration import init_git_repo
from drctl.lifecycle import DecisionService, DecisionWriteResult, GitDisabledNotice
from drctl.observability import configure_logging
from drctl.ui.render import CLIRenderer, create_renderer

__all__ = [
    "CLIError",
    "LegacyNoticeState",
    "build_parser",
    "format_repo_context",
    "main",
    "run_cli",
]

LIST_ID_WIDTH: Final[int] = 45
LIST_STATUS_WIDTH: Final[int] = 10
FALLBACK_NOTE: Final[str] = (
    "   Note: No .drctl.yaml found. Create one to configure multiple decision repos."
)

_TOP_LEVEL_COMMANDS: Final[str] = "{repo,config,decision,dr,governance,index}"


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = 1

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class LegacyNoticeState:
    """Tracks which legacy top-level commands already printed their move notice."""

    shown: set[str] = field(default_factory=set)

    def emit(self, legacy_name: str, renderer: CLIRenderer) -> bool:
        if legacy_name in self.shown:
            return False
        self.shown.add(legacy_name)
        renderer.warning(
            f'The "{legacy_name}" command is moving under "drctl decision {legacy_name}". '
            "Update scripts to use the new form; this top-level command will be removed "
            "in a future release."
        )
        return True


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _add_global_options(parser: argparse.ArgumentParser, *, suppress: bool) -> None:
    """Register options accepted both before and after the subcommand.

    Subcommand copies default to ``SUPPRESS`` so they never clobber a value given
    before the subcommand.
    """

    def default(value: object) -> object:
        return argparse.SUPPRESS if suppress else value

    parser.add_argument(
        "--repo",
        default=default(None),
        help="Target repo alias or path (overrides DRCTL_REPO and defaultRepo).",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        default=default(None),
        help="Path to a .drctl.yaml file (overrides DRCTL_CONFIG and discovery).",
    )
    git_group = parser.add_mutually_exclusive_group()
    git_group.add_argument(
        "--git",
        dest="git_mode",
        action="store_const",
        const=GitMode.ENABLED.value,
        default=default(None),
        help="Force git commits on for this invocation.",
    )
    git_group.add_argument(
        "--no-git",
        dest="git_mode",
        action="store_const",
        const=GitMode.DISABLED.value,
        default=default(None),
        help="Skip git commits (ignored when the repo is already a git work tree).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=default(False),
        help="Show debug logging on stderr.",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        default=default(False),
        help="Disable colored output (also respects NO_COLOR env var).",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="drctl",
        description=(
            "drctl — decision record CLI.\n\n"
            "Common workflows:\n"
            "  drctl decision new <domain> <slug>   Create a draft decision record\n"
            "  drctl decision accept <id>           Accept a decision (backfills propose)\n"
            "  drctl governance validate            Check records for defects\n"
            "  drctl config check                   Inspect configuration files\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    _add_global_options(parser, suppress=False)
    parser.set_defaults(legacy_name=None, json=False)

    common = argparse.ArgumentParser(add_help=False)
    _add_global_options(common, suppress=True)

    subparsers = parser.add_subparsers(dest="command", metavar=_TOP_LEVEL_COMMANDS)

    # repo ----------------------------------------------------------------
    repo_parser = subparsers.add_parser(
        "repo",
        parents=[common],
        help="Show or manage repository configuration",
        description=(
            "Show or manage repository configuration.\n\n"
            "Tip: Use --config <path> or DRCTL_CONFIG to target a specific .drctl.yaml "
            "when running repo commands."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    repo_parser.set_defaults(handler=_cmd_repo_show)
    repo_sub = repo_parser.add_subparsers(dest="repo_command")

    repo_show = repo_sub.add_parser(
        "show", parents=[common], help="Display resolved repository context"
    )
    repo_show.add_argument("--json", action="store_true", help="Emit machine-readable JSON.")
    repo_show.set_defaults(handler=_cmd_repo_show)

    repo_new = repo_sub.add_parser(
        "new", parents=[common], help="Add a repository entry to the nearest .drctl.yaml"
    )
    repo_new.add_argument("name")
    repo_new.add_argument("root")
    repo_new.add_argument(
        "--default", dest="set_default", action="store_true", help="Mark as the default repo."
    )
    repo_new.add_argument(
        "--domain-dir",
        default=None,
        help="Relative path to the folder where domain directories live.",
    )
    repo_new.set_defaults(handler=_cmd_repo_new)

    repo_bootstrap = repo_sub.add_parser(
        "bootstrap", parents=[common], help="Initialise git for a configured repository"
    )
    repo_bootstrap.add_argument("name")
    repo_bootstrap.set_defaults(handler=_cmd_repo_bootstrap)

    repo_switch = repo_sub.add_parser(
        "switch", parents=[common], help="Set the default repository alias"
    )
    repo_switch.add_argument("name")
    repo_switch.set_defaults(handler=_cmd_repo_switch)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config", parents=[common], help="Inspect drctl configuration"
    )
    config_sub = config_parser.add_subparsers(dest="config_command", required=True)
    config_check = config_sub.add_parser(
        "check", parents=[common], help="Validate configuration files and repository paths"
    )
    config_check.add_argument("--json", action="store_true", help="Emit machine-readable JSON.")
    config_check.set_defaults(handler=_cmd_config_check)

    # decision ------------------------------------------------------------
    decision_parser = subparsers.add_parser(
        "decision",
        aliases=["dr"],
        parents=[common],
        help="Manage decision records and lifecycle operations",
    )
    decision_sub = decision_parser.add_subparsers(dest="decision_command", required=True)
    _add_decision_commands(decision_sub, common, legacy=False)
    _add_index_command(decision_sub, common)

    # governance ----------------------------------------------------------
    governance_parser = subparsers.add_parser(
        "governance", parents=[common], help="Governance utilities"
    )
    governance_sub = governance_parser.add_subparsers(dest="governance_command", required=True)
    validate_parser = governance_sub.add_parser(
        "validate",
        parents=[common],
        help="Validate decision records in the current repository",
    )
    validate_parser.add_argument(
        "--json", action="store_true", help="Emit diagnostics as JSON."
    )
    validate_parser.set_defaults(handler=_cmd_governance_validate)

    # index ---------------------------------------------------------------
    _add_index_command(subparsers, common)

    # legacy top-level lifecycle commands ---------------------------------
    _add_decision_commands(subparsers, common, legacy=True)

    return parser


def _add_decision_commands(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    common: argparse.ArgumentParser,
    *,
    legacy: bool,
) -> None:
    def add(
        name: str,
        help_text: str,
        handler: Callable[[argparse.Namespace], int],
        **kwargs: object,
    ) -> argparse.ArgumentParser:
        # Legacy commands get no help entry so they stay out of the command listing.
        if not legacy:
            kwargs["help"] = help_text
        command = subparsers.add_parser(
            name,
            parents=[common],
            description=help_text,
            **kwargs,  # type: ignore[arg-type]
        )
        command.set_defaults(handler=handler, legacy_name=name if legacy else None)
        return command

    new_parser = add(
        "new", "Create a new decision record for the given domain and slug", _cmd_decision_new
    )
    new_parser.add_argument("domain")
    new_parser.add_argument("slug")
    new_parser.add_argument("--confidence", type=float, default=None, help="Initial confidence.")
    new_parser.add_argument(
        "--template",
        default=None,
        help="Path to a markdown template (overrides config/env defaults).",
    )

    for name, help_text in (
        ("draft", "Mark a decision as draft and commit the changes"),
        ("propose", "Mark a decision as proposed and commit the changes"),
        ("accept", "Mark a decision as accepted and update its changelog"),
        ("reject", "Mark a decision as rejected and commit the change"),
        ("deprecate", "Mark a decision as deprecated and commit the change"),
        ("retire", "Retire a decision and commit the change"),
    ):
        status_parser = add(name, help_text, _cmd_decision_status)
        status_parser.add_argument("id")
        status_parser.set_defaults(action=name)

    correction_parser = add(
        "correction",
        "Apply a minor correction (patch version) to a decision",
        _cmd_decision_correction,
        aliases=[] if legacy else ["correct"],
    )
    correction_parser.add_argument("id")
    correction_parser.add_argument("--note", default=None, help="Changelog note to record.")

    revise_parser = add(
        "revise", "Apply a revision (minor version) to a decision", _cmd_decision_revise
    )
    revise_parser.add_argument("id")
    revise_parser.add_argument("--note", default=None, help="Changelog note to record.")
    revise_parser.add_argument("--confidence", type=float, default=None, help="Update confidence.")

    if not legacy:
        review_parser = add("review", "Record a review event for a decision", _cmd_decision_review)
        review_parser.add_argument("id")
        review_parser.add_argument(
            "--type",
            dest="review_type",
            choices=[item.value for item in ReviewType],
            default=None,
            help="Review type (defaults to the repo review policy, else adhoc).",
        )
        review_parser.add_argument(
            "--outcome",
            choices=[item.value for item in ReviewOutcome],
            default=None,
            help="Review outcome (default: keep).",
        )
        review_parser.add_argument("--note", default=None, help="Reason to capture.")
        review_parser.add_argument(
            "--reviewer", default=None, help="Reviewer name (defaults to DRCTL_REVIEWER or USER)."
        )

    supersede_parser = add(
        "supersede", "Mark an existing decision as superseded by another", _cmd_decision_supersede
    )
    supersede_parser.add_argument("old_id")
    supersede_parser.add_argument("new_id")

    list_parser = add(
        "list", "List decision records, optionally filtered by status", _cmd_decision_list
    )
    list_parser.add_argument("--status", default=None, help="Filter by status.")
    list_parser.add_argument("--json", action="store_true", help="Emit machine-readable JSON.")


def _add_index_command(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    common: argparse.ArgumentParser,
) -> None:
    index_parser = subparsers.add_parser(
        "index",
        parents=[common],
        help="Generate a markdown index for the current repository",
    )
    index_parser.add_argument(
        "--output",
        default=DEFAULT_INDEX_FILENAME,
        help="Index file name relative to the repo root (default: index.md).",
    )
    index_parser.add_argument("--title", default=None, help="Override the index title.")
    index_parser.add_argument("--status", default=None, help="Only include this status.")
    index_parser.add_argument(
        "--no-generated-note",
        dest="generated_note",
        action="store_false",
        help="Omit the generated-on line.",
    )
    index_parser.set_defaults(handler=_cmd_index, legacy_name=None)


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    configure_logging(level="DEBUG" if namespace.verbose else None)

    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    namespace.legacy_notices = LegacyNoticeState()
    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


def main(argv: Sequence[str] | None = None) -> int:
    """Compatibility wrapper for main-module wiring."""

    return run_cli(argv)


# ---------------------------------------------------------------------------
# Command handlers: repo / config
# ---------------------------------------------------------------------------


def _cmd_repo_show(args: argparse.Namespace) -> int:
    context = _resolve_context(args)
    if _flag(args, "json"):
        _emit_json(context.to_dict())
        return 0
    _get_renderer(args).lines(format_repo_context(context))
    return 0


def _cmd_repo_new(args: argparse.Namespace) -> int:
    _ensure_repo_flag_not_used(args, "repo new")
    result = create_repo_entry(
        os.getcwd(),
        args.name,
        args.root,
        set_default=bool(args.set_default),
        default_domain_dir=args.domain_dir,
        config_path=args.config_path,
    )
    result.repo_root.mkdir(parents=True, exist_ok=True)

    renderer = _get_renderer(args)
    renderer.text(f'🆕 Added repo "{args.name}" → {args.root}')
    if args.domain_dir:
        renderer.text(f"   Domain directory: {args.domain_dir}")
    if args.set_default:
        renderer.text("   Marked as default repo")
    renderer.text(f"📝 Updated config: {result.config_path}")
    return 0


def _cmd_repo_bootstrap(args: argparse.Namespace) -> int:
    _ensure_repo_flag_not_used(args, "repo bootstrap")
    context = resolve_repo_context(
        ResolveRepoOptions(repo_flag=args.name, cwd=os.getcwd(), config_path=args.config_path)
    )
    renderer = _get_renderer(args)
    renderer.lines(format_repo_context(context))
    context.root.mkdir(parents=True, exist_ok=True)
    if init_git_repo(context.root):
        renderer.ok(f"Initialised git repository at {context.root}")
    else:
        renderer.ok(f"Git already initialised at {context.root}")
    return 0


def _cmd_repo_switch(args: argparse.Namespace) -> int:
    _ensure_repo_flag_not_used(args, "repo switch")
    switch_default_repo(os.getcwd(), args.name, config_path=args.config_path)
    renderer = _get_renderer(args)
    renderer.text(f"⭐ Default repo switched to {args.name}")
    context = resolve_repo_context(
        ResolveRepoOptions(cwd=os.getcwd(), config_path=args.config_path)
    )
    renderer.lines(format_repo_context(context))
    return 0


def _cmd_config_check(args: argparse.Namespace) -> int:
    _ensure_repo_flag_not_used(args, "config check")
    diagnostics = diagnose_config(os.getcwd(), config_path=args.config_path)
    if _flag(args, "json"):
        _emit_json(diagnostics.to_dict())
    else:
        _report_config_diagnostics(diagnostics, _get_renderer(args))
    return 0 if diagnostics.ok else 1


def _report_config_diagnostics(diagnostics: ConfigDiagnostics, renderer: CLIRenderer) -> None:
    renderer.text(f"🧭 Working directory: {diagnostics.cwd}")
    renderer.text(f"📄 Local config: {diagnostics.local_config_path or 'not found'}")
    renderer.text(f"🏠 Global config: {diagnostics.global_config_path or 'not found'}")
    renderer.text(f"⭐ Default repo: {diagnostics.default_repo_name or '(not set)'}")

    if diagnostics.repos:
        renderer.text("📚 Repositories:")
        for repo in diagnostics.repos:
            status = "✅" if repo.exists else "⚠️"
            source_label = (
                "local-config"
                if repo.definition_source is RepoDefinitionSource.LOCAL
                else "global-config"
            )
            if not repo.exists:
                git_label = "git: n/a"
            elif repo.git_initialized:
                git_label = "git: initialised"
            else:
                git_label = "git: not initialised"
            renderer.text(f"   {status} {repo.name} → {repo.root} ({source_label}, {git_label})")
    else:
        renderer.text("📚 Repositories: none")

    for warning in diagnostics.warnings:
        renderer.warning(warning)
    for error in diagnostics.errors:
        renderer.error(error)
    if not diagnostics.warnings and not diagnostics.errors:
        renderer.ok("Configuration looks good.")


# ---------------------------------------------------------------------------
# Command handlers: decisions
# ---------------------------------------------------------------------------


def _cmd_decision_new(args: argparse.Namespace) -> int:
    renderer, service = _decision_setup(args)
    result = service.create(
        args.domain,
        args.slug,
        confidence=args.confidence,
        template_path=args.template,
    )
    renderer.text(f"✅ Created {result.record.id} ({result.record.status})")
    renderer.text(f"📄 File: {result.file_path}")
    if result.record.template_used:
        renderer.text(f"🧩 Template: {result.record.template_used}")
    return 0


_STATUS_MESSAGES: Final[Mapping[str, str]] = {
    "draft": "✏️ {id} saved as draft",
    "propose": "📤 {id} proposed",
    "accept": "✅ {id} marked as accepted",
    "reject": "🚫 {id} marked as rejected",
    "deprecate": "⚠️ {id} marked as deprecated",
    "retire": "🪦 {id} marked as retired",
}


def _cmd_decision_status(args: argparse.Namespace) -> int:
    renderer, service = _decision_setup(args)
    operations: Mapping[str, Callable[[str], DecisionWriteResult]] = {
        "draft": service.draft,
        "propose": service.propose,
        "accept": service.accept,
        "reject": service.reject,
        "deprecate": service.deprecate,
        "retire": service.retire,
    }
    result = operations[args.action](args.id)
    renderer.text(_STATUS_MESSAGES[args.action].format(id=result.record.id))
    renderer.text(f"📄 File: {result.file_path}")
    if args.action == "retire":
        renderer.text(_auto_review_line("retire"))
    return 0


def _cmd_decision_correction(args: argparse.Namespace) -> int:
    renderer, service = _decision_setup(args)
    result = service.correction(args.id, note=args.note)
    renderer.text(f"🛠️ {result.record.id} corrected (v{result.record.version})")
    renderer.text(f"📄 File: {result.file_path}")
    return 0


def _cmd_decision_revise(args: argparse.Namespace) -> int:
    renderer, service = _decision_setup(args)
    result = service.revise(args.id, note=args.note, confidence=args.confidence)
    renderer.text(f"📝 {result.record.id} revised (v{result.record.version})")
    renderer.text(f"📄 File: {result.file_path}")
    renderer.text(_auto_review_line("revise"))
    return 0


def _cmd_decision_review(args: argparse.Namespace) -> int:
    renderer, service = _decision_setup(args)
    result = service.review(
        args.id,
        review_type=args.review_type,
        outcome=args.outcome,
        note=_optional_str(args.note),
        reviewer=_optional_str(args.reviewer),
    )
    entry = result.record.review_history[-1]
    renderer.text(f"🧾 {result.record.id} reviewed ({entry.type} → {entry.outcome})")
    renderer.text(f"📄 File: {result.file_path}")
    if result.record.review_date:
        renderer.text(f"📆 Next review: {result.record.review_date}")
    return 0


def _cmd_decision_supersede(args: argparse.Namespace) -> int:
    renderer, service = _decision_setup(args)
    result = service.supersede(args.old_id, args.new_id)
    renderer.text(f"🔁 {result.record.id} superseded by {result.new_record.id}")
    renderer.text(f"📄 Updated: {result.file_path}")
    renderer.text(f"📄 Updated: {result.new_file_path}")
    renderer.text(_auto_review_line("supersede"))
    return 0


def _cmd_decision_list(args: argparse.Namespace) -> int:
    renderer, service = _decision_setup(args, announce=not _flag(args, "json"))
    records = service.list_all(_optional_str(args.status))
    if _flag(args, "json"):
        _emit_json(
            {
                "repo": service.context.name,
                "decisions": [record.to_frontmatter() for record in records],
            }
        )
        return 0
    renderer.columns(
        [(record.id, record.status, record.domain) for record in records],
        widths=(LIST_ID_WIDTH, LIST_STATUS_WIDTH),
    )
    return 0


def _cmd_index(args: argparse.Namespace) -> int:
    context = _resolve_context(args)
    renderer = _get_renderer(args)
    renderer.lines(format_repo_context(context))
    _require_existing_root(context, "running this command")
    result = generate_index(
        context,
        output_file_name=args.output,
        title=_optional_str(args.title),
        include_generated_note=bool(args.generated_note),
        status_filter=_optional_str(args.status),
    )
    renderer.text(f"📑 Generated index: {result.file_path}")
    return 0


def _cmd_governance_validate(args: argparse.Namespace) -> int:
    context = _resolve_context(args)
    renderer = _get_renderer(args)
    as_json = _flag(args, "json")
    if not as_json:
        renderer.lines(format_repo_context(context))
    _require_existing_root(context, "running governance validation")

    issues = validate_repository(context)
    error_count = sum(1 for issue in issues if issue.severity is Severity.ERROR)
    warning_count = len(issues) - error_count

    if as_json:
        _emit_json({"repo": context.name, "issues": [issue.to_dict() for issue in issues]})
    elif not issues:
        renderer.ok("Governance validation passed (no issues).")
    else:
        renderer.text(
            f"Governance validation: {len(issues)} issue(s) "
            f"({error_count} error(s), {warning_count} warning(s))"
        )
        for issue in issues:
            icon = "❌" if issue.severity is Severity.ERROR else "⚠️"
            renderer.text(
                f"{icon} [{issue.severity.value.upper()}] {issue.record_id} "
                f"{issue.code.value} – {issue.message}"
            )
            if issue.file_path is not None:
                renderer.text(f"   ↳ {issue.file_path}")
    return 1 if error_count else 0


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def format_repo_context(context: RepoContext) -> list[str]:
    """Human-readable summary of a resolved repository context."""

    label = context.name or "(unnamed)"
    definition = context.definition_source.value if context.definition_source else "n/a"
    lines = [
        f"📁 Repo: {label} ({os.path.normpath(context.root)})",
        f"   Source: {context.source.value}",
        f"   Definition: {definition}",
        f"   Config: {context.config_path or 'n/a'}",
    ]

    git_source = (
        "auto"
        if context.git_mode_source is GitModeSource.DETECTED
        else context.git_mode_source.value
    )
    lines.append(f"   Git: {context.git_mode.value} ({git_source})")
    if context.git_mode_override_cleared is not None:
        lines.append(
            f"   Git note: ignored {context.git_mode_override_cleared.value} disable "
            "(git repo detected)"
        )

    lines.append(f"   Default domain dir: {context.default_domain_dir or '<domain>'}")
    lines.append(f"   Default template: {context.default_template or '(internal default)'}")

    if context.domain_map:
        lines.append("   Domain overrides:")
        lines.extend(
            f"     - {domain} -> {directory}" for domain, directory in context.domain_map.items()
        )
    else:
        lines.append("   Domain overrides: none")

    if context.source in {RepoResolutionSource.FALLBACK_HOME, RepoResolutionSource.FALLBACK_CWD}:
        lines.append("")
        lines.append(FALLBACK_NOTE)
    return lines


def _decision_setup(
    args: argparse.Namespace, *, announce: bool = True
) -> tuple[CLIRenderer, DecisionService]:
    renderer = _get_renderer(args)
    legacy_name = getattr(args, "legacy_name", None)
    if legacy_name:
        args.legacy_notices.emit(legacy_name, renderer)

    context = _resolve_context(args)
    if announce:
        renderer.lines(format_repo_context(context))

    def git_disabled(notice: GitDisabledNotice) -> None:
        if renderer.verbose:
            renderer.notice(
                f"ℹ️ Git disabled for {notice.context.name or notice.context.root}; "
                "changes were written but not committed."
            )

    service = DecisionService(
        context,
        on_git_disabled=git_disabled,
        on_template_warning=renderer.warning,
    )
    return renderer, service


def _resolve_context(args: argparse.Namespace) -> RepoContext:
    git_mode = getattr(args, "git_mode", None)
    return resolve_repo_context(
        ResolveRepoOptions(
            repo_flag=_optional_str(getattr(args, "repo", None)),
            cwd=os.getcwd(),
            config_path=_optional_str(getattr(args, "config_path", None)),
            git_mode_flag=GitMode(git_mode) if git_mode else None,
        )
    )


def _require_existing_root(context: RepoContext, action: str) -> None:
    if not Path(context.root).exists():
        raise CLIError(
            f'Repo root "{context.root}" does not exist. Adjust your configuration or '
            f"recreate the repository before {action}.",
            exit_code=1,
        )


def _ensure_repo_flag_not_used(args: argparse.Namespace, command_name: str) -> None:
    if _optional_str(getattr(args, "repo", None)):
        raise CLIError(f"--repo cannot be used with {command_name}", exit_code=2)


def _auto_review_line(outcome: str) -> str:
    return f"🧾 Review: adhoc → {outcome} (override via drctl decision review)"


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer(args: argparse.Namespace) -> CLIRenderer:
    return create_renderer(no_color=_flag(args, "no_color"), verbose=_flag(args, "verbose"))


def _flag(args: argparse.Namespace, name: str) -> bool:
    return bool(getattr(args, name, False))


def _optional_str(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None
