"""
drctl — decision lifecycle service.

File: src/drctl/lifecycle/service.py
Last updated: 2026-10-19

Purpose
- Apply lifecycle transitions, version bumps, reviews, and supersession to decision records.
- Commit every on-disk change through the repository's git policy.

What should be included in this file
- ``DecisionService`` bound to one resolved ``RepoContext``.
- Status preconditions for propose/accept/correction/revise.
- Draft/propose backfill so that changelogs always show the full path to acceptance.

Functional requirements
- ``accept`` and ``propose`` are idempotent: a repeat call neither writes nor commits.
- Changelogs are append-only; each mutation appends exactly one entry.
- ``supersede`` saves both records and commits them together.

Non-functional requirements
- Dates come from an injectable clock so behavior is reproducible under test.
"""

from __future__ import annotations

import calendar
import datetime as dt
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

import structlog

from drctl.config.resolver import ResolveRepoOptions, resolve_repo_context
from drctl.constants import (
    COMMIT_PREFIX,
    DEFAULT_REVIEW_INTERVAL_MONTHS,
    ENV_REVIEWER,
    INITIAL_VERSION,
)
from drctl.domain.ids import generate_id
from drctl.domain.models import (
    ACCEPTABLE_STATUSES,
    PROPOSABLE_STATUSES,
    ChangelogEntry,
    ChangeType,
    DecisionRecord,
    DecisionStatus,
    ReviewHistoryEntry,
    ReviewOutcome,
    ReviewType,
)
from drctl.domain.versioning import BumpLevel, bump_version
from drctl.integration.git_client import SubprocessGitClient
from drctl.lifecycle.commits import GitDisabledNotice, commit_if_enabled
from drctl.lifecycle.templates import emit_template_warnings, resolve_template_body
from drctl.persistence.repository import (
    DecisionExistsError,
    get_decision_path,
    list_decisions,
    load_decision,
    load_decision_document,
    save_decision,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from pathlib import Path

    from drctl.config.schema import GitMode, RepoContext
    from drctl.integration.git_client import GitClient

logger = structlog.get_logger(__name__)

NOTE_INITIAL: Final[str] = "Initial creation"
NOTE_DRAFT: Final[str] = "Marked as draft"
NOTE_PROPOSED: Final[str] = "Marked as proposed"
NOTE_ACCEPTED: Final[str] = "Marked as accepted"
NOTE_REJECTED: Final[str] = "Marked as rejected"
NOTE_DEPRECATED: Final[str] = "Marked as deprecated"
NOTE_RETIRED: Final[str] = "Marked as retired"
DEFAULT_CORRECTION_NOTE: Final[str] = "Minor correction"
DEFAULT_REVISION_NOTE: Final[str] = "Revision"

UNCORRECTABLE_STATUSES: Final[frozenset[str]] = frozenset(
    {
        DecisionStatus.SUPERSEDED.value,
        DecisionStatus.RETIRED.value,
        DecisionStatus.ARCHIVED.value,
    }
)

__all__ = [
    "DecisionService",
    "DecisionWriteResult",
    "InvalidTransitionError",
    "LifecycleError",
    "RepoOptions",
    "SupersedeResult",
]


class LifecycleError(RuntimeError):
    """Base error for lifecycle operations."""


class InvalidTransitionError(LifecycleError, ValueError):
    """Raised when a record's current status does not permit the requested operation."""


@dataclass(frozen=True, slots=True)
class RepoOptions:
    """Repository selection inputs for building a service outside the CLI."""

    repo: str | None = None
    env_repo: str | None = None
    cwd: str | os.PathLike[str] | None = None
    config_path: str | None = None
    git_mode_flag: GitMode | None = None
    environ: Mapping[str, str] | None = None


@dataclass(frozen=True, slots=True)
class DecisionWriteResult:
    record: DecisionRecord
    file_path: Path
    context: RepoContext
    committed: bool = False
    changed: bool = True


@dataclass(frozen=True, slots=True)
class SupersedeResult:
    record: DecisionRecord
    file_path: Path
    new_record: DecisionRecord
    new_file_path: Path
    context: RepoContext
    committed: bool = False


class DecisionService:
    """Lifecycle operations against one resolved repository."""

    def __init__(
        self,
        context: RepoContext,
        *,
        git_client: GitClient | None = None,
        on_git_disabled: Callable[[GitDisabledNotice], None] | None = None,
        on_template_warning: Callable[[str], None] | None = None,
        clock: Callable[[], dt.date] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.context = context
        self._git_client: GitClient = (
            git_client if git_client is not None else SubprocessGitClient()
        )
        self._on_git_disabled = on_git_disabled
        self._on_template_warning = on_template_warning
        self._clock = clock if clock is not None else dt.date.today
        self._environ = os.environ if environ is None else environ

    @classmethod
    def from_options(
        cls,
        options: RepoOptions | None = None,
        **kwargs: object,
    ) -> DecisionService:
        """Resolve the repository context from ``options`` and bind a service to it."""

        opts = options if options is not None else RepoOptions()
        context = resolve_repo_context(
            ResolveRepoOptions(
                repo_flag=opts.repo,
                env_repo=opts.env_repo,
                cwd=opts.cwd,
                config_path=opts.config_path,
                git_mode_flag=opts.git_mode_flag,
                environ=opts.environ,
            )
        )
        if opts.environ is not None:
            kwargs.setdefault("environ", opts.environ)
        return cls(context, **kwargs)  # type: ignore[arg-type]

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create(
        self,
        domain: str,
        slug: str,
        *,
        confidence: float | None = None,
        template_path: str | None = None,
        env_template: str | None = None,
        tags: list[str] | None = None,
    ) -> DecisionWriteResult:
        """Create a draft record from the resolved template and commit it."""

        today = self._today()
        record = DecisionRecord(
            id=generate_id(domain, slug, today=self._clock()),
            date_created=today,
            version=INITIAL_VERSION,
            status=DecisionStatus.DRAFT.value,
            change_type=ChangeType.CREATION.value,
            domain=domain,
            slug=slug,
            confidence=confidence,
            tags=tags,
            changelog=[ChangelogEntry(date=today, note=NOTE_INITIAL)],
        )
        target = get_decision_path(self.context, record)
        if target.exists():
            raise DecisionExistsError(
                f'Decision record "{record.id}" already exists at {target}. '
                "Use drctl lifecycle or revision commands to update it."
            )

        template = resolve_template_body(
            record,
            self.context,
            template_path=template_path,
            env_template=env_template,
            environ=self._environ,
        )
        record.template_used = template.template_used
        file_path = save_decision(self.context, record, template.body)

        touched = [file_path]
        if template.copied_path is not None:
            touched.append(template.copied_path)
        committed = self._commit(touched, f"{COMMIT_PREFIX} create {record.id}")
        self._log("create", record)
        return DecisionWriteResult(
            record=record, file_path=file_path, context=self.context, committed=committed
        )

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    def draft(self, record_id: str) -> DecisionWriteResult:
        return self._transition(record_id, "draft", DecisionStatus.DRAFT, NOTE_DRAFT)

    def propose(self, record_id: str) -> DecisionWriteResult:
        """Move a draft to proposed, backfilling the draft step when it was never recorded."""

        record = load_decision(self.context, record_id)
        if record.status not in PROPOSABLE_STATUSES:
            raise InvalidTransitionError(
                f'Cannot propose decision "{record_id}" from status "{record.status}". '
                "Use the appropriate lifecycle command first."
            )

        if record.status == DecisionStatus.DRAFT and not record.has_changelog_note(NOTE_DRAFT):
            self.draft(record_id)
            record = load_decision(self.context, record_id)

        if record.status == DecisionStatus.PROPOSED:
            result = self._unchanged(record)
        else:
            result = self._transition(
                record_id, "propose", DecisionStatus.PROPOSED, NOTE_PROPOSED
            )

        loaded = load_decision_document(self.context, record_id)
        emit_template_warnings(loaded.record, loaded.content, self._on_template_warning)
        return result

    def accept(self, record_id: str) -> DecisionWriteResult:
        """Accept a draft or proposed record; accepting twice is a no-op."""

        record = load_decision(self.context, record_id)
        if record.status not in ACCEPTABLE_STATUSES:
            raise InvalidTransitionError(
                f'Cannot accept decision "{record_id}" from status "{record.status}". '
                "Use the appropriate lifecycle command first."
            )

        if record.status == DecisionStatus.DRAFT:
            self.propose(record_id)
            record = load_decision(self.context, record_id)

        if record.status == DecisionStatus.ACCEPTED:
            return self._unchanged(record)

        def mark_accepted(target: DecisionRecord, today: str) -> None:
            target.date_accepted = today

        return self._transition(
            record_id,
            "accept",
            DecisionStatus.ACCEPTED,
            NOTE_ACCEPTED,
            extra=mark_accepted,
        )

    def reject(self, record_id: str) -> DecisionWriteResult:
        return self._transition(record_id, "reject", DecisionStatus.REJECTED, NOTE_REJECTED)

    def deprecate(self, record_id: str) -> DecisionWriteResult:
        return self._transition(
            record_id, "deprecate", DecisionStatus.DEPRECATED, NOTE_DEPRECATED
        )

    def retire(self, record_id: str) -> DecisionWriteResult:
        """Retire a record; the markdown body is left untouched."""

        def mark_retired(target: DecisionRecord, today: str) -> None:
            target.change_type = ChangeType.RETIREMENT.value
            self._append_review(target, today, ReviewType.ADHOC, ReviewOutcome.RETIRE)

        return self._transition(
            record_id, "retire", DecisionStatus.RETIRED, NOTE_RETIRED, extra=mark_retired
        )

    # ------------------------------------------------------------------
    # Versioned edits
    # ------------------------------------------------------------------

    def correction(self, record_id: str, note: str | None = None) -> DecisionWriteResult:
        """Patch-level bump for small fixes that do not change the decision."""

        def apply(target: DecisionRecord, today: str) -> None:
            self._require_correctable(target, "apply a correction to")
            target.version = bump_version(target.version, BumpLevel.PATCH)
            target.change_type = ChangeType.CORRECTION.value
            target.add_changelog(today, note or DEFAULT_CORRECTION_NOTE)

        return self._mutate(record_id, "correction", apply)

    def revise(
        self,
        record_id: str,
        note: str | None = None,
        confidence: float | None = None,
    ) -> DecisionWriteResult:
        """Minor-level bump for substantive revisions; optionally restates confidence."""

        def apply(target: DecisionRecord, today: str) -> None:
            self._require_correctable(target, "revise")
            target.version = bump_version(target.version, BumpLevel.MINOR)
            target.change_type = ChangeType.REVISION.value
            if confidence is not None:
                target.confidence = confidence
            target.add_changelog(today, note or DEFAULT_REVISION_NOTE)
            self._append_review(target, today, ReviewType.ADHOC, ReviewOutcome.REVISE)

        return self._mutate(record_id, "revise", apply)

    def review(
        self,
        record_id: str,
        *,
        review_type: ReviewType | str | None = None,
        outcome: ReviewOutcome | str | None = None,
        note: str | None = None,
        reviewer: str | None = None,
    ) -> DecisionWriteResult:
        """Record a review and schedule the next one; the lifecycle status is unchanged."""

        resolved_type = self._review_type(review_type)
        resolved_outcome = self._review_outcome(outcome)

        def apply(target: DecisionRecord, today: str) -> None:
            self._append_review(
                target,
                today,
                resolved_type,
                resolved_outcome,
                reviewer=reviewer,
                reason=note,
            )
            summary = f"Reviewed ({resolved_type.value} → {resolved_outcome.value})"
            target.add_changelog(today, f"{summary}: {note}" if note else summary)

        return self._mutate(record_id, "review", apply)

    # ------------------------------------------------------------------
    # Supersession
    # ------------------------------------------------------------------

    def supersede(self, old_id: str, new_id: str) -> SupersedeResult:
        """Link ``old_id`` -> ``new_id`` in both records and commit them together."""

        if old_id == new_id:
            raise LifecycleError(f'Decision "{old_id}" cannot supersede itself.')

        old_record = load_decision(self.context, old_id)
        new_record = load_decision(self.context, new_id)
        today = self._today()

        old_record.status = DecisionStatus.SUPERSEDED.value
        old_record.last_edited = today
        old_record.superseded_by = new_id
        old_record.add_changelog(today, f"Superseded by {new_id}")
        self._append_review(old_record, today, ReviewType.ADHOC, ReviewOutcome.SUPERSEDE)

        new_record.supersedes = old_id
        new_record.last_edited = today
        new_record.change_type = ChangeType.SUPERSESSION.value
        new_record.add_changelog(today, f"Supersedes {old_id}")

        old_path = save_decision(self.context, old_record)
        new_path = save_decision(self.context, new_record)
        committed = self._commit(
            [old_path, new_path], f"{COMMIT_PREFIX} supersede {old_id} -> {new_id}"
        )
        self._log("supersede", old_record, superseded_by=new_id)
        return SupersedeResult(
            record=old_record,
            file_path=old_path,
            new_record=new_record,
            new_file_path=new_path,
            context=self.context,
            committed=committed,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_all(self, status: str | None = None) -> list[DecisionRecord]:
        records = list_decisions(self.context)
        if status:
            return [record for record in records if record.status == status]
        return records

    def get(self, record_id: str) -> DecisionRecord:
        return load_decision(self.context, record_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _transition(
        self,
        record_id: str,
        verb: str,
        status: DecisionStatus,
        note: str,
        *,
        extra: Callable[[DecisionRecord, str], None] | None = None,
    ) -> DecisionWriteResult:
        def apply(target: DecisionRecord, today: str) -> None:
            target.status = status.value
            if extra is not None:
                extra(target, today)
            target.add_changelog(today, note)

        return self._mutate(record_id, verb, apply)

    def _mutate(
        self,
        record_id: str,
        verb: str,
        apply: Callable[[DecisionRecord, str], None],
    ) -> DecisionWriteResult:
        record = load_decision(self.context, record_id)
        today = self._today()
        apply(record, today)
        record.last_edited = today
        file_path = save_decision(self.context, record)
        committed = self._commit([file_path], f"{COMMIT_PREFIX} {verb} {record.id}")
        self._log(verb, record)
        return DecisionWriteResult(
            record=record, file_path=file_path, context=self.context, committed=committed
        )

    def _unchanged(self, record: DecisionRecord) -> DecisionWriteResult:
        return DecisionWriteResult(
            record=record,
            file_path=get_decision_path(self.context, record),
            context=self.context,
            committed=False,
            changed=False,
        )

    def _commit(self, paths: list[Path], message: str) -> bool:
        return commit_if_enabled(
            self.context,
            self._git_client,
            paths,
            message,
            on_git_disabled=self._on_git_disabled,
        )

    def _append_review(
        self,
        record: DecisionRecord,
        today: str,
        review_type: ReviewType,
        outcome: ReviewOutcome,
        *,
        reviewer: str | None = None,
        reason: str | None = None,
    ) -> None:
        record.review_history.append(
            ReviewHistoryEntry(
                date=today,
                type=review_type.value,
                outcome=outcome.value,
                reviewer=reviewer or self._default_reviewer(),
                reason=reason,
            )
        )
        record.last_reviewed_at = today
        record.review_date = _add_months(
            dt.date.fromisoformat(today), self._review_interval_months()
        ).isoformat()

    def _review_type(self, value: ReviewType | str | None) -> ReviewType:
        if value is None:
            policy = self.context.review_policy
            if policy is not None and policy.default_type is not None:
                return policy.default_type
            return ReviewType.ADHOC
        try:
            return ReviewType(value)
        except ValueError as exc:
            allowed = ", ".join(item.value for item in ReviewType)
            raise LifecycleError(f'Unknown review type "{value}". Use one of: {allowed}.') from exc

    def _review_outcome(self, value: ReviewOutcome | str | None) -> ReviewOutcome:
        if value is None:
            return ReviewOutcome.KEEP
        try:
            return ReviewOutcome(value)
        except ValueError as exc:
            allowed = ", ".join(item.value for item in ReviewOutcome)
            raise LifecycleError(
                f'Unknown review outcome "{value}". Use one of: {allowed}.'
            ) from exc

    def _review_interval_months(self) -> int:
        policy = self.context.review_policy
        if policy is not None and policy.interval_months is not None:
            return policy.interval_months
        return DEFAULT_REVIEW_INTERVAL_MONTHS

    def _default_reviewer(self) -> str | None:
        for key in (ENV_REVIEWER, "USER", "USERNAME"):
            value = self._environ.get(key, "").strip()
            if value:
                return value
        return None

    @staticmethod
    def _require_correctable(record: DecisionRecord, action: str) -> None:
        if record.status in UNCORRECTABLE_STATUSES:
            raise InvalidTransitionError(
                f'Cannot {action} decision "{record.id}" from status "{record.status}".'
            )

    def _today(self) -> str:
        return self._clock().isoformat()

    def _log(self, action: str, record: DecisionRecord, **fields: object) -> None:
        logger.info(
            "decision.transition",
            action=action,
            id=record.id,
            status=record.status,
            version=record.version,
            repo=self.context.name,
            **fields,
        )


def _add_months(day: dt.date, months: int) -> dt.date:
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return dt.date(year, month, min(day.day, last_day))
