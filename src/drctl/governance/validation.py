"""
drctl — decision record validation rules.

File: src/drctl/governance/validation.py
Last updated: 2026-10-19

Purpose
- Inspect a set of loaded records for structural and referential defects.

What should be included in this file
- ``ValidationIssue`` (code, record id, severity, message, details).
- Per-record checks: identifier, status, change type, supersede links, review
  metadata, link arrays.
- Set-wide checks: duplicate identifiers (one issue per duplicated id).

Functional requirements
- Pure: no filesystem access, no exceptions for bad records.
- Checks are independent; a single record may yield several issues.
- ``error`` issues fail governance; ``warning`` issues are advisory.
"""

from __future__ import annotations

import datetime as dt
import re
from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Final

from drctl.domain.models import (
    CREATION_COMPATIBLE_STATUSES,
    LINK_FIELDS,
    UNSET,
    ChangeType,
    DecisionStatus,
    ReviewOutcome,
    ReviewType,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from drctl.domain.models import DecisionRecord, ReviewHistoryEntry

__all__ = [
    "IssueCode",
    "Severity",
    "ValidationContext",
    "ValidationIssue",
    "has_errors",
    "validate_decisions",
]

UNKNOWN_RECORD_ID: Final[str] = "(unknown)"

_ISO_DATE_RE: Final[re.Pattern[str]] = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_VALID_STATUSES: Final[frozenset[str]] = frozenset(status.value for status in DecisionStatus)
_VALID_CHANGE_TYPES: Final[frozenset[str]] = frozenset(kind.value for kind in ChangeType)
_VALID_REVIEW_TYPES: Final[tuple[str, ...]] = tuple(kind.value for kind in ReviewType)
_VALID_REVIEW_OUTCOMES: Final[tuple[str, ...]] = tuple(kind.value for kind in ReviewOutcome)


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"


class IssueCode(StrEnum):
    MISSING_ID = "missing-id"
    INVALID_STATUS = "invalid-status"
    INVALID_CHANGE_TYPE = "invalid-change-type"
    MISSING_SUPERSEDE_LINK = "missing-supersede-link"
    DANGLING_SUPERSEDES = "dangling-supersedes"
    DUPLICATE_ID = "duplicate-id"
    INVALID_REVIEW_ENTRY = "invalid-review-entry"
    INVALID_LINK_ENTRY = "invalid-link-entry"


@dataclass(frozen=True, slots=True)
class ValidationContext:
    scope: str = "repo"
    repo_name: str = "(unnamed)"


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    code: IssueCode
    record_id: str
    severity: Severity
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code.value,
            "recordId": self.record_id,
            "severity": self.severity.value,
            "message": self.message,
        }
        if self.details:
            payload["details"] = dict(self.details)
        return payload


def has_errors(issues: Iterable[ValidationIssue]) -> bool:
    return any(issue.severity is Severity.ERROR for issue in issues)


def validate_decisions(
    records: Sequence[DecisionRecord],
    context: ValidationContext | None = None,
) -> list[ValidationIssue]:
    """Return every issue found in ``records``; record issues first, then duplicates."""

    del context  # scope is always a single repository today
    known_ids = {record.id for record in records if record.id}

    issues: list[ValidationIssue] = []
    for record in records:
        issues.extend(_identifier_issues(record))
        issues.extend(_status_issues(record))
        issues.extend(_change_type_issues(record))
        issues.extend(_supersede_issues(record, known_ids))
        issues.extend(_review_issues(record))
        issues.extend(_link_issues(record))

    counts = Counter(record.id for record in records if record.id)
    for record_id, occurrences in counts.items():
        if occurrences > 1:
            issues.append(
                ValidationIssue(
                    code=IssueCode.DUPLICATE_ID,
                    record_id=record_id,
                    severity=Severity.ERROR,
                    message=f'Decision id "{record_id}" appears {occurrences} times in this repo.',
                    details={"occurrences": occurrences},
                )
            )
    return issues


def _record_id(record: DecisionRecord) -> str:
    return record.id if record.id and record.id.strip() else UNKNOWN_RECORD_ID


def _identifier_issues(record: DecisionRecord) -> list[ValidationIssue]:
    if record.id and record.id.strip():
        return []
    return [
        ValidationIssue(
            code=IssueCode.MISSING_ID,
            record_id=UNKNOWN_RECORD_ID,
            severity=Severity.ERROR,
            message="Decision record is missing an id.",
        )
    ]


def _status_issues(record: DecisionRecord) -> list[ValidationIssue]:
    if record.status in _VALID_STATUSES:
        return []
    return [
        ValidationIssue(
            code=IssueCode.INVALID_STATUS,
            record_id=_record_id(record),
            severity=Severity.ERROR,
            message=f'Status "{record.status}" is not recognised.',
            details={"status": record.status},
        )
    ]


def _change_type_issues(record: DecisionRecord) -> list[ValidationIssue]:
    if record.change_type not in _VALID_CHANGE_TYPES:
        return [
            ValidationIssue(
                code=IssueCode.INVALID_CHANGE_TYPE,
                record_id=_record_id(record),
                severity=Severity.ERROR,
                message=f'Change type "{record.change_type}" is not recognised.',
                details={"changeType": record.change_type},
            )
        ]
    if (
        record.change_type == ChangeType.CREATION
        and record.status in _VALID_STATUSES
        and record.status not in CREATION_COMPATIBLE_STATUSES
    ):
        return [
            ValidationIssue(
                code=IssueCode.INVALID_CHANGE_TYPE,
                record_id=_record_id(record),
                severity=Severity.ERROR,
                message=(
                    'Records with changeType "creation" should remain in '
                    f'draft/proposed/accepted status (found "{record.status}").'
                ),
                details={"status": record.status, "changeType": record.change_type},
            )
        ]
    return []


def _supersede_issues(record: DecisionRecord, known_ids: set[str]) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    superseded_by = record.superseded_by if record.superseded_by is not UNSET else None
    if record.status == DecisionStatus.SUPERSEDED and not (superseded_by or "").strip():
        issues.append(
            ValidationIssue(
                code=IssueCode.MISSING_SUPERSEDE_LINK,
                record_id=_record_id(record),
                severity=Severity.ERROR,
                message="Record marked superseded must include a supersededBy reference.",
            )
        )

    supersedes = record.supersedes if record.supersedes is not UNSET else None
    if supersedes and supersedes not in known_ids:
        issues.append(
            ValidationIssue(
                code=IssueCode.DANGLING_SUPERSEDES,
                record_id=_record_id(record),
                severity=Severity.WARNING,
                message=f'Record supersedes "{supersedes}" but it was not found in this repo.',
                details={"supersedes": supersedes},
            )
        )
    return issues


def _review_issues(record: DecisionRecord) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    record_id = _record_id(record)

    if "reviewHistory" in record.extra:
        issues.append(
            ValidationIssue(
                code=IssueCode.INVALID_REVIEW_ENTRY,
                record_id=record_id,
                severity=Severity.WARNING,
                message="reviewHistory must be a list of review entries.",
                details={"reviewHistory": record.extra["reviewHistory"]},
            )
        )

    for index, entry in enumerate(record.review_history):
        problems = _review_entry_problems(entry)
        if problems:
            issues.append(
                ValidationIssue(
                    code=IssueCode.INVALID_REVIEW_ENTRY,
                    record_id=record_id,
                    severity=Severity.WARNING,
                    message=f"Review entry #{index + 1} is malformed: {'; '.join(problems)}.",
                    details={"index": index, "problems": problems},
                )
            )

    if record.last_reviewed_at is not None and not _is_iso_date(record.last_reviewed_at):
        issues.append(
            ValidationIssue(
                code=IssueCode.INVALID_REVIEW_ENTRY,
                record_id=record_id,
                severity=Severity.WARNING,
                message=f'lastReviewedAt "{record.last_reviewed_at}" is not a YYYY-MM-DD date.',
                details={"lastReviewedAt": record.last_reviewed_at},
            )
        )
    return issues


def _review_entry_problems(entry: ReviewHistoryEntry) -> list[str]:
    problems: list[str] = []
    if not _is_iso_date(entry.date):
        problems.append(f'date "{entry.date}" is not a YYYY-MM-DD date')
    if entry.type not in _VALID_REVIEW_TYPES:
        problems.append(
            f'type "{entry.type}" is not one of {", ".join(_VALID_REVIEW_TYPES)}'
        )
    if entry.outcome not in _VALID_REVIEW_OUTCOMES:
        problems.append(
            f'outcome "{entry.outcome}" is not one of {", ".join(_VALID_REVIEW_OUTCOMES)}'
        )
    return problems


def _link_issues(record: DecisionRecord) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    record_id = _record_id(record)
    for field_name in LINK_FIELDS:
        if field_name not in record.extra:
            continue
        value = record.extra[field_name]
        if value is None:
            continue
        if not isinstance(value, list):
            issues.append(
                ValidationIssue(
                    code=IssueCode.INVALID_LINK_ENTRY,
                    record_id=record_id,
                    severity=Severity.WARNING,
                    message=f"{field_name} must be a list of references.",
                    details={"field": field_name},
                )
            )
            continue
        for index, item in enumerate(value):
            if isinstance(item, str) and not item.strip():
                issues.append(
                    ValidationIssue(
                        code=IssueCode.INVALID_LINK_ENTRY,
                        record_id=record_id,
                        severity=Severity.WARNING,
                        message=f"{field_name} entry #{index + 1} is empty.",
                        details={"field": field_name, "index": index},
                    )
                )
    return issues


def _is_iso_date(value: str) -> bool:
    if not _ISO_DATE_RE.match(value):
        return False
    try:
        dt.date.fromisoformat(value)
    except ValueError:
        return False
    return True
