"""Repository-wide governance: validate every record on disk and attach file paths."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from drctl.governance.validation import (
    Severity,
    ValidationContext,
    ValidationIssue,
    validate_decisions,
)
from drctl.persistence.repository import collect_decisions

if TYPE_CHECKING:
    from pathlib import Path

    from drctl.config.schema import RepoContext

logger = structlog.get_logger(__name__)

__all__ = ["RepositoryValidationIssue", "validate_repository"]


@dataclass(frozen=True, slots=True)
class RepositoryValidationIssue(ValidationIssue):
    file_path: Path | None = None

    def to_dict(self) -> dict[str, object]:
        payload = ValidationIssue.to_dict(self)
        payload["filePath"] = str(self.file_path) if self.file_path is not None else None
        return payload


def validate_repository(context: RepoContext) -> list[RepositoryValidationIssue]:
    stored = collect_decisions(context)
    issues = validate_decisions(
        [entry.record for entry in stored],
        ValidationContext(repo_name=context.name or "(unnamed)"),
    )

    paths: dict[str, Path] = {}
    for entry in stored:
        paths.setdefault(entry.record.id, entry.file_path)

    results = [
        RepositoryValidationIssue(
            code=issue.code,
            record_id=issue.record_id,
            severity=issue.severity,
            message=issue.message,
            details=issue.details,
            file_path=paths.get(issue.record_id),
        )
        for issue in issues
    ]
    logger.info(
        "governance.validated",
        repo=context.name,
        records=len(stored),
        errors=sum(1 for issue in results if issue.severity is Severity.ERROR),
        warnings=sum(1 for issue in results if issue.severity is Severity.WARNING),
    )
    return results
