"""Governance checks over decision records."""

from drctl.governance.repository import RepositoryValidationIssue, validate_repository
from drctl.governance.validation import (
    IssueCode,
    Severity,
    ValidationContext,
    ValidationIssue,
    has_errors,
    validate_decisions,
)

__all__ = [
    "IssueCode",
    "RepositoryValidationIssue",
    "Severity",
    "ValidationContext",
    "ValidationIssue",
    "has_errors",
    "validate_decisions",
    "validate_repository",
]
