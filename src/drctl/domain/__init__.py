"""Decision record domain types, identifiers, and versioning."""

from drctl.domain.ids import extract_domain_from_id, generate_id
from drctl.domain.models import (
    UNSET,
    ChangelogEntry,
    ChangeType,
    DecisionRecord,
    DecisionStatus,
    ReviewHistoryEntry,
    ReviewOutcome,
    ReviewType,
)
from drctl.domain.versioning import BumpLevel, InvalidVersionError, bump_version

__all__ = [
    "UNSET",
    "BumpLevel",
    "ChangeType",
    "ChangelogEntry",
    "DecisionRecord",
    "DecisionStatus",
    "InvalidVersionError",
    "ReviewHistoryEntry",
    "ReviewOutcome",
    "ReviewType",
    "bump_version",
    "extract_domain_from_id",
    "generate_id",
]
