"""
drctl — decision record domain model.

File: src/drctl/domain/models.py
Last updated: 2026-10-19

Purpose
- Define ``DecisionRecord`` and the enums that constrain its lifecycle fields.
- Convert records to and from the camelCase frontmatter mapping stored on disk.

What should be included in this file
- Status, change-type, review-type, and review-outcome enums.
- Changelog and review-history entry types.
- Lossless ``from_frontmatter`` / ``to_frontmatter`` conversion.

Functional requirements
- Parsing is lenient: unknown status or change-type strings are preserved so that
  governance validation can report them instead of the loader rejecting the file.
- ``supersedes`` / ``supersededBy`` distinguish an explicit null from an absent key.
- Unknown frontmatter keys survive a load/save cycle unchanged.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum, StrEnum
from typing import Any, Final

__all__ = [
    "ACCEPTABLE_STATUSES",
    "CREATION_COMPATIBLE_STATUSES",
    "PROPOSABLE_STATUSES",
    "STATUS_DISPLAY_ORDER",
    "UNSET",
    "ChangeType",
    "ChangelogEntry",
    "DecisionRecord",
    "DecisionStatus",
    "LINK_FIELDS",
    "ReviewHistoryEntry",
    "ReviewOutcome",
    "ReviewType",
    "Unset",
]


class Unset(Enum):
    """Marker for a frontmatter key that is absent, as opposed to explicitly null."""

    UNSET = "UNSET"

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Final = Unset.UNSET


class DecisionStatus(StrEnum):
    DRAFT = "draft"
    PROPOSED = "proposed"
    ACCEPTED = "accepted"
    DEPRECATED = "deprecated"
    SUPERSEDED = "superseded"
    REJECTED = "rejected"
    RETIRED = "retired"
    ARCHIVED = "archived"


class ChangeType(StrEnum):
    CREATION = "creation"
    CORRECTION = "correction"
    REVISION = "revision"
    SUPERSESSION = "supersession"
    RETIREMENT = "retirement"


class ReviewType(StrEnum):
    SCHEDULED = "scheduled"
    ADHOC = "adhoc"
    CONTEXTUAL = "contextual"


class ReviewOutcome(StrEnum):
    KEEP = "keep"
    REVISE = "revise"
    RETIRE = "retire"
    SUPERSEDE = "supersede"


# "new" is a legacy status kept only so old records still sort sensibly.
STATUS_DISPLAY_ORDER: Final[tuple[str, ...]] = (
    "new",
    DecisionStatus.DRAFT,
    DecisionStatus.PROPOSED,
    DecisionStatus.ACCEPTED,
    DecisionStatus.DEPRECATED,
    DecisionStatus.SUPERSEDED,
    DecisionStatus.REJECTED,
    DecisionStatus.RETIRED,
    DecisionStatus.ARCHIVED,
)

PROPOSABLE_STATUSES: Final[frozenset[str]] = frozenset(
    {DecisionStatus.DRAFT.value, DecisionStatus.PROPOSED.value}
)
ACCEPTABLE_STATUSES: Final[frozenset[str]] = frozenset(
    {DecisionStatus.DRAFT.value, DecisionStatus.PROPOSED.value, DecisionStatus.ACCEPTED.value}
)
CREATION_COMPATIBLE_STATUSES: Final[frozenset[str]] = ACCEPTABLE_STATUSES

LINK_FIELDS: Final[tuple[str, ...]] = ("sources", "implementedBy", "relatedArtifacts")

_KNOWN_KEYS: Final[frozenset[str]] = frozenset(
    {
        "id",
        "dateCreated",
        "lastEdited",
        "dateAccepted",
        "version",
        "status",
        "changeType",
        "changelog",
        "confidence",
        "reviewDate",
        "reviewHistory",
        "lastReviewedAt",
        "domain",
        "slug",
        "supersedes",
        "supersededBy",
        "templateUsed",
        "tags",
    }
)


@dataclass(frozen=True, slots=True)
class ChangelogEntry:
    date: str
    note: str

    @classmethod
    def from_value(cls, value: object) -> ChangelogEntry:
        if isinstance(value, Mapping):
            return cls(date=_text(value.get("date")), note=_text(value.get("note")))
        return cls(date="", note=_text(value))

    def to_dict(self) -> dict[str, str]:
        return {"date": self.date, "note": self.note}


@dataclass(frozen=True, slots=True)
class ReviewHistoryEntry:
    """One review event. Fields stay plain strings so malformed values can be reported."""

    date: str
    type: str
    outcome: str
    reviewer: str | None = None
    reason: str | None = None

    @classmethod
    def from_value(cls, value: object) -> ReviewHistoryEntry:
        if not isinstance(value, Mapping):
            return cls(date="", type="", outcome="")
        reviewer = value.get("reviewer")
        reason = value.get("reason")
        return cls(
            date=_text(value.get("date")),
            type=_text(value.get("type")),
            outcome=_text(value.get("outcome")),
            reviewer=None if reviewer is None else _text(reviewer),
            reason=None if reason is None else _text(reason),
        )

    def to_dict(self) -> dict[str, str]:
        payload = {"date": self.date, "type": self.type, "outcome": self.outcome}
        if self.reviewer is not None:
            payload["reviewer"] = self.reviewer
        if self.reason is not None:
            payload["reason"] = self.reason
        return payload


@dataclass(slots=True)
class DecisionRecord:
    """A decision record as stored in a markdown file's frontmatter."""

    id: str
    date_created: str
    version: str
    status: str
    change_type: str
    domain: str = ""
    slug: str = ""
    last_edited: str | None = None
    date_accepted: str | None = None
    changelog: list[ChangelogEntry] = field(default_factory=list)
    confidence: float | None = None
    review_date: str | None = None
    review_history: list[ReviewHistoryEntry] = field(default_factory=list)
    last_reviewed_at: str | None = None
    supersedes: str | None | Unset = UNSET
    superseded_by: str | None | Unset = UNSET
    template_used: str | None = None
    tags: list[str] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def add_changelog(self, date: str, note: str) -> None:
        self.changelog.append(ChangelogEntry(date=date, note=note))

    def has_changelog_note(self, note: str) -> bool:
        return any(entry.note == note for entry in self.changelog)

    def copy(self) -> DecisionRecord:
        return copy.deepcopy(self)

    @classmethod
    def from_frontmatter(cls, data: Mapping[str, Any]) -> DecisionRecord:
        """Build a record from a parsed frontmatter mapping."""

        extra = {key: value for key, value in data.items() if key not in _KNOWN_KEYS}

        raw_changelog = data.get("changelog")
        changelog = (
            [ChangelogEntry.from_value(item) for item in raw_changelog]
            if isinstance(raw_changelog, list)
            else []
        )

        raw_history = data.get("reviewHistory")
        if isinstance(raw_history, list):
            review_history = [ReviewHistoryEntry.from_value(item) for item in raw_history]
        else:
            review_history = []
            if raw_history is not None:
                extra["reviewHistory"] = raw_history

        raw_confidence = data.get("confidence")
        confidence: float | None
        if isinstance(raw_confidence, bool) or raw_confidence is None:
            confidence = None
        elif isinstance(raw_confidence, (int, float)):
            confidence = float(raw_confidence)
        else:
            confidence = None
            extra["confidence"] = raw_confidence

        raw_tags = data.get("tags")
        tags = [_text(tag) for tag in raw_tags] if isinstance(raw_tags, list) else None
        if raw_tags is not None and tags is None:
            extra["tags"] = raw_tags

        return cls(
            id=_text(data.get("id")),
            date_created=_text(data.get("dateCreated")),
            version=_text(data.get("version")),
            status=_text(data.get("status")),
            change_type=_text(data.get("changeType")),
            domain=_text(data.get("domain")),
            slug=_text(data.get("slug")),
            last_edited=_optional_text(data.get("lastEdited")),
            date_accepted=_optional_text(data.get("dateAccepted")),
            changelog=changelog,
            confidence=confidence,
            review_date=_optional_text(data.get("reviewDate")),
            review_history=review_history,
            last_reviewed_at=_optional_text(data.get("lastReviewedAt")),
            supersedes=_link(data, "supersedes"),
            superseded_by=_link(data, "supersededBy"),
            template_used=_optional_text(data.get("templateUsed")),
            tags=tags,
            extra=extra,
        )

    def to_frontmatter(self) -> dict[str, Any]:
        """Serialize to the camelCase mapping written to disk; absent fields are omitted."""

        payload: dict[str, Any] = {
            "id": self.id,
            "dateCreated": self.date_created,
        }
        if self.last_edited is not None:
            payload["lastEdited"] = self.last_edited
        if self.date_accepted is not None:
            payload["dateAccepted"] = self.date_accepted
        payload["version"] = self.version
        payload["status"] = self.status
        payload["changeType"] = self.change_type
        payload["domain"] = self.domain
        payload["slug"] = self.slug
        if self.confidence is not None:
            payload["confidence"] = self.confidence
        if self.review_date is not None:
            payload["reviewDate"] = self.review_date
        if self.last_reviewed_at is not None:
            payload["lastReviewedAt"] = self.last_reviewed_at
        if self.review_history:
            payload["reviewHistory"] = [entry.to_dict() for entry in self.review_history]
        if self.supersedes is not UNSET:
            payload["supersedes"] = self.supersedes
        if self.superseded_by is not UNSET:
            payload["supersededBy"] = self.superseded_by
        if self.template_used is not None:
            payload["templateUsed"] = self.template_used
        if self.tags is not None:
            payload["tags"] = list(self.tags)
        payload["changelog"] = [entry.to_dict() for entry in self.changelog]
        for key, value in self.extra.items():
            payload.setdefault(key, value)
        return payload


def _text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def _optional_text(value: object) -> str | None:
    if value is None:
        return None
    return _text(value)


def _link(data: Mapping[str, Any], key: str) -> str | None | Unset:
    if key not in data:
        return UNSET
    value = data[key]
    if value is None:
        return None
    return _text(value)
