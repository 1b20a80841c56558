"""
drctl — unit tests for the decision record model

File: tests/unit/domain/test_decision_models.py
Last updated: 2026-10-19

Purpose
- Validate lenient frontmatter parsing and lossless serialization of ``DecisionRecord``.

What this test file should cover
- Unknown keys and malformed values survive a load/save cycle.
- Explicit null versus absent ``supersedes`` / ``supersededBy``.
- Identifier generation and domain extraction.
"""

from __future__ import annotations

import datetime as dt

import pytest

from drctl.domain.ids import extract_domain_from_id, generate_id
from drctl.domain.models import (
    UNSET,
    ChangelogEntry,
    DecisionRecord,
    ReviewHistoryEntry,
)

FULL_FRONTMATTER: dict[str, object] = {
    "id": "DR--20250115--infra--use-postgres",
    "dateCreated": "2025-01-15",
    "lastEdited": "2025-02-01",
    "dateAccepted": "2025-02-01",
    "version": "1.1.0",
    "status": "accepted",
    "changeType": "revision",
    "domain": "infra",
    "slug": "use-postgres",
    "confidence": 0.75,
    "reviewDate": "2026-02-01",
    "lastReviewedAt": "2025-02-01",
    "reviewHistory": [
        {"date": "2025-02-01", "type": "adhoc", "outcome": "revise", "reviewer": "casey"},
    ],
    "supersedes": None,
    "templateUsed": "templates/adr.md",
    "tags": ["database", "platform"],
    "changelog": [
        {"date": "2025-01-15", "note": "Initial creation"},
        {"date": "2025-02-01", "note": "Revision"},
    ],
    "implementedBy": ["https://example.invalid/pr/1"],
    "owner": {"team": "platform"},
}


def test_round_trip_is_lossless() -> None:
    record = DecisionRecord.from_frontmatter(FULL_FRONTMATTER)

    assert record.to_frontmatter() == FULL_FRONTMATTER


def test_fields_are_parsed() -> None:
    record = DecisionRecord.from_frontmatter(FULL_FRONTMATTER)

    assert record.id == "DR--20250115--infra--use-postgres"
    assert record.confidence == 0.75
    assert record.supersedes is None
    assert record.superseded_by is UNSET
    assert record.changelog[1] == ChangelogEntry(date="2025-02-01", note="Revision")
    assert record.review_history == [
        ReviewHistoryEntry(date="2025-02-01", type="adhoc", outcome="revise", reviewer="casey")
    ]
    assert record.extra == {
        "implementedBy": ["https://example.invalid/pr/1"],
        "owner": {"team": "platform"},
    }


def test_absent_links_are_not_written() -> None:
    record = DecisionRecord.from_frontmatter({"id": "x", "status": "draft"})

    payload = record.to_frontmatter()

    assert record.supersedes is UNSET
    assert "supersedes" not in payload
    assert "supersededBy" not in payload
    assert payload["changelog"] == []


def test_unknown_status_and_change_type_are_preserved() -> None:
    record = DecisionRecord.from_frontmatter(
        {"id": "x", "status": "pending", "changeType": "rewrite"}
    )

    assert record.status == "pending"
    assert record.change_type == "rewrite"


def test_malformed_values_move_to_extra() -> None:
    record = DecisionRecord.from_frontmatter(
        {
            "id": "x",
            "reviewHistory": "yearly",
            "confidence": "high",
            "tags": "a,b",
        }
    )

    assert record.review_history == []
    assert record.confidence is None
    assert record.tags is None
    assert record.extra == {"reviewHistory": "yearly", "confidence": "high", "tags": "a,b"}
    payload = record.to_frontmatter()
    assert payload["reviewHistory"] == "yearly"
    assert payload["confidence"] == "high"
    assert payload["tags"] == "a,b"


def test_boolean_confidence_is_ignored() -> None:
    record = DecisionRecord.from_frontmatter({"id": "x", "confidence": True})

    assert record.confidence is None
    assert "confidence" not in record.to_frontmatter()


def test_loose_changelog_and_review_entries() -> None:
    record = DecisionRecord.from_frontmatter(
        {"id": "x", "changelog": ["legacy note"], "reviewHistory": ["not-a-mapping"]}
    )

    assert record.changelog == [ChangelogEntry(date="", note="legacy note")]
    assert record.review_history == [ReviewHistoryEntry(date="", type="", outcome="")]


def test_add_changelog_and_copy() -> None:
    record = DecisionRecord(
        id="x", date_created="2025-01-15", version="1.0", status="draft", change_type="creation"
    )
    clone = record.copy()

    record.add_changelog("2025-01-16", "Marked as draft")

    assert record.has_changelog_note("Marked as draft")
    assert not clone.has_changelog_note("Marked as draft")
    assert clone.changelog == []


def test_generate_id() -> None:
    assert (
        generate_id("infra", "use-postgres", today=dt.date(2024, 3, 5))
        == "DR--20240305--infra--use-postgres"
    )


@pytest.mark.parametrize(
    ("record_id", "expected"),
    [
        ("DR--20240305--infra--use-postgres", "infra"),
        ("DR--20240305--infra--slug--with--dashes", "infra"),
        ("DR--20240305----slug", None),
        ("DR--20240305--infra", None),
        ("not-an-id", None),
    ],
)
def test_extract_domain_from_id(record_id: str, expected: str | None) -> None:
    assert extract_domain_from_id(record_id) == expected
