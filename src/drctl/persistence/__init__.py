"""Filesystem persistence for decision records."""

from drctl.persistence.frontmatter import FrontmatterError, parse_document, render_document
from drctl.persistence.repository import (
    DecisionDomainError,
    DecisionExistsError,
    DecisionNotFoundError,
    LoadedDecision,
    RecordError,
    StoredDecision,
    collect_decisions,
    get_decision_path,
    list_decisions,
    load_decision,
    load_decision_document,
    save_decision,
)

__all__ = [
    "DecisionDomainError",
    "DecisionExistsError",
    "DecisionNotFoundError",
    "FrontmatterError",
    "LoadedDecision",
    "RecordError",
    "StoredDecision",
    "collect_decisions",
    "get_decision_path",
    "list_decisions",
    "load_decision",
    "load_decision_document",
    "parse_document",
    "render_document",
    "save_decision",
]
