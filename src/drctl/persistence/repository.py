"""
drctl — decision record store.

File: src/drctl/persistence/repository.py
Last updated: 2026-10-19

Purpose
- Map records to ``<root>/<domain dir>/<id>.md`` and read/write them.
- Walk a repository tree and collect every decision file.

Functional requirements
- Saving without explicit content keeps the existing markdown body.
- Loading derives the domain from the id when none is given.
- Listing walks iteratively with an explicit stack, skips dot entries, and silently
  skips files whose frontmatter fails to parse or is empty.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from drctl.config.resolver import resolve_domain_dir
from drctl.constants import DECISION_SUFFIX
from drctl.domain.ids import ID_PATTERN_DESCRIPTION, extract_domain_from_id
from drctl.domain.models import DecisionRecord
from drctl.persistence.frontmatter import FrontmatterError, read_document, render_document
from drctl.utils.fs import atomic_write

if TYPE_CHECKING:
    from drctl.config.schema import RepoContext

logger = structlog.get_logger(__name__)

__all__ = [
    "DecisionDomainError",
    "DecisionExistsError",
    "DecisionNotFoundError",
    "LoadedDecision",
    "RecordError",
    "StoredDecision",
    "collect_decisions",
    "get_decision_path",
    "list_decisions",
    "load_decision",
    "load_decision_document",
    "save_decision",
]


class RecordError(RuntimeError):
    """Base error for decision record storage failures."""


class DecisionNotFoundError(RecordError, FileNotFoundError):
    """Raised when no file exists at a record's computed path."""


class DecisionExistsError(RecordError, FileExistsError):
    """Raised when creating a record whose file already exists."""


class DecisionDomainError(RecordError, ValueError):
    """Raised when a record's domain cannot be derived from its id."""


@dataclass(frozen=True, slots=True)
class StoredDecision:
    record: DecisionRecord
    file_path: Path


@dataclass(frozen=True, slots=True)
class LoadedDecision:
    record: DecisionRecord
    content: str
    file_path: Path


def get_decision_path(context: RepoContext, record: DecisionRecord) -> Path:
    return resolve_domain_dir(context, record.domain) / f"{record.id}{DECISION_SUFFIX}"


def save_decision(
    context: RepoContext,
    record: DecisionRecord,
    content: str | None = None,
) -> Path:
    """Write ``record``; when ``content`` is None an existing body is kept."""

    file_path = get_decision_path(context, record)
    if content is None:
        body = read_document(file_path).content if file_path.is_file() else ""
    else:
        body = content
    atomic_write(file_path, render_document(record.to_frontmatter(), body))
    logger.debug("record.saved", id=record.id, path=str(file_path))
    return file_path


def load_decision(
    context: RepoContext, record_id: str, domain: str | None = None
) -> DecisionRecord:
    return load_decision_document(context, record_id, domain).record


def load_decision_document(
    context: RepoContext,
    record_id: str,
    domain: str | None = None,
) -> LoadedDecision:
    """Load a record and its markdown body by id."""

    resolved_domain = domain or extract_domain_from_id(record_id)
    if not resolved_domain:
        raise DecisionDomainError(
            f'Unable to determine domain for record "{record_id}". '
            f"Ensure the identifier includes the domain segment ({ID_PATTERN_DESCRIPTION})."
        )
    file_path = resolve_domain_dir(context, resolved_domain) / f"{record_id}{DECISION_SUFFIX}"
    if not file_path.is_file():
        raise DecisionNotFoundError(f'Decision record "{record_id}" not found at {file_path}')

    document = read_document(file_path)
    record = DecisionRecord.from_frontmatter(document.metadata)
    if not record.domain:
        record.domain = resolved_domain
    return LoadedDecision(record=record, content=document.content, file_path=file_path)


def list_decisions(context: RepoContext) -> list[DecisionRecord]:
    return [entry.record for entry in collect_decisions(context)]


def collect_decisions(context: RepoContext) -> list[StoredDecision]:
    """Collect every parseable decision file under the repository root."""

    root = Path(context.root)
    if not root.is_dir():
        return []

    domain_dirs = {
        resolve_domain_dir(context, domain): domain for domain in sorted(context.domain_map)
    }
    domain_parent = (
        Path(os.path.normpath(root / context.default_domain_dir))
        if context.default_domain_dir
        else root
    )

    results: list[StoredDecision] = []
    stack: list[tuple[Path, str | None]] = [(root, None)]
    while stack:
        directory, inherited_domain = stack.pop()
        try:
            with os.scandir(directory) as iterator:
                entries = sorted(iterator, key=lambda item: item.name)
        except OSError as exc:
            logger.debug("record.walk_skipped", path=str(directory), error=str(exc))
            continue

        for entry in entries:
            if entry.name.startswith("."):
                continue
            entry_path = Path(entry.path)
            if entry.is_dir(follow_symlinks=False):
                child_domain = _child_domain(
                    entry_path, inherited_domain, domain_dirs, domain_parent
                )
                stack.append((entry_path, child_domain))
                continue
            if not entry.is_file() or not entry.name.endswith(DECISION_SUFFIX):
                continue

            record = _read_record(entry_path)
            if record is None:
                continue
            if not record.domain:
                record.domain = inherited_domain or extract_domain_from_id(record.id) or ""
            results.append(StoredDecision(record=record, file_path=entry_path))

    results.sort(key=lambda item: str(item.file_path))
    return results


def _child_domain(
    directory: Path,
    inherited: str | None,
    domain_dirs: dict[Path, str],
    domain_parent: Path,
) -> str | None:
    mapped = domain_dirs.get(directory)
    if mapped is not None:
        return mapped
    if inherited is None and directory.parent == domain_parent:
        return directory.name
    return inherited


def _read_record(path: Path) -> DecisionRecord | None:
    try:
        document = read_document(path)
    except (FrontmatterError, OSError, UnicodeDecodeError) as exc:
        logger.debug("record.parse_skipped", path=str(path), error=str(exc))
        return None
    if not document.has_frontmatter:
        return None
    return DecisionRecord.from_frontmatter(document.metadata)
