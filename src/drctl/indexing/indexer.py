"""
drctl — markdown index generator.

File: src/drctl/indexing/indexer.py
Last updated: 2026-10-19

Purpose
- Write ``<root>/index.md`` listing every decision grouped by domain.

Functional requirements
- Domains sorted by name; records sorted by id within a domain.
- Links are posix paths relative to the repo root, prefixed with ``./``.
- An empty repository still produces a valid index with a placeholder line.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

import structlog
from jinja2 import Environment, StrictUndefined

from drctl.constants import DEFAULT_INDEX_FILENAME
from drctl.persistence.repository import get_decision_path, list_decisions
from drctl.utils.fs import atomic_write, posix_relative

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from pathlib import Path

    from drctl.config.schema import RepoContext
    from drctl.domain.models import DecisionRecord

logger = structlog.get_logger(__name__)

__all__ = ["IndexResult", "build_index_markdown", "generate_index"]

UNCATEGORISED: Final[str] = "uncategorised"

_INDEX_TEMPLATE: Final[str] = """\
# {{ title }}

{% if generated_on %}
_Generated {{ generated_on }} by drctl index_

{% endif %}
{% for group in groups %}
## {{ group.domain }}

{% for entry in group.entries %}
{{ loop.index }}. [{{ entry.id }}]({{ entry.link }})
{% endfor %}

{% else %}
_(No decisions found.)_
{% endfor %}
"""

_JINJA_ENV: Final[Environment] = Environment(
    undefined=StrictUndefined,
    autoescape=False,
    keep_trailing_newline=True,
    trim_blocks=True,
    lstrip_blocks=True,
)


@dataclass(frozen=True, slots=True)
class IndexResult:
    file_path: Path
    markdown: str
    record_count: int


@dataclass(frozen=True, slots=True)
class _Entry:
    id: str
    link: str


@dataclass(frozen=True, slots=True)
class _Group:
    domain: str
    entries: tuple[_Entry, ...]


def generate_index(
    context: RepoContext,
    *,
    output_file_name: str = DEFAULT_INDEX_FILENAME,
    title: str | None = None,
    include_generated_note: bool = True,
    status_filter: str | None = None,
    clock: Callable[[], dt.date] | None = None,
) -> IndexResult:
    """Render the index for ``context`` and write it under the repo root."""

    records = list_decisions(context)
    if status_filter:
        records = [record for record in records if record.status == status_filter]

    today = (clock or dt.date.today)()
    markdown = build_index_markdown(
        context,
        records,
        title=title,
        generated_on=today.isoformat() if include_generated_note else None,
    )
    file_path = context.root / output_file_name
    atomic_write(file_path, markdown)
    logger.info("index.generated", path=str(file_path), records=len(records))
    return IndexResult(file_path=file_path, markdown=markdown, record_count=len(records))


def build_index_markdown(
    context: RepoContext,
    records: Sequence[DecisionRecord],
    *,
    title: str | None = None,
    generated_on: str | None = None,
) -> str:
    grouped: dict[str, list[DecisionRecord]] = {}
    for record in records:
        grouped.setdefault(record.domain or UNCATEGORISED, []).append(record)

    groups = [
        _Group(
            domain=domain,
            entries=tuple(
                _Entry(id=record.id, link=_relative_link(context, record))
                for record in sorted(grouped[domain], key=lambda item: item.id)
            ),
        )
        for domain in sorted(grouped)
    ]
    rendered = _JINJA_ENV.from_string(_INDEX_TEMPLATE).render(
        title=title or _default_title(context),
        generated_on=generated_on,
        groups=groups,
    )
    return rendered.rstrip("\n") + "\n"


def _default_title(context: RepoContext) -> str:
    if context.name:
        return f"{context.name} Decisions"
    return "Decision Index"


def _relative_link(context: RepoContext, record: DecisionRecord) -> str:
    relative = posix_relative(get_decision_path(context, record), context.root)
    if relative.startswith("."):
        return relative
    return f"./{relative}"
