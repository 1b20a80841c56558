"""
drctl — decision body templates.

File: src/drctl/lifecycle/templates.py
Last updated: 2026-10-19

Purpose
- Pick the markdown body for a new record and keep out-of-repo templates reproducible.
- Report template hygiene problems when a record is proposed.

What should be included in this file
- Candidate order: explicit path, ``DRCTL_TEMPLATE``, repo ``template`` setting, built-in default.
- Copying of templates that live outside the repo into ``<root>/templates/``,
  reusing an identical copy and otherwise picking ``name-2.md``, ``name-3.md``, ...
- The built-in default body, rendered with Jinja2.

Functional requirements
- A candidate that does not exist or cannot be read is skipped, never fatal.
- ``templateUsed`` is always a posix path relative to the repo root.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Final

import structlog
from jinja2 import Environment, StrictUndefined

from drctl.config.paths import resolve_template_path
from drctl.constants import ENV_TEMPLATE, TEMPLATES_DIR
from drctl.utils.fs import atomic_write, is_within, posix_relative

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from drctl.config.schema import RepoContext
    from drctl.domain.models import DecisionRecord

logger = structlog.get_logger(__name__)

__all__ = [
    "DEFAULT_REQUIRED_HEADINGS",
    "ResolvedTemplate",
    "TEMPLATE_HYGIENE_PREFIX",
    "collect_template_warnings",
    "emit_template_warnings",
    "render_default_template",
    "resolve_template_body",
]


@dataclass(frozen=True, slots=True)
class _Section:
    heading: str
    placeholder: str
    table: str | None = None


_OPTIONS_TABLE: Final[str] = "\n".join(
    (
        "| Option | Description | Outcome  | Rationale                      |",
        "| ------ | ----------- | -------- | ------------------------------ |",
        "| A      | Do nothing  | Rejected | Insufficient long-term clarity |",
        "| B      |             |          |                                |",
    )
)

_DEFAULT_SECTIONS: Final[tuple[_Section, ...]] = (
    _Section(
        "🧭 Context",
        "_Describe the background and circumstances leading to this decision._",
    ),
    _Section(
        "⚖️ Options Considered",
        "_List the main options or alternatives that were evaluated before making the "
        "decision, including why each was accepted or rejected._",
        table=_OPTIONS_TABLE,
    ),
    _Section("🧠 Decision", "_State the decision made clearly and succinctly._"),
    _Section(
        "🪶 Principles",
        "_List the guiding principles or values that influenced this decision._",
    ),
    _Section(
        "🔁 Lifecycle",
        "_Outline the current lifecycle state and any relevant change types._",
    ),
    _Section(
        "🧩 Reasoning",
        "_Explain the rationale, trade-offs, and considerations behind the decision._",
    ),
    _Section(
        "🔄 Next Actions",
        "_Specify the immediate next steps or actions following this decision._",
    ),
    _Section(
        "🧠 Confidence",
        "_Indicate the confidence level in this decision and any planned reviews._",
    ),
    _Section(
        "🧾 Changelog",
        "_Summarise notable updates, revisions, or corrections. Each should have a date and "
        "note in YAML frontmatter for traceability._",
    ),
)

DEFAULT_REQUIRED_HEADINGS: Final[tuple[str, ...]] = tuple(
    f"## {section.heading}" for section in _DEFAULT_SECTIONS
)
_DEFAULT_PLACEHOLDERS: Final[tuple[str, ...]] = tuple(
    section.placeholder for section in _DEFAULT_SECTIONS
)
_OPTIONS_PLACEHOLDER_RE: Final[re.Pattern[str]] = re.compile(r"\| B\s+\|\s+\|\s+\|\s+\|")

TEMPLATE_HYGIENE_PREFIX: Final[str] = "Template hygiene: "

_DEFAULT_TEMPLATE_SOURCE: Final[str] = """\
# {{ record_id }}

{% for section in sections %}
## {{ section.heading }}

{{ section.placeholder }}

{% if section.table %}
{{ section.table }}

{% endif %}
{% endfor %}
"""

_JINJA_ENV: Final[Environment] = Environment(
    undefined=StrictUndefined,
    autoescape=False,
    keep_trailing_newline=True,
    trim_blocks=True,
    lstrip_blocks=True,
    newline_sequence="\n",
)


@dataclass(frozen=True, slots=True)
class ResolvedTemplate:
    body: str
    template_used: str | None = None
    copied_path: Path | None = None


def render_default_template(record: DecisionRecord) -> str:
    template = _JINJA_ENV.from_string(_DEFAULT_TEMPLATE_SOURCE)
    return template.render(record_id=record.id, sections=_DEFAULT_SECTIONS)


def resolve_template_body(
    record: DecisionRecord,
    context: RepoContext,
    *,
    template_path: str | None = None,
    env_template: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> ResolvedTemplate:
    """Return the first readable template candidate, or the built-in default body."""

    env_map = os.environ if environ is None else environ
    candidates = (
        _clean(template_path),
        _clean(env_template if env_template is not None else env_map.get(ENV_TEMPLATE)),
        _clean(context.default_template),
    )
    for candidate in candidates:
        if candidate is None:
            continue
        absolute = resolve_template_path(context.root, candidate, environ=env_map)
        if not absolute.is_file():
            logger.debug("template.candidate_skipped", candidate=candidate, reason="missing")
            continue
        try:
            body = absolute.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("template.candidate_skipped", candidate=candidate, reason=str(exc))
            continue
        template_used, copied_path = _ensure_template_in_repo(context.root, absolute, body)
        return ResolvedTemplate(body=body, template_used=template_used, copied_path=copied_path)

    return ResolvedTemplate(body=render_default_template(record))


def collect_template_warnings(record: DecisionRecord, content: str) -> list[str]:
    """Text checks for leftover default-template scaffolding in a record body."""

    warnings: list[str] = []
    if any(placeholder in content for placeholder in _DEFAULT_PLACEHOLDERS):
        warnings.append("Placeholder text from the default template is still present.")

    if not record.template_used:
        missing = [
            heading for heading in DEFAULT_REQUIRED_HEADINGS if not _has_heading(content, heading)
        ]
        if missing:
            warnings.append(f"Missing default template heading(s): {', '.join(missing)}.")

    if _OPTIONS_PLACEHOLDER_RE.search(content):
        warnings.append("The options table still contains placeholder rows.")
    return warnings


def emit_template_warnings(
    record: DecisionRecord,
    content: str,
    sink: Callable[[str], None] | None,
) -> list[str]:
    warnings = collect_template_warnings(record, content)
    messages = [f"{TEMPLATE_HYGIENE_PREFIX}{warning}" for warning in warnings]
    for message in messages:
        if sink is not None:
            sink(message)
        else:
            logger.warning("template.hygiene", id=record.id, message=message)
    return messages


def _ensure_template_in_repo(root: Path, source: Path, body: str) -> tuple[str, Path | None]:
    if is_within(source, root):
        return posix_relative(source, root), None

    templates_dir = root / TEMPLATES_DIR
    stem, suffix = source.stem, source.suffix
    counter = 1
    while True:
        name = f"{stem}{suffix}" if counter == 1 else f"{stem}-{counter}{suffix}"
        target = templates_dir / name
        if not target.exists():
            break
        if target.is_file() and target.read_text(encoding="utf-8") == body:
            return posix_relative(target, root), None
        counter += 1

    atomic_write(target, body)
    logger.info("template.copied", source=str(source), target=str(target))
    return posix_relative(target, root), target


def _has_heading(content: str, heading: str) -> bool:
    return re.search(rf"^{re.escape(heading)}\s*$", content, flags=re.MULTILINE) is not None


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None
