"""
drctl — markdown + YAML frontmatter IO for decision files.

File: src/drctl/persistence/frontmatter.py
Last updated: 2026-10-19

Purpose
- Split a decision file into its ``---`` delimited YAML block and markdown body.
- Render a metadata mapping and a body back into the same layout.

Functional requirements
- ISO dates stay strings; PyYAML's implicit timestamp resolution is disabled.
- Key order is preserved on render so diffs stay minimal.
- A file without an opening ``---`` line has empty metadata and the whole text as body.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final

import yaml

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

__all__ = [
    "FRONTMATTER_DELIMITER",
    "FrontmatterDocument",
    "FrontmatterError",
    "parse_document",
    "read_document",
    "render_document",
]

FRONTMATTER_DELIMITER: Final[str] = "---"
_TIMESTAMP_TAG: Final[str] = "tag:yaml.org,2002:timestamp"


class FrontmatterError(ValueError):
    """Raised when a file's frontmatter block is not valid YAML."""


class _DecisionLoader(yaml.SafeLoader):
    """SafeLoader that leaves ISO dates as strings."""


_DecisionLoader.yaml_implicit_resolvers = {
    first_char: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first_char, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


@dataclass(frozen=True, slots=True)
class FrontmatterDocument:
    metadata: dict[str, Any] = field(default_factory=dict)
    content: str = ""

    @property
    def has_frontmatter(self) -> bool:
        return bool(self.metadata)


def parse_document(text: str) -> FrontmatterDocument:
    """Split ``text`` into frontmatter metadata and markdown body."""

    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != FRONTMATTER_DELIMITER:
        return FrontmatterDocument(metadata={}, content=text)

    closing_index: int | None = None
    for index in range(1, len(lines)):
        # Only a column-0 delimiter closes the block.
        if lines[index].rstrip() == FRONTMATTER_DELIMITER:
            closing_index = index
            break
    if closing_index is None:
        return FrontmatterDocument(metadata={}, content=text)

    block = "".join(lines[1:closing_index])
    try:
        loaded = yaml.load(block, Loader=_DecisionLoader)  # noqa: S506 - SafeLoader subclass.
    except yaml.YAMLError as exc:
        raise FrontmatterError(f"invalid frontmatter: {exc}") from exc

    body = "".join(lines[closing_index + 1 :]).lstrip("\r\n")
    metadata = dict(loaded) if isinstance(loaded, dict) else {}
    return FrontmatterDocument(metadata=metadata, content=body)


def read_document(path: Path) -> FrontmatterDocument:
    try:
        return parse_document(path.read_text(encoding="utf-8"))
    except FrontmatterError as exc:
        raise FrontmatterError(f"{path}: {exc}") from exc


def render_document(metadata: Mapping[str, Any], content: str) -> str:
    """Render ``---`` delimited frontmatter followed by the body, newline-terminated."""

    dumped = yaml.dump(
        dict(metadata),
        Dumper=yaml.SafeDumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=100,
    )
    header = f"{FRONTMATTER_DELIMITER}\n{dumped}{FRONTMATTER_DELIMITER}\n"
    body = content.strip("\r\n")
    if not body:
        return header
    return f"{header}\n{body}\n"
