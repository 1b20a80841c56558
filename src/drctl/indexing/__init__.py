"""Markdown index generation."""

from drctl.indexing.indexer import IndexResult, build_index_markdown, generate_index

__all__ = ["IndexResult", "build_index_markdown", "generate_index"]
