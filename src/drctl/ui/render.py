"""Output rendering for the drctl CLI.

File: src/drctl/ui/render.py
Last updated: 2026-10-19

Purpose
- Provide a thin rendering layer over a ``rich`` console for command output.
- Respect the NO_COLOR environment variable and the --no-color CLI flag.

What should be included in this file
- CLIRenderer class with methods for common output patterns.
- Factory function to create a renderer with appropriate settings.

Functional requirements
- Regular output goes to stdout; warnings and failures go to stderr.
- Text is printed literally: no markup parsing, no highlighting, no wrapping.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence

from rich.console import Console

__all__ = ["CLIRenderer", "create_renderer"]


def _color_allowed(no_color_flag: bool, environ: Mapping[str, str] | None = None) -> bool:
    """Check whether color output should be attempted."""

    env_map = os.environ if environ is None else environ
    if no_color_flag:
        return False
    return not env_map.get("NO_COLOR", "")


def _make_console(*, stderr: bool, color: bool) -> Console:
    return Console(
        stderr=stderr,
        no_color=not color,
        highlight=False,
        markup=False,
        emoji=False,
        soft_wrap=True,
    )


class CLIRenderer:
    """Thin CLI output renderer.

    Produces deterministic plain text; styles are applied only when color is allowed
    and the console is attached to a terminal.
    """

    def __init__(
        self,
        *,
        no_color: bool = False,
        verbose: bool = False,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.verbose = verbose
        self._color = _color_allowed(no_color, environ)
        self._out = _make_console(stderr=False, color=self._color)
        self._err = _make_console(stderr=True, color=self._color)

    def heading(self, text: str) -> None:
        """Print a heading line."""

        self._out.print(text, style="bold")

    def kv(self, key: str, value: object) -> None:
        """Print a key: value pair."""

        self._out.print(f"{key}: {value}")

    def text(self, line: str) -> None:
        self._out.print(line)

    def lines(self, lines: Sequence[str]) -> None:
        for line in lines:
            self._out.print(line)

    def blank(self) -> None:
        self._out.print()

    def section(self, title: str) -> None:
        """Print a section header with a preceding blank line."""

        self._out.print()
        self._out.print(title, style="bold")

    def warning(self, text: str) -> None:
        """Print a warning message to stderr."""

        self._err.print(f"⚠️ {text}", style="yellow")

    def notice(self, text: str) -> None:
        """Print an informational message to stderr, leaving stdout for command output."""

        self._err.print(text)

    def error(self, text: str) -> None:
        self._err.print(f"❌ {text}", style="red")

    def items(self, entries: Sequence[str], *, prefix: str = "- ") -> None:
        for entry in entries:
            self._out.print(f"   {prefix}{entry}")

    def columns(self, rows: Sequence[Sequence[str]], *, widths: Sequence[int]) -> None:
        """Print rows as left-justified fixed-width columns; the last column is not padded."""

        for row in rows:
            cells = [
                str(cell).ljust(widths[index]) if index < len(widths) else str(cell)
                for index, cell in enumerate(row)
            ]
            self._out.print(" ".join(cells).rstrip())

    def ok(self, label: str) -> None:
        """Print a passing check."""

        self._out.print(f"✅ {label}", style="green")

    def fail(self, label: str) -> None:
        """Print a failing check to stderr."""

        self._err.print(f"❌ {label}", style="red")


def create_renderer(
    *,
    no_color: bool = False,
    verbose: bool = False,
    environ: Mapping[str, str] | None = None,
) -> CLIRenderer:
    """Create a CLI renderer with the given settings."""

    return CLIRenderer(no_color=no_color, verbose=verbose, environ=environ)
