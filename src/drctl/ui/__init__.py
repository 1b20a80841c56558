"""Command-line surface: argparse router and output rendering."""

from drctl.ui.cli import CLIError, LegacyNoticeState, build_parser, format_repo_context, run_cli
from drctl.ui.render import CLIRenderer, create_renderer

__all__ = [
    "CLIError",
    "CLIRenderer",
    "LegacyNoticeState",
    "build_parser",
    "create_renderer",
    "format_repo_context",
    "run_cli",
]
