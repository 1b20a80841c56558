"""Logging configuration for the drctl CLI."""

from drctl.observability.logging import configure_logging, parse_log_level

__all__ = ["configure_logging", "parse_log_level"]
