"""
drctl — structured logging setup.

File: src/drctl/observability/logging.py
Last updated: 2026-10-19

Purpose
- Configure ``structlog`` on top of stdlib ``logging`` so every module can emit
  event-style records via ``structlog.get_logger(__name__)``.

What should be included in this file
- Level and format selection from arguments or ``DRCTL_LOG_LEVEL`` / ``DRCTL_LOG_FORMAT``.
- Console and JSON-lines renderers, both writing to stderr.
- Redaction of sensitive-looking keys before rendering.

Functional requirements
- Idempotent: calling ``configure_logging`` again replaces the previous handler.
- stdout stays reserved for command output.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping, MutableMapping
from typing import Any, Final

import structlog

from drctl.constants import ENV_LOG_FORMAT, ENV_LOG_LEVEL

__all__ = ["DEFAULT_LOG_LEVEL", "LOGGER_NAME", "configure_logging", "parse_log_level"]

LOGGER_NAME: Final[str] = "drctl"
DEFAULT_LOG_LEVEL: Final[str] = "WARNING"

_REDACTED_VALUE: Final[str] = "***REDACTED***"
_SENSITIVE_KEY_TERMS: Final[tuple[str, ...]] = (
    "secret",
    "token",
    "password",
    "api_key",
    "authorization",
    "credential",
)
_HANDLER_MARKER: Final[str] = "_drctl_handler"


def configure_logging(
    level: int | str | None = None,
    json_output: bool | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    stream: Any = None,
) -> logging.Logger:
    """Install the drctl handler and return the package root logger.

    Parameters
    ----------
    level:
        Logging level name or number; falls back to ``DRCTL_LOG_LEVEL`` then ``WARNING``.
    json_output:
        Render JSON lines instead of console text; falls back to ``DRCTL_LOG_FORMAT == "json"``.
    stream:
        Destination stream, stderr by default.
    """

    env_map = os.environ if environ is None else environ
    resolved_level = parse_log_level(
        level if level is not None else env_map.get(ENV_LOG_LEVEL) or DEFAULT_LOG_LEVEL
    )
    if json_output is None:
        json_output = env_map.get(ENV_LOG_FORMAT, "").strip().lower() == "json"

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _redact_event_dict,
    ]
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    renderer: Any
    if json_output:
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(formatter)
    setattr(handler, _HANDLER_MARKER, True)

    logger = logging.getLogger(LOGGER_NAME)
    for existing in list(logger.handlers):
        if getattr(existing, _HANDLER_MARKER, False):
            logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(resolved_level)
    logger.propagate = False
    return logger


def parse_log_level(value: int | str) -> int:
    if isinstance(value, int):
        return value

    normalized = value.strip().upper()
    parsed = logging.getLevelName(normalized)
    if isinstance(parsed, int):
        return parsed

    raise ValueError(f"unsupported logging level {value!r}")


def _redact_event_dict(
    _logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    for key in list(event_dict):
        key_lower = key.lower()
        if any(term in key_lower for term in _SENSITIVE_KEY_TERMS):
            event_dict[key] = _REDACTED_VALUE
    return event_dict
