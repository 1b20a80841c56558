"""Decision record identifiers: ``DR--YYYYMMDD--<domain>--<slug>``."""

from __future__ import annotations

import datetime as dt
from typing import Final

ID_PREFIX: Final[str] = "DR"
ID_SEPARATOR: Final[str] = "--"
ID_PATTERN_DESCRIPTION: Final[str] = "DR--YYYYMMDD--<domain>--<slug>"

__all__ = [
    "ID_PATTERN_DESCRIPTION",
    "ID_PREFIX",
    "ID_SEPARATOR",
    "extract_domain_from_id",
    "generate_id",
]


def generate_id(domain: str, slug: str, *, today: dt.date | None = None) -> str:
    """Return the canonical identifier for a new record created on ``today``."""

    day = today if today is not None else dt.date.today()
    return ID_SEPARATOR.join((ID_PREFIX, day.strftime("%Y%m%d"), domain, slug))


def extract_domain_from_id(record_id: str) -> str | None:
    """Return the third ``--`` segment of ``record_id``, or None when it is missing."""

    parts = record_id.split(ID_SEPARATOR)
    if len(parts) < 4:
        return None
    domain = parts[2].strip()
    return domain or None
