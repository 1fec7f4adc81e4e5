"""Parsing helpers shared by data sources and entry points."""
from __future__ import annotations

import re
from datetime import date
from typing import Optional

from dateutil import parser


NON_NUMERIC = re.compile(r"[^0-9.\-]")


def parse_float(value: object) -> Optional[float]:
    """Parse a vendor supplied number, tolerating stray symbols."""

    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    cleaned = str(value).strip().replace("%", "")
    if not cleaned:
        return None
    try:
        return float(cleaned)
    except ValueError:
        cleaned = NON_NUMERIC.sub("", cleaned)
        try:
            return float(cleaned) if cleaned else None
        except ValueError:
            return None


def parse_date(value: str | date | None) -> Optional[date]:
    """Parse an ISO-ish date string using dateutil."""

    if value is None or isinstance(value, date):
        return value
    value = value.strip()
    if not value:
        return None
    return parser.parse(value).date()


__all__ = ["parse_float", "parse_date"]
