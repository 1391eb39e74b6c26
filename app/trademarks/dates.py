from __future__ import annotations

import re
from datetime import date, datetime

from .errors import UsageError
from .models import SearchCriteria

ISO_DATE_FORMAT = "%Y-%m-%d"
_ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


def parse_iso_date(value: str | None) -> date:
    """Parse a strict ``YYYY-MM-DD`` calendar date.

    Raises ``UsageError`` for anything else, including well-shaped strings
    that are not real dates (``2024-02-30``).
    """

    candidate = (value or "").strip()
    if not _ISO_DATE_RE.fullmatch(candidate):
        raise UsageError(f"Invalid date {value!r}. Use YYYY-MM-DD.")
    try:
        return datetime.strptime(candidate, ISO_DATE_FORMAT).date()
    except ValueError as exc:
        raise UsageError(f"Invalid date {value!r}. Use YYYY-MM-DD.") from exc


def parse_criteria(start: str | None, end: str | None) -> SearchCriteria:
    """Validate a caller-supplied date range and build ``SearchCriteria``."""

    if not start or not end:
        raise UsageError("Both a start date and an end date are required (YYYY-MM-DD).")

    start_date = parse_iso_date(start)
    end_date = parse_iso_date(end)
    if start_date > end_date:
        raise UsageError("Start date must be before or equal to end date.")
    return SearchCriteria(start_date=start_date, end_date=end_date)


__all__ = ["ISO_DATE_FORMAT", "parse_iso_date", "parse_criteria"]
