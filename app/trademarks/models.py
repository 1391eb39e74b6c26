"""Data models shared across the crawler."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, Optional

# Canonical field key -> value. A key present with ``None`` means the label was
# on the page but its value cell was empty; a missing key means the label was
# never seen.
DetailRecord = Dict[str, Optional[str]]


@dataclass(frozen=True)
class SearchCriteria:
    """Inclusive registry date range for one crawl."""

    start_date: date
    end_date: date

    def __post_init__(self) -> None:
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")

    @property
    def start_text(self) -> str:
        return self.start_date.isoformat()

    @property
    def end_text(self) -> str:
        return self.end_date.isoformat()


class SearchOutcome(str, Enum):
    SUCCESS = "success"
    EMPTY_RESULT = "empty_result"
    OVERFLOW_RESULT = "overflow_result"
    AMBIGUOUS = "ambiguous"

    @property
    def is_terminal(self) -> bool:
        return self in (SearchOutcome.EMPTY_RESULT, SearchOutcome.OVERFLOW_RESULT)


__all__ = ["DetailRecord", "SearchCriteria", "SearchOutcome"]
