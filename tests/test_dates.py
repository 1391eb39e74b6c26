from __future__ import annotations

from datetime import date

import pytest

from app.trademarks.dates import parse_criteria, parse_iso_date
from app.trademarks.error_codes import ErrorCode
from app.trademarks.errors import UsageError
from app.trademarks.models import SearchCriteria


def test_parse_criteria_accepts_inclusive_range() -> None:
    criteria = parse_criteria("2024-01-01", "2024-01-31")
    assert criteria == SearchCriteria(date(2024, 1, 1), date(2024, 1, 31))
    assert criteria.start_text == "2024-01-01"
    assert criteria.end_text == "2024-01-31"


def test_single_day_range_is_valid() -> None:
    criteria = parse_criteria("2024-03-05", "2024-03-05")
    assert criteria.start_date == criteria.end_date


@pytest.mark.parametrize(
    "value",
    ["2024/01/01", "01-01-2024", "2024-1-1", "2024-02-30", "yesterday", " ", "2024-01-01T00:00"],
)
def test_parse_iso_date_rejects_bad_input(value: str) -> None:
    with pytest.raises(UsageError) as excinfo:
        parse_iso_date(value)
    assert excinfo.value.error_code == ErrorCode.USAGE


@pytest.mark.parametrize("start, end", [(None, "2024-01-01"), ("2024-01-01", None), ("", "")])
def test_missing_dates_are_usage_errors(start, end) -> None:
    with pytest.raises(UsageError, match="required"):
        parse_criteria(start, end)


def test_start_after_end_is_rejected() -> None:
    with pytest.raises(UsageError, match="Start date must be before or equal to end date."):
        parse_criteria("2024-02-01", "2024-01-01")


def test_search_criteria_guards_its_own_order() -> None:
    with pytest.raises(ValueError):
        SearchCriteria(date(2024, 2, 1), date(2024, 1, 1))
