from __future__ import annotations

import pytest

from app.trademarks import retry_policy
from app.trademarks.error_codes import ErrorCode


@pytest.fixture
def event_recorder(monkeypatch: pytest.MonkeyPatch) -> list[tuple[str, dict]]:
    events: list[tuple[str, dict]] = []

    def _record(event_phase: str, **fields: object) -> None:
        events.append((event_phase, fields))

    monkeypatch.setattr(retry_policy, "_crawl_event", _record)
    return events


@pytest.mark.parametrize(
    "attempt, expected, kind",
    [
        (1, True, "retryable"),
        (3, True, "retryable"),
        (4, False, "capped"),
        (7, False, "capped"),
    ],
)
def test_navigation_timeout_retry_limits(
    attempt: int, expected: bool, kind: str, event_recorder: list[tuple[str, dict]]
) -> None:
    result = retry_policy.decide_retry(ErrorCode.NAVIGATION_TIMEOUT, attempt)
    assert result is expected
    assert len(event_recorder) == 1
    phase, fields = event_recorder[0]
    assert phase == "state"
    assert fields["phase"] == "retry_decision"
    assert fields["error_code"] == ErrorCode.NAVIGATION_TIMEOUT
    assert fields["attempt"] == attempt
    assert fields["max_attempts"] == 4
    assert fields["will_retry"] is expected
    assert fields["kind"] == kind


@pytest.mark.parametrize(
    "error_code",
    [ErrorCode.FORM_TIMEOUT, ErrorCode.RESULTS_TIMEOUT, ErrorCode.PLAYWRIGHT],
)
def test_retryable_error_codes(error_code: str, event_recorder: list[tuple[str, dict]]) -> None:
    assert error_code in retry_policy.RETRYABLE_ERROR_CODES
    assert retry_policy.decide_retry(error_code, 1) is True


@pytest.mark.parametrize(
    "error_code",
    [ErrorCode.USAGE, ErrorCode.NO_RESULTS, ErrorCode.TOO_MANY_RESULTS, ErrorCode.DETAIL_TIMEOUT],
)
def test_non_retryable_error_codes(error_code: str, event_recorder: list[tuple[str, dict]]) -> None:
    assert error_code in retry_policy.NON_RETRYABLE_ERROR_CODES
    result = retry_policy.decide_retry(error_code, 1)
    assert result is False
    assert len(event_recorder) == 1
    _, fields = event_recorder[0]
    assert fields["kind"] == "non_retryable"
    assert fields["will_retry"] is False
    assert fields["error_code"] == error_code


@pytest.mark.parametrize(
    "error_code, expected_kind",
    [
        ("", "missing_error_code"),
        (None, "missing_error_code"),
        (ErrorCode.INTERNAL, "unknown"),
        ("something_new", "unknown"),
    ],
)
def test_unknown_codes_retry_while_two_attempts_remain(
    error_code: str | None, expected_kind: str, event_recorder: list[tuple[str, dict]]
) -> None:
    assert retry_policy.decide_retry(error_code, 1, 3) is True
    assert retry_policy.decide_retry(error_code, 2, 3) is False
    kinds = {fields["kind"] for _, fields in event_recorder}
    assert kinds == {expected_kind}


def test_single_attempt_budget_never_retries(event_recorder: list[tuple[str, dict]]) -> None:
    assert retry_policy.decide_retry(ErrorCode.PLAYWRIGHT, 1, 1) is False
    assert event_recorder[0][1]["kind"] == "capped"
