from __future__ import annotations

from typing import Optional

from .error_codes import ErrorCode
from .logging_utils import _crawl_event

RETRYABLE_ERROR_CODES = {
    ErrorCode.FORM_TIMEOUT,
    ErrorCode.NAVIGATION_TIMEOUT,
    ErrorCode.RESULTS_TIMEOUT,
    ErrorCode.PLAYWRIGHT,
}

NON_RETRYABLE_ERROR_CODES = {
    ErrorCode.USAGE,
    # Same criteria, same answer.
    ErrorCode.NO_RESULTS,
    ErrorCode.TOO_MANY_RESULTS,
    # Detail pages that never settle are logged and skipped in-handler.
    ErrorCode.DETAIL_TIMEOUT,
}


def decide_retry(
    error_code: Optional[str],
    attempt_index: int,
    max_attempts: int = 4,
    *,
    error: BaseException | None = None,
    url: Optional[str] = None,
) -> bool:
    """Decide whether failed attempt ``attempt_index`` (1-based) gets another go.

    Exhausted budgets and non-retryable codes never retry; known transient
    codes always do. Anything else retries only while at least two attempts
    remain.
    """

    code = (error_code or "").strip()
    extra = {}

    if attempt_index >= max_attempts:
        kind, will_retry = "capped", False
    elif code in NON_RETRYABLE_ERROR_CODES:
        kind, will_retry = "non_retryable", False
    elif code in RETRYABLE_ERROR_CODES:
        kind, will_retry = "retryable", True
    else:
        kind = "unknown" if code else "missing_error_code"
        will_retry = attempt_index < max_attempts - 1
        extra["error_repr"] = repr(error) if error is not None else None

    _crawl_event(
        "state",
        phase="retry_decision",
        kind=kind,
        error_code=code or None,
        attempt=attempt_index,
        max_attempts=max_attempts,
        url=url,
        will_retry=will_retry,
        **extra,
    )
    return will_retry


__all__ = ["decide_retry", "RETRYABLE_ERROR_CODES", "NON_RETRYABLE_ERROR_CODES"]
