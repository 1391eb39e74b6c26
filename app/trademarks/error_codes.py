from __future__ import annotations

"""Centralised error code taxonomy for crawl failures.

These codes travel on every ``CrawlError`` and appear in structured logs and
run telemetry so a failed request can be explained after the fact.
"""


class ErrorCode:
    USAGE = "usage_error"
    NO_RESULTS = "no_results"
    TOO_MANY_RESULTS = "too_many_results"
    FORM_TIMEOUT = "form_timeout"
    NAVIGATION_TIMEOUT = "navigation_timeout"
    RESULTS_TIMEOUT = "results_timeout"
    DETAIL_TIMEOUT = "detail_timeout"
    PLAYWRIGHT = "playwright_error"
    INTERNAL = "internal_error"


__all__ = ["ErrorCode"]
