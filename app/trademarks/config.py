"""Configuration constants for the UPRP trademark crawler."""
from __future__ import annotations

import os
from pathlib import Path

DATA_DIR: Path = Path(os.getenv("UPRP_DATA_DIR", "data"))
LOG_DIR: Path = DATA_DIR / "logs"
LOG_FILE: Path = LOG_DIR / "latest.log"
RUNS_DIR: Path = DATA_DIR / "runs"
EXPORTS_DIR: Path = DATA_DIR / "exports"
OUTPUT_FILE: Path = Path(os.getenv("UPRP_OUTPUT_FILE", str(DATA_DIR / "output.json")))

BASE_URL: str = os.getenv(
    "UPRP_BASE_URL", "https://ewyszukiwarka.pue.uprp.gov.pl/search/advanced-search"
)
# Listing requests whose URL contains this fragment get the search form filled.
SEARCH_PATH_FRAGMENT: str = "/search/advanced-search"

HEADLESS: bool = os.getenv("UPRP_HEADLESS", "true").strip().lower() not in {"0", "false"}

USER_AGENT: str = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)


def _parse_timeout_seconds(env_var: str, default: int, *, minimum: int = 1) -> int:
    """Parse a timeout value in seconds from the environment with bounds."""

    try:
        value = int(os.getenv(env_var, str(default)))
    except ValueError:
        return default
    return max(minimum, value)


def _parse_float(env_var: str, default: float) -> float:
    try:
        return float(os.getenv(env_var, str(default)))
    except ValueError:
        return default


# Playwright timeouts (seconds)
# page.goto for every request the crawler navigates to.
NAVIGATION_TIMEOUT_SECONDS: int = _parse_timeout_seconds("UPRP_NAVIGATION_TIMEOUT_SECONDS", 60)
# Fallback for any Playwright call that is not given an explicit timeout.
DEFAULT_ACTION_TIMEOUT_SECONDS: int = _parse_timeout_seconds("UPRP_ACTION_TIMEOUT_SECONDS", 30)
# Network-idle wait before touching the search form.
NETWORK_IDLE_TIMEOUT_SECONDS: int = _parse_timeout_seconds("UPRP_NETWORK_IDLE_TIMEOUT_SECONDS", 20)
FORM_TIMEOUT_SECONDS: int = _parse_timeout_seconds("UPRP_FORM_TIMEOUT_SECONDS", 20)
SUBMIT_NAVIGATION_TIMEOUT_SECONDS: int = _parse_timeout_seconds(
    "UPRP_SUBMIT_NAVIGATION_TIMEOUT_SECONDS", 15
)
RESULTS_TIMEOUT_SECONDS: int = _parse_timeout_seconds("UPRP_RESULTS_TIMEOUT_SECONDS", 20)
DETAIL_LOAD_TIMEOUT_SECONDS: int = _parse_timeout_seconds("UPRP_DETAIL_LOAD_TIMEOUT_SECONDS", 20)
DETAIL_PANEL_TIMEOUT_SECONDS: int = _parse_timeout_seconds("UPRP_DETAIL_PANEL_TIMEOUT_SECONDS", 15)
# Whole handler budget; the listing handler walks every result page inside it.
REQUEST_HANDLER_TIMEOUT_SECONDS: int = _parse_timeout_seconds(
    "UPRP_REQUEST_HANDLER_TIMEOUT_SECONDS", 180
)

# Keystroke/click delays remain in milliseconds to match Playwright API expectations.
KEYSTROKE_DELAY_MS: int = int(os.getenv("UPRP_KEYSTROKE_DELAY_MS", "100"))
SUBMIT_CLICK_DELAY_MS: int = int(os.getenv("UPRP_SUBMIT_CLICK_DELAY_MS", "100"))

# Settle sleeps (seconds) for widgets that re-render asynchronously
CHECKBOX_SETTLE_SECONDS: float = _parse_float("UPRP_CHECKBOX_SETTLE_SECONDS", 0.1)
DATE_FIELD_SETTLE_SECONDS: float = _parse_float("UPRP_DATE_FIELD_SETTLE_SECONDS", 0.3)
PAGINATION_SETTLE_SECONDS: float = _parse_float("UPRP_PAGINATION_SETTLE_SECONDS", 1.5)
DETAIL_SETTLE_SECONDS: float = _parse_float("UPRP_DETAIL_SETTLE_SECONDS", 1.0)

# Upper bound on result pages walked per crawl; 0 disables the bound.
MAX_RESULT_PAGES: int = int(os.getenv("UPRP_MAX_RESULT_PAGES", "1000"))

# Concurrency controls
MAX_CONCURRENCY: int = int(os.getenv("UPRP_MAX_CONCURRENCY", "4"))
# Retries after the first attempt, per request.
MAX_REQUEST_RETRIES: int = int(os.getenv("UPRP_MAX_REQUEST_RETRIES", "3"))

HEALTHCHECK_TIMEOUT_SECONDS: int = _parse_timeout_seconds("UPRP_HEALTHCHECK_TIMEOUT_SECONDS", 10)


def ms(seconds: float) -> int:
    """Convert a seconds value to the millisecond integers Playwright expects."""

    return int(seconds * 1000)
