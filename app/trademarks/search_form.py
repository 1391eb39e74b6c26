"""Search form controller for the UPRP advanced search page.

Drives the form from a freshly loaded advanced-search page to a submitted
query:

- tick exactly the target collection checkboxes (trademarks), untick the rest;
- type the date range into the two date widgets one keystroke at a time;
- submit and classify what came back.

The registry's "from" field takes the caller's end date and its "to" field
the caller's start date. That mirrors how the registry interprets the two
widgets and must not be swapped.
"""

from __future__ import annotations

from typing import AbstractSet, Optional

from playwright.async_api import Error as PWError, Page, TimeoutError as PWTimeout

from . import config
from .browser import wait_seconds
from .error_codes import ErrorCode
from .errors import TerminalQueryError, TransientCrawlError
from .logging_utils import _crawl_event
from .models import SearchCriteria, SearchOutcome
from .selectors_registry import (
    NO_RESULTS_PHRASE,
    REGISTRY_SELECTORS,
    TARGET_CHECKBOXES,
    TOO_MANY_RESULTS_PHRASE,
    RegistrySelectors,
)
from .utils import log_line

_CHECKBOX_BOX_JS = """
(el, sel) => {
    const wrapper = el.closest(sel.wrapper);
    return wrapper ? wrapper.querySelector(sel.box) : null;
}
"""


async def apply_checkbox_targets(
    page: Page,
    targets: AbstractSet[str] = TARGET_CHECKBOXES,
    *,
    selectors: RegistrySelectors = REGISTRY_SELECTORS,
    settle_seconds: Optional[float] = None,
) -> int:
    """Bring every form checkbox to its desired state; return the toggle count.

    Only controls whose current state disagrees are clicked, so a second pass
    over an already-correct form performs no clicks.
    """

    settle = config.CHECKBOX_SETTLE_SECONDS if settle_seconds is None else settle_seconds
    toggles = 0
    for checkbox in await page.query_selector_all(selectors.checkbox_input):
        element_id = await checkbox.get_attribute("id")
        if not element_id:
            continue

        is_checked = await checkbox.is_checked()
        should_be_checked = element_id in targets
        if is_checked == should_be_checked:
            continue

        handle = await checkbox.evaluate_handle(
            _CHECKBOX_BOX_JS,
            {"wrapper": selectors.checkbox_wrapper, "box": selectors.checkbox_box},
        )
        box = handle.as_element()
        if box is None:
            _crawl_event("form", step="checkbox_box_missing", checkbox_id=element_id)
            continue

        await box.click()
        toggles += 1
        _crawl_event("form", step="checkbox_toggle", checkbox_id=element_id, checked=should_be_checked)
        await wait_seconds(page, settle)

    return toggles


async def fill_date_field(page: Page, selector: str, value: str) -> None:
    """Replace a date widget's text by typing ``value`` key by key.

    The widget formats and validates as the user types; a pasted value
    leaves it in an inconsistent state.
    """

    await page.click(selector)
    await page.keyboard.press("Control+A")
    await page.keyboard.press("Backspace")
    await page.locator(selector).press_sequentially(value, delay=config.KEYSTROKE_DELAY_MS)
    await wait_seconds(page, config.DATE_FIELD_SETTLE_SECONDS)


def classify_outcome(results_settled: bool, message: Optional[str]) -> SearchOutcome:
    """Map the post-submit page state to exactly one ``SearchOutcome``.

    ``message`` is the raw info-message text, if the element exists. When the
    text contains both terminal phrases the "no results" check wins.
    """

    if not results_settled:
        return SearchOutcome.AMBIGUOUS

    text = (message or "").strip().lower()
    if NO_RESULTS_PHRASE in text:
        return SearchOutcome.EMPTY_RESULT
    if TOO_MANY_RESULTS_PHRASE in text:
        return SearchOutcome.OVERFLOW_RESULT
    return SearchOutcome.SUCCESS


async def _read_info_message(page: Page, selectors: RegistrySelectors) -> Optional[str]:
    try:
        element = await page.query_selector(selectors.info_message)
        if element is None:
            return None
        return await element.text_content()
    except PWError:
        return None


async def _wait_for_results(page: Page, selectors: RegistrySelectors) -> bool:
    try:
        await page.wait_for_function(
            "(sel) => document.querySelector(sel.table) || document.querySelector(sel.message)",
            arg={"table": selectors.results_table, "message": selectors.info_message},
            timeout=config.ms(config.RESULTS_TIMEOUT_SECONDS),
        )
        return True
    except PWTimeout:
        return False


async def submit_search(page: Page, *, selectors: RegistrySelectors = REGISTRY_SELECTORS) -> SearchOutcome:
    """Click submit, wait for the navigation and the result area, classify."""

    try:
        async with page.expect_navigation(
            wait_until="domcontentloaded",
            timeout=config.ms(config.SUBMIT_NAVIGATION_TIMEOUT_SECONDS),
        ):
            await page.click(selectors.submit_button, delay=config.SUBMIT_CLICK_DELAY_MS)
    except PWTimeout as exc:
        _crawl_event("error", phase="form", step="submit_navigation_timeout", error=str(exc))
        raise TransientCrawlError(
            ErrorCode.NAVIGATION_TIMEOUT, "Search submission did not navigate in time"
        ) from exc

    settled = await _wait_for_results(page, selectors)
    message = await _read_info_message(page, selectors) if settled else None
    outcome = classify_outcome(settled, message)
    _crawl_event("form", step="outcome", outcome=outcome.value, message=(message or "").strip() or None)
    return outcome


_TERMINAL_MESSAGES = {
    SearchOutcome.EMPTY_RESULT: (
        ErrorCode.NO_RESULTS,
        "No results found for the given criteria. Broaden the date range.",
    ),
    SearchOutcome.OVERFLOW_RESULT: (
        ErrorCode.TOO_MANY_RESULTS,
        "Too many results found. Narrow the date range.",
    ),
}


def raise_for_outcome(outcome: SearchOutcome) -> None:
    """Turn a non-success outcome into the matching crawl error."""

    if outcome.is_terminal:
        code, message = _TERMINAL_MESSAGES[outcome]
        raise TerminalQueryError(code, message, outcome=outcome)
    if outcome is SearchOutcome.AMBIGUOUS:
        raise TransientCrawlError(
            ErrorCode.RESULTS_TIMEOUT,
            "Neither a result table nor an info message appeared after submitting the search",
        )


async def perform_search(
    page: Page,
    criteria: SearchCriteria,
    *,
    selectors: RegistrySelectors = REGISTRY_SELECTORS,
    targets: AbstractSet[str] = TARGET_CHECKBOXES,
) -> SearchOutcome:
    """Fill and submit the search form; return ``SUCCESS`` or raise."""

    try:
        await page.wait_for_load_state(
            "networkidle", timeout=config.ms(config.NETWORK_IDLE_TIMEOUT_SECONDS)
        )
    except PWTimeout:
        log_line("[FORM] Initial networkidle timeout; continuing.")

    try:
        await page.wait_for_selector(
            selectors.form_container, timeout=config.ms(config.FORM_TIMEOUT_SECONDS)
        )
    except PWTimeout as exc:
        _crawl_event("error", phase="form", step="wait_for_form_timeout", error=str(exc))
        raise TransientCrawlError(ErrorCode.FORM_TIMEOUT, "Search form did not appear") from exc

    toggles = await apply_checkbox_targets(page, targets, selectors=selectors)
    log_line(f"[FORM] Checkboxes set ({toggles} toggled).")

    await fill_date_field(page, selectors.date_from, criteria.end_text)
    await fill_date_field(page, selectors.date_to, criteria.start_text)
    log_line(f"[FORM] Date range entered: {criteria.start_text} .. {criteria.end_text}")

    outcome = await submit_search(page, selectors=selectors)
    raise_for_outcome(outcome)
    return outcome


__all__ = [
    "apply_checkbox_targets",
    "fill_date_field",
    "classify_outcome",
    "submit_search",
    "raise_for_outcome",
    "perform_search",
]
