from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from playwright.async_api import Page

from . import config
from .browser import wait_seconds
from .logging_utils import _crawl_event
from .selectors_registry import DETAIL_LABEL, REGISTRY_SELECTORS, RegistrySelectors
from .utils import log_line

# context.enqueue_links(selector=..., label=...)
EnqueueLinks = Callable[..., Awaitable[Any]]


@dataclass
class WalkResult:
    pages: int = 0
    links: int = 0
    hit_page_limit: bool = False


async def walk_result_pages(
    page: Page,
    enqueue_links: EnqueueLinks,
    *,
    selectors: RegistrySelectors = REGISTRY_SELECTORS,
    max_pages: Optional[int] = None,
    settle_seconds: Optional[float] = None,
) -> WalkResult:
    """Queue every detail link on every result page, following "next".

    Stops when the enabled next-page control is gone, which the paginator
    does on the last page. ``max_pages`` (``0`` disables it) guards against a
    paginator that never disables itself; it only counts as hit when a next
    control is still there after ``max_pages`` pages.
    """

    limit = config.MAX_RESULT_PAGES if max_pages is None else max_pages
    settle = config.PAGINATION_SETTLE_SECONDS if settle_seconds is None else settle_seconds
    result = WalkResult()

    while True:
        found = len(await page.query_selector_all(selectors.table_row_link))
        await enqueue_links(selector=selectors.table_row_link, label=DETAIL_LABEL)
        result.pages += 1
        result.links += found
        _crawl_event("pagination", page_number=result.pages, links=found)

        next_button = await page.query_selector(selectors.pagination_next)
        if next_button is None:
            log_line("[PAGINATION] No more pages to paginate.")
            break

        if limit and result.pages >= limit:
            result.hit_page_limit = True
            _crawl_event("error", phase="pagination", step="page_limit_reached", max_pages=limit)
            break

        log_line("[PAGINATION] Navigating to next page...")
        await next_button.click()
        await wait_seconds(page, settle)

    return result


__all__ = ["WalkResult", "walk_result_pages"]
