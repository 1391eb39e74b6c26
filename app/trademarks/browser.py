"""Crawlee/Playwright glue: crawler construction and small page helpers."""

from __future__ import annotations

from datetime import timedelta
from typing import Optional

from crawlee import ConcurrencySettings
from crawlee.crawlers import PlaywrightCrawler, PlaywrightPreNavCrawlingContext
from crawlee.router import Router
from crawlee.storage_clients import MemoryStorageClient
from playwright.async_api import Page

from . import config
from .logging_utils import _crawl_event


async def wait_seconds(page: Optional[Page], seconds: float) -> None:
    """Wait safely for ``seconds`` only if *page* remains open."""

    if page is None:
        return

    if seconds is None or seconds <= 0:
        return

    if not page.is_closed():
        await page.wait_for_timeout(config.ms(seconds))


async def _apply_page_timeouts(context: PlaywrightPreNavCrawlingContext) -> None:
    context.page.set_default_timeout(config.ms(config.DEFAULT_ACTION_TIMEOUT_SECONDS))
    context.page.set_default_navigation_timeout(config.ms(config.NAVIGATION_TIMEOUT_SECONDS))
    _crawl_event("nav", step="goto", url=context.request.url, label=context.request.label)


def build_crawler(
    router: Router,
    *,
    headless: Optional[bool] = None,
    max_concurrency: Optional[int] = None,
    max_request_retries: Optional[int] = None,
) -> PlaywrightCrawler:
    """Create the ``PlaywrightCrawler`` that runs one crawl.

    Storage is in-memory, so every crawl starts from an empty request queue
    and dataset and nothing is left under ``./storage``.
    """

    concurrency = max(1, max_concurrency or config.MAX_CONCURRENCY)
    retries = config.MAX_REQUEST_RETRIES if max_request_retries is None else max_request_retries
    headless = config.HEADLESS if headless is None else headless

    crawler = PlaywrightCrawler(
        request_handler=router,
        headless=headless,
        browser_type="chromium",
        browser_new_context_options={"user_agent": config.USER_AGENT, "locale": "en-US"},
        max_request_retries=max(0, retries),
        concurrency_settings=ConcurrencySettings(
            min_concurrency=1, max_concurrency=concurrency, desired_concurrency=concurrency
        ),
        request_handler_timeout=timedelta(seconds=config.REQUEST_HANDLER_TIMEOUT_SECONDS),
        storage_client=MemoryStorageClient(),
    )
    crawler.pre_navigation_hook(_apply_page_timeouts)

    _crawl_event(
        "browser",
        phase="configure",
        headless=headless,
        max_concurrency=concurrency,
        max_request_retries=retries,
    )
    return crawler


__all__ = ["wait_seconds", "build_crawler"]
