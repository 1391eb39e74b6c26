"""Playwright crawler for UPRP trademark records.

Workflow:

- Open https://ewyszukiwarka.pue.uprp.gov.pl/search/advanced-search.
- Tick the trademark collection checkboxes, type the date range, submit.
- Stop the crawl if the registry answers "no results found" or
  "too many results found".
- Walk the result pages, queueing one ``detail`` request per row link.
- Read each detail page's label/value table into a flat record.
- When the queue drains, export every record as one JSON array.

Run with ``python -m app.trademarks.crawler 2024-01-01 2024-01-31``.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from crawlee.crawlers import PlaywrightCrawlingContext
from crawlee.router import Router
from playwright.async_api import Error as PWError

from . import config
from .browser import build_crawler
from .config_validation import Entrypoint, validate_runtime_config
from .dates import parse_criteria
from .detail import read_detail_page
from .error_codes import ErrorCode
from .errors import CrawlError, NonRetryableError, TerminalQueryError, UsageError
from .export_excel import export_records_to_excel
from .logging_utils import _crawl_event
from .models import SearchCriteria
from .pagination import walk_result_pages
from .retry_policy import decide_retry
from .search_form import perform_search
from .selectors_registry import DETAIL_LABEL, REGISTRY_SELECTORS, RegistrySelectors
from .sink import RecordSink
from .telemetry import RunTelemetry
from .utils import ensure_dirs, log_line, setup_run_logger

# build_crawler(router, *, headless=..., max_concurrency=..., max_request_retries=...)
CrawlerFactory = Callable[..., Any]


class CrawlState:
    """Per-crawl state shared by the handlers of one run.

    ``form_filled`` starts false, flips once after a successful submission
    and is never reset, so a retried listing request does not submit the
    search a second time. ``abort`` keeps the first terminal error and stops
    the crawler; ``crawl`` re-raises it once the run returns.
    """

    def __init__(self) -> None:
        self.form_filled = False
        self.terminal_error: Optional[TerminalQueryError] = None
        self.stop: Optional[Callable[[str], None]] = None

    def mark_form_filled(self) -> None:
        self.form_filled = True

    def abort(self, exc: TerminalQueryError) -> None:
        if self.terminal_error is None:
            self.terminal_error = exc
        if self.stop is not None:
            self.stop(f"Terminal search outcome: {exc.error_code}")


def _error_code_for(exc: BaseException) -> str:
    if isinstance(exc, CrawlError):
        return exc.error_code
    if isinstance(exc, PWError):
        return ErrorCode.PLAYWRIGHT
    return ErrorCode.INTERNAL


def _settle_retry(context: Any, exc: BaseException, max_attempts: int) -> None:
    """Mark the request ``no_retry`` unless the retry policy allows another attempt."""

    request = context.request
    code = _error_code_for(exc)
    attempt = request.retry_count + 1
    will_retry = not isinstance(exc, NonRetryableError) and decide_retry(
        code, attempt, max_attempts, error=exc, url=request.url
    )
    if will_retry:
        log_line(f"[RETRY] {request.url} ({code}) attempt {attempt + 1}/{max_attempts}: {exc}")
    else:
        request.no_retry = True


def build_router(
    criteria: SearchCriteria,
    *,
    state: CrawlState,
    sink: RecordSink,
    telemetry: RunTelemetry,
    max_attempts: int,
    selectors: RegistrySelectors = REGISTRY_SELECTORS,
    max_pages: Optional[int] = None,
) -> Router[PlaywrightCrawlingContext]:
    router = Router[PlaywrightCrawlingContext]()

    @router.default_handler
    async def handle_listing(context: PlaywrightCrawlingContext) -> None:
        url = context.request.url
        try:
            if config.SEARCH_PATH_FRAGMENT in url and not state.form_filled:
                log_line("[LISTING] Filling out search form...")
                await perform_search(context.page, criteria, selectors=selectors)
                state.mark_form_filled()

            walk = await walk_result_pages(
                context.page, context.enqueue_links, selectors=selectors, max_pages=max_pages
            )
        except TerminalQueryError as exc:
            context.request.no_retry = True
            state.abort(exc)
            raise
        except Exception as exc:
            _settle_retry(context, exc, max_attempts)
            raise

        telemetry.add(
            "listing",
            "page_limit" if walk.hit_page_limit else "walked",
            {"url": url, "pages": walk.pages, "links": walk.links},
        )

    @router.handler(DETAIL_LABEL)
    async def handle_detail(context: PlaywrightCrawlingContext) -> None:
        url = context.request.url
        log_line(f"[DETAIL] Processing detail: {url}")
        try:
            record = await read_detail_page(context.page, selectors=selectors)
        except (CrawlError, PWError) as exc:
            log_line(f"[DETAIL][ERROR] Failed to process {url}: {exc}")
            telemetry.add("failed", _error_code_for(exc), {"url": url, "error": str(exc)})
            return

        if await sink.push(context, record, source=url):
            telemetry.add("extracted", "ok", {"url": url, "fields": len(record)})
        else:
            telemetry.add("empty", "no_fields", {"url": url})

    return router


def _retried_total(retry_histogram: Optional[List[int]]) -> int:
    # Slot i counts requests that finished after i retries.
    return sum(index * count for index, count in enumerate(retry_histogram or []))


async def crawl(
    criteria: SearchCriteria,
    *,
    output_path: Optional[Path] = None,
    excel_path: Optional[Path] = None,
    max_concurrency: Optional[int] = None,
    max_request_retries: Optional[int] = None,
    headless: Optional[bool] = None,
    base_url: Optional[str] = None,
    max_pages: Optional[int] = None,
    crawler_factory: Optional[CrawlerFactory] = None,
    entrypoint: Entrypoint = "cli",
) -> Dict[str, Any]:
    """Crawl every trademark record in ``criteria`` and export them.

    Raises ``TerminalQueryError`` when the registry reports no results or
    too many results; no output file is written in that case.
    """

    validate_runtime_config(entrypoint)
    ensure_dirs()
    log_path = setup_run_logger()

    output_path = Path(output_path or config.OUTPUT_FILE)
    base_url = (base_url or config.BASE_URL).strip()
    retries = config.MAX_REQUEST_RETRIES if max_request_retries is None else max_request_retries
    retries = max(0, retries)

    state = CrawlState()
    sink = RecordSink()
    telemetry = RunTelemetry({"start_date": criteria.start_text, "end_date": criteria.end_text})
    router = build_router(
        criteria,
        state=state,
        sink=sink,
        telemetry=telemetry,
        max_attempts=retries + 1,
        max_pages=max_pages,
    )
    factory = crawler_factory or build_crawler
    crawler = factory(
        router, headless=headless, max_concurrency=max_concurrency, max_request_retries=retries
    )
    state.stop = crawler.stop
    failures: List[Dict[str, Any]] = []

    @crawler.failed_request_handler
    async def record_failure(context: Any, error: Exception) -> None:
        request = context.request
        failure = {
            "url": request.url,
            "label": request.label,
            "error_code": _error_code_for(error),
            "error": str(error),
            "attempts": request.retry_count + 1,
        }
        failures.append(failure)
        _crawl_event("error", phase="request", **failure)

    _crawl_event(
        "crawl",
        phase="start",
        run_id=telemetry.run_id,
        start_date=criteria.start_text,
        end_date=criteria.end_text,
        base_url=base_url,
    )

    try:
        stats = await crawler.run([base_url])
    except Exception as exc:
        _crawl_event("error", phase="crawl", kind="aborted", error=str(exc))
        telemetry.finalize({"status": "failed", "error": str(exc)})
        raise

    if state.terminal_error is not None:
        exc = state.terminal_error
        _crawl_event("error", phase="crawl", kind="terminal", error_code=exc.error_code, error=str(exc))
        telemetry.finalize(
            {"status": "terminal_failure", "error_code": exc.error_code, "error": str(exc)}
        )
        raise exc

    records = await sink.records(crawler)
    await sink.export_json(crawler, output_path)
    excel_file: Optional[str] = None
    if excel_path is not None:
        excel_file = str(export_records_to_excel(records, excel_path, run_id=telemetry.run_id))

    summary: Dict[str, Any] = {
        "run_id": telemetry.run_id,
        "start_date": criteria.start_text,
        "end_date": criteria.end_text,
        "form_submitted": state.form_filled,
        "records": len(records),
        "discarded": sink.discarded,
        "handled": stats.requests_finished,
        "failed": stats.requests_failed,
        "retried": _retried_total(stats.retry_histogram),
        "requests_total": stats.requests_total,
        "output_file": str(output_path),
        "excel_file": excel_file,
        "log_file": str(log_path),
    }
    summary["telemetry_file"] = telemetry.finalize(
        {"status": "completed", "result": dict(summary), "failures": failures}
    )
    _crawl_event("crawl", phase="end", **{k: summary[k] for k in ("run_id", "records", "failed")})
    return summary


def run_crawl(criteria: SearchCriteria, **kwargs: Any) -> Dict[str, Any]:
    """Blocking wrapper around ``crawl`` for the CLI and the API worker thread."""

    return asyncio.run(crawl(criteria, **kwargs))

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="uprp-trademarks",
        description="Crawl UPRP trademark records for an application date range.",
    )
    parser.add_argument("start_date", help="First date of the range (YYYY-MM-DD).")
    parser.add_argument("end_date", help="Last date of the range (YYYY-MM-DD).")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help=f"JSON output path (default: {config.OUTPUT_FILE})",
    )
    parser.add_argument("--excel", type=Path, default=None, help="Also write an .xlsx export.")
    parser.add_argument("--max-concurrency", type=int, default=None)
    parser.add_argument("--headed", action="store_true", help="Show the browser window.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        criteria = parse_criteria(args.start_date, args.end_date)
    except UsageError as exc:
        parser.error(str(exc))

    try:
        validate_runtime_config("cli")
    except ValueError as exc:
        parser.error(f"Invalid configuration: {exc}")

    try:
        summary = run_crawl(
            criteria,
            output_path=args.output,
            excel_path=args.excel,
            max_concurrency=args.max_concurrency,
            headless=False if args.headed else None,
        )
    except TerminalQueryError as exc:
        condition = "empty result" if exc.error_code == ErrorCode.NO_RESULTS else "overflow result"
        print(f"Crawl aborted ({condition}): {exc}", file=sys.stderr)
        return 1

    print(f"Run {summary['run_id']}")
    print(f"  records: {summary['records']}")
    print(f"  failed requests: {summary['failed']}")
    print(f"  output: {summary['output_file']}")
    if summary["excel_file"]:
        print(f"  excel: {summary['excel_file']}")

    if not summary["form_submitted"]:
        print("Search form was never submitted successfully; no records were found.", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry
    raise SystemExit(main())

__all__ = ["CrawlState", "build_router", "crawl", "run_crawl", "main"]
