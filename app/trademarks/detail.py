"""Detail page extraction.

Extraction runs in two steps so the field logic never needs a browser:

1. ``snapshot_detail_table`` turns the page HTML into rows of
   ``CellSnapshot`` using BeautifulSoup.
2. ``extract_detail_record`` maps those rows onto the canonical keys in
   ``fields.FIELD_MAPPINGS``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Sequence

from bs4 import BeautifulSoup
from playwright.async_api import Error as PWError, Page, TimeoutError as PWTimeout

from . import config
from .browser import wait_seconds
from .error_codes import ErrorCode
from .errors import NonRetryableError
from .fields import FIELD_MAPPINGS, match_label
from .models import DetailRecord
from .selectors_registry import REGISTRY_SELECTORS, RegistrySelectors
from .utils import collapse_whitespace


@dataclass(frozen=True)
class CellSnapshot:
    """Text content of one ``td`` in the details table."""

    text: str
    is_label: bool = False
    # Text of the first highlighted span inside the cell, if any.
    highlight: Optional[str] = None


Row = Sequence[CellSnapshot]


def snapshot_detail_table(
    html: str, *, selectors: RegistrySelectors = REGISTRY_SELECTORS
) -> List[List[CellSnapshot]]:
    soup = BeautifulSoup(html, "html5lib")
    rows: List[List[CellSnapshot]] = []
    for tr in soup.select(f"{selectors.details_table} tr"):
        cells: List[CellSnapshot] = []
        for td in tr.find_all("td"):
            highlight_el = td.select_one(selectors.detail_highlight)
            cells.append(
                CellSnapshot(
                    text=td.get_text(),
                    is_label=selectors.detail_label_class in (td.get("class") or []),
                    highlight=highlight_el.get_text() if highlight_el is not None else None,
                )
            )
        rows.append(cells)
    return rows


def _cell_value(cell: CellSnapshot) -> Optional[str]:
    value = (cell.highlight or "").strip()
    if not value:
        value = collapse_whitespace(cell.text)
    return value or None


def extract_detail_record(
    rows: Iterable[Row], mappings: Mapping[str, str] = FIELD_MAPPINGS
) -> DetailRecord:
    """Build a ``DetailRecord`` from label/value cell rows.

    Cells are read pairwise; a pair counts only when its first cell is a
    label. A matched label with an empty value yields ``None``; labels that
    match nothing contribute no key at all.
    """

    record: DetailRecord = {}
    for row in rows:
        for index in range(0, len(row), 2):
            label_cell = row[index]
            if index + 1 >= len(row) or not label_cell.is_label:
                continue
            key = match_label(label_cell.text, mappings)
            if key is None:
                continue
            record[key] = _cell_value(row[index + 1])
    return record


async def read_detail_page(
    page: Page, *, selectors: RegistrySelectors = REGISTRY_SELECTORS
) -> DetailRecord:
    """Wait for a detail page to settle and extract its record.

    Raises ``NonRetryableError`` with ``DETAIL_TIMEOUT`` when the page never
    stabilises; the caller logs and skips the record.
    """

    try:
        await page.wait_for_load_state(
            "networkidle", timeout=config.ms(config.DETAIL_LOAD_TIMEOUT_SECONDS)
        )
        await page.wait_for_selector(
            selectors.detail_panel, timeout=config.ms(config.DETAIL_PANEL_TIMEOUT_SECONDS)
        )
    except PWTimeout as exc:
        raise NonRetryableError(
            ErrorCode.DETAIL_TIMEOUT, f"Detail page did not settle: {exc}"
        ) from exc
    except PWError as exc:
        raise NonRetryableError(ErrorCode.PLAYWRIGHT, f"Detail page error: {exc}") from exc

    await wait_seconds(page, config.DETAIL_SETTLE_SECONDS)
    html = await page.content()
    return extract_detail_record(snapshot_detail_table(html, selectors=selectors))


__all__ = [
    "CellSnapshot",
    "snapshot_detail_table",
    "extract_detail_record",
    "read_detail_page",
]
