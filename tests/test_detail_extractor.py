from __future__ import annotations

import pytest

from app.trademarks import config, detail
from app.trademarks.detail import CellSnapshot, extract_detail_record, snapshot_detail_table
from app.trademarks.error_codes import ErrorCode
from app.trademarks.errors import NonRetryableError
from tests.fakes import FakePage, FakeSite, detail_html

DETAIL_URL = "https://registry.example.test/detail/1"


def _label(text: str) -> CellSnapshot:
    return CellSnapshot(text=text, is_label=True)


def _value(text: str, highlight: str | None = None) -> CellSnapshot:
    return CellSnapshot(text=text, highlight=highlight)


def test_extracts_every_mapped_field() -> None:
    rows = [
        [_label("Name/Title"), _value("  ACME\n  Widgets ")],
        [_label("Status"), _value("Registered")],
        [_label("Application date"), _value("2024-01-15")],
        [_label("Revelation date"), _value("2024-02-01")],
        [_label("Application number"), _value("Z.512345")],
        [_label("Category of rights"), _value("Trademark")],
        [_label("Registration number"), _value("R.345678")],
        [_label("Trademark type"), _value("word-figurative")],
    ]

    record = extract_detail_record(rows)

    assert record == {
        "nameTitle": "ACME Widgets",
        "status": "Registered",
        "applicationDate": "2024-01-15",
        "revelationDate": "2024-02-01",
        "applicationNumber": "Z.512345",
        "categoryOfRights": "Trademark",
        "registrationNumber": "R.345678",
        "trademarkType": "word-figurative",
    }


def test_row_order_does_not_matter() -> None:
    rows = [
        [_label("Status"), _value("Expired")],
        [_label("Name/Title"), _value("Foo")],
    ]
    assert extract_detail_record(rows) == extract_detail_record(list(reversed(rows)))


def test_highlight_takes_precedence_over_cell_text() -> None:
    rows = [[_label("Name/Title"), _value("prefix FOO suffix", highlight="  FOO  ")]]
    assert extract_detail_record(rows) == {"nameTitle": "FOO"}


def test_blank_highlight_falls_back_to_cell_text() -> None:
    rows = [[_label("Status"), _value("  Pending  ", highlight="   ")]]
    assert extract_detail_record(rows) == {"status": "Pending"}


def test_empty_value_is_null_and_unknown_label_is_absent() -> None:
    rows = [
        [_label("Registration number"), _value("   ")],
        [_label("Owner"), _value("Someone")],
    ]

    record = extract_detail_record(rows)

    assert record == {"registrationNumber": None}
    assert "owner" not in record


def test_pairs_without_a_label_cell_are_ignored() -> None:
    rows = [
        [_value("Status"), _value("Registered")],
        [_label("Status")],
        [_label("Name/Title"), _value("Foo"), _label("Status"), _value("Active")],
    ]
    assert extract_detail_record(rows) == {"nameTitle": "Foo", "status": "Active"}


def test_later_duplicate_label_overwrites_earlier() -> None:
    rows = [
        [_label("Status"), _value("Pending")],
        [_label("Status"), _value("Registered")],
    ]
    assert extract_detail_record(rows) == {"status": "Registered"}


def test_empty_table_gives_empty_record() -> None:
    assert extract_detail_record([]) == {}


def test_snapshot_reads_labels_and_highlights_from_html() -> None:
    html = detail_html(
        [
            ("Name/Title", 'Mark <span class="highlight">ACME</span>'),
            ("Status", "  Registered  "),
        ]
    )

    rows = snapshot_detail_table(html)

    assert len(rows) == 2
    label, value = rows[0]
    assert label.is_label is True
    assert label.text.strip() == "Name/Title"
    assert value.is_label is False
    assert value.highlight == "ACME"
    assert extract_detail_record(rows) == {"nameTitle": "ACME", "status": "Registered"}


def test_snapshot_ignores_tables_outside_details_list() -> None:
    html = (
        "<html><body><table><tr><td class=\"detail-title\">Status</td><td>Nope</td></tr></table>"
        + detail_html([("Status", "Yes")])
        + "</body></html>"
    )
    assert extract_detail_record(snapshot_detail_table(html)) == {"status": "Yes"}


async def test_read_detail_page_extracts_record(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "DETAIL_SETTLE_SECONDS", 0)
    site = FakeSite(details={DETAIL_URL: detail_html([("Status", "Registered")])})
    page = FakePage(site)
    await page.goto(DETAIL_URL)

    assert await detail.read_detail_page(page) == {"status": "Registered"}


async def test_read_detail_page_without_panel_is_not_retried() -> None:
    page = FakePage(FakeSite())
    await page.goto(DETAIL_URL)

    with pytest.raises(NonRetryableError) as excinfo:
        await detail.read_detail_page(page)

    assert excinfo.value.error_code == ErrorCode.DETAIL_TIMEOUT
