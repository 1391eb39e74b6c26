from __future__ import annotations

import json
from pathlib import Path

import pytest

from app.trademarks import config, crawler
from app.trademarks.error_codes import ErrorCode
from app.trademarks.errors import TerminalQueryError
from tests.fakes import BASE_URL, FakeSite, detail_html, fake_crawler_factory


def _summary(**overrides):
    summary = {
        "run_id": "20240101_000000_abcdef12",
        "records": 3,
        "failed": 0,
        "output_file": "data/output.json",
        "excel_file": None,
        "form_submitted": True,
    }
    summary.update(overrides)
    return summary


@pytest.mark.parametrize(
    "argv",
    [
        ["2024-13-01", "2024-12-31"],
        ["2024-02-01", "2024-01-01"],
        ["20240101", "2024-01-31"],
    ],
)
def test_bad_dates_exit_with_usage_error(argv, monkeypatch, capsys) -> None:
    monkeypatch.setattr(crawler, "run_crawl", lambda *a, **k: pytest.fail("must not crawl"))

    with pytest.raises(SystemExit) as excinfo:
        crawler.main(argv)

    assert excinfo.value.code == 2
    assert "uprp-trademarks" in capsys.readouterr().err


def test_missing_arguments_exit_with_usage_error(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        crawler.main(["2024-01-01"])
    assert excinfo.value.code == 2


def test_invalid_configuration_is_reported_before_crawling(monkeypatch) -> None:
    monkeypatch.setattr(config, "BASE_URL", "ftp://nowhere")
    monkeypatch.setattr(crawler, "run_crawl", lambda *a, **k: pytest.fail("must not crawl"))

    with pytest.raises(SystemExit) as excinfo:
        crawler.main(["2024-01-01", "2024-01-31"])
    assert excinfo.value.code == 2


def test_successful_run_passes_options_and_exits_zero(monkeypatch, capsys, tmp_path: Path) -> None:
    captured = {}

    def _fake_run_crawl(criteria, **kwargs):
        captured["criteria"] = criteria
        captured.update(kwargs)
        return _summary()

    monkeypatch.setattr(crawler, "run_crawl", _fake_run_crawl)

    code = crawler.main(
        ["2024-01-01", "2024-01-31", "--output", str(tmp_path / "o.json"), "--max-concurrency", "2", "--headed"]
    )

    assert code == 0
    assert captured["criteria"].start_text == "2024-01-01"
    assert captured["output_path"] == tmp_path / "o.json"
    assert captured["max_concurrency"] == 2
    assert captured["headless"] is False
    assert "records: 3" in capsys.readouterr().out


@pytest.mark.parametrize(
    "error_code, condition",
    [(ErrorCode.NO_RESULTS, "empty result"), (ErrorCode.TOO_MANY_RESULTS, "overflow result")],
)
def test_terminal_query_error_exits_one(error_code, condition, monkeypatch, capsys) -> None:
    def _raise(*args, **kwargs):
        raise TerminalQueryError(error_code, "registry said no")

    monkeypatch.setattr(crawler, "run_crawl", _raise)

    assert crawler.main(["2024-01-01", "2024-01-31"]) == 1
    assert f"Crawl aborted ({condition}): registry said no" in capsys.readouterr().err


def test_unsubmitted_form_exits_one(monkeypatch) -> None:
    monkeypatch.setattr(crawler, "run_crawl", lambda *a, **k: _summary(form_submitted=False, records=0))
    assert crawler.main(["2024-01-01", "2024-01-31"]) == 1


def test_cli_crawls_with_patched_browser(monkeypatch, tmp_path: Path) -> None:
    site = FakeSite(
        result_pages=[["/detail/1"]],
        details={"https://registry.example.test/detail/1": detail_html([("Status", "Registered")])},
    )
    monkeypatch.setattr(config, "BASE_URL", BASE_URL)
    monkeypatch.setattr(crawler, "build_crawler", fake_crawler_factory(site))
    output = tmp_path / "out.json"

    assert crawler.main(["2024-01-01", "2024-01-31", "--output", str(output)]) == 0
    assert json.loads(output.read_text(encoding="utf-8")) == [{"status": "Registered"}]
