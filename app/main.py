from __future__ import annotations

import os
import threading
from typing import Any, Callable, Dict

from flask import Flask, Response, jsonify, request, send_file

from app.trademarks import config
from app.trademarks.config_validation import validate_runtime_config
from app.trademarks.crawler import run_crawl
from app.trademarks.dates import parse_criteria
from app.trademarks.errors import TerminalQueryError, UsageError
from app.trademarks.export_excel import export_records_to_excel
from app.trademarks.healthcheck import run_health_checks
from app.trademarks.logging_utils import _crawl_event
from app.trademarks.utils import ensure_dirs, load_json_file, log_line

app = Flask(__name__)

# Initialise storage paths on import so WSGI entrypoints also have the
# expected directories ready.
ensure_dirs()

_RUN_LOCK = threading.Lock()
app.config["CRAWL_STATUS"] = {"state": "idle"}


def _spawn(target: Callable[[], None]) -> None:
    threading.Thread(target=target, daemon=True).start()


def _set_status(**fields: Any) -> None:
    app.config["CRAWL_STATUS"] = dict(fields)


@app.get("/api/health")
def api_health() -> Response:
    """Return a JSON health summary for configuration, filesystem and registry."""

    result = run_health_checks(entrypoint="api")
    status = 200 if result.ok else 503
    return jsonify({"ok": result.ok, "checks": result.checks}), status


@app.post("/api/crawl")
def api_start_crawl() -> Response:
    """Start a crawl for ``{"start_date": ..., "end_date": ...}`` in the background."""

    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    try:
        criteria = parse_criteria(payload.get("start_date"), payload.get("end_date"))
    except UsageError as exc:
        return jsonify({"ok": False, "error": str(exc), "error_code": exc.error_code}), 400

    try:
        validate_runtime_config("api")
    except ValueError as exc:
        return jsonify({"ok": False, "error": str(exc)}), 400

    if not _RUN_LOCK.acquire(blocking=False):
        return jsonify({"ok": False, "error": "A crawl is already running."}), 409

    _set_status(state="running", start_date=criteria.start_text, end_date=criteria.end_text)
    _crawl_event("api", phase="crawl_requested", start_date=criteria.start_text, end_date=criteria.end_text)

    def _run() -> None:
        try:
            summary = run_crawl(criteria, entrypoint="api")
            _set_status(state="completed", summary=summary)
        except TerminalQueryError as exc:
            _set_status(state="terminal_failure", error_code=exc.error_code, error=str(exc))
        except Exception as exc:  # noqa: BLE001
            log_line(f"Crawl thread failed: {exc}")
            _set_status(state="failed", error=str(exc))
        finally:
            _RUN_LOCK.release()

    _spawn(_run)
    return jsonify({"ok": True, "state": "running", "start_date": criteria.start_text, "end_date": criteria.end_text}), 202


@app.get("/api/crawl/status")
def api_crawl_status() -> Response:
    return jsonify(app.config["CRAWL_STATUS"])


@app.get("/api/records")
def api_records() -> Response:
    records = load_json_file(config.OUTPUT_FILE)
    if records is None:
        return jsonify({"ok": False, "error": "No exported records yet."}), 404
    return jsonify(records)


@app.get("/api/records.xlsx")
def api_records_xlsx() -> Response:
    records = load_json_file(config.OUTPUT_FILE)
    if records is None:
        return jsonify({"ok": False, "error": "No exported records yet."}), 404
    path = export_records_to_excel(records)
    return send_file(path, as_attachment=True, download_name=os.path.basename(path))
