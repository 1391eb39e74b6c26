from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Optional

import requests

from . import config
from .config_validation import Entrypoint, validate_runtime_config
from .logging_utils import _crawl_event
from .utils import ensure_dirs, log_line


@dataclass
class HealthResult:
    ok: bool
    checks: dict[str, dict[str, Any]]


def check_registry(url: Optional[str] = None, *, session: Optional[Any] = None) -> dict[str, Any]:
    """GET the registry search page; any non-5xx answer counts as reachable."""

    target = (url or config.BASE_URL).strip()
    http = session or requests
    try:
        response = http.get(
            target,
            timeout=config.HEALTHCHECK_TIMEOUT_SECONDS,
            headers={"User-Agent": config.USER_AGENT},
        )
    except requests.RequestException as exc:
        return {"ok": False, "url": target, "error": str(exc)}
    return {"ok": response.status_code < 500, "url": target, "status_code": response.status_code}


# Module-level alias: run_health_checks' ``check_registry`` flag shadows the function name.
_check_registry = check_registry


def run_health_checks(
    entrypoint: Entrypoint = "cli", *, check_registry: bool = True, session: Optional[Any] = None
) -> HealthResult:
    checks: dict[str, dict[str, Any]] = {}

    try:
        validate_runtime_config(entrypoint)
        checks["config"] = {"ok": True}
    except ValueError as exc:
        checks["config"] = {"ok": False, "error": str(exc)}

    try:
        ensure_dirs()
        checks["filesystem"] = {
            "ok": os.access(config.DATA_DIR, os.W_OK),
            "data_dir": str(config.DATA_DIR),
        }
    except OSError as exc:
        checks["filesystem"] = {"ok": False, "data_dir": str(config.DATA_DIR), "error": str(exc)}

    if check_registry:
        checks["registry"] = _check_registry(session=session)

    # The registry being down does not make the API itself unhealthy.
    strict_registry = entrypoint == "cli"
    overall_ok = all(
        check.get("ok", False)
        for name, check in checks.items()
        if strict_registry or name != "registry"
    )

    _crawl_event(
        "state" if overall_ok else "error",
        phase="health",
        context="healthcheck",
        ok=overall_ok,
        checks=checks,
    )

    return HealthResult(ok=overall_ok, checks=checks)


if __name__ == "__main__":  # pragma: no cover
    result = run_health_checks(entrypoint="cli")
    for name, info in result.checks.items():
        status = "OK" if info.get("ok") else "FAIL"
        log_line(f"[HEALTH] {name}: {status} {info}")
    raise SystemExit(0 if result.ok else 1)
