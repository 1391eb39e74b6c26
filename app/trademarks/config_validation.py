from __future__ import annotations

from typing import Literal

from . import config
from .logging_utils import _crawl_event
from .utils import log_line

Entrypoint = Literal["api", "cli", "tests"]


def _raise_config_error(message: str, *, entrypoint: Entrypoint, error: str) -> None:
    _crawl_event(
        "error",
        phase="config",
        context="runtime_validation",
        error=error,
        entrypoint=entrypoint,
    )
    log_line(f"[CONFIG] {message} (entrypoint={entrypoint})")
    raise ValueError(message)


def _clamp_to_one(field_name: str, value: int, *, entrypoint: Entrypoint) -> None:
    _crawl_event(
        "state",
        phase="config",
        context="runtime_validation",
        kind="config_adjustment",
        field=field_name,
        value=value,
        adjusted=1,
        entrypoint=entrypoint,
    )
    log_line(f"[CONFIG] {field_name} < 1; clamping to 1.")
    setattr(config, field_name, 1)


def validate_runtime_config(entrypoint: Entrypoint) -> None:
    """Validate runtime configuration for the given entrypoint.

    Raises ``ValueError`` when a blocking misconfiguration is detected.
    Non-fatal adjustments (e.g., clamping concurrency) are logged but do not
    raise.
    """

    base_url = (config.BASE_URL or "").strip()
    if not base_url.startswith(("http://", "https://")):
        _raise_config_error(
            "BASE_URL must be an absolute http(s) URL.",
            entrypoint=entrypoint,
            error="base_url_invalid",
        )

    if config.MAX_CONCURRENCY < 1:
        _clamp_to_one("MAX_CONCURRENCY", config.MAX_CONCURRENCY, entrypoint=entrypoint)

    if config.MAX_REQUEST_RETRIES < 0:
        _raise_config_error(
            "MAX_REQUEST_RETRIES must be non-negative.",
            entrypoint=entrypoint,
            error="max_request_retries_invalid",
        )

    if config.MAX_RESULT_PAGES < 0:
        _raise_config_error(
            "MAX_RESULT_PAGES must be non-negative (0 disables the bound).",
            entrypoint=entrypoint,
            error="max_result_pages_invalid",
        )

    timeout_fields = [
        ("NAVIGATION_TIMEOUT_SECONDS", config.NAVIGATION_TIMEOUT_SECONDS),
        ("FORM_TIMEOUT_SECONDS", config.FORM_TIMEOUT_SECONDS),
        ("SUBMIT_NAVIGATION_TIMEOUT_SECONDS", config.SUBMIT_NAVIGATION_TIMEOUT_SECONDS),
        ("RESULTS_TIMEOUT_SECONDS", config.RESULTS_TIMEOUT_SECONDS),
        ("DETAIL_LOAD_TIMEOUT_SECONDS", config.DETAIL_LOAD_TIMEOUT_SECONDS),
        ("DETAIL_PANEL_TIMEOUT_SECONDS", config.DETAIL_PANEL_TIMEOUT_SECONDS),
        ("REQUEST_HANDLER_TIMEOUT_SECONDS", config.REQUEST_HANDLER_TIMEOUT_SECONDS),
    ]

    for field_name, value in timeout_fields:
        if value <= 0:
            _raise_config_error(
                f"{field_name} must be greater than zero.",
                entrypoint=entrypoint,
                error="invalid_timeout",
            )


__all__ = ["validate_runtime_config", "Entrypoint"]
