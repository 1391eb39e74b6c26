from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List

from . import config

LOGGER = logging.getLogger("uprp")
LOG_FORMAT = "[%(asctime)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LOGGER_INITIALISED = False
_WHITESPACE_RE = re.compile(r"\s+")


def _build_handlers(log_path: Path) -> List[logging.Handler]:
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handlers: List[logging.Handler] = [
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(log_path, encoding="utf-8"),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def _configure_logger(log_path: Path) -> None:
    """Point the ``uprp`` logger at stdout and ``log_path``, dropping old handlers."""

    global _LOGGER_INITIALISED

    log_path.parent.mkdir(parents=True, exist_ok=True)

    while LOGGER.handlers:
        stale = LOGGER.handlers[0]
        LOGGER.removeHandler(stale)
        stale.close()

    for handler in _build_handlers(log_path):
        LOGGER.addHandler(handler)
    LOGGER.setLevel(logging.INFO)
    LOGGER.propagate = False
    _LOGGER_INITIALISED = True


def setup_run_logger() -> Path:
    """Switch logging to a fresh ``crawl_<timestamp>.log`` for one crawl."""

    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    log_path = config.LOG_DIR / f"crawl_{stamp}.log"
    _configure_logger(log_path)
    LOGGER.info("Logging to %s", log_path)
    return log_path


def ensure_dirs() -> None:
    for directory in (config.DATA_DIR, config.LOG_DIR, config.RUNS_DIR):
        directory.mkdir(parents=True, exist_ok=True)


def log_line(message: str) -> None:
    """Log ``message`` with a timestamp; the first call opens ``config.LOG_FILE``."""

    if not _LOGGER_INITIALISED:
        _configure_logger(config.LOG_FILE)
    LOGGER.info(message)


def collapse_whitespace(value: str | None) -> str:
    """Trim ``value`` and collapse internal whitespace runs to single spaces."""

    if not value:
        return ""
    return _WHITESPACE_RE.sub(" ", value).strip()


def load_json_file(path: Path, default: Any = None) -> Any:
    """Read JSON from ``path``; a missing or corrupt file yields ``default``."""

    try:
        with open(path, encoding="utf-8") as handle:
            return json.load(handle)
    except FileNotFoundError:
        return default
    except json.JSONDecodeError:
        log_line(f"[JSON] Could not decode {path}; ignoring it.")
        return default
