"""Per-crawl telemetry written to ``RUNS_DIR/run_<id>.json``."""

from __future__ import annotations

import json
import time
import uuid
from collections import Counter
from threading import Lock
from typing import Any, Dict, List, Optional

from . import config


def new_run_id() -> str:
    return f"{time.strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:8]}"


class RunTelemetry:
    """Thread-safe log of what happened to each request in one crawl.

    Every ``add`` stores an entry and bumps ``count_<status>``; ``finalize``
    dumps criteria, counters and entries in one file.
    """

    def __init__(self, criteria: Optional[Dict[str, Any]] = None) -> None:
        self.run_id = new_run_id()
        self.criteria = dict(criteria or {})
        self.started_at = time.time()
        self._entries: List[Dict[str, Any]] = []
        self._counts: Counter[str] = Counter()
        self._lock = Lock()

    def add(self, status: str, reason: str, meta: Dict[str, Any]) -> None:
        entry = {"status": status, "reason": reason, **meta}
        with self._lock:
            self._entries.append(entry)
            self._counts[f"count_{status}"] += 1

    @property
    def summary(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._counts)

    def finalize(self, extra: Optional[Dict[str, Any]] = None) -> str:
        with self._lock:
            entries = list(self._entries)
            counts = dict(self._counts)

        document = {
            "run_id": self.run_id,
            "criteria": self.criteria,
            "started_at": self.started_at,
            "ended_at": time.time(),
            "summary": counts,
            "entries": entries,
        }
        document.update(extra or {})

        config.RUNS_DIR.mkdir(parents=True, exist_ok=True)
        path = config.RUNS_DIR / f"run_{self.run_id}.json"
        path.write_text(json.dumps(document, ensure_ascii=False, indent=2), encoding="utf-8")
        return str(path)


__all__ = ["RunTelemetry", "new_run_id"]
