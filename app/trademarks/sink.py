"""Record sink on top of the crawler's dataset, exported once at the end."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional

from .logging_utils import _crawl_event
from .models import DetailRecord
from .utils import log_line


class RecordSink:
    """Pushes ``DetailRecord`` objects from detail handlers to the dataset.

    Arrival order is kept but carries no meaning. Records with no extracted
    fields are dropped with a warning instead of being stored.
    """

    def __init__(self) -> None:
        self.count = 0
        self.discarded = 0

    async def push(self, context: Any, record: Optional[DetailRecord], *, source: str = "") -> bool:
        if not record:
            self.discarded += 1
            log_line(f"[SINK][WARN] No data extracted from: {source or '<unknown>'}")
            return False

        await context.push_data(dict(record))
        self.count += 1
        return True

    async def records(self, crawler: Any) -> List[DetailRecord]:
        data = await crawler.get_data()
        return [dict(item) for item in data.items]

    async def export_json(self, crawler: Any, path: Path) -> Path:
        """Write every stored record to ``path`` as one JSON array."""

        path.parent.mkdir(parents=True, exist_ok=True)
        await crawler.export_data(str(path), ensure_ascii=False, indent=2)
        _crawl_event("sink", phase="export", path=str(path), records=self.count)
        return path


__all__ = ["RecordSink"]
