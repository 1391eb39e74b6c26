"""Excel export of extracted trademark records."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd

from . import config
from .fields import CANONICAL_KEYS
from .models import DetailRecord


def export_records_to_excel(
    records: Iterable[DetailRecord], dest_path: Optional[Path] = None, *, run_id: str = "latest"
) -> Path:
    """Write ``records`` to an ``.xlsx`` workbook, one column per canonical key.

    Keys a record lacks and keys present with ``None`` both render as empty
    cells; the JSON export is the place where that difference is visible.
    """

    df = pd.DataFrame(list(records), columns=list(CANONICAL_KEYS))
    if df.empty:
        df = pd.DataFrame([{"info": "No records extracted"}])

    if dest_path is None:
        os.makedirs(config.EXPORTS_DIR, exist_ok=True)
        dest_path = config.EXPORTS_DIR / f"trademarks_{run_id}.xlsx"
    dest_path = Path(dest_path)
    dest_path.parent.mkdir(parents=True, exist_ok=True)

    with pd.ExcelWriter(dest_path, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Trademarks")
        if "status" in df.columns and df["status"].notna().any():
            summary = (
                df.groupby("status").size().reset_index(name="count").sort_values("count", ascending=False)
            )
            summary.to_excel(writer, index=False, sheet_name="Summary_Status")

    return dest_path


__all__ = ["export_records_to_excel"]
