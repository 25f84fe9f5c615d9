"""
File:       blockqc/stats.py
Brief:      Per-block statistics table.
"""
# Standard library imports
from pathlib import Path
from typing import Iterable

# Third party library imports
import pandas as pd

# Local modules imports
from blockqc.config import NEWLINE, PE, PE2, SE
from blockqc.filters import REJECTION_REASONS
from blockqc.worker import BlockResult

STAT_COLUMNS = (
    ["block", "ok", "elapsed_s", "records", SE, PE, PE2, "dropped"]
    + [f"rejected_{reason}" for reason in REJECTION_REASONS]
    + ["error_kind", "error"]
)


def results_frame(results: Iterable[BlockResult]) -> pd.DataFrame:
    """One row per block, sorted by ordinal, followed by a "total" row."""
    rows = []
    for result in sorted(results, key=lambda result: int(result.ordinal)):
        row = {"block": result.ordinal, "ok": result.ok, "elapsed_s": round(result.elapsed, 3),
               "error_kind": result.error_kind or "", "error": result.error or ""}
        for column in STAT_COLUMNS[3:-2]:
            row[column] = result.counts.get(column, 0)
        rows.append(row)

    frame = pd.DataFrame(rows, columns=STAT_COLUMNS)
    totals = {column: int(frame[column].sum()) for column in STAT_COLUMNS[3:-2]}
    totals.update(block="total", ok=bool(frame["ok"].all()), elapsed_s=round(float(frame["elapsed_s"].sum()), 3),
                  error_kind="", error="")
    return pd.concat([frame, pd.DataFrame([totals], columns=STAT_COLUMNS)], ignore_index=True)


def write_stats(results: Iterable[BlockResult], output_stat: Path) -> pd.DataFrame:
    frame = results_frame(results)
    Path(output_stat).parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(output_stat, sep="\t", index=False, lineterminator=NEWLINE)
    return frame
