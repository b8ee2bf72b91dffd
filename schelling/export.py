"""
schelling/export.py - Result Log, Console Report and Receipt Stream

Output side of a batch. Every write failure is fatal: it becomes a
StopRule, never a dropped row.
"""

import csv
from typing import Iterable, Optional

from receipts import emit_receipt, write_receipt_jsonl, StopRule

from .constants import CSV_HEADER
from .types_result import BatchSummary, TrialResult


def io_failure(path: str, error: OSError) -> StopRule:
    """Emit an anomaly receipt for a failed write and build the StopRule."""
    emit_receipt("anomaly", {
        "metric": "io",
        "path": str(path),
        "error": str(error),
        "classification": "violation",
        "action": "halt"
    })
    return StopRule(f"Cannot write {path}: {error}")


class ResultLog:
    """
    Append-only CSV log, one row per completed trial.

    The header is written when the log is opened. Only the batch
    aggregator appends, so rows land in completion order.
    """

    def __init__(self, path: str):
        self.path = path
        self.rows_written = 0
        self._fh = None
        self._writer = None

    def open(self) -> "ResultLog":
        try:
            self._fh = open(self.path, "w", newline="")
            self._writer = csv.writer(self._fh, lineterminator="\n")
            self._writer.writerow(CSV_HEADER)
        except OSError as e:
            raise io_failure(self.path, e) from e
        return self

    def append(self, result: TrialResult) -> None:
        if self._writer is None:
            raise StopRule(f"Result log {self.path} is not open")
        try:
            self._writer.writerow(result.to_row())
        except OSError as e:
            raise io_failure(self.path, e) from e
        self.rows_written += 1

    def close(self) -> None:
        if self._fh is None:
            return
        fh, self._fh, self._writer = self._fh, None, None
        try:
            fh.close()
        except OSError as e:
            raise io_failure(self.path, e) from e

    def __enter__(self) -> "ResultLog":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def open_result_log(path: Optional[str]) -> Optional[ResultLog]:
    """ResultLog for path, or None when file logging is off."""
    if not path:
        return None
    return ResultLog(path).open()


def generate_report(summary: BatchSummary) -> str:
    """
    Generate human-readable summary.

    Args:
        summary: BatchSummary to describe

    Returns:
        str: Report text, one statistic per line
    """
    lines = [
        "Summary statistics:",
        f"{summary.successes} runs reach equilibrium ({summary.success_pct:.1f}%) "
        f"in {summary.ticks_mean:.1f} ticks (s.d.: {summary.ticks_sd:.1f})",
        f"{summary.init_groups_mean:.1f} average initial groups "
        f"(s.d.: {summary.init_groups_sd:.1f})",
        f"{summary.final_groups_mean:.1f} average final groups "
        f"(s.d.: {summary.final_groups_sd:.1f})",
    ]

    return "\n".join(lines)


def write_receipts(path: str, receipts: Iterable[dict]) -> int:
    """
    Write receipts to path as JSONL.

    Returns:
        int: Number of receipts written
    """
    count = 0
    try:
        with open(path, "w") as fh:
            for receipt in receipts:
                write_receipt_jsonl(receipt, fh)
                count += 1
    except OSError as e:
        raise io_failure(path, e) from e
    return count
