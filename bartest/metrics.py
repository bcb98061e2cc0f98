"""Polars-based aggregation of unit results.

Summaries are derived on demand from the ordered result list; nothing here
holds state between runs.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, List

import numpy as np
import polars as pl

from .results import UnitResult, UnitStatus

RESULT_SCHEMA = {
    "order": pl.Int64,
    "suite": pl.Utf8,
    "unit": pl.Utf8,
    "display_name": pl.Utf8,
    "status": pl.Utf8,
    "duration_ms": pl.Float64,
    "message": pl.Utf8,
    "category": pl.Utf8,
    "bar": pl.Int64,
}


@dataclass
class RunSummary:
    """Counts and timing statistics for one run."""
    total: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    timed_out: int = 0
    errored: int = 0
    inconclusive: int = 0
    success_rate: float = 0.0      # passed * 100 / total, 0 for an empty run
    min_duration_ms: float = 0.0
    avg_duration_ms: float = 0.0
    max_duration_ms: float = 0.0
    total_duration_ms: float = 0.0

    @property
    def all_passed(self) -> bool:
        return self.failed == 0 and self.errored == 0 and self.timed_out == 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def results_to_dataframe(results: List[UnitResult]) -> pl.DataFrame:
    """Convert results to a DataFrame, one row per result in run order."""
    if not results:
        return pl.DataFrame(schema=RESULT_SCHEMA)

    data = {
        "order": list(range(len(results))),
        "suite": [r.suite_name for r in results],
        "unit": [r.unit_name for r in results],
        "display_name": [r.display_name for r in results],
        "status": [r.status.value for r in results],
        "duration_ms": [float(r.duration_ms) for r in results],
        "message": [r.message for r in results],
        "category": [r.category for r in results],
        "bar": [r.snapshot.bar for r in results],
    }
    return pl.DataFrame(data, schema=RESULT_SCHEMA)


def _count(df: pl.DataFrame, status: UnitStatus) -> int:
    return df.filter(pl.col("status") == status.value).height


def summarize(results: List[UnitResult]) -> RunSummary:
    df = results_to_dataframe(results)
    if df.is_empty():
        return RunSummary()

    total = df.height
    passed = _count(df, UnitStatus.PASSED)
    durations = df["duration_ms"].to_numpy()

    return RunSummary(
        total=total,
        passed=passed,
        failed=_count(df, UnitStatus.FAILED),
        skipped=_count(df, UnitStatus.SKIPPED),
        timed_out=_count(df, UnitStatus.TIMED_OUT),
        errored=_count(df, UnitStatus.ERRORED),
        inconclusive=_count(df, UnitStatus.INCONCLUSIVE),
        success_rate=passed * 100.0 / total,
        min_duration_ms=float(np.min(durations)),
        avg_duration_ms=float(np.mean(durations)),
        max_duration_ms=float(np.max(durations)),
        total_duration_ms=float(np.sum(durations)),
    )


def group_by_suite(results: List[UnitResult]) -> Dict[str, List[UnitResult]]:
    """Results per suite; suites in first-seen order, units in run order."""
    groups: Dict[str, List[UnitResult]] = {}
    for result in results:
        groups.setdefault(result.suite_name, []).append(result)
    return groups


def suite_breakdown(results: List[UnitResult]) -> List[Dict[str, Any]]:
    """Per-suite counts and total duration, in the order suites ran."""
    df = results_to_dataframe(results)
    if df.is_empty():
        return []

    breakdown = (
        df.group_by("suite")
        .agg([
            pl.col("order").min().alias("first"),
            pl.len().alias("total"),
            (pl.col("status") == UnitStatus.PASSED.value).sum().alias("passed"),
            pl.col("status").is_in([UnitStatus.FAILED.value, UnitStatus.ERRORED.value]).sum().alias("failed"),
            (pl.col("status") == UnitStatus.SKIPPED.value).sum().alias("skipped"),
            pl.col("duration_ms").sum().alias("duration_ms"),
        ])
        .sort("first")
        .drop("first")
    )
    return breakdown.to_dicts()
