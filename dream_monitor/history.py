"""
History Aggregation

Turns the stored reports and macro snapshots into the numbers shown on the
history view: per-metric change since a baseline date, and one value per
day for the trend charts.

Usage:
    from dream_monitor.history import build_history

    summary = build_history(store.list_reports(), store.list_macro_snapshots())
    for metric in summary.metrics:
        print(metric.title, metric.latest, metric.delta, metric.direction)
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from .config import HISTORY_BASELINE_DATE, MACRO_METRICS, REPORT_METRICS
from .models import MacroSnapshot, Report

logger = logging.getLogger(__name__)


@dataclass
class MetricDelta:
    """Latest value of one metric and its change since the baseline record."""
    key: str
    title: str
    higher_is_better: bool
    latest: Optional[float] = None
    baseline: Optional[float] = None
    delta: Optional[float] = None
    latest_date: Optional[str] = None
    baseline_date: Optional[str] = None

    @property
    def direction(self) -> str:
        """'improved', 'regressed' or 'flat' (no change or no delta)."""
        if self.delta is None or self.delta == 0:
            return "flat"
        if (self.delta > 0) == self.higher_is_better:
            return "improved"
        return "regressed"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "title": self.title,
            "higher_is_better": self.higher_is_better,
            "latest": self.latest,
            "baseline": self.baseline,
            "delta": self.delta,
            "direction": self.direction,
            "latest_date": self.latest_date,
            "baseline_date": self.baseline_date,
        }


@dataclass
class HistorySummary:
    """Everything the history view needs."""
    metrics: List[MetricDelta] = field(default_factory=list)
    daily: Dict[str, pd.Series] = field(default_factory=dict)
    report_count: int = 0
    snapshot_count: int = 0
    first_report_at: Optional[datetime] = None
    latest_report_at: Optional[datetime] = None

    def metric(self, key: str) -> Optional[MetricDelta]:
        for m in self.metrics:
            if m.key == key:
                return m
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metrics": [m.to_dict() for m in self.metrics],
            "series": {
                key: [
                    {"date": idx.strftime("%Y-%m-%d"), "value": float(value)}
                    for idx, value in series.items()
                ]
                for key, series in self.daily.items()
            },
            "report_count": self.report_count,
            "snapshot_count": self.snapshot_count,
            "first_report_at": self.first_report_at.isoformat() if self.first_report_at else None,
            "latest_report_at": self.latest_report_at.isoformat() if self.latest_report_at else None,
        }


# ----------------------------------------------------------------------
# Frames
# ----------------------------------------------------------------------

def _to_frame(records: List[Dict[str, Any]], columns: Sequence[str]) -> pd.DataFrame:
    if not records:
        return pd.DataFrame(columns=["date", *columns])

    df = pd.DataFrame(records)
    for col in columns:
        df[col] = pd.to_numeric(df[col], errors="coerce")
    return df.sort_values("date", kind="mergesort").reset_index(drop=True)


def _utc_naive(value: datetime) -> pd.Timestamp:
    ts = pd.Timestamp(value)
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts


def reports_frame(reports: Sequence[Report]) -> pd.DataFrame:
    """Report metrics by created_at (UTC, tz-naive), ascending."""
    records = [
        {
            "date": _utc_naive(r.created_at),
            **{key: getattr(r, key) for key in REPORT_METRICS},
        }
        for r in reports
    ]
    return _to_frame(records, list(REPORT_METRICS))


def snapshots_frame(snapshots: Sequence[MacroSnapshot]) -> pd.DataFrame:
    """Macro snapshot values by snapshot_date, ascending."""
    records = [
        {
            "date": pd.Timestamp(s.snapshot_date),
            **{key: getattr(s, key) for key in MACRO_METRICS},
        }
        for s in snapshots
    ]
    return _to_frame(records, list(MACRO_METRICS))


# ----------------------------------------------------------------------
# Deltas
# ----------------------------------------------------------------------

def _clean(value: Any) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    return float(value)


def compute_delta(baseline: Optional[float], latest: Optional[float]) -> Optional[float]:
    """latest - baseline, or None when either side is missing or NaN."""
    baseline = _clean(baseline)
    latest = _clean(latest)
    if baseline is None or latest is None:
        return None
    return latest - baseline


def baseline_position(frame: pd.DataFrame, baseline_date: str = HISTORY_BASELINE_DATE) -> Optional[int]:
    """
    Row position of the baseline record.

    The first record dated on or after `baseline_date`; if every record is
    older, the first record. None for an empty frame.
    """
    if frame.empty:
        return None
    on_or_after = (frame["date"] >= pd.Timestamp(baseline_date)).to_numpy().nonzero()[0]
    return int(on_or_after[0]) if len(on_or_after) else 0


def metric_delta(
    frame: pd.DataFrame,
    key: str,
    title: str,
    higher_is_better: bool,
    baseline_date: str = HISTORY_BASELINE_DATE,
) -> MetricDelta:
    """Latest vs baseline record for one metric column."""
    result = MetricDelta(key=key, title=title, higher_is_better=higher_is_better)
    pos = baseline_position(frame, baseline_date)
    if pos is None:
        return result

    baseline_row = frame.iloc[pos]
    latest_row = frame.iloc[-1]

    result.baseline = _clean(baseline_row[key])
    result.latest = _clean(latest_row[key])
    result.delta = compute_delta(result.baseline, result.latest)
    result.baseline_date = baseline_row["date"].strftime("%Y-%m-%d")
    result.latest_date = latest_row["date"].strftime("%Y-%m-%d")
    return result


def daily_series(frame: pd.DataFrame, key: str) -> pd.Series:
    """
    One value per calendar day for a metric column.

    Null values are dropped first; when a day has several records the latest
    one wins. Indexed by day, ascending.
    """
    if frame.empty or key not in frame.columns:
        return pd.Series(dtype=float, name=key)

    data = frame[["date", key]].dropna(subset=[key]).sort_values("date", kind="mergesort")
    if data.empty:
        return pd.Series(dtype=float, name=key)

    daily = data.groupby(data["date"].dt.normalize())[key].last().astype(float)
    daily.index.name = "date"
    return daily


def build_history(
    reports: Sequence[Report],
    snapshots: Sequence[MacroSnapshot],
    baseline_date: str = HISTORY_BASELINE_DATE,
) -> HistorySummary:
    """
    Aggregate stored records for the history view.

    Args:
        reports: Reports, any order.
        snapshots: Macro snapshots, any order.
        baseline_date: Date (YYYY-MM-DD) deltas are measured from.

    Returns:
        HistorySummary with one MetricDelta per report and macro metric.
    """
    report_df = reports_frame(reports)
    snapshot_df = snapshots_frame(snapshots)

    summary = HistorySummary(
        report_count=len(report_df),
        snapshot_count=len(snapshot_df),
    )

    for key, (title, higher_is_better) in REPORT_METRICS.items():
        summary.metrics.append(metric_delta(report_df, key, title, higher_is_better, baseline_date))
        summary.daily[key] = daily_series(report_df, key)

    for key, (title, higher_is_better) in MACRO_METRICS.items():
        summary.metrics.append(metric_delta(snapshot_df, key, title, higher_is_better, baseline_date))
        summary.daily[key] = daily_series(snapshot_df, key)

    if reports:
        ordered = sorted(reports, key=lambda r: r.created_at)
        summary.first_report_at = ordered[0].created_at
        summary.latest_report_at = ordered[-1].created_at

    logger.info(
        f"History: {summary.report_count} reports, {summary.snapshot_count} snapshots"
    )
    return summary
