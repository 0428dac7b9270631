"""
Data Model for the American Dream Monitor

Reports, macro snapshots, articles and the series sampled for charts.
"""

import json
import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Union


@dataclass
class Article:
    """A news article returned by the news source."""
    title: str
    description: Optional[str]
    url: str
    published_at: str
    source: Optional[str] = None

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "Article":
        """Build from a NewsAPI `articles[]` entry."""
        source = item.get("source") or {}
        return cls(
            title=(item.get("title") or "").strip(),
            description=item.get("description"),
            url=item.get("url") or "",
            published_at=item.get("publishedAt") or "",
            source=source.get("name") if isinstance(source, dict) else None,
        )


@dataclass
class SeriesPoint:
    """A single dated observation of a macro series."""
    date: str  # YYYY-MM-DD
    value: float

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "value": self.value}


@dataclass
class MacroSeries:
    """A macro series sampled for one report."""
    series_id: str
    title: str
    points: List[SeriesPoint] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.points


@dataclass
class Report:
    """One persisted outcome of a pipeline run."""
    id: str
    created_at: datetime
    rating: float
    summary: str
    productivity_insight: Optional[str] = None
    american_dream_impact: Optional[str] = None
    prod_labor_score: Optional[float] = None
    prod_labor_tooltip: Optional[str] = None
    american_dream_score: Optional[float] = None
    american_dream_tooltip: Optional[str] = None
    series_id: Optional[str] = None
    series_title: Optional[str] = None
    series_data: Optional[List[SeriesPoint]] = None

    @classmethod
    def from_row(cls, row: Any) -> "Report":
        """Build from a `reports` table row (sqlite3.Row or dict)."""
        keys = row.keys()

        def get(name):
            return row[name] if name in keys else None

        series_data = None
        raw_series = get("series_data")
        if raw_series:
            series_data = [
                SeriesPoint(date=p["date"], value=float(p["value"]))
                for p in json.loads(raw_series)
            ]

        return cls(
            id=row["id"],
            created_at=parse_timestamp(row["created_at"]),
            rating=float(row["rating"]),
            summary=row["summary"],
            productivity_insight=get("productivity_insight"),
            american_dream_impact=get("american_dream_impact"),
            prod_labor_score=_optional_float(get("prod_labor_score")),
            prod_labor_tooltip=get("prod_labor_tooltip"),
            american_dream_score=_optional_float(get("american_dream_score")),
            american_dream_tooltip=get("american_dream_tooltip"),
            series_id=get("series_id"),
            series_title=get("series_title"),
            series_data=series_data,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat(),
            "rating": self.rating,
            "summary": self.summary,
            "productivity_insight": self.productivity_insight,
            "american_dream_impact": self.american_dream_impact,
            "prod_labor_score": self.prod_labor_score,
            "prod_labor_tooltip": self.prod_labor_tooltip,
            "american_dream_score": self.american_dream_score,
            "american_dream_tooltip": self.american_dream_tooltip,
            "series_id": self.series_id,
            "series_title": self.series_title,
            "series_data": (
                [p.to_dict() for p in self.series_data]
                if self.series_data is not None else None
            ),
        }


@dataclass
class MacroSnapshot:
    """Periodic snapshot of headline indicators."""
    snapshot_date: date
    unrate: Optional[float] = None
    median_income: Optional[float] = None
    gini_index: Optional[float] = None

    @classmethod
    def from_row(cls, row: Any) -> "MacroSnapshot":
        return cls(
            snapshot_date=date.fromisoformat(row["snapshot_date"][:10]),
            unrate=_optional_float(row["unrate"]),
            median_income=_optional_float(row["median_income"]),
            gini_index=_optional_float(row["gini_index"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "snapshot_date": self.snapshot_date.isoformat(),
            "unrate": self.unrate,
            "median_income": self.median_income,
            "gini_index": self.gini_index,
        }


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    """Parse a stored ISO timestamp, assuming UTC when no offset is present."""
    if isinstance(value, datetime):
        ts = value
    else:
        ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number
