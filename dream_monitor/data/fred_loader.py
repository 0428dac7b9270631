"""
Federal Reserve Bank of St. Louis (FRED) Loader
===============================================
Downloads observations for the labor-market series charted on the dashboard.

FRED API: https://fred.stlouisfed.org/docs/api/fred/
"""

import math
import random
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

import requests

from .base_loader import BaseLoader
from ..config import (
    FRED_MISSING_VALUE,
    FRED_OBSERVATION_START,
    FRED_SERIES_POOL,
    MAX_SERIES_POINTS,
)
from ..models import MacroSeries, SeriesPoint

SeriesChooser = Callable[[Sequence[str]], str]


def clean_observations(
    observations: Iterable[Dict[str, Any]],
    max_points: int = MAX_SERIES_POINTS,
) -> List[SeriesPoint]:
    """
    Turn raw FRED observations into a chartable series.

    Drops the "." placeholder and anything that does not parse as a finite
    number, sorts by date, and keeps the newest `max_points`.

    Args:
        observations: FRED `observations[]` entries ({"date", "value", ...}).
        max_points: Maximum number of points to keep.

    Returns:
        Points in ascending date order.
    """
    points = []
    for obs in observations:
        raw_value = obs.get("value")
        obs_date = obs.get("date")
        if not obs_date or raw_value is None or raw_value == FRED_MISSING_VALUE:
            continue
        try:
            value = float(raw_value)
        except (TypeError, ValueError):
            continue
        if not math.isfinite(value):
            continue
        points.append(SeriesPoint(date=obs_date, value=value))

    points.sort(key=lambda p: p.date)
    if max_points <= 0:
        return []
    return points[-max_points:]


class FREDLoader(BaseLoader):
    """
    Client for FRED series observations.

    Series selection is delegated to `chooser` so callers can pin a series.
    """

    SOURCE_NAME = "FRED API"
    BASE_URL = "https://api.stlouisfed.org/fred"

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
        series_pool: Optional[Dict[str, str]] = None,
        chooser: Optional[SeriesChooser] = None,
    ):
        super().__init__(base_url=base_url, session=session, timeout=timeout)
        self.api_key = api_key
        self.series_pool = dict(series_pool or FRED_SERIES_POOL)
        self.chooser = chooser or random.choice

    def get_series(
        self,
        series_id: str,
        observation_start: Optional[str] = None,
        sort_order: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> dict:
        """
        Get observations for a FRED series.

        Args:
            series_id: FRED series ID (e.g., 'UNRATE')
            observation_start: Start date (YYYY-MM-DD)
            sort_order: 'asc' or 'desc'
            limit: Maximum observations returned
        """
        params = {
            "series_id": series_id,
            "api_key": self.api_key,
            "file_type": "json",
        }
        if observation_start:
            params["observation_start"] = observation_start
        if sort_order:
            params["sort_order"] = sort_order
        if limit:
            params["limit"] = limit
        return self.get_json("series/observations", params=params)

    def choose_series(self) -> str:
        """Pick one series ID from the pool."""
        series_id = self.chooser(list(self.series_pool))
        if series_id not in self.series_pool:
            raise ValueError(f"Chooser returned unknown series: {series_id}")
        return series_id

    def fetch_series(
        self,
        series_id: str,
        observation_start: str = FRED_OBSERVATION_START,
        max_points: int = MAX_SERIES_POINTS,
    ) -> MacroSeries:
        """
        Fetch and clean one series.

        An empty result is returned as a MacroSeries with no points; only
        HTTP-level failures raise.

        Raises:
            UpstreamError: If FRED answers with a non-success status.
        """
        title = self.series_pool.get(series_id, series_id)
        self.logger.info(f"Fetching FRED series {series_id} ({title})")

        data = self.get_series(series_id, observation_start=observation_start)
        raw = data.get("observations") or []
        points = clean_observations(raw, max_points=max_points)

        self.logger.info(
            f"{series_id}: {len(raw)} raw observations, {len(points)} kept"
        )
        if not points:
            self.logger.warning(f"No valid observations for {series_id}; no chart will be shown")

        return MacroSeries(series_id=series_id, title=title, points=points)

    def fetch_random_series(self) -> MacroSeries:
        """Choose a series from the pool and fetch it."""
        return self.fetch_series(self.choose_series())

    def fetch_latest_value(self, series_id: str) -> Optional[float]:
        """
        Latest valid observation of a series, or None if there is none.

        Used to fill macro snapshots.
        """
        data = self.get_series(series_id, sort_order="desc", limit=10)
        points = clean_observations(data.get("observations") or [], max_points=1)
        return points[-1].value if points else None

    def fetch_snapshot_values(self, series_map: Dict[str, str]) -> Dict[str, Optional[float]]:
        """Latest value for each `{column: series_id}` entry."""
        return {column: self.fetch_latest_value(series_id) for column, series_id in series_map.items()}
