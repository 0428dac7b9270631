"""
Visualization Module for the American Dream Monitor

Generate charts and the HTML dashboard.
"""

from .charts import (
    format_metric_value,
    format_series_value,
    plot_metric_history,
    plot_series,
)
from .report import (
    fig_to_base64,
    format_time_ago,
    generate_dashboard,
    rating_label,
    score_band,
)

__all__ = [
    # Charts
    "format_metric_value",
    "format_series_value",
    "plot_metric_history",
    "plot_series",
    # Dashboard
    "fig_to_base64",
    "format_time_ago",
    "generate_dashboard",
    "rating_label",
    "score_band",
]
