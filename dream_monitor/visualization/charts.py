"""
Chart Generation for the American Dream Monitor

Creates matplotlib visualizations for the dashboard: the sampled macro
series ("Graphic of the Day") and one trend chart per history metric.
"""

from pathlib import Path
from typing import Optional

import pandas as pd
import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt
import matplotlib.dates as mdates
from matplotlib.ticker import FuncFormatter

from ..models import MacroSeries


# Style configuration
plt.style.use('seaborn-v0_8-whitegrid')
COLORS = {
    'series': '#2E86AB',
    'rating': '#1a365d',
    'prod_labor_score': '#2563EB',
    'american_dream_score': '#16A34A',
    'unrate': '#DC2626',
    'median_income': '#059669',
    'gini_index': '#7C3AED',
    'neutral': '#6C757D',
}


def format_series_value(value: Optional[float], title: str) -> str:
    """
    Format a value using the unit hinted at by the series title.

    "%" -> 4.1%, "$" -> $35.12, "hours" -> 34.3 hrs,
    "thousands" -> 159.1M (values are in thousands), else 1,234.5.
    """
    if value is None or pd.isna(value):
        return "—"
    if '%' in title:
        return f"{value:.1f}%"
    if '$' in title:
        return f"${value:.2f}"
    if 'hours' in title:
        return f"{value:.1f} hrs"
    if 'thousands' in title:
        return f"{value / 1000:.1f}M"
    return f"{value:,.1f}"


def format_metric_value(value: Optional[float], key: str) -> str:
    """Format a history metric for its delta card."""
    if value is None or pd.isna(value):
        return "—"
    if key == 'unrate':
        return f"{value:.1f}%"
    if key == 'median_income':
        return f"${value / 1000:.1f}k"
    return f"{value:.1f}"


def plot_series(
    series: MacroSeries,
    save_path: Optional[Path] = None,
    figsize: tuple = (12, 5),
) -> plt.Figure:
    """
    Plot the macro series sampled for a report.

    Args:
        series: Series with points in ascending date order.
        save_path: Path to save the figure.
        figsize: Figure size.

    Returns:
        Matplotlib figure.
    """
    fig, ax = plt.subplots(figsize=figsize)

    dates = pd.to_datetime([p.date for p in series.points])
    values = [p.value for p in series.points]

    ax.plot(dates, values, color=COLORS['series'], linewidth=2)
    ax.fill_between(dates, values, min(values) if values else 0,
                    alpha=0.15, color=COLORS['series'])

    ax.set_title(f"Graphic of the Day: {series.title}", fontsize=14, fontweight='bold')
    ax.set_xlabel('Date')
    ax.yaxis.set_major_formatter(
        FuncFormatter(lambda y, _: format_series_value(y, series.title))
    )
    ax.xaxis.set_major_formatter(mdates.DateFormatter('%b %Y'))
    ax.grid(True, alpha=0.3)

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')

    return fig


def plot_metric_history(
    daily: pd.Series,
    title: str,
    key: str,
    save_path: Optional[Path] = None,
    figsize: tuple = (10, 4),
) -> plt.Figure:
    """
    Plot one metric's daily values.

    Args:
        daily: Values indexed by day (see history.daily_series).
        title: Chart title.
        key: Metric key, used for color and tick formatting.
        save_path: Path to save the figure.
        figsize: Figure size.

    Returns:
        Matplotlib figure.
    """
    fig, ax = plt.subplots(figsize=figsize)
    color = COLORS.get(key, COLORS['neutral'])

    if daily.empty:
        ax.text(0.5, 0.5, 'No data yet', ha='center', va='center',
                transform=ax.transAxes, color=COLORS['neutral'], fontsize=12)
        ax.set_xticks([])
        ax.set_yticks([])
    else:
        ax.plot(daily.index, daily.values, color=color, linewidth=2, marker='o', markersize=4)
        ax.yaxis.set_major_formatter(
            FuncFormatter(lambda y, _: format_metric_value(y, key))
        )
        ax.xaxis.set_major_formatter(mdates.DateFormatter('%d %b'))
        fig.autofmt_xdate()

    ax.set_title(title, fontsize=12, fontweight='bold')
    ax.grid(True, alpha=0.3)

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')

    return fig
