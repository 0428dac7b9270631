"""
Dashboard Generation for the American Dream Monitor

Renders the latest report, its "Graphic of the Day" and the history view
into a single self-contained HTML page.
"""

import base64
import html
import io
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt

from ..history import HistorySummary, MetricDelta
from ..models import MacroSeries, Report
from .charts import format_metric_value, plot_metric_history, plot_series


def fig_to_base64(fig: plt.Figure) -> str:
    """Convert matplotlib figure to base64 encoded PNG."""
    buf = io.BytesIO()
    fig.savefig(buf, format='png', dpi=100, bbox_inches='tight', facecolor='white')
    buf.seek(0)
    img_base64 = base64.b64encode(buf.read()).decode('utf-8')
    plt.close(fig)
    return img_base64


def rating_label(rating: float) -> str:
    """Headline description for an impact rating (1-10)."""
    if rating >= 8:
        return "Transformative Opportunity"
    if rating >= 6:
        return "Mixed Signals"
    if rating >= 4:
        return "Concerning Trends"
    return "Critical Disruption"


def score_band(score: float) -> str:
    """'good', 'mixed' or 'poor' for a 0-100 score."""
    if score >= 71:
        return "good"
    if score >= 41:
        return "mixed"
    return "poor"


def format_time_ago(timestamp: datetime, now: Optional[datetime] = None) -> str:
    """'N minutes ago' under an hour, 'N hours ago' under a day, else days."""
    now = now or datetime.now(timezone.utc)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    minutes = int((now - timestamp).total_seconds() // 60)

    if minutes < 60:
        return f"{minutes} minutes ago"
    if minutes < 1440:
        return f"{minutes // 60} hours ago"
    return f"{minutes // 1440} days ago"


def _delta_marker(metric: MetricDelta) -> str:
    if metric.delta is None or metric.delta == 0:
        return "—"
    arrow = "▲" if metric.delta > 0 else "▼"
    return f"{arrow} {abs(metric.delta):.1f}"


def generate_score_card(title: str, score: Optional[float], tooltip: Optional[str]) -> str:
    """HTML card for one paired score; empty when the score is absent."""
    if score is None:
        return ""
    return f"""
    <div class="metrics-card score-{score_band(score)}" title="{html.escape(tooltip or '')}">
        <h3>{title}</h3>
        <div class="highlight-value">{score:.0f}</div>
        <div class="highlight-label">{html.escape(tooltip or '')}</div>
    </div>
    """


def generate_delta_cards(metrics: List[MetricDelta], baseline_label: str) -> str:
    """HTML cards with latest value and change since the baseline."""
    cards = []
    for m in metrics:
        cards.append(f"""
        <div class="metrics-card">
            <h3>{m.title}</h3>
            <div class="delta-row">
                <span class="highlight-value">{format_metric_value(m.latest, m.key)}</span>
                <span class="delta {m.direction}">{_delta_marker(m)}</span>
            </div>
            <div class="highlight-label">Change since {baseline_label}</div>
        </div>
        """)
    return "".join(cards)


def generate_dashboard(
    latest: Optional[Report],
    history: HistorySummary,
    output_path: Optional[str] = None,
    title: str = "American Dream Monitor",
    baseline_label: str = "1 Jan 2025",
    now: Optional[datetime] = None,
) -> str:
    """
    Generate the HTML dashboard.

    Args:
        latest: Most recent report, or None before the first run.
        history: Aggregated history (see history.build_history).
        output_path: Path to save HTML file. If None, returns HTML string.
        title: Page title.
        baseline_label: Human-readable baseline date for the delta cards.
        now: Reference time for the "Updated ..." line.

    Returns:
        HTML string if output_path is None, otherwise path to saved file.
    """
    # Latest report
    if latest is None:
        headline = """
        <div class="highlight-box">
            <div class="highlight-label">No analysis yet. Trigger a run to create the first report.</div>
        </div>
        """
        summary_section = ""
        graphic_section = ""
    else:
        headline = f"""
        <div class="highlight-box">
            <div class="highlight-grid">
                <div class="highlight-item">
                    <div class="highlight-value">{latest.rating:.1f}/10</div>
                    <div class="highlight-label">{rating_label(latest.rating)}</div>
                </div>
                {generate_score_card("Productivity vs Labor", latest.prod_labor_score, latest.prod_labor_tooltip)}
                {generate_score_card("American Dream", latest.american_dream_score, latest.american_dream_tooltip)}
            </div>
            <div class="subtitle">Updated {format_time_ago(latest.created_at, now)}</div>
        </div>
        """

        insights = ""
        if latest.productivity_insight or latest.american_dream_impact:
            insights = f"""
            <div class="metrics-grid">
                <div class="metrics-card"><h3>Productivity vs Labor</h3><p>{html.escape(latest.productivity_insight or '')}</p></div>
                <div class="metrics-card"><h3>American Dream Impact</h3><p>{html.escape(latest.american_dream_impact or '')}</p></div>
            </div>
            """

        paragraphs = "".join(
            f"<p>{html.escape(p.strip())}</p>" for p in latest.summary.split("\n") if p.strip()
        )
        summary_section = f"""
        <div class="section">
            <h2 class="section-title">Economic Analysis</h2>
            <div class="chart-container">{paragraphs}</div>
            {insights}
        </div>
        """

        graphic_section = ""
        if latest.series_data and latest.series_title:
            series = MacroSeries(
                series_id=latest.series_id or "",
                title=latest.series_title,
                points=latest.series_data,
            )
            chart = fig_to_base64(plot_series(series))
            graphic_section = f"""
        <div class="section">
            <h2 class="section-title">Graphic of the Day: {html.escape(latest.series_title)}</h2>
            <div class="chart-container">
                <img src="data:image/png;base64,{chart}" alt="{html.escape(latest.series_title)}">
            </div>
        </div>
        """

    # History
    trend_charts = []
    for m in history.metrics:
        daily = history.daily.get(m.key)
        if daily is None or daily.empty:
            continue
        chart = fig_to_base64(plot_metric_history(daily, m.title, m.key))
        trend_charts.append(f"""
            <div class="chart-container">
                <img src="data:image/png;base64,{chart}" alt="{m.title}">
            </div>
        """)

    history_section = f"""
        <div class="section">
            <h2 class="section-title">History</h2>
            <div class="subtitle">{history.report_count} reports, {history.snapshot_count} macro snapshots</div>
            <div class="metrics-grid">
                {generate_delta_cards(history.metrics, baseline_label)}
            </div>
            <div class="chart-grid">
                {''.join(trend_charts)}
            </div>
        </div>
    """

    page = f"""
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
    <style>
        :root {{
            --primary: #1a365d;
            --secondary: #2c5282;
            --success: #276749;
            --warning: #b7791f;
            --danger: #c53030;
            --bg: #f7fafc;
            --card-bg: #ffffff;
            --text: #2d3748;
            --text-light: #718096;
            --border: #e2e8f0;
        }}

        * {{ margin: 0; padding: 0; box-sizing: border-box; }}

        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Oxygen, Ubuntu, sans-serif;
            background: var(--bg);
            color: var(--text);
            line-height: 1.6;
        }}

        .container {{ max-width: 1100px; margin: 0 auto; padding: 20px; }}

        header {{
            background: var(--primary);
            color: white;
            padding: 30px;
            margin-bottom: 30px;
            border-radius: 8px;
        }}

        header h1 {{ font-size: 2rem; margin-bottom: 10px; }}
        .subtitle {{ color: var(--text-light); font-size: 0.95rem; margin: 8px 0; }}
        header .subtitle {{ color: #a0aec0; }}

        .section {{ margin-bottom: 40px; }}
        .section-title {{
            font-size: 1.5rem;
            color: var(--primary);
            margin-bottom: 20px;
            padding-bottom: 10px;
            border-bottom: 2px solid var(--border);
        }}

        .metrics-grid {{
            display: grid;
            grid-template-columns: repeat(auto-fit, minmax(250px, 1fr));
            gap: 20px;
            margin: 20px 0;
        }}
        .metrics-card {{
            background: var(--card-bg);
            color: var(--text);
            border-radius: 8px;
            padding: 20px;
            box-shadow: 0 1px 3px rgba(0,0,0,0.1);
        }}
        .metrics-card h3 {{ color: var(--secondary); margin-bottom: 10px; font-size: 1.1rem; }}
        .score-good .highlight-value {{ color: var(--success); }}
        .score-mixed .highlight-value {{ color: var(--warning); }}
        .score-poor .highlight-value {{ color: var(--danger); }}

        .delta-row {{ display: flex; gap: 16px; align-items: baseline; }}
        .delta {{ font-weight: 600; }}
        .delta.improved {{ color: var(--success); }}
        .delta.regressed {{ color: var(--danger); }}
        .delta.flat {{ color: var(--text-light); }}

        .chart-container {{
            background: var(--card-bg);
            border-radius: 8px;
            padding: 20px;
            margin-bottom: 20px;
            box-shadow: 0 1px 3px rgba(0,0,0,0.1);
        }}
        .chart-container p {{ margin-bottom: 12px; }}
        .chart-container img {{ width: 100%; height: auto; display: block; }}
        .chart-grid {{
            display: grid;
            grid-template-columns: repeat(auto-fit, minmax(450px, 1fr));
            gap: 20px;
        }}

        .highlight-box {{
            background: linear-gradient(135deg, var(--secondary), var(--primary));
            color: white;
            padding: 30px;
            border-radius: 8px;
            margin-bottom: 30px;
        }}
        .highlight-box .subtitle {{ color: #e2e8f0; }}
        .highlight-grid {{
            display: grid;
            grid-template-columns: repeat(auto-fit, minmax(200px, 1fr));
            gap: 20px;
            text-align: center;
        }}
        .highlight-item {{ padding: 15px; }}
        .highlight-value {{ font-size: 2rem; font-weight: 700; margin-bottom: 5px; }}
        .highlight-label {{ font-size: 0.9rem; opacity: 0.9; }}

        footer {{
            text-align: center;
            padding: 30px;
            color: var(--text-light);
            border-top: 1px solid var(--border);
            margin-top: 40px;
        }}

        @media (max-width: 768px) {{
            .chart-grid {{ grid-template-columns: 1fr; }}
            .metrics-grid {{ grid-template-columns: 1fr; }}
        }}
    </style>
</head>
<body>
    <div class="container">
        <header>
            <h1>{title}</h1>
            <div class="subtitle">
                AI's impact on American workers |
                Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}
            </div>
        </header>

        {headline}
        {summary_section}
        {graphic_section}
        {history_section}

        <footer>
            <p>Sources: NewsAPI, FRED (Federal Reserve Bank of St. Louis), Google Gemini</p>
        </footer>
    </div>
</body>
</html>
"""

    if output_path:
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(page)
        return str(path)

    return page
