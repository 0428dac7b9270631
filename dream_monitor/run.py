#!/usr/bin/env python3
"""
American Dream Monitor - CLI Entry Point

Usage:
    python -m dream_monitor.run --analyze
    python -m dream_monitor.run --serve --port 8000
    python -m dream_monitor.run --dashboard --output dashboard/index.html
    python -m dream_monitor.run --history
    python -m dream_monitor.run --snapshot

Can be scheduled via cron:
    # Daily at 7am, then refresh the static dashboard
    0 7 * * * cd /path/to/monitor && python -m dream_monitor.run --analyze --dashboard
"""

import argparse
import json
import logging
import sys
from datetime import date
from typing import Optional

from dream_monitor.analysis.schema import parse_version
from dream_monitor.config import SNAPSHOT_SERIES, MonitorConfig
from dream_monitor.data.fred_loader import FREDLoader
from dream_monitor.errors import ConfigurationError, MonitorError
from dream_monitor.history import build_history
from dream_monitor.models import MacroSnapshot
from dream_monitor.pipeline import ReportPipeline
from dream_monitor.storage.report_store import ReportStore
from dream_monitor.visualization.charts import format_metric_value
from dream_monitor.visualization.report import generate_dashboard

logger = logging.getLogger('DreamMonitor')


def configure_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )


def run_analysis(config: MonitorConfig, store: ReportStore, schema: Optional[str] = None) -> bool:
    """Run the pipeline once and print the outcome."""
    print(f"\n{'=' * 60}")
    print("AI ECONOMY ANALYSIS")
    print("=" * 60)

    pipeline = ReportPipeline.from_config(config, store=store, schema_version=parse_version(schema))
    result = pipeline.run()
    status_code, body = result.to_response()

    if result.success:
        report = result.report
        print(f"\nRating: {report.rating:.1f}/10")
        if report.prod_labor_score is not None:
            print(f"Productivity vs Labor: {report.prod_labor_score:.0f}")
        if report.american_dream_score is not None:
            print(f"American Dream: {report.american_dream_score:.0f}")
        print(f"Articles analyzed: {result.articles_analyzed}")
        if result.fred_series:
            print(f"FRED series: {result.fred_series}")
        print(f"\n{report.summary}")
    else:
        stage = result.failed_stage.value if result.failed_stage else "unknown"
        print(f"\nAnalysis failed at stage '{stage}' (HTTP {status_code})")
        print(json.dumps(body, indent=2))

    return result.success


def run_dashboard(store: ReportStore, output: str) -> str:
    """Write the HTML dashboard to `output`."""
    print(f"\n{'=' * 60}")
    print("DASHBOARD")
    print("=" * 60)

    summary = build_history(store.list_reports(), store.list_macro_snapshots())
    path = generate_dashboard(store.latest_report(), summary, output_path=output)
    print(f"\nDashboard saved to: {path}")
    return path


def run_history(store: ReportStore):
    """Print latest value and change since baseline for every metric."""
    summary = build_history(store.list_reports(), store.list_macro_snapshots())

    print(f"\n{'=' * 60}")
    print(f"HISTORY - {summary.report_count} reports, {summary.snapshot_count} snapshots")
    print("=" * 60)

    if summary.first_report_at:
        print(f"First report:  {summary.first_report_at:%Y-%m-%d %H:%M}")
        print(f"Latest report: {summary.latest_report_at:%Y-%m-%d %H:%M}")

    print(f"\n{'Metric':<25} {'Latest':>12} {'Change':>10}  Direction")
    print("-" * 60)
    for m in summary.metrics:
        change = f"{m.delta:+.1f}" if m.delta is not None else "—"
        print(f"{m.title:<25} {format_metric_value(m.latest, m.key):>12} {change:>10}  {m.direction}")


def run_snapshot(config: MonitorConfig, store: ReportStore, snapshot_date: Optional[date] = None) -> MacroSnapshot:
    """Record today's headline indicators from FRED."""
    snapshot_date = snapshot_date or date.today()

    print(f"\n{'=' * 60}")
    print(f"MACRO SNAPSHOT - {snapshot_date}")
    print("=" * 60)

    if not config.fred_api_key:
        raise ConfigurationError("FRED_API_KEY not configured")

    loader = FREDLoader(
        api_key=config.fred_api_key,
        base_url=config.fred_base_url,
        timeout=config.request_timeout,
    )
    values = loader.fetch_snapshot_values(SNAPSHOT_SERIES)
    snapshot = store.record_macro_snapshot(MacroSnapshot(snapshot_date=snapshot_date, **values))

    for column, value in values.items():
        print(f"{column}: {format_metric_value(value, column)}")
    return snapshot


def run_server(config: MonitorConfig, host: str, port: int):
    import uvicorn
    from dream_monitor.api import create_app

    print(f"Serving American Dream Monitor on http://{host}:{port}")
    uvicorn.run(create_app(config), host=host, port=port)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="American Dream Monitor: AI's impact on American workers"
    )

    parser.add_argument(
        "--analyze",
        action="store_true",
        help="Run one analysis and store the report",
    )
    parser.add_argument(
        "--dashboard",
        action="store_true",
        help="Write the HTML dashboard",
    )
    parser.add_argument(
        "--history",
        action="store_true",
        help="Print metric changes since the baseline date",
    )
    parser.add_argument(
        "--snapshot",
        action="store_true",
        help="Record a macro snapshot (unemployment, median income, Gini)",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Start the HTTP API",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="dashboard/index.html",
        help="Dashboard output path",
    )
    parser.add_argument(
        "--schema",
        type=str,
        default=None,
        help="Model output schema version (v1, v2, v3)",
    )
    parser.add_argument(
        "--no-macro",
        action="store_true",
        help="Skip the FRED series for this run",
    )
    parser.add_argument("--host", type=str, default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    config = MonitorConfig.from_env()
    if args.no_macro:
        config.include_macro_series = False

    if args.serve:
        run_server(config, args.host, args.port)
        return 0

    if not (args.analyze or args.dashboard or args.history or args.snapshot):
        print("American Dream Monitor")
        print("-" * 40)
        print("Usage:")
        print("  python -m dream_monitor.run --analyze    # Run one analysis")
        print("  python -m dream_monitor.run --serve      # Start the HTTP API")
        print("  python -m dream_monitor.run --dashboard  # Write the HTML dashboard")
        print("  python -m dream_monitor.run --history    # Metric changes")
        print("  python -m dream_monitor.run --snapshot   # Record a macro snapshot")
        print("\nRun with --help for all options")
        return 0

    store = ReportStore(config.db_path)
    ok = True

    try:
        if args.snapshot:
            run_snapshot(config, store)
        if args.analyze:
            ok = run_analysis(config, store, args.schema) and ok
    except (MonitorError, ValueError) as e:
        logger.error(f"{e}")
        print(f"Error: {e}")
        return 1

    if args.history:
        run_history(store)
    if args.dashboard:
        run_dashboard(store, args.output)

    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
