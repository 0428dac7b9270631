"""
HTTP API for the American Dream Monitor

Endpoints:
    OPTIONS /analyze          CORS preflight (empty body)
    POST    /analyze          Run the report pipeline once
    GET     /reports/latest   Most recent report
    GET     /reports          All reports, oldest first
    GET     /macro-snapshots  All macro snapshots, oldest first
    GET     /history          Metric deltas and summary counts
    GET     /                 HTML dashboard

Usage:
    uvicorn dream_monitor.api:create_app --factory --port 8000
"""

import logging
from typing import Any, Callable, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response

from . import __version__
from .config import MonitorConfig
from .history import build_history
from .pipeline import ReportPipeline
from .storage.report_store import ReportStore
from .visualization.report import generate_dashboard

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS",
}

# Returns an object with run() -> PipelineResult
PipelineFactory = Callable[[], Any]


def create_app(
    config: Optional[MonitorConfig] = None,
    store: Optional[ReportStore] = None,
    pipeline_factory: Optional[PipelineFactory] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Runtime configuration; read from the environment when omitted.
        store: Report store; opened at `config.db_path` when omitted.
        pipeline_factory: Builds one pipeline per POST /analyze; defaults to
            ReportPipeline.from_config against the same store.
    """
    config = config or MonitorConfig.from_env()
    store = store or ReportStore(config.db_path)
    if pipeline_factory is None:
        def pipeline_factory():
            return ReportPipeline.from_config(config, store=store)

    app = FastAPI(
        title="American Dream Monitor API",
        description="AI impact on American workers: news, macro data and model assessments",
        version=__version__,
    )

    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    @app.options("/analyze")
    def analyze_preflight() -> Response:
        return Response(status_code=200)

    @app.post("/analyze")
    def analyze() -> JSONResponse:
        """Run one pipeline pass and return the response contract."""
        result = pipeline_factory().run()
        status_code, body = result.to_response()
        if result.success:
            logger.info(f"Analysis complete: {result.articles_analyzed} articles")
        else:
            logger.warning(f"Analysis failed at {result.failed_stage}: {result.error}")
        return JSONResponse(status_code=status_code, content=body)

    @app.get("/reports/latest")
    def latest_report():
        report = store.latest_report()
        if report is None:
            raise HTTPException(status_code=404, detail="No reports yet")
        return report.to_dict()

    @app.get("/reports")
    def list_reports():
        return [r.to_dict() for r in store.list_reports()]

    @app.get("/macro-snapshots")
    def list_macro_snapshots():
        return [s.to_dict() for s in store.list_macro_snapshots()]

    @app.get("/history")
    def history():
        summary = build_history(store.list_reports(), store.list_macro_snapshots())
        return summary.to_dict()

    @app.get("/", response_class=HTMLResponse)
    def dashboard() -> HTMLResponse:
        summary = build_history(store.list_reports(), store.list_macro_snapshots())
        return HTMLResponse(generate_dashboard(store.latest_report(), summary))

    return app
