"""
Report Pipeline

One run: fetch news -> fetch a macro series -> prompt Gemini -> validate ->
insert one report. Any failure ends the run without writing and comes back
as a failed PipelineResult.

Usage:
    from dream_monitor.pipeline import ReportPipeline

    pipeline = ReportPipeline.from_config(MonitorConfig.from_env())
    result = pipeline.run()
    status, body = result.to_response()
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .analysis.gemini_analyzer import GeminiReportAnalyzer
from .analysis.schema import DEFAULT_SCHEMA, SchemaVersion, parse_assessment
from .config import MonitorConfig
from .data.fred_loader import FREDLoader, SeriesChooser
from .data.news_loader import NewsLoader
from .errors import MonitorError, ParseError, StorageError, ValidationError
from .models import MacroSeries, Report
from .storage.report_store import ReportStore

logger = logging.getLogger(__name__)

PARSE_FAILURE_MESSAGE = "AI response parsing failed"
STORAGE_FAILURE_MESSAGE = "Database insertion failed"


class PipelineStage(Enum):
    IDLE = "idle"
    FETCHING_NEWS = "fetching_news"
    FETCHING_MACRO = "fetching_macro"
    PROMPTING = "prompting"
    AWAITING_MODEL = "awaiting_model"
    VALIDATING = "validating"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


@dataclass
class PipelineResult:
    """Outcome of one pipeline run."""
    success: bool
    report: Optional[Report] = None
    articles_analyzed: int = 0
    fred_series: Optional[str] = None
    error: Optional[str] = None
    details: Optional[str] = None
    error_kind: Optional[str] = None
    failed_stage: Optional[PipelineStage] = None
    raw_output: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Response body for the invoking caller."""
        if self.success:
            body: Dict[str, Any] = {
                "success": True,
                "report": self.report.to_dict() if self.report else None,
                "articlesAnalyzed": self.articles_analyzed,
            }
            if self.fred_series:
                body["fredSeries"] = self.fred_series
            return body

        body = {"success": False, "error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body

    def to_response(self) -> Tuple[int, Dict[str, Any]]:
        """(HTTP status, body). Every failure is an internal failure (500)."""
        return (200 if self.success else 500), self.to_dict()


class ReportPipeline:
    """Produces exactly one validated report per successful run."""

    def __init__(
        self,
        config: MonitorConfig,
        news_loader: NewsLoader,
        analyzer: GeminiReportAnalyzer,
        store: ReportStore,
        fred_loader: Optional[FREDLoader] = None,
        schema_version: SchemaVersion = DEFAULT_SCHEMA,
    ):
        self.config = config
        self.news_loader = news_loader
        self.fred_loader = fred_loader
        self.analyzer = analyzer
        self.store = store
        self.schema_version = schema_version
        self.stage = PipelineStage.IDLE

    @classmethod
    def from_config(
        cls,
        config: MonitorConfig,
        store: Optional[ReportStore] = None,
        chooser: Optional[SeriesChooser] = None,
        schema_version: SchemaVersion = DEFAULT_SCHEMA,
    ) -> "ReportPipeline":
        """Wire the real loaders, analyzer and store from configuration."""
        news_loader = NewsLoader(
            api_key=config.news_api_key,
            base_url=config.news_base_url,
            timeout=config.request_timeout,
        )
        fred_loader = None
        if config.include_macro_series:
            fred_loader = FREDLoader(
                api_key=config.fred_api_key,
                base_url=config.fred_base_url,
                timeout=config.request_timeout,
                chooser=chooser,
            )
        analyzer = GeminiReportAnalyzer(
            api_key=config.gemini_api_key,
            model=config.gemini_model,
            temperature=config.gemini_temperature,
            max_output_tokens=config.max_output_tokens,
            logs_dir=config.logs_dir,
        )
        return cls(
            config=config,
            news_loader=news_loader,
            fred_loader=fred_loader,
            analyzer=analyzer,
            store=store or ReportStore(config.db_path),
            schema_version=schema_version,
        )

    def _enter(self, stage: PipelineStage):
        logger.info(f"Pipeline stage: {self.stage.value} -> {stage.value}")
        self.stage = stage

    def run(self) -> PipelineResult:
        """
        Execute one pipeline run.

        Never raises for expected failures; the returned result carries the
        error message, its kind, and the stage at which the run stopped.
        """
        self.stage = PipelineStage.IDLE
        logger.info("Starting AI economy analysis...")

        try:
            return self._run()
        except (ParseError, ValidationError) as e:
            logger.error(f"AI JSON parsing failed: {e}")
            logger.error(f"Raw content that failed to parse: {e.raw_text}")
            return self._fail(e, PARSE_FAILURE_MESSAGE, details=str(e), raw_output=e.raw_text)
        except StorageError as e:
            return self._fail(e, STORAGE_FAILURE_MESSAGE, details=str(e))
        except MonitorError as e:
            logger.error(f"Pipeline failed: {e}")
            return self._fail(e, str(e))
        except Exception as e:
            logger.exception("Unexpected error in analysis pipeline")
            return self._fail(e, str(e) or "Unknown error occurred")

    def _fail(
        self,
        error: Exception,
        message: str,
        details: Optional[str] = None,
        raw_output: Optional[str] = None,
    ) -> PipelineResult:
        failed_stage = self.stage
        self.stage = PipelineStage.FAILED
        return PipelineResult(
            success=False,
            error=message,
            details=details,
            error_kind=getattr(error, "kind", "unexpected"),
            failed_stage=failed_stage,
            raw_output=raw_output,
        )

    def _run(self) -> PipelineResult:
        self.config.validate()

        self._enter(PipelineStage.FETCHING_NEWS)
        articles = self.news_loader.fetch_articles()

        series: Optional[MacroSeries] = None
        if self.fred_loader is not None:
            self._enter(PipelineStage.FETCHING_MACRO)
            series = self.fred_loader.fetch_random_series()

        self._enter(PipelineStage.PROMPTING)
        prompt = self.analyzer.build_prompt(articles, self.schema_version)

        self._enter(PipelineStage.AWAITING_MODEL)
        raw_output = self.analyzer.complete(prompt, self.schema_version)

        self._enter(PipelineStage.VALIDATING)
        assessment = parse_assessment(raw_output, self.schema_version)

        self._enter(PipelineStage.PERSISTING)
        fields = assessment.to_columns()
        series_data = None
        if series is not None:
            fields["series_id"] = series.series_id
            fields["series_title"] = series.title
            series_data = series.points or None
        report = self.store.insert_report(fields, series_data=series_data)
        logger.info(f"Analysis stored successfully as report {report.id}")

        self._enter(PipelineStage.DONE)
        return PipelineResult(
            success=True,
            report=report,
            articles_analyzed=len(articles),
            fred_series=series.title if series is not None else None,
        )
