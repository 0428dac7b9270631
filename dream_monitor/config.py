"""
Configuration for the American Dream Monitor

Defines the news query, the FRED series pool, the history metrics, and the
runtime settings loaded from the environment.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

# Load environment variables
load_dotenv()


# NewsAPI query: AI x labor/economy
NEWS_QUERY = (
    "(artificial intelligence OR AI) "
    "AND (jobs OR employment OR productivity OR automation OR wages OR labor) "
    "AND (economy OR economic)"
)
NEWS_PAGE_SIZE = 25
NEWS_LANGUAGE = "en"

# Articles included in the model prompt
PROMPT_ARTICLE_LIMIT = 15

# Series sampled for the "graphic of the day"
FRED_SERIES_POOL: Dict[str, str] = {
    "UNRATE": "Unemployment Rate (%)",
    "INDPRO": "Industrial Production Index",
    "PAYEMS": "All Employees, Total Nonfarm (thousands)",
    "CES0500000003": "Average Hourly Earnings ($)",
    "AWHAETP": "Average Weekly Hours (hours)",
}
FRED_OBSERVATION_START = "2019-01-01"
FRED_MISSING_VALUE = "."
MAX_SERIES_POINTS = 60

# Headline indicators stored in macro_snapshots
SNAPSHOT_SERIES: Dict[str, str] = {
    "unrate": "UNRATE",               # Unemployment rate, monthly
    "median_income": "MEHOINUSA672N",  # Real median household income, annual
    "gini_index": "SIPOVGINIUSA",      # Gini index, annual
}

# History view: metric key -> (title, higher_is_better)
HISTORY_BASELINE_DATE = "2025-01-01"
REPORT_METRICS: Dict[str, tuple] = {
    "rating": ("Impact Rating", True),
    "prod_labor_score": ("Productivity vs Labor", True),
    "american_dream_score": ("American Dream", True),
}
MACRO_METRICS: Dict[str, tuple] = {
    "unrate": ("Unemployment Rate", False),
    "median_income": ("Median HH Income", True),
    "gini_index": ("Gini Index", False),
}

# Model sampling bounds
MAX_TEMPERATURE = 0.4
TOOLTIP_MAX_CHARS = 120


def _env_flag(name: str, default: bool = True) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class MonitorConfig:
    """Runtime configuration for one process."""

    # Credentials
    news_api_key: str = ""
    gemini_api_key: str = ""
    fred_api_key: str = ""

    # Endpoints
    news_base_url: str = "https://newsapi.org/v2"
    fred_base_url: str = "https://api.stlouisfed.org/fred"

    # Gemini
    gemini_model: str = "gemini-2.5-flash"
    gemini_temperature: float = 0.3
    max_output_tokens: int = 32_768

    # Pipeline
    include_macro_series: bool = True
    request_timeout: float = 30.0

    # Paths
    db_path: Path = field(
        default_factory=lambda: Path(__file__).parent.parent / "storage" / "dream_monitor.db"
    )
    logs_dir: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "MonitorConfig":
        """Build a configuration from environment variables (and .env)."""
        config = cls(
            news_api_key=os.getenv("NEWS_API_KEY", ""),
            gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY", ""),
            fred_api_key=os.getenv("FRED_API_KEY", ""),
            include_macro_series=_env_flag("MONITOR_INCLUDE_MACRO", True),
        )
        if os.getenv("NEWS_API_URL"):
            config.news_base_url = os.environ["NEWS_API_URL"].rstrip("/")
        if os.getenv("FRED_API_URL"):
            config.fred_base_url = os.environ["FRED_API_URL"].rstrip("/")
        if os.getenv("GEMINI_MODEL"):
            config.gemini_model = os.environ["GEMINI_MODEL"]
        if os.getenv("MONITOR_DB_PATH"):
            config.db_path = Path(os.environ["MONITOR_DB_PATH"])
        if os.getenv("MONITOR_LOGS_DIR"):
            config.logs_dir = Path(os.environ["MONITOR_LOGS_DIR"])
        return config

    def missing_keys(self) -> List[str]:
        """Return the environment keys a pipeline run needs but does not have."""
        missing = []
        if not self.news_api_key:
            missing.append("NEWS_API_KEY")
        if not self.gemini_api_key:
            missing.append("GEMINI_API_KEY")
        if self.include_macro_series and not self.fred_api_key:
            missing.append("FRED_API_KEY")
        return missing

    def validate(self) -> None:
        """
        Check that a pipeline run can start.

        Raises:
            ConfigurationError: naming the first missing key, or an
                out-of-bounds sampling setting.
        """
        missing = self.missing_keys()
        if missing:
            raise ConfigurationError(f"{missing[0]} not configured")
        if not 0.0 <= self.gemini_temperature <= MAX_TEMPERATURE:
            raise ConfigurationError(
                f"gemini_temperature must be between 0 and {MAX_TEMPERATURE}"
            )
        if self.max_output_tokens <= 0:
            raise ConfigurationError("max_output_tokens must be positive")
