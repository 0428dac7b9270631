from pathlib import Path

import pytest

from dream_monitor.config import MonitorConfig
from dream_monitor.errors import ConfigurationError

ENV_KEYS = [
    "NEWS_API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY", "FRED_API_KEY",
    "NEWS_API_URL", "FRED_API_URL", "GEMINI_MODEL",
    "MONITOR_DB_PATH", "MONITOR_LOGS_DIR", "MONITOR_INCLUDE_MACRO",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_from_env_reads_keys_and_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("NEWS_API_KEY", "n")
    monkeypatch.setenv("GOOGLE_API_KEY", "g")
    monkeypatch.setenv("FRED_API_KEY", "f")
    monkeypatch.setenv("FRED_API_URL", "http://localhost:8081/fred/")
    monkeypatch.setenv("MONITOR_DB_PATH", str(tmp_path / "x.db"))
    monkeypatch.setenv("MONITOR_INCLUDE_MACRO", "false")

    config = MonitorConfig.from_env()

    assert config.news_api_key == "n"
    assert config.gemini_api_key == "g"
    assert config.fred_base_url == "http://localhost:8081/fred"
    assert config.news_base_url == "https://newsapi.org/v2"
    assert config.db_path == Path(tmp_path / "x.db")
    assert config.include_macro_series is False
    assert config.logs_dir is None


def test_gemini_key_preferred_over_google_key(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "primary")
    monkeypatch.setenv("GOOGLE_API_KEY", "fallback")
    assert MonitorConfig.from_env().gemini_api_key == "primary"


def test_validate_names_first_missing_key():
    config = MonitorConfig(gemini_api_key="g")
    assert config.missing_keys() == ["NEWS_API_KEY", "FRED_API_KEY"]
    with pytest.raises(ConfigurationError, match="NEWS_API_KEY not configured"):
        config.validate()


def test_fred_key_optional_without_macro():
    config = MonitorConfig(news_api_key="n", gemini_api_key="g", include_macro_series=False)
    config.validate()


def test_temperature_bound():
    config = MonitorConfig(news_api_key="n", gemini_api_key="g", fred_api_key="f", gemini_temperature=0.9)
    with pytest.raises(ConfigurationError, match="gemini_temperature"):
        config.validate()
