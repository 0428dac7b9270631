import json
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest

from dream_monitor.config import MonitorConfig
from dream_monitor.storage.report_store import ReportStore


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    """Routes GETs by URL substring to canned responses and records calls."""

    def __init__(self, routes: Optional[Dict[str, FakeResponse]] = None):
        self.routes = routes or {}
        self.calls: List[SimpleNamespace] = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append(SimpleNamespace(url=url, params=params or {}, headers=headers or {}, timeout=timeout))
        for fragment, response in self.routes.items():
            if fragment in url:
                return response
        raise AssertionError(f"unexpected request to {url}")


class FakeGemini:
    """Stands in for genai.GenerativeModel."""

    def __init__(self, text: str = ""):
        self.text = text
        self.prompts: List[str] = []

    def generate_content(self, prompt, generation_config=None):
        self.prompts.append(prompt)
        return SimpleNamespace(text=self.text)


def make_articles(n: int) -> List[Dict[str, Any]]:
    return [
        {
            "title": f"Article {i}",
            "description": f"Description {i}" if i % 3 else None,
            "url": f"https://news.example.com/{i}",
            "publishedAt": f"2025-03-{(i % 28) + 1:02d}T12:00:00Z",
            "source": {"name": "Example Wire"},
        }
        for i in range(1, n + 1)
    ]


def make_observations(n: int, missing_every: int = 0, start_year: int = 2019) -> List[Dict[str, str]]:
    obs = []
    for i in range(n):
        year = start_year + i // 12
        month = i % 12 + 1
        value = "." if missing_every and i % missing_every == 0 else f"{3.5 + i * 0.01:.2f}"
        obs.append({"date": f"{year}-{month:02d}-01", "value": value})
    return obs


def v3_payload(**overrides) -> Dict[str, Any]:
    payload = {
        "rating": 7.2,
        "summary": "AI adoption is lifting productivity while wage growth lags.",
        "prod_labor_score": 45,
        "prod_labor_tip": "Output per hour rises faster than pay.",
        "american_dream_score": 58,
        "american_dream_tooltip": "Mobility holds but entry-level paths narrow.",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def store(tmp_path):
    return ReportStore(tmp_path / "monitor.db")


@pytest.fixture
def config(tmp_path):
    return MonitorConfig(
        news_api_key="news-key",
        gemini_api_key="gemini-key",
        fred_api_key="fred-key",
        db_path=tmp_path / "monitor.db",
    )


@pytest.fixture
def v3_text():
    return json.dumps(v3_payload())
