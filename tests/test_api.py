from datetime import date

import pytest
from fastapi.testclient import TestClient

from dream_monitor.api import CORS_HEADERS, create_app
from dream_monitor.models import MacroSnapshot
from dream_monitor.pipeline import PipelineResult, PipelineStage


class StubPipeline:
    def __init__(self, result):
        self.result = result
        self.runs = 0

    def run(self):
        self.runs += 1
        return self.result


def _client(config, store, result=None):
    stub = StubPipeline(result or PipelineResult(success=False, error="not used"))
    app = create_app(config=config, store=store, pipeline_factory=lambda: stub)
    return TestClient(app), stub


def _assert_cors(response):
    for name, value in CORS_HEADERS.items():
        assert response.headers[name] == value


def test_preflight_has_empty_body_and_cors_headers(config, store):
    client, stub = _client(config, store)

    response = client.options("/analyze")

    assert response.status_code == 200
    assert response.content == b""
    _assert_cors(response)
    assert stub.runs == 0


def test_analyze_success(config, store):
    report = store.insert_report({"rating": 7.0, "summary": "ok"})
    result = PipelineResult(success=True, report=report, articles_analyzed=25, fred_series="Industrial Production Index")
    client, stub = _client(config, store, result)

    response = client.post("/analyze")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["articlesAnalyzed"] == 25
    assert body["fredSeries"] == "Industrial Production Index"
    assert body["report"]["id"] == report.id
    assert stub.runs == 1
    _assert_cors(response)


@pytest.mark.parametrize("result, expected", [
    (
        PipelineResult(success=False, error="AI response parsing failed", details="rating must be a number between 1 and 10, got 11",
                       failed_stage=PipelineStage.VALIDATING),
        {"success": False, "error": "AI response parsing failed", "details": "rating must be a number between 1 and 10, got 11"},
    ),
    (
        PipelineResult(success=False, error="Database insertion failed", details="disk I/O error"),
        {"success": False, "error": "Database insertion failed", "details": "disk I/O error"},
    ),
    (
        PipelineResult(success=False, error="NEWS_API_KEY not configured"),
        {"success": False, "error": "NEWS_API_KEY not configured"},
    ),
])
def test_analyze_failures_are_500(config, store, result, expected):
    client, _ = _client(config, store, result)

    response = client.post("/analyze")

    assert response.status_code == 500
    assert response.json() == expected
    _assert_cors(response)


def test_latest_report_404_when_empty(config, store):
    client, _ = _client(config, store)
    response = client.get("/reports/latest")
    assert response.status_code == 404
    _assert_cors(response)


def test_reports_listing(config, store):
    first = store.insert_report({"rating": 4.0, "summary": "first"})
    second = store.insert_report({"rating": 8.0, "summary": "second"})
    client, _ = _client(config, store)

    assert client.get("/reports/latest").json()["id"] == second.id
    assert [r["id"] for r in client.get("/reports").json()] == [first.id, second.id]


def test_macro_snapshots_and_history(config, store):
    store.record_macro_snapshot(MacroSnapshot(date(2025, 1, 1), unrate=4.0))
    store.record_macro_snapshot(MacroSnapshot(date(2025, 5, 1), unrate=4.2))
    client, _ = _client(config, store)

    snapshots = client.get("/macro-snapshots").json()
    assert [s["snapshot_date"] for s in snapshots] == ["2025-01-01", "2025-05-01"]

    history = client.get("/history").json()
    unrate = next(m for m in history["metrics"] if m["key"] == "unrate")
    assert unrate["delta"] == pytest.approx(0.2)
    assert unrate["direction"] == "regressed"
    assert history["snapshot_count"] == 2


def test_dashboard_renders_html(config, store):
    store.insert_report({
        "rating": 8.4,
        "summary": "Strong gains.",
        "prod_labor_score": 72.0,
        "prod_labor_tooltip": "Pay keeps pace",
        "american_dream_score": 35.0,
        "american_dream_tooltip": "Mobility slipping",
    })
    client, _ = _client(config, store)

    response = client.get("/")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "Transformative Opportunity" in response.text
    assert "score-good" in response.text
    assert "score-poor" in response.text
