import pytest

from conftest import FakeResponse, FakeSession, make_observations
from dream_monitor.data.fred_loader import FREDLoader, clean_observations
from dream_monitor.errors import UpstreamError


def _loader(session, chooser=None):
    return FREDLoader(api_key="fred-key", session=session, chooser=chooser)


def test_clean_observations_drops_missing_sentinel():
    raw = [
        {"date": "2024-01-01", "value": "3.7"},
        {"date": "2024-02-01", "value": "."},
        {"date": "2024-03-01", "value": "3.9"},
    ]
    points = clean_observations(raw)
    assert [p.date for p in points] == ["2024-01-01", "2024-03-01"]
    assert [p.value for p in points] == [3.7, 3.9]


def test_clean_observations_drops_unparseable_and_non_finite():
    raw = [
        {"date": "2024-01-01", "value": "abc"},
        {"date": "2024-02-01", "value": "nan"},
        {"date": "2024-03-01", "value": None},
        {"date": "2024-04-01", "value": "4.0"},
    ]
    assert [p.value for p in clean_observations(raw)] == [4.0]


def test_clean_observations_keeps_newest_points_ascending():
    raw = list(reversed(make_observations(80)))
    points = clean_observations(raw, max_points=60)
    assert len(points) == 60
    dates = [p.date for p in points]
    assert dates == sorted(dates)
    assert dates[-1] == make_observations(80)[-1]["date"]
    assert dates[0] == make_observations(80)[20]["date"]


def test_clean_observations_all_missing_is_empty():
    raw = [{"date": "2024-01-01", "value": "."}] * 5
    assert clean_observations(raw) == []


def test_fetch_series_request_and_cleaning():
    observations = make_observations(80, missing_every=16)
    session = FakeSession({"series/observations": FakeResponse(200, {"observations": observations})})

    series = _loader(session).fetch_series("UNRATE")

    assert series.series_id == "UNRATE"
    assert series.title == "Unemployment Rate (%)"
    assert len(series.points) == 60
    assert all(p.value is not None for p in series.points)

    call = session.calls[0]
    assert call.url == "https://api.stlouisfed.org/fred/series/observations"
    assert call.params["series_id"] == "UNRATE"
    assert call.params["api_key"] == "fred-key"
    assert call.params["file_type"] == "json"
    assert call.params["observation_start"] == "2019-01-01"


def test_fetch_random_series_uses_chooser():
    session = FakeSession({"series/observations": FakeResponse(200, {"observations": make_observations(5)})})
    seen = []

    def chooser(options):
        seen.extend(options)
        return "PAYEMS"

    series = _loader(session, chooser=chooser).fetch_random_series()

    assert series.series_id == "PAYEMS"
    assert "UNRATE" in seen and "PAYEMS" in seen
    assert session.calls[0].params["series_id"] == "PAYEMS"


def test_chooser_returning_unknown_series_is_rejected():
    loader = _loader(FakeSession(), chooser=lambda options: "NOPE")
    with pytest.raises(ValueError):
        loader.choose_series()


def test_http_failure_raises_upstream_error():
    session = FakeSession({"series/observations": FakeResponse(500, {})})
    with pytest.raises(UpstreamError) as excinfo:
        _loader(session).fetch_series("UNRATE")
    assert str(excinfo.value) == "FRED API error: 500"
    assert excinfo.value.status_code == 500


def test_empty_observations_are_not_fatal():
    session = FakeSession({"series/observations": FakeResponse(200, {"observations": []})})
    series = _loader(session).fetch_series("INDPRO")
    assert series.is_empty
    assert series.title == "Industrial Production Index"


def test_fetch_latest_value_skips_missing():
    observations = [
        {"date": "2025-06-01", "value": "."},
        {"date": "2025-05-01", "value": "4.2"},
        {"date": "2025-04-01", "value": "4.1"},
    ]
    session = FakeSession({"series/observations": FakeResponse(200, {"observations": observations})})

    assert _loader(session).fetch_latest_value("UNRATE") == 4.2
    assert session.calls[0].params["sort_order"] == "desc"
