import sqlite3
from datetime import date

import pytest

from dream_monitor.errors import StorageError
from dream_monitor.models import MacroSnapshot, SeriesPoint
from dream_monitor.storage.report_store import ReportStore


def _fields(**overrides):
    fields = {
        "rating": 6.5,
        "summary": "Mixed picture.",
        "prod_labor_score": 40.0,
        "prod_labor_tooltip": "Wages trail output.",
        "american_dream_score": 55.0,
        "american_dream_tooltip": "Mobility steady.",
    }
    fields.update(overrides)
    return fields


def test_insert_and_read_back(store):
    points = [SeriesPoint("2025-01-01", 4.0), SeriesPoint("2025-02-01", 4.1)]
    report = store.insert_report(_fields(series_id="UNRATE", series_title="Unemployment Rate (%)"), points)

    assert len(report.id) == 32
    assert report.created_at.tzinfo is not None
    assert report.series_data == points

    latest = store.latest_report()
    assert latest == report


def test_latest_report_empty_store(store):
    assert store.latest_report() is None
    assert store.list_reports() == []
    assert store.count_reports() == 0


def test_list_reports_ascending(store):
    first = store.insert_report(_fields(rating=3))
    second = store.insert_report(_fields(rating=9))

    reports = store.list_reports()

    assert [r.id for r in reports] == [first.id, second.id]
    assert store.latest_report().id == second.id


def test_older_rows_read_back_with_missing_fields(store):
    report = store.insert_report({"rating": 5.0, "summary": "V1 era report."})
    assert report.prod_labor_score is None
    assert report.american_dream_tooltip is None
    assert report.series_data is None


def test_check_constraint_rejects_bad_rating(store):
    with pytest.raises(StorageError):
        store.insert_report(_fields(rating=42))
    assert store.count_reports() == 0


@pytest.mark.parametrize("score, tooltip", [
    ("prod_labor_score", "prod_labor_tooltip"),
    ("american_dream_score", "american_dream_tooltip"),
])
def test_score_without_tooltip_rejected(store, score, tooltip):
    fields = _fields()
    del fields[tooltip]
    with pytest.raises(StorageError, match=f"{score} requires {tooltip}"):
        store.insert_report(fields)

    with pytest.raises(StorageError):
        store.insert_report(_fields(**{tooltip: ""}))
    assert store.count_reports() == 0


def test_table_enforces_score_tooltip_pairing(store):
    with pytest.raises(sqlite3.IntegrityError):
        with store._get_connection() as conn:
            conn.execute(
                "INSERT INTO reports (id, created_at, rating, summary, american_dream_score) "
                "VALUES ('x', '2025-01-01T00:00:00+00:00', 5, 's', 50)"
            )
    assert store.count_reports() == 0


def test_unknown_column_rejected(store):
    with pytest.raises(StorageError, match="prod_labor_tip"):
        store.insert_report(_fields(prod_labor_tip="wrong column name"))


def test_schema_survives_reopen(tmp_path):
    path = tmp_path / "nested" / "monitor.db"
    ReportStore(path).insert_report(_fields())
    assert ReportStore(path).count_reports() == 1


def test_macro_snapshots_upsert_and_order(store):
    store.record_macro_snapshot(MacroSnapshot(date(2025, 3, 1), unrate=4.2, median_income=80610, gini_index=41.8))
    store.record_macro_snapshot(MacroSnapshot(date(2024, 12, 1), unrate=4.1))
    store.record_macro_snapshot(MacroSnapshot(date(2025, 3, 1), unrate=4.3, median_income=80610, gini_index=41.8))

    snapshots = store.list_macro_snapshots()

    assert [s.snapshot_date for s in snapshots] == [date(2024, 12, 1), date(2025, 3, 1)]
    assert snapshots[1].unrate == 4.3
    assert snapshots[0].median_income is None
    assert [s.snapshot_date for s in store.list_macro_snapshots(since=date(2025, 1, 1))] == [date(2025, 3, 1)]
