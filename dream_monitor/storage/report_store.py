"""
SQLite Report Store
===================

Holds the history of pipeline outcomes and the macro snapshots charted next
to them.

Tables:
- reports: one row per pipeline run, insert-only, ordered by created_at
- macro_snapshots: headline indicators keyed by snapshot_date

Usage:
    from dream_monitor.storage import ReportStore

    store = ReportStore(Path("storage/dream_monitor.db"))
    latest = store.latest_report()
    history = store.list_reports()
"""

import json
import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..analysis.schema import score_tooltip_columns
from ..errors import StorageError
from ..models import MacroSnapshot, Report, SeriesPoint

logger = logging.getLogger(__name__)

REPORT_COLUMNS = (
    "rating",
    "summary",
    "productivity_insight",
    "american_dream_impact",
    "prod_labor_score",
    "prod_labor_tooltip",
    "american_dream_score",
    "american_dream_tooltip",
    "series_id",
    "series_title",
)


class ReportStore:
    """SQLite-backed persistence for reports and macro snapshots."""

    SCHEMA_VERSION = 1

    def __init__(self, db_path: Path):
        """
        Initialize the store, creating the schema if needed.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    @contextmanager
    def _get_connection(self):
        """Get a database connection with context management."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self):
        """Initialize database schema."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY,
                    created_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS reports (
                    id TEXT PRIMARY KEY,
                    created_at TEXT NOT NULL,
                    rating REAL NOT NULL CHECK (rating >= 1 AND rating <= 10),
                    summary TEXT NOT NULL,
                    productivity_insight TEXT,
                    american_dream_impact TEXT,
                    prod_labor_score REAL CHECK (prod_labor_score IS NULL OR (prod_labor_score >= 0 AND prod_labor_score <= 100)),
                    prod_labor_tooltip TEXT,
                    american_dream_score REAL CHECK (american_dream_score IS NULL OR (american_dream_score >= 0 AND american_dream_score <= 100)),
                    american_dream_tooltip TEXT,
                    series_id TEXT,
                    series_title TEXT,
                    series_data TEXT,
                    CHECK (prod_labor_score IS NULL OR prod_labor_tooltip IS NOT NULL),
                    CHECK (american_dream_score IS NULL OR american_dream_tooltip IS NOT NULL)
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_reports_created_at
                ON reports(created_at)
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS macro_snapshots (
                    snapshot_date TEXT PRIMARY KEY,
                    unrate REAL,
                    median_income REAL,
                    gini_index REAL,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
            """)

            cursor.execute(
                "INSERT OR IGNORE INTO schema_version (version, created_at) VALUES (?, ?)",
                (self.SCHEMA_VERSION, datetime.now(timezone.utc).isoformat()),
            )

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def insert_report(
        self,
        fields: Dict[str, Any],
        series_data: Optional[Sequence[SeriesPoint]] = None,
    ) -> Report:
        """
        Insert one report and return it as stored.

        Args:
            fields: Report columns (rating, summary, optional insight/score
                fields, series_id, series_title). Unknown keys are rejected.
            series_data: Chart points, already cleaned and ordered.

        Raises:
            StorageError: If the insert is rejected or a score lacks its tooltip.
        """
        unknown = set(fields) - set(REPORT_COLUMNS)
        if unknown:
            raise StorageError(f"Unknown report columns: {', '.join(sorted(unknown))}")
        for score, tooltip in score_tooltip_columns():
            if fields.get(score) is not None and not fields.get(tooltip):
                raise StorageError(f"{score} requires {tooltip}")

        report_id = uuid.uuid4().hex
        created_at = datetime.now(timezone.utc).isoformat(timespec="microseconds")

        columns = ["id", "created_at"] + [c for c in REPORT_COLUMNS if c in fields]
        values = [report_id, created_at] + [fields[c] for c in REPORT_COLUMNS if c in fields]
        if series_data is not None:
            columns.append("series_data")
            values.append(json.dumps([p.to_dict() for p in series_data]))

        placeholders = ", ".join("?" for _ in columns)
        sql = f"INSERT INTO reports ({', '.join(columns)}) VALUES ({placeholders})"

        try:
            with self._get_connection() as conn:
                conn.execute(sql, values)
                row = conn.execute("SELECT * FROM reports WHERE id = ?", (report_id,)).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Database error: {e}")
            raise StorageError(str(e)) from e

        return Report.from_row(row)

    def latest_report(self) -> Optional[Report]:
        """Most recent report, or None if the table is empty."""
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM reports ORDER BY created_at DESC, rowid DESC LIMIT 1"
            ).fetchone()
        return Report.from_row(row) if row else None

    def list_reports(self) -> List[Report]:
        """All reports, oldest first."""
        with self._get_connection() as conn:
            rows = conn.execute("SELECT * FROM reports ORDER BY created_at ASC, rowid ASC").fetchall()
        return [Report.from_row(r) for r in rows]

    def count_reports(self) -> int:
        with self._get_connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM reports").fetchone()[0]

    # ------------------------------------------------------------------
    # Macro snapshots
    # ------------------------------------------------------------------

    def record_macro_snapshot(self, snapshot: MacroSnapshot) -> MacroSnapshot:
        """
        Insert or replace the snapshot for `snapshot.snapshot_date`.

        Raises:
            StorageError: If the write is rejected.
        """
        try:
            with self._get_connection() as conn:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO macro_snapshots
                        (snapshot_date, unrate, median_income, gini_index)
                    VALUES (?, ?, ?, ?)
                    """,
                    (
                        snapshot.snapshot_date.isoformat(),
                        snapshot.unrate,
                        snapshot.median_income,
                        snapshot.gini_index,
                    ),
                )
        except sqlite3.Error as e:
            logger.error(f"Database error: {e}")
            raise StorageError(str(e)) from e
        return snapshot

    def list_macro_snapshots(self, since: Optional[date] = None) -> List[MacroSnapshot]:
        """All snapshots ordered by snapshot_date ascending."""
        query = "SELECT * FROM macro_snapshots"
        params: List[Any] = []
        if since is not None:
            query += " WHERE snapshot_date >= ?"
            params.append(since.isoformat())
        query += " ORDER BY snapshot_date ASC"

        with self._get_connection() as conn:
            rows = conn.execute(query, params).fetchall()
        return [MacroSnapshot.from_row(r) for r in rows]
