"""SQLite-backed persistence for EyeRest.

Two concerns share one database file:
- a JSON key/value table holding timer snapshots, streak data, the
  seven-day activity window and user settings;
- the history of completed timer sessions.
"""

import json
import sqlite3
from datetime import date, datetime, timedelta
from typing import Any, Optional

from eyerest.core.models import DailyStats, TimerKind, TimerSession


class WellnessStore:
    """Read/write interface to the local SQLite database.

    Key/value entries are stored as JSON text.  Session timestamps are
    persisted as ISO 8601 text so that round-trip fidelity is preserved.
    Errors propagate; callers decide whether to log or fall back.
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None

    # ------------------------------------------------------------------
    # Connection helpers
    # ------------------------------------------------------------------

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # ------------------------------------------------------------------
    # Schema initialisation
    # ------------------------------------------------------------------

    def init_db(self) -> None:
        """Create tables and indexes if they don't already exist."""
        conn = self._get_conn()
        conn.executescript(
            """\
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS timer_sessions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timer_type TEXT NOT NULL,
                duration_seconds INTEGER NOT NULL,
                completed INTEGER NOT NULL DEFAULT 0,
                started_at TEXT NOT NULL,
                completed_at TEXT
            );

            CREATE INDEX IF NOT EXISTS idx_session_started
                ON timer_sessions(started_at);
            """
        )
        conn.commit()

    # ------------------------------------------------------------------
    # Key/value operations
    # ------------------------------------------------------------------

    def get(self, key: str) -> Optional[Any]:
        """Return the JSON value stored under *key*, or ``None``.

        Raises ``json.JSONDecodeError`` if the stored text is corrupt.
        """
        row = self._get_conn().execute(
            "SELECT value FROM kv_store WHERE key = ?", (key,)
        ).fetchone()
        if row is None:
            return None
        return json.loads(row["value"])

    def set(self, key: str, value: Any) -> None:
        """Store *value* (anything ``json.dumps`` accepts) under *key*."""
        payload = json.dumps(value, ensure_ascii=False)
        conn = self._get_conn()
        conn.execute(
            """\
            INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                           updated_at = excluded.updated_at
            """,
            (key, payload, datetime.now().isoformat()),
        )
        conn.commit()

    def delete(self, key: str) -> None:
        conn = self._get_conn()
        conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        conn.commit()

    def keys(self) -> list[str]:
        rows = self._get_conn().execute("SELECT key FROM kv_store ORDER BY key").fetchall()
        return [r["key"] for r in rows]

    # ------------------------------------------------------------------
    # Timer session history
    # ------------------------------------------------------------------

    def save_timer_session(self, session: TimerSession) -> int:
        """Persist a timer session. Returns the row id."""
        conn = self._get_conn()
        cursor = conn.execute(
            """\
            INSERT INTO timer_sessions
                (timer_type, duration_seconds, completed, started_at, completed_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                session.timer_type.value,
                session.duration_seconds,
                1 if session.completed else 0,
                session.started_at.isoformat(),
                session.completed_at.isoformat() if session.completed_at else None,
            ),
        )
        conn.commit()
        return cursor.lastrowid  # type: ignore[return-value]

    def get_timer_sessions(self, start: datetime, end: datetime) -> list[TimerSession]:
        """Return all sessions whose started_at falls in [start, end)."""
        rows = self._get_conn().execute(
            """\
            SELECT * FROM timer_sessions
            WHERE started_at >= ? AND started_at < ?
            ORDER BY started_at
            """,
            (start.isoformat(), end.isoformat()),
        ).fetchall()
        return [self._row_to_session(r) for r in rows]

    def get_recent_sessions(self, limit: int = 50) -> list[TimerSession]:
        """Return the *limit* most recent sessions, newest first."""
        rows = self._get_conn().execute(
            "SELECT * FROM timer_sessions ORDER BY started_at DESC, id DESC LIMIT ?",
            (limit,),
        ).fetchall()
        return [self._row_to_session(r) for r in rows]

    def get_daily_totals(self, start_date: date, end_date: date) -> list[DailyStats]:
        """Completed-session totals for every day in [start_date, end_date].

        Days without sessions are included with zero counts.
        """
        if end_date < start_date:
            return []
        start = datetime.combine(start_date, datetime.min.time())
        end = datetime.combine(end_date + timedelta(days=1), datetime.min.time())
        rows = self._get_conn().execute(
            """\
            SELECT substr(started_at, 1, 10) AS day, timer_type,
                   COUNT(*) AS count, SUM(duration_seconds) AS seconds
            FROM timer_sessions
            WHERE completed = 1 AND started_at >= ? AND started_at < ?
            GROUP BY day, timer_type
            """,
            (start.isoformat(), end.isoformat()),
        ).fetchall()

        days = {
            start_date + timedelta(days=i): DailyStats(date=start_date + timedelta(days=i))
            for i in range((end_date - start_date).days + 1)
        }
        for r in rows:
            stats = days.get(date.fromisoformat(r["day"]))
            if stats is None:
                continue
            if r["timer_type"] == TimerKind.EYE.value:
                stats.eye_breaks += r["count"]
            else:
                stats.posture_checks += r["count"]
            stats.focus_seconds += r["seconds"] or 0
        return [days[d] for d in sorted(days)]

    # ------------------------------------------------------------------
    # Row mapping helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_session(row: sqlite3.Row) -> TimerSession:
        return TimerSession(
            id=row["id"],
            timer_type=TimerKind(row["timer_type"]),
            duration_seconds=row["duration_seconds"],
            completed=bool(row["completed"]),
            started_at=datetime.fromisoformat(row["started_at"]),
            completed_at=datetime.fromisoformat(row["completed_at"]) if row["completed_at"] else None,
        )
