"""Unit tests for WellnessStore."""

import json

import pytest
from datetime import date, datetime, timedelta

from eyerest.core.models import TimerKind, TimerSession
from eyerest.persistence.store import WellnessStore


# ------------------------------------------------------------------
# Schema / init_db
# ------------------------------------------------------------------

def test_init_db_creates_tables(store: WellnessStore):
    conn = store._get_conn()
    tables = {
        r[0]
        for r in conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table'"
        ).fetchall()
    }
    assert "kv_store" in tables
    assert "timer_sessions" in tables


def test_init_db_creates_indexes(store: WellnessStore):
    conn = store._get_conn()
    indexes = {
        r[0]
        for r in conn.execute(
            "SELECT name FROM sqlite_master WHERE type='index'"
        ).fetchall()
    }
    assert "idx_session_started" in indexes


def test_init_db_idempotent(store: WellnessStore):
    """Calling init_db twice should not raise."""
    store.init_db()


def test_file_backed_store_survives_reopen(tmp_path):
    path = str(tmp_path / "eyerest.db")
    first = WellnessStore(path)
    first.init_db()
    first.set("eyerest-settings", {"eye_interval": 25})
    first.close()

    second = WellnessStore(path)
    second.init_db()
    assert second.get("eyerest-settings") == {"eye_interval": 25}
    second.close()


# ------------------------------------------------------------------
# Key/value operations
# ------------------------------------------------------------------

def test_get_missing_key(store: WellnessStore):
    assert store.get("nope") is None


def test_set_and_get_object(store: WellnessStore):
    value = {"time_left": 70, "total_time": 100, "is_running": True, "last_saved": 1}
    store.set("eyerest-eye-timer", value)
    assert store.get("eyerest-eye-timer") == value


def test_set_and_get_list(store: WellnessStore):
    store.set("eyerest-daily-activity", [{"date": "2025-01-06", "eye_breaks": 2}])
    assert store.get("eyerest-daily-activity")[0]["eye_breaks"] == 2


def test_set_overwrites(store: WellnessStore):
    store.set("k", 1)
    store.set("k", 2)
    assert store.get("k") == 2
    assert store.keys() == ["k"]


def test_unicode_round_trip(store: WellnessStore):
    store.set("k", {"message": "You're on fire! 🔥"})
    assert store.get("k")["message"].endswith("🔥")


def test_delete(store: WellnessStore):
    store.set("k", 1)
    store.delete("k")
    assert store.get("k") is None
    store.delete("k")  # missing key is fine


def test_keys_sorted(store: WellnessStore):
    store.set("b", 1)
    store.set("a", 1)
    assert store.keys() == ["a", "b"]


def test_corrupt_value_raises(store: WellnessStore):
    conn = store._get_conn()
    conn.execute(
        "INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)",
        ("broken", "{not json", datetime.now().isoformat()),
    )
    conn.commit()
    with pytest.raises(json.JSONDecodeError):
        store.get("broken")


# ------------------------------------------------------------------
# Timer sessions
# ------------------------------------------------------------------

def _make_session(**overrides) -> TimerSession:
    started = datetime(2025, 1, 15, 10, 0, 0)
    defaults = dict(
        id=0,
        timer_type=TimerKind.EYE,
        duration_seconds=1200,
        completed=True,
        started_at=started,
        completed_at=started + timedelta(seconds=1200),
    )
    defaults.update(overrides)
    return TimerSession(**defaults)


def test_save_session_returns_id(store: WellnessStore):
    first = store.save_timer_session(_make_session())
    second = store.save_timer_session(_make_session())
    assert second == first + 1


def test_session_round_trip(store: WellnessStore):
    original = _make_session(timer_type=TimerKind.POSTURE, duration_seconds=2700)
    row_id = store.save_timer_session(original)
    (loaded,) = store.get_timer_sessions(datetime(2025, 1, 15), datetime(2025, 1, 16))
    assert loaded.id == row_id
    assert loaded.timer_type is TimerKind.POSTURE
    assert loaded.duration_seconds == 2700
    assert loaded.completed is True
    assert loaded.started_at == original.started_at
    assert loaded.completed_at == original.completed_at


def test_session_without_completion(store: WellnessStore):
    store.save_timer_session(_make_session(completed=False, completed_at=None))
    (loaded,) = store.get_recent_sessions()
    assert loaded.completed is False
    assert loaded.completed_at is None


def test_get_timer_sessions_filters_by_range(store: WellnessStore):
    for day in (14, 15, 16):
        store.save_timer_session(_make_session(started_at=datetime(2025, 1, day, 9, 0)))
    result = store.get_timer_sessions(datetime(2025, 1, 15), datetime(2025, 1, 16))
    assert [s.started_at.day for s in result] == [15]


def test_get_recent_sessions_newest_first(store: WellnessStore):
    for hour in (9, 11, 10):
        store.save_timer_session(_make_session(started_at=datetime(2025, 1, 15, hour, 0)))
    recent = store.get_recent_sessions(limit=2)
    assert [s.started_at.hour for s in recent] == [11, 10]


# ------------------------------------------------------------------
# Daily totals
# ------------------------------------------------------------------

def test_daily_totals_zero_filled(store: WellnessStore):
    totals = store.get_daily_totals(date(2025, 1, 13), date(2025, 1, 19))
    assert [d.date for d in totals] == [date(2025, 1, 13) + timedelta(days=i) for i in range(7)]
    assert all(d.total == 0 for d in totals)


def test_daily_totals_counts_completed_only(store: WellnessStore):
    store.save_timer_session(_make_session())
    store.save_timer_session(_make_session(started_at=datetime(2025, 1, 15, 11, 0)))
    store.save_timer_session(_make_session(timer_type=TimerKind.POSTURE, duration_seconds=2700))
    store.save_timer_session(_make_session(completed=False))

    (day,) = store.get_daily_totals(date(2025, 1, 15), date(2025, 1, 15))
    assert day.eye_breaks == 2
    assert day.posture_checks == 1
    assert day.focus_seconds == 1200 + 1200 + 2700


def test_daily_totals_ignores_outside_range(store: WellnessStore):
    store.save_timer_session(_make_session(started_at=datetime(2025, 1, 20, 9, 0)))
    totals = store.get_daily_totals(date(2025, 1, 13), date(2025, 1, 19))
    assert sum(d.total for d in totals) == 0


def test_daily_totals_reversed_range(store: WellnessStore):
    assert store.get_daily_totals(date(2025, 1, 19), date(2025, 1, 13)) == []
