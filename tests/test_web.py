"""Tests for the dashboard JSON API."""

from datetime import datetime
from unittest.mock import MagicMock

import pytest

from eyerest.core.orchestrator import ReminderContext, ReminderOrchestrator
from eyerest.core.settings import SettingsStore
from eyerest.core.streak import StreakTracker
from eyerest.platform.notifier import NotificationDispatcher
from eyerest.ui.web import create_flask_app
import eyerest.ui.web as web_module


@pytest.fixture
def app_ref(store, scheduler, clock):
    """Minimal stand-in for EyeRestApp: only ``orchestrator`` is used."""
    ref = MagicMock()
    ref.orchestrator = ReminderOrchestrator(
        ReminderContext(
            settings=SettingsStore(store),
            streak_tracker=StreakTracker(
                store, today=lambda: datetime.fromtimestamp(clock.now).date()
            ),
            notifier=MagicMock(spec=NotificationDispatcher),
            scheduler=scheduler,
            store=store,
            clock=clock,
        )
    )
    return ref


def _client_for(app_ref):
    web_module._app_ref = app_ref
    flask_app = create_flask_app()
    flask_app.config["TESTING"] = True
    return flask_app.test_client()


@pytest.fixture
def client(app_ref):
    old = web_module._app_ref
    with _client_for(app_ref) as c:
        yield c
    web_module._app_ref = old


@pytest.fixture
def orch(app_ref):
    return app_ref.orchestrator


# ---------------------------------------------------------------------------
# Page and status
# ---------------------------------------------------------------------------

class TestIndex:
    def test_serves_dashboard(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert b"EyeRest" in resp.data


class TestStatus:
    def test_status_shape(self, client):
        data = client.get("/api/status").get_json()
        assert set(data["timers"]) == {"eye", "posture"}
        assert data["timers"]["eye"]["display"] == "20:00"
        assert data["streak"]["current_streak"] == 0

    def test_not_initialized(self):
        old = web_module._app_ref
        try:
            with _client_for(None) as c:
                assert c.get("/api/status").status_code == 500
        finally:
            web_module._app_ref = old


# ---------------------------------------------------------------------------
# Timer actions
# ---------------------------------------------------------------------------

class TestTimerActions:
    def test_start(self, client, orch):
        resp = client.post("/api/timers/eye/start")
        assert resp.status_code == 200
        assert resp.get_json()["is_running"] is True
        assert orch.timer("eye").is_running is True

    def test_toggle_and_reset(self, client, orch):
        client.post("/api/timers/posture/toggle")
        assert orch.timer("posture").is_running is True
        data = client.post("/api/timers/posture/reset").get_json()
        assert data["is_running"] is False
        assert data["time_left"] == 45 * 60

    def test_pause(self, client, orch):
        client.post("/api/timers/eye/start")
        assert client.post("/api/timers/eye/pause").get_json()["status"] == "paused"

    def test_unknown_kind(self, client):
        assert client.post("/api/timers/neck/start").status_code == 404

    def test_unknown_action(self, client):
        assert client.post("/api/timers/eye/explode").status_code == 404

    def test_get_not_allowed(self, client):
        assert client.get("/api/timers/eye/start").status_code == 405


# ---------------------------------------------------------------------------
# Streak
# ---------------------------------------------------------------------------

class TestStreak:
    def test_get_streak(self, client):
        data = client.get("/api/streak").get_json()
        assert data["weekly_goal"] == 35
        assert len(data["weekly_activity"]) == 7
        assert "message" in data

    def test_update_goals(self, client):
        resp = client.post("/api/streak/goals", json={"weekly_goal": 21})
        assert resp.status_code == 200
        assert resp.get_json()["weekly_goal"] == 21

    def test_invalid_goal(self, client):
        resp = client.post("/api/streak/goals", json={"streak_goal": "lots"})
        assert resp.status_code == 400

    def test_reset_streak(self, client, orch):
        for _ in range(2):
            orch.context.streak_tracker.record_activity("posture")
        data = client.post("/api/streak/reset").get_json()
        assert data["current_streak"] == 0
        assert data["longest_streak"] == 1


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class TestSettings:
    def test_get_settings(self, client):
        data = client.get("/api/settings").get_json()
        assert data["eye_interval"] == 20
        assert data["auto_start"] is True

    def test_save_settings_resets_timer(self, client, orch):
        client.post("/api/timers/eye/start")
        resp = client.post("/api/settings", json={"eye_interval": 10})
        assert resp.status_code == 200
        assert resp.get_json()["eye_interval"] == 10
        assert orch.timer("eye").total_time == 600
        assert orch.timer("eye").is_running is False

    def test_save_invalid_value(self, client):
        resp = client.post("/api/settings", json={"eye_interval": -1})
        assert resp.status_code == 400

    def test_save_unknown_setting(self, client):
        resp = client.post("/api/settings", json={"theme": "dark"})
        assert resp.status_code == 400

    def test_save_non_object(self, client):
        resp = client.post("/api/settings", json=[1, 2])
        assert resp.status_code == 400

    def test_reset_settings(self, client):
        client.post("/api/settings", json={"sound_alerts": True})
        data = client.post("/api/settings/reset").get_json()
        assert data["sound_alerts"] is False


# ---------------------------------------------------------------------------
# History and exercises
# ---------------------------------------------------------------------------

class TestHistory:
    def test_default_week(self, client):
        data = client.get("/api/history").get_json()
        assert len(data["days"]) == 7
        assert data["eye_breaks"] == 0

    def test_custom_days(self, client):
        assert len(client.get("/api/history?days=30").get_json()["days"]) == 30

    @pytest.mark.parametrize("days", ["0", "-2", "abc", "99999999999"])
    def test_invalid_days(self, client, days):
        assert client.get(f"/api/history?days={days}").status_code == 400


class TestExercises:
    def test_eye_exercises(self, client):
        data = client.get("/api/exercises/eye").get_json()
        assert data[0]["id"] == "eye-focus"
        assert all(isinstance(e["steps"], list) for e in data)

    def test_posture_exercises(self, client):
        ids = [e["id"] for e in client.get("/api/exercises/posture").get_json()]
        assert "neck-stretch" in ids

    def test_unknown_kind(self, client):
        assert client.get("/api/exercises/ankle").status_code == 404
