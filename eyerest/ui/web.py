"""Web-based dashboard for EyeRest.

A lightweight Flask app serving a single-page dashboard with:
- Eye and posture timer cards (start / pause / reset)
- Streak and weekly goal progress
- Break history
- Settings editor
"""

import logging
import threading
from typing import Any, Optional

from flask import Flask, jsonify, render_template_string, request

from eyerest.core.exercises import get_exercises
from eyerest.core.models import TimerKind

logger = logging.getLogger(__name__)

# Will be set by start_dashboard()
_app_ref = None  # type: Optional[Any]  # EyeRestApp

_TIMER_ACTIONS = ("start", "pause", "toggle", "reset")


def create_flask_app() -> Flask:
    app = Flask(__name__)
    app.config["SEND_FILE_MAX_AGE_DEFAULT"] = 0

    def _orchestrator():
        if _app_ref is None:
            return None
        return getattr(_app_ref, "orchestrator", None)

    @app.route("/")
    def index():
        return render_template_string(DASHBOARD_HTML)

    @app.route("/api/status")
    def api_status():
        orch = _orchestrator()
        if orch is None:
            return jsonify({"error": "not initialized"}), 500
        return jsonify({"timers": orch.status(), "streak": orch.streak_summary()})

    @app.route("/api/timers/<kind>/<action>", methods=["POST"])
    def api_timer_action(kind, action):
        orch = _orchestrator()
        if orch is None:
            return jsonify({"error": "not ready"}), 500
        try:
            timer_kind = TimerKind.parse(kind)
        except ValueError:
            return jsonify({"error": f"unknown timer {kind!r}"}), 404
        if action not in _TIMER_ACTIONS:
            return jsonify({"error": f"unknown action {action!r}"}), 404
        getattr(orch, f"{action}_timer")(timer_kind)
        return jsonify(orch.status()[timer_kind.value])

    @app.route("/api/streak")
    def api_streak():
        orch = _orchestrator()
        if orch is None:
            return jsonify({"error": "not ready"}), 500
        return jsonify(orch.streak_summary())

    @app.route("/api/streak/reset", methods=["POST"])
    def api_reset_streak():
        orch = _orchestrator()
        if orch is None:
            return jsonify({"error": "not ready"}), 500
        orch.reset_streak()
        return jsonify(orch.streak_summary())

    @app.route("/api/streak/goals", methods=["POST"])
    def api_streak_goals():
        orch = _orchestrator()
        if orch is None:
            return jsonify({"error": "not ready"}), 500
        data = request.get_json(silent=True) or {}
        try:
            orch.update_goals(
                weekly_goal=data.get("weekly_goal"),
                streak_goal=data.get("streak_goal"),
            )
        except ValueError as exc:
            return jsonify({"error": str(exc)}), 400
        return jsonify(orch.streak_summary())

    @app.route("/api/settings")
    def api_get_settings():
        orch = _orchestrator()
        if orch is None:
            return jsonify({"error": "not ready"}), 500
        return jsonify(orch.context.settings.settings.to_dict())

    @app.route("/api/settings", methods=["POST"])
    def api_save_settings():
        orch = _orchestrator()
        if orch is None:
            return jsonify({"error": "not ready"}), 500
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({"error": "invalid"}), 400
        try:
            updated = orch.update_settings(**data)
        except ValueError as exc:
            return jsonify({"error": str(exc)}), 400
        return jsonify(updated.to_dict())

    @app.route("/api/settings/reset", methods=["POST"])
    def api_reset_settings():
        orch = _orchestrator()
        if orch is None:
            return jsonify({"error": "not ready"}), 500
        return jsonify(orch.reset_settings().to_dict())

    @app.route("/api/history")
    def api_history():
        orch = _orchestrator()
        if orch is None:
            return jsonify({"error": "not ready"}), 500
        try:
            days = int(request.args.get("days", 7))
            history = orch.history(days)
        except (ValueError, OverflowError) as exc:
            return jsonify({"error": str(exc)}), 400
        return jsonify({
            "start": str(history.start_date),
            "end": str(history.end_date),
            "days": [
                {
                    "date": str(d.date),
                    "eye_breaks": d.eye_breaks,
                    "posture_checks": d.posture_checks,
                    "focus_seconds": d.focus_seconds,
                }
                for d in history.days
            ],
            "eye_breaks": history.eye_breaks,
            "posture_checks": history.posture_checks,
            "focus_seconds": history.focus_seconds,
        })

    @app.route("/api/exercises/<kind>")
    def api_exercises(kind):
        try:
            exercises = get_exercises(kind)
        except ValueError:
            return jsonify({"error": f"unknown timer {kind!r}"}), 404
        return jsonify([
            {
                "id": e.id,
                "title": e.title,
                "duration_seconds": e.duration_seconds,
                "steps": list(e.steps),
                "description": e.description,
            }
            for e in exercises
        ])

    return app


def start_dashboard(app_ref, port: int = 5555) -> threading.Thread:
    """Start the Flask dashboard in a daemon thread."""
    global _app_ref
    _app_ref = app_ref
    flask_app = create_flask_app()

    def _run():
        flask_app.run(host="127.0.0.1", port=port, debug=False, use_reloader=False)

    t = threading.Thread(target=_run, daemon=True, name="eyerest-web")
    t.start()
    logger.info("Dashboard started at http://127.0.0.1:%d", port)
    return t


DASHBOARD_HTML = r"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>EyeRest</title>
<style>
  :root { --bg: #f8f9fa; --card: #fff; --eye: #2563eb; --posture: #16a34a;
          --text: #333; --muted: #888; --border: #e5e5e5; }
  * { margin: 0; padding: 0; box-sizing: border-box; }
  body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif;
         background: var(--bg); color: var(--text); line-height: 1.5; }
  .container { max-width: 900px; margin: 0 auto; padding: 20px; }
  h1 { font-size: 1.4em; font-weight: 600; margin-bottom: 20px; }
  .grid { display: grid; grid-template-columns: 1fr 1fr; gap: 16px; }
  .card { background: var(--card); border-radius: 10px; padding: 20px; margin-bottom: 16px;
          box-shadow: 0 1px 3px rgba(0,0,0,0.06); }
  .card h2 { font-weight: 600; margin-bottom: 12px; color: var(--muted); text-transform: uppercase;
             letter-spacing: 0.5px; font-size: 0.75em; }
  .time { font-size: 2.6em; font-weight: 300; font-variant-numeric: tabular-nums; }
  .bar { height: 6px; background: var(--border); border-radius: 3px; margin: 10px 0; }
  .bar > div { height: 100%; border-radius: 3px; }
  button { cursor: pointer; padding: 6px 14px; border-radius: 6px; border: 1px solid var(--border);
           background: var(--card); font-size: 0.85em; margin-right: 6px; }
  table { width: 100%; border-collapse: collapse; font-size: 0.9em; }
  td, th { padding: 4px 6px; text-align: right; border-bottom: 1px solid var(--border); }
  td:first-child, th:first-child { text-align: left; }
  label { display: block; margin: 6px 0; font-size: 0.9em; }
  .muted { color: var(--muted); font-size: 0.85em; }
</style>
</head>
<body>
<div class="container">
  <h1>EyeRest</h1>
  <div class="grid">
    <div class="card" id="card-eye">
      <h2>Eye Rest Timer &middot; 20-20-20 Rule</h2>
      <div class="time" id="eye-time">--:--</div>
      <div class="bar"><div id="eye-bar" style="background:var(--eye);width:0"></div></div>
      <div class="muted" id="eye-next"></div>
      <p style="margin-top:10px">
        <button onclick="timerAction('eye','toggle')" id="eye-toggle">Start</button>
        <button onclick="timerAction('eye','reset')">Reset</button>
      </p>
    </div>
    <div class="card" id="card-posture">
      <h2>Posture Timer &middot; Stretch &amp; Align</h2>
      <div class="time" id="posture-time">--:--</div>
      <div class="bar"><div id="posture-bar" style="background:var(--posture);width:0"></div></div>
      <div class="muted" id="posture-next"></div>
      <p style="margin-top:10px">
        <button onclick="timerAction('posture','toggle')" id="posture-toggle">Start</button>
        <button onclick="timerAction('posture','reset')">Reset</button>
      </p>
    </div>
  </div>

  <div class="card">
    <h2>Streak</h2>
    <div id="streak-message"></div>
    <div class="muted" id="streak-detail"></div>
    <div class="bar"><div id="week-bar" style="background:#d97706;width:0"></div></div>
    <table id="week-table"></table>
    <p style="margin-top:10px"><button onclick="resetStreak()">Reset streak</button></p>
  </div>

  <div class="card">
    <h2>Settings</h2>
    <label>Eye interval (minutes) <input type="number" min="1" id="s-eye_interval"></label>
    <label>Posture interval (minutes) <input type="number" min="1" id="s-posture_interval"></label>
    <label><input type="checkbox" id="s-eye_notifications"> Eye notifications</label>
    <label><input type="checkbox" id="s-posture_notifications"> Posture notifications</label>
    <label><input type="checkbox" id="s-sound_alerts"> Sound alerts</label>
    <label><input type="checkbox" id="s-auto_start"> Restart timers automatically</label>
    <p style="margin-top:10px"><button onclick="saveSettings()">Save</button>
       <span class="muted" id="settings-msg"></span></p>
  </div>
</div>
<script>
const NUMERIC = ['eye_interval', 'posture_interval'];
const TOGGLES = ['eye_notifications', 'posture_notifications', 'sound_alerts', 'auto_start'];

async function fetchJSON(url, opts) {
  const r = await fetch(url, opts);
  return r.json();
}

function renderTimer(kind, t) {
  document.getElementById(kind + '-time').textContent = t.display;
  document.getElementById(kind + '-bar').style.width = t.progress + '%';
  document.getElementById(kind + '-toggle').textContent = t.is_running ? 'Pause' : 'Start';
  document.getElementById(kind + '-next').textContent =
    t.next_break ? 'Next break at ' + t.next_break : t.status;
}

function renderStreak(s) {
  document.getElementById('streak-message').textContent = s.message;
  document.getElementById('streak-detail').textContent =
    'Current ' + s.current_streak + ' / longest ' + s.longest_streak +
    ' days. This week ' + s.completed_this_week + ' of ' + s.weekly_goal + ' breaks.';
  document.getElementById('week-bar').style.width = s.weekly_progress + '%';
  let html = '<tr><th>Date</th><th>Eye</th><th>Posture</th><th>Goal</th></tr>';
  for (const d of s.weekly_activity) {
    html += '<tr><td>' + d.date + '</td><td>' + d.eye_breaks + '</td><td>' +
            d.posture_checks + '</td><td>' + (d.completed ? '&#10003;' : '') + '</td></tr>';
  }
  document.getElementById('week-table').innerHTML = html;
}

async function refreshStatus() {
  const data = await fetchJSON('/api/status');
  if (data.error) return;
  renderTimer('eye', data.timers.eye);
  renderTimer('posture', data.timers.posture);
  renderStreak(data.streak);
}

async function timerAction(kind, action) {
  const t = await fetchJSON('/api/timers/' + kind + '/' + action, {method: 'POST'});
  if (!t.error) renderTimer(kind, t);
}

async function resetStreak() {
  if (!confirm('Reset your current streak? Your longest streak is kept.')) return;
  renderStreak(await fetchJSON('/api/streak/reset', {method: 'POST'}));
}

async function loadSettings() {
  const s = await fetchJSON('/api/settings');
  for (const k of NUMERIC) document.getElementById('s-' + k).value = s[k];
  for (const k of TOGGLES) document.getElementById('s-' + k).checked = s[k];
}

async function saveSettings() {
  const body = {};
  for (const k of NUMERIC) body[k] = parseInt(document.getElementById('s-' + k).value, 10);
  for (const k of TOGGLES) body[k] = document.getElementById('s-' + k).checked;
  const r = await fetchJSON('/api/settings', {method: 'POST',
    headers: {'Content-Type': 'application/json'}, body: JSON.stringify(body)});
  document.getElementById('settings-msg').textContent = r.error ? r.error : 'Saved';
  refreshStatus();
}

setInterval(refreshStatus, 1000);
refreshStatus(); loadSettings();
</script>
</body>
</html>"""
