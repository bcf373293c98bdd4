"""Reminder orchestrator for EyeRest.

Wires the eye and posture countdown timers to the settings, the streak
tracker, the session history and the notification dispatcher:

- a timer completing records the activity, logs the session, shows the
  reminder, and (with auto-start on) restarts the timer a second later;
- a changed interval setting resets the matching timer immediately.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Callable, Optional

from eyerest.core.models import AppSettings, HistoryRange, TimerKind, TimerSession
from eyerest.core.scheduler import CooperativeScheduler, ScheduledCall
from eyerest.core.settings import SettingsStore
from eyerest.core.streak import StreakTracker
from eyerest.core.timer import CountdownTimer, format_time

logger = logging.getLogger(__name__)

TIMER_KEYS = {
    TimerKind.EYE: "eyerest-eye-timer",
    TimerKind.POSTURE: "eyerest-posture-timer",
}

AUTO_RESTART_DELAY = 1.0  # seconds


@dataclass
class ReminderContext:
    """Everything the orchestrator depends on, built once at start-up."""
    settings: SettingsStore
    streak_tracker: StreakTracker
    notifier: Any  # NotificationDispatcher
    scheduler: CooperativeScheduler
    store: Any  # WellnessStore
    clock: Callable[[], float] = field(default=time.time)


class ReminderOrchestrator:
    """Owns the two reminder timers and applies the auto-restart policy."""

    def __init__(self, context: ReminderContext) -> None:
        self.context = context
        self.scheduler = context.scheduler
        self._pending_restarts: dict[TimerKind, ScheduledCall] = {}

        settings = context.settings.settings
        self.timers: dict[TimerKind, CountdownTimer] = {
            kind: CountdownTimer(
                scheduler=context.scheduler,
                default_minutes=settings.interval_for(kind),
                storage_key=TIMER_KEYS[kind],
                store=context.store,
                on_complete=self._completion_handler(kind),
                clock=context.clock,
                name=kind.value,
            )
            for kind in TimerKind
        }
        self._unsubscribe = context.settings.subscribe(self._on_settings_changed)

    # ------------------------------------------------------------------
    # Timer controls (safe to call from any thread)
    # ------------------------------------------------------------------

    def timer(self, kind: "TimerKind | str") -> CountdownTimer:
        return self.timers[TimerKind.parse(kind)]

    def start_timer(self, kind: "TimerKind | str") -> None:
        with self.scheduler.lock:
            self.timer(kind).start()

    def pause_timer(self, kind: "TimerKind | str") -> None:
        with self.scheduler.lock:
            self.timer(kind).pause()

    def toggle_timer(self, kind: "TimerKind | str") -> None:
        with self.scheduler.lock:
            self.timer(kind).toggle()

    def reset_timer(self, kind: "TimerKind | str") -> None:
        """Rewind a timer to the configured interval."""
        kind = TimerKind.parse(kind)
        with self.scheduler.lock:
            self._cancel_restart(kind)
            self.timers[kind].reset(self.context.settings.settings.interval_for(kind))

    def start_all(self) -> None:
        for kind in TimerKind:
            self.start_timer(kind)

    # ------------------------------------------------------------------
    # Settings and streak controls
    # ------------------------------------------------------------------

    def update_settings(self, **changes: Any) -> AppSettings:
        """Apply setting changes; an interval change resets its timer."""
        with self.scheduler.lock:
            return self.context.settings.update(**changes)

    def reset_settings(self) -> AppSettings:
        with self.scheduler.lock:
            return self.context.settings.reset()

    def reset_streak(self) -> None:
        with self.scheduler.lock:
            self.context.streak_tracker.reset_streak()

    def update_goals(self, weekly_goal: Optional[int] = None, streak_goal: Optional[int] = None) -> None:
        with self.scheduler.lock:
            tracker = self.context.streak_tracker
            if weekly_goal is not None:
                tracker.update_weekly_goal(weekly_goal)
            if streak_goal is not None:
                tracker.update_streak_goal(streak_goal)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def status(self) -> dict[str, Any]:
        """Per-timer state for display."""
        with self.scheduler.lock:
            result = {}
            for kind, t in self.timers.items():
                shown = format_time(t.time_left)
                result[kind.value] = {
                    "status": t.status.value,
                    "is_running": t.is_running,
                    "time_left": t.time_left,
                    "total_time": t.total_time,
                    "progress": round(t.progress, 1),
                    "display": shown.display,
                    "next_break": t.get_next_break_time(),
                }
            return result

    def streak_summary(self) -> dict[str, Any]:
        with self.scheduler.lock:
            tracker = self.context.streak_tracker
            data = tracker.streak_data.to_dict()
            data["message"] = tracker.get_streak_message()
            data["weekly_progress"] = round(tracker.get_weekly_progress(), 1)
            data["weekly_activity"] = [d.to_dict() for d in tracker.weekly_activity]
            return data

    def history(self, days: int = 7, today: Optional[date] = None) -> HistoryRange:
        """Completed-session totals for the last *days* days, today included."""
        if days <= 0:
            raise ValueError(f"days must be positive, got {days!r}")
        end = today or datetime.fromtimestamp(self.context.clock()).date()
        try:
            start = end - timedelta(days=days - 1)
        except OverflowError:
            raise ValueError(f"days out of range, got {days!r}") from None
        with self.scheduler.lock:
            return HistoryRange(start, end, self.context.store.get_daily_totals(start, end))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def shutdown(self) -> None:
        """Stop reacting to settings and release every scheduled callback."""
        with self.scheduler.lock:
            self._unsubscribe()
            for kind in list(self._pending_restarts):
                self._cancel_restart(kind)
            for t in self.timers.values():
                t.close()
        logger.info("Orchestrator shut down")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _completion_handler(self, kind: TimerKind) -> Callable[[], None]:
        def _on_complete() -> None:
            self._on_timer_complete(kind)
        return _on_complete

    def _on_timer_complete(self, kind: TimerKind) -> None:
        settings = self.context.settings.settings
        timer = self.timers[kind]
        logger.info("%s reminder due", kind.value.capitalize())

        self.context.streak_tracker.record_activity(kind)
        self._log_session(kind, timer.total_time)

        if settings.notifications_for(kind):
            if kind is TimerKind.EYE:
                self.context.notifier.show_eye_break_notification(settings.sound_alerts)
            else:
                self.context.notifier.show_posture_notification(settings.sound_alerts)

        if settings.auto_start:
            self._cancel_restart(kind)
            self._pending_restarts[kind] = self.scheduler.call_later(
                AUTO_RESTART_DELAY, lambda: self._auto_restart(kind)
            )

    def _auto_restart(self, kind: TimerKind) -> None:
        self._pending_restarts.pop(kind, None)
        timer = self.timers[kind]
        timer.reset(self.context.settings.settings.interval_for(kind))
        timer.start()
        logger.debug("Auto-restarted %s timer", kind.value)

    def _cancel_restart(self, kind: TimerKind) -> None:
        handle = self._pending_restarts.pop(kind, None)
        self.scheduler.cancel(handle)

    def _log_session(self, kind: TimerKind, duration: int) -> None:
        completed_at = datetime.fromtimestamp(self.context.clock())
        session = TimerSession(
            id=0,
            timer_type=kind,
            duration_seconds=duration,
            completed=True,
            started_at=completed_at - timedelta(seconds=duration),
            completed_at=completed_at,
        )
        try:
            self.context.store.save_timer_session(session)
        except Exception:
            logger.exception("Failed to record %s session", kind.value)

    def _on_settings_changed(self, old: AppSettings, new: AppSettings) -> None:
        with self.scheduler.lock:
            for kind in TimerKind:
                if old.interval_for(kind) != new.interval_for(kind):
                    logger.info(
                        "%s interval changed %d -> %d min; resetting timer",
                        kind.value.capitalize(), old.interval_for(kind), new.interval_for(kind),
                    )
                    self._cancel_restart(kind)
                    self.timers[kind].reset(new.interval_for(kind))
