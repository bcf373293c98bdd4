"""Countdown timer for EyeRest.

A single named countdown with start/pause/reset, one-second ticks driven by
a scheduler, persistence of every transition, and restoration that keeps
counting down across restarts: when a snapshot saved while running is
loaded, the wall-clock time that passed since it was saved is subtracted.
"""

import logging
import math
import time
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from eyerest.core.models import (
    TimeDisplay,
    TimerSnapshot,
    TimerState,
    TimerStatus,
    compute_progress,
)
from eyerest.core.scheduler import CooperativeScheduler, ScheduledCall

logger = logging.getLogger(__name__)

_ZERO_DISPLAY = TimeDisplay(0, "00", "0:00")


def format_time(seconds: Any) -> TimeDisplay:
    """Split *seconds* into minutes and a zero-padded two-digit seconds string.

    Invalid input (NaN, negative, zero, ``None``, non-numeric) yields
    ``0:00`` instead of raising, so a skewed clock can never break display.
    """
    try:
        value = float(seconds)
    except (TypeError, ValueError):
        return _ZERO_DISPLAY
    if not value or math.isnan(value) or math.isinf(value) or value < 0:
        return _ZERO_DISPLAY
    whole = int(value)
    mins, secs = divmod(whole, 60)
    padded = f"{secs:02d}"
    return TimeDisplay(mins, padded, f"{mins}:{padded}")


def format_clock(moment: datetime) -> str:
    """Render *moment* as ``h:mm AM/PM`` (e.g. ``3:05 PM``)."""
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {suffix}"


def _check_minutes(minutes: float, name: str) -> None:
    # A countdown must last at least one whole second.
    if not minutes or minutes <= 0 or int(minutes * 60) < 1:
        raise ValueError(f"{name} must be at least one second, got {minutes!r}")


class CountdownTimer:
    """A persistent one-second countdown with a completion callback."""

    TICK_MS = 1000

    def __init__(
        self,
        scheduler: CooperativeScheduler,
        default_minutes: float,
        storage_key: Optional[str] = None,
        store=None,
        on_complete: Optional[Callable[[], None]] = None,
        clock: Callable[[], float] = time.time,
        name: str = "",
    ) -> None:
        _check_minutes(default_minutes, "default_minutes")
        self.scheduler = scheduler
        self.default_minutes = default_minutes
        self.storage_key = storage_key
        self.store = store
        self.on_complete = on_complete
        self.name = name or (storage_key or "timer")
        self._clock = clock
        self._state = TimerState.fresh(default_minutes)
        self._handle: Optional[ScheduledCall] = None

        self._restore()
        if self._state.is_running:
            self._arm()

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def state(self) -> TimerState:
        """A copy of the current state."""
        s = self._state
        return TimerState(s.is_running, s.time_left, s.total_time, s.progress)

    @property
    def is_running(self) -> bool:
        return self._state.is_running

    @property
    def time_left(self) -> int:
        return self._state.time_left

    @property
    def total_time(self) -> int:
        return self._state.total_time

    @property
    def progress(self) -> float:
        return self._state.progress

    @property
    def status(self) -> TimerStatus:
        if self._state.is_running:
            return TimerStatus.RUNNING
        if self._state.time_left == 0:
            return TimerStatus.EXPIRED
        return TimerStatus.PAUSED

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Begin (or resume) counting down.  No-op while already running."""
        if self._state.is_running:
            return
        if self._state.time_left <= 0:
            # Expired: run a fresh countdown of the same length.
            self._state.time_left = self._state.total_time
            self._state.progress = 0.0
        self._state.is_running = True
        self._arm()
        self._persist()
        logger.debug("Timer %s started with %ds left", self.name, self._state.time_left)

    def pause(self) -> None:
        """Stop counting down.  No-op unless running."""
        if not self._state.is_running:
            return
        self._disarm()
        self._state.is_running = False
        self._persist()
        logger.debug("Timer %s paused with %ds left", self.name, self._state.time_left)

    def toggle(self) -> None:
        if self._state.is_running:
            self.pause()
        else:
            self.start()

    def reset(self, minutes: Optional[float] = None) -> None:
        """Stop and rewind to a full countdown.

        A given *minutes* also becomes the default for later bare resets;
        ``None`` or ``0`` reuses the current default.
        """
        if minutes is not None and minutes < 0:
            raise ValueError(f"minutes must not be negative, got {minutes!r}")
        if minutes:
            _check_minutes(minutes, "minutes")
            self.default_minutes = minutes
        self._disarm()
        self._state = TimerState.fresh(self.default_minutes)
        self._persist()
        logger.debug("Timer %s reset to %ds", self.name, self._state.total_time)

    def close(self) -> None:
        """Deregister the tick callback without touching persisted state."""
        self._disarm()

    # ------------------------------------------------------------------
    # Display helpers
    # ------------------------------------------------------------------

    format_time = staticmethod(format_time)

    def get_next_break_time(self, now: Optional[datetime] = None) -> Optional[str]:
        """Wall-clock time the countdown will finish, or ``None`` when idle."""
        if not self._state.is_running:
            return None
        if now is None:
            now = datetime.fromtimestamp(self._clock())
        return format_clock(now + timedelta(seconds=self._state.time_left))

    def snapshot(self) -> TimerSnapshot:
        s = self._state
        return TimerSnapshot(
            time_left=s.time_left,
            total_time=s.total_time,
            is_running=s.is_running,
            progress=s.progress,
            last_saved=int(self._clock() * 1000),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _tick(self) -> None:
        if not self._state.is_running:
            # A tick that raced a pause/reset: drop it.
            self._disarm()
            return

        self._state.time_left = max(0, self._state.time_left - 1)
        if self._state.time_left > 0:
            self._state.progress = compute_progress(self._state.time_left, self._state.total_time)
            self._persist()
            return

        self._disarm()
        self._state.is_running = False
        self._state.progress = 100.0
        self._persist()
        logger.info("Timer %s completed", self.name)
        if self.on_complete is not None:
            try:
                self.on_complete()
            except Exception:
                logger.exception("Completion callback for timer %s failed", self.name)

    def _arm(self) -> None:
        self._disarm()
        self._handle = self.scheduler.schedule(self.TICK_MS, self._tick)

    def _disarm(self) -> None:
        if self._handle is not None:
            self.scheduler.cancel(self._handle)
            self._handle = None

    def _persist(self) -> None:
        if self.storage_key is None or self.store is None:
            return
        try:
            self.store.set(self.storage_key, self.snapshot().to_dict())
        except Exception:
            logger.exception("Failed to persist timer %s", self.name)

    def _restore(self) -> None:
        """Load the persisted snapshot, crediting time spent while inactive."""
        if self.storage_key is None or self.store is None:
            return
        try:
            data = self.store.get(self.storage_key)
        except Exception:
            logger.exception("Failed to read timer %s; using defaults", self.name)
            return
        if data is None:
            return
        try:
            snap = TimerSnapshot.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Ignoring malformed snapshot for timer %s: %s", self.name, exc)
            return
        if snap.total_time <= 0:
            logger.warning("Ignoring snapshot for timer %s with total_time=%d", self.name, snap.total_time)
            return

        time_left = min(max(0, snap.time_left), snap.total_time)
        is_running = snap.is_running
        if is_running:
            elapsed = max(0, math.floor((self._clock() * 1000 - snap.last_saved) / 1000))
            time_left = max(0, time_left - elapsed)
            is_running = time_left > 0

        self._state = TimerState(
            is_running=is_running,
            time_left=time_left,
            total_time=snap.total_time,
            progress=compute_progress(time_left, snap.total_time),
        )
        logger.info(
            "Restored timer %s: %ds of %ds left, running=%s",
            self.name, time_left, snap.total_time, is_running,
        )
