"""Callback scheduler for EyeRest timers.

Replaces an environment-provided interval primitive with an explicit
interface: ``schedule(period_ms, callback)`` registers a repeating callback
and returns a handle that ``cancel(handle)`` deregisters.

``CooperativeScheduler`` runs whatever is due each time ``run_due()`` is
called.  ``ThreadedScheduler`` drives the same queue from a single daemon
reactor thread.  Every callback runs while holding ``scheduler.lock``;
callers on other threads (tray menu, dashboard) take the same lock so the
timers only ever see one thread at a time.
"""

import heapq
import itertools
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass(order=True)
class ScheduledCall:
    """A pending callback.  ``period`` is ``None`` for one-shot calls."""
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    period: Optional[float] = field(default=None, compare=False)
    cancelled: bool = field(default=False, compare=False)


class CooperativeScheduler:
    """Priority queue of timed callbacks, advanced by ``run_due()``."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._queue: list[ScheduledCall] = []
        self._counter = itertools.count()
        self.lock = threading.RLock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def schedule(self, period_ms: int, callback: Callable[[], None]) -> ScheduledCall:
        """Call *callback* every *period_ms* milliseconds until cancelled."""
        if period_ms <= 0:
            raise ValueError("period_ms must be positive")
        period = period_ms / 1000.0
        return self._push(self._clock() + period, callback, period)

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> ScheduledCall:
        """Call *callback* once after *delay_seconds*."""
        return self._push(self._clock() + max(0.0, delay_seconds), callback, None)

    def cancel(self, handle: Optional[ScheduledCall]) -> None:
        """Deregister *handle*.  Safe to call with ``None`` or twice."""
        if handle is None:
            return
        with self.lock:
            handle.cancelled = True

    def run_due(self, now: Optional[float] = None) -> int:
        """Run every callback due at *now*; return how many ran.

        Periodic calls are re-armed from their previous due time, so a
        late ``run_due`` catches up on every missed period.
        """
        ran = 0
        with self.lock:
            if now is None:
                now = self._clock()
            while self._queue and self._queue[0].due <= now:
                call = heapq.heappop(self._queue)
                if call.cancelled:
                    continue
                if call.period is not None:
                    call.due += call.period
                    heapq.heappush(self._queue, call)
                try:
                    call.callback()
                except Exception:
                    logger.exception("Scheduled callback %r failed", call.callback)
                ran += 1
        return ran

    def next_due(self) -> Optional[float]:
        """Clock value at which the next live callback is due, or ``None``."""
        with self.lock:
            while self._queue and self._queue[0].cancelled:
                heapq.heappop(self._queue)
            return self._queue[0].due if self._queue else None

    def pending(self) -> int:
        """Number of live (not cancelled) callbacks."""
        with self.lock:
            return sum(1 for c in self._queue if not c.cancelled)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _push(self, due: float, callback: Callable[[], None], period: Optional[float]) -> ScheduledCall:
        with self.lock:
            call = ScheduledCall(due=due, seq=next(self._counter), callback=callback, period=period)
            heapq.heappush(self._queue, call)
            self._on_push()
            return call

    def _on_push(self) -> None:
        """Hook for subclasses that need waking when the queue changes."""


class ThreadedScheduler(CooperativeScheduler):
    """Runs the callback queue on one daemon reactor thread."""

    MAX_WAIT = 0.5  # seconds

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        super().__init__(clock)
        self._wakeup = threading.Event()
        self._running = False
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._thread = threading.Thread(
            target=self._run, daemon=True, name="eyerest-scheduler"
        )
        self._thread.start()
        logger.info("Scheduler reactor started")

    def stop(self) -> None:
        """Signal the reactor to exit and wait for it."""
        self._running = False
        self._wakeup.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None
        logger.info("Scheduler reactor stopped")

    @property
    def running(self) -> bool:
        return self._running

    def _on_push(self) -> None:
        self._wakeup.set()

    def _run(self) -> None:
        while self._running:
            self.run_due()
            due = self.next_due()
            if due is None:
                wait = self.MAX_WAIT
            else:
                wait = min(max(0.0, due - self._clock()), self.MAX_WAIT)
            self._wakeup.wait(wait)
            self._wakeup.clear()
