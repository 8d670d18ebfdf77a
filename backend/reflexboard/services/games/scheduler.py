import heapq
import itertools
import logging
import time
from typing import Callable, List, Optional, Tuple


logger = logging.getLogger(__name__)

# Longest a cancelled background timer keeps its task alive
POLL_INTERVAL_MS = 100.0


def monotonic_ms() -> float:
    """Milliseconds from a monotonic clock; unaffected by wall-clock changes."""
    return time.perf_counter() * 1000.0


class TimerHandle:
    """A single scheduled callback. Cancelling is idempotent, even after it fired."""

    def __init__(self, delay_ms: float):
        self.delay_ms = delay_ms
        self.cancelled = False
        self.fired = False

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        self.cancelled = True

    def __repr__(self):
        state = 'cancelled' if self.cancelled else 'fired' if self.fired else 'pending'
        return f"<TimerHandle {self.delay_ms:.0f}ms {state}>"


class BackgroundScheduler:
    """Run delayed callbacks as Socket.IO background tasks.

    Each timer gets its own task that sleeps through the delay in short
    slices, checking the handle between them. A cancelled timer never runs
    its callback and its task ends at the next slice.
    """

    def __init__(self, socketio, clock: Callable[[], float] = monotonic_ms):
        self.socketio = socketio
        self._clock = clock

    def now(self) -> float:
        return self._clock()

    def after(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(delay_ms)
        logger.info(f"[timer-set] delay={delay_ms:.0f}ms")
        self.socketio.start_background_task(self._worker, handle, callback)
        return handle

    def _worker(self, handle: TimerHandle, callback: Callable[[], None]) -> None:
        remaining = handle.delay_ms
        while remaining > 0 and not handle.cancelled:
            step = min(remaining, POLL_INTERVAL_MS)
            self.socketio.sleep(step / 1000.0)
            remaining -= step
        if handle.cancelled:
            logger.info(f"[timer-abort] delay={handle.delay_ms:.0f}ms cancelled before firing")
            return
        handle.fired = True
        logger.info(f"[timer-fire] delay={handle.delay_ms:.0f}ms")
        try:
            callback()
        except Exception:
            # No caller above a background task to propagate to
            logger.exception("[timer-error] callback raised")


class ManualScheduler:
    """Deterministic scheduler whose clock only moves through advance().

    Serves as both the timer primitive and the monotonic clock so tests can
    script exact reaction times.
    """

    def __init__(self, start_ms: float = 0.0):
        self._now = float(start_ms)
        self._queue: List[Tuple[float, int, TimerHandle, Callable[[], None]]] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def after(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(delay_ms)
        heapq.heappush(self._queue, (self._now + delay_ms, next(self._seq), handle, callback))
        return handle

    @property
    def pending(self) -> List[TimerHandle]:
        return [entry[2] for entry in sorted(self._queue) if entry[2].active]

    def next_deadline(self) -> Optional[float]:
        for deadline, _, handle, _ in sorted(self._queue):
            if handle.active:
                return deadline
        return None

    def advance(self, ms: float) -> int:
        """Move the clock forward, firing every due timer in deadline order.

        Returns the number of callbacks that ran.
        """
        return self.advance_to(self._now + ms)

    def advance_to(self, when_ms: float) -> int:
        target = max(self._now, when_ms)
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            deadline, _, handle, callback = heapq.heappop(self._queue)
            self._now = max(self._now, deadline)
            if handle.cancelled:
                continue
            handle.fired = True
            callback()
            fired += 1
        self._now = target
        return fired
