"""Reaction game state machine.

idle --start--> waiting --timer--> trigger --click--> result --reset--> idle
                   `--click--> early --acknowledge--> idle

One ReactionGame is one player's session. Timing is taken from an injected
monotonic clock, and the random wait before the stimulus is scheduled on an
injected scheduler, so the whole lifecycle can be driven deterministically.
"""

import logging
import math
import random
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from . import sounds
from .messages import reaction_message
from .scheduler import TimerHandle


logger = logging.getLogger(__name__)

IDLE = 'idle'
WAITING = 'waiting'
TRIGGER = 'trigger'
RESULT = 'result'
EARLY = 'early'


@dataclass(frozen=True)
class ReactionResult:
    reaction_time_ms: int
    message: str


class ReactionGame:
    def __init__(
        self,
        scheduler,
        clock: Optional[Callable[[], float]] = None,
        sound_player=None,
        listener: Optional[Callable[[Dict[str, Any]], None]] = None,
        delay_range_ms: Tuple[float, float] = (1500, 4000),
        rng: Optional[random.Random] = None,
    ):
        self.scheduler = scheduler
        self.clock = clock or scheduler.now
        self.sound_player = sound_player
        self.listener = listener
        self.delay_range_ms = delay_range_ms
        self.rng = rng or random.Random()
        self.sound_enabled = True

        self.state = IDLE
        self.stimulus_at: Optional[float] = None
        self.last_result: Optional[ReactionResult] = None
        self._pending: Optional[TimerHandle] = None
        # Timer callbacks arrive on a background task while clicks arrive on request handlers
        self._lock = threading.RLock()

    # ---- Events ----

    def start(self) -> None:
        """Begin a round. From any state other than idle this restarts."""
        with self._lock:
            self._cancel_pending()
            self.stimulus_at = None
            self.last_result = None
            self.state = WAITING
            low, high = self.delay_range_ms
            delay = self.rng.uniform(low, high)
            handle = None

            def _fire():
                self._on_timer(handle)

            handle = self.scheduler.after(delay, _fire)
            self._pending = handle
            logger.debug(f"[game-start] delay={delay:.0f}ms")
            self._play(sounds.CLICK)
            self._notify()

    def click(self) -> Optional[ReactionResult]:
        """Register the player's click. Returns the result when one was measured."""
        with self._lock:
            if self.state == WAITING:
                self._cancel_pending()
                self.state = EARLY
                logger.debug("[game-early] click before stimulus")
                self._play(sounds.EARLY)
                self._notify()
                return None
            if self.state == TRIGGER:
                elapsed = self.clock() - self.stimulus_at
                reaction_time = int(math.floor(elapsed + 0.5))
                self.last_result = ReactionResult(reaction_time, reaction_message(reaction_time))
                self.state = RESULT
                logger.debug(f"[game-result] reaction_time={reaction_time}ms")
                self._play(sounds.SUCCESS)
                self._notify()
                return self.last_result
            # idle, result, early: nothing to react to
            return None

    def acknowledge(self) -> None:
        """Dismiss the early-click foul."""
        with self._lock:
            if self.state != EARLY:
                return
            self._to_idle()

    def reset(self) -> None:
        with self._lock:
            self._cancel_pending()
            self._to_idle()
            self._play(sounds.CLICK)

    def close(self) -> None:
        """Drop the session: no timer may fire after this."""
        with self._lock:
            self._cancel_pending()

    def set_sound_enabled(self, enabled: bool) -> None:
        with self._lock:
            self.sound_enabled = bool(enabled)
            self._notify()

    # ---- Internals ----

    def _on_timer(self, handle: Optional[TimerHandle]) -> None:
        with self._lock:
            if handle is None or handle is not self._pending or self.state != WAITING:
                logger.debug(f"[game-stale-timer] state={self.state}")
                return
            self._pending = None
            self.stimulus_at = self.clock()
            self.state = TRIGGER
            self._play(sounds.TRIGGER)
            self._notify()

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _to_idle(self) -> None:
        self.state = IDLE
        self.stimulus_at = None
        self.last_result = None
        self._notify()

    def _play(self, sound_id: str) -> None:
        if self.sound_enabled and self.sound_player is not None:
            self.sound_player.play(sound_id)

    def _notify(self) -> None:
        if self.listener is not None:
            self.listener(self.snapshot())

    @property
    def has_pending_timer(self) -> bool:
        return self._pending is not None and self._pending.active

    def snapshot(self) -> Dict[str, Any]:
        result = self.last_result
        return {
            'state': self.state,
            'reaction_time': result.reaction_time_ms if result else None,
            'message': result.message if result else None,
            'sound_enabled': self.sound_enabled,
        }
