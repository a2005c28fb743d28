"""Session-wide countdown producing tick and expiry events."""

from __future__ import annotations

import math
import threading
import time
from typing import Callable

TickListener = Callable[[int], None]
ExpiryListener = Callable[[], None]


class Countdown:
    """One deadline per quiz session, driven by a monotonic clock.

    The countdown only reports time; it never owns session state. Listeners
    receive a tick whenever the whole-second remaining value changes and a
    single expiry event when it reaches zero.
    """

    def __init__(self, duration_seconds: int = 90,
                 clock: Callable[[], float] = time.monotonic) -> None:
        if duration_seconds <= 0:
            raise ValueError("Countdown duration must be positive.")
        self._duration = duration_seconds
        self._clock = clock
        self._started_at: float | None = None
        self._last_tick: int | None = None
        self._expired_fired = False
        self._stopped = False
        self._lock = threading.Lock()
        self._tick_listeners: list[TickListener] = []
        self._expiry_listeners: list[ExpiryListener] = []

    @property
    def duration_seconds(self) -> int:
        return self._duration

    def add_tick_listener(self, listener: TickListener) -> None:
        self._tick_listeners.append(listener)

    def add_expiry_listener(self, listener: ExpiryListener) -> None:
        self._expiry_listeners.append(listener)

    def start(self) -> None:
        self._started_at = self._clock()

    def stop(self) -> None:
        self._stopped = True

    def is_running(self) -> bool:
        return self._started_at is not None and not self._stopped and not self.is_expired()

    def elapsed_seconds(self) -> float:
        if self._started_at is None:
            return 0.0
        return max(0.0, self._clock() - self._started_at)

    def remaining_seconds(self) -> int:
        """Whole seconds left, rounded up, never negative."""
        if self._started_at is None:
            return self._duration
        return max(0, math.ceil(self._duration - self.elapsed_seconds()))

    def is_expired(self) -> bool:
        return self._started_at is not None and self.remaining_seconds() == 0

    def poll(self) -> int:
        """Emit pending tick/expiry events and return the remaining seconds."""
        with self._lock:
            remaining = self.remaining_seconds()
            if self._started_at is None or self._stopped:
                return remaining

            # Ticks only ever count down, whichever thread polls
            if self._last_tick is None or remaining < self._last_tick:
                self._last_tick = remaining
                for listener in list(self._tick_listeners):
                    listener(remaining)
            emit_expiry = remaining == 0 and not self._expired_fired
            if emit_expiry:
                self._expired_fired = True

        if emit_expiry:
            for listener in list(self._expiry_listeners):
                listener()
        return remaining

    def run(self, sleep: Callable[[float], None] = time.sleep,
            interval: float = 1.0) -> None:
        """Tick loop; returns after expiry or stop()."""
        if self._started_at is None:
            self.start()
        while not self._stopped:
            if self.poll() == 0:
                break
            sleep(interval)
