"""Periodic sampler that turns a timer into a stream of snapshots."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from hoopclock.core.timer import CountdownTimer, TimerSnapshot

logger = logging.getLogger(__name__)

Observer = Callable[[TimerSnapshot], None]


class Ticker:
    """Samples one :class:`CountdownTimer` at a fixed cadence.

    Each tick calls :meth:`CountdownTimer.sample` and hands the snapshot to
    every observer.  Ticks are scheduled against a monotonic origin so loop
    overhead does not stretch the cadence.  Sampling a stopped timer is a
    no-op, so the ticker may keep running between periods.
    """

    def __init__(self, timer: CountdownTimer, interval: float | None = None) -> None:
        self._timer = timer
        self._interval: float = interval if interval is not None else timer.get_profile().interval
        if self._interval <= 0:
            raise ValueError(f"interval must be positive, got {self._interval}")
        self._observers: list[Observer] = []
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def interval(self) -> float:
        return self._interval

    def add_observer(self, observer: Observer) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def remove_observer(self, observer: Observer) -> None:
        try:
            self._observers.remove(observer)
        except ValueError:
            pass

    def tick(self) -> TimerSnapshot:
        """Sample the timer once and publish the snapshot."""
        snapshot = self._timer.sample()
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception:
                logger.exception("Snapshot observer %r failed", observer)
        return snapshot

    def run(self, until_idle: bool = True) -> TimerSnapshot:
        """Tick in the calling thread.

        With *until_idle* the loop returns the first snapshot whose timer is
        no longer running (expired or stopped by another command);
        otherwise it runs until :meth:`stop` is called.
        """
        self._stop_event = threading.Event()
        return self._loop(until_idle, self._stop_event, time.sleep)

    def start(self) -> None:
        """Tick on a daemon thread until :meth:`stop`."""
        if self._thread is not None and self._thread.is_alive():
            return
        # One flag per loop: a loop outliving a timed-out stop() still exits.
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._loop,
            args=(False, self._stop_event, self._stop_event.wait),
            name=f"ticker-{self._timer.get_profile().name}",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        self._stop_event.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
        self._thread = None

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # -- private helpers -----------------------------------------------------

    def _loop(
        self, until_idle: bool, stop_event: threading.Event, wait: Callable[[float], object]
    ) -> TimerSnapshot:
        origin = time.monotonic()
        ticks = 0
        snapshot = self.tick()
        while not stop_event.is_set():
            if until_idle and not snapshot.running:
                break
            ticks += 1
            delay = origin + ticks * self._interval - time.monotonic()
            if delay < 0:
                # Fell behind (suspended process, slow observer): resync.
                origin, ticks = time.monotonic(), 0
                delay = 0.0
            wait(delay)
            if stop_event.is_set():
                break
            snapshot = self.tick()
        return snapshot
