"""Timer core — a drift-free countdown anchored to the monotonic clock."""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from fractions import Fraction

from hoopclock.core.notifier import ExpiryNotifier

logger = logging.getLogger(__name__)

SHOT_CLOCK_PRESETS = (24, 14)


def _ceil_units(seconds: float, per_second: int) -> int:
    # Exact rational ceiling: a positive remainder never displays as zero.
    return math.ceil(Fraction(max(seconds, 0.0)) * per_second)


def format_mmss(seconds: float) -> str:
    """Format *seconds* as ``MM:SS``, rounding up to the next whole second."""
    total = _ceil_units(seconds, 1)
    return f"{total // 60:02d}:{total % 60:02d}"


def format_tenths(seconds: float) -> str:
    """Format *seconds* as ``SS.t``, rounding up to the next tenth."""
    tenths = _ceil_units(seconds, 10)
    return f"{tenths // 10:02d}.{tenths % 10}"


_FORMATTERS = {"mmss": format_mmss, "tenths": format_tenths}


@dataclass(frozen=True)
class ClockProfile:
    """Configuration that distinguishes one clock role from another."""

    name: str
    default_seconds: float
    interval: float
    display: str

    def render(self, seconds: float) -> str:
        return _FORMATTERS[self.display](seconds)


GAME_CLOCK = ClockProfile(name="game", default_seconds=600, interval=0.05, display="mmss")
SHOT_CLOCK = ClockProfile(name="shot", default_seconds=24, interval=0.02, display="tenths")


@dataclass(frozen=True)
class TimerSnapshot:
    """Point-in-time view of a timer, handed to observers."""

    remaining: float
    running: bool
    duration: float

    @property
    def fraction(self) -> float:
        """Share of the configured duration still left, in ``[0, 1]``."""
        return min(1.0, self.remaining / max(self.duration, 0.01))


def _validate_duration(seconds: float) -> float:
    if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
        raise TypeError(f"duration must be a number of seconds, got {type(seconds).__name__}")
    if not (0 < seconds < math.inf):
        raise ValueError(f"duration must be a positive number of seconds, got {seconds}")
    return float(seconds)


class CountdownTimer:
    """A countdown clock that can be started, stopped, resumed and reset.

    Remaining time is always ``baseline - (now - anchor)`` evaluated against
    ``time.monotonic()``, never an accumulation of per-tick decrements, so
    irregular sampling cannot introduce drift.  The timer performs no
    scheduling of its own; a :class:`~hoopclock.core.ticker.Ticker` (or any
    caller) drives :meth:`sample`.

    All state changes happen under a per-instance lock so that a background
    sampler and a command thread may share one timer.

    Each timer must own its *notifier*: a notifier coalesces queued firings,
    so two clocks expiring together on a shared one could buzz only once.
    :class:`~hoopclock.core.session.GameSession` refuses such a pair.
    """

    def __init__(
        self,
        profile: ClockProfile = GAME_CLOCK,
        seconds: float | None = None,
        notifier: ExpiryNotifier | None = None,
    ) -> None:
        duration = _validate_duration(profile.default_seconds if seconds is None else seconds)
        self._profile = profile
        self._duration: float = duration
        self._remaining: float = duration
        self._running: bool = False
        self._anchor: float | None = None
        self._baseline: float = duration
        self._notifier = notifier if notifier is not None else ExpiryNotifier(profile.name)
        self._lock = threading.RLock()

    # -- commands ------------------------------------------------------------

    def start(self) -> None:
        """Begin counting down.  No-op if already running or at zero."""
        with self._lock:
            if self._running or self._remaining <= 0.0:
                return
            self._anchor = time.monotonic()
            self._baseline = self._remaining
            self._running = True
        logger.debug("%s clock started at %.2fs", self._profile.name, self._baseline)

    def stop(self) -> None:
        """Freeze the countdown at the precise stop instant.  No-op if stopped."""
        with self._lock:
            if not self._running:
                return
            self._remaining = self._compute_remaining()
            self._halt()
        logger.debug("%s clock stopped at %.2fs", self._profile.name, self._remaining)

    def reset(self, seconds: float | None = None) -> None:
        """Stop the clock and rewind it.

        With *seconds*, that becomes the new configured duration; otherwise
        the clock returns to its current configured duration.  Never raises
        the expiry notification.
        """
        duration = None if seconds is None else _validate_duration(seconds)
        with self._lock:
            self._halt()
            if duration is not None:
                self._duration = duration
            self._remaining = self._duration
            self._baseline = self._duration
        logger.debug("%s clock reset to %.2fs", self._profile.name, self._duration)

    def sample(self) -> TimerSnapshot:
        """Recompute remaining time and return a snapshot.

        The sample that first observes zero stops the clock and fires the
        expiry notifier; later samples are no-ops until the next start.
        """
        with self._lock:
            expired = False
            if self._running:
                self._remaining = self._compute_remaining()
                if self._remaining == 0.0:
                    self._halt()
                    expired = True
            snapshot = self._snapshot()
        if expired:
            logger.info("%s clock expired", self._profile.name)
            self._notifier.fire()
        return snapshot

    # -- queries -------------------------------------------------------------

    def snapshot(self) -> TimerSnapshot:
        """Return the current state without sampling the clock."""
        with self._lock:
            return self._snapshot()

    def get_remaining(self) -> float:
        """Return the remaining seconds as of the last sample or command."""
        return self._remaining

    def get_duration(self) -> float:
        """Return the configured duration in seconds."""
        return self._duration

    def is_running(self) -> bool:
        return self._running

    def get_anchor(self) -> float | None:
        return self._anchor

    def get_baseline(self) -> float:
        return self._baseline

    def get_profile(self) -> ClockProfile:
        return self._profile

    def get_notifier(self) -> ExpiryNotifier:
        return self._notifier

    def display(self) -> str:
        """Render the remaining time in this clock's display format."""
        return self._profile.render(self._remaining)

    # -- private helpers -----------------------------------------------------

    def _compute_remaining(self) -> float:
        elapsed = time.monotonic() - self._anchor
        return max(0.0, self._baseline - elapsed)

    def _halt(self) -> None:
        self._running = False
        self._anchor = None

    def _snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(self._remaining, self._running, self._duration)
