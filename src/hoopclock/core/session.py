"""Game session state: quarters, per-quarter fouls and timeouts, mode presets."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterator

from hoopclock.core.timer import GAME_CLOCK, SHOT_CLOCK, SHOT_CLOCK_PRESETS, CountdownTimer

logger = logging.getLogger(__name__)

FOUL_MAX = 5
TIMEOUT_MAX = 6
SHOT_CLOCK_DEFAULT = SHOT_CLOCK_PRESETS[0]

_GAME_EDIT_MAX_MINUTES = 19
_SHOT_EDIT_RANGE = (1, 35)


class GameMode(Enum):
    """Duration presets: ``(label, regulation seconds, overtime seconds)``."""

    MINI = ("Mini basketball", 360, 180)
    JUNIOR = ("Junior high", 480, 240)
    PRO = ("Pro", 600, 300)

    def __init__(self, label: str, quarter_seconds: int, overtime_seconds: int) -> None:
        self.label = label
        self.quarter_seconds = quarter_seconds
        self.overtime_seconds = overtime_seconds

    @classmethod
    def from_name(cls, name: str) -> GameMode:
        return cls[name.strip().upper()]


class Team(Enum):
    HOME = "home"
    AWAY = "away"


class QuarterCounts:
    """A per-quarter sequence of counters clamped to ``[0, maximum]``.

    Reads past the end return 0 without growing the sequence; growth only
    happens through :meth:`ensure_capacity` or :meth:`adjust`.
    """

    def __init__(self, maximum: int) -> None:
        self._maximum = maximum
        self._values: list[int] = [0]

    @property
    def maximum(self) -> int:
        return self._maximum

    def ensure_capacity(self, index: int) -> None:
        """Append zero entries until *index* is addressable."""
        if index < 0:
            raise ValueError(f"quarter index must be non-negative, got {index}")
        missing = index + 1 - len(self._values)
        if missing > 0:
            self._values.extend([0] * missing)

    def get(self, index: int) -> int:
        if 0 <= index < len(self._values):
            return self._values[index]
        return 0

    def adjust(self, index: int, delta: int) -> int:
        """Add *delta* to the counter at *index*, clamping; return the new value."""
        self.ensure_capacity(index)
        value = min(max(self._values[index] + delta, 0), self._maximum)
        self._values[index] = value
        return value

    def total(self) -> int:
        return sum(self._values)

    def reset(self) -> None:
        self._values = [0]

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._values))


class GameSession:
    """Quarter bookkeeping plus the two clocks it drives.

    The session owns one game clock and one shot clock.  Mode changes,
    overtime and a full reset rewind those clocks; quarter navigation and
    counters never touch them.
    """

    def __init__(
        self,
        mode: GameMode = GameMode.PRO,
        game_clock: CountdownTimer | None = None,
        shot_clock: CountdownTimer | None = None,
    ) -> None:
        self._mode = mode
        self.game_clock = (
            game_clock if game_clock is not None else CountdownTimer(GAME_CLOCK, mode.quarter_seconds)
        )
        self.shot_clock = shot_clock if shot_clock is not None else CountdownTimer(SHOT_CLOCK)
        if self.game_clock.get_notifier() is self.shot_clock.get_notifier():
            raise ValueError("game clock and shot clock need separate expiry notifiers")
        self._quarter = 0
        self._fouls = {team: QuarterCounts(FOUL_MAX) for team in Team}
        self._timeouts = {team: QuarterCounts(TIMEOUT_MAX) for team in Team}

    # -- quarters ------------------------------------------------------------

    @property
    def mode(self) -> GameMode:
        return self._mode

    @property
    def quarter(self) -> int:
        """Zero-based index of the current quarter."""
        return self._quarter

    @property
    def quarter_label(self) -> str:
        return f"Q{self._quarter + 1}"

    def advance_quarter(self) -> int:
        """Move to the next quarter, growing the counters to cover it."""
        self._quarter += 1
        for counts in self._all_counts():
            counts.ensure_capacity(self._quarter)
        logger.debug("Advanced to %s", self.quarter_label)
        return self._quarter

    def regress_quarter(self) -> int:
        """Step back one quarter.  Counters are kept so stepping forward again is lossless."""
        if self._quarter > 0:
            self._quarter -= 1
            logger.debug("Returned to %s", self.quarter_label)
        return self._quarter

    def apply_overtime(self) -> None:
        """Start an overtime period: next quarter, game clock at overtime length."""
        self.advance_quarter()
        self.game_clock.reset(self._mode.overtime_seconds)
        logger.info("Overtime %s: game clock set to %ss", self.quarter_label, self._mode.overtime_seconds)

    # -- counters ------------------------------------------------------------

    def adjust_foul(self, team: Team, delta: int) -> int:
        return self._fouls[team].adjust(self._quarter, delta)

    def adjust_timeout(self, team: Team, delta: int) -> int:
        return self._timeouts[team].adjust(self._quarter, delta)

    def fouls(self, team: Team, quarter: int | None = None) -> int:
        return self._fouls[team].get(self._quarter if quarter is None else quarter)

    def timeouts(self, team: Team, quarter: int | None = None) -> int:
        return self._timeouts[team].get(self._quarter if quarter is None else quarter)

    def foul_total(self, team: Team) -> int:
        return self._fouls[team].total()

    def timeout_total(self, team: Team) -> int:
        return self._timeouts[team].total()

    def foul_counts(self, team: Team) -> QuarterCounts:
        return self._fouls[team]

    def timeout_counts(self, team: Team) -> QuarterCounts:
        return self._timeouts[team]

    # -- clocks --------------------------------------------------------------

    def change_mode(self, mode: GameMode) -> None:
        """Switch presets and rewind the game clock to the new quarter length."""
        self._mode = mode
        self.game_clock.reset(mode.quarter_seconds)
        logger.info("Mode changed to %s", mode.label)

    def stop_play(self) -> None:
        """Dead ball: stop the game clock and the shot clock together."""
        self.game_clock.stop()
        self.shot_clock.stop()

    def reset_game_clock(self) -> None:
        self.game_clock.reset(self._mode.quarter_seconds)

    def reset_shot_clock(self, seconds: int = SHOT_CLOCK_DEFAULT) -> None:
        self.shot_clock.reset(seconds)

    def edit_game_clock(self, minutes: int, seconds: int) -> bool:
        """Set the game clock by hand.  Refused while the clock is running."""
        if self.game_clock.is_running():
            return False
        minutes = min(max(minutes, 0), _GAME_EDIT_MAX_MINUTES)
        seconds = min(max(seconds, 0), 59)
        self.game_clock.reset(max(minutes * 60 + seconds, 1))
        return True

    def edit_shot_clock(self, seconds: int) -> bool:
        """Set the shot clock by hand.  Refused while the clock is running."""
        if self.shot_clock.is_running():
            return False
        low, high = _SHOT_EDIT_RANGE
        self.shot_clock.reset(min(max(seconds, low), high))
        return True

    def reset_all(self) -> None:
        """Back to the first quarter with empty counters and fresh clocks."""
        self._quarter = 0
        for counts in self._all_counts():
            counts.reset()
        self.game_clock.reset(self._mode.quarter_seconds)
        self.shot_clock.reset(SHOT_CLOCK_DEFAULT)
        logger.info("Session reset")

    # -- private helpers -----------------------------------------------------

    def _all_counts(self) -> list[QuarterCounts]:
        return [*self._fouls.values(), *self._timeouts.values()]
