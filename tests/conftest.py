"""Shared fixtures: a controllable monotonic clock for loop-driven code."""

from __future__ import annotations

from typing import Iterator
from unittest.mock import patch

import pytest


class FakeClock:
    """Stands in for the ``time`` module; ``sleep`` advances ``monotonic``."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.interrupt_at: float | None = None
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        if self.interrupt_at is not None and self.now >= self.interrupt_at:
            raise KeyboardInterrupt


@pytest.fixture()
def fake_clock() -> Iterator[FakeClock]:
    """Patch the timer and ticker modules onto one FakeClock."""
    clock = FakeClock()
    with patch("hoopclock.core.timer.time", clock), patch("hoopclock.core.ticker.time", clock):
        yield clock
