"""Buzzer that plays the horn sound when a clock expires."""

from __future__ import annotations

import logging
import shutil
import subprocess
import threading
from pathlib import Path
from typing import Sequence

from hoopclock.core.notifier import ExpiryNotifier

logger = logging.getLogger(__name__)

DEFAULT_PLAYER = ("aplay", "-q")


class Buzzer:
    """Plays a WAV file through an external player without blocking.

    A missing sound file or player binary leaves the buzzer silent: the
    problem is logged once and :meth:`play` becomes a no-op.
    """

    def __init__(self, sound_file: Path | str | None = None, player: Sequence[str] = DEFAULT_PLAYER) -> None:
        self._sound_file = Path(sound_file) if sound_file else None
        self._player = tuple(player)
        self._process: subprocess.Popen | None = None
        self._lock = threading.Lock()
        self._available = self._check_available()

    def is_available(self) -> bool:
        return self._available

    def attach(self, notifier: ExpiryNotifier) -> None:
        """Sound the buzzer whenever *notifier* fires."""
        notifier.subscribe(self.play)

    def play(self) -> bool:
        """Start the horn, cutting off one still in progress.  Returns False if silent."""
        with self._lock:
            if not self._available:
                return False
            if self._process is not None and self._process.poll() is None:
                self._process.terminate()
            try:
                self._process = subprocess.Popen(
                    [*self._player, str(self._sound_file)],
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                )
            except OSError as exc:
                logger.warning("Buzzer player %s failed (%s); buzzer disabled", self._player[0], exc)
                self._available = False
                return False
        return True

    def _check_available(self) -> bool:
        if self._sound_file is None:
            logger.info("No buzzer sound configured; buzzer is silent")
            return False
        if not self._sound_file.is_file():
            logger.warning("Buzzer sound %s not found; buzzer is silent", self._sound_file)
            return False
        if not self._player or shutil.which(self._player[0]) is None:
            logger.warning("Audio player %r not found; buzzer is silent", self._player[:1])
            return False
        return True
