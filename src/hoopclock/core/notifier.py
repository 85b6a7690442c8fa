"""Expiry notifier: fire-and-forget delivery of a clock's expiry signal."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from typing import Callable

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class ExpiryNotifier:
    """Delivers a zero-argument "expired" signal to its listeners.

    :meth:`fire` never blocks the caller: delivery runs on a single worker
    thread.  At most one firing waits for delivery at any time; a firing
    that arrives while another is still queued is dropped.  A listener that
    raises is logged and the remaining listeners still run.
    """

    def __init__(self, name: str = "clock", executor: Executor | None = None) -> None:
        self._name = name
        self._listeners: list[Listener] = []
        self._owns_executor = executor is None
        self._executor: Executor = (
            executor
            if executor is not None
            else ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"expiry-{name}")
        )
        self._pending: Future | None = None
        self._lock = threading.Lock()

    def subscribe(self, listener: Listener) -> None:
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

    def fire(self) -> bool:
        """Schedule delivery to every listener.  Returns False if dropped."""
        with self._lock:
            pending = self._pending
            if pending is not None and not pending.running() and not pending.done():
                logger.debug("%s expiry already pending; dropping duplicate", self._name)
                return False
            try:
                self._pending = self._executor.submit(self._deliver, list(self._listeners))
            except RuntimeError:
                logger.warning("%s expiry notifier is closed; signal dropped", self._name)
                return False
        return True

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the pending delivery.  Returns True once nothing is pending."""
        pending = self._pending
        if pending is None:
            return True
        done, _ = wait_futures([pending], timeout=timeout)
        return bool(done)

    def close(self) -> None:
        """Finish any pending delivery and release the worker thread."""
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def _deliver(self, listeners: list[Listener]) -> None:
        for listener in listeners:
            try:
                listener()
            except Exception:
                logger.exception("%s expiry listener %r failed", self._name, listener)
