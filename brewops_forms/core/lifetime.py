"""Lifetime tokens tying scheduled work and requests to a form instance."""

import logging
import threading
from collections.abc import Callable

from brewops_forms.core.scheduler import ScheduledTask, Scheduler

logger = logging.getLogger(__name__)


class Lifetime:
    """Tracks everything a form scheduled so close() can cancel it.

    Once cancelled, the lifetime refuses new tasks and tells in-flight
    requests that their result is no longer wanted.
    """

    def __init__(self, scheduler: Scheduler) -> None:
        self._scheduler = scheduler
        self._tasks: list[ScheduledTask] = []
        self._cancelled = False
        self._lock = threading.Lock()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def pending(self) -> int:
        """Number of tasks still tracked, neither fired nor cancelled."""
        with self._lock:
            return len(self._tasks)

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask | None:
        """Schedule a callback owned by this lifetime.

        Returns:
            The scheduled task, or None if the lifetime is already cancelled.
        """
        with self._lock:
            if self._cancelled:
                return None
            # Drop handles cancelled before they fired
            self._tasks = [t for t in self._tasks if not t.cancelled]
            slot: list[ScheduledTask] = []
            task = self._scheduler.call_later(delay, self._guard(callback, slot))
            slot.append(task)
            self._tasks.append(task)
            return task

    def _guard(
        self, callback: Callable[[], None], slot: list[ScheduledTask]
    ) -> Callable[[], None]:
        def run() -> None:
            try:
                if not self._cancelled:
                    callback()
            finally:
                # Forget the task once it has run
                with self._lock:
                    for task in slot:
                        if task in self._tasks:
                            self._tasks.remove(task)

        return run

    def cancel(self) -> None:
        """Cancel every pending task and mark the lifetime as ended."""
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        logger.debug("Lifetime cancelled, %d task(s) dropped", len(tasks))
