"""Cancellable delayed callbacks.

Debounce timers and message-clear timers are expressed as scheduled
tasks so that a form can always cancel its pending work.
"""

import heapq
import itertools
import threading
from collections.abc import Callable
from typing import Protocol, runtime_checkable


@runtime_checkable
class ScheduledTask(Protocol):
    """Handle to a pending delayed callback."""

    def cancel(self) -> None:
        """Cancel the callback if it has not fired yet."""
        ...

    @property
    def cancelled(self) -> bool:
        """Whether cancel() was called before the callback fired."""
        ...


@runtime_checkable
class Scheduler(Protocol):
    """Protocol for anything that can run a callback after a delay."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        """Run callback once after delay seconds.

        Args:
            delay: Delay in seconds.
            callback: Zero-argument callable.

        Returns:
            A handle that can cancel the callback.
        """
        ...


class _TimerTask:
    def __init__(self, timer: threading.Timer) -> None:
        self._timer = timer
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True
        self._timer.cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ThreadingScheduler:
    """Scheduler backed by threading.Timer.

    Callbacks run on daemon timer threads, so anything they touch
    must be safe to update from another thread.
    """

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return _TimerTask(timer)


class ManualTask:
    """Task scheduled on a ManualScheduler."""

    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.fired = False
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler:
    """Scheduler driven by a virtual clock.

    Nothing fires until advance() moves the clock past a task's due
    time. Tasks fire in due-time order, ties in scheduling order.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, ManualTask]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTask:
        task = ManualTask(self.now + delay, callback)
        heapq.heappush(self._queue, (task.due, next(self._counter), task))
        return task

    @property
    def pending(self) -> int:
        """Number of tasks that are neither fired nor cancelled."""
        return sum(1 for _, _, task in self._queue if not task.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward and fire every task that becomes due.

        Callbacks may schedule further tasks; those fire too if they fall
        inside the advanced window.

        Args:
            seconds: How far to move the clock.

        Returns:
            Number of callbacks fired.
        """
        target = self.now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, task = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            self.now = due
            task.fired = True
            task.callback()
            fired += 1
        self.now = target
        return fired
