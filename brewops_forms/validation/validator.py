"""Debounced validation for a single form field."""

import logging
import threading
from collections.abc import Callable
from typing import Any

from brewops_forms.core.lifetime import Lifetime
from brewops_forms.core.scheduler import ScheduledTask, ThreadingScheduler
from brewops_forms.validation.rules import Rule

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.6


class FieldValidator:
    """Validates one field after its input has been stable for a delay.

    Checks:
    1. Untouched fields never report an error and never schedule work
    2. Each change to a touched field cancels the pending evaluation and
       schedules a new one (last write wins)
    3. Blur validates immediately, bypassing the debounce

    At most one evaluation is pending at any time.
    """

    def __init__(
        self,
        name: str,
        rule: Rule,
        lifetime: Lifetime | None = None,
        delay: float = DEFAULT_DEBOUNCE_SECONDS,
        value: Any = "",
        on_error: Callable[[str, str | None], None] | None = None,
    ) -> None:
        """Initialize the validator.

        Args:
            name: Field name, used when publishing errors.
            rule: Function returning an error message or None.
            lifetime: Owner of scheduled evaluations. Defaults to a private
                      lifetime on a threading scheduler.
            delay: Debounce delay in seconds.
            value: Initial field value.
            on_error: Optional callback invoked with (name, error) whenever
                      an evaluation publishes a result.
        """
        self.name = name
        self.rule = rule
        self.delay = delay
        self.lifetime = lifetime if lifetime is not None else Lifetime(ThreadingScheduler())
        self.on_error = on_error

        self.value = value
        self.touched = False
        self.error: str | None = None
        self.evaluations = 0

        self._pending: ScheduledTask | None = None
        self._generation = 0
        self._lock = threading.RLock()

    @property
    def pending(self) -> bool:
        """Whether an evaluation is scheduled and has not fired."""
        return self._pending is not None

    def update(self, value: Any, touched: bool | None = None) -> None:
        """Record a new value and/or touch state.

        Args:
            value: The field's current value.
            touched: New touch state, or None to keep the current one.
        """
        with self._lock:
            self.value = value
            if touched is not None:
                self.touched = touched
            if not self.touched:
                self._cancel_pending()
                self._publish(None)
                return
            self._schedule()

    def change(self, value: Any) -> None:
        """User edited the field; editing marks it touched."""
        self.update(value, touched=True)

    def touch(self) -> None:
        self.update(self.value, touched=True)

    def revalidate(self) -> None:
        """Re-run the debounce for the current value, if touched.

        Used when a field this one depends on has changed.
        """
        with self._lock:
            if self.touched:
                self._schedule()

    def blur(self) -> str | None:
        """Field lost focus: mark touched and validate now."""
        with self._lock:
            self.touched = True
            return self.validate_now()

    def validate_now(self) -> str | None:
        """Cancel any pending evaluation and evaluate immediately."""
        with self._lock:
            self._cancel_pending()
            return self._evaluate()

    def reset(self, value: Any = "") -> None:
        """Return to the untouched state with no error."""
        with self._lock:
            self._cancel_pending()
            self.value = value
            self.touched = False
            self._publish(None)

    def _schedule(self) -> None:
        self._cancel_pending()
        generation = self._generation

        def fire() -> None:
            with self._lock:
                # A newer change or a cancel superseded this evaluation
                if generation != self._generation:
                    return
                self._pending = None
                self._evaluate()

        self._pending = self.lifetime.call_later(self.delay, fire)

    def _cancel_pending(self) -> None:
        self._generation += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _evaluate(self) -> str | None:
        self.evaluations += 1
        error = self.rule(self.value) or None
        logger.debug("Validated %s=%r -> %s", self.name, self.value, error or "ok")
        self._publish(error)
        return error

    def _publish(self, error: str | None) -> None:
        self.error = error
        if self.on_error is not None:
            self.on_error(self.name, error)
