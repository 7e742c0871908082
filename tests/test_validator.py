"""Tests for the debounced field validator."""

import pytest

from brewops_forms.core import Lifetime, ManualScheduler
from brewops_forms.validation import FieldValidator
from brewops_forms.validation.rules import integer_in_range


@pytest.fixture
def validator(lifetime: Lifetime) -> FieldValidator:
    """Quantity validator with the default 0.6s debounce."""
    return FieldValidator("quantity", integer_in_range("Quantity"), lifetime=lifetime)


class TestDebounce:
    """Tests for debounce timing."""

    def test_rapid_changes_evaluate_once_with_final_value(
        self, scheduler: ManualScheduler, validator: FieldValidator
    ) -> None:
        """Changes inside the debounce window collapse into one evaluation."""
        validator.change("1")
        scheduler.advance(0.2)
        validator.change("10")
        scheduler.advance(0.2)
        validator.change("1000000")

        scheduler.advance(0.5)
        assert validator.evaluations == 0
        assert validator.error is None
        assert validator.pending

        scheduler.advance(0.2)
        assert validator.evaluations == 1
        assert validator.error == "Quantity cannot exceed 999999"
        assert not validator.pending

    def test_at_most_one_pending_evaluation(
        self, scheduler: ManualScheduler, validator: FieldValidator
    ) -> None:
        for value in ("1", "12", "123", "1234"):
            validator.change(value)

        assert scheduler.pending == 1

    def test_valid_value_clears_error(
        self, scheduler: ManualScheduler, validator: FieldValidator
    ) -> None:
        validator.change("0")
        scheduler.advance(1.0)
        assert validator.error == "Quantity must be a positive number"

        validator.change("500")
        scheduler.advance(1.0)
        assert validator.error is None


class TestTouchState:
    """Tests for touched/untouched behaviour."""

    def test_untouched_field_never_validates(
        self, scheduler: ManualScheduler, validator: FieldValidator
    ) -> None:
        validator.update("0")

        assert scheduler.pending == 0
        scheduler.advance(5.0)
        assert validator.evaluations == 0
        assert validator.error is None

    def test_blur_validates_immediately(
        self, scheduler: ManualScheduler, validator: FieldValidator
    ) -> None:
        validator.update("0")

        assert validator.blur() == "Quantity must be a positive number"
        assert validator.touched
        assert validator.evaluations == 1
        assert scheduler.pending == 0

    def test_blur_cancels_pending_evaluation(
        self, scheduler: ManualScheduler, validator: FieldValidator
    ) -> None:
        validator.change("0")
        validator.blur()
        scheduler.advance(1.0)

        assert validator.evaluations == 1

    def test_reset_returns_to_untouched(
        self, scheduler: ManualScheduler, validator: FieldValidator
    ) -> None:
        validator.change("0")
        scheduler.advance(1.0)
        validator.change("")
        validator.reset("5")

        assert not validator.touched
        assert validator.error is None
        assert validator.value == "5"
        assert scheduler.pending == 0

    def test_revalidate_ignores_untouched(
        self, scheduler: ManualScheduler, validator: FieldValidator
    ) -> None:
        validator.revalidate()

        assert scheduler.pending == 0


class TestPublishing:
    """Tests for error publishing and cancellation."""

    def test_on_error_receives_results(self, lifetime: Lifetime) -> None:
        published: list[tuple[str, str | None]] = []
        validator = FieldValidator(
            "quantity",
            integer_in_range("Quantity"),
            lifetime=lifetime,
            on_error=lambda name, error: published.append((name, error)),
        )

        validator.blur()
        validator.change("5")
        validator.validate_now()

        assert published == [("quantity", "Quantity is required"), ("quantity", None)]

    def test_cancelled_lifetime_stops_evaluation(
        self, scheduler: ManualScheduler, lifetime: Lifetime, validator: FieldValidator
    ) -> None:
        validator.change("0")
        lifetime.cancel()
        scheduler.advance(1.0)

        assert validator.evaluations == 0
        assert validator.error is None

    def test_custom_delay(self, scheduler: ManualScheduler, lifetime: Lifetime) -> None:
        validator = FieldValidator(
            "quantity", integer_in_range("Quantity"), lifetime=lifetime, delay=2.0
        )
        validator.change("0")

        scheduler.advance(1.5)
        assert validator.evaluations == 0
        scheduler.advance(1.0)
        assert validator.evaluations == 1
