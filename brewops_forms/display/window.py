"""Paginated display window over already-fetched records."""

from collections.abc import Sequence
from typing import Generic, TypeVar

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10


class DisplayWindow(Generic[T]):
    """The prefix of a record list currently shown, grown in fixed steps.

    Purely a view over data already in memory: no re-fetching, and the
    visible slice is fully determined by (records, count).
    """

    def __init__(
        self,
        records: Sequence[T] = (),
        default: int = DEFAULT_PAGE_SIZE,
        step: int | None = None,
    ) -> None:
        """Initialize the window.

        Args:
            records: The full ordered sequence.
            default: Count shown initially and after collapsing.
            step: Rows added per show_more; defaults to ``default``.
        """
        if default < 1:
            raise ValueError("default must be at least 1")
        self.default = default
        self.step = step if step is not None else default
        if self.step < 1:
            raise ValueError("step must be at least 1")
        self.records: Sequence[T] = records
        self._count = default

    @property
    def total(self) -> int:
        return len(self.records)

    @property
    def display_count(self) -> int:
        """Rows shown; never more than there are records."""
        return min(self._count, self.total)

    @property
    def remaining(self) -> int:
        return self.total - self.display_count

    @property
    def expanded(self) -> bool:
        """Whether every record is shown."""
        return self.display_count >= self.total

    @property
    def has_toggle(self) -> bool:
        """Whether a show more/less control is rendered at all."""
        return self.total > self.default

    def visible(self) -> list[T]:
        return list(self.records[: self.display_count])

    def show_more(self) -> None:
        """Grow by one step, capped at the number of records."""
        if not self.has_toggle:
            return
        self._count = min(self.display_count + self.step, self.total)

    def show_less(self) -> None:
        """Collapse back to the default count."""
        self._count = self.default

    def toggle(self) -> None:
        """Show more, or collapse once everything is shown."""
        if self.expanded:
            self.show_less()
        else:
            self.show_more()

    def reset(self, records: Sequence[T] | None = None) -> None:
        """Collapse, optionally swapping in freshly fetched records."""
        if records is not None:
            self.records = records
        self._count = self.default

    @property
    def label(self) -> str:
        if self.expanded:
            return "Show Less"
        return f"Show More ({self.remaining} remaining)"

    @property
    def summary(self) -> str:
        return f"Showing {self.display_count} of {self.total}"
