"""Bar-chart scaling for dashboard series."""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any


def scale_to_max(values: Iterable[float | int | None]) -> list[float]:
    """Scale values to percentages of the largest one.

    Missing values count as zero. An empty or all-zero series is scaled
    against 1 so no division by zero occurs.

    Args:
        values: Raw series values.

    Returns:
        Bar heights in percent, in input order.
    """
    numbers = [float(v or 0) for v in values]
    peak = max(numbers, default=0.0)
    if peak <= 0:
        peak = 1.0
    return [n / peak * 100.0 for n in numbers]


def series_heights(records: Sequence[Mapping[str, Any]], key: str) -> list[float]:
    """Bar heights for one numeric field of a list of records."""
    return scale_to_max(record.get(key) for record in records)


def total(records: Iterable[Mapping[str, Any]], key: str = "quantity") -> float:
    """Sum a numeric field across records, treating missing values as zero."""
    return sum(float(record.get(key) or 0) for record in records)
