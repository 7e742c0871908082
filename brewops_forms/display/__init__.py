"""Display helpers for lists and dashboard charts."""

from brewops_forms.display.charts import scale_to_max, series_heights, total
from brewops_forms.display.window import DEFAULT_PAGE_SIZE, DisplayWindow

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "DisplayWindow",
    "scale_to_max",
    "series_heights",
    "total",
]
