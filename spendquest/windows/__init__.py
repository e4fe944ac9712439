"""Time window package."""

from spendquest.windows.calendar_windows import (
    Granularity,
    granularity_for,
    in_window,
    local_date,
    to_local,
    window_bounds,
)

__all__ = [
    "Granularity",
    "granularity_for",
    "in_window",
    "local_date",
    "to_local",
    "window_bounds",
]
