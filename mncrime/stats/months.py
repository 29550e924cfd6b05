"""Calendar month helpers."""

from __future__ import annotations

import calendar
from typing import Tuple


def previous_month(year: int, month: int) -> Tuple[int, int]:
    """Return (year, month) for the calendar month before the one given."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month out of range: {month}")
    if month == 1:
        return year - 1, 12
    return year, month - 1


def month_label(month: int) -> str:
    """Short month name, e.g. 3 -> 'Mar'."""
    return calendar.month_abbr[month]
