"""Yearly population estimates from the 2000 and 2010 census counts."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping


FIRST_YEAR = 2000
LAST_YEAR = 2020


def estimate_population(p2000: float, p2010: float, year: int) -> float:
    """Linear estimate for a single year, never below 0."""
    rate = (p2010 - p2000) / 10
    estimate = p2000 + rate * (year - FIRST_YEAR)
    return 0 if estimate < 0 else estimate


def population_years(anchors: Mapping[int, float]) -> Mapping[int, float]:
    """Fill in 2000..2020 from the two census anchors.

    Args:
        anchors: mapping holding at least the 2000 and 2010 counts

    Returns:
        Read-only mapping of year to estimated population
    """
    p2000 = anchors[2000]
    p2010 = anchors[2010]
    table = {
        year: estimate_population(p2000, p2010, year)
        for year in range(FIRST_YEAR, LAST_YEAR + 1)
    }
    return MappingProxyType(table)
