"""Derived crime statistics: counts, rates per 1,000 residents, changes and yearly series."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Tuple

from mncrime.signals import CategoryContext
from mncrime.stats.grid import CrimeGrid
from mncrime.stats.months import month_label, previous_month
from mncrime.utils.exceptions import MissingDataError
from mncrime.utils.logger_config import setup_logger

logger = setup_logger(__name__)

# Percent change from zero is undefined; dividing by 0.5 makes 0 -> 1 read as +100%.
ZERO_CHANGE_DENOMINATOR = 0.5
PER_RESIDENTS = 1000


@dataclass
class CategoryStats:
    incidents_month: Optional[int]
    rate_month: Optional[float]
    change_last_month: Optional[float]
    change_month_last_year: Optional[float]

    def to_dict(self) -> dict:
        return {
            "incidents_month": self.incidents_month,
            "rate_month": self.rate_month,
            "change_last_month": self.change_last_month,
            "change_month_last_year": self.change_month_last_year,
        }


def _rate(crimes: float, population: Optional[float]) -> float:
    population = population if population else 1
    return crimes / (population / PER_RESIDENTS)


class StatsEngine:
    """
    Statistics over a CrimeGrid relative to a fixed "now".

    Every method takes an optional category, falling back to the current
    category of the shared CategoryContext, and optional year/month, falling
    back to the current year and month.

    Attributes:
        grid (CrimeGrid): incident counts
        population (Mapping[int, float]): estimated population by year
        current_year (int): year treated as "now"
        current_month (int): month treated as "now"
    """

    def __init__(
        self,
        grid: CrimeGrid,
        population: Mapping[int, float],
        current_year: int,
        current_month: int,
        category_context: Optional[CategoryContext] = None,
    ) -> None:
        self.grid = grid
        self.population = population
        self.current_year = current_year
        self.current_month = current_month
        self.category_context = category_context or CategoryContext()
        self.last_month_year, self.last_month_month = previous_month(current_year, current_month)

    def _category(self, category: Optional[str]) -> str:
        if category is None:
            category = self.category_context.category
        if category is None:
            raise ValueError("No category given and no current category set")
        return category

    def monthly_count(self, category: Optional[str] = None, year: Optional[int] = None,
                      month: Optional[int] = None) -> int:
        year = self.current_year if year is None else year
        month = self.current_month if month is None else month
        return self.grid.get(self._category(category), year, month)

    def yearly_count(self, category: Optional[str] = None, year: Optional[int] = None) -> int:
        year = self.current_year if year is None else year
        return self.grid.year_total(self._category(category), year)

    def monthly_rate(self, category: Optional[str] = None, year: Optional[int] = None,
                     month: Optional[int] = None) -> float:
        year = self.current_year if year is None else year
        crimes = self.monthly_count(category, year, month)
        return _rate(crimes, self.population.get(year))

    def yearly_rate(self, category: Optional[str] = None, year: Optional[int] = None) -> float:
        year = self.current_year if year is None else year
        crimes = self.yearly_count(category, year)
        return _rate(crimes, self.population.get(year))

    def month_change(self, category: Optional[str], year1: int, month1: int,
                     year2: Optional[int] = None, month2: Optional[int] = None) -> float:
        """Relative change from (year1, month1) to (year2, month2), 1.0 meaning +100%."""
        crime1 = self.monthly_count(category, year1, month1)
        crime2 = self.monthly_count(category, year2, month2)
        return (crime2 - crime1) / (ZERO_CHANGE_DENOMINATOR if crime1 == 0 else crime1)

    def trailing_year_series(self, category: Optional[str] = None, years: int = 1) -> List[Tuple[str, int]]:
        """(month label, count) pairs for the 12 months ending at the current month, `years` back."""
        category = self._category(category)
        filtered = self.grid.filter_range(
            self.current_year - years, self.current_month,
            self.current_year - (years - 1), self.current_month,
        )
        return [(month_label(record.month), filtered.get(category, record.year, record.month))
                for record in filtered]

    def min_full_year(self) -> Optional[int]:
        """Earliest year with all 12 months in the grid."""
        full = [year for year in self.grid.years() if self.grid.month_count(year) == 12]
        return min(full) if full else None

    def year_to_date_history(self, category: Optional[str] = None) -> List[Tuple[str, int]]:
        """Incidents up to the current month, for every year since the first complete one."""
        category = self._category(category)
        min_year = self.min_full_year()
        if min_year is None:
            logger.debug("No complete year in grid, year-to-date history is empty")
            return []

        data = []
        for year in self.grid.years():
            if year < min_year:
                continue
            incidents = sum(
                self.grid.get(category, year, month)
                for month in self.grid.months(year)
                if month <= self.current_month
            )
            data.append((str(year), incidents))
        return data

    def annual_rate_series(self, category: Optional[str] = None) -> List[Tuple[str, float]]:
        """Yearly rate for each year from the first complete one up to the last finished year."""
        category = self._category(category)
        min_year = self.min_full_year()
        if min_year is None:
            return []
        # The current year only counts once December is in
        max_year = self.current_year if self.current_month == 12 else self.current_year - 1
        return [
            (str(year), self.yearly_rate(category, year))
            for year in self.grid.years()
            if min_year <= year <= max_year
        ]

    def _or_none(self, func, *args):
        try:
            return func(*args)
        except MissingDataError as e:
            logger.debug(f"{func.__name__}{args}: {e}")
            return None

    def category_stats(self, category: str) -> CategoryStats:
        return CategoryStats(
            incidents_month=self._or_none(self.monthly_count, category),
            rate_month=self._or_none(self.monthly_rate, category),
            change_last_month=self._or_none(
                self.month_change, category, self.last_month_year, self.last_month_month),
            change_month_last_year=self._or_none(
                self.month_change, category, self.current_year - 1, self.current_month),
        )

    def snapshot(self, categories: Iterable[str]) -> dict:
        """Current-month stats for each category; values are None where the grid has no data."""
        return {category: self.category_stats(category) for category in categories}
