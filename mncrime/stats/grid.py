"""Sparse (year, month) grid of per-category incident counts.

Months are stored as a flat, ordered list of records with a (year, month)
index for lookups. A month that was never fetched has no record at all, so
"no data" never reads as zero incidents.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Tuple

from mncrime.utils.exceptions import GridDataError, MissingDataError
from mncrime.utils.logger_config import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class MonthRecord:
    year: int
    month: int
    counts: Mapping[str, int]

    @property
    def key(self) -> Tuple[int, int]:
        return (self.year, self.month)


class CrimeGrid:
    """
    Per-category monthly incident counts for one area.

    Attributes:
        categories (tuple): category keys every record holds a count for
    """

    def __init__(self, categories: Iterable[str]) -> None:
        self.categories = tuple(categories)
        self._keys: List[Tuple[int, int]] = []
        self._index: Dict[Tuple[int, int], MonthRecord] = {}

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[MonthRecord]:
        for key in self._keys:
            yield self._index[key]

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __repr__(self) -> str:
        return f"CrimeGrid(categories={len(self.categories)}, months={len(self)})"

    def _row_counts(self, row: Mapping[str, Any]) -> Dict[str, int]:
        counts = {}
        for category in self.categories:
            if category not in row or row[category] is None:
                raise GridDataError(
                    f"Row for {row.get('year')}-{row.get('month')} has no count for '{category}'"
                )
            value = int(row[category])
            if value < 0:
                raise GridDataError(
                    f"Negative count {value} for '{category}' in {row.get('year')}-{row.get('month')}"
                )
            counts[category] = value
        return counts

    def put(self, year: int, month: int, counts: Mapping[str, int]) -> None:
        """Replace the whole record for (year, month)."""
        if not 1 <= month <= 12:
            raise GridDataError(f"Month out of range: {month}")
        key = (year, month)
        if key not in self._index:
            bisect.insort(self._keys, key)
        self._index[key] = MonthRecord(year, month, MappingProxyType(dict(counts)))

    def merge(self, rows: Iterable[Mapping[str, Any]]) -> int:
        """
        Merge a batch of fetched rows into the grid.

        Each row replaces the existing record for its (year, month). Fields
        other than year, month and the known categories are ignored.

        Args:
            rows: records carrying year, month and one count per category

        Returns:
            int: number of rows merged

        Raises:
            GridDataError: if a row is missing year/month or a category count
        """
        # Validate the whole batch first so a bad row leaves the grid untouched
        batch = []
        for row in rows:
            try:
                year = int(row["year"])
                month = int(row["month"])
            except (KeyError, TypeError, ValueError) as e:
                logger.error(f"Unusable row, no year/month: {row!r}")
                raise GridDataError(f"Row has no usable year/month: {str(e)}")
            if not 1 <= month <= 12:
                raise GridDataError(f"Month out of range: {month}")
            batch.append((year, month, self._row_counts(row)))

        for year, month, counts in batch:
            self.put(year, month, counts)
        logger.debug(f"Merged {len(batch)} rows, grid now holds {len(self)} months")
        return len(batch)

    def has(self, year: int, month: int) -> bool:
        return (year, month) in self._index

    def record(self, year: int, month: int) -> MonthRecord:
        try:
            return self._index[(year, month)]
        except KeyError:
            raise MissingDataError(f"No data for {year}-{month:02d}") from None

    def get(self, category: str, year: int, month: int) -> int:
        """Count for one cell; raises MissingDataError if the month was never fetched."""
        counts = self.record(year, month).counts
        if category not in counts:
            raise MissingDataError(f"Unknown category '{category}'")
        return counts[category]

    def years(self) -> List[int]:
        return sorted({year for year, _ in self._keys})

    def months(self, year: int) -> List[int]:
        return [m for y, m in self._keys if y == year]

    def month_count(self, year: int) -> int:
        return len(self.months(year))

    def year_total(self, category: str, year: int) -> int:
        """Sum of the months present for a year; absent months add nothing."""
        return sum(self.get(category, year, month) for month in self.months(year))

    def filter_range(self, year1: int, month1: int, year2: int, month2: int) -> "CrimeGrid":
        """
        Sub-grid for the window after (year1, month1) up to and including (year2, month2).

        A record (y, m) is kept when y == year1 and m > month1, or y == year2 and
        m <= month2, or, for spans of more than one year, year1 < y < year2.
        """
        filtered = CrimeGrid(self.categories)
        for record in self:
            y, m = record.key
            if ((y == year1 and m > month1)
                    or (y == year2 and m <= month2)
                    or ((year2 - year1) > 1 and year1 < y < year2)):
                filtered.put(y, m, record.counts)
        return filtered
