import asyncio
import os
import tempfile

import pytest

os.environ.setdefault('MNCRIME_LOG_DIR', tempfile.mkdtemp(prefix='mncrime-logs-'))

from mncrime.stats.grid import CrimeGrid

CATEGORIES = ('burglary', 'robbery')


def month_row(year, month, burglary, robbery=0, **extra):
    return {'year': year, 'month': month, 'burglary': burglary, 'robbery': robbery, **extra}


class FakeClient:
    """Row client that records queries and yields to the loop before answering."""

    def __init__(self, rows, error=None):
        self.rows = rows
        self.error = error
        self.queries = []

    async def fetch_rows(self, query, categories):
        self.queries.append(query)
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return [dict(r) for r in self.rows]


@pytest.fixture
def full_grid():
    """2019-2021 fully populated; burglary = month number, robbery = year offset."""
    grid = CrimeGrid(CATEGORIES)
    grid.merge(
        month_row(year, month, month, year - 2018)
        for year in (2019, 2020, 2021)
        for month in range(1, 13)
    )
    return grid
