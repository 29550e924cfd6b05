"""Time-series statistics for monthly crime counts."""

from .population import population_years, estimate_population
from .months import previous_month, month_label
from .grid import CrimeGrid, MonthRecord
from .engine import StatsEngine, CategoryStats

__all__ = [
    'population_years',
    'estimate_population',
    'previous_month',
    'month_label',
    'CrimeGrid',
    'MonthRecord',
    'StatsEngine',
    'CategoryStats',
]
