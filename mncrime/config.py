"""
Runtime settings, read from the environment (and a .env file when present).

Variables:
    MNCRIME_DATA_URL: query URL template with a [[[QUERY]]] placeholder
    MNCRIME_CURRENT_YEAR, MNCRIME_CURRENT_MONTH: the month treated as "now"
    MNCRIME_POPULATION_2000, MNCRIME_POPULATION_2010: city census counts
    MNCRIME_REQUEST_RETRIES, MNCRIME_RATE_LIMIT: remote request behaviour
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import date
from typing import Mapping, Optional

from dotenv import load_dotenv

from mncrime.data.remote import DATA_QUERY_BASE
from mncrime.utils.crime_categories import DEFAULT_CATEGORIES, CategoryInfo
from mncrime.utils.exceptions import ConfigError
from mncrime.utils.logger_config import setup_logger

logger = setup_logger(__name__)

# Minneapolis decennial census counts
CITY_POPULATION = {2000: 382618, 2010: 382578}


@dataclass(frozen=True)
class Settings:
    current_year: int
    current_month: int
    data_url: str = DATA_QUERY_BASE
    population: Mapping[int, float] = field(default_factory=lambda: dict(CITY_POPULATION))
    categories: Mapping[str, CategoryInfo] = field(default_factory=lambda: DEFAULT_CATEGORIES)
    request_retries: int = 3
    rate_limit: float = 1.0

    def __post_init__(self) -> None:
        if not 1 <= self.current_month <= 12:
            raise ConfigError(f'Current month must be 1-12, got {self.current_month}')
        if self.request_retries < 1:
            raise ConfigError(f'Request retries must be at least 1, got {self.request_retries}')
        if '[[[QUERY]]]' not in self.data_url:
            raise ConfigError('Data URL must contain the [[[QUERY]]] placeholder')
        for year in (2000, 2010):
            if year not in self.population:
                raise ConfigError(f'Missing {year} population anchor')


def _env_number(name: str, default, cast):
    raw = os.environ.get(name)
    if raw is None or raw == '':
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigError(f'{name} is not a valid {cast.__name__}: {raw!r}')


def load_settings(env_file: Optional[str] = None, today: Optional[date] = None) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        env_file (str): optional path of a .env file to load first
        today (date): date used for the current year/month defaults

    Returns:
        Settings: validated settings

    Raises:
        ConfigError: when a variable can't be parsed or is out of range
    """
    load_dotenv(env_file)
    today = today or date.today()

    population = {
        2000: _env_number('MNCRIME_POPULATION_2000', CITY_POPULATION[2000], float),
        2010: _env_number('MNCRIME_POPULATION_2010', CITY_POPULATION[2010], float),
    }
    settings = Settings(
        current_year=_env_number('MNCRIME_CURRENT_YEAR', today.year, int),
        current_month=_env_number('MNCRIME_CURRENT_MONTH', today.month, int),
        data_url=os.environ.get('MNCRIME_DATA_URL') or DATA_QUERY_BASE,
        population=population,
        request_retries=_env_number('MNCRIME_REQUEST_RETRIES', 3, int),
        rate_limit=_env_number('MNCRIME_RATE_LIMIT', 1.0, float),
    )
    logger.debug(f'Loaded settings for {settings.current_year}-{settings.current_month:02d}')
    return settings
