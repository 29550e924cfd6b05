"""
Remote crime data store client.

The aggregate Minneapolis crime table lives in a hosted SQLite datastore that
takes a raw SQL query in the URL and answers with a JSON list of row dicts.
This module builds those queries and fetches rows with retry logic, then
normalises the payload so every row carries integer year, month and
per-category counts.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Iterable, List, Mapping, Optional
from urllib.parse import quote

import pandas as pd
import requests

from mncrime.utils.exceptions import DataFetchError
from mncrime.utils.logger_config import setup_logger

logger = setup_logger(__name__)

DATA_QUERY_BASE = (
    'https://api.scraperwiki.com/api/1.0/datastore/sqlite'
    '?format=jsondict&name=minneapolis_aggregate_crime_data&query=[[[QUERY]]]'
)
# Rows the scraper back-filled carry this note and would double count
DATA_QUERY_WHERE = "notes NOT LIKE 'Added to%'"

# Characters encodeURI leaves alone, besides the ones quote() always keeps
_URI_SAFE = ";,/?:@&=+$!*'()#"


def build_query_url(query: str, base: str = DATA_QUERY_BASE) -> str:
    return base.replace('[[[QUERY]]]', quote(query, safe=_URI_SAFE))


def _category_sums(categories: Iterable[str]) -> str:
    return ''.join(f', SUM({c}) AS {c}' for c in categories)


def build_city_query(categories: Iterable[str]) -> str:
    """City totals per month, summed over every neighborhood."""
    query = [
        'SELECT year, month',
        _category_sums(categories),
        f' FROM swdata WHERE {DATA_QUERY_WHERE}',
        ' GROUP BY year, month ORDER BY year DESC, month DESC',
    ]
    return ''.join(query)


def build_previous_years_query(categories: Iterable[str], year: int, month: int, years: int = 1) -> str:
    """
    City totals per month for the `years` years leading up to (year, month).

    Both boundary months are included: (year - years, month) and (year, month).
    """
    query = [
        'SELECT year, month',
        _category_sums(categories),
        f' FROM swdata WHERE {DATA_QUERY_WHERE}',
        f' AND ((year = {year} AND month <= {month}) ',
    ]
    if years > 1:
        query.append(f' OR (year < {year} AND year > {year - years})')
    query.append(f' OR (year = {year - years} AND month >= {month}))')
    query.append(' GROUP BY year, month ORDER BY year DESC, month DESC')
    return ''.join(query)


def build_neighborhood_query(neighborhood_key: str) -> str:
    """Every row for one neighborhood."""
    key = str(neighborhood_key).replace("'", "''")
    query = [
        f'SELECT * FROM swdata WHERE {DATA_QUERY_WHERE}',
        f" AND neighborhood_key = '{key}' ",
        ' ORDER BY year DESC, month DESC',
    ]
    return ''.join(query)


def normalize_rows(payload: List[Mapping[str, Any]], categories: Iterable[str]) -> List[dict]:
    """
    Coerce a JSON payload into rows of integer year, month and category counts.

    Rows without a usable year or month are dropped. A null category count
    means the datastore summed no incidents and becomes 0; a category column
    missing from the payload altogether raises DataFetchError.
    """
    categories = list(categories)
    df = pd.DataFrame.from_records(payload)
    if df.empty:
        return []
    missing = [col for col in ('year', 'month') if col not in df.columns]
    if missing:
        raise DataFetchError(f'Payload has no {", ".join(missing)} column')

    df['year'] = pd.to_numeric(df['year'], errors='coerce')
    df['month'] = pd.to_numeric(df['month'], errors='coerce')
    invalid = df[['year', 'month']].isna().any(axis=1) | ~df['month'].between(1, 12)
    if invalid.any():
        logger.warning(f'Dropping {int(invalid.sum())} rows with invalid year/month')
        df = df[~invalid]

    absent = [category for category in categories if category not in df.columns]
    if absent:
        # a column the store never returned is missing data, not zero incidents
        raise DataFetchError(f'Payload has no count column for {", ".join(absent)}')

    for category in categories:
        # NULL from SUM() means no incidents were recorded
        df[category] = pd.to_numeric(df[category], errors='coerce').fillna(0).astype('int64')
    df['year'] = df['year'].astype('int64')
    df['month'] = df['month'].astype('int64')

    return df[['year', 'month'] + categories].to_dict('records')


class RemoteDataClient:
    """
    Fetches crime rows from the remote datastore.

    Attributes:
        base_url (str): URL template with a [[[QUERY]]] placeholder
        retries (int): number of attempts per query
        rate_limit (float): base wait between retries in seconds
        timeout (float): request timeout in seconds

    Example:
        >>> client = RemoteDataClient()
        >>> rows = asyncio.run(client.fetch_rows(build_city_query(['burglary']), ['burglary']))
    """

    def __init__(
        self,
        base_url: str = DATA_QUERY_BASE,
        retries: int = 3,
        rate_limit: float = 1.0,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url
        self.retries = retries
        self.rate_limit = rate_limit
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings) -> 'RemoteDataClient':
        return cls(base_url=settings.data_url, retries=settings.request_retries, rate_limit=settings.rate_limit)

    def _make_request(self, url: str) -> requests.Response:
        """
        GET the url with retry logic.

        Raises:
            DataFetchError: when every attempt fails
        """
        last_error = None
        for attempt in range(self.retries):
            try:
                logger.debug(f'Requesting: {url}')
                response = self.session.get(url, timeout=self.timeout)

                if response.status_code == 200:
                    return response

                elif response.status_code == 429:  # Rate limit
                    wait_time = min((attempt + 1) * self.rate_limit * 2, 60)
                    logger.warning(f'Rate Limit Exceeded, waiting for {wait_time}s')
                    last_error = 'rate limited'
                    time.sleep(wait_time)
                else:
                    logger.error(f'Request failed with status {response.status_code}: {response.text}')
                    last_error = f'status {response.status_code}'
                    time.sleep(self.rate_limit * (attempt + 1))  # Progressive backoff

            except requests.exceptions.RequestException as e:
                logger.error(f'Network error (attempt {attempt + 1}): {str(e)}')
                last_error = str(e)
                if attempt < self.retries - 1:
                    time.sleep(self.rate_limit * (attempt + 1))

        raise DataFetchError(f'Request failed after {self.retries} attempts: {last_error}')

    def fetch_rows_sync(self, query: str, categories: Iterable[str]) -> List[dict]:
        response = self._make_request(build_query_url(query, self.base_url))
        try:
            payload = response.json()
        except ValueError as e:
            raise DataFetchError(f'Response is not JSON: {str(e)}')
        if not isinstance(payload, list):
            # the datastore reports query errors as a JSON object
            raise DataFetchError(f'Unexpected payload: {str(payload)[:200]}')
        rows = normalize_rows(payload, categories)
        logger.info(f'Fetched {len(rows)} rows')
        return rows

    async def fetch_rows(self, query: str, categories: Iterable[str]) -> List[dict]:
        """Fetch rows without blocking the event loop."""
        return await asyncio.to_thread(self.fetch_rows_sync, query, list(categories))
