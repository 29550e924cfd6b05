"""
City and neighborhood crime aggregates.

An AreaAggregate owns the CrimeGrid for one area, fills it from the remote
datastore once, and caches the current-month stats snapshot. The city and
neighborhood variants differ only in the query their row source builds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Mapping, Optional, Protocol

from mncrime.data.remote import build_city_query, build_neighborhood_query
from mncrime.signals import CategoryContext, OneShotSignal
from mncrime.stats.engine import CategoryStats, StatsEngine
from mncrime.stats.grid import CrimeGrid
from mncrime.stats.population import population_years
from mncrime.utils.crime_categories import CategoryInfo
from mncrime.utils.logger_config import setup_logger

logger = setup_logger(__name__)


class RowClient(Protocol):
    async def fetch_rows(self, query: str, categories: Iterable[str]) -> List[dict]:
        ...


@dataclass(frozen=True)
class CitySource:
    """Monthly totals summed over the whole city."""

    name: str = "city"

    def query(self, categories: Iterable[str]) -> str:
        return build_city_query(categories)


@dataclass(frozen=True)
class NeighborhoodSource:
    """Every monthly row for one neighborhood."""

    key: str

    @property
    def name(self) -> str:
        return f"neighborhood:{self.key}"

    def query(self, categories: Iterable[str]) -> str:
        return build_neighborhood_query(self.key)


class AreaAggregate:
    """
    Crime counts and derived stats for one area.

    Attributes:
        source: builds the query for this area's rows
        client: fetches rows for a query
        categories (Mapping[str, CategoryInfo]): category metadata
        grid (CrimeGrid): fetched counts
        engine (StatsEngine): stats over the grid
        fetched (bool): whether rows have been merged
        on_fetched (OneShotSignal): fires once after the first merge
        stats (dict): category -> CategoryStats, filled after fetch
    """

    def __init__(
        self,
        source,
        client: RowClient,
        categories: Mapping[str, CategoryInfo],
        population: Mapping[int, float],
        current_year: int,
        current_month: int,
        category_context: Optional[CategoryContext] = None,
    ) -> None:
        self.source = source
        self.client = client
        self.categories = categories
        self.category_context = category_context or CategoryContext()
        self.population = population_years(population)
        self.grid = CrimeGrid(categories.keys())
        self.engine = StatsEngine(
            self.grid, self.population, current_year, current_month, self.category_context)

        self.fetched = False
        self.stats: dict[str, CategoryStats] = {}
        self._stats_computed = False
        self._category_listeners: List[Callable[["AreaAggregate", Optional[str]], Any]] = []

        self.on_fetched = OneShotSignal("fetched")
        self.on_fetched.connect(self.compute_stats)
        self._unsubscribe = self.category_context.subscribe(self._category_changed)

    def __repr__(self) -> str:
        return f"AreaAggregate({self.source.name}, fetched={self.fetched})"

    @property
    def app_category(self) -> Optional[str]:
        return self.category_context.category

    def on_category_change(self, callback: Callable[["AreaAggregate", Optional[str]], Any]) -> None:
        self._category_listeners.append(callback)

    def _category_changed(self, category: Optional[str]) -> None:
        logger.debug(f"{self.source.name}: current category is now {category}")
        for callback in list(self._category_listeners):
            callback(self, category)

    def close(self) -> None:
        """Stop following the shared category context."""
        self._unsubscribe()

    async def fetch_data(self) -> "AreaAggregate":
        """
        Fetch and merge this area's rows, once.

        Later calls return straight away without touching the client. Calls
        made while the first fetch is still pending each issue their own
        request; the fetched signal still fires only once.

        Raises:
            DataFetchError: if the client fails, leaving the aggregate unfetched
        """
        if self.fetched:
            return self

        query = self.source.query(self.categories.keys())
        logger.info(f"Fetching rows for {self.source.name}")
        rows = await self.client.fetch_rows(query, list(self.categories.keys()))
        self.grid.merge(rows)

        if not self.fetched:
            self.fetched = True
            self.on_fetched.emit()
        return self

    def compute_stats(self) -> dict:
        """Fill the stats snapshot; only the first call after fetching does any work."""
        if self._stats_computed or not self.fetched:
            return self.stats
        self.stats = self.engine.snapshot(self.categories.keys())
        self._stats_computed = True
        logger.info(f"Computed stats for {len(self.stats)} categories in {self.source.name}")
        return self.stats


def city(client: RowClient, settings, category_context: Optional[CategoryContext] = None) -> AreaAggregate:
    """City aggregate configured from Settings."""
    return AreaAggregate(
        CitySource(), client, settings.categories, settings.population,
        settings.current_year, settings.current_month, category_context,
    )


def neighborhood(
    key: str,
    population: Mapping[int, float],
    client: RowClient,
    settings,
    category_context: Optional[CategoryContext] = None,
) -> AreaAggregate:
    """Neighborhood aggregate; population anchors are the neighborhood's own."""
    return AreaAggregate(
        NeighborhoodSource(key), client, settings.categories, population,
        settings.current_year, settings.current_month, category_context,
    )
