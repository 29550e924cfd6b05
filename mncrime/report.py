"""
Crime stats summary report.

Fetches the city (or one neighborhood) and writes:
    reports/crime_summary.csv : current-month stats per category
    reports/crime_history.csv : year-to-date incidents and yearly rate per category

Usage:
    python -m mncrime.report
    python -m mncrime.report <neighborhood_key> <population_2000> <population_2010>
"""

import asyncio
import sys
from pathlib import Path
from typing import List, Optional

import pandas as pd

from mncrime.areas import AreaAggregate, city, neighborhood
from mncrime.config import load_settings
from mncrime.data.remote import RemoteDataClient
from mncrime.utils.crime_categories import category_title
from mncrime.utils.exceptions import ConfigError, CrimeStatsException
from mncrime.utils.logger_config import setup_logger

logger = setup_logger(__name__)

REPORT_DIR = Path('reports')


def summary_frame(area: AreaAggregate) -> pd.DataFrame:
    rows = []
    for key, stats in area.stats.items():
        rows.append({
            'category': key,
            'title': category_title(area.categories, key),
            **stats.to_dict(),
        })
    return pd.DataFrame(rows)


def history_frame(area: AreaAggregate) -> pd.DataFrame:
    frames = []
    for key in area.categories:
        ytd = pd.DataFrame(area.engine.year_to_date_history(key), columns=['year', 'ytd_incidents'])
        rates = pd.DataFrame(area.engine.annual_rate_series(key), columns=['year', 'annual_rate'])
        merged = ytd.merge(rates, on='year', how='left')
        merged.insert(0, 'category', key)
        frames.append(merged)
    if not frames:
        return pd.DataFrame(columns=['category', 'year', 'ytd_incidents', 'annual_rate'])
    return pd.concat(frames, ignore_index=True)


def write_reports(area: AreaAggregate, out_dir: Path = REPORT_DIR) -> List[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    summary_path = out_dir / 'crime_summary.csv'
    history_path = out_dir / 'crime_history.csv'
    summary_frame(area).to_csv(summary_path, index=False)
    history_frame(area).to_csv(history_path, index=False)
    logger.info(f'Wrote {summary_path} and {history_path}')
    return [summary_path, history_path]


def build_area(argv: List[str], settings, client) -> AreaAggregate:
    if not argv:
        return city(client, settings)
    if len(argv) != 3:
        raise ConfigError('Neighborhood reports need: <neighborhood_key> <population_2000> <population_2010>')
    key, p2000, p2010 = argv
    try:
        population = {2000: float(p2000), 2010: float(p2010)}
    except ValueError:
        raise ConfigError(f'Invalid population anchors: {p2000!r}, {p2010!r}')
    return neighborhood(key, population, client, settings)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main execution function for the summary report
    """
    argv = sys.argv[1:] if argv is None else argv
    try:
        settings = load_settings()
        client = RemoteDataClient.from_settings(settings)
        area = build_area(argv, settings, client)
        logger.info(f'Building crime report for {area.source.name}')
        asyncio.run(area.fetch_data())
        write_reports(area)
    except CrimeStatsException as e:
        logger.error(f'Crime report failed! {str(e)}')
        return 1
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
