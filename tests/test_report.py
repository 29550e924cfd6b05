import asyncio

import pandas as pd
import pytest

from conftest import FakeClient, month_row
from mncrime import report
from mncrime.areas import AreaAggregate, CitySource, NeighborhoodSource
from mncrime.config import Settings
from mncrime.utils.crime_categories import make_categories
from mncrime.utils.exceptions import ConfigError

CATEGORIES = make_categories({'burglary': 'Burglary', 'robbery': 'Robbery'})


@pytest.fixture
def settings():
    return Settings(current_year=2013, current_month=2, categories=CATEGORIES)


@pytest.fixture
def area():
    rows = [month_row(2012, m, m, 1) for m in range(1, 13)]
    rows += [month_row(2013, 1, 3, 0), month_row(2013, 2, 5, 2)]
    area = AreaAggregate(CitySource(), FakeClient(rows), CATEGORIES, {2000: 1000, 2010: 2000}, 2013, 2)
    asyncio.run(area.fetch_data())
    return area


class TestFrames:
    def test_summary_frame(self, area):
        df = report.summary_frame(area)
        assert list(df['category']) == ['burglary', 'robbery']
        assert list(df['title']) == ['Burglary', 'Robbery']
        assert df.loc[0, 'incidents_month'] == 5

    def test_history_frame(self, area):
        df = report.history_frame(area)
        burglary = df[df['category'] == 'burglary']
        assert list(burglary['year']) == ['2012', '2013']
        assert list(burglary['ytd_incidents']) == [3, 8]
        # 2013 is unfinished, so it has no yearly rate
        assert pd.isna(burglary['annual_rate'].iloc[1])

    def test_write_reports(self, area, tmp_path):
        paths = report.write_reports(area, tmp_path)
        assert all(p.exists() for p in paths)
        assert len(pd.read_csv(paths[0])) == 2


class TestBuildArea:
    def test_city_by_default(self, settings):
        assert isinstance(report.build_area([], settings, FakeClient([])).source, CitySource)

    def test_neighborhood(self, settings):
        area = report.build_area(['phillips', '1000', '2000'], settings, FakeClient([]))
        assert area.source == NeighborhoodSource('phillips')

    def test_neighborhood_needs_population(self, settings):
        with pytest.raises(ConfigError):
            report.build_area(['phillips'], settings, FakeClient([]))
        with pytest.raises(ConfigError):
            report.build_area(['phillips', 'many', '2000'], settings, FakeClient([]))


def test_main_reports_failure(monkeypatch):
    monkeypatch.setenv('MNCRIME_CURRENT_MONTH', '0')
    assert report.main([]) == 1
