import pytest

from conftest import CATEGORIES, month_row
from mncrime.stats.grid import CrimeGrid
from mncrime.utils.exceptions import GridDataError, MissingDataError


class TestMerge:
    def test_failed_batch_leaves_grid_untouched(self):
        grid = CrimeGrid(CATEGORIES)
        grid.merge([month_row(2012, 3, 7, 2)])
        with pytest.raises(GridDataError):
            grid.merge([month_row(2012, 3, 1, 0), {'year': 2012, 'month': 4, 'burglary': 4}])
        assert grid.get('burglary', 2012, 3) == 7
        assert not grid.has(2012, 4)
        assert len(grid) == 1

    def test_bad_month_in_batch_leaves_grid_untouched(self):
        grid = CrimeGrid(CATEGORIES)
        with pytest.raises(GridDataError):
            grid.merge([month_row(2012, 3, 1), month_row(2012, 13, 1)])
        assert len(grid) == 0

    def test_merge_and_get(self):
        grid = CrimeGrid(CATEGORIES)
        assert grid.merge([month_row(2012, 3, 7, 2)]) == 1
        assert grid.get('burglary', 2012, 3) == 7
        assert grid.get('robbery', 2012, 3) == 2

    def test_merge_replaces_whole_month(self):
        grid = CrimeGrid(CATEGORIES)
        grid.merge([month_row(2012, 3, 7, 2)])
        grid.merge([month_row(2012, 3, 1, 0)])
        assert grid.get('burglary', 2012, 3) == 1
        assert grid.get('robbery', 2012, 3) == 0
        assert len(grid) == 1

    def test_extra_fields_ignored(self):
        grid = CrimeGrid(CATEGORIES)
        grid.merge([month_row(2012, 3, 7, 2, neighborhood_key='phillips', notes='')])
        assert set(grid.record(2012, 3).counts) == set(CATEGORIES)

    def test_string_values_are_coerced(self):
        grid = CrimeGrid(CATEGORIES)
        grid.merge([{'year': '2012', 'month': '3', 'burglary': '4', 'robbery': 1}])
        assert grid.get('burglary', 2012, 3) == 4

    def test_missing_category_rejected(self):
        grid = CrimeGrid(CATEGORIES)
        with pytest.raises(GridDataError):
            grid.merge([{'year': 2012, 'month': 3, 'burglary': 4}])

    def test_missing_year_rejected(self):
        grid = CrimeGrid(CATEGORIES)
        with pytest.raises(GridDataError):
            grid.merge([{'month': 3, 'burglary': 4, 'robbery': 1}])

    def test_negative_count_rejected(self):
        grid = CrimeGrid(CATEGORIES)
        with pytest.raises(GridDataError):
            grid.merge([month_row(2012, 3, -1)])

    def test_iteration_is_chronological(self):
        grid = CrimeGrid(CATEGORIES)
        grid.merge([month_row(2013, 1, 1), month_row(2012, 12, 1), month_row(2012, 2, 1)])
        assert [r.key for r in grid] == [(2012, 2), (2012, 12), (2013, 1)]


class TestLookups:
    def test_missing_month_is_not_zero(self):
        grid = CrimeGrid(CATEGORIES)
        grid.merge([month_row(2012, 3, 0)])
        assert grid.get('burglary', 2012, 3) == 0
        with pytest.raises(MissingDataError):
            grid.get('burglary', 2012, 4)
        with pytest.raises(MissingDataError):
            grid.get('burglary', 2011, 3)

    def test_missing_data_is_a_key_error(self):
        grid = CrimeGrid(CATEGORIES)
        with pytest.raises(KeyError):
            grid.get('burglary', 2012, 4)

    def test_year_total_skips_absent_months(self):
        grid = CrimeGrid(CATEGORIES)
        grid.merge([month_row(2012, 1, 5), month_row(2012, 6, 3)])
        assert grid.year_total('burglary', 2012) == 8
        assert grid.year_total('burglary', 2011) == 0

    def test_years_and_month_count(self, full_grid):
        assert full_grid.years() == [2019, 2020, 2021]
        assert full_grid.month_count(2020) == 12
        assert full_grid.months(2030) == []


class TestFilterRange:
    def test_one_year_window(self, full_grid):
        filtered = full_grid.filter_range(2020, 6, 2021, 6)
        keys = [r.key for r in filtered]
        expected = [(2020, m) for m in range(7, 13)] + [(2021, m) for m in range(1, 7)]
        assert keys == expected

    def test_december_window_is_single_year(self, full_grid):
        filtered = full_grid.filter_range(2019, 12, 2020, 12)
        assert [r.key for r in filtered] == [(2020, m) for m in range(1, 13)]

    def test_multi_year_span_includes_middle_years(self, full_grid):
        filtered = full_grid.filter_range(2019, 6, 2021, 6)
        assert len(filtered) == 24
        assert filtered.has(2020, 1)
        assert not filtered.has(2019, 6)
        assert filtered.has(2021, 6)
        assert not filtered.has(2021, 7)

    def test_filtered_grid_is_independent(self, full_grid):
        filtered = full_grid.filter_range(2020, 6, 2021, 6)
        filtered.put(2021, 1, {'burglary': 99, 'robbery': 0})
        assert full_grid.get('burglary', 2021, 1) == 1
