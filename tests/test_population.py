import numpy as np

from mncrime.stats.population import estimate_population, population_years


class TestPopulation:
    def test_anchor_years_are_exact(self):
        table = population_years({2000: 382618, 2010: 382578})
        assert table[2000] == 382618
        assert np.isclose(table[2010], 382578)

    def test_covers_2000_to_2020(self):
        table = population_years({2000: 1000, 2010: 2000})
        assert sorted(table) == list(range(2000, 2021))

    def test_linear_in_year(self):
        table = population_years({2000: 1000, 2010: 2000})
        steps = [table[y + 1] - table[y] for y in range(2000, 2020)]
        assert np.allclose(steps, 100)
        assert np.isclose(table[2020], 3000)

    def test_never_negative(self):
        table = population_years({2000: 100, 2010: 0})
        assert table[2020] == 0
        assert all(v >= 0 for v in table.values())
        assert estimate_population(100, 0, 2015) == 0

    def test_table_is_read_only(self):
        table = population_years({2000: 1, 2010: 2})
        try:
            table[2021] = 5
        except TypeError:
            pass
        else:
            raise AssertionError('population table should be immutable')
