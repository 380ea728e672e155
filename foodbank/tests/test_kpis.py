import unittest

from foodbank.logic.calendar.dates import calendar_grid
from foodbank.logic.reporting.aggregation import aggregate
from foodbank.logic.reporting.kpis import day_totals, monthly_summary, shade_scale, usda_split, usda_units, visits_per_day


class TestMonthKpis(unittest.TestCase):

    def setUp(self):
        self.visits = [
            {"clientId": "a", "dateKey": "2024-03-02", "householdSize": 3, "usdaFirstTimeThisMonth": True},
            {"clientId": "b", "dateKey": "2024-03-02", "householdSize": 1, "usdaFirstTimeThisMonth": False},
            {"clientId": "c", "dateKey": "2024-03-05", "householdSize": 4, "usdaCount": 2},
            {"clientId": "d", "dateKey": "2024-03-05", "householdSize": 2},
        ]

    def test_usda_units(self):
        self.assertEqual([usda_units(v) for v in self.visits], [1, 0, 2, 0])

    def test_day_totals(self):
        self.assertEqual(day_totals(self.visits[:2]), {"count": 2, "households": 4, "usdaYes": 1})
        self.assertEqual(day_totals([]), {"count": 0, "households": 0, "usdaYes": 0})

    def test_visits_per_day(self):
        series = visits_per_day(aggregate(self.visits))
        self.assertEqual(series, [
            {"date": "03-02", "visits": 2, "people": 4},
            {"date": "03-05", "visits": 2, "people": 6},
        ])

    def test_usda_split_counts_unknown_as_no(self):
        self.assertEqual(usda_split(self.visits), {"yes": 1, "no": 3})

    def test_shade_scale(self):
        agg = aggregate(self.visits)
        shade = shade_scale(agg, calendar_grid(2024, 2), by="persons")
        self.assertAlmostEqual(shade["2024-03-05"], 0.28)
        self.assertAlmostEqual(shade["2024-03-02"], 0.06 + (4 / 6) * 0.22)
        self.assertAlmostEqual(shade["2024-03-10"], 0.06)
        self.assertEqual(len(shade), len(calendar_grid(2024, 2)))

    def test_shade_scale_empty_month(self):
        shade = shade_scale(aggregate([]), calendar_grid(2024, 2))
        self.assertTrue(all(abs(v - 0.06) < 1e-9 for v in shade.values()))

    def test_monthly_summary(self):
        summary = monthly_summary(self.visits)
        self.assertEqual(summary["rows"], [
            {"date": "2024-03-02", "households": 4, "usdaUnits": 1},
            {"date": "2024-03-05", "households": 6, "usdaUnits": 2},
        ])
        self.assertEqual(summary["totalUsda"], 3)
        self.assertEqual(summary["totalHouseholds"], 10)
        self.assertEqual(summary["averagePerDay"], 1.5)

    def test_monthly_summary_empty(self):
        self.assertEqual(monthly_summary([])["averagePerDay"], 0)


if __name__ == '__main__':
    unittest.main()
