import unittest
from datetime import datetime, timezone

from foodbank.domain.Visit import UsdaFlag
from foodbank.logic.rows.pipeline import (
    build_rows, day_export_rows, efap_daily_rows, filter_and_sort, format_date, format_time,
)

UTC = timezone.utc


class TestFormatting(unittest.TestCase):

    def test_format_time(self):
        self.assertEqual(format_time(datetime(2024, 3, 2, 9, 5)), "9:05 AM")
        self.assertEqual(format_time(datetime(2024, 3, 2, 0, 30)), "12:30 AM")
        self.assertEqual(format_time(datetime(2024, 3, 2, 12, 0)), "12:00 PM")
        self.assertEqual(format_time(datetime(2024, 3, 2, 23, 59)), "11:59 PM")

    def test_format_date(self):
        self.assertEqual(format_date(datetime(2024, 3, 2)), "Mar 2, 2024")


class TestBuildRows(unittest.TestCase):

    def setUp(self):
        self.clients = {
            "c1": {"id": "c1", "firstName": "Ana", "lastName": "Lopez", "county": "Kent", "zip": "49503"},
            "c2": {"id": "c2", "name": "Bob Van Dyke"},
        }
        self.visits = [
            {"id": "v1", "clientId": "c1", "dateKey": "2024-03-02", "householdSize": 3,
             "usdaFirstTimeThisMonth": True, "visitAt": "2024-03-02T14:05:00Z"},
            {"id": "v2", "clientId": "c2", "dateKey": "2024-03-02", "householdSize": 1,
             "usdaFirstTimeThisMonth": False, "visitAt": "2024-03-02T09:00:00Z",
             "addedAt": "2024-03-02T16:00:00Z", "clientZip": "49504"},
            {"id": "v3", "clientId": "gone", "dateKey": "2024-03-02", "householdSize": 5,
             "clientFirstName": "Cara", "clientLastName": "Diaz", "clientCounty": "Ottawa"},
            {"id": "v4", "dateKey": "2024-03-02", "householdSize": 2},
        ]

    def test_names_and_fallbacks(self):
        rows = build_rows(self.visits, self.clients, tz=UTC)
        self.assertEqual([r.label_name for r in rows], ["Ana Lopez", "Bob Van Dyke", "Cara Diaz", "—"])
        self.assertEqual(rows[0].label_name_lower, "ana lopez")
        self.assertEqual(rows[0].county, "Kent")
        self.assertEqual(rows[1].zip, "49504")
        self.assertEqual(rows[2].county, "Ottawa")

    def test_times(self):
        rows = build_rows(self.visits, self.clients, selected_date="2024-03-02", tz=UTC)
        self.assertEqual(rows[0].local_time, "2:05 PM")
        self.assertEqual(rows[0].display_date_time, "2024-03-02 • 2:05 PM")
        self.assertEqual(rows[0].added_ts, rows[0].visit_ts)
        self.assertEqual(rows[1].added_local_time, "4:00 PM")
        self.assertEqual(rows[1].added_local_date, "Mar 2, 2024")
        self.assertEqual(rows[3].local_time, "")
        self.assertEqual(rows[3].sort_ts, 0.0)

    def test_to_dict(self):
        row = build_rows(self.visits[:1], self.clients, tz=UTC)[0].to_dict()
        self.assertEqual(row["labelName"], "Ana Lopez")
        self.assertEqual(row["visitHousehold"], 3)
        self.assertIs(row["usdaFirstTimeThisMonth"], True)


class TestFilterAndSort(unittest.TestCase):

    def setUp(self):
        visits = [
            {"id": "a", "clientFirstName": "Zed", "householdSize": 2, "usdaFirstTimeThisMonth": True,
             "visitAt": "2024-03-02T10:00:00Z", "clientCounty": "Kent"},
            {"id": "b", "clientFirstName": "amy", "householdSize": 4, "usdaFirstTimeThisMonth": False,
             "visitAt": "2024-03-02T12:00:00Z", "clientZip": "49503"},
            {"id": "c", "clientFirstName": "Max", "householdSize": 2,
             "visitAt": "2024-03-02T11:00:00Z"},
        ]
        self.rows = build_rows(visits, {}, tz=UTC)

    def ids(self, rows):
        return [r.visit_id for r in rows]

    def test_default_is_newest_first(self):
        self.assertEqual(self.ids(filter_and_sort(self.rows)), ["b", "c", "a"])

    def test_usda_filter_excludes_unknown(self):
        self.assertEqual(self.ids(filter_and_sort(self.rows, usda_filter="yes")), ["a"])
        self.assertEqual(self.ids(filter_and_sort(self.rows, usda_filter="no")), ["b"])
        self.assertEqual(self.rows[2].usda_first, UsdaFlag.UNKNOWN)

    def test_search_matches_name_county_and_zip(self):
        self.assertEqual(self.ids(filter_and_sort(self.rows, search_term="AMY")), ["b"])
        self.assertEqual(self.ids(filter_and_sort(self.rows, search_term="kent")), ["a"])
        self.assertEqual(self.ids(filter_and_sort(self.rows, search_term="4950")), ["b"])
        self.assertEqual(filter_and_sort(self.rows, search_term="nobody"), [])

    def test_sort_by_name_and_household(self):
        self.assertEqual(self.ids(filter_and_sort(self.rows, sort_key="name", sort_dir="asc")), ["b", "c", "a"])
        # equal household sizes keep input order in both directions
        self.assertEqual(self.ids(filter_and_sort(self.rows, sort_key="hh", sort_dir="asc")), ["a", "c", "b"])
        self.assertEqual(self.ids(filter_and_sort(self.rows, sort_key="hh", sort_dir="desc")), ["b", "a", "c"])

    def test_unknown_controls_fall_back(self):
        self.assertEqual(
            self.ids(filter_and_sort(self.rows, usda_filter="maybe", sort_key="zip", sort_dir="up")),
            ["b", "c", "a"],
        )

    def test_input_not_mutated(self):
        before = list(self.rows)
        filter_and_sort(self.rows, sort_key="name")
        self.assertEqual(self.rows, before)


class TestExportRows(unittest.TestCase):

    def test_day_export_rows(self):
        rows = day_export_rows(
            [{"id": "v1", "clientId": "c1", "dateKey": "2024-03-02", "householdSize": 3,
              "usdaFirstTimeThisMonth": True, "visitAt": {"seconds": 1709388000}}],
            {"c1": {"id": "c1", "firstName": "Ana", "lastName": "Lopez", "address": "1 Main St", "zip": "49503"}},
        )
        self.assertEqual(rows[0]["visitAtISO"], "2024-03-02T14:00:00Z")
        self.assertEqual(rows[0]["address"], "1 Main St")
        self.assertEqual(rows[0]["zip"], "49503")
        self.assertIs(rows[0]["usdaFirstTimeThisMonth"], True)
        self.assertEqual(rows[0]["usdaCount"], "")

    def test_efap_daily_rows(self):
        rows = build_rows([{"clientFirstName": "Ana", "householdSize": 2, "usdaFirstTimeThisMonth": False}], tz=UTC)
        self.assertEqual(efap_daily_rows(rows), [
            {"name": "Ana", "county": "", "zip": "", "householdSize": 2, "firstTime": False},
        ])


if __name__ == '__main__':
    unittest.main()
