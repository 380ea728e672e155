import tempfile
import unittest
from pathlib import Path

from fastapi.testclient import TestClient

from foodbank.api.api_run import app
from foodbank.api.routes.manual_days import get_overlay
from foodbank.infra.ManualDay_Repository import ManualDayRepository
from foodbank.logic.calendar.overlay import ManualDayOverlay

VISITS = [
    {"id": "v1", "clientId": "c1", "dateKey": "2024-03-02", "householdSize": 3, "usdaFirstTimeThisMonth": True},
    {"id": "v2", "clientId": "c1", "dateKey": "2024-03-15", "householdSize": 3, "usdaFirstTimeThisMonth": True},
    {"id": "v3", "clientId": "c2", "dateKey": "2024-03-15", "householdSize": 2, "usdaFirstTimeThisMonth": False},
]
CLIENTS = [
    {"id": "c1", "firstName": "Maria", "lastName": "Lopez", "zip": "49503"},
    {"id": "c2", "firstName": "Carmen", "lastName": "Marquez"},
]


class TestReportsAPI(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.tmp = tempfile.TemporaryDirectory()
        cls.overlay = ManualDayOverlay(ManualDayRepository(Path(cls.tmp.name) / "manual_days.json"))
        app.dependency_overrides[get_overlay] = lambda: cls.overlay
        cls.client = TestClient(app)

    @classmethod
    def tearDownClass(cls):
        app.dependency_overrides.pop(get_overlay, None)
        cls.tmp.cleanup()

    def test_calendar(self):
        resp = self.client.get('/api/calendar/2024-02')
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data['label'], "February 2024")
        self.assertEqual((data['startKey'], data['endKey']), ("2024-02-01", "2024-02-29"))
        self.assertEqual((data['prev'], data['next']), ("2024-01", "2024-03"))
        self.assertEqual(len(data['weeks']), 5)
        self.assertEqual(data['weeks'][0][0], "2024-01-28")
        self.assertEqual(data['weeks'][-1][-1], "2024-03-02")

    def test_calendar_rejects_bad_month(self):
        self.assertEqual(self.client.get('/api/calendar/2024-13').status_code, 400)

    def test_aggregate(self):
        resp = self.client.post('/api/aggregate', json={"visits": VISITS, "month_key": "2024-03"})
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data['monthTotals'], {"visits": 3, "persons": 8})
        self.assertEqual(data['unduplicated'], {"households": 1, "persons": 3})
        self.assertEqual(data['byDay']['2024-03-15'], {"visits": 2, "persons": 5, "usdaYes": 1})
        self.assertEqual(data['charts']['usdaPie'], {"yes": 2, "no": 1})
        self.assertAlmostEqual(data['shade']['2024-03-15'], 0.28)
        self.assertEqual(data['summary']['totalUsda'], 2)

    def test_aggregate_validation(self):
        resp = self.client.post('/api/aggregate', json={"visits": [], "month_key": "March"})
        self.assertEqual(resp.status_code, 422)

    def test_aggregate_rejects_impossible_month(self):
        for month_key in ("2024-13", "2024-00"):
            resp = self.client.post('/api/aggregate', json={"visits": VISITS, "month_key": month_key})
            self.assertEqual(resp.status_code, 400, month_key)
            self.assertIn("month must be 01-12", resp.json()['detail'])

    def test_rows(self):
        resp = self.client.post('/api/rows', json={
            "visits": [v for v in VISITS if v['dateKey'] == "2024-03-15"],
            "clients": CLIENTS,
            "sort_key": "name",
            "sort_dir": "asc",
        })
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual([r['labelName'] for r in data['rows']], ["Carmen Marquez", "Maria Lopez"])
        self.assertEqual(data['totals'], {"count": 2, "households": 5, "usdaYes": 1})

        resp = self.client.post('/api/rows', json={"visits": VISITS, "clients": CLIENTS, "usda_filter": "no"})
        self.assertEqual(resp.json()['count'], 1)

    def test_client_search(self):
        resp = self.client.post('/api/clients/search', json={"query": "mar", "clients": CLIENTS})
        data = resp.json()
        self.assertEqual(data['mode'], "ranked")
        self.assertEqual([c['id'] for c in data['clients']], ["c1", "c2"])

        resp = self.client.post('/api/clients/search', json={"query": "", "clients": CLIENTS})
        data = resp.json()
        self.assertEqual(data['mode'], "grouped")
        self.assertEqual(data['letters'], ["C", "M"])

    def test_manual_days_flow(self):
        base = '/api/manual-days/org1/loc1/2024-04'
        resp = self.client.post(base, json={"date_key": "2024-04-10", "visit_day_keys": ["2024-04-03"]})
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()['added'])
        self.assertEqual(resp.json()['scope'], "org1/loc1/2024-04")

        resp = self.client.post(base, json={"date_key": "2024-05-01"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()['detail'], "Date is outside this month.")

        resp = self.client.post('/api/days/org1/loc1/2024-04', json={"visit_day_keys": ["2024-04-03"]})
        self.assertEqual(resp.json()['days'], [
            {"dateKey": "2024-04-10", "hasVisits": False, "manual": True},
            {"dateKey": "2024-04-03", "hasVisits": True, "manual": False},
        ])

        self.assertEqual(self.client.get(base).json()['days'], ["2024-04-10"])
        self.assertEqual(self.client.delete(base + '/2024-04-10').status_code, 200)
        self.assertEqual(self.client.delete(base + '/2024-04-10').status_code, 404)

    def test_manual_days_bad_month(self):
        self.assertEqual(self.client.get('/api/manual-days/org1/loc1/2024-4').status_code, 400)

    def test_csv_exports(self):
        resp = self.client.post('/api/export/usda-monthly.csv', json={"visits": VISITS, "month_key": "2024-03"})
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.headers['content-type'].startswith("text/csv"))
        self.assertIn('USDA_Monthly_2024-03.csv', resp.headers['content-disposition'])
        self.assertEqual(len(resp.text.split("\n")), 4)

        resp = self.client.post('/api/export/day.csv', json={"day_key": "2024-03-02", "visits": VISITS[:1],
                                                             "clients": CLIENTS})
        self.assertIn('"Maria","Lopez"', resp.text)

        resp = self.client.post('/api/export/month-summary.csv', json={"visits": VISITS, "month_key": "2024-03"})
        self.assertEqual(resp.text.split("\n")[-1], '"Unduplicated","1","3"')

    def test_events_poll(self):
        resp = self.client.get('/api/events')
        self.assertEqual(resp.status_code, 200)
        self.assertIn('next_cursor', resp.json())


if __name__ == '__main__':
    unittest.main()
