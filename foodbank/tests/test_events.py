import unittest

from foodbank.events import web_observers
from foodbank.events.Event_Bus import EventBus, MANUAL_DAY_ADDED, MANUAL_DAY_REJECTED
from foodbank.events.event_helpers import publish_day_added, publish_day_rejected, publish_persist_failed


class TestEventBus(unittest.TestCase):

    def test_publish_reaches_subscribers_once(self):
        bus = EventBus()
        seen = []
        listener = lambda name, payload: seen.append((name, payload))
        bus.subscribe("x", listener)
        bus.subscribe("x", listener)
        bus.publish("x", {"a": 1})
        self.assertEqual(seen, [("x", {"a": 1})])
        bus.unsubscribe("x", listener)
        bus.unsubscribe("x", listener)
        bus.publish("x", {"a": 2})
        self.assertEqual(len(seen), 1)

    def test_failing_listener_does_not_stop_others(self):
        bus = EventBus()
        seen = []

        def broken(name, payload):
            raise RuntimeError("boom")

        bus.subscribe("x", broken)
        bus.subscribe("x", lambda name, payload: seen.append(payload))
        with self.assertLogs("foodbank.events.Event_Bus", level="ERROR"):
            bus.publish("x", 1)
        self.assertEqual(seen, [1])


class TestWebObservers(unittest.TestCase):

    def setUp(self):
        web_observers.start()
        web_observers.start()

    def test_notices_are_recorded_with_cursor(self):
        cursor = web_observers.get_events()['next_cursor']
        publish_day_added("o/l/2024-04", "2024-04-10")
        publish_day_rejected("o/l/2024-04", "2024-05-01", "Date is outside this month.")
        publish_persist_failed("o/l/2024-04", "disk full")

        data = web_observers.get_events(since=cursor)
        events = data['events']
        self.assertEqual(len(events), 3)
        self.assertEqual([e['type'] for e in events[:2]], [MANUAL_DAY_ADDED, MANUAL_DAY_REJECTED])
        self.assertEqual(events[0]['dateKey'], "2024-04-10")
        self.assertEqual(events[1]['message'], "Date is outside this month.")
        self.assertEqual(events[2]['level'], "error")
        self.assertEqual(data['next_cursor'], events[-1]['id'])

        self.assertEqual(web_observers.get_events(since=data['next_cursor'])['events'], [])


if __name__ == '__main__':
    unittest.main()
