"""Simple Event Bus / Observer implementation for reporting notices.

Event names used so far:
  manual_days.added -> payload {"scope": str, "dateKey": str}
  manual_days.rejected -> payload {"scope": str, "dateKey": str, "reason": str}
  manual_days.persist_failed -> payload {"scope": str, "error": str}

Subscribers are callables taking (event_name, payload).
"""
from __future__ import annotations
import logging
from collections import defaultdict
from typing import Callable, Any, Dict, List

logger = logging.getLogger(__name__)

# --- Event name constants (used across modules) ---
MANUAL_DAY_ADDED = "manual_days.added"
MANUAL_DAY_REJECTED = "manual_days.rejected"
MANUAL_DAYS_PERSIST_FAILED = "manual_days.persist_failed"


class EventBus:
	def __init__(self):
		self._subscribers: Dict[str, List[Callable[[str, Any], None]]] = defaultdict(list)

	def subscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		if callback not in self._subscribers[event_name]:
			self._subscribers[event_name].append(callback)

	def unsubscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		try:
			self._subscribers[event_name].remove(callback)
		except (ValueError, KeyError):
			pass

	def publish(self, event_name: str, payload: Any):
		for cb in list(self._subscribers.get(event_name, [])):
			try:
				cb(event_name, payload)
			except Exception as e:  # pragma: no cover
				logger.error("Error delivering %s to %s: %s", event_name, cb, e)


# A singleton-like instance (can be imported)
GLOBAL_EVENT_BUS = EventBus()


def publish_event(event_name: str, payload: Any = None) -> None:
	"""Publish an event on the global bus (sugar function)."""
	GLOBAL_EVENT_BUS.publish(event_name, payload)


__all__ = [
	'EventBus', 'GLOBAL_EVENT_BUS', 'publish_event',
	'MANUAL_DAY_ADDED', 'MANUAL_DAY_REJECTED', 'MANUAL_DAYS_PERSIST_FAILED'
]
