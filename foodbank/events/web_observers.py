"""Web-facing observers for reporting notices.

This module subscribes to the GLOBAL_EVENT_BUS for manual-day events and keeps
a lightweight in-memory ring buffer of recent notices that the web layer
(FastAPI endpoint) can poll to show toast-style messages.

Design:
  * Each notice is stored with an auto-increment integer id (cursor) so clients
    can request only newer notices (since=<last_id_seen>).
  * A Lock guards the buffer; state is per-process.
  * MAX_EVENTS caps memory use.
"""
from __future__ import annotations
import logging
from typing import List, Dict, Any
from threading import Lock
from datetime import datetime, timezone

from foodbank.utilities.config import MAX_EVENTS
from .Event_Bus import (
    GLOBAL_EVENT_BUS, MANUAL_DAY_ADDED, MANUAL_DAY_REJECTED, MANUAL_DAYS_PERSIST_FAILED
)

logger = logging.getLogger(__name__)

_lock = Lock()
_events: List[Dict[str, Any]] = []
_next_id = 1
_started = False

_MESSAGES = {
    MANUAL_DAY_ADDED: ("info", "Day added to month."),
    MANUAL_DAY_REJECTED: ("warn", None),
    MANUAL_DAYS_PERSIST_FAILED: ("error", "Couldn't save manual days; changes kept for this session."),
}


def _record(event_name: str, payload: Any):  # signature expected by EventBus
    global _next_id
    level, message = _MESSAGES.get(event_name, ("info", event_name))
    data = payload if isinstance(payload, dict) else {}
    with _lock:
        evt = {
            'id': _next_id,
            'type': event_name,
            'level': level,
            'message': message or data.get('reason', ''),
            'ts': datetime.now(timezone.utc).isoformat(),
        }
        for k in ('scope', 'dateKey'):
            if k in data:
                evt[k] = data[k]
        _events.append(evt)
        _next_id += 1
        if len(_events) > MAX_EVENTS:
            del _events[: len(_events) - MAX_EVENTS]


def start():
    """Idempotent start: subscribe observers once."""
    global _started
    if _started:
        return
    for name in _MESSAGES:
        GLOBAL_EVENT_BUS.subscribe(name, _record)
    _started = True
    logger.debug("Notice observers subscribed")


def get_events(since: int | None = None) -> Dict[str, Any]:
    """Return notices newer than 'since' (exclusive), plus next_cursor for polling."""
    with _lock:
        if since is None:
            data = list(_events)
        else:
            data = [e for e in _events if e['id'] > since]
        next_cursor = _events[-1]['id'] if _events else since or 0
    return {'events': data, 'next_cursor': next_cursor}


__all__ = ['start', 'get_events']
