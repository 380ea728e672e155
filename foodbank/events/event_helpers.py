"""Event helper utilities.

Quick import:
    from foodbank.events.event_helpers import (
        publish_day_added, publish_day_rejected, publish_persist_failed
    )
"""
from __future__ import annotations
from .Event_Bus import (
    publish_event,
    MANUAL_DAY_ADDED, MANUAL_DAY_REJECTED, MANUAL_DAYS_PERSIST_FAILED,
)

__all__ = [
    'publish_day_added', 'publish_day_rejected', 'publish_persist_failed',
    'MANUAL_DAY_ADDED', 'MANUAL_DAY_REJECTED', 'MANUAL_DAYS_PERSIST_FAILED',
]


def publish_day_added(scope: str, date_key: str):
    """Publish a manual_days.added event."""
    publish_event(MANUAL_DAY_ADDED, {'scope': scope, 'dateKey': date_key})


def publish_day_rejected(scope: str, date_key: str, reason: str):
    """Publish a manual_days.rejected event."""
    publish_event(MANUAL_DAY_REJECTED, {'scope': scope, 'dateKey': date_key, 'reason': reason})


def publish_persist_failed(scope: str, error: str):
    """Publish a manual_days.persist_failed event (markers stay in memory)."""
    publish_event(MANUAL_DAYS_PERSIST_FAILED, {'scope': scope, 'error': error})
