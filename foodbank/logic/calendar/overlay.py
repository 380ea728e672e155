"""Manual service-day markers layered over the days that have real visits.

A marker is a user-declared date with no visit behind it (a service day where
nobody came). Markers live per ``<org>/<location>/<monthKey>`` scope. When a
marked date later gets visits the marker is left in storage; the union below
simply lists the date once.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set

from foodbank.events.event_helpers import publish_day_added, publish_day_rejected, publish_persist_failed
from foodbank.infra.ManualDay_Repository import ManualDayRepository, month_key_of_scope
from foodbank.logic.calendar.dates import is_date_key_in_month, is_valid_date_key, parse_month_key
from foodbank.utilities.constants import DATE_KEY_PATTERN

logger = logging.getLogger(__name__)

__all__ = ["ManualDayError", "AddDayResult", "ManualDayOverlay", "union_with_visit_days"]

_DATE_KEY_RE = re.compile(DATE_KEY_PATTERN)


class ManualDayError(ValueError):
    """A manual day was rejected; ``reason`` is suitable for showing to the user."""

    def __init__(self, reason: str, date_key: str = ""):
        super().__init__(reason)
        self.reason = reason
        self.date_key = date_key


@dataclass(frozen=True)
class AddDayResult:
    selected: str
    added: bool
    persisted: bool = True


class ManualDayOverlay:
    def __init__(self, repository: Optional[ManualDayRepository] = None):
        self.repository = repository or ManualDayRepository()
        # In-memory state is authoritative for the session, even if saving fails
        self._days: Dict[str, Set[str]] = {}
        # Scopes whose last save failed; never evicted
        self._unsaved: Set[str] = set()

    def days(self, scope: str) -> Set[str]:
        if scope not in self._days:
            self._evict_other_months(scope)
            self._days[scope] = self.repository.load(scope)
        return set(self._days[scope])

    def forget(self, scope: str) -> None:
        """Drop the in-memory copy so the next read reloads from storage."""
        self._days.pop(scope, None)
        self._unsaved.discard(scope)

    def _evict_other_months(self, scope: str) -> None:
        """Keep one cached month per org/location, except months with unsaved changes."""
        prefix = scope.rsplit("/", 1)[0] + "/"
        for cached in [k for k in self._days if k.startswith(prefix) and k != scope]:
            if cached not in self._unsaved:
                del self._days[cached]

    def _save(self, scope: str, days: Set[str]) -> bool:
        saved = self.repository.save(scope, days)
        if saved:
            self._unsaved.discard(scope)
        else:
            self._unsaved.add(scope)
        return saved

    def _validate(self, scope: str, date_key: str) -> str:
        raw = (date_key or "").strip() if isinstance(date_key, str) else ""
        if not _DATE_KEY_RE.match(raw):
            raise ManualDayError("Enter a date in YYYY-MM-DD.", raw)
        if not is_valid_date_key(raw):
            raise ManualDayError("That date does not exist.", raw)
        month_key = month_key_of_scope(scope)
        try:
            parse_month_key(month_key)
        except ValueError:
            raise ManualDayError(f"Unknown month scope {month_key!r}.", raw)
        if not is_date_key_in_month(raw, month_key):
            raise ManualDayError("Date is outside this month.", raw)
        return raw

    def add_day(self, scope: str, date_key: str, visit_day_keys: Iterable[str] = ()) -> AddDayResult:
        """Mark a date in the scope month as a service day.

        Raises ManualDayError (and changes nothing) for malformed, impossible or
        out-of-month dates. A date that already has visits or a marker is only
        selected.
        """
        try:
            raw = self._validate(scope, date_key)
        except ManualDayError as e:
            publish_day_rejected(scope, e.date_key, e.reason)
            raise

        current = self.days(scope)
        if raw in set(visit_day_keys or ()) or raw in current:
            return AddDayResult(selected=raw, added=False)

        current.add(raw)
        self._days[scope] = current
        persisted = self._save(scope, current)
        if not persisted:
            publish_persist_failed(scope, f"could not save {raw}")
        publish_day_added(scope, raw)
        logger.info("Manual day %s added to %s", raw, scope)
        return AddDayResult(selected=raw, added=True, persisted=persisted)

    def remove_day(self, scope: str, date_key: str) -> bool:
        """Remove a marker; returns False when the date was not marked."""
        current = self.days(scope)
        if date_key not in current:
            return False
        current.discard(date_key)
        self._days[scope] = current
        if not self._save(scope, current):
            publish_persist_failed(scope, f"could not remove {date_key}")
        return True

    def month_days(self, scope: str, visit_day_keys: Iterable[str], day_filter: str = "",
                   descending: bool = True) -> List[str]:
        return union_with_visit_days(self.days(scope), visit_day_keys, month_key=month_key_of_scope(scope),
                                     day_filter=day_filter, descending=descending)


def union_with_visit_days(manual: Iterable[str], visit_day_keys: Iterable[str], month_key: Optional[str] = None,
                          day_filter: str = "", descending: bool = True) -> List[str]:
    """All days to list for a month: visit days plus markers, each exactly once.

    Optionally restricted to ``month_key`` and to keys containing ``day_filter``;
    newest first unless ``descending`` is False.
    """
    keys = set(visit_day_keys or ()) | set(manual or ())
    needle = (day_filter or "").strip()
    out = []
    for k in keys:
        if not isinstance(k, str) or not k:
            continue
        if month_key is not None and not is_date_key_in_month(k, month_key):
            continue
        if needle and needle not in k:
            continue
        out.append(k)
    out.sort(reverse=descending)
    return out
