"""Calendar date-key helpers.

Every value handled here is a calendar-local ``datetime.date``; nothing is
derived from an instant plus an offset, so a visit logged on the 1st stays
on the 1st regardless of the server's zone.
"""
from __future__ import annotations

import calendar
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Any, Iterator, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from foodbank.utilities.config import DISPLAY_TIMEZONE
from foodbank.utilities.constants import DATE_KEY_PATTERN, MONTH_KEY_PATTERN

logger = logging.getLogger(__name__)

__all__ = [
    "MonthBounds", "CalendarGrid", "month_bounds", "month_bounds_for_key", "calendar_grid",
    "format_date_key", "parse_date_key", "is_valid_date_key", "month_key_for", "parse_month_key",
    "is_date_key_in_month", "shift_month", "month_label", "to_datetime", "display_zone",
    "localize", "date_key_from_timestamp", "today_key",
]

_DATE_KEY_RE = re.compile(DATE_KEY_PATTERN)
_MONTH_KEY_RE = re.compile(MONTH_KEY_PATTERN)


@dataclass(frozen=True)
class MonthBounds:
    start: date
    end: date
    start_key: str
    end_key: str


def format_date_key(d: date) -> str:
    """Serialize a calendar date as ``YYYY-MM-DD`` (zero padded)."""
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def parse_date_key(key: str) -> date:
    """Inverse of :func:`format_date_key`. Raises ``ValueError`` for malformed or impossible keys."""
    if not isinstance(key, str) or not _DATE_KEY_RE.match(key):
        raise ValueError(f"Invalid date key {key!r}; expected YYYY-MM-DD")
    y, m, d = (int(p) for p in key.split("-"))
    return date(y, m, d)


def is_valid_date_key(key: Any) -> bool:
    try:
        parse_date_key(key)
    except ValueError:
        return False
    return True


def month_key_for(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def parse_month_key(month_key: str) -> tuple[int, int]:
    """Return ``(year, month_index0)`` for a ``YYYY-MM`` key."""
    if not isinstance(month_key, str) or not _MONTH_KEY_RE.match(month_key):
        raise ValueError(f"Invalid month key {month_key!r}; expected YYYY-MM")
    y, m = (int(p) for p in month_key.split("-"))
    if not 1 <= m <= 12:
        raise ValueError(f"Invalid month key {month_key!r}; month must be 01-12")
    return y, m - 1


def _normalize(year: int, month_index0: int) -> tuple[int, int]:
    # Floor division keeps negative indexes rolling back into earlier years
    return year + month_index0 // 12, month_index0 % 12 + 1


def month_bounds(year: int, month_index0: int) -> MonthBounds:
    """First and last day of a month; out-of-range month indexes roll over."""
    y, m = _normalize(year, month_index0)
    start = date(y, m, 1)
    end = date(y, m, calendar.monthrange(y, m)[1])
    return MonthBounds(start, end, format_date_key(start), format_date_key(end))


def month_bounds_for_key(month_key: str) -> MonthBounds:
    return month_bounds(*parse_month_key(month_key))


def is_date_key_in_month(date_key: str, month_key: str) -> bool:
    if not isinstance(date_key, str) or not _DATE_KEY_RE.match(date_key):
        return False
    bounds = month_bounds_for_key(month_key)
    return bounds.start_key <= date_key <= bounds.end_key


def shift_month(month_key: str, delta: int) -> str:
    """Move a month key forwards/backwards by ``delta`` months."""
    year, month_index0 = parse_month_key(month_key)
    return month_key_for(month_bounds(year, month_index0 + delta).start)


def month_label(month_key: str) -> str:
    """Human label such as ``March 2024``."""
    year, month_index0 = parse_month_key(month_key)
    return f"{calendar.month_name[month_index0 + 1]} {year}"


def _sunday_offset(d: date) -> int:
    # date.weekday(): Monday=0 .. Sunday=6; shift so Sunday=0
    return (d.weekday() + 1) % 7


class CalendarGrid:
    """Date keys of a month view padded to whole Sunday-Saturday weeks.

    The grid is lazy and restartable: iterating it twice yields the same keys.
    """

    def __init__(self, year: int, month_index0: int):
        self.bounds = month_bounds(year, month_index0)
        self.start = self.bounds.start - timedelta(days=_sunday_offset(self.bounds.start))
        self.end = self.bounds.end + timedelta(days=6 - _sunday_offset(self.bounds.end))

    def __iter__(self) -> Iterator[str]:
        current = self.start
        while current <= self.end:
            yield format_date_key(current)
            current += timedelta(days=1)

    def __len__(self) -> int:
        return (self.end - self.start).days + 1

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str) or not is_valid_date_key(key):
            return False
        return format_date_key(self.start) <= key <= format_date_key(self.end)

    def weeks(self) -> List[List[str]]:
        keys = list(self)
        return [keys[i:i + 7] for i in range(0, len(keys), 7)]

    def __repr__(self) -> str:
        return f"CalendarGrid({format_date_key(self.start)}..{format_date_key(self.end)}, {len(self)} days)"


def calendar_grid(year: int, month_index0: int) -> CalendarGrid:
    return CalendarGrid(year, month_index0)


def display_zone() -> Optional[tzinfo]:
    """Zone configured for rendering times (None = host local time)."""
    if not DISPLAY_TIMEZONE:
        return None
    try:
        return ZoneInfo(DISPLAY_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown DISPLAY_TIMEZONE %r; falling back to local time", DISPLAY_TIMEZONE)
        return None


def to_datetime(value: Any) -> Optional[datetime]:
    """Coerce the timestamp shapes stored on visit/client records into a datetime.

    Accepts datetimes, epoch seconds or milliseconds, ISO strings and
    ``{"_seconds": n}`` / ``{"seconds": n}`` mappings. Returns None otherwise.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, dict):
        secs = value.get("_seconds", value.get("seconds"))
        if secs is None:
            return None
        return to_datetime(secs)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        secs = value / 1000 if abs(value) >= 1e11 else value
        try:
            return datetime.fromtimestamp(secs, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def localize(dt: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Render an instant in ``tz`` (or host local time). Naive values are kept as-is."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(tz) if tz is not None else dt.astimezone()


def date_key_from_timestamp(value: Any, tz: Optional[tzinfo] = None) -> str:
    """Local calendar date key of a stored timestamp, or '' when unparseable."""
    dt = to_datetime(value)
    if dt is None:
        return ""
    return format_date_key(localize(dt, tz).date())


def today_key(tz: Optional[tzinfo] = None) -> str:
    now = datetime.now(tz) if tz is not None else datetime.now()
    return format_date_key(now.date())
