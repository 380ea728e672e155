"""Visit domain entity: one service interaction as pushed by the visit collaborator.

Visits are read-only snapshots. ``from_dict`` is lenient: fields that fail to
parse fall back to neutral values (0, '', UsdaFlag.UNKNOWN) instead of raising.
"""
from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from foodbank.logic.calendar.dates import date_key_from_timestamp, display_zone, is_valid_date_key

logger = logging.getLogger(__name__)


class UsdaFlag(Enum):
    """First USDA-qualifying visit of the month: yes, no, or not determined."""
    YES = "yes"
    NO = "no"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "UsdaFlag":
        if isinstance(value, UsdaFlag):
            return value
        if value is True:
            return cls.YES
        if value is False:
            return cls.NO
        return cls.UNKNOWN

    def serialize(self):
        '''Stored representation: true / false / empty string.'''
        if self is UsdaFlag.YES:
            return True
        if self is UsdaFlag.NO:
            return False
        return ""


def coerce_count(value: Any) -> int:
    """Non-negative integer or 0 for anything missing, non-numeric or negative."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number) or number < 0:
        return 0
    return int(number)


def coerce_optional_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool) or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class Visit:
    __slots__ = (
        "id", "org_id", "location_id", "client_id", "date_key", "month_key", "household_size",
        "usda_first", "usda_count", "visit_at", "added_at", "created_at", "client_first_name",
        "client_last_name", "client_county", "client_zip", "client_name", "added_by_reports",
    )

    def __init__(self, id: str = "", org_id: str = "", location_id: str = "", client_id: str = "",
                 date_key: str = "", month_key: str = "", household_size: int = 0,
                 usda_first: UsdaFlag = UsdaFlag.UNKNOWN, usda_count: Optional[float] = None,
                 visit_at: Any = None, added_at: Any = None, created_at: Any = None,
                 client_first_name: Optional[str] = None, client_last_name: Optional[str] = None,
                 client_county: str = "", client_zip: str = "", client_name: str = "",
                 added_by_reports: bool = False):
        self.id = id
        self.org_id = org_id
        self.location_id = location_id
        self.client_id = client_id
        self.date_key = date_key
        # monthKey always agrees with dateKey when both exist
        self.month_key = date_key[:7] if date_key else month_key
        self.household_size = coerce_count(household_size)
        self.usda_first = UsdaFlag.parse(usda_first)
        self.usda_count = usda_count
        self.visit_at = visit_at
        self.added_at = added_at
        self.created_at = created_at
        self.client_first_name = client_first_name
        self.client_last_name = client_last_name
        self.client_county = client_county
        self.client_zip = client_zip
        self.client_name = client_name
        self.added_by_reports = added_by_reports

    def __str__(self) -> str:
        return (f"Visit {self.id or '?'} - {self.date_key or 'no date'} - client {self.client_id or '-'}"
                f" - household {self.household_size} - USDA {self.usda_first.value}")

    __repr__ = __str__

    def __eq__(self, other) -> bool:
        if not isinstance(other, Visit):
            return NotImplemented
        return all(getattr(self, k) == getattr(other, k) for k in self.__slots__)

    __hash__ = None

    @property
    def is_usda_first(self) -> bool:
        return self.usda_first is UsdaFlag.YES

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "Visit":
        '''Creates a Visit from the collaborator's stored record (camelCase keys). Never raises.'''
        d = dict(data) if isinstance(data, Mapping) else {}
        raw_key = d.get("dateKey")
        if isinstance(raw_key, str) and len(raw_key) >= 10 and is_valid_date_key(raw_key[:10]):
            date_key = raw_key[:10]
        else:
            date_key = date_key_from_timestamp(d.get("visitAt"), display_zone())
            logger.debug("Visit %s: dateKey %r unusable, derived %r from visitAt", d.get("id"), raw_key, date_key)
        household = d.get("householdSize")
        if household is not None and coerce_count(household) == 0 and household not in (0, "0"):
            logger.debug("Visit %s: householdSize %r counted as 0", d.get("id"), household)
        month_key = _text(d.get("monthKey"))
        first = d.get("clientFirstName")
        last = d.get("clientLastName")
        return Visit(
            id=_text(d.get("id")),
            org_id=_text(d.get("orgId")),
            location_id=_text(d.get("locationId")),
            client_id=_text(d.get("clientId")),
            date_key=date_key,
            month_key=month_key,
            household_size=household,
            usda_first=d.get("usdaFirstTimeThisMonth"),
            usda_count=coerce_optional_number(d.get("usdaCount")),
            visit_at=d.get("visitAt"),
            added_at=d.get("addedAt"),
            created_at=d.get("createdAt"),
            client_first_name=first if isinstance(first, str) else None,
            client_last_name=last if isinstance(last, str) else None,
            client_county=_text(d.get("clientCounty")),
            client_zip=_text(d.get("clientZip") or d.get("zip")),
            client_name=_text(d.get("clientName")),
            added_by_reports=bool(d.get("addedByReports")),
        )

    def to_dict(self) -> Dict[str, Any]:
        '''Converts the Visit back to the collaborator's field names.'''
        return {
            "id": self.id,
            "orgId": self.org_id,
            "locationId": self.location_id,
            "clientId": self.client_id,
            "dateKey": self.date_key,
            "monthKey": self.month_key,
            "householdSize": self.household_size,
            "usdaFirstTimeThisMonth": self.usda_first.serialize(),
            "usdaCount": self.usda_count if self.usda_count is not None else "",
            "visitAt": self.visit_at,
            "addedAt": self.added_at,
            "createdAt": self.created_at,
            "clientFirstName": self.client_first_name or "",
            "clientLastName": self.client_last_name or "",
            "clientCounty": self.client_county,
            "clientZip": self.client_zip,
        }


def as_visit(value: Any) -> Visit:
    """Accept either a Visit or a raw stored mapping."""
    return value if isinstance(value, Visit) else Visit.from_dict(value)
