"""Row model for a single day's visit table.

``build_rows`` joins each visit with its client (falling back to the name
snapshot stored on the visit), ``filter_and_sort`` applies the table's USDA
filter, search box and column sort.
"""
from __future__ import annotations

import calendar
import logging
from datetime import datetime, timezone, tzinfo
from typing import Any, Dict, Iterable, List, Mapping, Optional

from foodbank.domain.Client import Client, as_client
from foodbank.domain.Row import VisitRow
from foodbank.domain.Visit import UsdaFlag, Visit, as_visit
from foodbank.logic.calendar.dates import display_zone, localize, to_datetime
from foodbank.utilities.constants import PLACEHOLDER_NAME, SORT_DIRS, SORT_KEYS, USDA_FILTERS

logger = logging.getLogger(__name__)

__all__ = ["build_rows", "filter_and_sort", "day_export_rows", "efap_daily_rows", "format_time", "format_date"]


def format_time(dt: datetime) -> str:
    """``9:05 AM`` style clock time."""
    hour = dt.hour % 12 or 12
    return f"{hour}:{dt.minute:02d} {'AM' if dt.hour < 12 else 'PM'}"


def format_date(dt: datetime) -> str:
    """``Mar 2, 2024`` style date."""
    return f"{calendar.month_abbr[dt.month]} {dt.day}, {dt.year}"


def _epoch(dt: datetime) -> Optional[float]:
    try:
        return dt.timestamp()
    except (OverflowError, OSError, ValueError):
        return None


def _client_index(clients_by_id: Optional[Mapping[str, Any]]) -> Dict[str, Client]:
    if not clients_by_id:
        return {}
    return {key: as_client(value) for key, value in clients_by_id.items()}


def _first_non_empty(*values: Optional[str]) -> str:
    for value in values:
        if value:
            return value
    return ""


def _display_name(v: Visit, client: Optional[Client]) -> str:
    legacy_first = legacy_last = ""
    if client is not None and client.name:
        parts = client.name.split(" ")
        legacy_first, legacy_last = parts[0], " ".join(parts[1:])
    first = _first_non_empty(client.first_name if client else "", v.client_first_name, legacy_first)
    last = _first_non_empty(client.last_name if client else "", v.client_last_name, legacy_last)
    return f"{first} {last}".strip() or v.client_name or PLACEHOLDER_NAME


def build_rows(visits_for_day: Iterable[Any], clients_by_id: Optional[Mapping[str, Any]] = None,
               selected_date: Optional[str] = None, tz: Optional[tzinfo] = None) -> List[VisitRow]:
    """Project one day's visits into table rows (input order preserved)."""
    clients = _client_index(clients_by_id)
    zone = tz if tz is not None else display_zone()
    rows: List[VisitRow] = []
    for raw in visits_for_day or []:
        v = as_visit(raw)
        client = clients.get(v.client_id) if v.client_id else None
        label = _display_name(v, client)

        visit_dt = to_datetime(v.visit_at)
        visit_local = localize(visit_dt, zone) if visit_dt else None
        local_time = format_time(visit_local) if visit_local else ""

        added_dt = None
        for source in (v.added_at, v.created_at, v.visit_at):
            if source:
                added_dt = to_datetime(source)
                break
        added_local = localize(added_dt, zone) if added_dt else None

        display = ""
        if visit_local is not None:
            display = f"{selected_date or format_date(visit_local)} • {local_time}".strip()

        rows.append(VisitRow(
            visit_id=v.id,
            client_id=v.client_id,
            label_name=label,
            label_name_lower=label.lower(),
            household=v.household_size,
            usda_first=v.usda_first,
            county=_first_non_empty(v.client_county, client.county if client else ""),
            zip=_first_non_empty(v.client_zip, client.zip if client else ""),
            local_time=local_time,
            visit_ts=_epoch(visit_dt) if visit_dt else None,
            added_ts=_epoch(added_dt) if added_dt else None,
            added_local_date=format_date(added_local) if added_local else "",
            added_local_time=format_time(added_local) if added_local else "",
            display_date_time=display,
            added_by_reports=v.added_by_reports,
        ))
    return rows


def filter_and_sort(rows: Iterable[VisitRow], usda_filter: str = "all", search_term: str = "",
                    sort_key: str = "time", sort_dir: str = "desc") -> List[VisitRow]:
    """Apply the table controls. Unknown filter/sort values fall back to defaults.

    Rows with an unknown USDA flag match neither 'yes' nor 'no'. Sorting is
    stable, so ties keep input order.
    """
    usda_filter = usda_filter if usda_filter in USDA_FILTERS else "all"
    sort_key = sort_key if sort_key in SORT_KEYS else "time"
    sort_dir = sort_dir if sort_dir in SORT_DIRS else "desc"

    out = list(rows or [])
    if usda_filter == "yes":
        out = [r for r in out if r.usda_first is UsdaFlag.YES]
    elif usda_filter == "no":
        out = [r for r in out if r.usda_first is UsdaFlag.NO]

    q = (search_term or "").strip().lower()
    if q:
        out = [
            r for r in out
            if q in r.label_name_lower or q in (r.county or "").lower() or q in (r.zip or "").lower()
        ]

    if sort_key == "name":
        key = lambda r: r.label_name_lower
    elif sort_key == "hh":
        key = lambda r: r.household or 0
    else:
        key = lambda r: r.sort_ts
    # reverse=True keeps equal elements in their original order
    return sorted(out, key=key, reverse=(sort_dir == "desc"))


def _iso(value: Any) -> str:
    dt = to_datetime(value)
    if dt is None:
        return ""
    if dt.tzinfo is not None:
        return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
    return dt.isoformat()


def day_export_rows(visits: Iterable[Any], clients_by_id: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
    """Flat records for a day's CSV export (visit joined with client)."""
    clients = _client_index(clients_by_id)
    out = []
    for raw in visits or []:
        v = as_visit(raw)
        client = clients.get(v.client_id) if v.client_id else None
        out.append({
            "dateKey": v.date_key,
            "monthKey": v.month_key,
            "visitId": v.id,
            "visitAtISO": _iso(v.visit_at),
            "clientId": v.client_id,
            "firstName": client.first_name if client else "",
            "lastName": client.last_name if client else "",
            "address": client.address if client else "",
            "zip": _first_non_empty(v.client_zip, client.zip if client else ""),
            "householdSize": v.household_size,
            "usdaFirstTimeThisMonth": v.usda_first.serialize(),
            "usdaCount": v.usda_count if v.usda_count is not None else "",
        })
    return out


def efap_daily_rows(rows: Iterable[VisitRow]) -> List[Dict[str, Any]]:
    """Records for the EFAP daily sign-in sheet, taken from the table rows as shown."""
    return [
        {
            "name": r.label_name,
            "county": r.county or "",
            "zip": r.zip or "",
            "householdSize": int(r.household or 0),
            "firstTime": r.usda_first.serialize(),
        }
        for r in rows or []
    ]
