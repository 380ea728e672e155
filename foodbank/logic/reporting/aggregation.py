"""Visit aggregation for the monthly calendar, reports and compliance exports.

``aggregate`` folds whatever visits it is given (the caller scopes them to one
organization/location/month) into per-day and per-month statistics, including
the unduplicated household/person counts used on USDA/EFAP monthly reports.
"""
from __future__ import annotations

from collections import defaultdict
from types import MappingProxyType
from typing import Any, Dict, Iterable, List

from foodbank.domain.Aggregates import DayAggregate, MonthAggregate, MonthTotals, Unduplicated
from foodbank.domain.Visit import Visit, as_visit

__all__ = ["aggregate", "earliest_qualifying_visits", "group_by_day"]


def earliest_qualifying_visits(visits: Iterable[Any]) -> Dict[str, Visit]:
    """client id -> that client's earliest visit flagged as first USDA visit this month.

    Date keys sort chronologically as strings. On equal dates the visit seen
    first in input order is kept.
    """
    firsts: Dict[str, Visit] = {}
    for raw in visits or []:
        v = as_visit(raw)
        if not v.client_id or not v.is_usda_first:
            continue
        current = firsts.get(v.client_id)
        if current is None or v.date_key < current.date_key:
            firsts[v.client_id] = v
    return firsts


def aggregate(visits: Iterable[Any]) -> MonthAggregate:
    """Aggregate visits into day buckets, month totals and unduplicated totals.

    Pure: the input is never mutated and equal inputs produce equal results.
    Malformed household sizes count as 0.
    """
    normalized = [as_visit(raw) for raw in (visits or [])]

    day_visits: Dict[str, int] = defaultdict(int)
    day_persons: Dict[str, int] = defaultdict(int)
    day_usda: Dict[str, int] = defaultdict(int)
    month_visits = 0
    month_persons = 0

    for v in normalized:
        persons = v.household_size
        day_visits[v.date_key] += 1
        day_persons[v.date_key] += persons
        if v.is_usda_first:
            day_usda[v.date_key] += 1
        month_visits += 1
        month_persons += persons

    by_day = {
        dk: DayAggregate(visits=day_visits[dk], persons=day_persons[dk], usda_yes=day_usda[dk])
        for dk in sorted(day_visits)
    }

    firsts = earliest_qualifying_visits(normalized)
    unduplicated = Unduplicated(
        households=len(firsts),
        persons=sum(v.household_size for v in firsts.values()),
    )

    return MonthAggregate(
        by_day=MappingProxyType(by_day),
        month_totals=MonthTotals(visits=month_visits, persons=month_persons),
        unduplicated=unduplicated,
    )


def group_by_day(visits: Iterable[Any]) -> Dict[str, List[Visit]]:
    """date key -> visits on that day, in input order."""
    grouped: Dict[str, List[Visit]] = {}
    for raw in visits or []:
        v = as_visit(raw)
        grouped.setdefault(v.date_key, []).append(v)
    return grouped
