"""Month KPIs derived from visits and aggregates (charts, shading, summary rows)."""
from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List

from foodbank.domain.Aggregates import MonthAggregate
from foodbank.domain.Visit import Visit, as_visit
from foodbank.logic.reporting.aggregation import group_by_day
from foodbank.utilities.constants import SHADE_BASE, SHADE_SPAN

__all__ = ["usda_units", "day_totals", "visits_per_day", "usda_split", "shade_scale", "monthly_summary"]


def usda_units(visit: Any) -> float:
    """Explicit usdaCount when numeric, else 1 for a first USDA visit, else 0."""
    v = as_visit(visit)
    if v.usda_count is not None:
        return v.usda_count
    return 1 if v.is_usda_first else 0


def day_totals(visits_for_day: Iterable[Any]) -> Dict[str, int]:
    """Unfiltered totals for one day's summary stripe."""
    count = households = usda_yes = 0
    for raw in visits_for_day or []:
        v = as_visit(raw)
        count += 1
        households += v.household_size
        if v.is_usda_first:
            usda_yes += 1
    return {"count": count, "households": households, "usdaYes": usda_yes}


def visits_per_day(agg: MonthAggregate) -> List[Dict[str, Any]]:
    """Chart series: one point per day with visits, labelled MM-DD."""
    return [
        {"date": dk[5:], "visits": day.visits, "people": day.persons}
        for dk, day in sorted(agg.by_day.items())
    ]


def usda_split(visits: Iterable[Any]) -> Dict[str, int]:
    """USDA yes/no counts for the pie chart; unknown flags count as no."""
    yes = no = 0
    for raw in visits or []:
        if as_visit(raw).is_usda_first:
            yes += 1
        else:
            no += 1
    return {"yes": yes, "no": no}


def shade_scale(agg: MonthAggregate, grid: Iterable[str], by: str = "visits") -> Dict[str, float]:
    """Cell shading intensity per grid day relative to the busiest day shown."""
    keys = list(grid)
    attr = "persons" if by == "persons" else "visits"
    values = {dk: getattr(agg.day(dk), attr) for dk in keys}
    peak = max([1, *values.values()])
    return {dk: SHADE_BASE + min(1.0, value / peak) * SHADE_SPAN for dk, value in values.items()}


def _round_tenth(value: float) -> float:
    # Half-up rounding, as shown on the printed summary
    return math.floor(value * 10 + 0.5) / 10


def monthly_summary(visits: Iterable[Any]) -> Dict[str, Any]:
    """Rows and totals for the USDA monthly summary document.

    Returns:
        {
          'rows': [ {'date': 'YYYY-MM-DD', 'households': int, 'usdaUnits': number}, ... ],
          'totalUsda': number, 'totalHouseholds': int, 'averagePerDay': float
        }
    """
    normalized: List[Visit] = [as_visit(raw) for raw in (visits or [])]
    grouped = group_by_day(normalized)
    rows = []
    for dk in sorted(grouped):
        day = grouped[dk]
        rows.append({
            "date": dk,
            "households": sum(v.household_size for v in day),
            "usdaUnits": sum(usda_units(v) for v in day),
        })
    total_usda = sum(usda_units(v) for v in normalized)
    total_households = sum(v.household_size for v in normalized)
    average = _round_tenth(total_usda / len(rows)) if rows else 0
    return {
        "rows": rows,
        "totalUsda": total_usda,
        "totalHouseholds": total_households,
        "averagePerDay": average,
    }
