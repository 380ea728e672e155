"""Derived aggregate values produced by the aggregation engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping


@dataclass(frozen=True)
class DayAggregate:
    visits: int = 0
    persons: int = 0
    usda_yes: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"visits": self.visits, "persons": self.persons, "usdaYes": self.usda_yes}


@dataclass(frozen=True)
class MonthTotals:
    visits: int = 0
    persons: int = 0


@dataclass(frozen=True)
class Unduplicated:
    """Distinct clients counted once at their earliest qualifying visit."""
    households: int = 0
    persons: int = 0


@dataclass(frozen=True)
class MonthAggregate:
    by_day: Mapping[str, DayAggregate] = field(default_factory=lambda: MappingProxyType({}))
    month_totals: MonthTotals = field(default_factory=MonthTotals)
    unduplicated: Unduplicated = field(default_factory=Unduplicated)

    def day(self, date_key: str) -> DayAggregate:
        return self.by_day.get(date_key, DayAggregate())

    @property
    def day_keys(self) -> list[str]:
        return list(self.by_day.keys())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "byDay": {k: v.to_dict() for k, v in self.by_day.items()},
            "monthTotals": {"visits": self.month_totals.visits, "persons": self.month_totals.persons},
            "unduplicated": {"households": self.unduplicated.households, "persons": self.unduplicated.persons},
        }
