"""VisitRow: display projection of one visit in a single day's table."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from foodbank.domain.Visit import UsdaFlag


@dataclass(frozen=True)
class VisitRow:
    visit_id: str
    client_id: str
    label_name: str
    label_name_lower: str
    household: int
    usda_first: UsdaFlag
    county: str = ""
    zip: str = ""
    local_time: str = ""
    visit_ts: Optional[float] = None
    added_ts: Optional[float] = None
    added_local_date: str = ""
    added_local_time: str = ""
    display_date_time: str = ""
    added_by_reports: bool = False

    @property
    def sort_ts(self) -> float:
        """When the visit was added, falling back to when it happened, else 0."""
        if self.added_ts is not None:
            return self.added_ts
        if self.visit_ts is not None:
            return self.visit_ts
        return 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "visitId": self.visit_id,
            "clientId": self.client_id,
            "labelName": self.label_name,
            "visitHousehold": self.household,
            "usdaFirstTimeThisMonth": self.usda_first.serialize(),
            "county": self.county,
            "zip": self.zip,
            "localTime": self.local_time,
            "visitTs": self.visit_ts,
            "addedTs": self.added_ts,
            "addedLocalDate": self.added_local_date,
            "addedLocalTime": self.added_local_time,
            "displayDateTime": self.display_date_time,
            "addedByReports": self.added_by_reports,
        }
