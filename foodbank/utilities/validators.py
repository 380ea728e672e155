"""
Input validation schemas using Pydantic for the reporting API.

Visit and client records stay plain dicts: the engine reads them leniently,
so only the request envelope and control values are validated here.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Optional

from foodbank.utilities.constants import DATE_KEY_PATTERN, MONTH_KEY_PATTERN


class VisitsInput(BaseModel):
    """Schema for a snapshot of visit records."""
    visits: List[Dict[str, Any]] = Field(default_factory=list)


class AggregateInput(VisitsInput):
    """Schema for month aggregation; month_key enables the calendar shading."""
    month_key: Optional[str] = Field(None, pattern=MONTH_KEY_PATTERN)
    shade_by: str = Field("visits", pattern=r'^(visits|persons)$')


class ManualDayInput(BaseModel):
    """Schema for adding a manual service day."""
    date_key: str = Field(..., max_length=32)
    visit_day_keys: List[str] = Field(default_factory=list)

    @field_validator('date_key')
    @classmethod
    def strip_whitespace(cls, v):
        """Remove leading/trailing whitespace."""
        return v.strip() if isinstance(v, str) else v


class MonthDaysInput(BaseModel):
    """Schema for listing the days of a month (visit days plus markers)."""
    visit_day_keys: List[str] = Field(default_factory=list)
    day_filter: str = Field("", max_length=10)
    descending: bool = True


class ClientSearchInput(BaseModel):
    """Schema for client search."""
    query: str = Field("", max_length=200)
    clients: List[Dict[str, Any]] = Field(default_factory=list)


class RowsInput(BaseModel):
    """Schema for a day's visit table."""
    visits: List[Dict[str, Any]] = Field(default_factory=list)
    clients: List[Dict[str, Any]] = Field(default_factory=list)
    selected_date: Optional[str] = None
    usda_filter: str = Field("all", pattern=r'^(all|yes|no)$')
    search_term: str = Field("", max_length=200)
    sort_key: str = Field("time", pattern=r'^(name|hh|time)$')
    sort_dir: str = Field("desc", pattern=r'^(asc|desc)$')


class MonthlyExportInput(VisitsInput):
    """Schema for the USDA monthly CSV."""
    month_key: str = Field(..., pattern=MONTH_KEY_PATTERN)


class DayExportInput(BaseModel):
    """Schema for a single day's CSV."""
    day_key: str = Field(..., pattern=DATE_KEY_PATTERN)
    visits: List[Dict[str, Any]] = Field(default_factory=list)
    clients: List[Dict[str, Any]] = Field(default_factory=list)
