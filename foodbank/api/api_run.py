from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import Response
from typing import Optional
import logging

from foodbank.domain.Client import index_by_id
from foodbank.logic.calendar.dates import calendar_grid, month_label, parse_month_key, shift_month
from foodbank.logic.reporting.aggregation import aggregate
from foodbank.logic.reporting.kpis import day_totals, monthly_summary, shade_scale, usda_split, visits_per_day
from foodbank.logic.rows.pipeline import build_rows, filter_and_sort
from foodbank.utilities.export_import import build_day_csv, build_month_summary_csv, build_usda_monthly_csv
from foodbank.utilities.validators import AggregateInput, DayExportInput, MonthlyExportInput, RowsInput
from foodbank.events.web_observers import start as start_event_observers, get_events as get_web_events

# Routers
from foodbank.api.routes import clients, manual_days

# Logging
logger = logging.getLogger("foodbank_app")

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"

# Initialize FastAPI app
app = FastAPI(title="Food Assistance Visit Reports API")

# Include routers
app.include_router(manual_days.router)
app.include_router(clients.router)


@app.on_event("startup")
def _startup_web_observers():
    """Register event bus subscribers for notices when the app starts."""
    start_event_observers()
    logger.info("Notice observers started")


def _month_or_400(month_key: str):
    try:
        return parse_month_key(month_key)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# -------------------- CALENDAR --------------------
@app.get('/api/calendar/{month_key}')
def calendar_month(month_key: str):
    """Month bounds and the Sunday-first grid of date keys for a month view."""
    year, month_index0 = _month_or_400(month_key)
    grid = calendar_grid(year, month_index0)
    return {
        "monthKey": month_key,
        "label": month_label(month_key),
        "startKey": grid.bounds.start_key,
        "endKey": grid.bounds.end_key,
        "prev": shift_month(month_key, -1),
        "next": shift_month(month_key, 1),
        "weeks": grid.weeks(),
    }


# -------------------- AGGREGATION --------------------
@app.post('/api/aggregate')
def aggregate_month(payload: AggregateInput):
    """Aggregate a month's visits plus the KPIs shown next to the calendar."""
    month = _month_or_400(payload.month_key) if payload.month_key else None
    agg = aggregate(payload.visits)
    result = agg.to_dict()
    result["charts"] = {
        "visitsPerDay": visits_per_day(agg),
        "usdaPie": usda_split(payload.visits),
    }
    result["summary"] = monthly_summary(payload.visits)
    if month is not None:
        result["shade"] = shade_scale(agg, calendar_grid(*month), by=payload.shade_by)
    logger.debug("Aggregated %d visits", agg.month_totals.visits)
    return result


# -------------------- DAY TABLE --------------------
@app.post('/api/rows')
def day_rows(payload: RowsInput):
    """Rows for one day's table after the USDA filter, search and sort."""
    rows = build_rows(payload.visits, index_by_id(payload.clients), selected_date=payload.selected_date)
    shown = filter_and_sort(rows, usda_filter=payload.usda_filter, search_term=payload.search_term,
                            sort_key=payload.sort_key, sort_dir=payload.sort_dir)
    return {
        "rows": [r.to_dict() for r in shown],
        "count": len(shown),
        "totals": day_totals(payload.visits),
    }


# -------------------- EXPORTS --------------------
@app.post('/api/export/usda-monthly.csv')
def export_usda_monthly(payload: MonthlyExportInput):
    csv_text = build_usda_monthly_csv(payload.visits, payload.month_key)
    return Response(
        content=csv_text,
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="USDA_Monthly_{payload.month_key}.csv"'},
    )


@app.post('/api/export/day.csv')
def export_day(payload: DayExportInput):
    csv_text = build_day_csv(payload.visits, index_by_id(payload.clients))
    return Response(
        content=csv_text,
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="visits_{payload.day_key}.csv"'},
    )


@app.post('/api/export/month-summary.csv')
def export_month_summary(payload: MonthlyExportInput):
    """Per-day visits/persons with the month total and unduplicated rows."""
    csv_text = build_month_summary_csv(aggregate(payload.visits))
    return Response(
        content=csv_text,
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="EFAP_Monthly_{payload.month_key}.csv"'},
    )


# -------------------- NOTICES --------------------
@app.get('/api/events')
def events(since: Optional[int] = Query(default=None)):
    """Poll recent notices; pass next_cursor back as since."""
    return get_web_events(since)
