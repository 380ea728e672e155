from fastapi import APIRouter, Depends, HTTPException

from foodbank.infra.ManualDay_Repository import scope_key
from foodbank.logic.calendar.dates import parse_month_key
from foodbank.logic.calendar.overlay import ManualDayError, ManualDayOverlay
from foodbank.utilities.validators import ManualDayInput, MonthDaysInput

router = APIRouter(prefix="/api")

_overlay = ManualDayOverlay()


def get_overlay() -> ManualDayOverlay:
    return _overlay


def _scope(org: str, loc: str, month_key: str) -> str:
    try:
        parse_month_key(month_key)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return scope_key(org, loc, month_key)


@router.get("/manual-days/{org}/{loc}/{month_key}")
def list_manual_days(org: str, loc: str, month_key: str, overlay: ManualDayOverlay = Depends(get_overlay)):
    scope = _scope(org, loc, month_key)
    return {"scope": scope, "days": sorted(overlay.days(scope))}


@router.post("/manual-days/{org}/{loc}/{month_key}")
def add_manual_day(org: str, loc: str, month_key: str, payload: ManualDayInput,
                   overlay: ManualDayOverlay = Depends(get_overlay)):
    scope = _scope(org, loc, month_key)
    try:
        result = overlay.add_day(scope, payload.date_key, payload.visit_day_keys)
    except ManualDayError as e:
        raise HTTPException(status_code=400, detail=e.reason)
    return {
        "scope": scope,
        "selected": result.selected,
        "added": result.added,
        "persisted": result.persisted,
        "days": sorted(overlay.days(scope)),
    }


@router.delete("/manual-days/{org}/{loc}/{month_key}/{date_key}")
def remove_manual_day(org: str, loc: str, month_key: str, date_key: str,
                      overlay: ManualDayOverlay = Depends(get_overlay)):
    scope = _scope(org, loc, month_key)
    if not overlay.remove_day(scope, date_key):
        raise HTTPException(status_code=404, detail="Day is not marked")
    return {"scope": scope, "days": sorted(overlay.days(scope))}


@router.post("/days/{org}/{loc}/{month_key}")
def month_days(org: str, loc: str, month_key: str, payload: MonthDaysInput,
               overlay: ManualDayOverlay = Depends(get_overlay)):
    """Days to list for the month: days with visits plus manual markers."""
    scope = _scope(org, loc, month_key)
    days = overlay.month_days(scope, payload.visit_day_keys, day_filter=payload.day_filter,
                              descending=payload.descending)
    manual = overlay.days(scope)
    visit_days = set(payload.visit_day_keys)
    return {
        "scope": scope,
        "days": [{"dateKey": dk, "hasVisits": dk in visit_days, "manual": dk in manual} for dk in days],
    }
