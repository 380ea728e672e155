"""
CSV export of visit data for compliance reports and spreadsheets.

CSV shape shared by every export: header row unquoted and comma-joined, each
value coerced to text and wrapped in double quotes (embedded quotes doubled),
rows separated by newlines.
"""
import csv
import io
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from foodbank.domain.Aggregates import MonthAggregate
from foodbank.domain.Visit import as_visit
from foodbank.infra.paths import EXPORT_DIR
from foodbank.logic.reporting.aggregation import aggregate
from foodbank.logic.rows.pipeline import day_export_rows
from foodbank.utilities.constants import (
    DAY_EXPORT_CSV_HEADER, MONTH_SUMMARY_CSV_HEADER, USDA_MONTHLY_CSV_HEADER,
)

logger = logging.getLogger(__name__)


def _cell(value: Any) -> str:
    # Stored flags and counts are written as true/false and 2, not True and 2.0
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_csv(rows: Iterable[Mapping[str, Any]], header: Optional[Sequence[str]] = None) -> str:
    """Build CSV text; without an explicit header the first row's keys are used."""
    rows = list(rows or [])
    if header is None:
        header = list(rows[0].keys()) if rows else []
    buf = io.StringIO()
    buf.write(",".join(header) + "\n")
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        writer.writerow([_cell(row.get(k)) for k in header])
    return buf.getvalue().rstrip("\n")


def usda_monthly_rows(visits: Iterable[Any], month_key: str = "") -> List[Dict[str, Any]]:
    out = []
    for raw in visits or []:
        v = as_visit(raw)
        out.append({
            "dateKey": v.date_key,
            "monthKey": v.month_key or month_key,
            "clientId": v.client_id,
            "householdSize": v.household_size,
            "usdaFirstTimeThisMonth": v.usda_first.serialize(),
            "usdaCount": v.usda_count if v.usda_count is not None else "",
        })
    return out


def build_usda_monthly_csv(visits: Iterable[Any], month_key: str = "") -> str:
    return build_csv(usda_monthly_rows(visits, month_key), header=USDA_MONTHLY_CSV_HEADER)


def build_day_csv(visits: Iterable[Any], clients_by_id: Optional[Mapping[str, Any]] = None) -> str:
    return build_csv(day_export_rows(visits, clients_by_id), header=DAY_EXPORT_CSV_HEADER)


def month_summary_rows(agg: MonthAggregate) -> List[Dict[str, Any]]:
    """One row per day followed by the month total and unduplicated rows."""
    rows = [{"date": dk, "visits": day.visits, "persons": day.persons} for dk, day in agg.by_day.items()]
    rows.append({"date": "Total", "visits": agg.month_totals.visits, "persons": agg.month_totals.persons})
    rows.append({
        "date": "Unduplicated",
        "visits": agg.unduplicated.households,
        "persons": agg.unduplicated.persons,
    })
    return rows


def build_month_summary_csv(agg: MonthAggregate) -> str:
    return build_csv(month_summary_rows(agg), header=MONTH_SUMMARY_CSV_HEADER)


class DataExporter:
    """Write report CSV files into an export directory."""

    def __init__(self, export_dir: Optional[Path] = None):
        self.export_dir = Path(export_dir) if export_dir is not None else EXPORT_DIR

    def _write(self, name: str, content: str) -> Optional[Path]:
        output_path = self.export_dir / name
        try:
            self.export_dir.mkdir(parents=True, exist_ok=True)
            with open(output_path, 'w', newline='', encoding='utf-8') as f:
                f.write(content)
        except OSError as e:
            logger.error(f"CSV export failed: {e}")
            return None
        logger.info(f"Exported {name} to {output_path}")
        return output_path

    def export_usda_monthly(self, visits: Iterable[Any], month_key: str) -> Optional[Path]:
        return self._write(f"USDA_Monthly_{month_key}.csv", build_usda_monthly_csv(visits, month_key))

    def export_day(self, visits: Iterable[Any], clients_by_id: Optional[Mapping[str, Any]], day_key: str) -> Optional[Path]:
        return self._write(f"visits_{day_key}.csv", build_day_csv(visits, clients_by_id))

    def export_month_summary(self, visits: Iterable[Any], month_key: str) -> Optional[Path]:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return self._write(f"EFAP_Monthly_{month_key}_{timestamp}.csv", build_month_summary_csv(aggregate(visits)))
