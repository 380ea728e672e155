from typing import Final

DATE_KEY_FORMAT: Final[str] = "%Y-%m-%d"
MONTH_KEY_FORMAT: Final[str] = "%Y-%m"
DATE_KEY_PATTERN: Final[str] = r"^\d{4}-\d{2}-\d{2}$"
MONTH_KEY_PATTERN: Final[str] = r"^\d{4}-\d{2}$"

# Relevance weights for client search (per query token, first match wins)
SCORE_FULL_PREFIX: Final[int] = 100
SCORE_FIRST_PREFIX: Final[int] = 80
SCORE_LAST_PREFIX: Final[int] = 70
SCORE_LATER_WORD: Final[int] = 50
SCORE_CONTAINS: Final[int] = 30
SCORE_PHONE_DIGITS: Final[int] = 25
RECENCY_DIVISOR: Final[int] = 100_000

PLACEHOLDER_NAME: Final[str] = "—"
UNSCOPED: Final[str] = "-"

# Calendar cell shading (min alpha + span)
SHADE_BASE: Final[float] = 0.06
SHADE_SPAN: Final[float] = 0.22

USDA_FILTERS: Final[tuple[str, ...]] = ("all", "yes", "no")
SORT_KEYS: Final[tuple[str, ...]] = ("name", "hh", "time")
SORT_DIRS: Final[tuple[str, ...]] = ("asc", "desc")

USDA_MONTHLY_CSV_HEADER: Final[list[str]] = [
    "dateKey", "monthKey", "clientId", "householdSize", "usdaFirstTimeThisMonth", "usdaCount",
]
DAY_EXPORT_CSV_HEADER: Final[list[str]] = [
    "dateKey", "monthKey", "visitId", "visitAtISO", "clientId", "firstName", "lastName",
    "address", "zip", "householdSize", "usdaFirstTimeThisMonth", "usdaCount",
]
MONTH_SUMMARY_CSV_HEADER: Final[list[str]] = ["date", "visits", "persons"]
