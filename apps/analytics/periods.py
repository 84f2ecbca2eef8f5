"""
Date windows for analytics queries.

The dashboard offers range labels (7days, 30days, ...); the backend query
needs an inclusive [start, end] pair of ISO dates.
"""
import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Optional

PERIOD_MONTHS: Dict[str, int] = {
    "month": 1,
    "quarter": 3,
    "half": 6,
    "year": 12,
}

RANGE_PERIODS: Dict[str, str] = {
    "7days": "week",
    "30days": "month",
    "3months": "quarter",
    "6months": "half",
    "year": "year",
}


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    @property
    def start_iso(self) -> str:
        return self.start.isoformat()

    @property
    def end_iso(self) -> str:
        return self.end.isoformat()


def _months_back(day: date, months: int) -> date:
    index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(index, 12)
    month += 1
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last))


def date_range_for_period(period: str, today: Optional[date] = None) -> DateRange:
    """Return the inclusive window ending today for a named period.

    ``day`` and ``week`` step back 1 and 7 days; the month-based periods step
    back whole calendar months, clamping the day to the target month.
    """
    end = today or date.today()
    if period == "day":
        return DateRange(end - timedelta(days=1), end)
    if period == "week":
        return DateRange(end - timedelta(days=7), end)
    months = PERIOD_MONTHS.get(period)
    if months is None:
        raise ValueError(f"Unknown analytics period: {period!r}")
    return DateRange(_months_back(end, months), end)


def period_for_range(label: str) -> str:
    """Map a dashboard range label (e.g. ``7days``) to a period name."""
    try:
        return RANGE_PERIODS[label]
    except KeyError:
        raise ValueError(
            f"Unknown range {label!r}. Try one of: {', '.join(RANGE_PERIODS)}"
        ) from None
