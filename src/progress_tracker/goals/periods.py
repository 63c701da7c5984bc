"""Quarter and month date arithmetic.

Asana's ``completed_on.after`` and ``completed_on.before`` filters are
exclusive, so every range here starts on the day before the period and ends
on the day after it.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, timezone

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

_QUARTER_ID = re.compile(r"^(\d{4})-Q([1-4])$")


def parse_quarter_id(period_id: str) -> tuple[int, int]:
    """Split a ``YYYY-QN`` identifier into year and quarter number."""

    match = _QUARTER_ID.match(period_id.strip())
    if match is None:
        raise ValueError(f"Period id '{period_id}' is not of the form YYYY-QN")
    return int(match.group(1)), int(match.group(2))


def _first_of_month(year: int, month: int) -> date:
    while month > 12:
        year, month = year + 1, month - 12
    return date(year, month, 1)


def quarter_bounds(year: int, quarter: int) -> tuple[date, date]:
    first_month = (quarter - 1) * 3 + 1
    start = _first_of_month(year, first_month) - timedelta(days=1)
    end = _first_of_month(year, first_month + 3)
    return start, end


def quarter_months(quarter: int) -> list[str]:
    offset = (quarter - 1) * 3
    return list(MONTH_NAMES[offset : offset + 3])


def quarter_name(year: int, quarter: int) -> str:
    return f"Q{quarter} {year}"


def month_bounds(year: int, month_name: str) -> tuple[date, date]:
    try:
        month = MONTH_NAMES.index(month_name) + 1
    except ValueError as exc:
        raise ValueError(f"Unknown month '{month_name}'") from exc
    start = _first_of_month(year, month) - timedelta(days=1)
    end = _first_of_month(year, month + 1)
    return start, end


def current_quarter(today: date | None = None) -> str:
    today = today or datetime.now(timezone.utc).date()
    return f"{today.year}-Q{(today.month - 1) // 3 + 1}"


def boundary_instant(day: date) -> datetime:
    """Midnight UTC at the start of ``day``."""

    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def is_period_past(end_date: date, now: datetime | None = None) -> bool:
    """A period is closed once its exclusive end boundary is strictly before now."""

    now = now or datetime.now(timezone.utc)
    return boundary_instant(end_date) < now


__all__ = [
    "MONTH_NAMES",
    "boundary_instant",
    "current_quarter",
    "is_period_past",
    "month_bounds",
    "parse_quarter_id",
    "quarter_bounds",
    "quarter_months",
    "quarter_name",
]
