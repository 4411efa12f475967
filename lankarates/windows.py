"""Named history periods and the query bounds they map to."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from .models import utc_now

DEFAULT_PERIOD = "week"


@dataclass(frozen=True)
class QueryWindow:
    name: str
    start: datetime
    limit: int


def _shift_months(value: datetime, months: int) -> datetime:
    """Move ``value`` back by ``months``, clamping to the end of short months."""

    month_index = value.year * 12 + (value.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


# period -> (start offset, max results). A year is capped at 52 points.
_WINDOWS = {
    "week": (lambda now: now - timedelta(days=7), 7),
    "month": (lambda now: _shift_months(now, 1), 30),
    "year": (lambda now: _shift_months(now, 12), 52),
}


def resolve_window(period: Optional[str], now: Optional[datetime] = None) -> QueryWindow:
    """Map a period name onto a query window.

    Unknown or missing names fall back to the ``week`` window.
    """
    now = now or utc_now()
    name = (period or "").strip().lower()
    if name not in _WINDOWS:
        name = DEFAULT_PERIOD

    start_of, limit = _WINDOWS[name]
    return QueryWindow(name=name, start=start_of(now), limit=limit)
