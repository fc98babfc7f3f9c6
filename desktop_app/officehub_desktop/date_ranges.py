"""Date ranges sent as query parameters for server-side range filtering."""

from __future__ import annotations

import calendar
import datetime as dt
import enum
from typing import Dict, Optional


class ViewMode(str, enum.Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


def month_range(today: dt.date) -> tuple[dt.date, dt.date]:
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


def date_range(mode: ViewMode, today: Optional[dt.date] = None) -> Dict[str, str]:
    """Return ``startDate``/``endDate`` for the view mode.

    Weeks start on Sunday and span seven days.
    """

    today = today or dt.date.today()
    start = end = today
    if mode is ViewMode.WEEK:
        start = today - dt.timedelta(days=(today.weekday() + 1) % 7)
        end = start + dt.timedelta(days=6)
    elif mode is ViewMode.MONTH:
        start, end = month_range(today)
    elif mode is ViewMode.YEAR:
        start = dt.date(today.year, 1, 1)
        end = dt.date(today.year, 12, 31)
    return {"startDate": start.isoformat(), "endDate": end.isoformat()}


__all__ = ["ViewMode", "date_range", "month_range"]
