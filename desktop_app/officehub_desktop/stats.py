"""Aggregates for the dashboard stat cards.

All summaries are recomputed from scratch over the currently filtered
records. Missing category keys read as zero through ``StatsSummary.count``.
"""

from __future__ import annotations

import datetime as dt
import math
from collections import Counter
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from .models import AttendanceRecord, PerformanceReview, StatsSummary


def format_average(total: float, count: int) -> str:
    if count <= 0:
        return "0"
    return f"{total / count:.1f}"


def count_by(records: Iterable[Any], key_fn: Callable[[Any], Optional[str]]) -> Dict[str, int]:
    counter: Counter[str] = Counter()
    for record in records:
        key = key_fn(record)
        if key:
            counter[key] += 1
    return dict(counter)


def compute_stats(
    records: Sequence[Any],
    category_fn: Callable[[Any], Optional[str]],
    value_fn: Optional[Callable[[Any], float]] = None,
) -> StatsSummary:
    """Counts per category plus sum and one-decimal average of ``value_fn``."""

    total = len(records)
    value_sum = float(sum(value_fn(record) for record in records)) if value_fn else 0.0
    return StatsSummary(
        total=total,
        counts=count_by(records, category_fn),
        value_sum=value_sum,
        average=format_average(value_sum, total),
    )


def attendance_stats(records: Sequence[AttendanceRecord]) -> StatsSummary:
    """Status tally for the attendance overview.

    A late arrival counts as both ``late`` and ``present``. Records with
    status ``not_marked`` are left out of the tally but still count towards
    the total.
    """

    counts: Dict[str, int] = {}
    for record in records:
        if record.arrival_status == "Late":
            counts["late"] = counts.get("late", 0) + 1
            counts["present"] = counts.get("present", 0) + 1
        elif record.status != "not_marked":
            counts[record.status] = counts.get(record.status, 0) + 1

    total = len(records)
    total_work_hours = float(sum(record.work_hours for record in records))
    return StatsSummary(
        total=total,
        counts=counts,
        value_sum=total_work_hours,
        average=format_average(total_work_hours, total),
    )


def format_work_hours(hours: float) -> str:
    """Render decimal hours as ``"1 hour 30 mins"`` style text."""

    if not hours:
        return "0 mins"
    total_minutes = math.floor(hours * 60 + 0.5)
    hrs, mins = divmod(total_minutes, 60)
    if hrs == 0:
        return f"{mins} mins"
    label = f"{hrs} hour{'s' if hrs > 1 else ''}"
    if mins == 0:
        return label
    return f"{label} {mins} mins"


def percentage(part: float, whole: float) -> float:
    if not whole:
        return 0.0
    return round(part / whole * 100, 1)


def _review_day(review: PerformanceReview) -> Optional[dt.date]:
    try:
        return dt.date.fromisoformat(review.last_review_date)
    except (TypeError, ValueError):
        return None


def review_summary(reviews: Iterable[PerformanceReview], employee_id: str) -> Optional[Dict[str, Any]]:
    """Average and latest rating of one employee, ``None`` without reviews."""

    own = [review for review in reviews if review.employee_id == employee_id]
    if not own:
        return None
    avg_rating = sum(review.rating for review in own) / len(own)
    latest = max(own, key=lambda review: _review_day(review) or dt.date.min)
    if avg_rating > latest.rating:
        trend = "Decreasing"
    elif avg_rating < latest.rating:
        trend = "Increasing"
    else:
        trend = "Stable"
    return {
        "avg_rating": avg_rating,
        "total_reviews": len(own),
        "latest_rating": latest.rating,
        "last_review_date": latest.last_review_date,
        "trend": trend,
    }


def monthly_average_ratings(reviews: Iterable[PerformanceReview], employee_id: str) -> List[float]:
    totals = [0.0] * 12
    counts = [0] * 12
    for review in reviews:
        if review.employee_id != employee_id:
            continue
        day = _review_day(review)
        if day is None:
            continue
        totals[day.month - 1] += review.rating
        counts[day.month - 1] += 1
    return [total / count if count else 0.0 for total, count in zip(totals, counts)]


__all__ = [
    "attendance_stats",
    "compute_stats",
    "count_by",
    "format_average",
    "format_work_hours",
    "monthly_average_ratings",
    "percentage",
    "review_summary",
]
