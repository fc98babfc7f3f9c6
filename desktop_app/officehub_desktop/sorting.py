"""Sorting of list pages with a missing-last policy."""

from __future__ import annotations

import datetime as dt
from typing import Any, Callable, Iterable, List, Optional, Tuple, TypeVar

from .models import SortOrder

T = TypeVar("T")


def apply_sort(records: Iterable[T], order: SortOrder, key_fn: Callable[[T], Any]) -> List[T]:
    """Sort ``records`` by ``key_fn`` in the given direction.

    Records whose key is ``None`` always end up last, in their original
    order. Equal keys keep their relative order in both directions.
    ``SortOrder.NONE`` returns the records unchanged.
    """

    items = list(records)
    if order is SortOrder.NONE:
        return items

    present: List[T] = []
    missing: List[T] = []
    for record in items:
        (missing if key_fn(record) is None else present).append(record)

    present.sort(key=key_fn, reverse=order is SortOrder.DESC)
    return present + missing


def sign_in_key(record: Any) -> Optional[Tuple[dt.time, dt.date]]:
    """Check-in time of day, then date; ``None`` without a usable time."""

    sign_in = getattr(record, "sign_in", None)
    if not sign_in:
        return None
    try:
        time_of_day = dt.time.fromisoformat(sign_in)
    except (TypeError, ValueError):
        return None
    try:
        day = dt.date.fromisoformat(getattr(record, "date", "") or "")
    except (TypeError, ValueError):
        day = dt.date.min
    return time_of_day, day


def text_key(field_name: str) -> Callable[[Any], Optional[str]]:
    """Case-insensitive key on a text field, ``None`` for empty values."""

    def _key(record: Any) -> Optional[str]:
        value = getattr(record, field_name, None)
        if value in (None, ""):
            return None
        return str(value).lower()

    return _key


__all__ = ["apply_sort", "sign_in_key", "text_key"]
