"""Normalisation of backend DTO values into view-model values.

The backend encodes dates inconsistently: ISO date strings, ISO datetimes and
``[year, month, day, ...]`` tuples all occur, sometimes on the same endpoint.
Every date-bearing field goes through :func:`normalize_date` right after a
response arrives, so display and filter code only ever sees ``YYYY-MM-DD`` or
an empty string.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional


def normalize_date(value: Any) -> str:
    """Return ``YYYY-MM-DD`` for tuples and ISO datetimes, ``""`` for empty input.

    Tuple components are not range-checked; strings without a ``T`` are
    passed through unchanged.
    """

    if not value:
        return ""
    if isinstance(value, (list, tuple)):
        if len(value) < 3:
            return ""
        year, month, day = value[0], value[1], value[2]
        return f"{year}-{str(month).zfill(2)}-{str(day).zfill(2)}"
    if isinstance(value, str):
        if "T" in value:
            return value.split("T", 1)[0]
        return value
    return ""


def normalize_time(value: Any) -> str:
    """Return ``HH:MM`` (or ``HH:MM:SS``) for ``[hour, minute(, second)]`` tuples."""

    if not value:
        return ""
    if isinstance(value, (list, tuple)):
        if len(value) < 2:
            return ""
        parts = [str(part).zfill(2) for part in value[:3]]
        return ":".join(parts)
    if isinstance(value, str):
        return value
    return ""


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == []


def first_present(dto: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first non-empty value among ``keys`` (backend field aliases)."""

    for key in keys:
        value = dto.get(key)
        if not _is_empty(value):
            return value
    return default


def text_or(value: Any, default: str = "") -> str:
    if _is_empty(value):
        return default
    return str(value)


def lower_or(value: Any, default: str = "") -> str:
    if _is_empty(value):
        return default
    return str(value).lower()


def number_or(value: Any, default: float = 0) -> float:
    if _is_empty(value) or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def int_or(value: Any, default: int = 0) -> int:
    number = number_or(value, default)
    return int(number)


def optional_text(value: Any) -> Optional[str]:
    if _is_empty(value):
        return None
    return str(value)


__all__ = [
    "first_present",
    "int_or",
    "lower_or",
    "normalize_date",
    "normalize_time",
    "number_or",
    "optional_text",
    "text_or",
]
