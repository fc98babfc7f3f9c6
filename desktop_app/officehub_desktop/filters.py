"""Client-side search and category filtering of fetched records."""

from __future__ import annotations

from typing import Any, Iterable, List, Optional, Sequence, TypeVar

from .models import ALL_CATEGORIES, ListState

T = TypeVar("T")


def _field_text(record: Any, field_name: str) -> str:
    value = getattr(record, field_name, None)
    if value is None:
        return ""
    return str(value).lower()


def matches_category(record: Any, selected_category: str, category_field: Optional[str]) -> bool:
    if not category_field or not selected_category or selected_category == ALL_CATEGORIES:
        return True
    return _field_text(record, category_field) == selected_category.lower()


def matches_search(record: Any, search_term: str, search_fields: Sequence[str]) -> bool:
    term = search_term.lower()
    if not term:
        return True
    return any(term in _field_text(record, name) for name in search_fields)


def apply_filters(
    records: Iterable[T],
    state: ListState,
    search_fields: Sequence[str],
    category_field: Optional[str] = None,
) -> List[T]:
    """Return the records matching both the category and the search term.

    Both predicates compare lower-cased text. ``"all"`` disables the category
    filter and an empty search term matches everything.
    """

    return [
        record
        for record in records
        if matches_category(record, state.selected_category, category_field)
        and matches_search(record, state.search_term, search_fields)
    ]


def distinct_values(records: Iterable[Any], field_name: str) -> List[str]:
    """Sorted distinct non-empty values of ``field_name`` for filter drop-downs."""

    values = {str(getattr(record, field_name, "") or "") for record in records}
    values.discard("")
    return sorted(values, key=str.lower)


__all__ = ["apply_filters", "distinct_values", "matches_category", "matches_search"]
