"""Small text and file helpers used by the forms."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Union

MEMO_MAX_WORDS = 300
MEMO_WARN_WORDS = 250
TEXT_AREA_MAX_CHARS = 250

DEFAULT_MAX_FILE_MB = 50

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def word_count(text: str) -> int:
    return len(text.split()) if text else 0


def limit_words(text: str, max_words: int = MEMO_MAX_WORDS) -> str:
    """Cut ``text`` down to ``max_words`` words joined by single spaces.

    Text within the limit is returned unchanged, whitespace included.
    """

    words = text.split()
    if len(words) <= max_words:
        return text
    return " ".join(words[:max_words])


def limit_chars(text: str, max_chars: int = TEXT_AREA_MAX_CHARS) -> str:
    return text[:max_chars]


def counter_level(count: int, warn: int, maximum: int) -> str:
    """``ok``, ``warn`` or ``over`` for a live word/character counter."""

    if count > maximum:
        return "over"
    if count >= warn:
        return "warn"
    return "ok"


def validate_file_size(size_bytes: int, max_mb: int = DEFAULT_MAX_FILE_MB) -> bool:
    return size_bytes <= max_mb * 1024 * 1024


def format_file_size(size_bytes: float) -> str:
    if not size_bytes:
        return "0 Bytes"
    value = float(size_bytes)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[unit]}"


def flatten_payload(payload: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Nested payload as ``{"employee.employeeId": ...}`` form fields.

    Lists become comma separated text.
    """

    flat: Dict[str, Any] = {}
    for key, value in payload.items():
        name = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(flatten_payload(value, prefix=f"{name}."))
        elif isinstance(value, list):
            flat[name] = ", ".join(str(item) for item in value)
        else:
            flat[name] = value
    return flat


def unflatten_payload(values: Mapping[str, str], template: Mapping[str, Any]) -> Dict[str, Any]:
    """Rebuild a payload from form text using ``template`` for the value types."""

    payload: Dict[str, Any] = {}
    for key, sample in template.items():
        if isinstance(sample, Mapping):
            nested = {name[len(key) + 1:]: text for name, text in values.items() if name.startswith(f"{key}.")}
            payload[key] = unflatten_payload(nested, sample)
            continue
        text = (values.get(key) or "").strip()
        if isinstance(sample, list):
            payload[key] = [part.strip() for part in text.split(",") if part.strip()]
        elif isinstance(sample, bool):
            payload[key] = text.lower() in ("1", "true", "yes")
        elif isinstance(sample, (int, float)):
            payload[key] = _number(text, sample)
        elif sample is None:
            payload[key] = text or None
        else:
            payload[key] = text
    return payload


def _number(text: str, sample: Union[int, float]) -> Union[int, float, None]:
    if not text:
        return None
    try:
        return int(text) if isinstance(sample, int) else float(text)
    except ValueError:
        try:
            return float(text)
        except ValueError:
            return None


__all__ = [
    "MEMO_MAX_WORDS",
    "MEMO_WARN_WORDS",
    "TEXT_AREA_MAX_CHARS",
    "counter_level",
    "flatten_payload",
    "format_file_size",
    "limit_chars",
    "limit_words",
    "unflatten_payload",
    "validate_file_size",
    "word_count",
]
