"""Display styles for status-like values.

Every enum member has an entry in ``STATUS_STYLES``; unknown strings fall
back to a neutral style instead of raising.
"""

from __future__ import annotations

import enum
from typing import Dict, NamedTuple, Union


class Style(NamedTuple):
    label: str
    colour: str


class AttendanceStatus(str, enum.Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    HALF_DAY = "half-day"
    NOT_MARKED = "not_marked"


class Priority(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class LeaveStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


NEUTRAL_STYLE = Style("-", "#6b7280")

STATUS_STYLES: Dict[enum.Enum, Style] = {
    AttendanceStatus.PRESENT: Style("Present", "#0f9d58"),
    AttendanceStatus.ABSENT: Style("Absent", "#db4437"),
    AttendanceStatus.LATE: Style("Late", "#f4b400"),
    AttendanceStatus.HALF_DAY: Style("Half Day", "#ff6d00"),
    AttendanceStatus.NOT_MARKED: Style("Not Marked", "#9e9e9e"),
    Priority.HIGH: Style("High Priority", "#db4437"),
    Priority.MEDIUM: Style("Medium Priority", "#f4b400"),
    Priority.LOW: Style("Low Priority", "#0f9d58"),
    LeaveStatus.PENDING: Style("Pending", "#f4b400"),
    LeaveStatus.APPROVED: Style("Approved", "#0f9d58"),
    LeaveStatus.REJECTED: Style("Rejected", "#db4437"),
}

_STATUS_ENUMS = (AttendanceStatus, Priority, LeaveStatus)


def _key(value: str) -> str:
    key = value.strip().lower().replace(" priority", "")
    return key.replace(" ", "_").replace("-", "_")


_BY_KEY: Dict[str, enum.Enum] = {
    _key(member.value): member for enum_type in _STATUS_ENUMS for member in enum_type
}


def style_for(value: Union[str, enum.Enum, None]) -> Style:
    """Style of an enum member or a raw backend string."""

    if isinstance(value, enum.Enum):
        return STATUS_STYLES.get(value, NEUTRAL_STYLE)
    if not value:
        return NEUTRAL_STYLE
    member = _BY_KEY.get(_key(value))
    if member is None:
        return Style(value, NEUTRAL_STYLE.colour)
    return STATUS_STYLES[member]


__all__ = [
    "AttendanceStatus",
    "LeaveStatus",
    "NEUTRAL_STYLE",
    "Priority",
    "STATUS_STYLES",
    "Style",
    "style_for",
]
