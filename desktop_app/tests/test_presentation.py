import pytest

from officehub_desktop.presentation import (NEUTRAL_STYLE, STATUS_STYLES,
                                            AttendanceStatus, LeaveStatus,
                                            Priority, style_for)


@pytest.mark.parametrize("enum_type", [AttendanceStatus, Priority, LeaveStatus])
def test_every_member_has_a_style(enum_type) -> None:
    for member in enum_type:
        assert member in STATUS_STYLES


def test_style_for_raw_backend_strings() -> None:
    assert style_for("present") is STATUS_STYLES[AttendanceStatus.PRESENT]
    assert style_for("Late") is STATUS_STYLES[AttendanceStatus.LATE]
    assert style_for("High Priority") is STATUS_STYLES[Priority.HIGH]
    assert style_for("APPROVED") is STATUS_STYLES[LeaveStatus.APPROVED]
    assert style_for("not_marked") is STATUS_STYLES[AttendanceStatus.NOT_MARKED]
    assert style_for("half-day") is STATUS_STYLES[AttendanceStatus.HALF_DAY]
    assert style_for("Half Day") is STATUS_STYLES[AttendanceStatus.HALF_DAY]


def test_unknown_values_fall_back_to_neutral() -> None:
    assert style_for(None) is NEUTRAL_STYLE
    style = style_for("Mystery")
    assert style.label == "Mystery"
    assert style.colour == NEUTRAL_STYLE.colour
