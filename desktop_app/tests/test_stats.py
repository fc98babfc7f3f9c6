import pytest

from officehub_desktop.models import AttendanceRecord, PerformanceReview
from officehub_desktop.stats import (attendance_stats, compute_stats, count_by,
                                     format_work_hours, monthly_average_ratings,
                                     percentage, review_summary)


def _attendance(**overrides) -> AttendanceRecord:
    dto = {"id": 1, "employeeId": "E1", "date": "2024-06-01", "status": "present"}
    dto.update(overrides)
    return AttendanceRecord.from_dto(dto)


def test_empty_stats_are_zero_safe() -> None:
    summary = compute_stats([], lambda record: record.status)
    assert summary.total == 0
    assert summary.average == "0"
    assert attendance_stats([]).average == "0"


def test_late_arrival_counts_as_late_and_present() -> None:
    summary = attendance_stats([_attendance(arrivalStatus="Late")])
    assert summary.count("late") == 1
    assert summary.count("present") == 1


def test_not_marked_is_counted_in_total_only() -> None:
    summary = attendance_stats([_attendance(status="not_marked")])
    assert summary.total == 1
    assert "not_marked" not in summary.counts


def test_missing_keys_read_as_zero() -> None:
    summary = attendance_stats([_attendance(status="absent")])
    assert summary.count("present") == 0
    assert summary.count("absent") == 1


def test_attendance_average_uses_total(attendance_records) -> None:
    summary = attendance_stats(attendance_records)
    assert summary.total == 3
    assert summary.value_sum == pytest.approx(16.0)
    assert summary.average == "5.3"
    assert summary.counts == {"late": 1, "present": 2}


def test_compute_stats_with_values() -> None:
    rows = [_attendance(workHours=2, status="present"), _attendance(workHours=3, status="absent")]
    summary = compute_stats(rows, lambda record: record.status, lambda record: record.work_hours)
    assert summary.counts == {"present": 1, "absent": 1}
    assert summary.average == "2.5"


def test_count_by_skips_empty_keys() -> None:
    assert count_by(["a", "", None, "a"], lambda value: value) == {"a": 2}


@pytest.mark.parametrize(
    "hours, expected",
    [
        (0, "0 mins"),
        (0.75, "45 mins"),
        (2, "2 hours"),
        (1, "1 hour"),
        (1.5, "1 hour 30 mins"),
        (2.25, "2 hours 15 mins"),
    ],
)
def test_format_work_hours(hours, expected) -> None:
    assert format_work_hours(hours) == expected


def test_percentage() -> None:
    assert percentage(1, 3) == 33.3
    assert percentage(5, 0) == 0.0


def _review(review_id: int, rating: float, day: str, employee_id: str = "E1") -> PerformanceReview:
    return PerformanceReview.from_dto(
        {"id": review_id, "employee": {"employeeId": employee_id}, "rating": rating, "lastReviewDate": day}
    )


def test_review_summary_trend() -> None:
    reviews = [_review(1, 3, "2024-01-10"), _review(2, 5, "2024-04-10"), _review(3, 1, "2024-02-10", "E2")]
    summary = review_summary(reviews, "E1")
    assert summary["total_reviews"] == 2
    assert summary["avg_rating"] == 4
    assert summary["latest_rating"] == 5
    assert summary["trend"] == "Increasing"
    assert review_summary(reviews, "E9") is None


def test_monthly_average_ratings() -> None:
    reviews = [_review(1, 3, "2024-01-10"), _review(2, 5, "2024-01-20"), _review(3, 4, "2024-03-01")]
    averages = monthly_average_ratings(reviews, "E1")
    assert len(averages) == 12
    assert averages[0] == 4
    assert averages[1] == 0
    assert averages[2] == 4
