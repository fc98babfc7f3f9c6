"""Per-page configuration of the generic list controller.

Each page only supplies its record shape, the fields used by search and
category filters, its sort key and its aggregate rule.
"""

from __future__ import annotations

import calendar
import enum
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from . import models
from .models import StatsSummary
from .sorting import sign_in_key, text_key
from .stats import attendance_stats, compute_stats, monthly_average_ratings, review_summary


class UploadMode(str, enum.Enum):
    """How file-bearing mutations reach the backend."""

    NONE = "none"
    MULTIPART = "multipart"
    UPLOAD_THEN_REFERENCE = "upload_then_reference"


@dataclass(frozen=True)
class PageDefinition:
    key: str
    title: str
    record_label: str
    resource: str
    record_factory: Callable[[Mapping[str, Any]], Any]
    columns: Tuple[Tuple[str, str], ...]
    search_fields: Tuple[str, ...]
    list_resource: Optional[str] = None
    id_field: str = "id"
    category_field: Optional[str] = None
    sort_key: Optional[Callable[[Any], Any]] = None
    stats_fn: Optional[Callable[[Sequence[Any]], StatsSummary]] = None
    stat_cards: Tuple[Tuple[str, str], ...] = ()
    required_fields: Tuple[str, ...] = ()
    read_only: bool = False
    upload_mode: UploadMode = UploadMode.NONE
    metadata_field: Optional[str] = None
    create_upload_path: Optional[str] = None
    update_upload_path: Optional[str] = None
    reference_field: Optional[str] = None
    reference_source: str = "fileDownloadUri"
    uses_date_range: bool = False
    action_paths: Mapping[str, str] = field(default_factory=dict)
    action_required: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    action_params: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    file_field: Optional[str] = None
    detail_fn: Optional[Callable[[Sequence[Any], Any], str]] = None

    def list_path(self, context: Mapping[str, Any]) -> str:
        """Collection endpoint, with ``{placeholders}`` filled from ``context``."""

        return (self.list_resource or self.resource).format(**context)

    def blank_payload(self) -> Dict[str, Any]:
        """Template for the create form; required fields start out empty."""

        payload = self.record_factory({}).to_payload()
        for name in self.required_fields:
            sample = payload.get(name)
            if isinstance(sample, (int, float)) and not isinstance(sample, bool):
                payload[name] = 0
            else:
                payload[name] = ""
        return payload

    def record_id(self, record: Any) -> Any:
        return getattr(record, self.id_field, None)

    def summarize(self, records: Sequence[Any]) -> StatsSummary:
        if self.stats_fn is None:
            return StatsSummary(total=len(records))
        return self.stats_fn(records)


def _by(attribute: str, value_attribute: Optional[str] = None) -> Callable[[Sequence[Any]], StatsSummary]:
    """Stats function counting by ``attribute`` and summing ``value_attribute``."""

    def _stats(records: Sequence[Any]) -> StatsSummary:
        def _category(record: Any) -> Optional[str]:
            return getattr(record, attribute, None)

        def _value(record: Any) -> float:
            return float(getattr(record, value_attribute, 0) or 0)

        return compute_stats(records, _category, _value if value_attribute else None)

    return _stats


def _review_details(reviews: Sequence[models.PerformanceReview], review: models.PerformanceReview) -> str:
    summary = review_summary(reviews, review.employee_id)
    if summary is None:
        return ""
    text = (
        f"{review.employee_name}: average rating {summary['avg_rating']:.1f} over "
        f"{summary['total_reviews']} review(s), latest {summary['latest_rating']:.1f} ({summary['trend']})"
    )
    months = monthly_average_ratings(reviews, review.employee_id)
    monthly = ", ".join(
        f"{calendar.month_abbr[index + 1]} {rating:.1f}" for index, rating in enumerate(months) if rating
    )
    if monthly:
        text += f"\nMonthly averages: {monthly}"
    return text


PAGES: Dict[str, PageDefinition] = {
    page.key: page
    for page in (
        PageDefinition(
            key="attendance",
            title="Attendance",
            record_label="Attendance record",
            resource="attendance/by-date-range",
            record_factory=models.AttendanceRecord.from_dto,
            columns=(
                ("employee_id", "Employee ID"),
                ("employee_name", "Name"),
                ("department", "Department"),
                ("date", "Date"),
                ("sign_in", "Sign In"),
                ("sign_out", "Sign Out"),
                ("status", "Status"),
                ("arrival_status", "Arrival"),
                ("work_hours", "Hours"),
                ("work_location", "Location"),
            ),
            search_fields=("employee_name", "employee_id", "department"),
            category_field="department",
            sort_key=sign_in_key,
            stats_fn=attendance_stats,
            stat_cards=(
                ("present", "Total Present"),
                ("late", "Late Arrivals"),
                ("half-day", "Half Days"),
                ("absent", "Absent"),
            ),
            read_only=True,
            uses_date_range=True,
        ),
        PageDefinition(
            key="employees",
            title="Employees",
            record_label="Employee",
            resource="employees",
            record_factory=models.Employee.from_dto,
            columns=(
                ("employee_id", "Employee ID"),
                ("name", "Name"),
                ("position", "Position"),
                ("department", "Department"),
                ("email", "Email"),
                ("phone", "Phone"),
                ("joining_date", "Joined"),
                ("status", "Status"),
            ),
            search_fields=("name", "employee_id", "department", "position"),
            category_field="department",
            sort_key=text_key("name"),
            stats_fn=_by("status"),
            stat_cards=(("Active", "Active"), ("Inactive", "Inactive")),
            required_fields=("employeeId", "employeeName", "department"),
        ),
        PageDefinition(
            key="documents",
            title="Documents",
            record_label="Document",
            resource="hr/documents",
            record_factory=models.HrDocument.from_dto,
            columns=(
                ("employee_id", "Employee ID"),
                ("document_type", "Type"),
                ("original_file_name", "File"),
                ("file_type", "Format"),
                ("size", "Size"),
            ),
            search_fields=("employee_id", "file_name", "original_file_name"),
            category_field="document_type",
            stats_fn=_by("document_type", "size"),
            required_fields=("employeeId", "documentType"),
            upload_mode=UploadMode.UPLOAD_THEN_REFERENCE,
            create_upload_path="hr/upload/{documentType}/{employeeId}",
            update_upload_path="hr/upload/{documentType}/{employeeId}",
            file_field="file_download_uri",
        ),
        PageDefinition(
            key="memos",
            title="Memos",
            record_label="Memo",
            resource="memos",
            list_resource="memos/admin/{user_id}",
            record_factory=models.Memo.from_dto,
            columns=(
                ("title", "Title"),
                ("type", "Type"),
                ("priority", "Priority"),
                ("sender", "From"),
                ("department", "Department"),
                ("date", "Date"),
                ("status", "Status"),
            ),
            search_fields=("title", "description", "sender"),
            category_field="type",
            sort_key=text_key("date"),
            stats_fn=_by("status"),
            stat_cards=(("unread", "Unread"), ("read", "Read")),
            required_fields=("subject", "content"),
        ),
        PageDefinition(
            key="leaves",
            title="Leave Requests",
            record_label="Leave request",
            resource="leave-requests",
            list_resource="leave-requests/hr/all",
            record_factory=models.LeaveRequest.from_dto,
            columns=(
                ("employee_id", "Employee ID"),
                ("name", "Name"),
                ("leave_type", "Type"),
                ("start_date", "From"),
                ("end_date", "To"),
                ("days", "Days"),
                ("status", "Status"),
                ("reason", "Reason"),
            ),
            search_fields=("name", "employee_id", "leave_type"),
            category_field="status",
            sort_key=text_key("start_date"),
            stats_fn=_by("status", "days"),
            stat_cards=(("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")),
            required_fields=("employeeId", "leaveType", "startDate", "endDate"),
            action_paths={
                "approve": "leave-requests/hr/{id}/approve",
                "reject": "leave-requests/hr/{id}/reject",
            },
            action_required={"reject": ("hrComments",)},
            action_params={"approve": {"hrComments": "Approved"}},
        ),
        PageDefinition(
            key="reviews",
            title="Performance Reviews",
            record_label="Performance review",
            resource="performance-reviews",
            record_factory=models.PerformanceReview.from_dto,
            columns=(
                ("employee_id", "Employee ID"),
                ("employee_name", "Name"),
                ("department", "Department"),
                ("review_status", "Status"),
                ("rating", "Rating"),
                ("last_review_date", "Last Review"),
                ("next_review_date", "Next Review"),
                ("reviewer", "Reviewer"),
            ),
            search_fields=("employee_name", "employee_id", "department"),
            category_field="review_status",
            sort_key=text_key("next_review_date"),
            stats_fn=_by("review_status", "rating"),
            stat_cards=(("completed", "Completed"), ("pending", "Pending"), ("overdue", "Overdue")),
            required_fields=("reviewer",),
            detail_fn=_review_details,
        ),
        PageDefinition(
            key="materials",
            title="Inventory",
            record_label="Material transaction",
            resource="materials",
            record_factory=models.MaterialMovement.from_dto,
            columns=(
                ("name", "Material"),
                ("part_number", "Part No."),
                ("quantity", "Qty"),
                ("type", "In/Out"),
                ("person_name", "Person"),
                ("department", "Department"),
                ("collect_date", "Collected"),
                ("return_date", "Returned"),
            ),
            search_fields=("name", "part_number", "person_name"),
            category_field="type",
            stats_fn=_by("type", "quantity"),
            stat_cards=(("in", "Material In"), ("out", "Material Out")),
            required_fields=("name", "partNumber", "quantity", "type"),
        ),
        PageDefinition(
            key="travel",
            title="Travel Expenses",
            record_label="Travel expense",
            resource="travel",
            record_factory=models.TravelExpense.from_dto,
            columns=(
                ("vendor", "Vendor"),
                ("from_date", "From"),
                ("to_date", "To"),
                ("no_of_days", "Days"),
                ("advance_pay", "Advance"),
                ("payment_mode", "Mode"),
                ("payment_date", "Paid On"),
            ),
            search_fields=("vendor", "remarks"),
            category_field="payment_mode",
            sort_key=text_key("payment_date"),
            stats_fn=_by("payment_mode", "advance_pay"),
            required_fields=("vendor", "fromDate", "toDate"),
            upload_mode=UploadMode.MULTIPART,
            metadata_field="travelData",
            create_upload_path="travel/upload",
            update_upload_path="travel/upload/{id}",
            file_field="document_path",
        ),
        PageDefinition(
            key="petty-cash",
            title="Petty Cash",
            record_label="Petty cash entry",
            resource="petty-cash",
            record_factory=models.PettyCashEntry.from_dto,
            columns=(
                ("item_name", "Item"),
                ("paid_to", "Paid To"),
                ("bill_no", "Bill No."),
                ("amount", "Amount"),
                ("payment_mode", "Mode"),
                ("payment_date", "Paid On"),
            ),
            search_fields=("item_name", "paid_to", "bill_no"),
            category_field="payment_mode",
            sort_key=text_key("payment_date"),
            stats_fn=_by("payment_mode", "amount"),
            required_fields=("item_name", "paid_to", "amount"),
            upload_mode=UploadMode.MULTIPART,
            metadata_field="pettyCashData",
            create_upload_path="petty-cash/upload",
            update_upload_path="petty-cash/upload/{id}",
            file_field="document_path",
        ),
        PageDefinition(
            key="bank-details",
            title="Bank Details",
            record_label="Bank detail",
            resource="bank-details",
            record_factory=models.BankDetail.from_dto,
            columns=(
                ("employee_id", "Employee ID"),
                ("employee_name", "Name"),
                ("bank_name", "Bank"),
                ("account_number", "Account"),
                ("ifsc_code", "IFSC"),
                ("uan", "UAN"),
                ("pan", "PAN"),
            ),
            search_fields=("employee_name", "employee_id", "bank_name"),
            category_field="bank_name",
            sort_key=text_key("employee_name"),
            stats_fn=_by("bank_name"),
            required_fields=("employeeId", "bankName", "accountNumber"),
        ),
        PageDefinition(
            key="activities",
            title="Activities",
            record_label="Activity",
            resource="activities",
            record_factory=models.Activity.from_dto,
            columns=(
                ("title", "Title"),
                ("category", "Category"),
                ("date", "Date"),
                ("time", "Time"),
                ("status", "Status"),
                ("priority", "Priority"),
                ("assigned_to", "Assigned To"),
            ),
            search_fields=("title", "assigned_to", "category"),
            category_field="category",
            sort_key=text_key("date"),
            stats_fn=_by("status"),
            stat_cards=(("pending", "Pending"), ("in-progress", "In Progress"), ("completed", "Completed")),
            required_fields=("title", "activityDate"),
        ),
    )
}


def get_page(key: str) -> PageDefinition:
    try:
        return PAGES[key]
    except KeyError:
        raise KeyError(f"Unknown page: {key}") from None


__all__ = ["PAGES", "PageDefinition", "UploadMode", "get_page"]
