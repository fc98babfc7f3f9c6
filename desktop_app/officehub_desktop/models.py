"""Data models for the desktop application."""

from __future__ import annotations

import datetime as dt
import enum
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol

from .normalize import (first_present, int_or, lower_or, normalize_date,
                        normalize_time, number_or, optional_text, text_or)

ALL_CATEGORIES = "all"


class ViewRecord(Protocol):
    """Shape shared by every list page record."""

    id: Any

    def to_payload(self) -> Dict[str, Any]:
        ...


# ----------------------------------------------------------------------
# List state
# ----------------------------------------------------------------------
class SortOrder(str, enum.Enum):
    """Tri-state sort order driven by two toggle buttons."""

    NONE = "none"
    ASC = "asc"
    DESC = "desc"

    def toggle_asc(self) -> "SortOrder":
        return SortOrder.NONE if self is SortOrder.ASC else SortOrder.ASC

    def toggle_desc(self) -> "SortOrder":
        return SortOrder.NONE if self is SortOrder.DESC else SortOrder.DESC


@dataclass(slots=True)
class ListState:
    """Search, category and sort selection of one list page."""

    search_term: str = ""
    selected_category: str = ALL_CATEGORIES
    sort_order: SortOrder = SortOrder.NONE


@dataclass(slots=True)
class StatsSummary:
    """Counts and numeric summaries for the dashboard stat cards."""

    total: int = 0
    counts: Dict[str, int] = field(default_factory=dict)
    value_sum: float = 0.0
    average: str = "0"

    def count(self, key: str) -> int:
        return self.counts.get(key, 0)


@dataclass(slots=True)
class Notice:
    """Point-in-time notification raised by a mutation."""

    level: str
    message: str


# ----------------------------------------------------------------------
# Records
# ----------------------------------------------------------------------
@dataclass(slots=True)
class AttendanceRecord:
    """One attendance row of the admin overview."""

    id: str
    employee_id: str
    employee_name: str
    department: str
    date: str
    sign_in: Optional[str]
    sign_out: Optional[str]
    status: str
    work_hours: float = 0.0
    work_location: str = "-"
    arrival_status: str = "N/A"

    @classmethod
    def from_dto(cls, dto: Mapping[str, Any]) -> "AttendanceRecord":
        employee_id = text_or(dto.get("employeeId"))
        day = normalize_date(dto.get("date"))
        record_id = dto.get("id")
        return cls(
            id=str(record_id) if record_id is not None else f"{employee_id}:{day}",
            employee_id=employee_id,
            employee_name=text_or(dto.get("employeeName"), "Unknown"),
            department=text_or(dto.get("department"), "Unknown"),
            date=day,
            sign_in=optional_text(normalize_time(dto.get("checkInTime"))),
            sign_out=optional_text(normalize_time(dto.get("checkOutTime"))),
            status=text_or(dto.get("status"), "not_marked"),
            work_hours=number_or(dto.get("workHours"), 0.0),
            work_location=text_or(dto.get("workLocation"), "-"),
            arrival_status=text_or(dto.get("arrivalStatus"), "N/A"),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "employeeId": self.employee_id,
            "checkInTime": self.sign_in,
            "checkOutTime": self.sign_out,
            "workLocation": self.work_location,
        }


@dataclass(slots=True)
class Employee:
    id: str
    employee_id: str
    name: str
    position: str
    department: str
    email: str = ""
    phone: str = ""
    joining_date: str = ""
    status: str = "Active"

    @classmethod
    def from_dto(cls, dto: Mapping[str, Any]) -> "Employee":
        employee_id = text_or(first_present(dto, "employeeId", "id"))
        return cls(
            id=employee_id,
            employee_id=employee_id,
            name=text_or(first_present(dto, "employeeName", "name"), "Unknown"),
            position=text_or(dto.get("position"), "-"),
            department=text_or(dto.get("department"), "Unknown"),
            email=text_or(dto.get("email")),
            phone=text_or(first_present(dto, "phoneNumber", "phone")),
            joining_date=normalize_date(first_present(dto, "joiningDate", "joinDate")),
            status=text_or(dto.get("status"), "Active"),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "employeeId": self.employee_id,
            "employeeName": self.name,
            "position": self.position,
            "department": self.department,
            "email": self.email,
            "phoneNumber": self.phone,
            "joiningDate": self.joining_date,
            "status": self.status,
        }


@dataclass(slots=True)
class HrDocument:
    """Uploaded employee document."""

    id: int
    employee_id: str
    document_type: str
    file_name: str
    file_download_uri: str = ""
    file_type: str = ""
    size: int = 0
    original_file_name: str = ""

    @classmethod
    def from_dto(cls, dto: Mapping[str, Any]) -> "HrDocument":
        file_name = text_or(dto.get("fileName"))
        return cls(
            id=int_or(dto.get("id")),
            employee_id=text_or(dto.get("employeeId")),
            document_type=lower_or(dto.get("documentType")),
            file_name=file_name,
            file_download_uri=text_or(dto.get("fileDownloadUri")),
            file_type=text_or(dto.get("fileType")),
            size=int_or(dto.get("size")),
            original_file_name=text_or(dto.get("originalFileName"), file_name),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "employeeId": self.employee_id,
            "documentType": self.document_type.upper(),
            "fileName": self.file_name,
            "originalFileName": self.original_file_name,
        }


@dataclass(slots=True)
class Memo:
    id: str
    title: str
    type: str
    priority: str
    sender: str
    department: str
    date: str
    description: str = ""
    time: Optional[str] = None
    status: str = "unread"
    tags: List[str] = field(default_factory=list)

    @classmethod
    def from_dto(cls, dto: Mapping[str, Any]) -> "Memo":
        memo_id = first_present(dto, "id", "memoId")
        departments = dto.get("recipientDepartments")
        department = departments[0] if isinstance(departments, list) and departments else dto.get("department")
        raw_status = dto.get("status")
        tags = dto.get("tags")
        memo_date = normalize_date(first_present(dto, "meetingDate", "date", "createdAt"))
        return cls(
            id=str(memo_id) if memo_id is not None else uuid.uuid4().hex,
            title=text_or(first_present(dto, "title", "subject"), "Memo"),
            type=text_or(first_present(dto, "meetingType", "type"), "announcement"),
            priority=text_or(dto.get("priority"), "Medium Priority"),
            sender=text_or(first_present(dto, "sentByName", "sentBy", "adminName"), "Admin"),
            department=text_or(department, "All"),
            date=memo_date or dt.date.today().isoformat(),
            description=text_or(first_present(dto, "content", "message", "description")),
            time=optional_text(normalize_time(dto.get("time"))),
            status="read" if isinstance(raw_status, str) and raw_status.lower() == "read" else "unread",
            tags=list(tags) if isinstance(tags, list) else [],
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "subject": self.title,
            "meetingType": self.type,
            "priority": self.priority,
            "content": self.description,
            "meetingDate": self.date,
            "recipientDepartments": [self.department],
        }


@dataclass(slots=True)
class LeaveRequest:
    id: str
    employee_id: str
    name: str
    leave_type: str
    start_date: str
    end_date: str
    days: float = 0
    status: str = "pending"
    reason: str = ""
    rejection_reason: Optional[str] = None

    @classmethod
    def from_dto(cls, dto: Mapping[str, Any]) -> "LeaveRequest":
        raw_status = text_or(dto.get("status"), "PENDING")
        comments = dto.get("hrComments")
        return cls(
            id=text_or(dto.get("id")),
            employee_id=text_or(dto.get("employeeId")),
            name=text_or(dto.get("employeeName")),
            leave_type=text_or(dto.get("leaveType")),
            start_date=normalize_date(dto.get("startDate")),
            end_date=normalize_date(dto.get("endDate")),
            days=number_or(dto.get("numberOfDays"), 0),
            status=raw_status.lower(),
            reason=text_or(dto.get("reason")),
            rejection_reason=comments if raw_status == "REJECTED" and isinstance(comments, str) else None,
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "employeeId": self.employee_id,
            "leaveType": self.leave_type,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "reason": self.reason,
        }


@dataclass(slots=True)
class PerformanceReview:
    id: int
    employee_id: str
    employee_name: str
    position: str
    department: str
    review_status: str
    rating: float
    last_review_date: str
    next_review_date: str
    reviewer: str
    goals: str = ""
    feedback: str = ""
    achievements: str = ""

    @classmethod
    def from_dto(cls, dto: Mapping[str, Any]) -> "PerformanceReview":
        employee = dto.get("employee")
        if not isinstance(employee, Mapping):
            employee = {}
        return cls(
            id=int_or(dto.get("id")),
            employee_id=text_or(first_present(employee, "employeeId") or dto.get("employeeId")),
            employee_name=text_or(employee.get("employeeName"), "Unknown"),
            position=text_or(employee.get("position"), "-"),
            department=text_or(employee.get("department"), "Unknown"),
            review_status=lower_or(dto.get("reviewStatus"), "pending"),
            rating=number_or(dto.get("rating"), 0.0),
            last_review_date=normalize_date(dto.get("lastReviewDate")),
            next_review_date=normalize_date(dto.get("nextReviewDate")),
            reviewer=text_or(dto.get("reviewer"), "-"),
            goals=text_or(dto.get("goals")),
            feedback=text_or(dto.get("feedback")),
            achievements=text_or(dto.get("achievements")),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "employee": {"employeeId": self.employee_id},
            "reviewStatus": self.review_status.upper(),
            "rating": self.rating,
            "lastReviewDate": self.last_review_date,
            "nextReviewDate": self.next_review_date,
            "reviewer": self.reviewer,
            "goals": self.goals,
            "feedback": self.feedback,
            "achievements": self.achievements,
        }


@dataclass(slots=True)
class MaterialMovement:
    """Store inventory transaction (material in or out)."""

    id: int
    name: str
    part_number: str
    quantity: float
    type: str
    person_name: str = ""
    department: str = ""
    collect_date: str = ""
    return_date: str = ""
    remarks: str = ""

    @classmethod
    def from_dto(cls, dto: Mapping[str, Any]) -> "MaterialMovement":
        return cls(
            id=int_or(dto.get("id")),
            name=text_or(dto.get("name")),
            part_number=text_or(dto.get("partNumber")),
            quantity=number_or(dto.get("quantity"), 0),
            type=lower_or(dto.get("type"), "in"),
            person_name=text_or(dto.get("personName")),
            department=text_or(dto.get("department")),
            collect_date=normalize_date(dto.get("collectDate")),
            return_date=normalize_date(dto.get("returnDate")),
            remarks=text_or(dto.get("remarks")),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "partNumber": self.part_number,
            "quantity": self.quantity,
            "type": self.type,
            "personName": self.person_name,
            "department": self.department,
            "collectDate": self.collect_date or None,
            "returnDate": self.return_date or None,
            "remarks": self.remarks,
        }


@dataclass(slots=True)
class TravelExpense:
    id: int
    vendor: str
    from_date: str
    to_date: str
    no_of_days: int
    advance_pay: float
    payment_mode: str
    payment_date: str
    remarks: str = ""
    document_path: Optional[str] = None

    @classmethod
    def from_dto(cls, dto: Mapping[str, Any]) -> "TravelExpense":
        return cls(
            id=int_or(dto.get("id")),
            vendor=text_or(dto.get("vendor")),
            from_date=normalize_date(dto.get("fromDate")),
            to_date=normalize_date(dto.get("toDate")),
            no_of_days=int_or(dto.get("noOfDays")),
            advance_pay=number_or(dto.get("advancePay"), 0.0),
            payment_mode=text_or(dto.get("paymentMode"), "CASH"),
            payment_date=normalize_date(dto.get("paymentDate")),
            remarks=text_or(dto.get("remarks")),
            document_path=optional_text(dto.get("documentPath")),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "vendor": self.vendor,
            "fromDate": self.from_date,
            "toDate": self.to_date,
            "noOfDays": self.no_of_days,
            "advancePay": self.advance_pay,
            "paymentMode": self.payment_mode,
            "paymentDate": self.payment_date,
            "remarks": self.remarks,
        }


@dataclass(slots=True)
class PettyCashEntry:
    id: int
    item_name: str
    paid_to: str
    bill_no: str
    amount: float
    payment_mode: str
    payment_date: str
    remarks: str = ""
    document_path: Optional[str] = None

    @classmethod
    def from_dto(cls, dto: Mapping[str, Any]) -> "PettyCashEntry":
        return cls(
            id=int_or(dto.get("id")),
            item_name=text_or(dto.get("item_name")),
            paid_to=text_or(dto.get("paid_to")),
            bill_no=text_or(dto.get("bill_no")),
            amount=number_or(dto.get("amount"), 0.0),
            payment_mode=text_or(dto.get("paymentMode"), "CASH"),
            payment_date=normalize_date(dto.get("payment_date")),
            remarks=text_or(dto.get("remarks")),
            document_path=optional_text(first_present(dto, "documentPath", "document_path")),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "item_name": self.item_name,
            "paid_to": self.paid_to,
            "bill_no": self.bill_no,
            "amount": self.amount,
            "paymentMode": self.payment_mode,
            "payment_date": self.payment_date,
            "remarks": self.remarks,
        }


@dataclass(slots=True)
class BankDetail:
    id: int
    employee_id: str
    employee_name: str
    bank_name: str = "N/A"
    account_number: str = "N/A"
    account_holder_name: str = "N/A"
    bank_branch: str = "N/A"
    ifsc_code: str = "N/A"
    pf_number: str = "N/A"
    uan: str = "N/A"
    pan: str = "N/A"

    @classmethod
    def from_dto(cls, dto: Mapping[str, Any]) -> "BankDetail":
        return cls(
            id=int_or(dto.get("id")),
            employee_id=text_or(dto.get("employeeId")),
            employee_name=text_or(dto.get("employeeName")),
            bank_name=text_or(dto.get("bankName"), "N/A"),
            account_number=text_or(first_present(dto, "accountNumber", "bankAccount"), "N/A"),
            account_holder_name=text_or(dto.get("accountHolderName"), "N/A"),
            bank_branch=text_or(dto.get("bankBranch"), "N/A"),
            ifsc_code=text_or(dto.get("ifscCode"), "N/A"),
            pf_number=text_or(dto.get("pfNumber"), "N/A"),
            uan=text_or(dto.get("uan"), "N/A"),
            pan=text_or(first_present(dto, "pan", "panNumber"), "N/A"),
        )

    def to_payload(self) -> Dict[str, Any]:
        def _value(text: str) -> Optional[str]:
            return None if text == "N/A" else text

        return {
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "bankName": _value(self.bank_name),
            "accountNumber": _value(self.account_number),
            "accountHolderName": _value(self.account_holder_name),
            "bankBranch": _value(self.bank_branch),
            "ifscCode": _value(self.ifsc_code),
            "pfNumber": _value(self.pf_number),
            "uan": _value(self.uan),
            "pan": _value(self.pan),
        }


@dataclass(slots=True)
class Activity:
    """HR activity (event, task) with its schedule."""

    id: str
    title: str
    category: str
    date: str
    time: str
    status: str = "pending"
    priority: str = "medium"
    assigned_to: str = ""
    description: str = ""
    notes: str = ""

    @classmethod
    def from_dto(cls, dto: Mapping[str, Any]) -> "Activity":
        priority = text_or(dto.get("priority"), "Medium Priority").replace(" Priority", "")
        status = lower_or(dto.get("status"), "pending").replace(" ", "-")
        return cls(
            id=text_or(dto.get("id")),
            title=text_or(dto.get("title")),
            category=text_or(dto.get("category"), "General"),
            date=normalize_date(dto.get("activityDate")),
            time=normalize_time(dto.get("activityTime")),
            status=status,
            priority=priority.lower(),
            assigned_to=text_or(dto.get("assignedTo")),
            description=text_or(dto.get("description")),
            notes=text_or(dto.get("notes")),
        )

    def to_payload(self) -> Dict[str, Any]:
        status_label = " ".join(word.capitalize() for word in self.status.split("-"))
        return {
            "title": self.title,
            "description": self.description,
            "activityDate": self.date,
            "activityTime": self.time,
            "status": status_label,
            "assignedTo": self.assigned_to,
            "priority": f"{self.priority[:1].upper()}{self.priority[1:]} Priority",
            "category": self.category,
            "notes": self.notes,
        }


__all__ = [
    "ALL_CATEGORIES",
    "Activity",
    "AttendanceRecord",
    "BankDetail",
    "Employee",
    "HrDocument",
    "LeaveRequest",
    "ListState",
    "MaterialMovement",
    "Memo",
    "Notice",
    "PerformanceReview",
    "PettyCashEntry",
    "SortOrder",
    "StatsSummary",
    "TravelExpense",
    "ViewRecord",
]
