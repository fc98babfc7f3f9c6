"""CSV, Excel and PDF exports."""

from __future__ import annotations

import datetime as dt
import logging
import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from openpyxl import Workbook
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import cm
from reportlab.pdfgen import canvas

from .date_ranges import month_range
from .filters import apply_filters
from .models import ALL_CATEGORIES, AttendanceRecord, BankDetail, Employee, ListState
from .stats import format_work_hours

logger = logging.getLogger(__name__)

ATTENDANCE_HEADERS = (
    "Employee ID",
    "Employee Name",
    "Department",
    "Date",
    "Sign In",
    "Sign Out",
    "Status",
    "Arrival Status",
    "Work Hours (Decimal)",
    "Work Hours (H:M)",
    "Work Location",
)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9]")


def _quoted(value: Any) -> str:
    text = "" if value is None else str(value)
    return '"' + text.replace('"', '""') + '"'


def attendance_row(record: AttendanceRecord) -> List[str]:
    return [
        _quoted(record.employee_id),
        _quoted(record.employee_name),
        _quoted(record.department),
        record.date,
        record.sign_in or "",
        record.sign_out or "",
        record.status.upper(),
        record.arrival_status or "N/A",
        f"{record.work_hours:.2f}",
        format_work_hours(record.work_hours).replace(",", ""),
        _quoted(record.work_location),
    ]


def attendance_csv(records: Iterable[AttendanceRecord]) -> str:
    """Monthly attendance report as CSV text, one line per record."""

    lines = [",".join(ATTENDANCE_HEADERS)]
    lines.extend(",".join(attendance_row(record)) for record in records)
    return "\n".join(lines)


def export_filename(
    month_label: str,
    search_term: str = "",
    category: str = ALL_CATEGORIES,
    first_record: Optional[AttendanceRecord] = None,
) -> str:
    """``Attendance_Report_<Month_Year>_<suffix>.csv``.

    The suffix names the searched employee, else the selected department,
    else ``All_Employees``.
    """

    suffix = "All_Employees"
    if search_term and first_record is not None:
        suffix = _UNSAFE_CHARS.sub("_", first_record.employee_name)
    elif category and category != ALL_CATEGORIES:
        suffix = _UNSAFE_CHARS.sub("_", category)
    return f"Attendance_Report_{month_label.replace(' ', '_', 1)}_{suffix}.csv"


def write_csv(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    logger.info("Wrote %s", path)
    return path


def write_xlsx(path: Path, headers: Sequence[str], rows: Iterable[Sequence[Any]], title: str = "Export") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    wb = Workbook()
    ws = wb.active
    ws.title = title[:31]
    ws.append(list(headers))
    for row in rows:
        ws.append(list(row))
    wb.save(path)
    logger.info("Wrote %s", path)
    return path


def attendance_xlsx(path: Path, records: Iterable[AttendanceRecord]) -> Path:
    rows = (
        [
            record.employee_id,
            record.employee_name,
            record.department,
            record.date,
            record.sign_in or "",
            record.sign_out or "",
            record.status.upper(),
            record.arrival_status or "N/A",
            round(record.work_hours, 2),
            format_work_hours(record.work_hours),
            record.work_location,
        ]
        for record in records
    )
    return write_xlsx(path, ATTENDANCE_HEADERS, rows, title="Attendance")


def table_xlsx(path: Path, columns: Sequence[Tuple[str, str]], records: Iterable[Any], title: str = "Export") -> Path:
    """Write ``records`` with one column per ``(attribute, header)`` pair."""

    rows = ([_cell(getattr(record, attribute, "")) for attribute, _ in columns] for record in records)
    return write_xlsx(path, [header for _, header in columns], rows, title=title)


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return value


def export_monthly_attendance(
    api_client: Any,
    list_state: ListState,
    export_dir: Path,
    today: Optional[dt.date] = None,
) -> Optional[Path]:
    """Fetch the whole month and write the records matching ``list_state``.

    Returns ``None`` when nothing matches. ``ApiError`` propagates to the caller.
    """

    today = today or dt.date.today()
    start, end = month_range(today)
    raw_items = api_client.list_collection(
        "attendance/by-date-range",
        {"startDate": start.isoformat(), "endDate": end.isoformat()},
    )
    records = [AttendanceRecord.from_dto(item) for item in raw_items]
    matching = apply_filters(records, list_state, ("employee_name", "employee_id"), "department")
    if not matching:
        logger.info("No attendance records to export for %s", today.strftime("%B %Y"))
        return None

    name = export_filename(
        today.strftime("%B %Y"),
        list_state.search_term,
        list_state.selected_category,
        matching[0],
    )
    return write_csv(export_dir / name, attendance_csv(matching))


# ----------------------------------------------------------------------
# Payslip
# ----------------------------------------------------------------------
@dataclass(slots=True)
class PayslipEmployee:
    name: str
    id: str
    department: str
    designation: str
    uan: str = ""
    pan: str = ""
    work_days: float = 0
    joining_date: str = ""
    location: str = ""
    bank: str = ""
    account_no: str = ""
    lop: float = 0


@dataclass(slots=True)
class Payslip:
    company_name: str
    company_address: str
    month: str
    employee: PayslipEmployee
    earnings: List[Tuple[str, float]] = field(default_factory=list)
    deductions: List[Tuple[str, float]] = field(default_factory=list)
    print_date: str = ""

    @property
    def total_earnings(self) -> float:
        return sum(amount for _, amount in self.earnings)

    @property
    def total_deductions(self) -> float:
        return sum(amount for _, amount in self.deductions)

    @property
    def net_pay(self) -> float:
        return self.total_earnings - self.total_deductions


def format_inr(amount: float) -> str:
    """Whole rupees with Indian digit grouping (``12,34,567``)."""

    rounded = math.floor(abs(amount) + 0.5)
    digits = str(rounded)
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    text = ",".join(groups + [tail])
    return f"-{text}" if amount < 0 and rounded else text


def payslip_filename(payslip: Payslip) -> str:
    return f"payslip-{payslip.employee.id}-{payslip.month.replace(' ', '_', 1)}.pdf"


def parse_pay_items(text: str) -> List[Tuple[str, float]]:
    """``Label: amount`` lines to pay items; unparsable lines are skipped."""

    items: List[Tuple[str, float]] = []
    for line in text.splitlines():
        label, separator, amount = line.rpartition(":")
        if not separator or not label.strip():
            continue
        try:
            items.append((label.strip(), float(amount.strip().replace(",", ""))))
        except ValueError:
            logger.info("Skipping pay item %r", line)
    return items


def build_payslip(
    employee: Employee,
    month: str,
    earnings: Sequence[Tuple[str, float]],
    deductions: Sequence[Tuple[str, float]],
    *,
    bank_detail: Optional[BankDetail] = None,
    company_name: str = "",
    company_address: str = "",
    work_days: float = 0,
    lop: float = 0,
    print_date: Optional[dt.date] = None,
) -> Payslip:
    bank = bank_detail or BankDetail.from_dto({"employeeId": employee.employee_id})
    return Payslip(
        company_name=company_name,
        company_address=company_address,
        month=month,
        employee=PayslipEmployee(
            name=employee.name,
            id=employee.employee_id,
            department=employee.department,
            designation=employee.position,
            uan=bank.uan,
            pan=bank.pan,
            work_days=work_days,
            joining_date=employee.joining_date,
            bank=bank.bank_name,
            account_no=bank.account_number,
            lop=lop,
        ),
        earnings=list(earnings),
        deductions=list(deductions),
        print_date=(print_date or dt.date.today()).strftime("%d/%m/%Y"),
    )


def render_payslip_pdf(path: Path, payslip: Payslip) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    pdf = canvas.Canvas(str(path), pagesize=A4)
    width, height = A4
    left = 2 * cm
    middle = width / 2
    right = width - 2 * cm
    y = height - 2 * cm

    pdf.setTitle(f"Payslip {payslip.employee.name} {payslip.month}")
    pdf.setFont("Helvetica-Bold", 16)
    pdf.drawCentredString(middle, y, payslip.company_name)
    y -= 0.7 * cm
    pdf.setFont("Helvetica", 9)
    for line in payslip.company_address.split(","):
        if line.strip():
            pdf.drawCentredString(middle, y, line.strip())
            y -= 0.45 * cm
    y -= 0.3 * cm
    pdf.setFont("Helvetica-Bold", 12)
    pdf.drawCentredString(middle, y, f"Payslip for the month of {payslip.month}")
    y -= 1 * cm

    employee = payslip.employee
    details = [
        ("Employee Name", employee.name, "Employee ID", employee.id),
        ("Department", employee.department, "Designation", employee.designation),
        ("UAN", employee.uan, "PAN", employee.pan),
        ("Work Days", f"{employee.work_days:g}", "Joining Date", employee.joining_date),
        ("Location", employee.location, "LOP Days", f"{employee.lop:g}"),
        ("Bank", employee.bank, "Account No.", employee.account_no),
    ]
    pdf.setFont("Helvetica", 10)
    for label1, value1, label2, value2 in details:
        pdf.drawString(left, y, f"{label1}:")
        pdf.drawString(left + 3.5 * cm, y, value1 or "-")
        pdf.drawString(middle + 0.2 * cm, y, f"{label2}:")
        pdf.drawString(middle + 3.5 * cm, y, value2 or "-")
        y -= 0.6 * cm

    y -= 0.4 * cm
    pdf.setFont("Helvetica-Bold", 10)
    pdf.drawString(left, y, "Earnings")
    pdf.drawRightString(middle - 0.5 * cm, y, "Actual")
    pdf.drawString(middle + 0.2 * cm, y, "Deductions")
    pdf.drawRightString(right, y, "Actual")
    y -= 0.2 * cm
    pdf.line(left, y, right, y)
    y -= 0.5 * cm

    pdf.setFont("Helvetica", 10)
    for index in range(max(len(payslip.earnings), len(payslip.deductions))):
        if index < len(payslip.earnings):
            label, amount = payslip.earnings[index]
            pdf.drawString(left, y, f"{label}:")
            pdf.drawRightString(middle - 0.5 * cm, y, format_inr(amount))
        if index < len(payslip.deductions):
            label, amount = payslip.deductions[index]
            pdf.drawString(middle + 0.2 * cm, y, f"{label}:")
            pdf.drawRightString(right, y, format_inr(amount))
        y -= 0.6 * cm
        if y < 4 * cm:
            pdf.showPage()
            y = height - 2 * cm
            pdf.setFont("Helvetica", 10)

    pdf.line(left, y + 0.3 * cm, right, y + 0.3 * cm)
    y -= 0.2 * cm
    pdf.setFont("Helvetica-Bold", 10)
    pdf.drawString(left, y, "Total Earnings:")
    pdf.drawRightString(middle - 0.5 * cm, y, format_inr(payslip.total_earnings))
    pdf.drawString(middle + 0.2 * cm, y, "Total Deductions:")
    pdf.drawRightString(right, y, format_inr(payslip.total_deductions))
    y -= 1 * cm
    pdf.drawString(left, y, "NET PAY (Total Earnings - Total Deductions):")
    pdf.drawRightString(right, y, f"{format_inr(payslip.net_pay)}/-")
    y -= 1.5 * cm

    pdf.setFont("Helvetica", 8)
    pdf.drawString(left, y, "This is a system-generated payslip and does not require signature.")
    if payslip.print_date:
        pdf.drawRightString(right, y, f"Print Date: {payslip.print_date}")
    pdf.save()
    logger.info("Wrote %s", path)
    return path


__all__ = [
    "ATTENDANCE_HEADERS",
    "Payslip",
    "PayslipEmployee",
    "attendance_csv",
    "attendance_xlsx",
    "build_payslip",
    "export_filename",
    "export_monthly_attendance",
    "format_inr",
    "parse_pay_items",
    "payslip_filename",
    "render_payslip_pdf",
    "table_xlsx",
    "write_csv",
    "write_xlsx",
]
