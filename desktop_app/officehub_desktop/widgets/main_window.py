"""Main window with one tab per list page."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Dict, Optional

from PySide6.QtCore import QUrl
from PySide6.QtGui import QAction, QDesktopServices
from PySide6.QtWidgets import (QDialog, QDialogButtonBox, QFormLayout,
                               QInputDialog, QLineEdit, QMainWindow,
                               QMessageBox, QPlainTextEdit, QTabWidget,
                               QVBoxLayout, QWidget)

from ..api_client import ApiClient, ApiError
from ..config import AppConfig
from ..controller import ListViewController
from ..exports import (build_payslip, export_monthly_attendance,
                       parse_pay_items, payslip_filename, render_payslip_pdf,
                       table_xlsx)
from ..models import BankDetail, Employee, Notice
from ..pages import PAGES
from .list_page import ListPage
from .notifications import ToastNotifier

logger = logging.getLogger(__name__)


class PayslipDialog(QDialog):
    """Collects the month, company and pay items of one payslip."""

    def __init__(self, employee_name: str, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle(f"Payslip for {employee_name}")
        self.month_input = QLineEdit(dt.date.today().strftime("%B %Y"))
        self.company_input = QLineEdit()
        self.address_input = QLineEdit()
        self.work_days_input = QLineEdit("0")
        self.lop_input = QLineEdit("0")
        self.earnings_input = QPlainTextEdit("Basic: 0\nHRA: 0")
        self.deductions_input = QPlainTextEdit("PF: 0\nProfessional Tax: 0")

        form = QFormLayout()
        form.addRow("Month", self.month_input)
        form.addRow("Company", self.company_input)
        form.addRow("Address", self.address_input)
        form.addRow("Work days", self.work_days_input)
        form.addRow("LOP days", self.lop_input)
        form.addRow("Earnings", self.earnings_input)
        form.addRow("Deductions", self.deductions_input)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)

        layout = QVBoxLayout(self)
        layout.addLayout(form)
        layout.addWidget(buttons)

    def number(self, editor: QLineEdit) -> float:
        try:
            return float(editor.text().strip() or 0)
        except ValueError:
            return 0.0


class MainWindow(QMainWindow):
    """Hosts every list page and the export actions."""

    def __init__(self, api_client: ApiClient, config: AppConfig, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.api_client = api_client
        self.config = config
        self.setWindowTitle("OfficeHub Desktop")
        self.resize(1280, 780)

        self.toast = ToastNotifier(self)
        self.controllers: Dict[str, ListViewController] = {}
        self.pages: Dict[str, ListPage] = {}

        self.tabs = QTabWidget()
        context = {"user_id": config.user_id}
        for key, definition in PAGES.items():
            controller = ListViewController(
                api_client, definition, context=context, fetch_workers=config.fetch_workers
            )
            controller.subscribe(self._show_notice)
            page = ListPage(controller, max_upload_mb=config.max_upload_mb)
            self.controllers[key] = controller
            self.pages[key] = page
            self.tabs.addTab(page, definition.title)
        self.tabs.currentChanged.connect(self._handle_tab_changed)
        self.setCentralWidget(self.tabs)

        self._build_menu()

    def _build_menu(self) -> None:
        file_menu = self.menuBar().addMenu("&File")

        export_attendance = QAction("Export monthly attendance (CSV)", self)
        export_attendance.triggered.connect(self._export_attendance)
        export_page = QAction("Export current page (Excel)", self)
        export_page.triggered.connect(self._export_current_page)
        payslip_action = QAction("Generate payslip…", self)
        payslip_action.triggered.connect(self._generate_payslip)
        refresh_action = QAction("Refresh all", self)
        refresh_action.triggered.connect(self.refresh_all)
        quit_action = QAction("Quit", self)
        quit_action.triggered.connect(self.close)

        file_menu.addAction(refresh_action)
        file_menu.addSeparator()
        file_menu.addAction(export_attendance)
        file_menu.addAction(export_page)
        file_menu.addAction(payslip_action)
        file_menu.addSeparator()
        file_menu.addAction(quit_action)

    # ------------------------------------------------------------------
    def refresh_all(self) -> None:
        for page in self.pages.values():
            page.refresh()

    def _handle_tab_changed(self, index: int) -> None:
        page = self.tabs.widget(index)
        if isinstance(page, ListPage) and not page.controller.records and page.controller.error is None:
            page.refresh()

    def _show_notice(self, notice: Notice) -> None:
        self.toast.show_notice(notice)

    def _current_page(self) -> Optional[ListPage]:
        page = self.tabs.currentWidget()
        return page if isinstance(page, ListPage) else None

    # ------------------------------------------------------------------
    def _export_attendance(self) -> None:
        controller = self.controllers["attendance"]
        try:
            path = export_monthly_attendance(self.api_client, controller.list_state, self.config.export_dir)
        except ApiError as exc:
            logger.warning("Attendance export failed: %s", exc)
            self._show_notice(Notice("error", f"Failed to export attendance data: {exc.detail}"))
            return
        if path is None:
            month = dt.date.today().strftime("%B %Y")
            QMessageBox.information(
                self, "Export", f"No attendance data found for {month} that matches your current filters."
            )
            return
        self._show_notice(Notice("success", f"Exported {path.name}"))
        QDesktopServices.openUrl(QUrl.fromLocalFile(str(path.parent)))

    def _export_current_page(self) -> None:
        page = self._current_page()
        if page is None:
            return
        definition = page.page
        name = f"{definition.key}_{dt.date.today().isoformat()}.xlsx"
        path = table_xlsx(
            self.config.export_dir / name,
            definition.columns,
            page.controller.visible_records(),
            title=definition.title,
        )
        self._show_notice(Notice("success", f"Exported {path.name}"))

    def _generate_payslip(self) -> None:
        results = self.controllers["employees"].fetch_auxiliary(
            {"employees": "employees", "bank_details": "bank-details"}
        )
        if results["employees"].error:
            self._show_notice(Notice("error", f"Failed to fetch employees: {results['employees'].error}"))
            return
        employees = [Employee.from_dto(item) for item in results["employees"].items]
        if not employees:
            QMessageBox.information(self, "Payslip", "No employees found.")
            return
        banks = {detail.employee_id: detail for detail in map(BankDetail.from_dto, results["bank_details"].items)}

        labels = [f"{employee.employee_id} - {employee.name}" for employee in employees]
        choice, ok = QInputDialog.getItem(self, "Payslip", "Employee", labels, 0, False)
        if not ok:
            return
        employee = employees[labels.index(choice)]

        dialog = PayslipDialog(employee.name, parent=self)
        if dialog.exec() != QDialog.Accepted:
            return

        payslip = build_payslip(
            employee,
            dialog.month_input.text().strip(),
            parse_pay_items(dialog.earnings_input.toPlainText()),
            parse_pay_items(dialog.deductions_input.toPlainText()),
            bank_detail=banks.get(employee.employee_id),
            company_name=dialog.company_input.text().strip(),
            company_address=dialog.address_input.text().strip(),
            work_days=dialog.number(dialog.work_days_input),
            lop=dialog.number(dialog.lop_input),
        )
        path = render_payslip_pdf(self.config.export_dir / payslip_filename(payslip), payslip)
        self._show_notice(Notice("success", f"Payslip saved as {path.name}"))
        QDesktopServices.openUrl(QUrl.fromLocalFile(str(path)))


__all__ = ["MainWindow", "PayslipDialog"]
