"""Generic list page: filters, stat cards and the record table."""

from __future__ import annotations

from typing import Any, List, Optional

from PySide6.QtCore import Qt, QUrl
from PySide6.QtGui import QColor, QDesktopServices
from PySide6.QtWidgets import (QComboBox, QFrame, QHBoxLayout, QInputDialog,
                               QLabel, QLineEdit, QMessageBox, QPushButton,
                               QTableWidget, QTableWidgetItem, QVBoxLayout,
                               QWidget)

from ..controller import ListViewController
from ..date_ranges import ViewMode
from ..models import ALL_CATEGORIES, SortOrder
from ..pages import UploadMode
from ..presentation import NEUTRAL_STYLE, style_for
from .notifications import ErrorBanner
from .record_dialog import RecordDialog

STYLED_COLUMNS = {"status", "arrival_status", "priority", "review_status"}


class StatCard(QFrame):
    def __init__(self, title: str, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setFrameShape(QFrame.StyledPanel)
        self.value_label = QLabel("0")
        font = self.value_label.font()
        font.setPointSize(16)
        font.setBold(True)
        self.value_label.setFont(font)

        layout = QVBoxLayout(self)
        layout.addWidget(QLabel(title))
        layout.addWidget(self.value_label)

    def set_value(self, value: Any) -> None:
        self.value_label.setText(str(value))


class ListPage(QWidget):
    """Renders one :class:`ListViewController`."""

    def __init__(self, controller: ListViewController, *, max_upload_mb: int = 50,
                 parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.controller = controller
        self.page = controller.page
        self.max_upload_mb = max_upload_mb
        self._rendered: List[Any] = []

        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Search…")
        self.search_input.textChanged.connect(self._handle_search)

        self.category_combo = QComboBox()
        self.category_combo.currentIndexChanged.connect(self._handle_category)
        self.category_combo.setVisible(bool(self.page.category_field))

        self.asc_button = QPushButton("Ascending")
        self.desc_button = QPushButton("Descending")
        for button in (self.asc_button, self.desc_button):
            button.setCheckable(True)
            button.setVisible(self.page.sort_key is not None)
        self.asc_button.clicked.connect(self._handle_sort_asc)
        self.desc_button.clicked.connect(self._handle_sort_desc)

        self.view_mode_combo = QComboBox()
        for mode in ViewMode:
            self.view_mode_combo.addItem(mode.value.title(), mode)
        self.view_mode_combo.currentIndexChanged.connect(self._handle_view_mode)
        self.view_mode_combo.setVisible(self.page.uses_date_range)

        self.refresh_button = QPushButton("Refresh")
        self.refresh_button.clicked.connect(self.refresh)

        toolbar = QHBoxLayout()
        toolbar.addWidget(self.search_input, stretch=1)
        toolbar.addWidget(self.category_combo)
        toolbar.addWidget(self.view_mode_combo)
        toolbar.addWidget(self.asc_button)
        toolbar.addWidget(self.desc_button)
        toolbar.addWidget(self.refresh_button)

        self.total_card = StatCard("Total")
        self.average_card = StatCard("Average")
        self.stat_cards = {key: StatCard(title) for key, title in self.page.stat_cards}
        cards = QHBoxLayout()
        cards.addWidget(self.total_card)
        for card in self.stat_cards.values():
            cards.addWidget(card)
        cards.addWidget(self.average_card)
        cards.addStretch(1)

        self.error_banner = ErrorBanner()
        self.error_banner.retry_requested.connect(self.refresh)
        self.loading_label = QLabel("Loading…")
        self.loading_label.hide()

        self.table = QTableWidget(0, len(self.page.columns))
        self.table.setHorizontalHeaderLabels([header for _, header in self.page.columns])
        self.table.setEditTriggers(QTableWidget.NoEditTriggers)
        self.table.setSelectionBehavior(QTableWidget.SelectRows)
        self.table.setSelectionMode(QTableWidget.SingleSelection)
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.verticalHeader().setVisible(False)
        self.table.doubleClicked.connect(self._handle_edit)
        self.table.itemSelectionChanged.connect(self._handle_selection)

        self.details_label = QLabel()
        self.details_label.setWordWrap(True)
        self.details_label.hide()

        layout = QVBoxLayout(self)
        layout.addLayout(toolbar)
        layout.addLayout(cards)
        layout.addWidget(self.error_banner)
        layout.addWidget(self.loading_label)
        layout.addWidget(self.table, stretch=1)
        layout.addWidget(self.details_label)
        layout.addLayout(self._build_actions())

    def _build_actions(self) -> QHBoxLayout:
        actions = QHBoxLayout()
        actions.addStretch(1)
        if self.page.file_field:
            open_button = QPushButton("Open")
            open_button.clicked.connect(self._handle_open)
            actions.addWidget(open_button)
        if self.page.read_only:
            return actions
        add_button = QPushButton("New")
        edit_button = QPushButton("Edit")
        delete_button = QPushButton("Delete")
        add_button.clicked.connect(self._handle_add)
        edit_button.clicked.connect(self._handle_edit)
        delete_button.clicked.connect(self._handle_delete)
        for action in self.page.action_paths:
            button = QPushButton(action.title())
            button.clicked.connect(lambda _checked=False, name=action: self._handle_action(name))
            actions.addWidget(button)
        actions.addWidget(add_button)
        actions.addWidget(edit_button)
        actions.addWidget(delete_button)
        return actions

    # ------------------------------------------------------------------
    def refresh(self) -> None:
        self.loading_label.show()
        self.error_banner.show_error(None)
        self.controller.refresh()
        self._populate_categories()
        self.render()

    def render(self) -> None:
        controller = self.controller
        self.loading_label.setVisible(controller.loading)
        self.error_banner.show_error(controller.error)

        stats = controller.stats()
        self.total_card.set_value(stats.total)
        self.average_card.set_value(stats.average)
        for key, card in self.stat_cards.items():
            card.set_value(stats.count(key))

        order = controller.list_state.sort_order
        self.asc_button.setChecked(order is SortOrder.ASC)
        self.desc_button.setChecked(order is SortOrder.DESC)

        self._rendered = controller.visible_records()
        self.table.setRowCount(len(self._rendered))
        for row, record in enumerate(self._rendered):
            for column, (attribute, _) in enumerate(self.page.columns):
                value = getattr(record, attribute, "")
                item = QTableWidgetItem("" if value is None else str(value))
                if attribute in STYLED_COLUMNS:
                    style = style_for(value)
                    item.setText(style.label if style is not NEUTRAL_STYLE else item.text())
                    item.setForeground(QColor(style.colour))
                item.setData(Qt.UserRole, self.page.record_id(record))
                self.table.setItem(row, column, item)
        self.table.resizeColumnsToContents()

    def _populate_categories(self) -> None:
        current = self.category_combo.currentData() or ALL_CATEGORIES
        self.category_combo.blockSignals(True)
        self.category_combo.clear()
        self.category_combo.addItem("All", ALL_CATEGORIES)
        for value in self.controller.categories():
            self.category_combo.addItem(value, value)
        index = self.category_combo.findData(current)
        self.category_combo.setCurrentIndex(max(index, 0))
        self.category_combo.blockSignals(False)

    def _selected_id(self) -> Optional[Any]:
        row = self.table.currentRow()
        if row < 0 or row >= len(self._rendered):
            return None
        return self.page.record_id(self._rendered[row])

    # ------------------------------------------------------------------
    def _handle_search(self, text: str) -> None:
        self.controller.set_search(text)
        self.render()

    def _handle_category(self, _index: int) -> None:
        self.controller.set_category(self.category_combo.currentData() or ALL_CATEGORIES)
        self.render()

    def _handle_sort_asc(self) -> None:
        self.controller.toggle_sort_asc()
        self.render()

    def _handle_sort_desc(self) -> None:
        self.controller.toggle_sort_desc()
        self.render()

    def _handle_view_mode(self, _index: int) -> None:
        mode = self.view_mode_combo.currentData()
        if mode is None:
            return
        self.controller.set_view_mode(mode)
        self._populate_categories()
        self.render()

    def _handle_add(self) -> None:
        self._open_dialog(f"New {self.page.record_label.lower()}", self.page.blank_payload(), None)

    def _handle_edit(self, *_args: Any) -> None:
        item_id = self._selected_id()
        if item_id is None or self.page.read_only:
            return
        record = self.controller.find(item_id)
        if record is None:
            return
        self._open_dialog(f"Edit {self.page.record_label.lower()}", record.to_payload(), item_id)

    def _open_dialog(self, title: str, template: dict, item_id: Optional[Any]) -> None:
        dialog = RecordDialog(
            title,
            template,
            accepts_file=self.page.upload_mode is not UploadMode.NONE,
            max_upload_mb=self.max_upload_mb,
            parent=self,
        )
        if dialog.exec() != RecordDialog.Accepted:
            return
        if item_id is None:
            self.controller.create(dialog.payload(), dialog.file_path)
        else:
            self.controller.update(item_id, dialog.payload(), dialog.file_path)
        self._populate_categories()
        self.render()

    def _handle_selection(self) -> None:
        item_id = self._selected_id()
        text = self.controller.details(item_id) if item_id is not None else ""
        self.details_label.setText(text)
        self.details_label.setVisible(bool(text))

    def _handle_open(self) -> None:
        item_id = self._selected_id()
        if item_id is None:
            return
        url = self.controller.file_link(item_id)
        if not url:
            QMessageBox.information(self, "Open", "No file is attached to this record.")
            return
        QDesktopServices.openUrl(QUrl(url))

    def _handle_delete(self) -> None:
        item_id = self._selected_id()
        if item_id is None:
            return
        answer = QMessageBox.question(self, "Delete", f"Delete this {self.page.record_label.lower()}?")
        if answer != QMessageBox.Yes:
            return
        self.controller.remove(item_id)
        self._populate_categories()
        self.render()

    def _handle_action(self, action: str) -> None:
        item_id = self._selected_id()
        if item_id is None:
            return
        params = dict(self.page.action_params.get(action, {}))
        required = self.page.action_required.get(action, ())
        if required:
            text, ok = QInputDialog.getMultiLineText(self, action.title(), "Comments")
            if not ok:
                return
            params.update({name: text.strip() for name in required})
        self.controller.apply_action(item_id, action, params)
        self.render()


__all__ = ["ListPage", "StatCard"]
