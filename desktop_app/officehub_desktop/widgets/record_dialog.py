"""Create/edit form built from a record payload."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from PySide6.QtWidgets import (QDialog, QDialogButtonBox, QFileDialog,
                               QFormLayout, QHBoxLayout, QLabel, QLineEdit,
                               QMessageBox, QPushButton, QTextEdit, QVBoxLayout,
                               QWidget)

from ..utils import (MEMO_MAX_WORDS, MEMO_WARN_WORDS, TEXT_AREA_MAX_CHARS,
                     counter_level, flatten_payload, format_file_size,
                     limit_chars, limit_words, unflatten_payload,
                     validate_file_size, word_count)

LONG_TEXT_FIELDS = {"content", "description", "reason", "remarks", "notes", "feedback", "goals", "achievements"}
WORD_LIMITED_FIELDS = {"content"}

COUNTER_COLOURS = {"ok": "#6b7280", "warn": "#f4b400", "over": "#db4437"}


class LimitedTextEdit(QTextEdit):
    """Multi-line input with a live word or character counter."""

    def __init__(self, *, words: bool, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.words = words
        self.counter = QLabel()
        self.setFixedHeight(90)
        self.textChanged.connect(self._enforce_limit)
        self._enforce_limit()

    def _enforce_limit(self) -> None:
        text = self.toPlainText()
        if self.words:
            limited = limit_words(text, MEMO_MAX_WORDS)
            count = word_count(limited)
            level = counter_level(count, MEMO_WARN_WORDS, MEMO_MAX_WORDS)
            self.counter.setText(f"{count}/{MEMO_MAX_WORDS} words")
        else:
            limited = limit_chars(text, TEXT_AREA_MAX_CHARS)
            count = len(limited)
            level = counter_level(count, TEXT_AREA_MAX_CHARS, TEXT_AREA_MAX_CHARS)
            self.counter.setText(f"{count}/{TEXT_AREA_MAX_CHARS} characters")
        self.counter.setStyleSheet(f"color: {COUNTER_COLOURS[level]};")
        if limited != text:
            self.blockSignals(True)
            self.setPlainText(limited)
            self.blockSignals(False)


class RecordDialog(QDialog):
    """Form with one input per payload field and an optional file picker."""

    def __init__(
        self,
        title: str,
        template: Mapping[str, Any],
        *,
        accepts_file: bool = False,
        max_upload_mb: int = 50,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle(title)
        self.template = dict(template)
        self.max_upload_mb = max_upload_mb
        self.file_path: Optional[Path] = None
        self.inputs: Dict[str, QWidget] = {}

        form = QFormLayout()
        for name, value in flatten_payload(self.template).items():
            text = "" if value is None else str(value)
            if name in LONG_TEXT_FIELDS:
                editor = LimitedTextEdit(words=name in WORD_LIMITED_FIELDS)
                editor.setPlainText(text)
                column = QVBoxLayout()
                column.addWidget(editor)
                column.addWidget(editor.counter)
                form.addRow(name, column)
            else:
                editor = QLineEdit(text)
                form.addRow(name, editor)
            self.inputs[name] = editor

        self.file_label = QLabel("No file selected")
        if accepts_file:
            choose_button = QPushButton("Choose file…")
            choose_button.clicked.connect(self._choose_file)
            file_row = QHBoxLayout()
            file_row.addWidget(self.file_label, stretch=1)
            file_row.addWidget(choose_button)
            form.addRow("file", file_row)

        buttons = QDialogButtonBox(QDialogButtonBox.Save | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)

        layout = QVBoxLayout(self)
        layout.addLayout(form)
        layout.addWidget(buttons)

    # ------------------------------------------------------------------
    def payload(self) -> Dict[str, Any]:
        values = {}
        for name, editor in self.inputs.items():
            values[name] = editor.toPlainText() if isinstance(editor, QTextEdit) else editor.text()
        return unflatten_payload(values, self.template)

    def _choose_file(self) -> None:
        file_name, _ = QFileDialog.getOpenFileName(self, "Choose file")
        if not file_name:
            return
        path = Path(file_name)
        size = path.stat().st_size
        if not validate_file_size(size, self.max_upload_mb):
            QMessageBox.warning(
                self,
                "File too large",
                f"{path.name} is {format_file_size(size)}; the limit is {self.max_upload_mb} MB.",
            )
            return
        self.file_path = path
        self.file_label.setText(f"{path.name} ({format_file_size(size)})")


__all__ = ["LimitedTextEdit", "RecordDialog"]
