"""Toast notifications and the page error banner."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from PySide6.QtCore import Qt, QTimer, Signal
from PySide6.QtGui import QIcon, QPixmap
from PySide6.QtWidgets import (QApplication, QFrame, QHBoxLayout, QLabel,
                               QPushButton, QSystemTrayIcon, QWidget)

from ..models import Notice

ICON_PATHS = [
    Path(__file__).resolve().parent.parent / "resources" / "icon.png",
    Path(__file__).resolve().parent.parent / "resources" / "icon.ico",
]

TOAST_COLOURS = {
    "success": "#0f9d58",
    "error": "#db4437",
    "info": "#4285f4",
}


def load_icon() -> QIcon:
    for path in ICON_PATHS:
        if path.exists():
            return QIcon(str(path))
    icon = QIcon.fromTheme("office")
    if not icon.isNull():
        return icon
    pixmap = QPixmap(32, 32)
    pixmap.fill(Qt.darkCyan)
    return QIcon(pixmap)


class ToastNotifier(QLabel):
    """Short-lived, non-blocking message at the bottom of its parent.

    Notices are mirrored to the system tray when one is available.
    """

    def __init__(self, parent: QWidget, *, duration_ms: int = 3500) -> None:
        super().__init__(parent)
        self.duration_ms = duration_ms
        self.setAlignment(Qt.AlignCenter)
        self.setWordWrap(True)
        self.hide()

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self.hide)

        self.tray_icon: Optional[QSystemTrayIcon] = None
        if QSystemTrayIcon.isSystemTrayAvailable():
            self.tray_icon = QSystemTrayIcon(load_icon(), parent=parent)
            self.tray_icon.setToolTip(QApplication.applicationName())
            self.tray_icon.show()

    def show_notice(self, notice: Notice) -> None:
        colour = TOAST_COLOURS.get(notice.level, TOAST_COLOURS["info"])
        self.setStyleSheet(
            f"background-color: {colour}; color: white; padding: 8px 14px; border-radius: 6px;"
        )
        self.setText(notice.message)
        self._place()
        self.show()
        self.raise_()
        self._timer.start(self.duration_ms)

        if self.tray_icon is not None and not self.parentWidget().isActiveWindow():
            icon = QSystemTrayIcon.Critical if notice.level == "error" else QSystemTrayIcon.Information
            self.tray_icon.showMessage(QApplication.applicationName(), notice.message, icon, self.duration_ms)

    def _place(self) -> None:
        parent = self.parentWidget()
        width = min(420, max(parent.width() - 40, 200))
        self.setFixedWidth(width)
        self.adjustSize()
        self.move((parent.width() - width) // 2, parent.height() - self.height() - 24)


class ErrorBanner(QFrame):
    """Page-level load error with a manual retry button."""

    retry_requested = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setStyleSheet("QFrame { background-color: #fdecea; border: 1px solid #db4437; border-radius: 4px; }")
        self.message_label = QLabel()
        self.message_label.setWordWrap(True)
        self.message_label.setStyleSheet("color: #a52714; border: none;")
        self.retry_button = QPushButton("Retry")
        self.retry_button.clicked.connect(self.retry_requested.emit)

        layout = QHBoxLayout(self)
        layout.addWidget(self.message_label, stretch=1)
        layout.addWidget(self.retry_button)
        self.hide()

    def show_error(self, message: Optional[str]) -> None:
        if not message:
            self.hide()
            return
        self.message_label.setText(message)
        self.show()


__all__ = ["ErrorBanner", "ToastNotifier", "load_icon"]
