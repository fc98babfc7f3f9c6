"""Entry point of the desktop application."""

from __future__ import annotations

import logging
import sys

from PySide6.QtWidgets import QApplication

from .api_client import ApiClient
from .config import configure_logging, load_config
from .widgets.main_window import MainWindow

logger = logging.getLogger(__name__)


def main() -> None:
    """Start the Qt application."""

    config = load_config()
    configure_logging(config.log_level)

    app = QApplication(sys.argv)
    app.setApplicationName("OfficeHub Desktop")
    app.setOrganizationName("OfficeHub")

    api_client = ApiClient(config.api_base_url, token=config.api_token, timeout=config.request_timeout)
    logger.info("Using API at %s", config.api_base_url)

    window = MainWindow(api_client, config)
    window.show()
    window.pages["attendance"].refresh()

    sys.exit(app.exec())


__all__ = ["main"]
