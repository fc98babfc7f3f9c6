"""Configuration utilities for the desktop application."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_API_BASE_URL = "http://127.0.0.1:8080"
DEFAULT_REQUEST_TIMEOUT = 15
DEFAULT_MAX_UPLOAD_MB = 50
DEFAULT_EXPORT_DIR = "./exports"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_FETCH_WORKERS = 4

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(slots=True)
class AppConfig:
    """Configuration values for the application."""

    api_base_url: str = DEFAULT_API_BASE_URL
    api_token: Optional[str] = None
    user_id: str = ""
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT
    max_upload_mb: int = DEFAULT_MAX_UPLOAD_MB
    export_dir: Path = Path(DEFAULT_EXPORT_DIR)
    log_level: str = DEFAULT_LOG_LEVEL
    fetch_workers: int = DEFAULT_FETCH_WORKERS


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def load_config(env_path: Optional[Path] = None) -> AppConfig:
    """Load the configuration from an optional `.env` file and the environment."""

    if env_path is None:
        env_path = Path(__file__).resolve().parent.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    return AppConfig(
        api_base_url=os.getenv("OFFICEHUB_API_BASE_URL", DEFAULT_API_BASE_URL),
        api_token=os.getenv("OFFICEHUB_API_TOKEN") or None,
        user_id=os.getenv("OFFICEHUB_USER_ID", ""),
        request_timeout=_int_env("OFFICEHUB_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
        max_upload_mb=_int_env("OFFICEHUB_MAX_UPLOAD_MB", DEFAULT_MAX_UPLOAD_MB),
        export_dir=Path(os.getenv("OFFICEHUB_EXPORT_DIR", DEFAULT_EXPORT_DIR)),
        log_level=os.getenv("OFFICEHUB_LOG_LEVEL", DEFAULT_LOG_LEVEL),
        fetch_workers=max(1, _int_env("OFFICEHUB_FETCH_WORKERS", DEFAULT_FETCH_WORKERS)),
    )


def configure_logging(level: Optional[str] = None) -> None:
    """Initialise logging with the shared format.

    The level is taken from the argument, else the ``LOG_LEVEL`` environment
    variable, defaulting to ``INFO``.
    """

    resolved_level = (level or os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL)).upper()
    logging.basicConfig(level=resolved_level, format=LOG_FORMAT)


__all__ = ["AppConfig", "configure_logging", "load_config"]
