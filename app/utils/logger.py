"""
Centralised logging configuration for the entire application.
Logs to console and, when LOG_DIR is set, to a rotating recon.log file.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from app.config import settings

LOG_LEVEL = settings.LOG_LEVEL.upper()
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_configured = False


def _resolve_log_dir():
    if not settings.LOG_DIR:
        return None
    if os.path.isabs(settings.LOG_DIR):
        return settings.LOG_DIR
    project_root = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
    return os.path.join(project_root, settings.LOG_DIR)


def _configure_root_logger():
    global _configured
    if _configured:
        return
    _configured = True

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)

    console = logging.StreamHandler()
    console.setLevel(LOG_LEVEL)
    console.setFormatter(fmt)
    root.addHandler(console)

    log_dir = _resolve_log_dir()
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        # Keeps last 10 × 5MB log files
        file_handler = RotatingFileHandler(
            filename=os.path.join(log_dir, "recon.log"),
            maxBytes=5 * 1024 * 1024,
            backupCount=10,
            encoding="utf-8",
        )
        file_handler.setLevel(LOG_LEVEL)
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Call this at the top of every module."""
    _configure_root_logger()
    return logging.getLogger(name)
