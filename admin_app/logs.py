"""Debug log file setup."""

from __future__ import annotations

import logging
from pathlib import Path

from admin_app.config import DEBUG_LOG_PATH, LOG_LEVEL

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(path: str = DEBUG_LOG_PATH, level: str = LOG_LEVEL) -> logging.Logger:
    """
    Send the admin_app loggers to a file.

    The terminal belongs to the TUI, so nothing is written to stderr. If the
    log file cannot be opened the loggers fall back to a NullHandler.
    """
    root = logging.getLogger("admin_app")
    root.setLevel(level.upper())
    root.propagate = False
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    try:
        log_path = Path(path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError:
        handler = logging.NullHandler()

    handler.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(handler)
    return root
