from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Root logging: console always, rotating file when LOG_FILE is set.

    Safe to call more than once (tests build several apps).
    """

    root = logging.getLogger()
    root.setLevel(level.upper())

    formatter = logging.Formatter(LOG_FORMAT)
    if not any(getattr(h, "_class_attendance", False) for h in root.handlers):
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        console._class_attendance = True
        root.addHandler(console)

        if log_file:
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            file_handler._class_attendance = True
            root.addHandler(file_handler)

    # werkzeug logs every request; apscheduler logs every job run
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
