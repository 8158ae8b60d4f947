"""
Logging setup for the PetMinder API.

``setup_logging`` attaches a console handler to the root logger and,
when ``LOG_FILE`` is set, a size-rotated file handler.  Modules log
through ``logging.getLogger(__name__)`` so every record carries the
name of the service that wrote it (``pet_minder_api.app.services.
reminder_service`` and so on).
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "pet_minder_api"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: str = "INFO",
    logfile: Optional[str] = None,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> None:
    """Configure application logging.

    The package logger always gets ``level``.  Handlers are only
    attached when the root logger has none yet, so an ASGI server or
    test runner that configured logging first keeps its own setup.

    Parameters
    ----------
    level : str
        Logging level name (e.g. ``"DEBUG"``, ``"INFO"``), case
        insensitive.  Unknown names fall back to ``INFO``.
    logfile : Optional[str]
        Path of a log file, resolved against the working directory.
        The file is rotated once it reaches ``max_bytes``.
    max_bytes : int
        Size at which the log file is rotated.
    backup_count : int
        Number of rotated files to keep.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.getLogger(PACKAGE_LOGGER).setLevel(numeric_level)

    root = logging.getLogger()
    if root.handlers:
        return
    root.setLevel(numeric_level)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if logfile:
        log_path = Path(logfile).resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
