"""
Logging configuration.

Core modules use ``logging.getLogger(__name__)``; the API layer goes through
``get_logger`` so that importing any route configures logging once.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def setup_logging(level: Union[str, int] = "INFO", log_file: Optional[Path] = None) -> None:
    """
    Install console (and optional rotating file) handlers on the root logger.

    Calling again only updates the level.
    """
    global _configured

    root = logging.getLogger()
    root.setLevel(level if isinstance(level, int) else level.upper())

    if _configured:
        return

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # Noisy third-party loggers
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a named logger, configuring logging from settings on first use."""
    if not _configured:
        from config.settings import settings
        setup_logging(settings.log_level, settings.log_file)
    return logging.getLogger(name)
