from __future__ import annotations

import logging
import logging.handlers
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: str = "INFO",
    to_file: bool = False,
    log_dir: Optional[str] = None,
    filename: str = "fieldnav.log",
) -> logging.Logger:
    """Configure the ``fieldnav`` logger with a console handler and optional rotating file.

    Args:
        level: Log level name (e.g., "DEBUG", "INFO"); unknown names fall back to INFO.
        to_file: If True, also write to ``<log_dir>/<filename>`` (2 MiB x 3 backups).
        log_dir: Directory for the log file; defaults to ./logs.
        filename: Log file name inside ``log_dir``.

    Returns:
        The configured package logger. Calling again replaces its handlers.
    """
    lvl = getattr(logging, level.upper(), logging.INFO)
    if not isinstance(lvl, int):
        lvl = logging.INFO
    logger = logging.getLogger("fieldnav")
    logger.setLevel(lvl)
    logger.propagate = False

    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    ch = logging.StreamHandler()
    ch.setLevel(lvl)
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if to_file:
        log_dir = log_dir or os.path.join(os.getcwd(), "logs")
        os.makedirs(log_dir, exist_ok=True)
        fh = logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, filename), maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
        fh.setLevel(lvl)
        fh.setFormatter(fmt)
        logger.addHandler(fh)
    return logger
