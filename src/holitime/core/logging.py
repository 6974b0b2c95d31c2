from __future__ import annotations

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """Attach one handler to the ``holitime`` logger.

    Writes to ``log_file`` when given, otherwise to stdout. Safe to call more
    than once (handlers are replaced, not stacked).
    """

    logger = logging.getLogger("holitime")
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    logger.handlers = []

    if log_file:
        log_file = os.path.normpath(log_file)
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stdout)

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False

    configure_quiet_logging()
    return logger


def configure_quiet_logging() -> None:
    """Keep request and SQL chatter out of the application log."""

    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
