"""Process-wide logging for ``python -m account_registry``.

Log records never include request bodies or password material.
"""

from __future__ import annotations

import logging
import sys

from .config import Settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# our own middleware and listeners already log these events
QUIET_LOGGERS = ("uvicorn.access", "pymongo")


def configure_logging(settings: Settings) -> None:
    """Send every record to stdout at ``LOG_LEVEL``.

    With ``MONGO_DEBUG`` on, the command trace of ``account_registry.db`` is let
    through even when the configured level is higher.
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if settings.mongo_debug:
        logging.getLogger("account_registry.db").setLevel(logging.DEBUG)
