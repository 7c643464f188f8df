"""JSON logging for the ProteQ backend."""
from __future__ import annotations

import logging
from typing import Optional

from pythonjsonlogger import jsonlogger

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
RENAMED_FIELDS = {"asctime": "time", "levelname": "level", "name": "logger"}


def build_formatter(service: str) -> jsonlogger.JsonFormatter:
    """One JSON object per record, tagged with the service name."""

    return jsonlogger.JsonFormatter(
        LOG_FORMAT,
        rename_fields=RENAMED_FIELDS,
        static_fields={"service": service},
    )


def setup_logging(level: str = "INFO", service: str = "proteq-backend") -> None:
    """Replace the root handlers with a single JSON stream handler."""

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    root_logger.setLevel(level.upper())

    handler = logging.StreamHandler()
    handler.setFormatter(build_formatter(service))
    root_logger.addHandler(handler)

    # The OTP sweep runs every few minutes; APScheduler logs each run at INFO.
    logging.getLogger("apscheduler").setLevel(logging.WARNING)


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level.upper())
    return logger


__all__ = ["build_formatter", "get_logger", "setup_logging"]
