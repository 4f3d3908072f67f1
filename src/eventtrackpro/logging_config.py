"""Logging setup for EventTrackPro: INFO/DEBUG to stdout, WARNING and above to stderr"""

import logging
import sys
from typing import Optional

from eventtrackpro.config import config

LOG_FORMAT = "%(asctime)s %(levelname)s:%(name)s:%(message)s"

# Third-party loggers that log every outbound request, full URL included.
# Catch-hook URLs embed their own credentials, so these stay at WARNING.
_QUIET_LOGGERS = ("httpx", "httpcore")


class InfoFilter(logging.Filter):
    """Pass only records below WARNING"""

    def filter(self, record):
        return record.levelno < logging.WARNING


def _resolve_level(log_level: Optional[str]) -> int:
    name = (log_level or config.get("log_level") or "INFO").upper()
    return getattr(logging, name, logging.INFO)


def setup_logging(log_level: Optional[str] = None):
    """
    Configure the root logger.

    Args:
        log_level: Level name overriding LOG_LEVEL from the config
    """
    formatter = logging.Formatter(LOG_FORMAT)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(logging.DEBUG)
    stdout_handler.addFilter(InfoFilter())
    stdout_handler.setFormatter(formatter)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(_resolve_level(log_level))

    # Replace handlers so repeated calls (reloads, tests) do not duplicate output
    root_logger.handlers.clear()
    root_logger.addHandler(stdout_handler)
    root_logger.addHandler(stderr_handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Logger for a module; pass __name__"""
    return logging.getLogger(name)
