# logging_setup.py
"""
Centralized logging for the expense tracker.

Entry points (cli.py, streamlit_app.py) call configure_logging() once.
Library modules only call get_logger("expense_tracker.<module>") and never
attach handlers themselves.
"""

import logging
import os
import sys
from typing import IO, Optional, Union

ROOT_LOGGER_NAME = "expense_tracker"
LOG_LEVEL_ENV = "EXPENSE_TRACKER_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_CONFIGURED = False


def parse_level(level: Union[int, str, None]) -> int:
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV)
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        level = level.strip().upper()
        if level.isdigit():
            return int(level)
        numeric = getattr(logging, level, None)
        if isinstance(numeric, int):
            return numeric
    return logging.INFO


class StderrHandler(logging.StreamHandler):
    """StreamHandler that writes to whatever sys.stderr is when a record is emitted."""

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value):
        pass


def configure_logging(level: Union[int, str, None] = None, fmt: Optional[str] = None,
                      stream: Optional[IO[str]] = None) -> None:
    """
    Attach a single StreamHandler to the package root logger.
    Later calls are ignored so reruns (Streamlit re-executes the script) do not stack handlers.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    numeric = parse_level(level)
    handler = logging.StreamHandler(stream) if stream is not None else StderrHandler()
    handler.setLevel(numeric)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))

    logger.setLevel(numeric)
    logger.addHandler(handler)
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not _CONFIGURED and not root.handlers:
        root.addHandler(logging.NullHandler())
    return logging.getLogger(name)
