"""Logging configuration utilities."""

import logging
import sys
from typing import List, Optional, TextIO

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: str = "INFO",
    format_string: Optional[str] = None,
    quiet_loggers: Optional[List[str]] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """Configure logging for the listener.

    Log records always go to stderr unless another stream is given, since
    stdout carries the line protocol output.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        format_string: Custom format string for log messages.
        quiet_loggers: Extra logger names to set to WARNING level.
        stream: Stream for the root handler, defaults to stderr.
    """
    if format_string is None:
        format_string = DEFAULT_FORMAT

    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format=format_string,
        stream=stream or sys.stderr,
    )

    # bleak logs every D-Bus property change at DEBUG
    default_quiet = ["bleak", "asyncio", "aiohttp"]
    quiet_loggers = (quiet_loggers or []) + default_quiet

    for logger_name in quiet_loggers:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
