"""
Interceptors for capturing standard library logs.
"""

import logging

from .core import get_logger
from .records import Severity


class RedirectStdLibHandler(logging.Handler):
    """
    Redirect standard library logging events to structlog.
    This ensures that logs from `logging.getLogger(...)` and third-party
    libraries pass through the same sink pipeline.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            # Skip if coming from structlog to avoid infinite loops
            if "structlog" in record.name:
                return

            # Message plus traceback, if any
            msg = self.format(record)

            logger = get_logger(record.name or "root")
            logger.log(
                int(Severity.parse(record.levelno)),
                msg,
                _created=record.created,
                _origin=(record.pathname, record.lineno),
            )
        except Exception:
            self.handleError(record)
