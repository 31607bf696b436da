"""
Console and daily-rotated file logging for facility-control applications.

Provides colorized, level-tagged console output plus a log history on disk:
- console: standard output, aligned columns, ANSI colors on a TTY
- file: one file per day under <base>/<app>/<YYYY>/<MM>/, linked as current.log
- debug file: every record, including DEBUG, linked as current-debug.log

Library: structlog for the processor pipeline; stdlib logging is redirected
into the same sinks.
"""

from .config import LogFormat, LoggingSettings
from .core import get_logger, get_sink_set, init, set_thread_prefix, shutdown
from .exceptions import FacilityLogError, InitError, RotationError, SinkWriteError
from .records import LogRecord, Severity

__all__ = [
    "init",
    "shutdown",
    "get_logger",
    "get_sink_set",
    "set_thread_prefix",
    "LoggingSettings",
    "LogFormat",
    "LogRecord",
    "Severity",
    "FacilityLogError",
    "InitError",
    "RotationError",
    "SinkWriteError",
]
