"""
Core logging configuration and initialization logic.
"""

from __future__ import annotations

import atexit
import logging
import os
import sys
import time
from contextvars import ContextVar
from datetime import datetime
from pathlib import Path
from typing import Any

import structlog
from structlog.typing import EventDict, WrappedLogger

from .config import LoggingSettings
from .exceptions import InitError
from .formatters import LineFormatter
from .layout import LogLayout, SinkKind, ensure_dir
from .records import LogRecord, Severity
from .sinks import BaseSink, ConsoleSink, RotatingFileSink, SinkSet

# =============================================================================
# Global State
# =============================================================================

_sink_set: SinkSet | None = None
_atexit_registered = False
_thread_prefix: ContextVar[str] = ContextVar("facilitylog_thread_prefix", default="")


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(_name=name or "root")


def set_thread_prefix(prefix: str) -> None:
    """Prepend `prefix` to every message emitted from the current thread."""
    _thread_prefix.set(prefix)


def get_sink_set() -> SinkSet | None:
    return _sink_set


# =============================================================================
# Structlog Processors
# =============================================================================


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add local wall-clock timestamp; stdlib records carry their own creation time."""
    created = event_dict.pop("_created", None)
    event_dict["timestamp"] = datetime.fromtimestamp(created if created is not None else time.time())
    return event_dict


def add_logger_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add logger name to log event."""
    event_dict["logger"] = event_dict.get("_name", "root")
    event_dict.pop("_name", None)
    return event_dict


def add_thread_prefix(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    prefix = _thread_prefix.get()
    if prefix:
        event_dict["_prefix"] = prefix
    return event_dict


def to_record(event_dict: EventDict) -> LogRecord:
    """Convert a processed event dict into a LogRecord."""
    event_dict = dict(event_dict)
    severity = Severity.parse(event_dict.pop("level", "info"))
    message = event_dict.pop("_prefix", "") + str(event_dict.pop("event", ""))
    for key in ("stack", "exception"):
        text = event_dict.pop(key, None)
        if text:
            message = f"{message}\n{text}"
    return LogRecord(
        severity=severity,
        name=str(event_dict.pop("logger", "root")),
        message=message,
        timestamp=event_dict.pop("timestamp", None) or datetime.now(),
        origin=event_dict.pop("_origin", None),
        context=event_dict,
    )


def multi_sink_renderer(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> str:
    """Render log to all configured sinks. Returns empty to suppress default output."""
    sink_set = _sink_set
    if sink_set is not None:
        sink_set.emit(to_record(event_dict))
    return ""


# =============================================================================
# Configuration Logic
# =============================================================================


def _build_sinks(layout: LogLayout, settings: LoggingSettings, stream: Any) -> list[BaseSink]:
    use_color = settings.console_color
    if use_color is None:
        use_color = bool(getattr(stream, "isatty", lambda: False)())

    formatter = LineFormatter(
        name_width=settings.name_width,
        level_width=settings.level_width,
        level_colors=settings.level_colors,
        use_color=use_color,
        console_prefix=f"[{layout.app_name}] " if settings.show_appname else "",
    )

    sinks: list[BaseSink] = [
        ConsoleSink(
            formatter,
            fmt=settings.console_format,
            stream=stream,
            min_severity=settings.console_min_severity,
        ),
        RotatingFileSink(layout, formatter, kind=SinkKind.GENERAL, min_severity=settings.file_min_severity),
    ]
    if settings.debug_file:
        sinks.append(RotatingFileSink(layout, formatter, kind=SinkKind.DEBUG, min_severity=Severity.DEBUG))
    return sinks


def _check_directory(path: Path) -> None:
    try:
        ensure_dir(path)
    except OSError as exc:
        raise InitError(path=path, reason=exc.strerror or str(exc)) from exc
    if not os.access(path, os.W_OK | os.X_OK):
        raise InitError(path=path, reason="directory is not writable")


def _configure_structlog(level: Severity) -> None:
    """Configure structlog processors and factory."""
    shared_processors = [
        structlog.stdlib.add_log_level,
        add_timestamp,
        add_logger_name,
        add_thread_prefix,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    # Custom logger factory that suppresses empty output (avoids /dev/null overhead)
    class NopFile:
        def write(self, s: str) -> None:
            pass

        def flush(self) -> None:
            pass

    _NOP_FILE = NopFile()

    class SilentPrintLoggerFactory:
        """Logger factory that returns a logger writing to nowhere."""

        def __call__(self, *args: Any) -> structlog.PrintLogger:
            return structlog.PrintLogger(file=_NOP_FILE)

    structlog.configure(
        processors=shared_processors + [multi_sink_renderer],
        wrapper_class=structlog.make_filtering_bound_logger(int(level)),
        context_class=dict,
        logger_factory=SilentPrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def _install(sink_set: SinkSet) -> None:
    global _sink_set, _atexit_registered
    from .interceptors import RedirectStdLibHandler

    previous, _sink_set = _sink_set, sink_set
    _configure_structlog(sink_set.min_severity)

    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(int(sink_set.min_severity))
    root_logger.addHandler(RedirectStdLibHandler())

    if previous is not None and previous is not sink_set:
        previous.close()

    if not _atexit_registered:
        atexit.register(shutdown)
        _atexit_registered = True


def init(
    base_dir: str | os.PathLike[str],
    app_name: str,
    settings: LoggingSettings | None = None,
    *,
    stream: Any = None,
    **overrides: Any,
) -> SinkSet:
    """
    Install console and daily-rotated file logging for this process.

    Log files live under `<base_dir>/<app_name>/`: `current.log` always links
    to today's `<YYYY>/<MM>/<DD>.log`, and with `debug_file` enabled
    `current-debug.log` links to `<YYYY>/<MM>/<DD>-debug.log`, which receives
    every record regardless of the configured thresholds.

    Calling `init` again replaces the previous configuration: the new sinks are
    installed first, then the old ones are closed.

    Args:
        base_dir: Root of the log tree, created if missing.
        app_name: Directory name for this application, used verbatim.
        settings: Sink options; built from the environment when omitted.
        stream: Console stream (default: sys.stdout).
        **overrides: Individual LoggingSettings fields.

    Returns:
        The installed SinkSet.

    Raises:
        InitError: The log directory cannot be created or written to. The
            previous configuration, if any, stays in place.
    """
    if not app_name:
        raise InitError(path=base_dir, reason="application name is empty")

    if settings is None:
        settings = LoggingSettings(**overrides)
    elif overrides:
        settings = LoggingSettings(**{**settings.model_dump(), **overrides})

    layout = LogLayout(Path(base_dir), app_name)
    _check_directory(layout.app_dir)

    sink_set = SinkSet(_build_sinks(layout, settings, stream or sys.stdout))
    _install(sink_set)
    return sink_set


def shutdown() -> None:
    """Flush and close every sink and detach from the stdlib root logger.

    The root handler is swapped for a NullHandler so later stdlib records are
    dropped rather than printed by logging.lastResort.
    """
    global _sink_set
    from .interceptors import RedirectStdLibHandler

    sink_set, _sink_set = _sink_set, None
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if isinstance(handler, RedirectStdLibHandler):
            root_logger.removeHandler(handler)
            if not root_logger.handlers:
                root_logger.addHandler(logging.NullHandler())
    if sink_set is not None:
        sink_set.close()
