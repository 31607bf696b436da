"""
Log sink abstractions and concrete implementations.
"""

from __future__ import annotations

import sys
import threading
from abc import ABC, abstractmethod
from typing import Any, Iterable

from .config import LogFormat
from .formatters import LineFormatter
from .layout import LogLayout, SinkKind
from .records import LogRecord, Severity
from .rotation import RotatingFile, report

# =============================================================================
# Sink Abstraction (Strategy Pattern)
# =============================================================================


class BaseSink(ABC):
    """Abstract base class for log sinks."""

    name: str = "sink"

    def __init__(self, min_severity: Severity = Severity.INFO) -> None:
        self.min_severity = Severity.parse(min_severity)

    def accepts(self, record: LogRecord) -> bool:
        return record.severity >= self.min_severity

    @abstractmethod
    def emit(self, record: LogRecord) -> None:
        """Write a record to the sink."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Close the sink and release resources."""
        ...


class ConsoleSink(BaseSink):
    """Standard output sink with console (aligned, optionally colored) or JSON format.

    All severities go to the same stream so that lines keep their emission order.
    """

    name = "console"

    def __init__(
        self,
        formatter: LineFormatter,
        *,
        fmt: LogFormat = LogFormat.CONSOLE,
        stream: Any = None,
        min_severity: Severity = Severity.INFO,
    ) -> None:
        super().__init__(min_severity)
        self._formatter = formatter
        self._fmt = LogFormat(fmt)
        self._stream = stream or sys.stdout
        self._lock = threading.Lock()

    @property
    def stream(self) -> Any:
        return self._stream

    def emit(self, record: LogRecord) -> None:
        if self._fmt is LogFormat.JSON:
            output = self._formatter.format_json(record)
        else:
            output = self._formatter.format_console(record)

        with self._lock:
            self._stream.write(output)
            self._stream.flush()

    def close(self) -> None:
        with self._lock:
            try:
                self._stream.flush()
            except (OSError, ValueError):
                pass


class RotatingFileSink(BaseSink):
    """Plain-text sink backed by a daily-rotated file."""

    def __init__(
        self,
        layout: LogLayout,
        formatter: LineFormatter,
        *,
        kind: SinkKind = SinkKind.GENERAL,
        min_severity: Severity = Severity.INFO,
    ) -> None:
        super().__init__(min_severity)
        self._formatter = formatter
        self._file = RotatingFile(layout, kind)
        self.name = self._file.name

    @property
    def file(self) -> RotatingFile:
        return self._file

    def emit(self, record: LogRecord) -> None:
        self._file.write(record.timestamp, self._formatter.format_file(record))

    def close(self) -> None:
        self._file.close()


# =============================================================================
# Sink Set
# =============================================================================


class SinkSet:
    """Fans records out to independent sinks.

    A failing sink never affects the others and never raises into the caller.
    Each failure streak is reported once on stderr; the sink is retried on
    every subsequent record.
    """

    def __init__(self, sinks: Iterable[BaseSink]) -> None:
        self._sinks: list[BaseSink] = list(sinks)
        self._failing: set[str] = set()
        self._failing_lock = threading.Lock()
        self._closed = False

    @property
    def sinks(self) -> list[BaseSink]:
        return list(self._sinks)

    @property
    def min_severity(self) -> Severity:
        if not self._sinks:
            return Severity.CRITICAL
        return min(sink.min_severity for sink in self._sinks)

    def get(self, name: str) -> BaseSink | None:
        return next((sink for sink in self._sinks if sink.name == name), None)

    def emit(self, record: LogRecord) -> None:
        if self._closed:
            return
        for sink in self._sinks:
            if not sink.accepts(record):
                continue
            try:
                sink.emit(record)
            except Exception as exc:
                with self._failing_lock:
                    first_failure = sink.name not in self._failing
                    self._failing.add(sink.name)
                if first_failure:
                    report(f"{sink.name} sink dropped a record: {exc}")
            else:
                with self._failing_lock:
                    self._failing.discard(sink.name)

    def close(self) -> None:
        self._closed = True
        for sink in self._sinks:
            try:
                sink.close()
            except Exception as exc:
                report(f"closing {sink.name} sink failed: {exc}")
