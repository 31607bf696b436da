"""
Log line formatters and color utilities.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Mapping, NamedTuple

import orjson

from .config import DEFAULT_LEVEL_COLORS
from .records import LogRecord, Severity

# =============================================================================
# ANSI Colors
# =============================================================================

COLORS = {
    "reset": "\033[0m",
    "dim": "\033[2m",
    "timestamp": "\033[90m",
    "logger": "\033[35m",
    "key": "\033[34m",
}

# Messages at these severities are painted in the level color, not just the tag.
_PAINT_MESSAGE = frozenset({Severity.DEBUG, Severity.WARNING, Severity.ERROR, Severity.CRITICAL})


def colorize(text: str, color: str) -> str:
    """Apply ANSI color to text."""
    return f"{COLORS.get(color, color)}{text}{COLORS['reset']}"


def orjson_dumps(v: Any, *, default: Any = None) -> str:
    """Fast JSON serialization using orjson."""
    return orjson.dumps(v, default=default).decode()


class Target(str, Enum):
    CONSOLE = "console"
    FILE = "file"


class ParsedLine(NamedTuple):
    timestamp: datetime
    name: str
    tag: str
    message: str


# =============================================================================
# Line Formatter (Aligned Columns)
# =============================================================================


class LineFormatter:
    """Renders records as `<timestamp> <name> <LEVEL> <message>` lines.

    The name and level columns are padded to fixed widths but never truncated,
    so two distinct source names always render differently.
    """

    TIMESPEC = "microseconds"
    SEPARATOR = " "

    def __init__(
        self,
        *,
        name_width: int = 24,
        level_width: int = 8,
        level_colors: Mapping[str, str] | None = None,
        use_color: bool = False,
        console_prefix: str = "",
    ) -> None:
        self.name_width = name_width
        self.level_width = level_width
        self.level_colors = dict(level_colors or DEFAULT_LEVEL_COLORS)
        self.use_color = use_color
        self.console_prefix = console_prefix

    def format(self, record: LogRecord, target: Target = Target.FILE) -> str:
        if target is Target.CONSOLE:
            return self.format_console(record)
        return self.format_file(record)

    def format_file(self, record: LogRecord) -> str:
        """Plain line. Never contains color codes."""
        return self._render(record, use_color=False, prefix="")

    def format_console(self, record: LogRecord) -> str:
        return self._render(record, use_color=self.use_color, prefix=self.console_prefix)

    def format_json(self, record: LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": record.timestamp.isoformat(timespec=self.TIMESPEC),
            "level": record.tag.lower(),
            "logger": record.name,
            "message": record.message,
        }
        if record.origin:
            payload["origin"] = f"{record.origin[0]}:{record.origin[1]}"
        for key, value in record.context.items():
            payload.setdefault(key, value)
        return orjson_dumps(payload, default=str) + "\n"

    def parse_line(self, line: str) -> ParsedLine:
        """Recover the visible fields of a plain line produced by `format_file`."""
        if line.endswith("\n"):
            line = line[:-1]
        ts_text, sep, rest = line.partition(self.SEPARATOR)
        if not sep:
            raise ValueError(f"Not a log line: {line!r}")
        timestamp = datetime.fromisoformat(ts_text)

        name = rest.split(self.SEPARATOR, 1)[0]
        rest = rest[max(self.name_width, len(name)) + len(self.SEPARATOR) :]
        tag = rest.split(self.SEPARATOR, 1)[0]
        if tag not in Severity.__members__:
            raise ValueError(f"Unknown severity tag {tag!r} in line {line!r}")
        message = rest[max(self.level_width, len(tag)) + len(self.SEPARATOR) :]
        return ParsedLine(timestamp, name, tag, message)

    # -------------------------------------------------------------------------

    @staticmethod
    def _fit(text: str, width: int) -> str:
        return f"{text:<{width}}" if width > 0 else text

    def _paint(self, text: str, color: str, use_color: bool) -> str:
        if not use_color or not color:
            return text
        return colorize(text, color)

    def _render(self, record: LogRecord, *, use_color: bool, prefix: str) -> str:
        level_color = self.level_colors.get(record.tag, "")

        message = prefix + record.message
        if use_color and record.severity in _PAINT_MESSAGE:
            message = self._paint(message, level_color, use_color)

        extras = [
            f"{self._paint(str(k), 'key', use_color)}={self._paint(str(v), 'dim', use_color)}"
            for k, v in record.context.items()
        ]
        if extras:
            message = f"{message} " + " ".join(extras)

        return (
            self.SEPARATOR.join(
                [
                    self._paint(record.timestamp.isoformat(timespec=self.TIMESPEC), "timestamp", use_color),
                    self._paint(self._fit(record.name, self.name_width), "logger", use_color),
                    self._paint(self._fit(record.tag, self.level_width), level_color, use_color),
                    message,
                ]
            )
            + "\n"
        )
