"""
Log record and severity types shared by formatters and sinks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any, Mapping


class Severity(IntEnum):
    """Ordered log severity. Values match the stdlib numeric levels."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    @property
    def tag(self) -> str:
        return self.name

    @classmethod
    def parse(cls, value: Severity | int | str) -> Severity:
        """Convert a level name, stdlib level or Severity into a Severity.

        Intermediate stdlib levels (e.g. 25) round down to the nearest member.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            if value < cls.DEBUG:
                return cls.DEBUG
            return max(member for member in cls if member <= value)
        if isinstance(value, str):
            name = value.strip().upper()
            if name == "WARN":
                name = "WARNING"
            elif name == "FATAL":
                name = "CRITICAL"
            try:
                return cls[name]
            except KeyError:
                pass
        raise ValueError(f"Unknown severity: {value!r}")


@dataclass(frozen=True)
class LogRecord:
    """A single emission, consumed by every sink it passes the threshold of."""

    severity: Severity
    name: str
    message: str
    timestamp: datetime
    origin: tuple[str, int] | None = None
    context: Mapping[str, Any] = field(default_factory=dict)

    @property
    def tag(self) -> str:
        return self.severity.tag
