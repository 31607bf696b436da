"""
Error types raised by the logging setup and its file sinks.

Only `InitError` ever reaches application code. Sink errors are raised inside
the sink set and reported there, never out of an emission call.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional


class FacilityLogError(Exception):
    """Base class for all facilitylog errors."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}


class InitError(FacilityLogError):
    """The base directory cannot be created or written to."""

    def __init__(self, *, path: Path | str, reason: str) -> None:
        message = f"Cannot use log directory '{path}': {reason}"
        super().__init__(message, code="INIT_FAILED", details={"path": str(path), "reason": reason})


# ================================
# Sink errors
# ================================


class SinkError(FacilityLogError):
    """Base class for per-record sink failures."""

    def __init__(self, message: str, *, code: str, sink: str, path: Path | str | None = None, reason: str = "") -> None:
        details = {"sink": sink, "path": str(path) if path else None, "reason": reason}
        super().__init__(message, code=code, details=details)
        self.sink = sink


class SinkWriteError(SinkError):
    """Writing to an already open log file failed."""

    def __init__(self, *, sink: str, path: Path | str | None, reason: str) -> None:
        message = f"Write to '{path}' failed: {reason}"
        super().__init__(message, code="SINK_WRITE_FAILED", sink=sink, path=path, reason=reason)


class RotationError(SinkError):
    """The dated log file for a new day could not be opened."""

    def __init__(self, *, sink: str, path: Path | str, reason: str) -> None:
        message = f"Cannot open '{path}': {reason}"
        super().__init__(message, code="ROTATION_FAILED", sink=sink, path=path, reason=reason)
