"""
Daily rotation of log files.

A file is identified by its rotation key, the local calendar date of the
records written to it. Rotation is lazy: it happens when a record arrives
whose key is later than the key of the open file, so silent days leave no
empty files behind.
"""

from __future__ import annotations

import os
import sys
import threading
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import TextIO

from .exceptions import RotationError, SinkWriteError
from .layout import LogLayout, SinkKind, ensure_dir


def rotation_key(timestamp: datetime) -> date:
    """Local calendar date of a timestamp. Aware timestamps are converted first."""
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone()
    return timestamp.date()


def open_log_file(path: Path) -> TextIO:
    ensure_dir(path.parent)
    return open(path, "a", encoding="utf-8")


def point_link(link: Path, target: Path) -> None:
    """Atomically (re)point a symbolic link at `target`."""
    tmp = link.with_name(f".{link.name}.tmp")
    try:
        tmp.unlink()
    except FileNotFoundError:
        pass
    os.symlink(target, tmp)
    os.replace(tmp, link)


def report(message: str) -> None:
    """Best-effort diagnostic on stderr. Never goes through the log pipeline."""
    try:
        sys.stderr.write(f"facilitylog: {message}\n")
        sys.stderr.flush()
    except (OSError, ValueError):
        pass


@dataclass
class RotationState:
    handle: TextIO | None = None
    key: date | None = None
    path: Path | None = None

    @property
    def is_open(self) -> bool:
        return self.handle is not None

    def close(self) -> None:
        handle, self.handle = self.handle, None
        self.key = None
        self.path = None
        if handle is not None:
            try:
                handle.close()
            except OSError:
                pass


class RotatingFile:
    """One daily-rotated log file plus its stable `current` link.

    Rotation and writes are serialized by a per-file lock, so a concurrent
    writer sees either the old file or the new one, never a torn state.
    """

    def __init__(self, layout: LogLayout, kind: SinkKind = SinkKind.GENERAL) -> None:
        self.layout = layout
        self.kind = kind
        self.name = f"file:{kind.value}"
        self._state = RotationState()
        self._lock = threading.Lock()
        self._failed_key: date | None = None
        self._closed = False

    @property
    def state(self) -> RotationState:
        return self._state

    def write(self, timestamp: datetime, text: str) -> None:
        """Append `text` to the file of the record's day, rotating forward if needed.

        Records older than the open file's day (e.g. stdlib records created
        just before midnight but handled after it) go to the open file; the
        file never rotates backwards. After `close()` records are dropped.
        """
        key = rotation_key(timestamp)
        with self._lock:
            if self._closed:
                return
            if self._state.key is None or key > self._state.key:
                self._rotate(key)
            handle = self._state.handle
            if handle is None:
                raise RotationError(sink=self.name, path=self.layout.archive_path(key, self.kind), reason="no open file")
            try:
                handle.write(text)
                handle.flush()
            except (OSError, ValueError) as exc:
                path = self._state.path
                self._state.close()
                raise SinkWriteError(sink=self.name, path=path, reason=str(exc)) from exc

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self._state.close()

    def _rotate(self, key: date) -> None:
        path = self.layout.archive_path(key, self.kind)
        try:
            handle = open_log_file(path)
        except OSError as exc:
            error = RotationError(sink=self.name, path=path, reason=str(exc))
            if not self._state.is_open:
                raise error from exc
            # Keep appending to the previous day's file; the next record retries.
            if self._failed_key != key:
                self._failed_key = key
                report(f"{error}; still writing to {self._state.path}")
            return

        self._state.close()
        self._state = RotationState(handle=handle, key=key, path=path)
        self._failed_key = None
        try:
            point_link(self.layout.current_path(self.kind), self.layout.link_target(key, self.kind))
        except OSError as exc:
            report(f"cannot update {self.layout.current_path(self.kind)}: {exc}")
