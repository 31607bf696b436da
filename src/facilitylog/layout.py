"""
On-disk layout of the log history.

    <base>/<app>/current.log               -> <YYYY>/<MM>/<DD>.log
    <base>/<app>/current-debug.log         -> <YYYY>/<MM>/<DD>-debug.log
    <base>/<app>/<YYYY>/<MM>/<DD>.log
    <base>/<app>/<YYYY>/<MM>/<DD>-debug.log

The layout is a pure mapping; nothing here touches the filesystem except
`ensure_dir`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date
from enum import Enum
from pathlib import Path


class SinkKind(str, Enum):
    GENERAL = "general"
    DEBUG = "debug"

    @property
    def suffix(self) -> str:
        return "" if self is SinkKind.GENERAL else "-debug"


@dataclass(frozen=True)
class LogLayout:
    base_dir: Path
    app_name: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_dir", Path(self.base_dir))

    @property
    def app_dir(self) -> Path:
        return self.base_dir / self.app_name

    def current_path(self, kind: SinkKind = SinkKind.GENERAL) -> Path:
        return self.app_dir / f"current{kind.suffix}.log"

    def archive_path(self, day: date, kind: SinkKind = SinkKind.GENERAL) -> Path:
        return self.app_dir / self.link_target(day, kind)

    def link_target(self, day: date, kind: SinkKind = SinkKind.GENERAL) -> Path:
        """Archive path relative to `app_dir`, as stored in the current-log link."""
        return Path(f"{day.year:04d}", f"{day.month:02d}", f"{day.day:02d}{kind.suffix}.log")


def ensure_dir(path: str | os.PathLike[str]) -> None:
    """Create a directory and its parents. Existing directories are fine."""
    Path(path).mkdir(parents=True, exist_ok=True)
