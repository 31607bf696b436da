"""
Logging Configuration.
"""

from enum import Enum
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .records import Severity


class LogFormat(str, Enum):
    CONSOLE = "console"
    JSON = "json"


DEFAULT_LEVEL_COLORS: dict[str, str] = {
    "DEBUG": "\x1b[2;37m",
    "INFO": "\x1b[32m",
    "WARNING": "\x1b[33m",
    "ERROR": "\x1b[31m",
    "CRITICAL": "\x1b[1;91m",
}


class LoggingSettings(BaseSettings):
    """Sink and presentation options, immutable once built."""

    model_config = SettingsConfigDict(
        env_prefix="FACILITYLOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    console_color: Optional[bool] = Field(
        default=None,
        description="Colorize console output; None enables color only when stdout is a TTY",
    )
    debug_file: bool = Field(default=False, description="Capture every record in a separate debug log")
    console_min_severity: Severity = Field(default=Severity.INFO, description="Console threshold")
    file_min_severity: Severity = Field(default=Severity.INFO, description="General log file threshold")
    console_format: LogFormat = Field(default=LogFormat.CONSOLE, description="Console output format")
    show_appname: bool = Field(default=False, description="Prefix console messages with [appname]")
    name_width: int = Field(default=24, ge=0, description="Source name column width")
    level_width: int = Field(default=8, ge=5, le=8, description="Severity column width")
    level_colors: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_LEVEL_COLORS),
        description="ANSI sequence per severity name",
    )

    @field_validator("console_min_severity", "file_min_severity", mode="before")
    @classmethod
    def _parse_severity(cls, value: object) -> Severity:
        return Severity.parse(value)  # type: ignore[arg-type]

    @field_validator("level_colors", mode="before")
    @classmethod
    def _merge_palette(cls, value: object) -> object:
        # Partial palettes only override the named levels.
        if isinstance(value, dict):
            palette = dict(DEFAULT_LEVEL_COLORS)
            palette.update({str(k).upper(): v for k, v in value.items()})
            return palette
        return value
