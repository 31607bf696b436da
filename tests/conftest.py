import logging
from datetime import datetime

import pytest
import structlog

import facilitylog
from facilitylog.formatters import LineFormatter
from facilitylog.layout import LogLayout
from facilitylog.records import LogRecord, Severity

D1 = datetime(2026, 10, 17, 9, 30, 15, 123456)


@pytest.fixture
def base_dir(tmp_path):
    """A log root that does not exist yet."""
    return tmp_path / "logs"


@pytest.fixture
def layout(base_dir):
    return LogLayout(base_dir, "myapp")


@pytest.fixture
def formatter():
    return LineFormatter(name_width=16, level_width=8)


@pytest.fixture
def make_record():
    def _make(severity=Severity.INFO, message="hello", *, name="myapp.core", timestamp=D1, **context):
        return LogRecord(severity=severity, name=name, message=message, timestamp=timestamp, context=context)

    return _make


@pytest.fixture(autouse=True)
def reset_logging(monkeypatch):
    """Tear down any global configuration installed by a test."""
    for key in ("CONSOLE_COLOR", "DEBUG_FILE", "CONSOLE_MIN_SEVERITY", "FILE_MIN_SEVERITY", "CONSOLE_FORMAT"):
        monkeypatch.delenv(f"FACILITYLOG_{key}", raising=False)
    root = logging.getLogger()
    saved_level = root.level
    yield
    facilitylog.shutdown()
    structlog.reset_defaults()
    for handler in list(root.handlers):
        if type(handler) is logging.NullHandler:
            root.removeHandler(handler)
    root.setLevel(saved_level)
