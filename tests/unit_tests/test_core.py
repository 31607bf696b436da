"""
End-to-end tests of init(): stdlib and structlog emission into the sinks.
"""

from __future__ import annotations

import io
import logging
import threading
from datetime import datetime

import pytest

import facilitylog
from facilitylog import core
from facilitylog.formatters import LineFormatter
from facilitylog.interceptors import RedirectStdLibHandler
from facilitylog.layout import LogLayout, SinkKind

D1 = datetime(2026, 10, 17, 12, 0, 0)
D2 = datetime(2026, 10, 18, 8, 0, 0)

parser = LineFormatter()


def emit_at(name: str, level: int, msg: str, when: datetime) -> None:
    record = logging.makeLogRecord(
        {
            "name": name,
            "levelno": level,
            "levelname": logging.getLevelName(level),
            "msg": msg,
            "created": when.timestamp(),
        }
    )
    logging.getLogger(name).handle(record)


def messages(path) -> list[str]:
    return [parser.parse_line(line).message for line in path.read_text().splitlines()]


def test_two_day_scenario(base_dir):
    console = io.StringIO()
    sink_set = facilitylog.init(base_dir, "myapp", debug_file=True, stream=console)
    layout = LogLayout(base_dir, "myapp")

    emit_at("myapp.core", logging.INFO, "info on d1", D1)
    emit_at("myapp.core", logging.DEBUG, "debug on d1", D1)
    emit_at("myapp.core", logging.ERROR, "error on d2", D2)

    assert messages(layout.archive_path(D1.date())) == ["info on d1"]
    assert messages(layout.archive_path(D1.date(), SinkKind.DEBUG)) == ["info on d1", "debug on d1"]
    assert messages(layout.current_path()) == ["error on d2"]
    assert messages(layout.current_path(SinkKind.DEBUG)) == ["error on d2"]

    general = sink_set.get("file:general")
    assert general.file.state.key == D2.date()
    assert general.file.state.path == layout.archive_path(D2.date())

    assert [parser.parse_line(line).message for line in console.getvalue().splitlines()] == [
        "info on d1",
        "error on d2",
    ]


def test_structlog_and_stdlib_share_sinks(base_dir):
    console = io.StringIO()
    facilitylog.init(base_dir, "myapp", stream=console)

    facilitylog.get_logger("myapp.motor").info("moving", target=12.5)
    logging.getLogger("myapp.vacuum").warning("pressure %s", "high")
    facilitylog.get_logger("myapp.motor").debug("not shown")

    lines = LogLayout(base_dir, "myapp").current_path().read_text().splitlines()
    parsed = [parser.parse_line(line) for line in lines]
    assert [(p.name, p.tag, p.message) for p in parsed] == [
        ("myapp.motor", "INFO", "moving target=12.5"),
        ("myapp.vacuum", "WARNING", "pressure high"),
    ]
    assert console.getvalue().splitlines() == lines


def test_exception_traceback_is_kept(base_dir):
    facilitylog.init(base_dir, "myapp", stream=io.StringIO())
    try:
        raise ValueError("bad value")
    except ValueError:
        logging.getLogger("myapp").exception("failed")

    text = LogLayout(base_dir, "myapp").current_path().read_text()
    assert " ERROR    failed\nTraceback (most recent call last):" in text
    assert "ValueError: bad value" in text


def test_thresholds_from_settings(base_dir):
    console = io.StringIO()
    settings = facilitylog.LoggingSettings(console_min_severity="warning", file_min_severity="debug")
    facilitylog.init(base_dir, "myapp", settings, stream=console)

    logging.getLogger("myapp").debug("verbose")
    logging.getLogger("myapp").warning("careful")

    assert messages(LogLayout(base_dir, "myapp").current_path()) == ["verbose", "careful"]
    assert [parser.parse_line(line).message for line in console.getvalue().splitlines()] == ["careful"]


def test_settings_from_environment(base_dir, monkeypatch):
    monkeypatch.setenv("FACILITYLOG_DEBUG_FILE", "true")
    monkeypatch.setenv("FACILITYLOG_CONSOLE_MIN_SEVERITY", "ERROR")
    sink_set = facilitylog.init(base_dir, "myapp", stream=io.StringIO())
    assert sink_set.get("file:debug") is not None
    assert sink_set.get("console").min_severity is facilitylog.Severity.ERROR


def test_console_color(base_dir):
    console = io.StringIO()
    facilitylog.init(base_dir, "myapp", stream=console, console_color=True, show_appname=True)
    logging.getLogger("myapp").error("broken")

    assert "\x1b[31m" in console.getvalue()
    assert "[myapp] broken" in console.getvalue()
    file_text = LogLayout(base_dir, "myapp").current_path().read_text()
    assert "\x1b[" not in file_text
    assert "[myapp]" not in file_text


def test_color_off_when_not_a_tty(base_dir):
    console = io.StringIO()
    facilitylog.init(base_dir, "myapp", stream=console)
    logging.getLogger("myapp").error("broken")
    assert "\x1b[" not in console.getvalue()


def test_thread_prefix(base_dir):
    facilitylog.init(base_dir, "myapp", stream=io.StringIO())

    def worker():
        facilitylog.set_thread_prefix("[axis1] ")
        logging.getLogger("myapp.axis").info("homed")

    thread = threading.Thread(target=worker)
    thread.start()
    thread.join()
    logging.getLogger("myapp").info("main")

    assert messages(LogLayout(base_dir, "myapp").current_path()) == ["[axis1] homed", "main"]


class TestInit:
    def test_creates_app_directory_lazily_opens_files(self, base_dir) -> None:
        facilitylog.init(base_dir, "myapp", stream=io.StringIO())
        assert (base_dir / "myapp").is_dir()
        assert list((base_dir / "myapp").iterdir()) == []

    def test_unusable_base_dir(self, tmp_path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("")
        with pytest.raises(facilitylog.InitError) as exc_info:
            facilitylog.init(blocker, "myapp")
        assert exc_info.value.code == "INIT_FAILED"
        assert facilitylog.get_sink_set() is None

    def test_empty_app_name(self, base_dir) -> None:
        with pytest.raises(facilitylog.InitError):
            facilitylog.init(base_dir, "")

    def test_failed_reinit_keeps_previous_configuration(self, base_dir, tmp_path) -> None:
        first = facilitylog.init(base_dir, "myapp", stream=io.StringIO())
        blocker = tmp_path / "file"
        blocker.write_text("")
        with pytest.raises(facilitylog.InitError):
            facilitylog.init(blocker, "other")

        assert facilitylog.get_sink_set() is first
        logging.getLogger("myapp").info("still here")
        assert messages(LogLayout(base_dir, "myapp").current_path()) == ["still here"]

    def test_reinit_replaces_configuration(self, base_dir) -> None:
        first = facilitylog.init(base_dir, "first", stream=io.StringIO())
        logging.getLogger("app").info("one")
        old_file = first.get("file:general").file

        second = facilitylog.init(base_dir, "second", stream=io.StringIO())
        logging.getLogger("app").info("two")

        assert facilitylog.get_sink_set() is second
        assert not old_file.state.is_open
        assert messages(LogLayout(base_dir, "first").current_path()) == ["one"]
        assert messages(LogLayout(base_dir, "second").current_path()) == ["two"]
        handlers = [h for h in logging.getLogger().handlers if isinstance(h, RedirectStdLibHandler)]
        assert len(handlers) == 1
        assert core._atexit_registered

    def test_shutdown_closes_files(self, base_dir, capsys) -> None:
        sink_set = facilitylog.init(base_dir, "myapp", debug_file=True, stream=io.StringIO())
        logging.getLogger("myapp").info("before")
        facilitylog.shutdown()

        assert not sink_set.get("file:general").file.state.is_open
        assert not sink_set.get("file:debug").file.state.is_open
        logging.getLogger("myapp").info("after")
        logging.getLogger("myapp").warning("after")
        facilitylog.get_logger("myapp").error("after")
        assert messages(LogLayout(base_dir, "myapp").current_path()) == ["before"]
        assert not sink_set.get("file:general").file.state.is_open
        assert capsys.readouterr().err == ""
