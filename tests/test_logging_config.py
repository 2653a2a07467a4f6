from __future__ import annotations

import logging

import logging_config
from logging_config import ContextualFormatter, configure_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="services.dashboard",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Dashboard refreshed",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_known_context_keys() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    line = formatter.format(_record(valid_count=98, dropped_count=2, unrelated="x"))

    assert line == "Dashboard refreshed | valid_count=98 dropped_count=2"


def test_formatter_skips_missing_and_none_values() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    assert formatter.format(_record(reason=None)) == "Dashboard refreshed"


def test_formatter_honours_custom_keys() -> None:
    formatter = ContextualFormatter(fmt="%(message)s", extra_keys=["sheet_range"])

    line = formatter.format(_record(sheet_range="Sheet1!A2:C5", valid_count=3))

    assert line == "Dashboard refreshed | sheet_range=Sheet1!A2:C5"


def test_configure_logging_reads_level_from_environment_once(monkeypatch) -> None:
    applied = []
    monkeypatch.setattr(logging_config, "dictConfig", applied.append)
    monkeypatch.setattr(logging_config, "_configured", False)
    monkeypatch.setenv("LOG_LEVEL", "debug")

    configure_logging()
    monkeypatch.setenv("LOG_LEVEL", "error")
    configure_logging()

    assert len(applied) == 1
    assert applied[0]["root"]["level"] == "DEBUG"
    assert applied[0]["handlers"]["default"]["level"] == "DEBUG"
