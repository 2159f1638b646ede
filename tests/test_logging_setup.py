# tests/test_logging_setup.py

from __future__ import annotations

import logging

import pytest

from station.logging_setup import _ConsoleNoiseFilter


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


@pytest.mark.parametrize(
    "name, level, shown",
    [
        ("station.engine.ticker", logging.DEBUG, False),
        ("station.engine.ticker", logging.INFO, True),
        ("station.tasks.task_store", logging.DEBUG, True),
        ("icalevents.icalparser", logging.WARNING, False),
        ("icalevents.icalparser", logging.ERROR, True),
        ("py.warnings", logging.WARNING, False),
    ],
)
def test_console_filter_levels(name: str, level: int, shown: bool) -> None:
    assert _ConsoleNoiseFilter().filter(_record(name, level)) is shown
