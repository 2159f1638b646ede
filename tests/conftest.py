# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pendulum
import pytest

from station.preferences import Preferences
from station.storage.kv_store import InMemoryStore
from station.tasks.task_store import TaskStore

from .fakes import FakeClock


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="station-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        state_path=tmp_path / "state.json",
        ics_path=None,
        calendar_window_days=30,
        tick_seconds=60,
    )


@pytest.fixture()
def now() -> pendulum.DateTime:
    # Wednesday.
    return pendulum.datetime(2024, 1, 10, 10, 0, tz="UTC")


@pytest.fixture()
def clock(now: pendulum.DateTime) -> FakeClock:
    return FakeClock(now)


@pytest.fixture()
def kv() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture()
def store(kv: InMemoryStore, clock: FakeClock) -> TaskStore:
    """Real TaskStore over an in-memory kv store and a controllable clock."""
    return TaskStore(kv, clock=clock)


@pytest.fixture()
def prefs() -> Preferences:
    """Reference defaults: 5 min lead time, 10 min auto-dismiss."""
    return Preferences()
