# src/station/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (state file, tasks, preferences, calendar).
"""

from __future__ import annotations

import logging

from ..calendar.event_source import IcsEventSource, StaticEventSource
from ..calendar.feed import CalendarFeed
from ..config import get_settings
from ..core.ports import EventSource
from ..core.state import AppState
from ..preferences import PreferenceStore
from ..storage.kv_store import JsonFileStore
from ..tasks.task_store import TaskStore
from ..time_utils import Clock, now_local

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.state_path.parent.mkdir(parents=True, exist_ok=True)


def _build_event_source(settings) -> EventSource:
    ics_path = getattr(settings, "ics_path", None)
    if ics_path:
        return IcsEventSource(ics_path)
    logger.info("No calendar file configured; calendar events disabled.")
    return StaticEventSource()


def create_initial_state(*, settings=None, clock: Clock = now_local) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    kv = JsonFileStore(settings.state_path)
    preferences = PreferenceStore(kv)
    feed = CalendarFeed(
        _build_event_source(settings),
        clock=clock,
        window_days=getattr(settings, "calendar_window_days", 30),
    )
    feed.refresh(selected_calendar_ids=preferences.current.selected_calendar_ids)

    def _on_calendars_changed(prefs) -> None:
        feed.refresh(selected_calendar_ids=prefs.selected_calendar_ids)

    preferences.subscribe(_on_calendars_changed, field_name="selected_calendar_ids")

    return AppState(
        settings=settings,
        kv=kv,
        task_store=TaskStore(kv, clock=clock),
        preferences=preferences,
        calendar=feed,
    )
