# src/station/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..calendar.feed import CalendarFeed
from ..preferences import PreferenceStore
from ..tasks.task_store import TaskStore
from .ports import KeyValueStore


@dataclass
class AppState:
    # Process settings (station.config.Settings or a test stand-in).
    settings: object

    kv: KeyValueStore
    task_store: TaskStore
    preferences: PreferenceStore
    calendar: CalendarFeed
