# src/station/calendar/event_source.py

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable
from pathlib import Path

import icalevents.icalevents
import pendulum

from ..core.ports import PermissionState
from ..tasks.task_models import CalendarEvent

logger = logging.getLogger(__name__)


class _ChangeNotifier:
    def __init__(self) -> None:
        self._listeners: list[Callable[[], None]] = []

    def add_change_listener(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def _notify(self) -> None:
        for cb in list(self._listeners):
            try:
                cb()
            except Exception:
                logger.exception("Calendar change listener failed")


class StaticEventSource(_ChangeNotifier):
    """In-memory source; the embedding shell pushes events with replace_events()."""

    def __init__(
        self,
        events: Iterable[CalendarEvent] = (),
        *,
        permission: PermissionState = PermissionState.GRANTED,
    ) -> None:
        super().__init__()
        self._events = list(events)
        self._permission = permission
        self._changed = False

    def request_access(self) -> PermissionState:
        return self._permission

    def set_permission(self, permission: PermissionState) -> None:
        self._permission = permission
        self._changed = True
        self._notify()

    def replace_events(self, events: Iterable[CalendarEvent]) -> None:
        self._events = list(events)
        self._changed = True
        self._notify()

    def fetch_events(self, start: pendulum.DateTime, end: pendulum.DateTime) -> list[CalendarEvent]:
        if self._permission != PermissionState.GRANTED:
            return []
        return [e for e in self._events if start <= e.start_time <= end]

    def has_changed(self) -> bool:
        changed, self._changed = self._changed, False
        return changed


class IcsEventSource(_ChangeNotifier):
    """
    Read-only events from a local .ics file (parsed by icalevents).

    All-day entries are skipped; only timed events are dashboard material.
    Recurring events share a UID, so the occurrence start is folded into the id.
    """

    def __init__(self, path: str | Path, *, calendar_id: str | None = None) -> None:
        super().__init__()
        self._path = Path(path).expanduser()
        self._calendar_id = calendar_id or self._path.stem
        self._last_mtime: float | None = self._mtime()

    def _mtime(self) -> float | None:
        try:
            return self._path.stat().st_mtime
        except OSError:
            return None

    def request_access(self) -> PermissionState:
        if self._path.is_file() and os.access(self._path, os.R_OK):
            return PermissionState.GRANTED
        logger.warning("Calendar file not readable: %s", self._path)
        return PermissionState.DENIED

    def fetch_events(self, start: pendulum.DateTime, end: pendulum.DateTime) -> list[CalendarEvent]:
        ical_events = icalevents.icalevents.events(file=self._path, start=start, end=end)

        out: list[CalendarEvent] = []
        for ical_event in ical_events:
            if ical_event.start is None:
                continue
            if getattr(ical_event, "all_day", False):
                continue

            event_start = pendulum.instance(ical_event.start)
            event_end = pendulum.instance(ical_event.end) if ical_event.end else event_start
            uid = ical_event.uid or f"{self._calendar_id}:{ical_event.summary}"
            out.append(
                CalendarEvent(
                    id=f"{uid}@{event_start.isoformat()}",
                    title=ical_event.summary or "Untitled",
                    start_time=event_start,
                    end_time=event_end,
                    location=ical_event.location or None,
                    calendar_id=self._calendar_id,
                )
            )
        logger.debug("Fetched %d events from %s", len(out), self._path)
        return out

    def has_changed(self) -> bool:
        mtime = self._mtime()
        if mtime == self._last_mtime:
            return False
        self._last_mtime = mtime
        self._notify()
        return True
