# src/station/calendar/feed.py

from __future__ import annotations

import logging
from collections.abc import Iterable

import pendulum

from .. import time_utils
from ..core.ports import EventSource, PermissionState
from ..tasks.task_models import CalendarEvent
from ..time_utils import Clock

logger = logging.getLogger(__name__)


def dedupe_events(events: Iterable[CalendarEvent]) -> list[CalendarEvent]:
    """Same title + same start time is the same logical event; first one wins."""
    seen: set[tuple[str, object]] = set()
    out: list[CalendarEvent] = []
    for event in events:
        key = (event.title, event.start_time)
        if key in seen:
            continue
        seen.add(key)
        out.append(event)
    return out


class CalendarFeed:
    """
    Holds the latest snapshot of calendar events.

    The engines only ever read `events`; refresh() replaces the snapshot and
    never blocks them. A denied permission yields an empty snapshot, and a
    failing fetch keeps the previous one.
    """

    def __init__(
        self,
        source: EventSource,
        *,
        clock: Clock = time_utils.now_local,
        window_days: int = 30,
    ) -> None:
        self._source = source
        self._clock = clock
        self._window_days = max(1, int(window_days))
        self._permission = PermissionState.NOT_DETERMINED
        self._events: tuple[CalendarEvent, ...] = ()
        self._window_start: pendulum.DateTime | None = None

    @property
    def events(self) -> tuple[CalendarEvent, ...]:
        return self._events

    @property
    def permission(self) -> PermissionState:
        return self._permission

    def request_access(self) -> PermissionState:
        self._permission = self._source.request_access()
        logger.info("Calendar access: %s", self._permission.value)
        return self._permission

    def refresh(self, *, selected_calendar_ids: Iterable[str] = ()) -> tuple[CalendarEvent, ...]:
        start = time_utils.start_of_day(self._clock())
        if self._permission != PermissionState.GRANTED:
            self.request_access()
        if self._permission != PermissionState.GRANTED:
            self._events = ()
            self._window_start = start
            return self._events

        end = start.add(days=self._window_days)
        try:
            fetched = self._source.fetch_events(start, end)
        except Exception:
            logger.exception("Calendar fetch failed; keeping previous snapshot")
            return self._events

        selected = frozenset(selected_calendar_ids)
        if selected:
            fetched = [e for e in fetched if e.calendar_id is None or e.calendar_id in selected]

        events = dedupe_events(fetched)
        events.sort(key=lambda e: e.start_time)
        self._events = tuple(events)
        self._window_start = start
        logger.debug("Calendar snapshot refreshed events=%d", len(self._events))
        return self._events

    def refresh_if_changed(self, *, selected_calendar_ids: Iterable[str] = ()) -> bool:
        """
        Refresh when the source reports a change or the day has rolled over
        since the last fetch window was taken.
        """
        try:
            changed = self._source.has_changed()
        except Exception:
            logger.exception("Calendar change check failed")
            changed = False
        if not changed and self._window_start is not None:
            changed = time_utils.start_of_day(self._clock()) > self._window_start
            if changed:
                logger.debug("Calendar window rolled over; refreshing")
        if changed:
            self.refresh(selected_calendar_ids=selected_calendar_ids)
        return changed
