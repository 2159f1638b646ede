# src/station/engine/upcoming.py

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

import pendulum

from .. import time_utils
from ..preferences import Preferences
from ..tasks.task_models import CalendarEvent, Category, Task

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UpcomingItem:
    id: str
    title: str
    time: pendulum.DateTime
    description: str | None
    category: Category | None
    is_urgent: bool
    include_time: bool
    is_calendar_origin: bool
    backing_task_id: str | None


@dataclass(frozen=True, slots=True)
class UpcomingGroup:
    day: pendulum.DateTime
    label: str
    items: tuple[UpcomingItem, ...]


def _from_task(task: Task) -> UpcomingItem:
    return UpcomingItem(
        id=f"task_{task.id}",
        title=task.title,
        time=task.due_date,
        description=task.description or None,
        category=task.category,
        is_urgent=task.is_urgent,
        include_time=task.include_time,
        is_calendar_origin=False,
        backing_task_id=task.id,
    )


def _from_event(event: CalendarEvent) -> UpcomingItem:
    return UpcomingItem(
        id=f"cal_{event.id}",
        title=event.title,
        time=event.start_time,
        description=event.location or None,
        category=None,
        is_urgent=False,
        include_time=True,
        is_calendar_origin=True,
        backing_task_id=None,
    )


def _merge(
    tasks: Iterable[Task],
    events: Iterable[CalendarEvent],
    *,
    start: pendulum.DateTime,
    end: pendulum.DateTime | None,
    include_events: bool,
    categories: frozenset[Category] | None,
) -> list[UpcomingItem]:
    def in_window(t: pendulum.DateTime) -> bool:
        return t >= start and (end is None or t <= end)

    items: list[UpcomingItem] = [
        _from_task(task)
        for task in tasks
        if in_window(task.due_date) and (categories is None or task.category in categories)
    ]

    if include_events:
        seen: set[str] = set()
        for event in events:
            if event.id in seen:
                continue
            seen.add(event.id)
            if in_window(event.start_time):
                items.append(_from_event(event))

    # Stable: equal (time, urgency) keeps tasks before events, input order otherwise.
    items.sort(key=lambda item: (item.time, not item.is_urgent))
    return items


def upcoming_cutoff(
    now: pendulum.DateTime, preferences: Preferences
) -> tuple[pendulum.DateTime, pendulum.DateTime | None]:
    """(start_of_today, cutoff or None when unlimited)"""
    start = time_utils.start_of_day(now)
    days = preferences.upcoming_time_limit.days
    return start, (start.add(days=days) if days is not None else None)


def upcoming_items(
    now: pendulum.DateTime,
    tasks: Iterable[Task],
    events: Iterable[CalendarEvent],
    preferences: Preferences,
    categories: Iterable[Category] | None = None,
) -> list[UpcomingItem]:
    """Flat, time-ordered list of everything from the start of today up to the cutoff."""
    start, cutoff = upcoming_cutoff(now, preferences)
    return _merge(
        tasks,
        events,
        start=start,
        end=cutoff,
        include_events=preferences.include_calendar_in_upcoming,
        categories=frozenset(categories) if categories is not None else None,
    )


def group_by_day(now: pendulum.DateTime, items: Iterable[UpcomingItem]) -> list[UpcomingGroup]:
    buckets: dict[pendulum.DateTime, list[UpcomingItem]] = {}
    for item in items:
        day = time_utils.start_of_day(time_utils.same_zone(item.time, now))
        buckets.setdefault(day, []).append(item)

    return [
        UpcomingGroup(day=day, label=time_utils.day_label(day, now), items=tuple(buckets[day]))
        for day in sorted(buckets)
    ]


def aggregate_upcoming(
    now: pendulum.DateTime,
    tasks: Iterable[Task],
    events: Iterable[CalendarEvent],
    preferences: Preferences,
    categories: Iterable[Category] | None = None,
) -> list[UpcomingItem] | list[UpcomingGroup]:
    """
    The Upcoming list: grouped by day when group_upcoming_by_date is set,
    flat otherwise.

    Dismissed alerts are deliberately not filtered out here; a task only
    leaves this list through delete or the store's expiry sweep.
    """
    items = upcoming_items(now, tasks, events, preferences, categories)
    logger.debug("Upcoming aggregated items=%d grouped=%s", len(items), preferences.group_upcoming_by_date)
    if preferences.group_upcoming_by_date:
        return group_by_day(now, items)
    return items


def dashboard_preview(
    now: pendulum.DateTime,
    tasks: Iterable[Task],
    events: Iterable[CalendarEvent],
    preferences: Preferences,
    limit: int = 2,
) -> list[UpcomingItem]:
    """Dashboard card: the next `limit` items from tomorrow onwards."""
    tomorrow = time_utils.start_of_day(now).add(days=1)
    items = _merge(
        tasks,
        events,
        start=tomorrow,
        end=None,
        include_events=preferences.include_calendar_in_upcoming,
        categories=None,
    )
    return items[: max(0, limit)]
