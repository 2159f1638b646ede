# src/station/engine/ticker.py

from __future__ import annotations

"""
Dashboard ticker.

A small polling loop that, once per interval:
- reads the clock,
- sweeps expired tasks out of the task store,
- re-fetches calendar events when the source reports a change,
- recomputes the active alert and the upcoming list,
- hands the result to an injected sink.

Each pass runs to completion before the loop sleeps again, so passes never overlap.
Presentation belongs to the sink, not the ticker.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

import pendulum

from .. import time_utils
from ..calendar.feed import CalendarFeed
from ..core.ports import DashboardSink, TaskRepo
from ..preferences import Preferences
from ..tasks.task_models import CalendarEvent, Category, Task
from ..time_utils import Clock
from .alerts import ActiveAlert, select_alert
from .upcoming import UpcomingGroup, UpcomingItem, aggregate_upcoming, dashboard_preview

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DashboardSnapshot:
    now: pendulum.DateTime
    alert: ActiveAlert | None
    upcoming: list[UpcomingItem] | list[UpcomingGroup]
    preview: list[UpcomingItem]
    day_label: str
    week_label: str


def compute_snapshot(
    now: pendulum.DateTime,
    tasks: list[Task],
    events: Iterable[CalendarEvent],
    preferences: Preferences,
    cleared_ids: Iterable[str],
    categories: Iterable[Category] | None = None,
) -> DashboardSnapshot:
    events = list(events)
    day_label, week_label = time_utils.header_labels(now)
    return DashboardSnapshot(
        now=now,
        alert=select_alert(now, tasks, events, preferences, cleared_ids),
        upcoming=aggregate_upcoming(now, tasks, events, preferences, categories),
        preview=dashboard_preview(now, tasks, events, preferences),
        day_label=day_label,
        week_label=week_label,
    )


def run_tick(
    task_store: TaskRepo,
    feed: CalendarFeed,
    preferences: Callable[[], Preferences],
    sink: DashboardSink,
    *,
    clock: Clock = time_utils.now_local,
    categories: Iterable[Category] | None = None,
) -> DashboardSnapshot:
    """One ticker pass. Also usable directly after a UI-driven input change."""
    now = clock()
    prefs = preferences()

    try:
        task_store.sweep()
    except Exception:
        logger.exception("Task sweep failed")

    feed.refresh_if_changed(selected_calendar_ids=prefs.selected_calendar_ids)

    snapshot = compute_snapshot(
        now,
        task_store.list_tasks(),
        feed.events,
        prefs,
        task_store.cleared_alert_ids(),
        categories,
    )

    try:
        sink.publish(snapshot)
    except Exception:
        logger.exception("Dashboard sink failed to publish")

    logger.debug(
        "Tick now=%s alert=%s upcoming=%d",
        now,
        snapshot.alert.id if snapshot.alert else None,
        len(snapshot.upcoming),
    )
    return snapshot


async def run_dashboard_ticker(
        task_store: TaskRepo,
        feed: CalendarFeed,
        preferences: Callable[[], Preferences],
        sink: DashboardSink,
        *,
        clock: Clock = time_utils.now_local,
        interval_seconds: float = 60.0,
) -> None:
    """
    Every interval_seconds: run_tick(...). A failing pass is logged and the
    loop keeps going.

    To stop the ticker, cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))
    logger.info("Dashboard ticker started interval=%.2fs", sleep_s)

    while True:
        try:
            run_tick(task_store, feed, preferences, sink, clock=clock)
        except Exception:
            logger.exception("Dashboard tick failed")

        await asyncio.sleep(sleep_s)
