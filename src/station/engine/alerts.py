# src/station/engine/alerts.py

from __future__ import annotations

"""
Active alert selection.

Given the current instant, tasks, calendar events, preferences and the set of
dismissed alert ids, pick at most one item that deserves attention right now.

Rules, in order:
- eligibility window: [now - auto_dismiss, now + lead_time], inclusive
- untimed (date-only) tasks and dismissed ids never alert
- if anything urgent is eligible, only urgent candidates compete
  (calendar events are never urgent)
- the most recently triggered past candidate wins; with nothing past,
  the soonest upcoming one does

select_alert() is a pure function; callers re-run it on every tick or input change.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

import pendulum

from ..core.ports import TaskRepo
from ..preferences import Preferences
from ..tasks.task_models import CalendarEvent, Task

logger = logging.getLogger(__name__)

URGENT_PREFIX = "URGENT · "


class AlertOrigin(StrEnum):
    TASK = "task"
    CALENDAR = "calendar"


@dataclass(frozen=True, slots=True)
class AlertCandidate:
    id: str
    title: str
    time: pendulum.DateTime
    is_urgent: bool
    origin: AlertOrigin


@dataclass(frozen=True, slots=True)
class ActiveAlert:
    """What the dashboard shows. `id` is the id to pass to mark_cleared()."""

    id: str
    title: str
    time: pendulum.DateTime
    detail: str
    is_urgent: bool
    is_past: bool
    origin: AlertOrigin


def eligibility_window(
    now: pendulum.DateTime, preferences: Preferences
) -> tuple[pendulum.DateTime, pendulum.DateTime]:
    """(expire_threshold, show_threshold)"""
    return now - preferences.auto_dismiss_after, now + preferences.lead_time


def alert_candidates(
    now: pendulum.DateTime,
    tasks: Iterable[Task],
    events: Iterable[CalendarEvent],
    preferences: Preferences,
    cleared_ids: Iterable[str] = (),
) -> list[AlertCandidate]:
    expire_at, show_at = eligibility_window(now, preferences)
    cleared = set(cleared_ids)

    candidates: list[AlertCandidate] = []
    for task in tasks:
        if not task.include_time or task.id in cleared:
            continue
        if expire_at <= task.due_date <= show_at:
            candidates.append(
                AlertCandidate(
                    id=task.id,
                    title=task.title,
                    time=task.due_date,
                    is_urgent=task.is_urgent,
                    origin=AlertOrigin.TASK,
                )
            )

    if preferences.include_calendar_in_alerts:
        seen: set[str] = set()
        for event in events:
            if event.id in seen:
                continue
            seen.add(event.id)
            if event.id in cleared:
                continue
            if expire_at <= event.start_time <= show_at:
                candidates.append(
                    AlertCandidate(
                        id=event.id,
                        title=event.title,
                        time=event.start_time,
                        is_urgent=False,
                        origin=AlertOrigin.CALENDAR,
                    )
                )

    return candidates


def _span(total_minutes: int) -> str:
    if total_minutes < 60:
        return f"{total_minutes} min"
    hours = total_minutes // 60
    return "1 hour" if hours == 1 else f"{hours} hours"


def format_relative_time(now: pendulum.DateTime, when: pendulum.DateTime, is_urgent: bool) -> str:
    """'In 4 min', '3 min ago', '2 hours ago'; prefixed with 'URGENT · ' when urgent."""
    diff_seconds = (when - now).total_seconds()
    span = _span(int(abs(diff_seconds) // 60))
    prefix = URGENT_PREFIX if is_urgent else ""
    if diff_seconds > 0:
        return f"{prefix}In {span}"
    return f"{prefix}{span} ago"


def choose_candidate(
    now: pendulum.DateTime, candidates: list[AlertCandidate]
) -> AlertCandidate | None:
    if not candidates:
        return None

    if any(c.is_urgent for c in candidates):
        candidates = [c for c in candidates if c.is_urgent]

    past = [c for c in candidates if c.time <= now]
    if past:
        # max() keeps the first of equal times, i.e. merge order breaks ties.
        return max(past, key=lambda c: c.time)

    future = [c for c in candidates if c.time > now]
    return min(future, key=lambda c: c.time) if future else None


def select_alert(
    now: pendulum.DateTime,
    tasks: Iterable[Task],
    events: Iterable[CalendarEvent],
    preferences: Preferences,
    cleared_ids: Iterable[str] = (),
) -> ActiveAlert | None:
    candidates = alert_candidates(now, tasks, events, preferences, cleared_ids)
    chosen = choose_candidate(now, candidates)
    if chosen is None:
        return None

    logger.debug(
        "Alert selected id=%s origin=%s among=%d", chosen.id, chosen.origin.value, len(candidates)
    )
    return ActiveAlert(
        id=chosen.id,
        title=chosen.title,
        time=chosen.time,
        detail=format_relative_time(now, chosen.time, chosen.is_urgent),
        is_urgent=chosen.is_urgent,
        is_past=chosen.time <= now,
        origin=chosen.origin,
    )


def dismiss_alert(repo: TaskRepo, alert: ActiveAlert) -> None:
    """Dismiss only the alert on screen; the next-best candidate surfaces on recompute."""
    repo.mark_cleared([alert.id])
    logger.info("Alert dismissed id=%s origin=%s", alert.id, alert.origin.value)
