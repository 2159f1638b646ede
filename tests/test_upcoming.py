# tests/test_upcoming.py

from __future__ import annotations

import pendulum

from station.engine.upcoming import (
    UpcomingGroup,
    aggregate_upcoming,
    dashboard_preview,
    upcoming_items,
)
from station.preferences import Preferences, UpcomingTimeLimit
from station.tasks.task_models import Category, Task
from station.time_utils import day_label, header_labels

from .fakes import make_event


def _task(title: str, due: pendulum.DateTime, **kwargs) -> Task:
    return Task(title=title, due_date=due, **kwargs)


def test_items_from_start_of_today_are_included(now: pendulum.DateTime, prefs: Preferences) -> None:
    earlier_today = _task("earlier", now.start_of("day").add(hours=1))
    yesterday = _task("yesterday", now.subtract(days=1))
    items = upcoming_items(now, [earlier_today, yesterday], [], prefs)
    assert [i.backing_task_id for i in items] == [earlier_today.id]


def test_time_limit_cutoff_is_inclusive(now: pendulum.DateTime) -> None:
    prefs = Preferences(upcoming_time_limit=UpcomingTimeLimit.NEXT_3_DAYS)
    at_cutoff = _task("edge", now.start_of("day").add(days=3))
    beyond = _task("beyond", now.start_of("day").add(days=3, seconds=1))

    ids = [i.backing_task_id for i in upcoming_items(now, [at_cutoff, beyond], [], prefs)]
    assert ids == [at_cutoff.id]

    unlimited = upcoming_items(now, [at_cutoff, beyond], [], Preferences())
    assert len(unlimited) == 2


def test_merge_sort_and_urgent_tie_break(now: pendulum.DateTime, prefs: Preferences) -> None:
    t1 = now.add(hours=1)
    plain = _task("plain", t1)
    urgent = _task("urgent", t1, is_urgent=True)
    later = _task("later", now.add(hours=2))
    ev = make_event("ev", now.add(minutes=30), location="Room 4")

    items = upcoming_items(now, [later, plain, urgent], [ev], prefs)

    assert [i.title for i in items] == [ev.title, "urgent", "plain", "later"]
    first = items[0]
    assert first.id == "cal_ev"
    assert first.is_calendar_origin
    assert first.category is None
    assert first.description == "Room 4"
    assert first.backing_task_id is None
    assert items[1].id == f"task_{urgent.id}"


def test_calendar_can_be_excluded_and_is_deduplicated(now: pendulum.DateTime) -> None:
    ev = make_event("ev", now.add(hours=1))
    assert upcoming_items(now, [], [ev, ev], Preferences()) == upcoming_items(now, [], [ev], Preferences())
    assert len(upcoming_items(now, [], [ev, ev], Preferences())) == 1
    assert upcoming_items(now, [], [ev], Preferences(include_calendar_in_upcoming=False)) == []


def test_category_filter_applies_to_tasks_only(now: pendulum.DateTime, prefs: Preferences) -> None:
    hw = _task("hw", now.add(hours=1), category=Category.HOMEWORK)
    test = _task("test", now.add(hours=2), category=Category.TEST)
    ev = make_event("ev", now.add(hours=3))

    items = upcoming_items(now, [hw, test], [ev], prefs, categories=[Category.TEST])
    assert [i.title for i in items] == ["test", ev.title]


def test_cleared_status_does_not_hide_items(now: pendulum.DateTime, prefs: Preferences) -> None:
    # The aggregation takes no cleared set at all; nothing to filter with.
    task = _task("still here", now.add(minutes=1))
    assert [i.backing_task_id for i in aggregate_upcoming(now, [task], [], prefs)] == [task.id]


def test_grouping_by_day_with_labels(now: pendulum.DateTime) -> None:
    prefs = Preferences(group_upcoming_by_date=True)
    today = _task("today", now.add(hours=1))
    tomorrow = _task("tomorrow", now.add(days=1))
    friday = _task("friday", now.add(days=2))
    friday_ev = make_event("ev", now.add(days=2, hours=1))

    groups = aggregate_upcoming(now, [friday, tomorrow, today], [friday_ev], prefs)

    assert all(isinstance(g, UpcomingGroup) for g in groups)
    assert [g.label for g in groups] == ["Today", "Tomorrow", "Friday, Jan 12"]
    assert [len(g.items) for g in groups] == [1, 1, 2]
    assert groups[0].day == now.start_of("day")


def test_flat_when_grouping_disabled(now: pendulum.DateTime, prefs: Preferences) -> None:
    items = aggregate_upcoming(now, [_task("a", now.add(hours=1))], [], prefs)
    assert not isinstance(items[0], UpcomingGroup)


def test_dashboard_preview_starts_tomorrow_and_is_capped(now: pendulum.DateTime, prefs: Preferences) -> None:
    today = _task("today", now.add(hours=1))
    d1 = _task("d1", now.add(days=1))
    d2 = make_event("d2", now.add(days=2))
    d3 = _task("d3", now.add(days=3))

    preview = dashboard_preview(now, [d3, today, d1], [d2], prefs)
    assert [i.title for i in preview] == ["d1", d2.title]


def test_day_label_and_header(now: pendulum.DateTime) -> None:
    assert day_label(now.add(hours=3), now) == "Today"
    assert day_label(now.add(days=1), now) == "Tomorrow"
    assert day_label(now.add(days=6), now) == "Tuesday, Jan 16"
    assert header_labels(now) == ("WEDNESDAY", "WEEK 2")
