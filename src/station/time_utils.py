# src/station/time_utils.py

from __future__ import annotations

import datetime
from collections.abc import Callable
from typing import cast

import pendulum

Clock = Callable[[], pendulum.DateTime]


def now_local() -> pendulum.DateTime:
    return pendulum.now("local")


def to_pendulum(value: datetime.datetime) -> pendulum.DateTime:
    """Coerce a datetime into an aware pendulum.DateTime (naive values are local time)."""
    if isinstance(value, pendulum.DateTime):
        return value
    if value.tzinfo is None:
        return pendulum.instance(value, tz="local")
    return pendulum.instance(value)


def datetime_to_iso_str(value: pendulum.DateTime) -> str:
    return value.isoformat()


def datetime_from_str(value: str) -> pendulum.DateTime:
    parsed = pendulum.parse(value)
    if not isinstance(parsed, pendulum.DateTime):
        raise ValueError(f"not a datetime: {value!r}")
    return cast(pendulum.DateTime, parsed)


def minutes(n: int) -> pendulum.Duration:
    return pendulum.duration(minutes=n)


def start_of_day(value: pendulum.DateTime) -> pendulum.DateTime:
    return value.start_of("day")


def same_zone(value: pendulum.DateTime, reference: pendulum.DateTime) -> pendulum.DateTime:
    """Express value in reference's timezone so calendar-day math agrees with it."""
    tz = reference.timezone
    if tz is None:
        return value
    return value.in_timezone(tz)


def day_label(day: pendulum.DateTime, now: pendulum.DateTime) -> str:
    """'Today', 'Tomorrow', or e.g. 'Wednesday, Jan 10' for any other day."""
    today = start_of_day(now)
    day = start_of_day(same_zone(day, now))
    if day == today:
        return "Today"
    if day == today.add(days=1):
        return "Tomorrow"
    return day.format("dddd, MMM D")


def header_labels(now: pendulum.DateTime) -> tuple[str, str]:
    """Dashboard header: ('TUESDAY', 'WEEK 2')."""
    return now.format("dddd").upper(), f"WEEK {now.week_of_year}"
