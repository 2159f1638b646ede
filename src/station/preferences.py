# src/station/preferences.py

"""User-facing dashboard preferences.

A typed, immutable Preferences value is handed to the engines; PreferenceStore
owns loading/saving (one key per field) and per-field change notification.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

import pendulum

from .core.ports import KeyValueStore

logger = logging.getLogger(__name__)


class UpcomingTimeLimit(StrEnum):
    NEXT_3_DAYS = "Next 3 Days"
    NEXT_5_DAYS = "Next 5 Days"
    NEXT_7_DAYS = "Next 7 Days"
    ALL_FUTURE = "All Future"

    @property
    def days(self) -> int | None:
        return _LIMIT_DAYS[self]


_LIMIT_DAYS = {
    UpcomingTimeLimit.NEXT_3_DAYS: 3,
    UpcomingTimeLimit.NEXT_5_DAYS: 5,
    UpcomingTimeLimit.NEXT_7_DAYS: 7,
    UpcomingTimeLimit.ALL_FUTURE: None,
}


class AlertTiming(StrEnum):
    AT_START = "At event start"
    FIVE_MIN_BEFORE = "5 minutes before"
    TEN_MIN_BEFORE = "10 minutes before"
    FIFTEEN_MIN_BEFORE = "15 minutes before"

    @property
    def lead_time(self) -> pendulum.Duration:
        return pendulum.duration(minutes=_TIMING_MINUTES[self])


_TIMING_MINUTES = {
    AlertTiming.AT_START: 0,
    AlertTiming.FIVE_MIN_BEFORE: 5,
    AlertTiming.TEN_MIN_BEFORE: 10,
    AlertTiming.FIFTEEN_MIN_BEFORE: 15,
}


class AutoDismissInterval(StrEnum):
    FIVE_MIN = "5 minutes"
    TEN_MIN = "10 minutes"
    FIFTEEN_MIN = "15 minutes"

    @property
    def interval(self) -> pendulum.Duration:
        return pendulum.duration(minutes=_DISMISS_MINUTES[self])


_DISMISS_MINUTES = {
    AutoDismissInterval.FIVE_MIN: 5,
    AutoDismissInterval.TEN_MIN: 10,
    AutoDismissInterval.FIFTEEN_MIN: 15,
}


class LaunchTab(StrEnum):
    DASHBOARD = "Dashboard"
    UPCOMING = "Upcoming"
    NOTES = "Notes"


@dataclass(frozen=True, slots=True)
class Preferences:
    include_calendar_in_upcoming: bool = True
    include_calendar_in_alerts: bool = True
    upcoming_time_limit: UpcomingTimeLimit = UpcomingTimeLimit.ALL_FUTURE
    group_upcoming_by_date: bool = False
    alert_timing: AlertTiming = AlertTiming.FIVE_MIN_BEFORE
    auto_dismiss: AutoDismissInterval = AutoDismissInterval.TEN_MIN
    selected_calendar_ids: frozenset[str] = field(default_factory=frozenset)
    default_launch_tab: LaunchTab = LaunchTab.DASHBOARD

    @property
    def lead_time(self) -> pendulum.Duration:
        return self.alert_timing.lead_time

    @property
    def auto_dismiss_after(self) -> pendulum.Duration:
        return self.auto_dismiss.interval


def _decode_bool(raw: Any) -> bool:
    if not isinstance(raw, bool):
        raise ValueError(f"expected bool, got {raw!r}")
    return raw


def _decode_ids(raw: Any) -> frozenset[str]:
    if not isinstance(raw, list) or not all(isinstance(x, str) for x in raw):
        raise ValueError(f"expected list of strings, got {raw!r}")
    return frozenset(raw)


def _encode_ids(value: frozenset[str]) -> list[str]:
    return sorted(value)


def _identity(value: Any) -> Any:
    return value


def _enum_value(value: StrEnum) -> str:
    return value.value


@dataclass(frozen=True, slots=True)
class _FieldCodec:
    key: str
    encode: Callable[[Any], Any]
    decode: Callable[[Any], Any]


# Storage key per field; each preference is persisted on its own.
_CODECS: dict[str, _FieldCodec] = {
    "include_calendar_in_upcoming": _FieldCodec("includeCalendarInUpcoming", _identity, _decode_bool),
    "include_calendar_in_alerts": _FieldCodec("includeCalendarInAlerts", _identity, _decode_bool),
    "upcoming_time_limit": _FieldCodec("upcomingTimeLimit", _enum_value, UpcomingTimeLimit),
    "group_upcoming_by_date": _FieldCodec("groupUpcomingByDate", _identity, _decode_bool),
    "alert_timing": _FieldCodec("alertTiming", _enum_value, AlertTiming),
    "auto_dismiss": _FieldCodec("autoDismissAlerts", _enum_value, AutoDismissInterval),
    "selected_calendar_ids": _FieldCodec("selectedCalendarIDs", _encode_ids, _decode_ids),
    "default_launch_tab": _FieldCodec("defaultLaunchTab", _enum_value, LaunchTab),
}

PreferenceListener = Callable[[Preferences], None]


class PreferenceStore:
    """Loads, saves and publishes Preferences."""

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv
        self._listeners: dict[str | None, list[PreferenceListener]] = {}
        self._current = self.load()

    @property
    def current(self) -> Preferences:
        return self._current

    def load(self) -> Preferences:
        defaults = Preferences()
        values: dict[str, Any] = {}
        for name, codec in _CODECS.items():
            raw = self._kv.get(codec.key)
            if raw is None:
                continue
            try:
                values[name] = codec.decode(raw)
            except (TypeError, ValueError):
                logger.warning(
                    "Malformed preference %s=%r; using default %r",
                    codec.key,
                    raw,
                    getattr(defaults, name),
                )
        return dataclasses.replace(defaults, **values)

    def subscribe(self, callback: PreferenceListener, *, field_name: str | None = None) -> None:
        """Call callback(new_preferences) when field_name (or, if None, any field) changes."""
        if field_name is not None and field_name not in _CODECS:
            raise ValueError(f"unknown preference: {field_name}")
        self._listeners.setdefault(field_name, []).append(callback)

    def update(self, **changes: Any) -> Preferences:
        unknown = set(changes) - set(_CODECS)
        if unknown:
            raise ValueError(f"unknown preference(s): {', '.join(sorted(unknown))}")

        old = self._current
        for name, value in changes.items():
            current = getattr(old, name)
            if isinstance(current, StrEnum):
                changes[name] = type(current)(value)
            elif isinstance(current, frozenset):
                changes[name] = frozenset(value)

        new = dataclasses.replace(old, **changes)
        changed = [name for name in changes if getattr(old, name) != getattr(new, name)]
        if not changed:
            return new

        for name in changed:
            codec = _CODECS[name]
            self._kv.set(codec.key, codec.encode(getattr(new, name)))
        self._current = new
        logger.info("Preferences changed: %s", ", ".join(changed))

        notified: set[int] = set()
        for name in [*changed, None]:
            for cb in self._listeners.get(name, []):
                if id(cb) in notified:
                    continue
                notified.add(id(cb))
                try:
                    cb(new)
                except Exception:
                    logger.exception("Preference listener failed field=%s", name)
        return new
