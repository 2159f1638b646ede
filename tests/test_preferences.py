# tests/test_preferences.py

from __future__ import annotations

import pytest

from station.preferences import (
    AlertTiming,
    AutoDismissInterval,
    LaunchTab,
    Preferences,
    PreferenceStore,
    UpcomingTimeLimit,
)
from station.storage.kv_store import InMemoryStore


def test_defaults_when_nothing_persisted(kv: InMemoryStore) -> None:
    prefs = PreferenceStore(kv).current
    assert prefs == Preferences()
    assert prefs.lead_time.in_minutes() == 5
    assert prefs.auto_dismiss_after.in_minutes() == 10
    assert prefs.upcoming_time_limit.days is None


def test_each_field_is_persisted_under_its_own_key(kv: InMemoryStore) -> None:
    store = PreferenceStore(kv)
    store.update(
        alert_timing=AlertTiming.TEN_MIN_BEFORE,
        upcoming_time_limit="Next 5 Days",
        selected_calendar_ids=["b", "a"],
    )

    assert kv.get("alertTiming") == "10 minutes before"
    assert kv.get("upcomingTimeLimit") == "Next 5 Days"
    assert kv.get("selectedCalendarIDs") == ["a", "b"]
    assert kv.get("includeCalendarInAlerts") is None

    reloaded = PreferenceStore(kv).current
    assert reloaded.alert_timing is AlertTiming.TEN_MIN_BEFORE
    assert reloaded.upcoming_time_limit is UpcomingTimeLimit.NEXT_5_DAYS
    assert reloaded.upcoming_time_limit.days == 5
    assert reloaded.selected_calendar_ids == frozenset({"a", "b"})


def test_malformed_values_fall_back_per_field() -> None:
    kv = InMemoryStore(
        {
            "includeCalendarInUpcoming": "yes",
            "alertTiming": "whenever",
            "autoDismissAlerts": "15 minutes",
            "selectedCalendarIDs": "work",
            "defaultLaunchTab": "Upcoming",
        }
    )
    prefs = PreferenceStore(kv).current
    assert prefs.include_calendar_in_upcoming is True
    assert prefs.alert_timing is AlertTiming.FIVE_MIN_BEFORE
    assert prefs.auto_dismiss is AutoDismissInterval.FIFTEEN_MIN
    assert prefs.selected_calendar_ids == frozenset()
    assert prefs.default_launch_tab is LaunchTab.UPCOMING


def test_listeners_fire_per_field_and_globally(kv: InMemoryStore) -> None:
    store = PreferenceStore(kv)
    field_calls: list[Preferences] = []
    any_calls: list[Preferences] = []
    store.subscribe(field_calls.append, field_name="group_upcoming_by_date")
    store.subscribe(any_calls.append)

    store.update(include_calendar_in_alerts=False)
    assert field_calls == []
    assert len(any_calls) == 1

    store.update(group_upcoming_by_date=True)
    assert len(field_calls) == 1 and field_calls[0].group_upcoming_by_date is True
    assert len(any_calls) == 2

    # Unchanged value: no save, no notification.
    store.update(group_upcoming_by_date=True)
    assert len(any_calls) == 2


def test_unknown_fields_are_rejected(kv: InMemoryStore) -> None:
    store = PreferenceStore(kv)
    with pytest.raises(ValueError):
        store.update(theme="dark")
    with pytest.raises(ValueError):
        store.subscribe(lambda p: None, field_name="theme")
