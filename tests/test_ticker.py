# tests/test_ticker.py

from __future__ import annotations

import asyncio

import pytest

from station.calendar.event_source import StaticEventSource
from station.calendar.feed import CalendarFeed
from station.engine.ticker import run_dashboard_ticker, run_tick
from station.preferences import Preferences
from station.tasks.task_store import TaskStore

from .fakes import FakeClock, RecordingSink, make_event


def test_tick_sweeps_and_recomputes_as_time_advances(store: TaskStore, clock: FakeClock) -> None:
    essay = store.add_task(title="Essay", due_date=clock.now.add(minutes=4))
    feed = CalendarFeed(StaticEventSource(), clock=clock)
    sink = RecordingSink()
    prefs = Preferences()

    snap = run_tick(store, feed, lambda: prefs, sink, clock=clock)
    assert snap.alert is not None and snap.alert.detail == "In 4 min"
    assert snap.day_label == "WEDNESDAY"

    clock.advance(minutes=7)
    snap = run_tick(store, feed, lambda: prefs, sink, clock=clock)
    assert snap.alert is not None and snap.alert.detail == "3 min ago"

    clock.advance(minutes=8)
    snap = run_tick(store, feed, lambda: prefs, sink, clock=clock)
    assert snap.alert is None
    assert [i.backing_task_id for i in snap.upcoming] == [essay.id]

    clock.advance(minutes=5)
    snap = run_tick(store, feed, lambda: prefs, sink, clock=clock)
    assert store.count_tasks() == 0
    assert snap.upcoming == []
    assert len(sink.snapshots) == 4


def test_tick_picks_up_calendar_changes(store: TaskStore, clock: FakeClock) -> None:
    source = StaticEventSource()
    feed = CalendarFeed(source, clock=clock)
    feed.refresh()
    sink = RecordingSink()

    source.replace_events([make_event("standup", clock.now.add(minutes=2))])
    snap = run_tick(store, feed, Preferences, sink, clock=clock)

    assert snap.alert is not None and snap.alert.id == "standup"


def test_tick_refreshes_calendar_window_after_midnight(store: TaskStore, clock: FakeClock) -> None:
    exam = make_event("exam", clock.now.add(days=3, minutes=2))
    feed = CalendarFeed(StaticEventSource([exam]), clock=clock, window_days=2)
    feed.refresh()
    sink = RecordingSink()

    snap = run_tick(store, feed, Preferences, sink, clock=clock)
    assert snap.alert is None
    assert feed.events == ()

    clock.advance(days=3)
    snap = run_tick(store, feed, Preferences, sink, clock=clock)

    assert [e.id for e in feed.events] == ["exam"]
    assert snap.alert is not None and snap.alert.id == "exam"


def test_tick_survives_a_broken_sink(store: TaskStore, clock: FakeClock) -> None:
    class BrokenSink:
        def publish(self, snapshot) -> None:
            raise RuntimeError("ui gone")

    feed = CalendarFeed(StaticEventSource(), clock=clock)
    snap = run_tick(store, feed, Preferences, BrokenSink(), clock=clock)
    assert snap.alert is None


@pytest.mark.asyncio
async def test_ticker_loop_publishes_until_cancelled(store: TaskStore, clock: FakeClock) -> None:
    store.add_task(title="ping", due_date=clock.now.add(minutes=1))
    feed = CalendarFeed(StaticEventSource(), clock=clock)
    sink = RecordingSink()

    runner = asyncio.create_task(
        run_dashboard_ticker(
            store,
            feed,
            Preferences,
            sink,
            clock=clock,
            interval_seconds=0.01,
        )
    )

    await asyncio.sleep(0.05)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert sink.snapshots, "Ticker should publish at least one snapshot"
    assert sink.snapshots[0].alert is not None
    assert sink.snapshots[0].alert.title == "ping"
