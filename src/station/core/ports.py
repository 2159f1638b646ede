# src/station/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The engines and stores depend on Protocols instead of concrete implementations.
This keeps storage, calendar sources and UI shells swappable and makes testing easier.
"""

from collections.abc import Callable, Iterable
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    import pendulum

    from ..engine.ticker import DashboardSnapshot
    from ..tasks.task_models import CalendarEvent, Task


class PermissionState(StrEnum):
    NOT_DETERMINED = "not_determined"
    GRANTED = "granted"
    DENIED = "denied"


class KeyValueStore(Protocol):
    """Durable JSON-compatible key/value storage; each key is saved independently."""

    def get(self, key: str, default: Any = None) -> Any: ...
    def set(self, key: str, value: Any) -> None: ...
    def delete(self, key: str) -> None: ...


class EventSource(Protocol):
    """
    Read-only calendar provider.

    The core never asks a source to create, modify or delete an event.
    Change notification is offered both ways: poll has_changed() or register a listener.
    """

    def request_access(self) -> PermissionState: ...

    def fetch_events(
            self,
            start: pendulum.DateTime,
            end: pendulum.DateTime,
    ) -> list[CalendarEvent]: ...

    def has_changed(self) -> bool: ...
    def add_change_listener(self, callback: Callable[[], None]) -> None: ...


class TaskRepo(Protocol):
    # Ticker / engines
    def sweep(self) -> list[Task]: ...
    def list_tasks(self) -> list[Task]: ...
    def cleared_alert_ids(self) -> frozenset[str]: ...

    # UI actions
    def mark_cleared(self, ids: Iterable[str]) -> None: ...
    def update_task(self, task: Task) -> bool: ...
    def delete_task(self, task_id: str) -> bool: ...


class DashboardSink(Protocol):
    """UI-side port: receives every recomputed dashboard snapshot."""

    def publish(self, snapshot: DashboardSnapshot) -> None: ...
