# src/station/tasks/task_store.py

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import replace

import pendulum

from .. import time_utils
from ..core.ports import KeyValueStore
from ..time_utils import Clock
from .task_models import Category, Task

logger = logging.getLogger(__name__)

TASKS_KEY = "station_upcoming_items_list"
CLEARED_ALERTS_KEY = "station_cleared_alerts_list"
KNOWN_TASK_IDS_KEY = "station_known_task_ids"

# Tasks stay around this long past due so "N min ago" alerts can still show.
EXPIRY_GRACE = pendulum.duration(minutes=15)


def _sort_key(task: Task) -> tuple[bool, pendulum.DateTime]:
    return (not task.is_urgent, task.due_date)


class TaskStore:
    """
    User-authored tasks plus the set of dismissed alert ids.

    Every read or write pass sweeps expired tasks ("sweep on touch") and keeps
    the list sorted urgent-first, then soonest-due-first.

    Thread-safety:
    - all mutations are serialized with one re-entrant lock, since
      sweep + sort + persist is a read-modify-write sequence
    """

    def __init__(self, kv: KeyValueStore, *, clock: Clock = time_utils.now_local) -> None:
        self._kv = kv
        self._clock = clock
        self._lock = threading.RLock()
        self._tasks: list[Task] = self._load_tasks()
        self._cleared: set[str] = self._load_cleared()
        # Task ids still referenced by a live task or the cleared set; cleared ids
        # outside it belong to calendar events. Persisted so GC survives restarts.
        self._known_task_ids: set[str] = self._load_known_ids() | {t.id for t in self._tasks}
        self.sweep()
        logger.info(
            "TaskStore ready tasks=%d cleared=%d", len(self._tasks), len(self._cleared)
        )

    # ---- persistence ----

    def _load_tasks(self) -> list[Task]:
        raw = self._kv.get(TASKS_KEY)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("Persisted task list is not a list; treating as empty.")
            return []
        try:
            return [Task.from_dict(item) for item in raw]
        except Exception:
            logger.exception("Failed to decode persisted tasks; treating as empty.")
            return []

    def _load_cleared(self) -> set[str]:
        raw = self._kv.get(CLEARED_ALERTS_KEY)
        if raw is None:
            return set()
        if not isinstance(raw, list) or not all(isinstance(x, str) for x in raw):
            logger.warning("Persisted cleared-alert set is malformed; treating as empty.")
            return set()
        return set(raw)

    def _load_known_ids(self) -> set[str]:
        raw = self._kv.get(KNOWN_TASK_IDS_KEY)
        if raw is None:
            return set()
        if not isinstance(raw, list) or not all(isinstance(x, str) for x in raw):
            logger.warning("Persisted task id list is malformed; ignoring it.")
            return set()
        return set(raw)

    def _save_tasks(self) -> None:
        self._kv.set(TASKS_KEY, [t.to_dict() for t in self._tasks])

    def _save_cleared(self) -> None:
        self._kv.set(CLEARED_ALERTS_KEY, sorted(self._cleared))

    def _save_known_ids(self) -> None:
        self._kv.set(KNOWN_TASK_IDS_KEY, sorted(self._known_task_ids))

    # ---- hygiene ----

    def sweep(self) -> list[Task]:
        """
        Drop tasks more than 15 minutes past due, forget cleared ids of tasks
        that no longer exist, then re-sort. Returns the removed tasks.
        """
        with self._lock:
            threshold = self._clock() - EXPIRY_GRACE

            before_ids = [t.id for t in self._tasks]
            removed = [t for t in self._tasks if t.due_date < threshold]
            kept = [t for t in self._tasks if t.due_date >= threshold]
            kept.sort(key=_sort_key)
            self._tasks = kept

            live_ids = {t.id for t in kept}
            stale = {
                cid for cid in self._cleared if cid in self._known_task_ids and cid not in live_ids
            }
            if stale:
                self._cleared -= stale

            known = {k for k in self._known_task_ids if k in live_ids or k in self._cleared}
            known_changed = known != self._known_task_ids
            self._known_task_ids = known

            if removed or [t.id for t in kept] != before_ids:
                self._save_tasks()
            if stale:
                self._save_cleared()
            if known_changed:
                self._save_known_ids()

            for t in removed:
                logger.debug("Task expired id=%s title=%r due=%s", t.id, t.title, t.due_date)
            if removed or stale:
                logger.info("Sweep removed tasks=%d cleared_ids=%d", len(removed), len(stale))
            return removed

    # ---- public API ----

    def list_tasks(self) -> list[Task]:
        with self._lock:
            self.sweep()
            return [replace(t) for t in self._tasks]

    def get_task(self, task_id: str) -> Task | None:
        with self._lock:
            for t in self._tasks:
                if t.id == task_id:
                    return replace(t)
            return None

    def count_tasks(self) -> int:
        with self._lock:
            return len(self._tasks)

    def cleared_alert_ids(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._cleared)

    def add_task(
        self,
        *,
        title: str,
        due_date: pendulum.DateTime,
        category: Category = Category.HOMEWORK,
        description: str = "",
        is_urgent: bool = False,
        include_time: bool = True,
    ) -> Task:
        task = Task(
            title=title.strip() if title else title,
            description=description,
            due_date=due_date,
            category=category,
            is_urgent=is_urgent,
            include_time=include_time,
        )
        with self._lock:
            self._tasks.append(task)
            self._known_task_ids.add(task.id)
            self.sweep()
            self._save_tasks()
            self._save_known_ids()
        logger.debug(
            "Task added id=%s category=%s urgent=%s due=%s",
            task.id,
            task.category.value,
            task.is_urgent,
            task.due_date,
        )
        return replace(task)

    def update_task(self, task: Task) -> bool:
        """Replace the stored task with the same id. Unknown ids are a no-op."""
        with self._lock:
            for i, existing in enumerate(self._tasks):
                if existing.id == task.id:
                    self._tasks[i] = replace(task)
                    break
            else:
                logger.debug("update_task: unknown id=%s", task.id)
                return False
            self.sweep()
            self._save_tasks()
        logger.debug("Task updated id=%s", task.id)
        return True

    def delete_task(self, task_id: str) -> bool:
        """
        Remove a task. The cleared-alert set is left alone here; a dangling
        cleared id is dropped by the next sweep.
        """
        with self._lock:
            remaining = [t for t in self._tasks if t.id != task_id]
            if len(remaining) == len(self._tasks):
                return False
            self._tasks = remaining
            self._save_tasks()
        logger.debug("Task deleted id=%s", task_id)
        return True

    def mark_cleared(self, ids: Iterable[str]) -> None:
        new_ids = {i for i in ids if i}
        if not new_ids:
            return
        with self._lock:
            self._cleared |= new_ids
            self._save_cleared()
        logger.debug("Alerts cleared ids=%s", sorted(new_ids))

    def reset_all(self) -> None:
        with self._lock:
            self._tasks = []
            self._cleared = set()
            self._known_task_ids = set()
            self._save_tasks()
            self._save_cleared()
            self._save_known_ids()
        logger.info("TaskStore reset: all tasks and cleared alerts removed")
