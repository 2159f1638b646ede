# src/station/tasks/task_models.py

from __future__ import annotations

import datetime
import uuid
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

import pendulum

from .. import time_utils


class Category(StrEnum):
    """Task category. Values are the persisted/display badge strings."""

    HOMEWORK = "HW"
    TEST = "Test"
    EVENT = "Event"
    ANNOUNCEMENT = "Announcement"

    @classmethod
    def from_raw(cls, raw: str | None) -> Category:
        if not raw:
            return cls.HOMEWORK
        try:
            return cls(raw)
        except ValueError:
            # Accept member names too ("homework", "TEST").
            try:
                return cls[str(raw).upper()]
            except KeyError:
                raise ValueError(f"unknown category: {raw!r}") from None


@dataclass(frozen=True, slots=True)
class CategoryStyle:
    color: str
    icon: str


CATEGORY_STYLE: dict[Category, CategoryStyle] = {
    Category.HOMEWORK: CategoryStyle(color="blue", icon="pencil.and.outline"),
    Category.TEST: CategoryStyle(color="red", icon="doc.text.fill"),
    Category.EVENT: CategoryStyle(color="green", icon="calendar"),
    Category.ANNOUNCEMENT: CategoryStyle(color="orange", icon="megaphone.fill"),
}


def new_task_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True)
class Task:
    title: str
    due_date: pendulum.DateTime
    category: Category = Category.HOMEWORK
    description: str = ""
    is_urgent: bool = False
    include_time: bool = True
    id: str = field(default_factory=new_task_id)

    def __post_init__(self) -> None:
        if not self.title or not self.title.strip():
            raise ValueError("title is required")
        if not isinstance(self.due_date, datetime.datetime):
            raise ValueError(f"due_date must be a datetime, got {type(self.due_date).__name__}")
        self.due_date = time_utils.to_pendulum(self.due_date)
        self.category = Category.from_raw(self.category)

    @property
    def style(self) -> CategoryStyle:
        return CATEGORY_STYLE[self.category]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "due_date": time_utils.datetime_to_iso_str(self.due_date),
            "category": self.category.value,
            "is_urgent": self.is_urgent,
            "include_time": self.include_time,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Task:
        return cls(
            id=str(raw["id"]),
            title=str(raw["title"]),
            description=str(raw.get("description") or ""),
            due_date=time_utils.datetime_from_str(str(raw["due_date"])),
            category=Category.from_raw(raw.get("category")),
            is_urgent=bool(raw.get("is_urgent", False)),
            include_time=bool(raw.get("include_time", True)),
        )


@dataclass(frozen=True, slots=True)
class CalendarEvent:
    """Read-only event as handed over by an event source."""

    id: str
    title: str
    start_time: pendulum.DateTime
    end_time: pendulum.DateTime
    location: str | None = None
    calendar_id: str | None = None
