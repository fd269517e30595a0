"""Pure task domain logic - no I/O dependencies."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum

from dateutil.parser import isoparse

from .recurrence import (
    RecurrenceSettings,
    as_utc,
    parse_recurrence,
    recurrence_to_dict,
    start_of_day,
)
from .schedule import find_next_instance

logger = logging.getLogger(__name__)

HolidayPredicate = Callable[[date], bool]


class ReminderUnit(Enum):
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"


@dataclass(frozen=True)
class Reminder:
    """Notify ``amount`` units before the task is due."""

    unit: ReminderUnit = ReminderUnit.HOURS
    amount: int = 1

    @property
    def lead(self) -> timedelta:
        return timedelta(**{self.unit.value: self.amount})

    @classmethod
    def from_dict(cls, data: dict | None) -> "Reminder | None":
        if not isinstance(data, dict):
            return None
        try:
            unit = ReminderUnit(data.get("unit", "hours"))
            amount = int(data.get("amount", 1))
        except (TypeError, ValueError):
            logger.warning(f"Ignoring malformed reminder {data!r}")
            return None
        return cls(unit=unit, amount=max(0, amount))


@dataclass
class Task:
    """A task with an optional deadline or repeating schedule."""

    id: str
    title: str
    memo: str = ""
    folder: str | None = None
    deadline: str | None = None
    recurrence: RecurrenceSettings | None = None
    completed_at: datetime | None = None
    completed_instance_dates: frozenset[str] = field(default_factory=frozenset)
    priority: int = 0
    custom_order: int | None = None
    reminder: Reminder | None = None

    @property
    def is_repeating(self) -> bool:
        """True when the schedule is active (anything but a one-shot date)."""
        return self.recurrence is not None and self.recurrence.is_repeating

    def folder_name(self, no_folder_name: str = "") -> str:
        return self.folder or no_folder_name

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Create Task from a stored record."""
        completed_at = None
        if data.get("completedAt"):
            completed_at = _parse_instant(data["completedAt"])
        priority = data.get("priority")
        custom_order = data.get("customOrder")
        instance_dates = _instance_keys(data.get("completedInstanceDates"))
        deadline = data.get("deadline") or None
        if deadline is not None and not isinstance(deadline, str):
            logger.warning(f"Ignoring non-string deadline {deadline!r}")
            deadline = None
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            memo=data.get("memo") or "",
            folder=data.get("folder") or None,
            deadline=deadline,
            recurrence=parse_recurrence(data.get("recurrence")),
            completed_at=completed_at,
            completed_instance_dates=instance_dates,
            priority=int(priority) if isinstance(priority, (int, float)) else 0,
            custom_order=int(custom_order) if isinstance(custom_order, (int, float)) else None,
            reminder=Reminder.from_dict(data.get("reminder")),
        )

    def to_dict(self) -> dict:
        """Serialize to the stored camelCase record."""
        data: dict = {
            "id": self.id,
            "title": self.title,
            "memo": self.memo,
            "priority": self.priority,
            "completedInstanceDates": sorted(self.completed_instance_dates),
        }
        if self.folder:
            data["folder"] = self.folder
        if self.deadline:
            data["deadline"] = self.deadline
        if self.recurrence:
            data["recurrence"] = recurrence_to_dict(self.recurrence)
        if self.completed_at:
            data["completedAt"] = self.completed_at.isoformat()
        if self.custom_order is not None:
            data["customOrder"] = self.custom_order
        if self.reminder:
            data["reminder"] = {"unit": self.reminder.unit.value, "amount": self.reminder.amount}
        return data


def _instance_keys(value) -> frozenset[str]:
    if not value:
        return frozenset()
    if not isinstance(value, (list, tuple)):
        logger.warning(f"Ignoring malformed completedInstanceDates {value!r}")
        return frozenset()
    return frozenset(str(d) for d in value)


def _parse_instant(value: str) -> datetime | None:
    try:
        return as_utc(isoparse(value))
    except (TypeError, ValueError):
        logger.debug(f"Unparseable instant: {value!r}")
        return None


def resolve_due_date(task: Task) -> datetime | None:
    """
    Effective due instant of a task, in UTC.

    A one-shot schedule wins over the legacy flat deadline string.
    Pure function - no I/O.
    """
    if task.recurrence is not None and not task.recurrence.is_repeating:
        return task.recurrence.anchor
    if task.deadline:
        return _parse_instant(task.deadline)
    return None


def has_time_of_day(task: Task) -> bool:
    """Whether the task's date carries an explicit time (not all-day)."""
    if task.recurrence is not None:
        return not task.recurrence.is_all_day
    return bool(task.deadline) and "T" in task.deadline


def resolve_display_date(
    task: Task,
    now: datetime,
    is_holiday: HolidayPredicate | None = None,
) -> datetime | None:
    """
    Date shown for a task in lists.

    Repeating tasks show their earliest outstanding occurrence counted from
    the start of the reference day, so today's occurrence stays visible until
    it is toggled. Everything else shows its due date.
    """
    if task.is_repeating:
        return find_next_instance(task, start_of_day(now), is_holiday=is_holiday)
    return resolve_due_date(task)


def is_fully_completed(
    task: Task,
    now: datetime,
    is_holiday: HolidayPredicate | None = None,
) -> bool:
    """Non-repeating: completed_at set. Repeating: no outstanding occurrence left."""
    if task.is_repeating:
        return resolve_display_date(task, now, is_holiday) is None
    return task.completed_at is not None


def filter_by_folder(tasks: list[Task], folder: str, no_folder_name: str = "") -> list[Task]:
    """Filter tasks to a specific folder."""
    return [t for t in tasks if t.folder_name(no_folder_name) == folder]
