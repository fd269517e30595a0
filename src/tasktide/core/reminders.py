"""Reminder timing - when a task's notification should fire."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from .recurrence import as_utc
from .tasks import HolidayPredicate, Task, is_fully_completed, resolve_display_date


@dataclass(frozen=True)
class DueReminder:
    task: Task
    fire_at: datetime
    due_at: datetime


def reminder_instant(
    task: Task,
    now: datetime,
    is_holiday: HolidayPredicate | None = None,
) -> tuple[datetime, datetime] | None:
    """
    (fire_at, due_at) for the task's next reminder.

    None when the task has no reminder, no date, or nothing left to do.
    """
    if task.reminder is None or is_fully_completed(task, now, is_holiday):
        return None
    due_at = resolve_display_date(task, now, is_holiday)
    if due_at is None:
        return None
    return due_at - task.reminder.lead, due_at


def due_reminders(
    tasks: list[Task],
    now: datetime,
    window: timedelta,
    is_holiday: HolidayPredicate | None = None,
) -> list[DueReminder]:
    """Reminders whose fire instant falls within (now - window, now]."""
    now = as_utc(now)
    due = []
    for task in tasks:
        timing = reminder_instant(task, now, is_holiday)
        if timing is None:
            continue
        fire_at, due_at = timing
        if now - window < fire_at <= now:
            due.append(DueReminder(task, fire_at, due_at))
    return sorted(due, key=lambda r: r.fire_at)
