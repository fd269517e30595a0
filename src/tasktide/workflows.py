"""Shared workflow layer between CLI and the reminder scheduler.

Each function loads the collection from the store, runs pure core logic,
and (for mutations) writes the whole collection back.
"""

import logging
from datetime import date, datetime, timedelta

from .adapters.holidays import StaticHolidayCalendar
from .adapters.json_store import JsonTaskStore
from .config import Config
from .core.completion import toggle_completion
from .core.labels import TimeLabel, format_time_label
from .core.listing import (
    Bucket,
    ListEntry,
    SortMode,
    Tab,
    build_task_list,
    group_by_date,
    order_folders,
)
from .core.recurrence import UTC, date_key
from .core.reminders import due_reminders
from .core.schedule import find_next_instance
from .core.tasks import Task, filter_by_folder, resolve_display_date
from .ports.notifier import Notifier

logger = logging.getLogger(__name__)


class TaskNotFoundError(LookupError):
    """Raised when no task has the requested id."""

    pass


def get_store(config: Config) -> JsonTaskStore:
    """Resolve the task file from config."""
    return JsonTaskStore(config.tasks_path)


def get_holidays(config: Config) -> StaticHolidayCalendar:
    return StaticHolidayCalendar(config.holidays)


def find_task(tasks: list[Task], task_id: str) -> Task:
    for task in tasks:
        if task.id == task_id:
            return task
    raise TaskNotFoundError(f"No task with id {task_id!r}")


def list_tasks(
    config: Config,
    tab: Tab = Tab.INCOMPLETE,
    sort_mode: SortMode | None = None,
    folder: str | None = None,
    now: datetime | None = None,
) -> list[ListEntry]:
    """Ordered rows for one tab, optionally restricted to one folder."""
    now = now or datetime.now(UTC)
    tasks = get_store(config).load_tasks()
    if folder is not None:
        tasks = filter_by_folder(tasks, folder, config.no_folder_name)
    sort_mode = sort_mode or SortMode(config.default_sort)
    return build_task_list(
        tasks, now, tab, sort_mode, is_holiday=get_holidays(config).is_holiday
    )


def label_for(entry: ListEntry, now: datetime) -> TimeLabel:
    """Time label for a row; completed rows are labeled without urgency."""
    if entry.bucket is Bucket.COMPLETED:
        return format_time_label(None, now)
    settings = entry.task.recurrence
    period_start = settings.period_start.instant if settings and settings.period_start else None
    return format_time_label(entry.resolved_date, now, period_start)


def next_instance(
    config: Config,
    task_id: str,
    from_: datetime | None = None,
) -> tuple[Task, datetime | None]:
    """The task and its next outstanding occurrence (or due date)."""
    from_ = from_ or datetime.now(UTC)
    task = find_task(get_store(config).load_tasks(), task_id)
    holidays = get_holidays(config)
    if task.is_repeating:
        return task, find_next_instance(task, from_, is_holiday=holidays.is_holiday)
    return task, resolve_display_date(task, from_)


def toggle_task(
    config: Config,
    task_id: str,
    instance: date | None = None,
    now: datetime | None = None,
) -> Task:
    """
    Toggle completion of a task and persist the collection.

    For repeating tasks without an explicit occurrence date, the occurrence
    currently shown in the list is toggled.
    """
    now = now or datetime.now(UTC)
    store = get_store(config)
    tasks = store.load_tasks()
    task = find_task(tasks, task_id)

    key = date_key(instance) if instance else None
    if task.is_repeating and key is None:
        shown = resolve_display_date(task, now, get_holidays(config).is_holiday)
        if shown is None:
            raise ValueError(f"Task {task_id} has no outstanding occurrence; pass a date")
        key = date_key(shown)

    updated = toggle_completion(task, key, now)
    store.save_tasks([updated if t.id == task_id else t for t in tasks])
    logger.info(f"Toggled completion of task {task_id}" + (f" on {key}" if key else ""))
    return updated


def calendar_view(config: Config, now: datetime | None = None) -> dict[date, list[Task]]:
    now = now or datetime.now(UTC)
    tasks = get_store(config).load_tasks()
    return group_by_date(tasks, now, get_holidays(config).is_holiday)


def folder_names(config: Config) -> list[str]:
    store = get_store(config)
    return order_folders(store.load_tasks(), store.load_folder_order(), config.no_folder_name)


def send_due_reminders(
    config: Config,
    notifier: Notifier,
    sent: set[tuple[str, datetime]],
    now: datetime | None = None,
    window: timedelta | None = None,
) -> int:
    """
    Deliver reminders that came due within the last polling window.

    ``sent`` remembers (task id, due instant) pairs already delivered so a
    reminder fires once even when windows overlap. Returns the number sent.
    """
    now = now or datetime.now(UTC)
    window = window or timedelta(seconds=config.reminder_poll_seconds)
    tasks = get_store(config).load_tasks()

    count = 0
    for reminder in due_reminders(tasks, now, window, get_holidays(config).is_holiday):
        marker = (reminder.task.id, reminder.due_at)
        if marker in sent:
            continue
        notifier.notify(reminder.task.title, f"Due {reminder.due_at:%Y-%m-%d %H:%M} UTC")
        sent.add(marker)
        count += 1
    if count:
        logger.info(f"Sent {count} reminder(s)")
    return count
