"""List building: completion split, buckets and sort modes.

Pure functions - no I/O. Every call recomputes from (tasks, now).
"""

import unicodedata
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

from .recurrence import UTC, as_utc, combine_utc
from .tasks import (
    HolidayPredicate,
    Task,
    has_time_of_day,
    resolve_display_date,
)

CollationKey = Callable[[str], Any]


class Tab(Enum):
    INCOMPLETE = "incomplete"
    COMPLETED = "completed"


class SortMode(Enum):
    DEADLINE = "deadline"
    CUSTOM = "custom"
    PRIORITY = "priority"


class Bucket(Enum):
    """Display partitions, in display order."""

    EXPIRED = "expired"
    TODAY = "today"
    TOMORROW = "tomorrow"
    WEEK = "week"
    LATER = "later"
    UNDATED = "undated"
    COMPLETED = "completed"


BUCKET_ORDER = {bucket: rank for rank, bucket in enumerate(Bucket)}


@dataclass(frozen=True)
class ListEntry:
    """One display row.

    ``instance_key`` is the date key of the occurrence a repeating row shows,
    which is what a completion toggle on that row must pass.
    """

    task: Task
    resolved_date: datetime | None
    bucket: Bucket
    instance_key: str | None = None

    @property
    def row_id(self) -> str:
        if self.instance_key and self.task.is_repeating:
            return f"{self.task.id}-{self.instance_key}"
        return self.task.id


def default_collation_key(title: str) -> tuple[str, str]:
    """Case- and width-insensitive ordering, raw title as final tie-break."""
    return unicodedata.normalize("NFKC", title).casefold(), title


def classify_bucket(resolved: datetime | None, now: datetime) -> Bucket:
    """Bucket by calendar-day distance from the reference day (UTC)."""
    if resolved is None:
        return Bucket.UNDATED
    days = (as_utc(resolved).date() - as_utc(now).date()).days
    if days < 0:
        return Bucket.EXPIRED
    if days == 0:
        return Bucket.TODAY
    if days == 1:
        return Bucket.TOMORROW
    if days <= 7:
        return Bucket.WEEK
    return Bucket.LATER


def is_visible_today(task: Task, now: datetime) -> bool:
    """False while the task's period starts on a later day than ``now``."""
    settings = task.recurrence
    if settings is None or settings.period_start is None:
        return True
    return settings.period_start.date <= as_utc(now).date()


def _key_date(key: str) -> date | None:
    try:
        return date.fromisoformat(key)
    except (TypeError, ValueError):
        return None


def _completed_entries(tasks: list[Task]) -> list[ListEntry]:
    entries = []
    for task in tasks:
        if task.is_repeating:
            for key in task.completed_instance_dates:
                day = _key_date(key)
                if day is not None:
                    entries.append(ListEntry(task, combine_utc(day), Bucket.COMPLETED, key))
        elif task.completed_at is not None:
            entries.append(ListEntry(task, task.completed_at, Bucket.COMPLETED))
    return entries


def _incomplete_entries(
    tasks: list[Task], now: datetime, is_holiday: HolidayPredicate | None
) -> list[ListEntry]:
    entries = []
    for task in tasks:
        if not is_visible_today(task, now):
            continue
        resolved = resolve_display_date(task, now, is_holiday)
        if task.is_repeating:
            if resolved is None:
                continue  # fully completed
            key = resolved.date().isoformat()
        else:
            if task.completed_at is not None:
                continue
            key = None
        entries.append(ListEntry(task, resolved, classify_bucket(resolved, now), key))
    return entries


def _deadline_key(entry: ListEntry, collate: CollationKey) -> tuple:
    resolved = entry.resolved_date
    if resolved is None:
        return (BUCKET_ORDER[entry.bucket], date.max, 1, datetime.max.replace(tzinfo=UTC),
                collate(entry.task.title))
    # Same day: timed rows before all-day rows
    all_day = 0 if has_time_of_day(entry.task) else 1
    return (BUCKET_ORDER[entry.bucket], resolved.date(), all_day, resolved,
            collate(entry.task.title))


def _custom_key(entry: ListEntry, collate: CollationKey) -> tuple:
    order = entry.task.custom_order
    return (order is None, order if order is not None else 0, collate(entry.task.title))


def _priority_key(entry: ListEntry, collate: CollationKey) -> tuple:
    return (-entry.task.priority, collate(entry.task.title))


def sort_entries(
    entries: list[ListEntry],
    sort_mode: SortMode,
    collate: CollationKey = default_collation_key,
) -> list[ListEntry]:
    """Order incomplete-tab rows by the given mode."""
    match sort_mode:
        case SortMode.DEADLINE:
            return sorted(entries, key=lambda e: _deadline_key(e, collate))
        case SortMode.CUSTOM:
            return sorted(entries, key=lambda e: _custom_key(e, collate))
        case SortMode.PRIORITY:
            return sorted(entries, key=lambda e: _priority_key(e, collate))


def build_task_list(
    tasks: list[Task],
    now: datetime,
    tab: Tab = Tab.INCOMPLETE,
    sort_mode: SortMode = SortMode.DEADLINE,
    *,
    collate: CollationKey = default_collation_key,
    is_holiday: HolidayPredicate | None = None,
) -> list[ListEntry]:
    """
    Rows for one tab of the task list.

    Completed tab: one row per completed occurrence of a repeating task and
    one per completed plain task, newest first regardless of sort mode.
    Incomplete tab: outstanding tasks whose period has started, ordered by
    ``sort_mode``.
    """
    now = as_utc(now)
    if tab is Tab.COMPLETED:
        entries = sorted(_completed_entries(tasks), key=lambda e: collate(e.task.title))
        return sorted(entries, key=lambda e: e.resolved_date, reverse=True)
    return sort_entries(_incomplete_entries(tasks, now, is_holiday), sort_mode, collate)


def order_folders(
    tasks: list[Task],
    folder_order: list[str],
    no_folder_name: str,
    collate: CollationKey = default_collation_key,
) -> list[str]:
    """
    Folder names for display.

    Saved order first, then folders not in the saved order by title, then the
    catch-all group for tasks without a folder.
    """
    present = {t.folder_name(no_folder_name) for t in tasks}
    ordered = [name for name in folder_order if name in present and name != no_folder_name]
    unordered = sorted(
        (name for name in present if name not in folder_order and name != no_folder_name),
        key=collate,
    )
    result = ordered + unordered
    if no_folder_name in present:
        result.append(no_folder_name)
    return result


def group_by_date(
    tasks: list[Task],
    now: datetime,
    is_holiday: HolidayPredicate | None = None,
) -> dict[date, list[Task]]:
    """
    Calendar view: tasks keyed by UTC date.

    Repeating tasks appear on each completed occurrence date and on their
    next outstanding occurrence; other tasks on their due date.
    """
    grouped: dict[date, list[Task]] = {}

    def add(day: date | None, task: Task) -> None:
        if day is None:
            return
        bucket = grouped.setdefault(day, [])
        if task not in bucket:
            bucket.append(task)

    for task in tasks:
        if task.is_repeating:
            for key in sorted(task.completed_instance_dates):
                add(_key_date(key), task)
        resolved = resolve_display_date(task, now, is_holiday)
        add(resolved.date() if resolved else None, task)
    return dict(sorted(grouped.items()))
