"""Functional core - pure business logic with no I/O."""

from .recurrence import (
    Frequency,
    CustomUnit,
    TimeOfDay,
    PeriodStart,
    Never,
    EndsOnDate,
    EndsAfterOccurrences,
    RecurrenceSettings,
    OneShot,
    Daily,
    Weekly,
    Monthly,
    Yearly,
    Custom,
    parse_recurrence,
    date_key,
)
from .schedule import find_next_instance, coarse_align, iter_occurrences
from .tasks import Task, Reminder, ReminderUnit, resolve_due_date, resolve_display_date, is_fully_completed
from .completion import toggle_completion
from .listing import Tab, SortMode, Bucket, ListEntry, build_task_list, order_folders, group_by_date
from .labels import LabelKind, Severity, TimeLabel, format_time_label
from .reminders import DueReminder, due_reminders, reminder_instant

__all__ = [
    # Recurrence
    "Frequency",
    "CustomUnit",
    "TimeOfDay",
    "PeriodStart",
    "Never",
    "EndsOnDate",
    "EndsAfterOccurrences",
    "RecurrenceSettings",
    "OneShot",
    "Daily",
    "Weekly",
    "Monthly",
    "Yearly",
    "Custom",
    "parse_recurrence",
    "date_key",
    # Schedule
    "find_next_instance",
    "coarse_align",
    "iter_occurrences",
    # Tasks
    "Task",
    "Reminder",
    "ReminderUnit",
    "resolve_due_date",
    "resolve_display_date",
    "is_fully_completed",
    # Completion
    "toggle_completion",
    # Listing
    "Tab",
    "SortMode",
    "Bucket",
    "ListEntry",
    "build_task_list",
    "order_folders",
    "group_by_date",
    # Labels
    "LabelKind",
    "Severity",
    "TimeLabel",
    "format_time_label",
    # Reminders
    "DueReminder",
    "due_reminders",
    "reminder_instant",
]
