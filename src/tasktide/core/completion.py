"""Completion bookkeeping - pure, returns new task records."""

from dataclasses import replace
from datetime import date, datetime

from .recurrence import UTC, as_utc, date_key
from .tasks import Task


def toggle_completion(
    task: Task,
    instance_key: str | date | datetime | None = None,
    now: datetime | None = None,
) -> Task:
    """
    Toggle completion and return the updated task.

    Repeating tasks track each occurrence by its date key, so
    ``instance_key`` is required for them and its membership is flipped.
    Other tasks flip ``completed_at`` between None and ``now``.
    Toggling twice with the same arguments restores the original task.
    """
    if task.is_repeating:
        if instance_key is None:
            raise ValueError(f"Task {task.id} repeats; an occurrence date key is required")
        key = instance_key if isinstance(instance_key, str) else date_key(instance_key)
        return replace(task, completed_instance_dates=task.completed_instance_dates ^ {key})

    if task.completed_at is not None:
        return replace(task, completed_at=None)
    return replace(task, completed_at=as_utc(now) if now else datetime.now(UTC))
