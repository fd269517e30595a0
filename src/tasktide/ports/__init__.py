"""Ports - interfaces/protocols for external dependencies."""

from .task_repo import TaskRepository
from .holiday_calendar import HolidayCalendar
from .notifier import Notifier

__all__ = [
    "TaskRepository",
    "HolidayCalendar",
    "Notifier",
]
