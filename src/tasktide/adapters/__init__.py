"""Adapters - I/O implementations of ports."""

from .json_store import JsonTaskStore, StoreError
from .holidays import StaticHolidayCalendar
from .console_notifier import ConsoleNotifier

__all__ = [
    "JsonTaskStore",
    "StoreError",
    "StaticHolidayCalendar",
    "ConsoleNotifier",
]
