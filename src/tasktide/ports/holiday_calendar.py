"""Holiday calendar interface."""

from datetime import date
from typing import Protocol


class HolidayCalendar(Protocol):
    """Interface for deciding whether a date is a public holiday."""

    def is_holiday(self, day: date) -> bool:
        ...
