"""Static holiday list adapter."""

import logging
from collections.abc import Iterable
from datetime import date

logger = logging.getLogger(__name__)


class StaticHolidayCalendar:
    """
    Holidays from a fixed list of dates.

    Implements HolidayCalendar protocol. The dates come from configuration;
    sourcing real holiday data is left to whoever writes the list.
    """

    def __init__(self, days: Iterable[date | str] = ()):
        self.days: set[date] = set()
        for day in days:
            if isinstance(day, date):
                self.days.add(day)
                continue
            try:
                self.days.add(date.fromisoformat(day.strip()))
            except ValueError:
                logger.warning(f"Ignoring invalid holiday date: {day!r}")

    def is_holiday(self, day: date) -> bool:
        return day in self.days
