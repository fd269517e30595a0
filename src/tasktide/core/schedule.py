"""Occurrence search for repeating schedules - no I/O dependencies.

Occurrences are always derived from the original anchor:

    occurrence(k) = anchor + k * interval   (in the schedule's period unit)

so month-end clamping never accumulates (Jan 31 -> Feb 29 -> Mar 31).
The search runs in two phases: a coarse jump straight to the period that
contains the reference instant, then a bounded scan forward from there.
"""

import logging
from collections.abc import Callable, Iterator
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

from dateutil.relativedelta import relativedelta

from .recurrence import (
    UTC,
    Custom,
    CustomUnit,
    Daily,
    EndsAfterOccurrences,
    EndsOnDate,
    Monthly,
    RecurrenceSettings,
    Weekly,
    Yearly,
    as_utc,
    date_key,
    js_weekday,
)

if TYPE_CHECKING:
    from .tasks import Task

logger = logging.getLogger(__name__)

# Horizon: five years and two weeks of day-sized steps
MAX_SEARCH_ITERATIONS = 5 * 365 + 14
# Hour-sized steps cover the same span
HOURLY_SEARCH_ITERATIONS = MAX_SEARCH_ITERATIONS * 24


def occurrence(settings: RecurrenceSettings, index: int) -> datetime:
    """
    Occurrence number ``index`` counted from the anchor.

    Weekly schedules are scanned day by day, so their index is a day offset.
    """
    anchor = settings.anchor
    match settings:
        case Custom(interval=n, unit=CustomUnit.HOURS):
            return anchor + timedelta(hours=index * n)
        case Daily(interval=n) | Custom(interval=n):
            return anchor + timedelta(days=index * n)
        case Weekly():
            return anchor + timedelta(days=index)
        case Monthly(interval=n):
            return anchor + relativedelta(months=index * n)
        case Yearly(interval=n):
            return anchor + relativedelta(years=index * n)
        case _:
            return anchor


def coarse_align(settings: RecurrenceSettings, from_: datetime) -> int:
    """
    Index to start scanning from so the scan does not walk from the anchor.

    Computed by calendar arithmetic and floored, so the returned occurrence
    is never later than the first one at/after ``from_``. Hour-granular
    custom schedules always start at the anchor.
    """
    from_ = as_utc(from_)
    anchor = settings.anchor
    if from_ <= anchor:
        return 0

    match settings:
        case Custom(unit=CustomUnit.HOURS):
            return 0
        case Daily(interval=n) | Custom(interval=n):
            return (from_ - anchor) // timedelta(days=n)
        case Weekly(interval=n):
            block = 7 * n
            days = (from_.date() - anchor.date()).days
            return (days // block) * block
        case Monthly(interval=n):
            months = (from_.year - anchor.year) * 12 + (from_.month - anchor.month)
            return max(0, months // n)
        case Yearly(interval=n):
            return max(0, (from_.year - anchor.year) // n)
        case _:
            return 0


def _search_limit(settings: RecurrenceSettings) -> int:
    if isinstance(settings, Custom) and settings.unit is CustomUnit.HOURS:
        return HOURLY_SEARCH_ITERATIONS
    return MAX_SEARCH_ITERATIONS


def candidates(settings: RecurrenceSettings, start_index: int = 0) -> Iterator[datetime]:
    """
    Yield schedule occurrences from ``start_index`` on, in order.

    Applies the weekday filter and the end date but not completion state.
    Stops after the search horizon.
    """
    end_of_day = settings.end.end_of_day if isinstance(settings.end, EndsOnDate) else None
    index = start_index

    for _ in range(_search_limit(settings)):
        candidate = occurrence(settings, index)
        if end_of_day is not None and candidate > end_of_day:
            return

        if isinstance(settings, Weekly):
            block = index // 7
            if block % settings.interval:
                # Off-week for multi-week intervals: jump to the next active week
                index = (block // settings.interval + 1) * settings.interval * 7
                continue
            if js_weekday(candidate.date()) not in settings.days_of_week:
                index += 1
                continue

        yield candidate
        index += 1

    logger.debug(f"Search horizon exhausted for {settings.frequency.value} schedule")


def find_next_instance(
    task: "Task",
    from_: datetime | None = None,
    *,
    is_holiday: Callable[[date], bool] | None = None,
) -> datetime | None:
    """
    Earliest outstanding occurrence of a repeating task at/after ``from_``.

    Skips occurrences whose date key is already completed and, when the
    schedule excludes holidays, dates the ``is_holiday`` predicate flags.
    Returns None when the task does not repeat, the end condition has been
    reached, or the search horizon is exhausted.
    """
    settings = task.recurrence
    if settings is None or not settings.is_repeating:
        return None

    from_ = as_utc(from_) if from_ else datetime.now(UTC)
    completed = task.completed_instance_dates

    if isinstance(settings.end, EndsAfterOccurrences) and len(completed) >= settings.end.count:
        return None
    if isinstance(settings, Weekly) and not settings.days_of_week:
        return None

    skip_holidays = settings.exclude_holidays and is_holiday is not None

    for candidate in candidates(settings, coarse_align(settings, from_)):
        if candidate < from_:
            continue
        if date_key(candidate) in completed:
            continue
        if skip_holidays and is_holiday(candidate.date()):
            continue
        return candidate
    return None


def iter_occurrences(
    settings: RecurrenceSettings,
    start: datetime,
    end: datetime,
    limit: int = 100,
) -> list[datetime]:
    """Raw occurrences within [start, end], ignoring completion state."""
    if not settings.is_repeating:
        anchor = settings.anchor
        return [anchor] if start <= anchor <= end else []

    start, end = as_utc(start), as_utc(end)
    found: list[datetime] = []
    for candidate in candidates(settings, coarse_align(settings, start)):
        if candidate > end or len(found) >= limit:
            break
        if candidate >= start:
            found.append(candidate)
    return found
