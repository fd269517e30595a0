"""Recurrence settings model - pure data, no I/O dependencies.

A schedule is a tagged union discriminated by ``frequency``: each variant
only carries the fields it needs. Stored records use the camelCase schema of
the task store; ``parse_recurrence`` reads them defensively.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import ClassVar

logger = logging.getLogger(__name__)

UTC = timezone.utc


class Frequency(Enum):
    """How often a schedule repeats."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"


class CustomUnit(Enum):
    """Step unit for custom-interval schedules."""

    HOURS = "hours"
    DAYS = "days"


@dataclass(frozen=True)
class TimeOfDay:
    """Wall-clock time in UTC."""

    hour: int
    minute: int = 0

    def to_time(self) -> time:
        return time(self.hour, self.minute)


@dataclass(frozen=True)
class PeriodStart:
    """Visibility gate: the task is hidden until this instant."""

    date: date
    time: TimeOfDay | None = None

    @property
    def instant(self) -> datetime:
        return combine_utc(self.date, self.time)


# End conditions


@dataclass(frozen=True)
class Never:
    """The schedule repeats forever."""


@dataclass(frozen=True)
class EndsOnDate:
    """No occurrence after the end of ``date``."""

    date: date

    @property
    def end_of_day(self) -> datetime:
        return datetime.combine(self.date, time.max, tzinfo=UTC)


@dataclass(frozen=True)
class EndsAfterOccurrences:
    """The schedule is done once ``count`` occurrences are completed."""

    count: int


EndCondition = Never | EndsOnDate | EndsAfterOccurrences


# Schedule variants


@dataclass(frozen=True, kw_only=True)
class RecurrenceSettings:
    """Fields shared by every schedule variant."""

    frequency: ClassVar[Frequency] = Frequency.NONE

    anchor_date: date
    anchor_time: TimeOfDay | None = None
    period_start: PeriodStart | None = None
    end: EndCondition = field(default_factory=Never)
    exclude_holidays: bool = False

    @property
    def anchor(self) -> datetime:
        """Anchor instant; midnight UTC for all-day schedules."""
        return combine_utc(self.anchor_date, self.anchor_time)

    @property
    def is_repeating(self) -> bool:
        return self.frequency is not Frequency.NONE

    @property
    def is_all_day(self) -> bool:
        return self.anchor_time is None


@dataclass(frozen=True, kw_only=True)
class OneShot(RecurrenceSettings):
    """A single dated deadline."""

    frequency: ClassVar[Frequency] = Frequency.NONE


@dataclass(frozen=True, kw_only=True)
class Daily(RecurrenceSettings):
    frequency: ClassVar[Frequency] = Frequency.DAILY

    interval: int = 1


@dataclass(frozen=True, kw_only=True)
class Weekly(RecurrenceSettings):
    """Repeats on flagged weekdays (0 = Sunday ... 6 = Saturday)."""

    frequency: ClassVar[Frequency] = Frequency.WEEKLY

    interval: int = 1
    days_of_week: frozenset[int] = frozenset()


@dataclass(frozen=True, kw_only=True)
class Monthly(RecurrenceSettings):
    frequency: ClassVar[Frequency] = Frequency.MONTHLY

    interval: int = 1


@dataclass(frozen=True, kw_only=True)
class Yearly(RecurrenceSettings):
    frequency: ClassVar[Frequency] = Frequency.YEARLY

    interval: int = 1


@dataclass(frozen=True, kw_only=True)
class Custom(RecurrenceSettings):
    frequency: ClassVar[Frequency] = Frequency.CUSTOM

    interval: int = 1
    unit: CustomUnit = CustomUnit.DAYS


VARIANTS: dict[Frequency, type[RecurrenceSettings]] = {
    Frequency.NONE: OneShot,
    Frequency.DAILY: Daily,
    Frequency.WEEKLY: Weekly,
    Frequency.MONTHLY: Monthly,
    Frequency.YEARLY: Yearly,
    Frequency.CUSTOM: Custom,
}


# Date helpers


def combine_utc(day: date, at: TimeOfDay | None = None) -> datetime:
    """Combine a calendar date and optional time into an aware UTC datetime."""
    return datetime.combine(day, at.to_time() if at else time(0, 0), tzinfo=UTC)


def start_of_day(instant: datetime) -> datetime:
    """Midnight UTC of the instant's calendar day."""
    return combine_utc(as_utc(instant).date())


def as_utc(instant: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=UTC)
    return instant.astimezone(UTC)


def date_key(value: date | datetime) -> str:
    """The UTC calendar-date string identifying one occurrence."""
    if isinstance(value, datetime):
        return as_utc(value).date().isoformat()
    return value.isoformat()


def js_weekday(day: date) -> int:
    """Weekday with 0 = Sunday, matching stored ``daysOfWeek`` values."""
    return (day.weekday() + 1) % 7


# Parsing stored records


def _parse_time(data) -> TimeOfDay | None:
    if not isinstance(data, dict) or "hour" not in data:
        return None
    hour = int(data["hour"])
    minute = int(data.get("minute", 0) or 0)
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"time out of range: {hour}:{minute}")
    return TimeOfDay(hour, minute)


def _parse_date(value) -> date:
    # Accept full ISO instants as well as bare dates
    return date.fromisoformat(str(value)[:10])


def _parse_interval(value) -> int:
    try:
        interval = int(value)
    except (TypeError, ValueError):
        return 1
    return interval if interval >= 1 else 1


def _parse_days_of_week(value) -> frozenset[int]:
    if isinstance(value, dict):
        flagged = [k for k, enabled in value.items() if enabled]
    elif isinstance(value, (list, tuple, set, frozenset)):
        flagged = list(value)
    else:
        return frozenset()
    days = set()
    for raw in flagged:
        try:
            day = int(raw)
        except (TypeError, ValueError):
            continue
        if 0 <= day <= 6:
            days.add(day)
    return frozenset(days)


def _parse_end_condition(data) -> EndCondition:
    if not isinstance(data, dict):
        return Never()
    match data.get("type", "never"):
        case "on_date":
            if data.get("date"):
                return EndsOnDate(_parse_date(data["date"]))
            return Never()
        case "after_occurrences" | "count":
            raw = data.get("count", data.get("occurrences"))
            if raw is None:
                return Never()
            return EndsAfterOccurrences(max(0, int(raw)))
        case _:
            return Never()


def parse_recurrence(data: dict | None) -> RecurrenceSettings | None:
    """
    Build a schedule variant from a stored record.

    Returns None for absent or corrupt records so callers treat the task as
    having no recurrence.
    """
    if not data:
        return None
    if not isinstance(data, dict):
        logger.warning(f"Ignoring malformed recurrence {data!r}: expected an object")
        return None
    try:
        frequency = Frequency(data.get("frequency") or "none")
        anchor_date = _parse_date(data["anchorDate"])
        common = dict(
            anchor_date=anchor_date,
            anchor_time=_parse_time(data.get("anchorTime")),
            end=_parse_end_condition(data.get("endCondition")),
            exclude_holidays=bool(data.get("excludeHolidays", False)),
        )
        period = data.get("periodStart")
        if isinstance(period, dict) and period.get("date"):
            common["period_start"] = PeriodStart(
                _parse_date(period["date"]), _parse_time(period.get("time"))
            )
        interval = _parse_interval(data.get("interval", 1))
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Ignoring malformed recurrence {data!r}: {e}")
        return None

    match frequency:
        case Frequency.NONE:
            return OneShot(**common)
        case Frequency.DAILY:
            return Daily(interval=interval, **common)
        case Frequency.WEEKLY:
            return Weekly(
                interval=interval,
                days_of_week=_parse_days_of_week(data.get("daysOfWeek")),
                **common,
            )
        case Frequency.MONTHLY:
            return Monthly(interval=interval, **common)
        case Frequency.YEARLY:
            return Yearly(interval=interval, **common)
        case Frequency.CUSTOM:
            try:
                unit = CustomUnit(data.get("customUnit") or "days")
            except ValueError:
                unit = CustomUnit.DAYS
            return Custom(interval=interval, unit=unit, **common)


def _time_to_dict(at: TimeOfDay | None) -> dict | None:
    return {"hour": at.hour, "minute": at.minute} if at else None


def recurrence_to_dict(settings: RecurrenceSettings) -> dict:
    """Serialize a schedule to its stored camelCase form."""
    data: dict = {
        "frequency": settings.frequency.value,
        "anchorDate": settings.anchor_date.isoformat(),
        "excludeHolidays": settings.exclude_holidays,
    }
    if settings.anchor_time:
        data["anchorTime"] = _time_to_dict(settings.anchor_time)
    if settings.period_start:
        data["periodStart"] = {"date": settings.period_start.date.isoformat()}
        if settings.period_start.time:
            data["periodStart"]["time"] = _time_to_dict(settings.period_start.time)

    match settings.end:
        case EndsOnDate(date=end_date):
            data["endCondition"] = {"type": "on_date", "date": end_date.isoformat()}
        case EndsAfterOccurrences(count=count):
            data["endCondition"] = {"type": "after_occurrences", "count": count}
        case _:
            data["endCondition"] = {"type": "never"}

    match settings:
        case Weekly(interval=interval, days_of_week=days):
            data["interval"] = interval
            data["daysOfWeek"] = sorted(days)
        case Custom(interval=interval, unit=unit):
            data["interval"] = interval
            data["customUnit"] = unit.value
        case Daily(interval=interval) | Monthly(interval=interval) | Yearly(interval=interval):
            data["interval"] = interval
    return data
