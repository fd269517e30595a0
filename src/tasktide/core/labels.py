"""Time-remaining labels - semantic kinds for caller-side rendering.

The engine never builds display strings; a presentation layer maps each
``LabelKind`` plus its params to a localized message.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from dateutil.relativedelta import relativedelta

from .recurrence import as_utc

MINUTE = timedelta(minutes=1)
HOUR = timedelta(hours=1)
DAY = timedelta(days=1)
WEEK = timedelta(days=7)


class LabelKind(Enum):
    STARTS_IN_MINUTES = "starts_in_minutes"
    STARTS_IN_HOURS = "starts_in_hours"
    STARTS_IN_DAYS = "starts_in_days"
    STARTS_TOMORROW = "starts_tomorrow"
    STARTS_ON_DATE = "starts_on_date"
    NO_DEADLINE = "no_deadline"
    OVERDUE_MINUTES = "overdue_minutes"
    OVERDUE_HOURS = "overdue_hours"
    OVERDUE_DAYS = "overdue_days"
    DUE_NOW = "due_now"
    REMAINING_MINUTES = "remaining_minutes"
    REMAINING_HOURS = "remaining_hours"
    REMAINING_DAYS = "remaining_days"
    REMAINING_MONTHS = "remaining_months"
    REMAINING_YEARS = "remaining_years"


class Severity(Enum):
    NEUTRAL = "neutral"
    WARNING = "warning"
    CRITICAL = "critical"
    OVERDUE = "overdue"


@dataclass(frozen=True)
class TimeLabel:
    kind: LabelKind
    params: dict[str, int | str] = field(default_factory=dict)
    severity: Severity = Severity.NEUTRAL

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "params": self.params, "severity": self.severity.value}


def severity_for(resolved: datetime | None, now: datetime) -> Severity:
    """Severity tier of a due instant relative to now."""
    if resolved is None:
        return Severity.NEUTRAL
    remaining = as_utc(resolved) - as_utc(now)
    if remaining < timedelta(0):
        return Severity.OVERDUE
    if remaining < HOUR:
        return Severity.CRITICAL
    if remaining < DAY:
        return Severity.WARNING
    return Severity.NEUTRAL


def _starts_label(start: datetime, now: datetime) -> TimeLabel:
    until = start - now
    if until < HOUR:
        return TimeLabel(LabelKind.STARTS_IN_MINUTES, {"count": until // MINUTE})
    if until < DAY:
        return TimeLabel(LabelKind.STARTS_IN_HOURS, {"count": until // HOUR})
    if start.date() == now.date() + DAY:
        return TimeLabel(LabelKind.STARTS_TOMORROW)
    if until < WEEK:
        return TimeLabel(LabelKind.STARTS_IN_DAYS, {"count": until // DAY})
    return TimeLabel(LabelKind.STARTS_ON_DATE, {"date": start.date().isoformat()})


def _overdue_label(elapsed: timedelta) -> TimeLabel:
    if elapsed < HOUR:
        kind, count = LabelKind.OVERDUE_MINUTES, elapsed // MINUTE
    elif elapsed < DAY:
        kind, count = LabelKind.OVERDUE_HOURS, elapsed // HOUR
    else:
        kind, count = LabelKind.OVERDUE_DAYS, elapsed // DAY
    return TimeLabel(kind, {"count": count}, Severity.OVERDUE)


def _remaining_label(resolved: datetime, now: datetime) -> TimeLabel:
    remaining = resolved - now
    severity = severity_for(resolved, now)

    if remaining < MINUTE:
        return TimeLabel(LabelKind.DUE_NOW, {}, severity)
    if remaining < HOUR:
        return TimeLabel(LabelKind.REMAINING_MINUTES, {"count": remaining // MINUTE}, severity)
    if remaining < DAY:
        return TimeLabel(LabelKind.REMAINING_HOURS, {"count": remaining // HOUR}, severity)

    span = relativedelta(resolved, now)
    if span.years >= 1:
        return TimeLabel(
            LabelKind.REMAINING_YEARS, {"years": span.years, "months": span.months}, severity
        )
    if span.months >= 1:
        return TimeLabel(
            LabelKind.REMAINING_MONTHS, {"months": span.months, "days": span.days}, severity
        )
    return TimeLabel(LabelKind.REMAINING_DAYS, {"count": remaining // DAY}, severity)


def format_time_label(
    resolved: datetime | None,
    now: datetime,
    period_start: datetime | None = None,
) -> TimeLabel:
    """
    Classify a due instant relative to now.

    A future period start takes precedence: the row says when it starts
    rather than when it is due.
    Pure function - no I/O.
    """
    now = as_utc(now)
    if period_start is not None and as_utc(period_start) > now:
        return _starts_label(as_utc(period_start), now)
    if resolved is None:
        return TimeLabel(LabelKind.NO_DEADLINE)
    resolved = as_utc(resolved)
    if resolved < now:
        return _overdue_label(now - resolved)
    return _remaining_label(resolved, now)
