"""Tests for the recurrence settings model."""

from datetime import date, datetime, timezone

import pytest

from tasktide.core.recurrence import (
    Custom,
    CustomUnit,
    Daily,
    EndsAfterOccurrences,
    EndsOnDate,
    Monthly,
    Never,
    OneShot,
    PeriodStart,
    TimeOfDay,
    Weekly,
    Yearly,
    as_utc,
    date_key,
    js_weekday,
    parse_recurrence,
    recurrence_to_dict,
    start_of_day,
)

UTC = timezone.utc


class TestParseRecurrence:
    def test_absent_record_is_none(self):
        assert parse_recurrence(None) is None
        assert parse_recurrence({}) is None

    def test_one_shot(self):
        settings = parse_recurrence({"frequency": "none", "anchorDate": "2024-03-01"})
        assert isinstance(settings, OneShot)
        assert not settings.is_repeating
        assert settings.is_all_day
        assert settings.anchor == datetime(2024, 3, 1, tzinfo=UTC)

    def test_daily_with_time(self):
        settings = parse_recurrence({
            "frequency": "daily",
            "anchorDate": "2024-03-01",
            "anchorTime": {"hour": 9, "minute": 30},
            "interval": 2,
        })
        assert isinstance(settings, Daily)
        assert settings.interval == 2
        assert settings.anchor_time == TimeOfDay(9, 30)
        assert settings.anchor == datetime(2024, 3, 1, 9, 30, tzinfo=UTC)
        assert not settings.is_all_day

    def test_weekly_days_as_list(self):
        settings = parse_recurrence({
            "frequency": "weekly",
            "anchorDate": "2024-01-01",
            "daysOfWeek": [2, 4, 9, "x"],
        })
        assert isinstance(settings, Weekly)
        assert settings.days_of_week == frozenset({2, 4})

    def test_weekly_days_as_flags(self):
        settings = parse_recurrence({
            "frequency": "weekly",
            "anchorDate": "2024-01-01",
            "daysOfWeek": {"1": True, "3": False, "5": True},
        })
        assert settings.days_of_week == frozenset({1, 5})

    def test_invalid_interval_defaults_to_one(self):
        for raw in (0, -3, "abc", None):
            settings = parse_recurrence(
                {"frequency": "monthly", "anchorDate": "2024-01-31", "interval": raw}
            )
            assert isinstance(settings, Monthly)
            assert settings.interval == 1

    def test_custom_unit(self):
        settings = parse_recurrence({
            "frequency": "custom",
            "anchorDate": "2024-01-01",
            "interval": 6,
            "customUnit": "hours",
        })
        assert isinstance(settings, Custom)
        assert settings.unit is CustomUnit.HOURS

    def test_unknown_custom_unit_falls_back_to_days(self):
        settings = parse_recurrence(
            {"frequency": "custom", "anchorDate": "2024-01-01", "customUnit": "fortnights"}
        )
        assert settings.unit is CustomUnit.DAYS

    def test_anchor_date_accepts_full_instant(self):
        settings = parse_recurrence(
            {"frequency": "yearly", "anchorDate": "2024-02-29T00:00:00.000Z"}
        )
        assert isinstance(settings, Yearly)
        assert settings.anchor_date == date(2024, 2, 29)

    def test_end_conditions(self):
        base = {"frequency": "daily", "anchorDate": "2024-01-01"}
        on_date = parse_recurrence({**base, "endCondition": {"type": "on_date", "date": "2024-02-01"}})
        count = parse_recurrence({**base, "endCondition": {"type": "after_occurrences", "count": 3}})
        legacy = parse_recurrence({**base, "endCondition": {"type": "count", "occurrences": 5}})
        never = parse_recurrence({**base, "endCondition": {"type": "never"}})

        assert on_date.end == EndsOnDate(date(2024, 2, 1))
        assert count.end == EndsAfterOccurrences(3)
        assert legacy.end == EndsAfterOccurrences(5)
        assert never.end == Never()

    def test_on_date_without_date_never_ends(self):
        settings = parse_recurrence(
            {"frequency": "daily", "anchorDate": "2024-01-01", "endCondition": {"type": "on_date"}}
        )
        assert settings.end == Never()

    def test_period_start(self):
        settings = parse_recurrence({
            "frequency": "daily",
            "anchorDate": "2024-01-01",
            "periodStart": {"date": "2024-01-05", "time": {"hour": 8}},
        })
        assert settings.period_start == PeriodStart(date(2024, 1, 5), TimeOfDay(8, 0))
        assert settings.period_start.instant == datetime(2024, 1, 5, 8, tzinfo=UTC)

    @pytest.mark.parametrize("record", [
        {"frequency": "daily"},
        {"frequency": "hourly", "anchorDate": "2024-01-01"},
        {"frequency": "daily", "anchorDate": "not a date"},
        {"frequency": "daily", "anchorDate": "2024-01-01", "anchorTime": {"hour": 25}},
        "daily",
        ["daily", "2024-01-01"],
    ])
    def test_malformed_record_is_none(self, record):
        assert parse_recurrence(record) is None

    def test_round_trip(self):
        record = {
            "frequency": "weekly",
            "anchorDate": "2024-01-01",
            "anchorTime": {"hour": 7, "minute": 15},
            "interval": 2,
            "daysOfWeek": [1, 3],
            "excludeHolidays": True,
            "periodStart": {"date": "2024-01-01"},
            "endCondition": {"type": "after_occurrences", "count": 10},
        }
        settings = parse_recurrence(record)
        assert recurrence_to_dict(settings) == record
        assert parse_recurrence(recurrence_to_dict(settings)) == settings


class TestDateHelpers:
    def test_as_utc_treats_naive_as_utc(self):
        assert as_utc(datetime(2024, 1, 1, 9)) == datetime(2024, 1, 1, 9, tzinfo=UTC)

    def test_start_of_day(self):
        assert start_of_day(datetime(2024, 1, 1, 23, 59, tzinfo=UTC)) == datetime(
            2024, 1, 1, tzinfo=UTC
        )

    def test_date_key_uses_utc_date(self):
        assert date_key(date(2024, 3, 5)) == "2024-03-05"
        assert date_key(datetime(2024, 3, 5, 23, 0, tzinfo=UTC)) == "2024-03-05"

    def test_js_weekday_sunday_is_zero(self):
        assert js_weekday(date(2024, 1, 7)) == 0  # Sunday
        assert js_weekday(date(2024, 1, 1)) == 1  # Monday
        assert js_weekday(date(2024, 1, 6)) == 6  # Saturday

    def test_ends_on_date_covers_whole_day(self):
        end = EndsOnDate(date(2024, 1, 10))
        assert end.end_of_day > datetime(2024, 1, 10, 23, 59, tzinfo=UTC)
        assert end.end_of_day < datetime(2024, 1, 11, tzinfo=UTC)
