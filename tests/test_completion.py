"""Tests for completion toggling."""

from datetime import date, datetime, timezone

import pytest

from tasktide.core.completion import toggle_completion
from tasktide.core.recurrence import Daily, OneShot
from tasktide.core.tasks import Task

UTC = timezone.utc


@pytest.fixture
def now():
    return datetime(2024, 3, 10, 12, 0, tzinfo=UTC)


@pytest.fixture
def repeating():
    return Task(
        id="1",
        title="Stretch",
        recurrence=Daily(anchor_date=date(2024, 3, 1)),
        completed_instance_dates=frozenset({"2024-03-08"}),
    )


class TestToggleCompletion:
    def test_plain_task_sets_and_clears(self, now):
        task = Task(id="1", title="Plain")
        done = toggle_completion(task, now=now)
        assert done.completed_at == now
        assert toggle_completion(done, now=now).completed_at is None

    def test_one_shot_uses_completed_at(self, now):
        task = Task(id="1", title="Dated", recurrence=OneShot(anchor_date=date(2024, 3, 1)))
        assert toggle_completion(task, now=now).completed_at == now

    def test_repeating_adds_key(self, repeating):
        done = toggle_completion(repeating, "2024-03-10")
        assert done.completed_instance_dates == frozenset({"2024-03-08", "2024-03-10"})

    def test_repeating_removes_key(self, repeating):
        reopened = toggle_completion(repeating, "2024-03-08")
        assert reopened.completed_instance_dates == frozenset()

    def test_accepts_date_and_datetime_keys(self, repeating):
        by_date = toggle_completion(repeating, date(2024, 3, 9))
        by_instant = toggle_completion(repeating, datetime(2024, 3, 9, 18, tzinfo=UTC))
        assert "2024-03-09" in by_date.completed_instance_dates
        assert by_date == by_instant

    def test_toggle_twice_restores(self, repeating, now):
        assert toggle_completion(toggle_completion(repeating, "2024-03-10"), "2024-03-10") == repeating
        plain = Task(id="2", title="Plain")
        assert toggle_completion(toggle_completion(plain, now=now), now=now) == plain

    def test_repeating_requires_key(self, repeating):
        with pytest.raises(ValueError):
            toggle_completion(repeating)

    def test_original_is_unchanged(self, repeating):
        toggle_completion(repeating, "2024-03-10")
        assert repeating.completed_instance_dates == frozenset({"2024-03-08"})
