"""Tests for the shared workflow layer."""

import json
from datetime import date, datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from tasktide.config import DATA_DIR, Config
from tasktide.core.labels import LabelKind
from tasktide.core.listing import Bucket, SortMode, Tab
from tasktide.workflows import (
    TaskNotFoundError,
    calendar_view,
    folder_names,
    get_store,
    label_for,
    list_tasks,
    next_instance,
    send_due_reminders,
    toggle_task,
)

UTC = timezone.utc


@pytest.fixture
def now():
    return datetime(2024, 3, 10, 12, 0, tzinfo=UTC)


@pytest.fixture
def tasks_file(tmp_path):
    path = tmp_path / "tasks.json"
    path.write_text(json.dumps({
        "folderOrder": ["Work"],
        "tasks": [
            {"id": "plain", "title": "File taxes", "folder": "Home", "deadline": "2024-03-12",
             "priority": 1},
            {"id": "daily", "title": "Stretch", "folder": "Work",
             "recurrence": {"frequency": "daily", "anchorDate": "2024-03-01",
                            "anchorTime": {"hour": 9}, "excludeHolidays": True},
             "reminder": {"unit": "minutes", "amount": 15}},
            {"id": "gated", "title": "Spring cleaning",
             "recurrence": {"frequency": "weekly", "anchorDate": "2024-03-01",
                            "daysOfWeek": [6], "periodStart": {"date": "2024-03-20"}}},
        ],
    }))
    return path


@pytest.fixture
def config(tasks_file):
    return Config(tasks_file=str(tasks_file), holidays=["2024-03-11"])


class TestGetStore:
    def test_uses_configured_file(self, config, tasks_file):
        assert get_store(config).path == tasks_file

    def test_falls_back_to_default(self):
        assert get_store(Config()).path == DATA_DIR / "tasks.json"

    def test_expands_user_path(self):
        store = get_store(Config(tasks_file="~/some/tasks.json"))
        assert store.path == Path.home() / "some" / "tasks.json"


class TestListTasks:
    def test_incomplete_tab(self, config, now):
        entries = list_tasks(config, now=now)
        # Gated task is hidden until its period starts
        assert [e.task.id for e in entries] == ["daily", "plain"]
        assert entries[0].bucket is Bucket.TODAY

    def test_uses_configured_sort(self, config, now):
        config.default_sort = "priority"
        entries = list_tasks(config, now=now)
        assert [e.task.id for e in entries] == ["plain", "daily"]

    def test_explicit_sort_overrides_config(self, config, now):
        config.default_sort = "priority"
        entries = list_tasks(config, sort_mode=SortMode.DEADLINE, now=now)
        assert [e.task.id for e in entries] == ["daily", "plain"]

    def test_folder_filter(self, config, now):
        assert [e.task.id for e in list_tasks(config, folder="Home", now=now)] == ["plain"]

    def test_completed_tab_empty(self, config, now):
        assert list_tasks(config, Tab.COMPLETED, now=now) == []


class TestLabelFor:
    def test_completed_rows_have_no_urgency(self, config, now):
        toggle_task(config, "plain", now=now)
        [entry] = list_tasks(config, Tab.COMPLETED, now=now)
        assert label_for(entry, now).kind is LabelKind.NO_DEADLINE

    def test_incomplete_rows(self, config, now):
        daily, plain = list_tasks(config, now=now)
        assert label_for(daily, now).kind is LabelKind.OVERDUE_HOURS
        assert label_for(plain, now).kind is LabelKind.REMAINING_DAYS


class TestNextInstance:
    def test_repeating_skips_holiday(self, config):
        task, when = next_instance(config, "daily", datetime(2024, 3, 10, 10, tzinfo=UTC))
        assert task.title == "Stretch"
        assert when == datetime(2024, 3, 12, 9, tzinfo=UTC)

    def test_plain_task_returns_due_date(self, config, now):
        _, when = next_instance(config, "plain", now)
        assert when == datetime(2024, 3, 12, tzinfo=UTC)

    def test_unknown_task(self, config, now):
        with pytest.raises(TaskNotFoundError):
            next_instance(config, "nope", now)


class TestToggleTask:
    def test_plain_task_persists(self, config, now):
        task = toggle_task(config, "plain", now=now)
        assert task.completed_at == now

        reloaded = {t.id: t for t in get_store(config).load_tasks()}
        assert reloaded["plain"].completed_at == now
        assert reloaded["daily"].completed_at is None

    def test_repeating_defaults_to_displayed_occurrence(self, config, now):
        task = toggle_task(config, "daily", now=now)
        assert task.completed_instance_dates == frozenset({"2024-03-10"})

    def test_repeating_explicit_date(self, config, now):
        toggle_task(config, "daily", date(2024, 3, 12), now=now)
        toggle_task(config, "daily", date(2024, 3, 12), now=now)
        [stored] = [t for t in get_store(config).load_tasks() if t.id == "daily"]
        assert stored.completed_instance_dates == frozenset()

    def test_keeps_folder_order(self, config, now):
        toggle_task(config, "plain", now=now)
        assert get_store(config).load_folder_order() == ["Work"]

    def test_unknown_task(self, config, now):
        with pytest.raises(TaskNotFoundError):
            toggle_task(config, "nope", now=now)


class TestCalendarAndFolders:
    def test_calendar_view(self, config, now):
        grouped = calendar_view(config, now)
        assert {day: [t.id for t in tasks] for day, tasks in grouped.items()} == {
            date(2024, 3, 10): ["daily"],
            date(2024, 3, 12): ["plain"],
            date(2024, 3, 16): ["gated"],
        }

    def test_folder_names(self, config):
        assert folder_names(config) == ["Work", "Home", "No folder"]


class TestSendDueReminders:
    def test_sends_once(self, config):
        notifier = MagicMock()
        sent = set()
        now = datetime(2024, 3, 10, 8, 45, 20, tzinfo=UTC)

        assert send_due_reminders(config, notifier, sent, now=now) == 1
        notifier.notify.assert_called_once_with("Stretch", "Due 2024-03-10 09:00 UTC")

        # Overlapping window does not resend
        assert send_due_reminders(config, notifier, sent, now=now) == 0
        assert notifier.notify.call_count == 1

    def test_nothing_due(self, config):
        notifier = MagicMock()
        now = datetime(2024, 3, 10, 12, 0, tzinfo=UTC)
        assert send_due_reminders(config, notifier, set(), now=now) == 0
        notifier.notify.assert_not_called()
