"""tasktide CLI - recurring task list."""

import json
import logging
import sys
from datetime import date, datetime, timedelta

import click
from dateutil.parser import isoparse

from .adapters.json_store import StoreError
from .config import load_config
from .core.labels import LabelKind, TimeLabel
from .core.listing import ListEntry, SortMode, Tab
from .core.recurrence import UTC, as_utc
from .core.schedule import iter_occurrences
from .workflows import (
    TaskNotFoundError,
    calendar_view,
    folder_names,
    label_for,
    list_tasks,
    next_instance,
    toggle_task,
)

LABEL_TEXT = {
    LabelKind.STARTS_IN_MINUTES: "starts in {count} min",
    LabelKind.STARTS_IN_HOURS: "starts in {count} h",
    LabelKind.STARTS_IN_DAYS: "starts in {count} days",
    LabelKind.STARTS_TOMORROW: "starts tomorrow",
    LabelKind.STARTS_ON_DATE: "starts {date}",
    LabelKind.NO_DEADLINE: "no deadline",
    LabelKind.OVERDUE_MINUTES: "{count} min ago",
    LabelKind.OVERDUE_HOURS: "{count} h ago",
    LabelKind.OVERDUE_DAYS: "{count} days ago",
    LabelKind.DUE_NOW: "due now",
    LabelKind.REMAINING_MINUTES: "{count} min left",
    LabelKind.REMAINING_HOURS: "{count} h left",
    LabelKind.REMAINING_DAYS: "{count} days left",
    LabelKind.REMAINING_MONTHS: "{months} mo {days} d left",
    LabelKind.REMAINING_YEARS: "{years} y {months} mo left",
}

SEVERITY_MARKER = {"overdue": "!!", "critical": "! ", "warning": "~ ", "neutral": "  "}


def render_label(label: TimeLabel) -> str:
    return LABEL_TEXT[label.kind].format(**label.params)


def _parse_when(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return as_utc(isoparse(value))
    except ValueError:
        raise click.BadParameter(f"not an ISO date/time: {value}")


def _fail(e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


def _entry_json(entry: ListEntry, now: datetime) -> dict:
    return {
        "id": entry.task.id,
        "row_id": entry.row_id,
        "title": entry.task.title,
        "folder": entry.task.folder,
        "bucket": entry.bucket.value,
        "date": entry.resolved_date.isoformat() if entry.resolved_date else None,
        "instance": entry.instance_key,
        "label": label_for(entry, now).to_dict(),
    }


@click.group()
@click.version_option(package_name="tasktide")
def main():
    """tasktide - due dates and repeating tasks."""
    pass


@main.command("list")
@click.option("--completed", is_flag=True, help="Show the completed tab")
@click.option("--sort", "sort_mode", type=click.Choice([m.value for m in SortMode]), default=None,
              help="Sort mode (defaults to DEFAULT_SORT)")
@click.option("--folder", default=None, help="Only this folder")
@click.option("--now", "now_str", default=None, help="Reference instant (ISO), defaults to now")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_cmd(completed: bool, sort_mode: str | None, folder: str | None, now_str: str | None,
             as_json: bool):
    """List tasks grouped by folder."""
    config = load_config()
    now = _parse_when(now_str) or datetime.now(UTC)
    tab = Tab.COMPLETED if completed else Tab.INCOMPLETE
    try:
        entries = list_tasks(config, tab, SortMode(sort_mode) if sort_mode else None, folder, now)
        folders = [folder] if folder is not None else folder_names(config)
    except StoreError as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps([_entry_json(e, now) for e in entries], indent=2))
        return

    if not entries:
        click.echo("Nothing completed yet." if completed else "No tasks.")
        return

    first = True
    for name in folders:
        rows = [e for e in entries if e.task.folder_name(config.no_folder_name) == name]
        if not rows:
            continue
        if not first:
            click.echo()
        first = False
        click.echo(f"### {name}")
        for entry in rows:
            label = label_for(entry, now)
            when = entry.resolved_date.strftime("%Y-%m-%d %H:%M") if entry.resolved_date else ""
            marker = SEVERITY_MARKER[label.severity.value]
            suffix = "" if completed else f"  ({render_label(label)})"
            click.echo(f"  {marker}{when:16} {entry.task.title}{suffix}  [{entry.row_id}]")


@main.command("next")
@click.argument("task_id")
@click.option("--from", "from_str", default=None, help="Reference instant (ISO), defaults to now")
@click.option("--upcoming", default=0, type=int, help="Also list scheduled dates for N days")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def next_cmd(task_id: str, from_str: str | None, upcoming: int, as_json: bool):
    """Show the next outstanding occurrence of a task."""
    config = load_config()
    from_ = _parse_when(from_str) or datetime.now(UTC)
    try:
        task, when = next_instance(config, task_id, from_)
    except (StoreError, TaskNotFoundError) as e:
        _fail(e)

    scheduled = []
    if upcoming > 0 and task.recurrence is not None:
        scheduled = iter_occurrences(task.recurrence, from_, from_ + timedelta(days=upcoming))

    if as_json:
        click.echo(json.dumps({
            "id": task.id,
            "title": task.title,
            "next": when.isoformat() if when else None,
            "upcoming": [d.isoformat() for d in scheduled],
        }, indent=2))
        return

    if when is None:
        click.echo(f"{task.title}: nothing outstanding")
    else:
        click.echo(f"{task.title}: {when:%Y-%m-%d %H:%M} UTC")
    for day in scheduled:
        click.echo(f"  • {day:%a %Y-%m-%d %H:%M}")


@main.command("done")
@click.argument("task_id")
@click.option("--date", "-d", "instance_date", default=None,
              help="Occurrence date (YYYY-MM-DD) for repeating tasks")
def done_cmd(task_id: str, instance_date: str | None):
    """Toggle completion of a task or one occurrence."""
    config = load_config()
    try:
        instance = date.fromisoformat(instance_date) if instance_date else None
        task = toggle_task(config, task_id, instance)
    except (StoreError, TaskNotFoundError, ValueError) as e:
        _fail(e)

    if task.is_repeating:
        click.echo(f"✓ {task.title}: {len(task.completed_instance_dates)} occurrence(s) done")
    elif task.completed_at:
        click.echo(f"✓ {task.title} completed")
    else:
        click.echo(f"○ {task.title} reopened")


@main.command("calendar")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def calendar_cmd(as_json: bool):
    """Show tasks grouped by date."""
    config = load_config()
    try:
        grouped = calendar_view(config)
    except StoreError as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps(
            {day.isoformat(): [t.id for t in tasks] for day, tasks in grouped.items()},
            indent=2,
        ))
        return

    if not grouped:
        click.echo("No dated tasks.")
        return
    for day, tasks in grouped.items():
        click.echo(f"### {day.strftime('%A, %B %d')}")
        for task in tasks:
            click.echo(f"  {task.title}")


@main.command("folders")
def folders_cmd():
    """List folders in display order."""
    config = load_config()
    try:
        names = folder_names(config)
    except StoreError as e:
        _fail(e)
    for name in names:
        click.echo(name)


@main.command("watch")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def watch(debug: bool):
    """Run the reminder watcher."""
    config = load_config()
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else getattr(logging, config.log_level),
    )

    from .watcher import run_watcher

    click.echo("Watching for reminders...")
    click.echo("Press Ctrl+C to stop")
    try:
        run_watcher(config)
    except KeyboardInterrupt:
        click.echo("\nWatcher stopped.")


if __name__ == "__main__":
    main()
