"""Reminder watcher - polls the task store and fires due reminders."""

import logging
from datetime import datetime, timedelta

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .adapters.console_notifier import ConsoleNotifier
from .adapters.json_store import StoreError
from .config import Config, load_config
from .core.recurrence import UTC
from .ports.notifier import Notifier
from .workflows import send_due_reminders

logger = logging.getLogger(__name__)


def check_reminders(config: Config, notifier: Notifier, sent: set) -> None:
    """Scheduled job: one polling tick."""
    window = timedelta(seconds=config.reminder_poll_seconds)
    try:
        send_due_reminders(config, notifier, sent, now=datetime.now(UTC), window=window)
    except StoreError as e:
        logger.error(f"Cannot load tasks: {e}")
    except Exception as e:
        # Keep the scheduler alive; the next tick retries
        logger.error(f"Reminder check failed: {e}")


def setup_scheduler(
    config: Config | None = None,
    notifier: Notifier | None = None,
) -> BlockingScheduler:
    """Set up the polling job."""
    if config is None:
        config = load_config()
    notifier = notifier or ConsoleNotifier()

    scheduler = BlockingScheduler(timezone="UTC")
    scheduler.add_job(
        check_reminders,
        IntervalTrigger(seconds=config.reminder_poll_seconds),
        args=[config, notifier, set()],
        id="reminder_check",
        max_instances=1,
        coalesce=True,
        next_run_time=datetime.now(UTC),
    )
    logger.info(f"Scheduled reminder check every {config.reminder_poll_seconds}s")
    return scheduler


def run_watcher(config: Config | None = None) -> None:
    """Run the watcher until interrupted."""
    scheduler = setup_scheduler(config)
    logger.info("Starting reminder watcher...")
    scheduler.start()
