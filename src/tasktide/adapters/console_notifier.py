"""Console notification adapter."""

import logging

import click

logger = logging.getLogger(__name__)


class ConsoleNotifier:
    """
    Prints reminders to the terminal.

    Implements Notifier protocol.
    """

    def notify(self, title: str, body: str) -> None:
        logger.info(f"Reminder: {title}")
        click.echo(f"🔔 {title}")
        if body:
            click.echo(f"   {body}")
