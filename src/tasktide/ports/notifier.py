"""Notification delivery interface."""

from typing import Protocol


class Notifier(Protocol):
    """Interface for delivering a reminder to the user."""

    def notify(self, title: str, body: str) -> None:
        """Deliver one notification."""
        ...
