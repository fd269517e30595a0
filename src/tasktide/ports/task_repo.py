"""Task repository interface."""

from typing import Protocol

from tasktide.core.tasks import Task


class TaskRepository(Protocol):
    """Interface for loading and saving the whole task collection."""

    def load_tasks(self) -> list[Task]:
        """Load all tasks."""
        ...

    def save_tasks(self, tasks: list[Task]) -> None:
        """Replace the stored collection with ``tasks``."""
        ...

    def load_folder_order(self) -> list[str]:
        """Load the saved folder display order."""
        ...

    def save_folder_order(self, order: list[str]) -> None:
        """Replace the saved folder display order."""
        ...
