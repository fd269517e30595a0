"""File-based task storage adapter."""

import json
import logging
from pathlib import Path

from tasktide.core.tasks import Task

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the task file cannot be read or written."""

    pass


class JsonTaskStore:
    """
    File-based task storage.

    Implements TaskRepository protocol. One JSON document holds the task
    collection and the saved folder order; every save rewrites it whole.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as e:
            raise StoreError(f"Task file {self.path} is not valid JSON: {e}") from e
        except OSError as e:
            raise StoreError(f"Cannot read task file {self.path}: {e}") from e
        if isinstance(data, list):
            # Bare list of task records
            return {"tasks": data}
        if not isinstance(data, dict):
            raise StoreError(f"Task file {self.path} must hold a JSON object")
        return data

    def _write(self, data: dict) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
            tmp.replace(self.path)
        except OSError as e:
            raise StoreError(f"Cannot write task file {self.path}: {e}") from e

    def load_tasks(self) -> list[Task]:
        """Load all tasks. Records without an id are skipped."""
        tasks = []
        for record in self._read().get("tasks", []):
            if not isinstance(record, dict) or "id" not in record:
                logger.warning(f"Skipping malformed task record: {record!r}")
                continue
            tasks.append(Task.from_dict(record))
        return tasks

    def save_tasks(self, tasks: list[Task]) -> None:
        data = self._read()
        data["tasks"] = [t.to_dict() for t in tasks]
        self._write(data)

    def load_folder_order(self) -> list[str]:
        order = self._read().get("folderOrder", [])
        return [str(name) for name in order] if isinstance(order, list) else []

    def save_folder_order(self, order: list[str]) -> None:
        data = self._read()
        data["folderOrder"] = list(order)
        self._write(data)
