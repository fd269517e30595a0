"""Configuration management for tasktide."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

TASKTIDE_HOME = Path(os.environ.get("TASKTIDE_HOME", Path.home() / "tasktide"))
CONFIG_FILE = TASKTIDE_HOME / "config" / "tasktide.conf"
DATA_DIR = TASKTIDE_HOME / "data"

SORT_MODES = ("deadline", "custom", "priority")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """tasktide configuration."""

    tasks_file: str = ""
    default_sort: str = "deadline"
    no_folder_name: str = "No folder"
    holidays: list[str] = field(default_factory=list)
    reminder_poll_seconds: int = 60
    log_level: str = "WARNING"

    @property
    def tasks_path(self) -> Path:
        if self.tasks_file:
            return Path(self.tasks_file).expanduser()
        return DATA_DIR / "tasks.json"


def _strip_value(value: str) -> str:
    # Handle quoted values with inline comments: "value" # comment
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from tasktide.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _strip_value(value.strip())

        match key:
            case "tasks_file":
                config.tasks_file = value
            case "default_sort":
                if value in SORT_MODES:
                    config.default_sort = value
                else:
                    logger.warning(f"Invalid DEFAULT_SORT {value!r}, expected one of {SORT_MODES}")
            case "no_folder_name":
                config.no_folder_name = value
            case "holidays":
                config.holidays = [d.strip() for d in value.split(",") if d.strip()]
            case "reminder_poll_seconds":
                try:
                    config.reminder_poll_seconds = max(1, int(value))
                except ValueError:
                    logger.warning(f"Invalid REMINDER_POLL_SECONDS: {value!r}")
            case "log_level":
                if value.upper() in LOG_LEVELS:
                    config.log_level = value.upper()
                else:
                    logger.warning(f"Invalid LOG_LEVEL: {value!r}")

    return config
