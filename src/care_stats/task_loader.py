"""Load task lists exported from the caregiving backend.

Accepts JSON or YAML files holding either a list of task records or an object
with a ``tasks`` list. Records may use the app's camelCase fields or the
backend's snake_case row fields.
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Union

import yaml

from .models import Task


logger = logging.getLogger(__name__)


class TaskLoadError(Exception):
    """A task file could not be read or parsed."""

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot load tasks from {self.path}: {reason}")


def parse_tasks(data: Any) -> List[Task]:
    """Build tasks from decoded JSON/YAML data.

    Raises:
        ValueError: If the data is not a task list or a record is malformed
        TypeError: If a nested field has an unusable type
    """
    if isinstance(data, dict):
        data = data.get("tasks")
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError("expected a list of tasks or an object with a 'tasks' list")
    return [Task.from_dict(record) for record in data]


def load_tasks(path: Union[str, Path]) -> List[Task]:
    """Read a task file.

    Raises:
        TaskLoadError: If the file is missing, malformed, or not a task list
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise TaskLoadError(path, str(e)) from e

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(content)
        else:
            data = json.loads(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise TaskLoadError(path, f"invalid file format: {e}") from e

    try:
        tasks = parse_tasks(data)
    except (ValueError, TypeError) as e:
        raise TaskLoadError(path, str(e)) from e

    logger.debug("Loaded %d tasks from %s", len(tasks), path)
    return tasks
