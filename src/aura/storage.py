"""Task and view snapshots on disk, with persisted-structure validation."""

import json
from pathlib import Path
from typing import Any

from aura.errors import StorageError, ValidationError
from aura.models import TaskStore, ViewConfig
from aura.validation import validate_date_format


def validate_tasks_structure(data: dict[str, Any]) -> None:
    """Validate persisted task payload structure."""
    if not isinstance(data, dict) or "tasks" not in data:
        raise ValidationError("Invalid tasks file structure: missing 'tasks' key")

    if not isinstance(data["tasks"], list):
        raise ValidationError("Invalid tasks file structure: 'tasks' must be an array")

    seen_ids: set[str] = set()
    for i, task in enumerate(data["tasks"]):
        if not isinstance(task, dict):
            raise ValidationError(f"Task {i} is not a valid object")

        missing = {"id", "title"} - set(task.keys())
        if missing:
            raise ValidationError(f"Task {i} missing required fields: {', '.join(sorted(missing))}")

        task_id = str(task["id"])
        if task_id in seen_ids:
            raise ValidationError(f"Task {i} has duplicate id: {task_id}")
        seen_ids.add(task_id)

        for date_field in ("date", "eventDate"):
            if task.get(date_field) is not None:
                try:
                    validate_date_format(str(task[date_field]))
                except ValidationError as e:
                    raise ValidationError(f"Task {i} {date_field}: {e}") from e


def _read_json(path: Path, label: str) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise StorageError(f"Invalid JSON in {label} file: {e}") from e
    except OSError as e:
        raise StorageError(f"Failed to read {label} file: {path}: {e}") from e


def _write_json(path: Path, label: str, payload: Any) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise StorageError(f"Failed to save {label} file: {path}: {e}") from e


def load_tasks(path: str) -> TaskStore:
    """Load tasks from JSON and validate structure."""
    task_path = Path(path)

    if not task_path.exists():
        return TaskStore()

    data = _read_json(task_path, "tasks")
    try:
        validate_tasks_structure(data)
    except ValidationError as e:
        raise StorageError(str(e)) from e
    return TaskStore.from_dict(data)


def save_tasks(path: str, tasks_data: TaskStore) -> None:
    """Save tasks payload to JSON."""
    _write_json(Path(path), "tasks", tasks_data.to_dict())


def load_views(path: str) -> dict[str, ViewConfig]:
    """Load view configs; unreadable entries fall back to defaults."""
    views_path = Path(path)

    if not views_path.exists():
        return {}

    data = _read_json(views_path, "views")
    if not isinstance(data, dict) or not isinstance(data.get("views"), dict):
        raise StorageError("Invalid views file structure: 'views' must be an object")

    return {
        str(view_id): ViewConfig.from_dict(payload)
        for view_id, payload in data["views"].items()
    }


def save_views(path: str, views: dict[str, ViewConfig]) -> None:
    """Save view configs to JSON."""
    payload = {"views": {view_id: config.to_dict() for view_id, config in views.items()}}
    _write_json(Path(path), "views", payload)
