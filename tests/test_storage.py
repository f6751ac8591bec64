"""Tests for storage module."""

import json

import pytest

from aura.errors import StorageError, ValidationError
from aura.models import Layout, Priority, Task, TaskStore, ViewConfig
from aura.storage import (
    load_tasks,
    load_views,
    save_tasks,
    save_views,
    validate_tasks_structure,
)


class TestValidateTasksStructure:
    """Test persisted-structure validation."""

    def test_valid(self):
        validate_tasks_structure({"tasks": [{"id": "a1", "title": "Uno", "date": "2024-01-08"}]})

    def test_missing_tasks_key(self):
        with pytest.raises(ValidationError, match="missing 'tasks' key"):
            validate_tasks_structure({})

    def test_tasks_not_array(self):
        with pytest.raises(ValidationError, match="must be an array"):
            validate_tasks_structure({"tasks": {}})

    def test_missing_title(self):
        with pytest.raises(ValidationError, match="Task 0 missing required fields: title"):
            validate_tasks_structure({"tasks": [{"id": "a1"}]})

    def test_duplicate_ids(self):
        tasks = [{"id": "a1", "title": "Uno"}, {"id": "a1", "title": "Dos"}]

        with pytest.raises(ValidationError, match="duplicate id: a1"):
            validate_tasks_structure({"tasks": tasks})

    def test_invalid_event_date(self):
        tasks = [{"id": "a1", "title": "Uno", "eventDate": "2024-02-30"}]

        with pytest.raises(ValidationError, match="Task 0 eventDate"):
            validate_tasks_structure({"tasks": tasks})

    def test_malformed_date_is_a_value_error(self):
        tasks = [{"id": "a1", "title": "Uno", "date": "08/01/2024"}]

        with pytest.raises(ValueError, match="Invalid date: 08/01/2024. Expected valid YYYY-MM-DD"):
            validate_tasks_structure({"tasks": tasks})


class TestTaskFiles:
    """Test task load/save."""

    def test_missing_file_loads_empty(self, temp_dir):
        store = load_tasks(str(temp_dir / "tasks.json"))

        assert store.tasks == []

    def test_save_then_load(self, temp_dir, sample_tasks):
        path = str(temp_dir / "sub" / "tasks.json")

        save_tasks(path, TaskStore(tasks=sample_tasks))
        loaded = load_tasks(path)

        assert loaded.tasks == sample_tasks

    def test_saved_file_keeps_non_ascii(self, temp_dir):
        path = temp_dir / "tasks.json"

        save_tasks(str(path), TaskStore(tasks=[Task(id="a1", title="llamar a mamá")]))

        assert "mamá" in path.read_text(encoding="utf-8")

    def test_invalid_json(self, temp_dir):
        path = temp_dir / "tasks.json"
        path.write_text("{oops", encoding="utf-8")

        with pytest.raises(StorageError, match="Invalid JSON in tasks file"):
            load_tasks(str(path))

    def test_invalid_structure(self, temp_dir):
        path = temp_dir / "tasks.json"
        path.write_text(json.dumps({"items": []}), encoding="utf-8")

        with pytest.raises(StorageError, match="missing 'tasks' key"):
            load_tasks(str(path))

    def test_stale_priority_coerced_on_load(self, temp_dir):
        path = temp_dir / "tasks.json"
        path.write_text(
            json.dumps({"tasks": [{"id": "a1", "title": "Uno", "priority": "p1"}]}),
            encoding="utf-8",
        )

        assert load_tasks(str(path)).tasks[0].priority is Priority.MEDIUM


class TestViewFiles:
    """Test view config load/save."""

    def test_missing_file_loads_empty(self, temp_dir):
        assert load_views(str(temp_dir / "views.json")) == {}

    def test_save_then_load(self, temp_dir):
        path = str(temp_dir / "views.json")
        views = {"hoy": ViewConfig(layout=Layout.KANBAN), "mi_vista": ViewConfig(name="Mía")}

        save_views(path, views)

        assert load_views(path) == views

    def test_stale_entries_fall_back(self, temp_dir):
        path = temp_dir / "views.json"
        path.write_text(
            json.dumps({"views": {"hoy": {"layout": "mosaic"}, "todas": None}}),
            encoding="utf-8",
        )

        views = load_views(str(path))

        assert views["hoy"].layout is Layout.LIST
        assert views["todas"] == ViewConfig()

    def test_invalid_structure(self, temp_dir):
        path = temp_dir / "views.json"
        path.write_text(json.dumps({"views": []}), encoding="utf-8")

        with pytest.raises(StorageError, match="'views' must be an object"):
            load_views(str(path))
