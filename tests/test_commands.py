"""Tests for command logic."""

import json
import logging

import pytest
from freezegun import freeze_time

from aura import commands
from aura.errors import UsageError, ValidationError
from aura.models import Priority, StatusDef, TaskType
from aura.view_pipeline import FALLBACK_BUCKET


def _saved_tasks(session):
    with open(session.profile.data_path, "r", encoding="utf-8") as f:
        return json.load(f)["tasks"]


def _saved_views(session):
    with open(session.profile.views_path, "r", encoding="utf-8") as f:
        return json.load(f)["views"]


@freeze_time("2024-01-08 12:00:00")
class TestCaptureCommands:
    """Test add command."""

    def test_cmd_add_appends_and_saves(self, sample_session):
        result = commands.cmd_add(sample_session, "comprar leche; llamar a Ana el viernes")

        assert result.startswith("Added 2 task(s):")
        tasks = sample_session.tasks.tasks
        assert len(tasks) == 7
        assert tasks[5].title == "comprar leche"
        assert tasks[5].date == "2024-01-08"
        assert tasks[6].date == "2024-01-12"
        assert tasks[6].type is TaskType.CALL
        assert [t["title"] for t in _saved_tasks(sample_session)][-2:] == [
            "comprar leche",
            "llamar a Ana",
        ]

    def test_cmd_add_blank_text(self, sample_session):
        with pytest.raises(UsageError, match="Nothing to add"):
            commands.cmd_add(sample_session, "   ")

    def test_capture_logs_event(self, sample_session, caplog):
        with caplog.at_level(logging.INFO, logger="aura"):
            created = commands.capture_tasks(sample_session, "pagar factura")

        events = [json.loads(r.getMessage()) for r in caplog.records if r.name == "aura"]
        captured = [e for e in events if e["event"] == "tasks_captured"]
        assert captured[0]["count"] == 1
        assert captured[0]["task_ids"] == [created[0].id]

    def test_capture_uses_first_open_profile_status(self, sample_session):
        sample_session.profile.statuses = [
            StatusDef("pendiente", "Pendiente"),
            StatusDef("hecho", "Hecho", True),
        ]

        created = commands.capture_tasks(sample_session, "comprar pan")
        commands.cmd_view(sample_session, "tablero", group_by="status")
        projection = commands.project_view(sample_session, "tablero")

        assert created[0].status == "pendiente"
        assert _saved_tasks(sample_session)[-1]["status"] == "pendiente"
        assert created[0].id in [task.id for task in projection["pendiente"]]
        assert created[0].id not in [task.id for task in projection[FALLBACK_BUCKET]]


@freeze_time("2024-01-08 12:00:00")
class TestListCommands:
    """Test list command."""

    def test_today_view(self, sample_session):
        result = commands.cmd_list(sample_session, "hoy")

        assert "comprar pan" in result
        assert "Enviar informe" not in result
        assert "Llamar al banco" not in result

    def test_all_view_hides_recurring(self, sample_session):
        result = commands.cmd_list(sample_session, "todas")

        assert "Enviar informe" in result
        assert "Pagar alquiler" not in result
        assert result.index("Regar plantas") < result.index("Llamar al banco")

    def test_search(self, sample_session):
        result = commands.cmd_list(sample_session, "todas", search="banco")

        assert result.splitlines() == ["t1  Llamar al banco  [2024-01-10, baja]"]

    def test_empty_view(self, sample_session):
        assert commands.cmd_list(sample_session, "project_nada") == "No tasks."

    def test_grouped_view(self, sample_session):
        commands.cmd_view(sample_session, "todas", group_by="project")

        result = commands.cmd_list(sample_session, "todas")

        assert result.startswith("General (1)")
        assert "Casa (2)" in result
        assert "Trabajo (1)" in result


@freeze_time("2024-01-08 12:00:00")
class TestMoveCommands:
    """Test move and done commands."""

    def test_move_needs_grouped_view(self, sample_session):
        with pytest.raises(UsageError, match="grouped by 'none'"):
            commands.cmd_move(sample_session, "t1", "review")

    def test_move_on_kanban_board(self, sample_session):
        commands.cmd_view(sample_session, "todas", layout="kanban")

        result = commands.cmd_move(sample_session, "t1", "review")

        assert result == "Moved t1 to status 'review'"
        assert sample_session.tasks.find("t1").status == "review"
        assert _saved_tasks(sample_session)[0]["status"] == "review"

    def test_move_by_priority_alias(self, sample_session):
        commands.cmd_view(sample_session, "hoy", group_by="priority")

        result = commands.cmd_move(sample_session, "t1", "high", view_id="hoy")

        assert result == "Moved t1 to priority 'alta'"
        assert sample_session.tasks.find("t1").priority is Priority.HIGH

    def test_move_to_unknown_status(self, sample_session):
        commands.cmd_view(sample_session, "todas", group_by="status")

        with pytest.raises(ValidationError, match="Unknown status: archivada"):
            commands.cmd_move(sample_session, "t1", "archivada")

    def test_move_to_unknown_project(self, sample_session):
        commands.cmd_view(sample_session, "todas", group_by="project")

        with pytest.raises(ValidationError, match="Unknown project: ocio"):
            commands.cmd_move(sample_session, "t1", "ocio")

    def test_move_unknown_task(self, sample_session):
        commands.cmd_view(sample_session, "todas", group_by="status")

        with pytest.raises(ValidationError, match="Task not found: zz"):
            commands.cmd_move(sample_session, "zz", "done")

    def test_done_toggles(self, sample_session):
        assert commands.cmd_done(sample_session, "t1") == "Task t1 is now 'done'"
        assert commands.cmd_done(sample_session, "t1") == "Task t1 is now 'todo'"


class TestViewCommands:
    """Test view configuration command."""

    def test_show_default(self, sample_session):
        result = commands.cmd_view(sample_session, "hoy")

        assert result == "View 'hoy': layout=list, group_by=none, sort_by=priority, filters=0"

    def test_update_saves(self, sample_session):
        result = commands.cmd_view(sample_session, "todas", layout="kanban", sort_by="title")

        assert result == "View 'todas': layout=kanban, group_by=none, sort_by=title, filters=0"
        assert _saved_views(sample_session)["todas"]["layout"] == "kanban"

    def test_filter_toggle(self, sample_session):
        result = commands.cmd_view(sample_session, "todas", filter_toggle=("project", "casa"))

        assert result.endswith("filters=1")
        assert _saved_views(sample_session)["todas"]["filters"]["projectIds"] == ["casa"]

    def test_reset(self, sample_session):
        commands.cmd_view(sample_session, "hoy", layout="grid")

        result = commands.cmd_view(sample_session, "hoy", reset=True)

        assert "layout=list" in result

    def test_reset_cannot_combine(self, sample_session):
        with pytest.raises(UsageError, match="Cannot combine --reset"):
            commands.cmd_view(sample_session, "hoy", layout="grid", reset=True)

    def test_invalid_layout(self, sample_session):
        with pytest.raises(ValidationError, match="Invalid layout"):
            commands.cmd_view(sample_session, "hoy", layout="mosaic")
