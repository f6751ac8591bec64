"""Pytest configuration and fixtures for aura tests."""

import json
import logging
import pytest
import tempfile
from pathlib import Path

from aura.models import (
    DEFAULT_STATUSES,
    Priority,
    Profile,
    Project,
    Task,
    TaskStore,
)
from aura.session import Session


@pytest.fixture(autouse=True)
def reset_logging_disable():
    """setup_logging(None) disables logging globally; undo it between tests."""
    yield
    logging.disable(logging.NOTSET)


@pytest.fixture
def temp_dir():
    """Create temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def statuses():
    return list(DEFAULT_STATUSES)


@pytest.fixture
def projects():
    return [
        Project(id="general", name="General"),
        Project(id="casa", name="Casa"),
        Project(id="trabajo", name="Trabajo"),
    ]


@pytest.fixture
def sample_tasks():
    """Small mixed task collection in insertion order."""
    return [
        Task(id="t1", title="Llamar al banco", date="2024-01-10", status="todo",
             priority=Priority.LOW, list_id="general", tags=["finanzas"]),
        Task(id="t2", title="comprar pan", date="2024-01-08", status="in_progress",
             priority=Priority.HIGH, list_id="casa"),
        Task(id="t3", title="Enviar informe", date="2024-01-08", status="done",
             priority=Priority.MEDIUM, list_id="trabajo", tags=["urgente"]),
        Task(id="t4", title="Regar plantas", date="2024-01-05", status="archived",
             priority=Priority.HIGH, list_id="casa"),
        Task(id="t5", title="Pagar alquiler", date="2024-02-01", status="todo",
             priority=Priority.HIGH, list_id="general", is_recurring=True),
    ]


@pytest.fixture
def sample_profile(temp_dir):
    """Create sample profile JSON for testing."""
    profile = {
        "timezone": "Europe/Madrid",
        "capture_day_start": "04:00:00",
        "data_path": str(temp_dir / "tasks.json"),
        "views_path": str(temp_dir / "views.json"),
        "statuses": [s.to_dict() for s in DEFAULT_STATUSES],
        "projects": [
            {"id": "general", "name": "General"},
            {"id": "casa", "name": "Casa"},
        ],
    }

    profile_path = temp_dir / "test-profile.json"
    with open(profile_path, "w", encoding="utf-8") as f:
        json.dump(profile, f, indent=2)

    return profile_path


@pytest.fixture
def sample_session(temp_dir, sample_tasks):
    """Create initialized Session object backed by temp files."""
    prof = Profile(
        timezone="UTC",
        capture_day_start="00:00",
        data_path=str(temp_dir / "tasks.json"),
        views_path=str(temp_dir / "views.json"),
        projects=[
            Project(id="general", name="General"),
            Project(id="casa", name="Casa"),
            Project(id="trabajo", name="Trabajo"),
        ],
    )
    return Session(
        profile_path=str(temp_dir / "profile.json"),
        profile=prof,
        tasks=TaskStore(tasks=list(sample_tasks)),
        views={},
    )


@pytest.fixture
def empty_session():
    """Create empty Session for testing error cases."""
    return Session()
