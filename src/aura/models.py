"""Typed domain models and payload DTOs for aura."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping

from aura.errors import ValidationError
from aura.task_ids import generate_task_id

DEFAULT_PROJECT_ID = "general"
DEFAULT_STATUS_ID = "todo"


class Priority(str, Enum):
    """Fixed three-value task priority, highest first."""

    HIGH = "alta"
    MEDIUM = "media"
    LOW = "baja"

    @classmethod
    def coerce(cls, value: Any) -> "Priority":
        """Map any persisted value to a priority, defaulting to medium."""
        return _lookup_priority(value) or cls.MEDIUM

    @classmethod
    def parse(cls, value: Any) -> "Priority":
        """Strict variant of coerce for caller-supplied values."""
        priority = _lookup_priority(value)
        if priority is None:
            raise ValidationError(f"Invalid priority: {value}")
        return priority

    @property
    def rank(self) -> int:
        return _PRIORITY_ORDER.index(self)


class TaskType(str, Enum):
    """Coarse category inferred from capture keywords."""

    NORMAL = "normal"
    CALL = "call"
    SHOPPING = "shopping"
    PAYMENT = "payment"
    EMAIL = "email"
    EVENT = "event"

    @classmethod
    def coerce(cls, value: Any) -> "TaskType":
        return _coerce_enum(cls, value) or cls.NORMAL


class Layout(str, Enum):
    """Rendering hint for a view."""

    LIST = "list"
    COMPACT = "compact"
    KANBAN = "kanban"
    GRID = "grid"

    @classmethod
    def coerce(cls, value: Any) -> "Layout":
        return _coerce_enum(cls, value) or cls.LIST


class GroupBy(str, Enum):
    """Grouping dimension of a view."""

    NONE = "none"
    STATUS = "status"
    PRIORITY = "priority"
    PROJECT = "project"
    TIMEFRAME = "timeframe"

    @classmethod
    def coerce(cls, value: Any) -> "GroupBy":
        return _coerce_enum(cls, value) or cls.NONE


class SortBy(str, Enum):
    """Sort key of a view."""

    DATE = "date"
    TITLE = "title"
    PRIORITY = "priority"

    @classmethod
    def coerce(cls, value: Any) -> "SortBy":
        return _coerce_enum(cls, value) or cls.DATE


_PRIORITY_ORDER = (Priority.HIGH, Priority.MEDIUM, Priority.LOW)
_PRIORITY_ALIASES = {
    "high": Priority.HIGH,
    "medium": Priority.MEDIUM,
    "low": Priority.LOW,
}


def _coerce_enum(enum_cls: type[Enum], value: Any) -> Any:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            return None
    return None


def _lookup_priority(value: Any) -> Priority | None:
    priority = _coerce_enum(Priority, value)
    if priority is None and isinstance(value, str):
        priority = _PRIORITY_ALIASES.get(value.strip().lower())
    return priority


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple, set, frozenset)):
        return []
    return [str(item) for item in value if item is not None]


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


@dataclass
class Task:
    """In-memory task model.

    ``date`` is the ISO do-date (YYYY-MM-DD); ``event_date`` is an optional,
    separate calendar-event date.
    """

    id: str
    title: str
    date: str | None = None
    status: str = DEFAULT_STATUS_ID
    priority: Priority = Priority.MEDIUM
    type: TaskType = TaskType.NORMAL
    list_id: str = DEFAULT_PROJECT_ID
    tags: list[str] = field(default_factory=list)
    event_date: str | None = None
    is_recurring: bool = False
    notes: str | None = None

    def __post_init__(self) -> None:
        self.priority = Priority.coerce(self.priority)
        self.type = TaskType.coerce(self.type)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Task":
        """Create task from a persisted dict payload."""
        required_fields = {"id", "title"}
        missing = required_fields - set(payload.keys())
        if missing:
            raise ValueError(f"Task missing required fields: {', '.join(sorted(missing))}")

        return cls(
            id=str(payload["id"]),
            title=str(payload["title"]),
            date=_optional_str(payload.get("date")),
            status=str(payload.get("status") or DEFAULT_STATUS_ID),
            priority=Priority.coerce(payload.get("priority")),
            type=TaskType.coerce(payload.get("type")),
            list_id=str(payload.get("listId") or DEFAULT_PROJECT_ID),
            tags=_string_list(payload.get("tags")),
            event_date=_optional_str(payload.get("eventDate")),
            is_recurring=bool(payload.get("isRecurring", False)),
            notes=_optional_str(payload.get("notes")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize task to dict payload."""
        return {
            "id": self.id,
            "title": self.title,
            "date": self.date,
            "status": self.status,
            "priority": self.priority.value,
            "type": self.type.value,
            "listId": self.list_id,
            "tags": list(self.tags),
            "eventDate": self.event_date,
            "isRecurring": self.is_recurring,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class StatusDef:
    """User-defined status column."""

    id: str
    name: str
    is_completed: bool = False

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "StatusDef":
        return cls(
            id=str(payload["id"]),
            name=str(payload.get("name") or payload["id"]),
            is_completed=bool(payload.get("isCompleted", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "isCompleted": self.is_completed}


@dataclass(frozen=True)
class Project:
    """Project/list a task belongs to."""

    id: str
    name: str

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Project":
        return cls(id=str(payload["id"]), name=str(payload.get("name") or payload["id"]))

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}


DEFAULT_STATUSES = (
    StatusDef(id="todo", name="Por hacer"),
    StatusDef(id="in_progress", name="En curso"),
    StatusDef(id="review", name="Revisión"),
    StatusDef(id="done", name="Completada", is_completed=True),
)

DEFAULT_PROJECTS = (Project(id=DEFAULT_PROJECT_ID, name="General"),)


@dataclass
class ViewFilters:
    """Per-dimension filter sets; an empty list means no constraint."""

    project_ids: list[str] = field(default_factory=list)
    priority: list[Priority] = field(default_factory=list)
    status: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Any) -> "ViewFilters":
        """Create filters leniently; unusable entries are dropped."""
        if not isinstance(payload, Mapping):
            return cls()
        priorities = [_lookup_priority(p) for p in _string_list(payload.get("priority"))]
        return cls(
            project_ids=_string_list(payload.get("projectIds")),
            priority=[p for p in priorities if p is not None],
            status=_string_list(payload.get("status")),
            tags=_string_list(payload.get("tags")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "projectIds": list(self.project_ids),
            "priority": [p.value for p in self.priority],
            "status": list(self.status),
            "tags": list(self.tags),
        }

    def active_count(self) -> int:
        return sum(
            1
            for values in (self.project_ids, self.priority, self.status, self.tags)
            if values
        )


@dataclass
class ViewConfig:
    """User-authored view settings."""

    layout: Layout = Layout.LIST
    group_by: GroupBy = GroupBy.NONE
    sort_by: SortBy = SortBy.DATE
    filters: ViewFilters = field(default_factory=ViewFilters)
    name: str | None = None

    def __post_init__(self) -> None:
        self.layout = Layout.coerce(self.layout)
        self.group_by = GroupBy.coerce(self.group_by)
        self.sort_by = SortBy.coerce(self.sort_by)

    @classmethod
    def from_dict(cls, payload: Any) -> "ViewConfig":
        """Create a view config; stale or partial payloads fall back to defaults."""
        if not isinstance(payload, Mapping):
            return cls()
        return cls(
            layout=Layout.coerce(payload.get("layout")),
            group_by=GroupBy.coerce(payload.get("groupBy")),
            sort_by=SortBy.coerce(payload.get("sortBy")),
            filters=ViewFilters.from_dict(payload.get("filters")),
            name=_optional_str(payload.get("name")),
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "layout": self.layout.value,
            "groupBy": self.group_by.value,
            "sortBy": self.sort_by.value,
            "filters": self.filters.to_dict(),
        }
        if self.name is not None:
            payload["name"] = self.name
        return payload


@dataclass(frozen=True)
class ParsedText:
    """Cleaned title and ISO date extracted from free text."""

    title: str
    date: str | None


@dataclass
class DraftTask:
    """Unsaved task produced by quick capture."""

    title: str
    date: str
    type: TaskType = TaskType.NORMAL
    status: str = DEFAULT_STATUS_ID
    priority: Priority = Priority.MEDIUM
    list_id: str = DEFAULT_PROJECT_ID
    tags: list[str] = field(default_factory=list)
    event_date: str | None = None

    def to_task(self, task_id: str) -> Task:
        """Materialize the draft under a storage-assigned id."""
        return Task(
            id=task_id,
            title=self.title,
            date=self.date,
            status=self.status,
            priority=self.priority,
            type=self.type,
            list_id=self.list_id,
            tags=list(self.tags),
            event_date=self.event_date,
        )


@dataclass
class TaskStore:
    """Collection model for task persistence payload."""

    tasks: list[Task] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "TaskStore":
        """Create task store from dict payload."""
        raw_tasks = payload.get("tasks")
        if raw_tasks is None:
            raise ValueError("Invalid tasks file structure: missing 'tasks' key")
        if not isinstance(raw_tasks, list):
            raise ValueError("Invalid tasks file structure: 'tasks' must be an array")

        tasks: list[Task] = []
        for i, raw_task in enumerate(raw_tasks):
            if isinstance(raw_task, Task):
                tasks.append(raw_task)
                continue
            if not isinstance(raw_task, Mapping):
                raise ValueError(f"Task {i} is not a valid object")
            tasks.append(Task.from_dict(raw_task))

        return cls(tasks=tasks)

    def to_dict(self) -> dict[str, Any]:
        """Serialize store to persistence dict payload."""
        return {"tasks": [task.to_dict() for task in self.tasks]}

    def ids(self) -> set[str]:
        return {task.id for task in self.tasks}

    def find(self, task_id: str) -> Task | None:
        """Return task by id."""
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def replace_all(self, tasks: Iterable[Task]) -> None:
        """Swap in a full replacement collection."""
        self.tasks = list(tasks)

    def add_drafts(self, drafts: Iterable[DraftTask]) -> list[Task]:
        """Append drafts under fresh ids and return the created tasks."""
        existing = self.ids()
        created = [draft.to_task(generate_task_id(existing)) for draft in drafts]
        self.tasks.extend(created)
        return created


@dataclass
class Profile:
    """In-memory profile model."""

    timezone: str
    capture_day_start: str
    data_path: str
    views_path: str
    statuses: list[StatusDef] = field(default_factory=lambda: list(DEFAULT_STATUSES))
    projects: list[Project] = field(default_factory=lambda: list(DEFAULT_PROJECTS))
    log_path: str | None = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Profile":
        """Create profile model from dict payload."""
        raw_statuses = payload.get("statuses")
        raw_projects = payload.get("projects")
        return cls(
            timezone=str(payload["timezone"]),
            capture_day_start=str(payload["capture_day_start"]),
            data_path=str(payload["data_path"]),
            views_path=str(payload["views_path"]),
            statuses=[StatusDef.from_dict(s) for s in raw_statuses]
            if raw_statuses is not None
            else list(DEFAULT_STATUSES),
            projects=[Project.from_dict(p) for p in raw_projects]
            if raw_projects is not None
            else list(DEFAULT_PROJECTS),
            log_path=_optional_str(payload.get("log_path")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize profile model to dict payload."""
        return {
            "timezone": self.timezone,
            "capture_day_start": self.capture_day_start,
            "data_path": self.data_path,
            "views_path": self.views_path,
            "statuses": [s.to_dict() for s in self.statuses],
            "projects": [p.to_dict() for p in self.projects],
            "log_path": self.log_path,
        }
