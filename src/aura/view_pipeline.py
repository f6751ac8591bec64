"""Task list projection: filter -> sort -> group, and drag-and-drop reclassify.

Every function here is pure. Inputs are never mutated; reclassification
returns a new list in which only the moved task is a new object.
"""

from dataclasses import replace
from datetime import date
from typing import Callable, Iterable, Sequence

from aura.errors import UsageError
from aura.models import (
    GroupBy,
    Layout,
    Priority,
    Project,
    SortBy,
    StatusDef,
    Task,
    ViewConfig,
)
from aura.text_folding import collation_key

TODAY_VIEW_ID = "hoy"
ALL_VIEW_ID = "todas"
PROJECT_VIEW_PREFIX = "project_"

ALL_BUCKET = "all"
FALLBACK_BUCKET = "fallback"

TIMEFRAME_BUCKETS = ("overdue", "today", "tomorrow", "this_week", "next_week", "later")

_UNDATED_SORT_KEY = date.max
_PRIORITY_BUCKETS = (Priority.HIGH, Priority.MEDIUM, Priority.LOW)
_RECLASSIFY_FIELDS = {
    GroupBy.STATUS: "status",
    GroupBy.PRIORITY: "priority",
    GroupBy.PROJECT: "list_id",
}

Projection = dict[str, list[Task]]


def completed_status_id(statuses: Sequence[StatusDef]) -> str | None:
    """Return the id of the first status flagged completed."""
    for status in statuses:
        if status.is_completed:
            return status.id
    return None


def open_status_id(statuses: Sequence[StatusDef]) -> str | None:
    """Return the id of the first status not flagged completed."""
    return next((status.id for status in statuses if not status.is_completed), None)


def _project_view_target(standard_view_id: str | None) -> str | None:
    if standard_view_id and standard_view_id.startswith(PROJECT_VIEW_PREFIX):
        return standard_view_id[len(PROJECT_VIEW_PREFIX):]
    return None


def filter_tasks(
    tasks: Iterable[Task],
    config: ViewConfig,
    standard_view_id: str | None = None,
    *,
    completed_id: str | None = None,
    search: str | None = None,
    today: date | None = None,
) -> list[Task]:
    """Keep tasks visible in the view, preserving input order.

    ``standard_view_id`` is None for custom views.
    """
    today_str = (today or date.today()).isoformat()
    filters = config.filters
    project_target = _project_view_target(standard_view_id)
    needle = search.lower() if search else None

    hide_completed = (
        standard_view_id is not None
        and standard_view_id != ALL_VIEW_ID
        and completed_id is not None
    )

    result: list[Task] = []
    for task in tasks:
        if task.is_recurring:
            continue
        if hide_completed and task.status == completed_id:
            continue
        if standard_view_id == TODAY_VIEW_ID and task.date != today_str:
            continue
        if project_target is not None and task.list_id != project_target:
            continue
        if filters.project_ids and task.list_id not in filters.project_ids:
            continue
        if filters.priority and task.priority not in filters.priority:
            continue
        if filters.status and task.status not in filters.status:
            continue
        if filters.tags and not any(tag in filters.tags for tag in task.tags):
            continue
        if needle and needle not in task.title.lower():
            continue
        result.append(task)
    return result


def _date_key(task: Task) -> date:
    if not task.date:
        return _UNDATED_SORT_KEY
    try:
        return date.fromisoformat(task.date)
    except ValueError:
        return _UNDATED_SORT_KEY


def sort_tasks(tasks: Iterable[Task], sort_by: SortBy) -> list[Task]:
    """Stable sort; equal keys keep their input order."""
    sort_by = SortBy.coerce(sort_by)
    if sort_by is SortBy.TITLE:
        return sorted(tasks, key=lambda t: collation_key(t.title))
    if sort_by is SortBy.PRIORITY:
        return sorted(tasks, key=lambda t: t.priority.rank)
    return sorted(tasks, key=_date_key)


def effective_group_by(config: ViewConfig) -> GroupBy:
    """Grouping actually applied; a kanban board always has columns."""
    group_by = GroupBy.coerce(config.group_by)
    if Layout.coerce(config.layout) is Layout.KANBAN and group_by is GroupBy.NONE:
        return GroupBy.STATUS
    return group_by


def timeframe_bucket(task_date: str | None, today: date) -> str:
    """Classify a do-date relative to today."""
    if not task_date:
        return "later"
    try:
        delta = (date.fromisoformat(task_date) - today).days
    except ValueError:
        return "later"
    if delta < 0:
        return "overdue"
    if delta == 0:
        return "today"
    if delta == 1:
        return "tomorrow"
    if delta <= 7:
        return "this_week"
    if delta <= 14:
        return "next_week"
    return "later"


def _bucket_by(
    tasks: Iterable[Task],
    keys: Iterable[str],
    key_of: Callable[[Task], str],
    *,
    with_fallback: bool,
) -> Projection:
    groups: Projection = {key: [] for key in keys}
    if with_fallback:
        groups.pop(FALLBACK_BUCKET, None)
        groups[FALLBACK_BUCKET] = []
    for task in tasks:
        key = key_of(task)
        if key in groups and key != FALLBACK_BUCKET:
            groups[key].append(task)
        elif with_fallback:
            groups[FALLBACK_BUCKET].append(task)
        else:
            raise AssertionError(f"Task {task.id} has no bucket for key {key!r}")
    return groups


def group_tasks(
    tasks: Sequence[Task],
    group_by: GroupBy,
    *,
    statuses: Sequence[StatusDef] = (),
    projects: Sequence[Project] = (),
    today: date | None = None,
) -> Projection:
    """Partition already sorted tasks into ordered buckets.

    Every known bucket is present even when empty. Status and project
    grouping end with a ``fallback`` bucket for ids that match nothing.
    """
    group_by = GroupBy.coerce(group_by)

    if group_by is GroupBy.STATUS:
        return _bucket_by(
            tasks, (s.id for s in statuses), lambda t: t.status, with_fallback=True
        )
    if group_by is GroupBy.PROJECT:
        return _bucket_by(
            tasks, (p.id for p in projects), lambda t: t.list_id, with_fallback=True
        )
    if group_by is GroupBy.PRIORITY:
        return _bucket_by(
            tasks,
            (p.value for p in _PRIORITY_BUCKETS),
            lambda t: t.priority.value,
            with_fallback=False,
        )
    if group_by is GroupBy.TIMEFRAME:
        reference = today or date.today()
        return _bucket_by(
            tasks,
            TIMEFRAME_BUCKETS,
            lambda t: timeframe_bucket(t.date, reference),
            with_fallback=False,
        )
    return {ALL_BUCKET: list(tasks)}


def project_tasks(
    tasks: Iterable[Task],
    config: ViewConfig,
    standard_view_id: str | None = None,
    completed_id: str | None = None,
    *,
    statuses: Sequence[StatusDef] = (),
    projects: Sequence[Project] = (),
    search: str | None = None,
    today: date | None = None,
) -> Projection:
    """Run the full pipeline for one view.

    Args:
        tasks: Full task collection
        config: View configuration
        standard_view_id: Built-in view id, or None for a custom view
        completed_id: Completed status id (derived from ``statuses`` if None)
        statuses: Known statuses, in column order
        projects: Known projects, in list order
        search: Case-insensitive title substring
        today: Capture date used by the "hoy" view and timeframe buckets

    Returns:
        Ordered mapping of bucket key to ordered tasks
    """
    if completed_id is None:
        completed_id = completed_status_id(statuses)

    visible = filter_tasks(
        tasks,
        config,
        standard_view_id,
        completed_id=completed_id,
        search=search,
        today=today,
    )
    ordered = sort_tasks(visible, config.sort_by)
    return group_tasks(
        ordered,
        effective_group_by(config),
        statuses=statuses,
        projects=projects,
        today=today,
    )


def reclassify(
    tasks: Sequence[Task],
    task_id: str,
    dimension: GroupBy,
    target_key: str,
) -> list[Task]:
    """Move a task into another bucket by rewriting its grouping field.

    Returns a new list; an unknown ``task_id`` yields an unchanged copy.

    Raises:
        UsageError: If ``dimension`` has no backing field (none/timeframe)
        ValidationError: If a priority target is not a priority
    """
    dimension = GroupBy.coerce(dimension)
    field_name = _RECLASSIFY_FIELDS.get(dimension)
    if field_name is None:
        raise UsageError(f"Cannot reclassify tasks under grouping '{dimension.value}'")

    value = Priority.parse(target_key) if dimension is GroupBy.PRIORITY else str(target_key)
    return [
        replace(task, **{field_name: value}) if task.id == task_id else task
        for task in tasks
    ]


def toggle_completed(
    tasks: Sequence[Task],
    task_id: str,
    statuses: Sequence[StatusDef],
) -> list[Task]:
    """Flip a task between the completed status and the first open one."""
    done_id = completed_status_id(statuses)
    open_id = open_status_id(statuses)
    if done_id is None:
        return list(tasks)

    result: list[Task] = []
    for task in tasks:
        if task.id == task_id:
            new_status = (open_id or task.status) if task.status == done_id else done_id
            task = replace(task, status=new_status)
        result.append(task)
    return result
