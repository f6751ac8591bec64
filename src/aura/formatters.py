"""Text formatters for projected task views."""

from typing import Sequence

from aura.models import GroupBy, Layout, Project, StatusDef, Task
from aura.view_pipeline import FALLBACK_BUCKET, Projection

_TIMEFRAME_LABELS = {
    "overdue": "Overdue",
    "today": "Today",
    "tomorrow": "Tomorrow",
    "this_week": "This week",
    "next_week": "Next week",
    "later": "Later",
}


def bucket_label(
    key: str,
    group_by: GroupBy,
    statuses: Sequence[StatusDef],
    projects: Sequence[Project],
) -> str:
    """Human label for a bucket key."""
    if key == FALLBACK_BUCKET:
        return "Other"
    if group_by is GroupBy.STATUS:
        return next((s.name for s in statuses if s.id == key), key)
    if group_by is GroupBy.PROJECT:
        return next((p.name for p in projects if p.id == key), key)
    if group_by is GroupBy.TIMEFRAME:
        return _TIMEFRAME_LABELS.get(key, key)
    return key


def format_task_row(task: Task, id_width: int) -> str:
    """Render one task as a single line."""
    line = f"{task.id.ljust(id_width)}  {task.title}"
    details = [task.date or "no date", task.priority.value]
    if task.type.value != "normal":
        details.append(task.type.value)
    return f"{line}  [{', '.join(details)}]"


def format_projection(
    projection: Projection,
    group_by: GroupBy,
    layout: Layout,
    statuses: Sequence[StatusDef] = (),
    projects: Sequence[Project] = (),
) -> str:
    """Render a projection to CLI text.

    Empty buckets are listed only on kanban boards, where they are drop
    targets.
    """
    total_count = sum(len(tasks) for tasks in projection.values())
    if total_count == 0 and layout is not Layout.KANBAN:
        return "No tasks."

    id_width = max(
        (len(task.id) for tasks in projection.values() for task in tasks),
        default=0,
    )

    if group_by is GroupBy.NONE:
        rows = [format_task_row(task, id_width) for tasks in projection.values() for task in tasks]
        return "\n".join(rows)

    sections: list[str] = []
    for key, tasks in projection.items():
        if not tasks and layout is not Layout.KANBAN:
            continue
        lines = [f"{bucket_label(key, group_by, statuses, projects)} ({len(tasks)})"]
        if tasks:
            lines.extend(f"  {format_task_row(task, id_width)}" for task in tasks)
        else:
            lines.append("  (empty)")
        sections.append("\n".join(lines))

    return "\n\n".join(sections)
