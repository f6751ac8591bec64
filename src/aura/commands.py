"""Business command logic for aura.

Each command runs the pure capture/view functions on session state, then
saves an explicit snapshot of whatever changed.
"""

from dataclasses import replace

from aura import formatters, nlquery, storage, view_configs
from aura.errors import UsageError, ValidationError
from aura.logging_utils import log_event, summarize_text
from aura.models import DEFAULT_STATUS_ID, GroupBy, Priority, Task
from aura.session import Session
from aura.view_pipeline import (
    ALL_VIEW_ID,
    Projection,
    effective_group_by,
    open_status_id,
    project_tasks,
    reclassify,
    toggle_completed,
)


def _save_tasks(session: Session) -> None:
    storage.save_tasks(session.require_profile().data_path, session.require_tasks())


def _save_views(session: Session) -> None:
    storage.save_views(session.require_profile().views_path, session.views)


def _require_task(session: Session, task_id: str) -> Task:
    task = session.require_tasks().find(task_id)
    if task is None:
        raise ValidationError(f"Task not found: {task_id}")
    return task


def capture_tasks(session: Session, text: str) -> list[Task]:
    """Parse quick-capture text and append the resulting tasks."""
    if not text.strip():
        raise UsageError("Nothing to add")

    status = open_status_id(session.require_profile().statuses) or DEFAULT_STATUS_ID
    drafts = [replace(draft, status=status) for draft in nlquery.parse_command(text, session.today())]
    created = session.require_tasks().add_drafts(drafts)
    _save_tasks(session)

    log_event(
        "tasks_captured",
        count=len(created),
        task_ids=[task.id for task in created],
        text=summarize_text(text),
    )
    return created


def cmd_add(session: Session, text: str) -> str:
    """Add one or more tasks from free text."""
    created = capture_tasks(session, text)
    id_width = max(len(task.id) for task in created)
    lines = [f"Added {len(created)} task(s):"]
    lines.extend(f"  {formatters.format_task_row(task, id_width)}" for task in created)
    return "\n".join(lines)


def project_view(session: Session, view_id: str, search: str | None = None) -> Projection:
    """Return the grouped projection of all tasks for a view."""
    prof = session.require_profile()
    config = view_configs.get_view_config(session.views, view_id)
    standard_view_id = view_id if view_configs.is_standard_view(view_id) else None

    projection = project_tasks(
        session.require_tasks().tasks,
        config,
        standard_view_id,
        statuses=prof.statuses,
        projects=prof.projects,
        search=search,
        today=session.today(),
    )
    log_event(
        "view_projected",
        view_id=view_id,
        group_by=effective_group_by(config).value,
        sort_by=config.sort_by.value,
        buckets=len(projection),
        tasks=sum(len(tasks) for tasks in projection.values()),
    )
    return projection


def cmd_list(session: Session, view_id: str = ALL_VIEW_ID, search: str | None = None) -> str:
    """Render a view as text."""
    prof = session.require_profile()
    config = view_configs.get_view_config(session.views, view_id)
    projection = project_view(session, view_id, search)
    return formatters.format_projection(
        projection,
        effective_group_by(config),
        config.layout,
        prof.statuses,
        prof.projects,
    )


def _validate_target(session: Session, dimension: GroupBy, target_key: str) -> str:
    prof = session.require_profile()
    if dimension is GroupBy.STATUS:
        if target_key not in {s.id for s in prof.statuses}:
            raise ValidationError(f"Unknown status: {target_key}")
    elif dimension is GroupBy.PROJECT:
        if target_key not in {p.id for p in prof.projects}:
            raise ValidationError(f"Unknown project: {target_key}")
    elif dimension is GroupBy.PRIORITY:
        return Priority.parse(target_key).value
    return target_key


def cmd_move(
    session: Session,
    task_id: str,
    target_key: str,
    view_id: str = ALL_VIEW_ID,
) -> str:
    """Move a task to another bucket of the view's active grouping."""
    config = view_configs.get_view_config(session.views, view_id)
    dimension = effective_group_by(config)
    if dimension in (GroupBy.NONE, GroupBy.TIMEFRAME):
        raise UsageError(
            f"View '{view_id}' is grouped by '{dimension.value}'; "
            "moving needs status, priority or project grouping"
        )

    _require_task(session, task_id)
    target_key = _validate_target(session, dimension, target_key)

    tasks_data = session.require_tasks()
    tasks_data.replace_all(reclassify(tasks_data.tasks, task_id, dimension, target_key))
    _save_tasks(session)

    log_event(
        "task_reclassified",
        task_id=task_id,
        dimension=dimension.value,
        target=target_key,
        view_id=view_id,
    )
    return f"Moved {task_id} to {dimension.value} '{target_key}'"


def cmd_done(session: Session, task_id: str) -> str:
    """Toggle a task between completed and open."""
    prof = session.require_profile()
    _require_task(session, task_id)

    tasks_data = session.require_tasks()
    tasks_data.replace_all(toggle_completed(tasks_data.tasks, task_id, prof.statuses))
    _save_tasks(session)

    new_status = _require_task(session, task_id).status
    log_event("task_toggled", task_id=task_id, status=new_status)
    return f"Task {task_id} is now '{new_status}'"


def cmd_view(
    session: Session,
    view_id: str,
    layout: str | None = None,
    group_by: str | None = None,
    sort_by: str | None = None,
    filter_toggle: tuple[str, str] | None = None,
    reset: bool = False,
) -> str:
    """Show, update or reset a view configuration."""
    if reset:
        if any(value is not None for value in (layout, group_by, sort_by, filter_toggle)):
            raise UsageError("Cannot combine --reset with other view settings")
        session.views = view_configs.reset_view_config(session.views, view_id)
        _save_views(session)
        log_event("view_updated", view_id=view_id, reset=True)
    else:
        changes = {
            key: value
            for key, value in (("layout", layout), ("group_by", group_by), ("sort_by", sort_by))
            if value is not None
        }
        if changes:
            session.views = view_configs.update_view_config(session.views, view_id, **changes)
            _save_views(session)
            log_event("view_updated", view_id=view_id, **changes)
        if filter_toggle is not None:
            dimension, value = filter_toggle
            session.views = view_configs.toggle_view_filter(session.views, view_id, dimension, value)
            _save_views(session)
            log_event("view_updated", view_id=view_id, filter=dimension, value=value)

    config = view_configs.get_view_config(session.views, view_id)
    return (
        f"View '{view_id}': layout={config.layout.value}, "
        f"group_by={config.group_by.value}, sort_by={config.sort_by.value}, "
        f"filters={config.filters.active_count()}"
    )
