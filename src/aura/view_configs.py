"""View configuration lookup with built-in defaults.

Configs live in a plain ``{view_id: ViewConfig}`` mapping owned by the
caller. Updates return a new mapping; nothing here writes to disk.
"""

from dataclasses import replace
from typing import Any, Mapping

from aura.errors import ValidationError
from aura.models import GroupBy, Layout, Priority, SortBy, ViewConfig
from aura.view_pipeline import ALL_VIEW_ID, PROJECT_VIEW_PREFIX, TODAY_VIEW_ID

DEFAULT_VIEW_CONFIGS: dict[str, dict[str, Any]] = {
    TODAY_VIEW_ID: {"layout": "list", "groupBy": "none", "sortBy": "priority"},
    ALL_VIEW_ID: {"layout": "list", "groupBy": "none", "sortBy": "date"},
}

_ENUM_FIELDS = {
    "layout": Layout,
    "group_by": GroupBy,
    "sort_by": SortBy,
}

_FILTER_DIMENSIONS = {
    "project": "project_ids",
    "priority": "priority",
    "status": "status",
    "tag": "tags",
}


def is_standard_view(view_id: str) -> bool:
    """True for built-in views ("hoy", "todas", "project_<id>")."""
    return view_id in DEFAULT_VIEW_CONFIGS or view_id.startswith(PROJECT_VIEW_PREFIX)


def default_view_config(view_id: str) -> ViewConfig:
    """Return a fresh default config; unknown views use the "todas" default."""
    payload = DEFAULT_VIEW_CONFIGS.get(view_id, DEFAULT_VIEW_CONFIGS[ALL_VIEW_ID])
    return ViewConfig.from_dict(payload)


def get_view_config(views: Mapping[str, ViewConfig], view_id: str) -> ViewConfig:
    """Return the stored config for a view, or its default."""
    stored = views.get(view_id)
    if stored is not None:
        return stored
    return default_view_config(view_id)


def update_view_config(
    views: Mapping[str, ViewConfig],
    view_id: str,
    **changes: Any,
) -> dict[str, ViewConfig]:
    """Return a new mapping with selected fields of one view replaced.

    Enum fields are validated strictly here since they come from the user
    directly; stale values on load are coerced instead.
    """
    invalid_fields = set(changes) - {"layout", "group_by", "sort_by", "filters", "name"}
    if invalid_fields:
        raise ValidationError(f"Invalid view fields: {', '.join(sorted(invalid_fields))}")

    normalized: dict[str, Any] = {}
    for key, value in changes.items():
        enum_cls = _ENUM_FIELDS.get(key)
        if enum_cls is not None:
            try:
                value = enum_cls(value)
            except ValueError:
                allowed = ", ".join(member.value for member in enum_cls)
                raise ValidationError(f"Invalid {key}: {value}. Expected one of: {allowed}")
        normalized[key] = value

    updated = dict(views)
    updated[view_id] = replace(get_view_config(views, view_id), **normalized)
    return updated


def reset_view_config(views: Mapping[str, ViewConfig], view_id: str) -> dict[str, ViewConfig]:
    """Return a new mapping with one view restored to its default."""
    updated = dict(views)
    updated[view_id] = default_view_config(view_id)
    return updated


def toggle_view_filter(
    views: Mapping[str, ViewConfig],
    view_id: str,
    dimension: str,
    value: str,
) -> dict[str, ViewConfig]:
    """Return a new mapping with ``value`` added to or removed from a filter."""
    field_name = _FILTER_DIMENSIONS.get(dimension)
    if field_name is None:
        allowed = ", ".join(_FILTER_DIMENSIONS)
        raise ValidationError(f"Invalid filter: {dimension}. Expected one of: {allowed}")

    item: Any = Priority.parse(value) if field_name == "priority" else value
    config = get_view_config(views, view_id)
    current = list(getattr(config.filters, field_name))
    if item in current:
        current.remove(item)
    else:
        current.append(item)

    updated = dict(views)
    updated[view_id] = replace(config, filters=replace(config.filters, **{field_name: current}))
    return updated
