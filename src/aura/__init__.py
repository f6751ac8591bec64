"""aura - quick task capture and task list views."""

__version__ = "0.1.0"
