"""Exceptions raised by aura commands, capture and storage.

The CLI catches ``AppError`` and prints ``Error: <message>``.
"""


class AppError(Exception):
    """Base class for errors the CLI reports without a traceback."""


class UsageError(ValueError, AppError):
    """A command that cannot run as asked, e.g. moving a task in an ungrouped view."""


class ValidationError(ValueError, AppError):
    """Bad task or view data: unknown ids, priorities, statuses or dates."""


class ConfigError(ValueError, AppError):
    """An unusable profile, such as a bad timezone or capture day start."""


class StorageError(AppError):
    """The task or view file could not be read or written."""
