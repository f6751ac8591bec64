"""Checks for task fields read back from the task file."""

from datetime import date

from aura.errors import ValidationError


def validate_date_format(date_str: str) -> None:
    """Check a stored task ``date`` or ``eventDate`` is a real ``YYYY-MM-DD`` day.

    Raises:
        ValidationError: For malformed text or impossible days like 2024-02-30
    """
    try:
        date.fromisoformat(date_str)
    except ValueError:
        raise ValidationError(
            f"Invalid date: {date_str}. Expected valid YYYY-MM-DD format"
        )
