"""Session state container for aura runtime."""

from dataclasses import dataclass, field
from datetime import date

from aura import capture_date
from aura.errors import UsageError
from aura.models import Profile, TaskStore, ViewConfig


@dataclass
class Session:
    """In-memory runtime state for one aura invocation."""

    profile_path: str | None = None
    profile: Profile | None = None
    tasks: TaskStore | None = None
    views: dict[str, ViewConfig] = field(default_factory=dict)

    def require_profile(self) -> Profile:
        """Return loaded profile or raise if missing."""
        if self.profile is None:
            raise UsageError("No profile loaded")
        return self.profile

    def require_tasks(self) -> TaskStore:
        """Return loaded task data or raise if missing."""
        if self.tasks is None:
            raise UsageError("No tasks loaded")
        return self.tasks

    def today(self) -> date:
        """Current capture date for the profile's timezone and day start."""
        prof = self.require_profile()
        return capture_date.get_current_capture_date(prof.timezone, prof.capture_day_start)
