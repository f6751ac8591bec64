"""Profile loading, creation and path mapping.

A profile is a JSON file naming the task and view files plus the settings
that decide what "today" means (timezone and capture day start). Status and
project lists are optional and default to the built-in ones.
"""

import json
import re
import unicodedata
from datetime import time as time_type
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from aura.errors import ConfigError
from aura.models import DEFAULT_PROJECTS, DEFAULT_STATUSES, Profile

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
_SEPARATORS_RE = re.compile(r"[\\/]+")

_REQUIRED_FIELDS = ("data_path", "views_path", "timezone", "capture_day_start")
_PATH_FIELDS = ("data_path", "views_path")


def _package_root() -> Path:
    return Path(__file__).resolve().parent


def _string_field(profile: dict[str, Any], field_name: str) -> str:
    value = profile.get(field_name)
    if not isinstance(value, str) or not value:
        raise ConfigError(f"{field_name} must be a non-empty string")
    return value


def _validate_id_list(profile: dict[str, Any], field_name: str) -> None:
    """Check an optional ordered list of ``{id, name}`` objects."""
    if field_name not in profile:
        return

    entries = profile[field_name]
    if not isinstance(entries, list) or not entries:
        raise ConfigError(f"{field_name} must be a non-empty array")

    seen: set[str] = set()
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ConfigError(f"{field_name}[{i}] must be an object")
        entry_id = entry.get("id")
        if not isinstance(entry_id, str) or not entry_id:
            raise ConfigError(f"{field_name}[{i}].id must be a non-empty string")
        if entry_id in seen:
            raise ConfigError(f"{field_name} has duplicate id: {entry_id}")
        seen.add(entry_id)
        if "isCompleted" in entry and not isinstance(entry["isCompleted"], bool):
            raise ConfigError(f"{field_name}[{i}].isCompleted must be a boolean")


def map_path(path: str, profile_dir: str | None = None) -> str:
    """Resolve a profile path to an absolute path string.

    ``~/...`` is the home directory and ``@/...`` the package directory.
    Absolute paths are kept. Relative paths need ``profile_dir``.
    """
    text = unicodedata.normalize("NFC", path)
    if "\0" in text:
        raise ConfigError("Path cannot contain NUL bytes")

    if text.startswith("@"):
        suffix = _SEPARATORS_RE.sub("/", text[1:]).lstrip("/")
        return str((_package_root() / suffix).resolve())

    candidate = Path(_SEPARATORS_RE.sub("/", text)).expanduser()
    if candidate.is_absolute():
        return str(candidate.resolve())
    if profile_dir is None:
        raise ConfigError(
            "Relative profile paths are not supported. "
            "Use an absolute path or start with '~/' or '@/'."
        )
    return str((Path(profile_dir) / candidate).resolve())


def parse_time(time_str: str) -> tuple[int, int, int]:
    """Parse ``HH:MM`` or ``HH:MM:SS`` into (hours, minutes, seconds).

    Raises:
        ConfigError: On a malformed or out-of-range time
    """
    match = _TIME_RE.match(time_str)
    if not match:
        raise ConfigError(f"Invalid time format: {time_str}. Expected HH:MM or HH:MM:SS")

    hours, minutes, seconds = (int(part or 0) for part in match.groups())
    try:
        time_type(hours, minutes, seconds)
    except ValueError as e:
        raise ConfigError(f"Time out of range: {time_str}. Expected 00:00 to 23:59:59") from e
    return hours, minutes, seconds


def validate_profile(profile: dict[str, Any]) -> None:
    """Raise ConfigError unless ``profile`` is a usable profile payload."""
    if not isinstance(profile, dict):
        raise ConfigError("Profile must be a JSON object")

    missing = [name for name in _REQUIRED_FIELDS if name not in profile]
    if missing:
        raise ConfigError(f"Profile missing required fields: {', '.join(missing)}")

    for field_name in _REQUIRED_FIELDS:
        _string_field(profile, field_name)
    if profile.get("log_path") is not None:
        _string_field(profile, "log_path")

    _validate_id_list(profile, "statuses")
    _validate_id_list(profile, "projects")

    try:
        parse_time(profile["capture_day_start"])
    except ConfigError as e:
        raise ConfigError(f"Invalid capture_day_start: {e}") from e

    timezone_str = profile["timezone"]
    try:
        ZoneInfo(timezone_str)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigError(f"Invalid timezone: {timezone_str}") from e


def _map_profile_paths(raw: dict[str, Any], profile_dir: str) -> None:
    for field_name in _PATH_FIELDS:
        raw[field_name] = map_path(raw[field_name], profile_dir)
    if raw.get("log_path"):
        raw["log_path"] = map_path(raw["log_path"], profile_dir)


def load_profile(path: str) -> Profile:
    """Load and validate a profile, mapping its paths to absolute ones.

    Raises:
        FileNotFoundError: If the profile file does not exist
        ConfigError: If the file is not valid JSON or not a valid profile
    """
    profile_path = Path(map_path(path))
    if not profile_path.exists():
        raise FileNotFoundError(
            f"Profile not found: {profile_path}\n"
            "Use 'new' command to create a profile"
        )

    try:
        with open(profile_path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in profile: {e}") from e

    validate_profile(raw)
    _map_profile_paths(raw, str(profile_path.parent))
    return Profile.from_dict(raw)


def create_profile(path: str) -> Profile:
    """Write a new profile with defaults next to its data files.

    The timezone is the system one; tasks and views live beside the profile
    as ``tasks.json`` and ``views.json``; the capture day starts at 04:00.
    """
    profile_path = Path(map_path(path))
    if profile_path.exists():
        raise ConfigError(f"Profile already exists: {profile_path}")

    profile_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        from tzlocal import get_localzone
        system_timezone = str(get_localzone())
    except Exception as e:
        print(f"WARNING: Could not detect system timezone ({e})")
        print("Falling back to UTC. Edit the profile JSON to set your timezone manually.")
        system_timezone = "UTC"

    raw = {
        "data_path": "./tasks.json",
        "views_path": "./views.json",
        "timezone": system_timezone,
        "capture_day_start": "04:00:00",
        "statuses": [s.to_dict() for s in DEFAULT_STATUSES],
        "projects": [p.to_dict() for p in DEFAULT_PROJECTS],
    }

    with open(profile_path, "w", encoding="utf-8") as f:
        json.dump(raw, f, indent=2, ensure_ascii=False)

    _map_profile_paths(raw, str(profile_path.parent))
    return Profile.from_dict(raw)
