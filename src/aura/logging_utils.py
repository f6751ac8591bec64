"""Structured event logging for aura.

Events are emitted as one-line JSON on the ``aura`` logger and rendered by
``StructuredTextFormatter`` when a log file is configured.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

_LOG_PATH_FIELDS = {
    "profile_file",
    "data_file",
    "views_file",
    "log_file",
}


class StructuredTextFormatter(logging.Formatter):
    """Render log records as ``=== event ===`` blocks of ``key: value`` lines."""

    EVENT_KEY_ORDER: dict[str, list[str]] = {
        "profile_created": ["ts", "level", "profile_file"],
        "tasks_captured": ["ts", "level", "count", "task_ids", "text"],
        "view_projected": [
            "ts",
            "level",
            "view_id",
            "group_by",
            "sort_by",
            "buckets",
            "tasks",
        ],
        "view_updated": [
            "ts",
            "level",
            "view_id",
            "reset",
            "layout",
            "group_by",
            "sort_by",
            "filter",
            "value",
        ],
        "task_reclassified": ["ts", "level", "task_id", "dimension", "target", "view_id"],
        "task_toggled": ["ts", "level", "task_id", "status"],
        "command_failed": ["ts", "level", "command", "error_type", "error"],
    }

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        # Blank line between entries, none after the last one.
        self._first_entry = True

    @staticmethod
    def _format_value(value: Any) -> str:
        return str(value).replace("\n", "\\n")

    def _ordered_keys(self, event_name: str, data: dict[str, Any]) -> list[str]:
        preferred = self.EVENT_KEY_ORDER.get(event_name, ["ts", "level", "logger"])
        preferred_present = [k for k in preferred if data.get(k) is not None]
        remaining = sorted(k for k in data if k not in preferred and data[k] is not None)
        return preferred_present + remaining

    def format(self, record: logging.LogRecord) -> str:
        base: dict[str, Any] = {
            "ts": datetime.now().astimezone().isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }

        message = record.getMessage()
        parsed = None
        if message.startswith("{") and message.endswith("}"):
            try:
                parsed = json.loads(message)
            except ValueError:
                parsed = None

        if isinstance(parsed, dict):
            base.update(parsed)
        else:
            base["event"] = record.name
            base["message"] = message

        event_name = str(base.pop("event", record.name))
        lines = [f"=== {event_name} ==="]
        for key in self._ordered_keys(event_name, base):
            lines.append(f"{key}: {self._format_value(base[key])}")

        if record.exc_info:
            lines.append("traceback:")
            lines.append(self.formatException(record.exc_info))

        body = "\n".join(lines)
        if self._first_entry:
            self._first_entry = False
            return body
        return "\n" + body


def _to_log_safe(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, dict):
        return {str(k): _to_log_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_to_log_safe(v) for v in value]
    return str(value)


def summarize_text(text: Any) -> str:
    """Collapse whitespace so capture text fits on one log line."""
    if text is None:
        return ""
    return " ".join(str(text).split())


def log_event(event: str, level: int = logging.INFO, **fields: Any) -> None:
    """Emit a structured log event on the ``aura`` logger.

    Path-valued fields (``profile_file``, ``data_file``...) are logged as
    absolute paths.
    """
    payload: dict[str, Any] = {
        "ts": datetime.now().astimezone().isoformat(),
        "event": event,
    }
    for key, value in fields.items():
        if key in _LOG_PATH_FIELDS and isinstance(value, str):
            value = str(Path(value).expanduser().resolve())
        payload[key] = _to_log_safe(value)
    logging.getLogger("aura").log(
        level, json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    )


def setup_logging(log_file: Optional[str] = None) -> None:
    """Log to ``log_file`` if given, otherwise silence logging."""
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(str(log_path), encoding="utf-8")
        handler.setFormatter(StructuredTextFormatter())
        logging.basicConfig(level=logging.INFO, handlers=[handler], force=True)
    else:
        logging.disable(logging.CRITICAL)
