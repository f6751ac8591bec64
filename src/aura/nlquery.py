"""Quick capture: extract a due date and category from free text.

The recognised vocabulary is Spanish. Matching runs on an accent-folded copy
of the input, so "miércoles"/"miercoles" and "mañana"/"manana" behave alike,
and matched spans are cut from the original text.

Rules are tried in a fixed order and the first hit wins:

1. ``mañana`` -> capture date + 1 (every occurrence is removed)
2. ``hoy`` -> capture date (every occurrence is removed)
3. weekday name -> next occurrence strictly after the capture date
4. ``20 de octubre`` / ``30 junio`` / ``30/06`` / ``30/06/2027`` /
   ``30/06/27`` -> that day; without a written year a date already past
   rolls to next year, and a rolled 29 February becomes 1 March
"""

import re
import unicodedata
from datetime import date, timedelta
from typing import Iterator

from aura.models import DraftTask, ParsedText, TaskType
from aura.text_folding import fold_diacritics

_LEADING_PREPOSITION = r"(?:(?:para\s+el|para|el|de)\s+)?"

_WEEKDAYS = ("lunes", "martes", "miercoles", "jueves", "viernes", "sabado", "domingo")

_MONTHS = (
    "enero",
    "febrero",
    "marzo",
    "abril",
    "mayo",
    "junio",
    "julio",
    "agosto",
    "septiembre",
    "octubre",
    "noviembre",
    "diciembre",
)

_TOMORROW_RE = re.compile(rf"\b{_LEADING_PREPOSITION}manana\b", re.IGNORECASE)
_TODAY_RE = re.compile(rf"\b{_LEADING_PREPOSITION}hoy\b", re.IGNORECASE)
_WEEKDAY_RE = re.compile(
    rf"\b{_LEADING_PREPOSITION}(?P<weekday>{'|'.join(_WEEKDAYS)})\b",
    re.IGNORECASE,
)
_EXPLICIT_DATE_RE = re.compile(
    rf"\b{_LEADING_PREPOSITION}(?P<day>\d{{1,2}})"
    r"(?:\s*/\s*(?P<month_num>\d{1,2})(?:\s*/\s*(?P<year>\d{4}|\d{2}))?(?!/)"
    rf"|\s*(?:de\s+)?(?P<month_name>{'|'.join(_MONTHS)}))\b",
    re.IGNORECASE,
)

_WHITESPACE_RE = re.compile(r"\s+")
_TRAILING_PREPOSITION_RE = re.compile(r"\s+(?:el|para|en|de)$", re.IGNORECASE)
_SEGMENT_SPLIT_RE = re.compile(r";|\s/\s")

# Ordered: the first category with a matching substring wins.
_TYPE_TRIGGERS: tuple[tuple[TaskType, tuple[str, ...]], ...] = (
    (TaskType.CALL, ("llamar", "telefono")),
    (TaskType.SHOPPING, ("comprar", "ir a ")),
    (TaskType.PAYMENT, ("pagar", "factura")),
    (TaskType.EMAIL, ("email", "correo")),
    (TaskType.EVENT, ("concierto", "fiesta", "boda")),
)


def _remove_spans(text: str, spans: list[tuple[int, int]]) -> str:
    pieces: list[str] = []
    cursor = 0
    for start, end in spans:
        pieces.append(text[cursor:start])
        cursor = end
    pieces.append(text[cursor:])
    return " ".join(pieces)


def _clean_title(text: str) -> str:
    title = _WHITESPACE_RE.sub(" ", text).strip()
    return _TRAILING_PREPOSITION_RE.sub("", title, count=1)


def _next_weekday(today: date, weekday: int) -> date:
    diff = weekday - today.weekday()
    if diff <= 0:
        diff += 7
    return today + timedelta(days=diff)


def _resolve_explicit_date(match: re.Match, today: date) -> date | None:
    day = int(match.group("day"))
    if match.group("month_name"):
        month = _MONTHS.index(match.group("month_name").lower()) + 1
    else:
        month = int(match.group("month_num"))

    year_text = match.group("year")
    if not year_text:
        year = today.year
    elif len(year_text) == 2:
        year = 2000 + int(year_text)
    else:
        year = int(year_text)

    try:
        target = date(year, month, day)
    except ValueError:
        return None
    if year_text or target >= today:
        return target

    try:
        return target.replace(year=today.year + 1)
    except ValueError:
        # 29 February rolled into a common year
        return date(today.year + 1, 3, 1)


def parse_date_from_text(text: str, today: date | None = None) -> ParsedText:
    """Extract the first recognised date phrase from ``text``.

    Args:
        text: Raw capture text
        today: Reference capture date (defaults to the local date)

    Returns:
        ParsedText with the phrase removed from the title. ``date`` is an
        ISO string, or None when nothing matched; the title may be empty
        when the input was only a date phrase.
    """
    today = today or date.today()
    source = unicodedata.normalize("NFC", text)
    folded = fold_diacritics(source)

    target: date | None = None
    spans: list[tuple[int, int]] = []

    relative = (
        (_TOMORROW_RE, today + timedelta(days=1)),
        (_TODAY_RE, today),
    )
    for pattern, resolved in relative:
        spans = [m.span() for m in pattern.finditer(folded)]
        if spans:
            target = resolved
            break

    if target is None:
        match = _WEEKDAY_RE.search(folded)
        if match:
            weekday = _WEEKDAYS.index(match.group("weekday").lower())
            target = _next_weekday(today, weekday)
            spans = [match.span()]

    if target is None:
        for match in _EXPLICIT_DATE_RE.finditer(folded):
            resolved = _resolve_explicit_date(match, today)
            if resolved is not None:
                target = resolved
                spans = [match.span()]
                break

    if target is None:
        return ParsedText(title=_clean_title(source), date=None)

    return ParsedText(
        title=_clean_title(_remove_spans(source, spans)),
        date=target.isoformat(),
    )


def classify_task_type(title: str) -> TaskType:
    """Infer the task category from keyword substrings."""
    lowered = fold_diacritics(unicodedata.normalize("NFC", title)).lower()
    for task_type, triggers in _TYPE_TRIGGERS:
        if any(trigger in lowered for trigger in triggers):
            return task_type
    return TaskType.NORMAL


def build_draft(segment: str, today: date) -> DraftTask:
    """Turn one capture segment into a draft task."""
    parsed = parse_date_from_text(segment, today)
    title = parsed.title or _WHITESPACE_RE.sub(" ", segment).strip()
    task_type = classify_task_type(title)
    return DraftTask(
        title=title,
        date=parsed.date or today.isoformat(),
        type=task_type,
        event_date=parsed.date if task_type is TaskType.EVENT else None,
    )


class DraftBatch:
    """Drafts for one capture line, parsed lazily on every iteration."""

    def __init__(self, text: str, today: date) -> None:
        self._segments = [s for s in _SEGMENT_SPLIT_RE.split(text) if s.strip()]
        self._today = today

    def __iter__(self) -> Iterator[DraftTask]:
        for segment in self._segments:
            yield build_draft(segment, self._today)

    def __len__(self) -> int:
        return len(self._segments)

    def __repr__(self) -> str:
        return f"DraftBatch(segments={len(self._segments)}, today={self._today.isoformat()})"


def parse_command(text: str, today: date | None = None) -> DraftBatch:
    """Split ``text`` on ';' or ' / ' and parse each item into a draft.

    Args:
        text: Raw capture text, possibly holding several items
        today: Capture date used for relative phrases and as default date

    Returns:
        DraftBatch yielding one DraftTask per non-blank segment, in order
    """
    return DraftBatch(text, today or date.today())
