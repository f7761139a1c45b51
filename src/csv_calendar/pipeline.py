from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
import logging
from typing import Any

from csv_calendar.errors import ErrorKind, EventRowError
from csv_calendar.events import (
    ALL_DAY_LITERAL,
    DEFAULT_DURATION_MIN,
    EndRule,
    is_all_day_row,
    resolve_end,
    resolve_start,
)
from csv_calendar.timeutil import format_date, format_time, load_zone

logger = logging.getLogger(__name__)

EventRow = Mapping[str, str | None]

SUBJECT = "Subject"
START_DATE = "Start Date"
START_TIME = "Start Time"
END_DATE = "End Date"
END_TIME = "End Time"
DURATION = "Duration"
TIME_ZONE = "Time Zone"
DESCRIPTION = "Description"
REMINDER_TIME = "Reminder Time"
UID = "UID"
CATEGORIES = "Categories"
LOCATION = "Location"
URL = "URL"


@dataclass(frozen=True)
class EventDescriptor:
    start: datetime
    end: datetime
    all_day: bool
    summary: str
    end_rule: EndRule
    description: str | None = None
    id: str | None = None
    timezone: str | None = None
    reminder: str | None = None
    categories: tuple[str, ...] = ()
    location: str | None = None
    url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "start_date": format_date(self.start),
            "start_time": format_time(self.start),
            "end_date": format_date(self.end),
            "end_time": format_time(self.end),
            "all_day": self.all_day,
            "summary": self.summary,
            "end_rule": str(self.end_rule),
            "description": self.description,
            "id": self.id,
            "timezone": self.timezone,
            "reminder": self.reminder,
            "categories": list(self.categories),
            "location": self.location,
            "url": self.url,
        }


@dataclass(frozen=True)
class RowDiagnostic:
    row_number: int
    subject: str
    message: str
    kind: ErrorKind | None = None

    def render(self) -> str:
        if self.kind is None:
            return f'Warning for row {self.row_number} (Subject: "{self.subject}"): {self.message}'
        return f'Error processing row {self.row_number} (Subject: "{self.subject}"): {self.message}'


@dataclass(frozen=True)
class BatchResult:
    events: list[EventDescriptor]
    errors: list[RowDiagnostic] = field(default_factory=list)
    warnings: list[RowDiagnostic] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        return 2 if self.errors else 0


def _text(row: EventRow, key: str) -> str:
    value = row.get(key)
    if value is None:
        return ""
    return value.strip()


def _optional(row: EventRow, key: str) -> str | None:
    return _text(row, key) or None


def resolve_row(
    row: EventRow,
    *,
    default_duration_min: int = DEFAULT_DURATION_MIN,
    all_day_literal: str = ALL_DAY_LITERAL,
) -> tuple[EventDescriptor, str | None]:
    """Resolve one row into a descriptor plus an optional non-fatal warning.

    Raises EventRowError subclasses for any row-level problem.
    """
    timezone_name = _text(row, TIME_ZONE) or None
    tz = load_zone(timezone_name) if timezone_name else None

    all_day = is_all_day_row(_text(row, START_TIME), _text(row, END_TIME), literal=all_day_literal)
    start = resolve_start(_text(row, START_DATE), _text(row, START_TIME), all_day, tz=tz)
    resolved_end = resolve_end(
        _text(row, END_DATE),
        _text(row, END_TIME),
        start,
        all_day,
        _text(row, DURATION),
        default_duration_min=default_duration_min,
        all_day_literal=all_day_literal,
    )

    categories = tuple(part.strip() for part in _text(row, CATEGORIES).split(",") if part.strip())
    descriptor = EventDescriptor(
        start=start,
        end=resolved_end.instant,
        all_day=all_day,
        summary=_text(row, SUBJECT),
        end_rule=resolved_end.rule,
        description=_optional(row, DESCRIPTION),
        id=_optional(row, UID),
        timezone=timezone_name,
        reminder=_optional(row, REMINDER_TIME),
        categories=categories,
        location=_optional(row, LOCATION),
        url=_optional(row, URL),
    )
    return descriptor, resolved_end.warning


def generate_events(
    rows: Iterable[EventRow],
    *,
    default_duration_min: int = DEFAULT_DURATION_MIN,
    all_day_literal: str = ALL_DAY_LITERAL,
) -> BatchResult:
    """Resolve every row, skipping and reporting rows that fail.

    Output order follows input order. A failing row never aborts the batch.
    """
    events: list[EventDescriptor] = []
    errors: list[RowDiagnostic] = []
    warnings: list[RowDiagnostic] = []
    row_count = 0

    logger.info("event_batch_started")
    for row_number, row in enumerate(rows, start=1):
        row_count = row_number
        subject = _text(row, SUBJECT)
        try:
            descriptor, warning = resolve_row(
                row,
                default_duration_min=default_duration_min,
                all_day_literal=all_day_literal,
            )
        except EventRowError as exc:
            diagnostic = RowDiagnostic(
                row_number=row_number,
                subject=subject,
                message=str(exc),
                kind=exc.kind,
            )
            errors.append(diagnostic)
            logger.debug("event_row_failed row=%s kind=%s", row_number, exc.kind)
            logger.error("%s", diagnostic.render())
            continue

        if warning is not None:
            diagnostic = RowDiagnostic(row_number=row_number, subject=subject, message=warning)
            warnings.append(diagnostic)
            logger.warning("%s", diagnostic.render())
        events.append(descriptor)

    logger.info(
        "event_batch_finished rows=%s resolved=%s skipped=%s warnings=%s",
        row_count,
        len(events),
        len(errors),
        len(warnings),
    )
    return BatchResult(events=events, errors=errors, warnings=warnings)
