from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from enum import StrEnum
import re

from csv_calendar.config import DEFAULT_SETTINGS
from csv_calendar.errors import ComponentError, EventRowError, FormatError, OrderingError
from csv_calendar.timeutil import (
    add_minutes,
    build_instant,
    is_time_of_day,
    next_midnight,
    parse_date,
    parse_time_of_day,
)

DEFAULT_DURATION_MIN = int(DEFAULT_SETTINGS["default_duration_min"])
ALL_DAY_LITERAL = DEFAULT_SETTINGS["all_day_literal"]

_INTEGER = re.compile(r"[+-]?\d+")


class EndRule(StrEnum):
    ALL_DAY_NEXT_DAY = "all_day_next_day"
    ALL_DAY_END_DATE = "all_day_end_date"
    EXPLICIT = "explicit"
    DURATION = "duration"
    DEFAULT_DURATION = "default_duration"


@dataclass(frozen=True)
class ResolvedEnd:
    instant: datetime
    rule: EndRule
    warning: str | None = None


def is_all_day_row(start_time: str, end_time: str, *, literal: str = ALL_DAY_LITERAL) -> bool:
    """A row is all-day when Start Time is blank or either time field holds the literal."""
    if not start_time.strip():
        return True
    needle = literal.casefold()
    return needle in start_time.casefold() or needle in end_time.casefold()


def resolve_start(
    date_text: str,
    time_text: str,
    is_all_day: bool,
    *,
    tz: tzinfo | None = None,
) -> datetime:
    """Resolve the start instant of a row.

    All-day rows start at midnight of their date and ignore ``time_text``. Timed
    rows need a strict HH:MM or HH:MM:SS time. When ``tz`` is given the wall-clock
    reading is placed in that zone as-is.
    """
    if not date_text:
        raise FormatError("'Start Date' cannot be empty.")

    if is_all_day:
        try:
            return build_instant(parse_date(date_text), source=date_text, tz=tz)
        except EventRowError as exc:
            raise exc.with_context("All Day event") from exc

    if not time_text:
        raise FormatError("'Start Time' cannot be empty.")
    if not is_time_of_day(time_text):
        raise FormatError(
            f"'Start Time' format is invalid: \"{time_text}\". "
            f'Expected HH:MM or HH:MM:SS, or "{ALL_DAY_LITERAL}".'
        )
    time_value = parse_time_of_day(time_text, "Start Time")

    try:
        date_value = parse_date(date_text)
    except EventRowError as exc:
        raise exc.with_context("Error parsing 'Start Date'") from exc

    return build_instant(date_value, time_value, source=f"{date_text} {time_text}", tz=tz)


def resolve_end(
    end_date_text: str | None,
    end_time_text: str | None,
    start: datetime,
    is_all_day: bool,
    duration_text: str | None = None,
    *,
    default_duration_min: int = DEFAULT_DURATION_MIN,
    all_day_literal: str = ALL_DAY_LITERAL,
) -> ResolvedEnd:
    """Resolve the end instant of a row relative to ``start``.

    Branches are tried in order and the first that applies wins:

    1. all-day with neither end date nor end time: midnight after the start date
    2. all-day with an end date: midnight after the end date (inclusive span)
    3. end date plus a clock end time: that instant, which may not precede start
    4. a duration in minutes from End Time, Duration or End Date, added to start
    5. nothing usable: ``default_duration_min`` after start, reported as a warning

    All-day rows with an End Time but no End Date fall through to 4 and 5.
    A clock End Time without an End Date is ignored in favour of 5. Explicit end
    instants reuse ``start.tzinfo`` so both ends share one zone.
    """
    if not isinstance(start, datetime):
        raise TypeError("start must be a datetime")

    end_date_text = end_date_text or ""
    end_time_text = end_time_text or ""
    if all_day_literal.casefold() in end_time_text.casefold():
        end_time_text = ""

    if is_all_day and not end_date_text and not end_time_text:
        return ResolvedEnd(next_midnight(start), EndRule.ALL_DAY_NEXT_DAY)

    if is_all_day and end_date_text:
        try:
            last_day = build_instant(parse_date(end_date_text), source=end_date_text, tz=start.tzinfo)
        except EventRowError as exc:
            raise exc.with_context("All Day event") from exc
        if last_day.date() < start.date():
            raise OrderingError("All Day event: End date cannot be before the start date.")
        return ResolvedEnd(next_midnight(last_day), EndRule.ALL_DAY_END_DATE)

    if end_date_text and is_time_of_day(end_time_text):
        time_value = parse_time_of_day(end_time_text, "End Time")
        try:
            date_value = parse_date(end_date_text)
        except EventRowError as exc:
            raise exc.with_context("Error parsing 'End Date'") from exc

        end = build_instant(
            date_value,
            time_value,
            source=f"{end_date_text} {end_time_text}",
            tz=start.tzinfo,
        )
        if end < start:
            raise OrderingError("End date and time cannot be before the start date and time.")
        return ResolvedEnd(end, EndRule.EXPLICIT)

    source = _duration_source(end_date_text, end_time_text, duration_text)
    if source is not None:
        field_name, text = source
        minutes = parse_duration_minutes(text, field_name)
        return ResolvedEnd(add_minutes(start, minutes), EndRule.DURATION)

    if end_time_text and not is_time_of_day(end_time_text):
        raise FormatError(
            f"'End Time' format is invalid: \"{end_time_text}\". "
            f'Expected HH:MM or HH:MM:SS, a number of minutes, or "{all_day_literal}".'
        )

    warning = (
        f"No usable end date/time or duration; defaulting to {default_duration_min} minutes after start."
    )
    return ResolvedEnd(
        add_minutes(start, default_duration_min),
        EndRule.DEFAULT_DURATION,
        warning=warning,
    )


def _duration_source(
    end_date_text: str,
    end_time_text: str,
    duration_text: str | None,
) -> tuple[str, str] | None:
    if _INTEGER.fullmatch(end_time_text):
        return "End Time", end_time_text
    if duration_text and duration_text.strip():
        return "Duration", duration_text.strip()
    if _INTEGER.fullmatch(end_date_text):
        return "End Date", end_date_text
    return None


def parse_duration_minutes(text: str, field_name: str = "Duration") -> int:
    message = (
        f"Invalid duration value from '{field_name}' ({text}). "
        "Must be a non-negative number of minutes."
    )
    if not _INTEGER.fullmatch(text):
        raise FormatError(message)

    minutes = int(text)
    if minutes < 0:
        raise ComponentError(message)
    return minutes
