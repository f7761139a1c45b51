from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
import re
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from csv_calendar.errors import ComponentError, FormatError, TimezoneError

_ISO_DATE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")
_YMD_SLASH_DATE = re.compile(r"(\d{4})/(\d{1,2})/(\d{1,2})")
_AMBIGUOUS_SLASH_DATE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")
TIME_PATTERN = re.compile(r"(\d{2}):(\d{2})(?::(\d{2}))?")

ACCEPTED_DATE_FORMATS = "YYYY-MM-DD, MM/DD/YYYY, DD/MM/YYYY, or YYYY/MM/DD"


@dataclass(frozen=True)
class CalendarDate:
    """Year, zero-based month and day as read from text; not checked against month length."""

    year: int
    month: int
    day: int


@dataclass(frozen=True)
class TimeOfDay:
    hours: int
    minutes: int
    seconds: int = 0


def parse_date(text: str) -> CalendarDate:
    """Parse YYYY-MM-DD, YYYY/MM/DD or D(D)/D(D)/YYYY into a CalendarDate.

    Slash dates with the year last are ambiguous. When the first group is above
    12 and the second is not, the text is read as DD/MM/YYYY; every other case is
    read as MM/DD/YYYY. Inputs such as "03/04/2025" therefore always mean March 4th
    even when April 3rd was intended.

    Raises FormatError when no shape matches and ComponentError when a slash
    date yields a month outside 1-12 or a day outside 1-31. YYYY-MM-DD values
    are not range-checked here; instant construction rejects impossible dates.
    """
    match = _ISO_DATE.fullmatch(text)
    if match:
        year, month, day = (int(group) for group in match.groups())
        return CalendarDate(year=year, month=month - 1, day=day)

    match = _YMD_SLASH_DATE.fullmatch(text)
    if match:
        year, month, day = (int(group) for group in match.groups())
        return _checked_date(text, year=year, month=month - 1, day=day)

    match = _AMBIGUOUS_SLASH_DATE.fullmatch(text)
    if match:
        first, second, year = (int(group) for group in match.groups())
        if first > 12 and second <= 12:
            return _checked_date(text, year=year, month=second - 1, day=first)
        return _checked_date(text, year=year, month=first - 1, day=second)

    raise FormatError(f'Unsupported date format: "{text}". Expected {ACCEPTED_DATE_FORMATS}.')


def _checked_date(text: str, *, year: int, month: int, day: int) -> CalendarDate:
    if not (0 <= month <= 11 and 1 <= day <= 31):
        raise ComponentError(f'Invalid month or day value in date: "{text}"')
    return CalendarDate(year=year, month=month, day=day)


def is_time_of_day(text: str) -> bool:
    """True when ``text`` has the HH:MM or HH:MM:SS shape (values not range-checked)."""
    return TIME_PATTERN.fullmatch(text) is not None


def parse_time_of_day(text: str, field_name: str = "Time") -> TimeOfDay:
    """Parse strict HH:MM or HH:MM:SS. Raises FormatError or ComponentError."""
    match = TIME_PATTERN.fullmatch(text)
    if match is None:
        raise FormatError(f"'{field_name}' format is invalid: \"{text}\". Expected HH:MM or HH:MM:SS.")

    hours = int(match.group(1))
    minutes = int(match.group(2))
    seconds = int(match.group(3) or 0)

    if not (0 <= hours <= 23 and 0 <= minutes <= 59 and 0 <= seconds <= 59):
        raise ComponentError(f"Invalid time components in '{text}'.")

    return TimeOfDay(hours=hours, minutes=minutes, seconds=seconds)


def build_instant(
    date_value: CalendarDate,
    time_value: TimeOfDay | None = None,
    *,
    source: str,
    tz: tzinfo | None = None,
) -> datetime:
    """Combine parsed parts into a datetime.

    ``source`` is the original input text, quoted in the ComponentError raised
    when the parts do not form a real date (e.g. February 30th).
    """
    time_value = time_value or TimeOfDay(hours=0, minutes=0)
    try:
        naive = datetime(
            date_value.year,
            date_value.month + 1,
            date_value.day,
            time_value.hours,
            time_value.minutes,
            time_value.seconds,
        )
    except ValueError as exc:
        raise ComponentError(
            f"Date components form an invalid date (e.g., Feb 30th): {source}"
        ) from exc
    return reinterpret_in_zone(naive, tz)


def reinterpret_in_zone(naive: datetime, tz: tzinfo | None) -> datetime:
    """Attach ``tz`` to a wall-clock reading without shifting it.

    This is the only place a naive reading becomes zone-aware; it must be applied
    once per instant.
    """
    if tz is None:
        return naive
    if naive.tzinfo is not None:
        raise ValueError("reinterpret_in_zone requires a naive datetime")
    return naive.replace(tzinfo=tz)


def next_midnight(instant: datetime) -> datetime:
    """Midnight starting the calendar day after ``instant``, in the same zone."""
    try:
        following = instant.date() + timedelta(days=1)
    except OverflowError as exc:
        raise ComponentError(f"No day follows {instant.date().isoformat()}; date is out of range.") from exc
    return datetime(following.year, following.month, following.day, tzinfo=instant.tzinfo)


def add_minutes(instant: datetime, minutes: int) -> datetime:
    """Add elapsed minutes to an instant.

    Aware instants are shifted through UTC so the result is exactly ``minutes``
    of elapsed time later, including across DST transitions.
    """
    try:
        delta = timedelta(minutes=minutes)
        if instant.tzinfo is None:
            return instant + delta
        return (instant.astimezone(timezone.utc) + delta).astimezone(instant.tzinfo)
    except OverflowError as exc:
        raise ComponentError(
            f"Adding {minutes} minutes to {instant.isoformat()} is out of the supported date range."
        ) from exc


def load_zone(identifier: str) -> ZoneInfo:
    """Return the ZoneInfo for an IANA identifier. Raises TimezoneError."""
    try:
        return ZoneInfo(identifier)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise TimezoneError(
            f'The timezone "{identifier}" is not a valid IANA Time Zone identifier. Error: {exc}'
        ) from exc


def validate_timezone(identifier: str) -> None:
    load_zone(identifier)


def format_date(instant: datetime) -> str:
    return instant.date().isoformat()


def format_time(instant: datetime) -> str:
    return instant.time().isoformat(timespec="seconds")
