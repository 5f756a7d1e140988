"""Date and time helpers for building icalBuddy query windows and durations."""
from datetime import datetime, time as dt_time, tzinfo
from typing import Optional

DATE_FORMAT = '%Y-%m-%d'
TIME_FORMAT = '%H:%M'
SECONDS_PER_DAY = 60 * 60 * 24


class FormatError(ValueError):
    """Raised when a date or time string does not match the expected format."""


def reformat(
    value: str,
    source_format: str = DATE_FORMAT,
    target_format: str = DATE_FORMAT
) -> str:
    """
    Reformat a date/time string from one strftime format to another.

    Args:
        value: Date/time string to reformat
        source_format: Format the value is written in (default: %Y-%m-%d)
        target_format: Format to output (default: %Y-%m-%d)

    Returns:
        Reformatted string

    Raises:
        FormatError: If the value does not match source_format
    """
    return _parse(value, source_format).strftime(target_format)


def days_to_seconds(days: int) -> int:
    """Number of seconds in the given number of days."""
    return days * SECONDS_PER_DAY


def start_of_week(date: str, tz: Optional[tzinfo] = None) -> str:
    """
    Return midnight of the Sunday on or before the given date.

    Args:
        date: Date in YYYY-MM-DD format
        tz: Timezone for the result (default: local timezone)

    Returns:
        Timestamp string like "2021-09-12 00:00:00 -0400"
    """
    seconds, dow = _epoch_and_weekday(date, tz)
    sunday = _from_timestamp(seconds - days_to_seconds(dow), tz)
    return _format_boundary(sunday, dt_time(0, 0, 0), tz)


def end_of_week(date: str, tz: Optional[tzinfo] = None) -> str:
    """
    Return 23:59:59 of the Saturday on or after the given date.

    Args:
        date: Date in YYYY-MM-DD format
        tz: Timezone for the result (default: local timezone)

    Returns:
        Timestamp string like "2021-09-18 23:59:59 -0400"
    """
    seconds, dow = _epoch_and_weekday(date, tz)
    saturday = _from_timestamp(seconds + days_to_seconds(6 - dow), tz)
    return _format_boundary(saturday, dt_time(23, 59, 59), tz)


def start_of_day(date: str, tz: Optional[tzinfo] = None) -> str:
    """Return midnight of the given YYYY-MM-DD date."""
    return _format_boundary(_parse(date, DATE_FORMAT), dt_time(0, 0, 0), tz)


def end_of_day(date: str, tz: Optional[tzinfo] = None) -> str:
    """Return 23:59:59 of the given YYYY-MM-DD date."""
    return _format_boundary(_parse(date, DATE_FORMAT), dt_time(23, 59, 59), tz)


def minutes_between(start: str, end: str) -> int:
    """
    Minutes between two HH:MM times on the same day.

    The result is negative when end is before start; times are not
    wrapped around midnight.

    Raises:
        FormatError: If either time is not HH:MM
    """
    delta = _parse(end, TIME_FORMAT) - _parse(start, TIME_FORMAT)
    return int(delta.total_seconds()) // 60


def to_12_hour(value: str) -> str:
    """Convert HH:MM to zero-padded 12-hour time with lowercase am/pm."""
    return reformat(value, TIME_FORMAT, '%I:%M%p').lower()


def _parse(value: str, fmt: str) -> datetime:
    try:
        return datetime.strptime(value, fmt)
    except (TypeError, ValueError) as e:
        raise FormatError(
            f"Unable to parse {value!r} with format {fmt!r}: {e}"
        ) from e


def _epoch_and_weekday(date: str, tz: Optional[tzinfo]) -> tuple[int, int]:
    # Noon keeps a DST shift from pushing the day-offset arithmetic
    # across a date boundary.
    noon = _parse(date, DATE_FORMAT).replace(hour=12)
    if tz is not None:
        noon = noon.replace(tzinfo=tz)
    dow = int(noon.strftime('%w'))
    return int(noon.timestamp()), dow


def _from_timestamp(seconds: int, tz: Optional[tzinfo]) -> datetime:
    if tz is not None:
        return datetime.fromtimestamp(seconds, tz)
    return datetime.fromtimestamp(seconds)


def _format_boundary(day: datetime, at: dt_time, tz: Optional[tzinfo]) -> str:
    boundary = datetime.combine(day.date(), at)
    if tz is not None:
        boundary = boundary.replace(tzinfo=tz)
    else:
        boundary = boundary.astimezone()
    return boundary.strftime('%Y-%m-%d %H:%M:%S %z')
