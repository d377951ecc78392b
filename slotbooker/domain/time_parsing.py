"""
Parsing helpers for the textual date, time-of-day and timezone inputs of a
slot generation request.
"""

import logging
import re
from datetime import date, datetime, time

import pendulum
from pendulum import Date, DateTime

from .exceptions import ValidationError
from .models import DateInput

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "UTC"

_TIME_OF_DAY = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def parse_time_of_day(value: str) -> time:
    """
    Parse "HH:MM" or "HH:MM:SS" text into a ``datetime.time``.

    Raises:
        ValidationError: If the text is not a valid time of day
    """
    match = _TIME_OF_DAY.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise ValidationError(f"Invalid time format: {value!r} (expected HH:MM or HH:MM:SS)")

    hour, minute, second = (int(part) if part else 0 for part in match.groups())

    try:
        return time(hour=hour, minute=minute, second=second)
    except ValueError as exc:
        raise ValidationError(f"Invalid time of day: {value!r}") from exc


def is_valid_timezone(name: str) -> bool:
    """Check whether ``name`` is a known IANA timezone identifier."""
    if not name:
        return False
    try:
        pendulum.timezone(name)
    except (ValueError, KeyError):
        return False
    return True


def resolve_timezone(name: str | None) -> str:
    """
    Return ``name`` when it is a known timezone, else fall back to UTC.

    An absent or unknown business timezone never fails a request.
    """
    if name and is_valid_timezone(name):
        return name

    logger.debug("Timezone %r not resolvable, falling back to %s", name, DEFAULT_TIMEZONE)
    return DEFAULT_TIMEZONE


def to_local_day(value: DateInput, timezone: str) -> Date:
    """
    Interpret a date input as a calendar date in ``timezone``.

    Accepts ``YYYY-MM-DD`` text, ISO-8601 date-time text (an explicit offset
    is honoured, naive values are read as local time), ``date`` and
    ``datetime`` objects. Date-times are converted to ``timezone`` before
    the time part is dropped.

    Raises:
        ValidationError: If the value cannot be interpreted as a date
    """
    if isinstance(value, datetime):
        moment = pendulum.instance(value, tz=timezone)
    elif isinstance(value, date):
        return pendulum.date(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            moment = pendulum.parse(value.strip(), tz=timezone)
        except (ValueError, OverflowError) as exc:
            raise ValidationError(f"Invalid date: {value!r}") from exc
        if not isinstance(moment, DateTime):
            raise ValidationError(f"Invalid date: {value!r}")
    else:
        raise ValidationError(f"Invalid date: {value!r}")

    try:
        return moment.in_timezone(timezone).date()
    except (OverflowError, ValueError) as exc:
        raise ValidationError(f"Date out of range: {value!r}") from exc
