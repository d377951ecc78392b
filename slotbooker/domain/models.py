"""
Domain models for businesses, services and bookable time slots.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime, time
from typing import Optional, Tuple, Union

import pendulum
from pendulum import Date, DateTime

# Closure rule: no slots are ever generated on these weekdays.
CLOSED_WEEKDAYS: Tuple[int, ...] = (pendulum.SUNDAY,)

# Upper bound for a slot duration or the gap between slots, in minutes.
MAX_SLOT_MINUTES = 24 * 60

DateInput = Union[str, date, datetime]


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable time range with start and end datetime.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def in_timezone(self, timezone: str) -> "TimeRange":
        return TimeRange(
            start=self.start.in_timezone(timezone),
            end=self.end.in_timezone(timezone),
        )

    def __str__(self) -> str:
        return f"{self.start.format('YYYY-MM-DD HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class DailyWindow:
    """
    The bookable time-of-day window applied to every open day.

    ``start_time``/``end_time`` are wall-clock times in ``timezone``.
    """
    start_time: time
    end_time: time
    timezone: str = "UTC"
    closed_weekdays: Tuple[int, ...] = CLOSED_WEEKDAYS

    def is_open_day(self, day: Date) -> bool:
        """Check if a given local calendar date is open for booking."""
        return day.day_of_week not in self.closed_weekdays

    def window_for_day(self, day: Date) -> TimeRange | None:
        """
        Get the bookable window for a local calendar date.

        Returns None on closed days and when the window is empty
        (start time not before end time).
        """
        if not self.is_open_day(day):
            return None

        start = pendulum.datetime(
            day.year, day.month, day.day,
            self.start_time.hour, self.start_time.minute, self.start_time.second,
            tz=self.timezone,
        )
        end = pendulum.datetime(
            day.year, day.month, day.day,
            self.end_time.hour, self.end_time.minute, self.end_time.second,
            tz=self.timezone,
        )

        if start >= end:
            return None

        return TimeRange(start=start, end=end)


@dataclass(frozen=True)
class SlotGenerationRequest:
    """
    Input envelope for one slot generation run.

    ``business_id`` is taken from the authenticated request context, never
    from the client payload.
    """
    service_id: int
    business_id: int
    start_date: DateInput
    end_date: DateInput
    start_time: str
    end_time: str
    interval: int = 0


@dataclass(frozen=True)
class TimeSlot:
    """
    One bookable interval of a service.

    ``id`` is None until the slot has been persisted.
    """
    time_range: TimeRange
    service_id: int
    business_id: int
    is_available: bool = True
    id: Optional[int] = None

    @property
    def start(self) -> DateTime:
        return self.time_range.start

    @property
    def end(self) -> DateTime:
        return self.time_range.end

    def with_id(self, slot_id: int) -> "TimeSlot":
        """Return a copy carrying the store-assigned identifier."""
        return replace(self, id=slot_id)

    def format_display(self, timezone: str = "UTC") -> str:
        """
        Format the slot for display in the given timezone.
        Format: Weekday, YYYY-MM-DD | HH:mm – HH:mm (N min)
        """
        local = self.time_range.in_timezone(timezone)
        weekday = local.start.format("dddd")
        date_str = local.start.format("YYYY-MM-DD")
        time_str = f"{local.start.format('HH:mm')} – {local.end.format('HH:mm')}"
        duration = self.time_range.duration_minutes()

        return f"{weekday}, {date_str} | {time_str} ({duration} min)"


@dataclass(frozen=True)
class Business:
    id: int
    name: str
    timezone: str = "UTC"


@dataclass(frozen=True)
class Service:
    id: int
    name: str
    duration: int  # minutes
    business_id: int
    description: str = ""


@dataclass(frozen=True)
class User:
    id: int
    email: str
    full_name: str
    role: str
    business_id: Optional[int] = None


@dataclass(frozen=True)
class RequestContext:
    """The authenticated principal of a request."""
    user_id: int
    email: str
    role: str
    business_id: Optional[int] = None
