"""
Core business logic for synthesizing bookable time slots.

This is the heart of the application - pure domain logic without any
external dependencies (no database, no I/O). Every call with the same inputs
yields the same sequence of slots.
"""

import logging
from typing import List

from pendulum import DateTime

from .exceptions import ValidationError
from .models import MAX_SLOT_MINUTES, DailyWindow, SlotGenerationRequest, TimeRange, TimeSlot
from .time_parsing import parse_time_of_day, resolve_timezone, to_local_day

logger = logging.getLogger(__name__)

UTC = "UTC"


class SlotSynthesizer:
    """
    Turns a generation request into an ordered list of candidate slots.

    Algorithm:
    1. Interpret the date range as calendar dates in the business timezone
    2. Skip closed days (Sundays)
    3. Build the day's window from the requested start/end time of day
    4. Walk the window in steps of duration + gap, emitting only whole slots
    5. Convert every emitted slot to UTC
    """

    def __init__(self, max_days: int | None = None):
        self.max_days = max_days

    def synthesize(
        self,
        request: SlotGenerationRequest,
        service_duration: int,
        timezone: str | None,
    ) -> List[TimeSlot]:
        """
        Synthesize candidate slots for a request.

        Args:
            request: The validated generation request
            service_duration: Slot length in minutes, taken from the service record
            timezone: IANA timezone of the business; unknown values fall back to UTC

        Returns:
            List of unpersisted TimeSlot objects in chronological order

        Raises:
            ValidationError: If dates, times, duration or gap are malformed
        """
        if service_duration <= 0:
            raise ValidationError(f"Service duration must be positive, got {service_duration}")
        if service_duration > MAX_SLOT_MINUTES:
            raise ValidationError(
                f"Service duration must be at most {MAX_SLOT_MINUTES} minutes, got {service_duration}"
            )
        if request.interval < 0:
            raise ValidationError(f"Interval must not be negative, got {request.interval}")
        if request.interval > MAX_SLOT_MINUTES:
            raise ValidationError(
                f"Interval must be at most {MAX_SLOT_MINUTES} minutes, got {request.interval}"
            )

        tz = resolve_timezone(timezone)
        window = DailyWindow(
            start_time=parse_time_of_day(request.start_time),
            end_time=parse_time_of_day(request.end_time),
            timezone=tz,
        )

        first_day = to_local_day(request.start_date, tz)
        last_day = to_local_day(request.end_date, tz)

        if first_day > last_day:
            raise ValidationError("start_date must not be after end_date")

        span_days = last_day.toordinal() - first_day.toordinal() + 1
        if self.max_days is not None and span_days > self.max_days:
            raise ValidationError(
                f"Date range spans {span_days} days; at most {self.max_days} are allowed"
            )

        slots: List[TimeSlot] = []

        try:
            # Offsets from the first date never step past the last one
            for offset in range(span_days):
                day_window = window.window_for_day(first_day.add(days=offset))

                if day_window:
                    slots.extend(
                        self._slots_for_window(
                            day_window,
                            service_duration=service_duration,
                            interval=request.interval,
                            service_id=request.service_id,
                            business_id=request.business_id,
                        )
                    )
        except (OverflowError, ValueError) as exc:
            # Year 10000 surfaces as either error depending on the conversion path
            raise ValidationError("Requested slots fall outside the supported calendar range") from exc

        logger.debug(
            "Synthesized %d slots for service %s in timezone %s",
            len(slots), request.service_id, tz,
        )
        return slots

    def _slots_for_window(
        self,
        window: TimeRange,
        *,
        service_duration: int,
        interval: int,
        service_id: int,
        business_id: int,
    ) -> List[TimeSlot]:
        """
        Walk one day's window and emit every slot that fits entirely inside it.

        Example:
        Window: 09:00 - 11:00, duration 30, interval 0
        Result: [09:00-09:30, 09:30-10:00, 10:00-10:30, 10:30-11:00]
        """
        slots: List[TimeSlot] = []
        cursor: DateTime = window.start

        while cursor < window.end:
            slot_end = cursor.add(minutes=service_duration)

            # No partial slot at the end of the day
            if slot_end > window.end:
                break

            slots.append(
                TimeSlot(
                    time_range=TimeRange(
                        start=cursor.in_timezone(UTC),
                        end=slot_end.in_timezone(UTC),
                    ),
                    service_id=service_id,
                    business_id=business_id,
                )
            )

            cursor = cursor.add(minutes=service_duration + interval)

        return slots
