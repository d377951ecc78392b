"""
Domain layer - Pure business logic without external dependencies.
"""

from .models import (
    Business,
    DailyWindow,
    RequestContext,
    Service,
    SlotGenerationRequest,
    TimeRange,
    TimeSlot,
    User,
)
from .slot_synthesizer import SlotSynthesizer

__all__ = [
    "Business",
    "DailyWindow",
    "RequestContext",
    "Service",
    "SlotGenerationRequest",
    "SlotSynthesizer",
    "TimeRange",
    "TimeSlot",
    "User",
]
