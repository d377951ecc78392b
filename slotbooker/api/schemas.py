"""
Request and response bodies of the HTTP API.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..domain.models import MAX_SLOT_MINUTES, Business, Service, TimeSlot, User

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _check_email(value: str) -> str:
    value = value.strip()
    if not _EMAIL.match(value):
        raise ValueError("must be a valid email address")
    return value.lower()


class RegistrationRequest(BaseModel):
    business_name: str = Field(min_length=1)
    email: str
    full_name: str = Field(min_length=1)
    password: str = Field(min_length=6)
    timezone: str = "UTC"

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _check_email(value)


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class CreateServiceRequest(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    duration: int = Field(ge=1, le=MAX_SLOT_MINUTES)  # minutes


class GenerateSlotsRequest(BaseModel):
    """
    Body of ``POST /api/slots/generate``.

    Dates are ``YYYY-MM-DD`` or ISO-8601 date-times, times are ``HH:MM`` or
    ``HH:MM:SS``; both are interpreted in the business timezone.
    """
    service_id: int
    start_date: str
    end_date: str
    start_time: str
    end_time: str
    interval: int = Field(default=0, ge=0, le=MAX_SLOT_MINUTES)  # minutes between slots


class TimezoneUpdateRequest(BaseModel):
    timezone: str = Field(min_length=1)


class UserOut(BaseModel):
    id: int
    email: str
    full_name: str
    role: str
    business_id: Optional[int] = None

    @classmethod
    def from_domain(cls, user: User) -> "UserOut":
        return cls(
            id=user.id,
            email=user.email,
            full_name=user.full_name,
            role=user.role,
            business_id=user.business_id,
        )


class BusinessOut(BaseModel):
    id: int
    name: str
    timezone: str

    @classmethod
    def from_domain(cls, business: Business) -> "BusinessOut":
        return cls(id=business.id, name=business.name, timezone=business.timezone)


class ServiceOut(BaseModel):
    id: int
    name: str
    description: str = ""
    duration: int

    @classmethod
    def from_domain(cls, service: Service) -> "ServiceOut":
        return cls(
            id=service.id,
            name=service.name,
            description=service.description,
            duration=service.duration,
        )


class TimeSlotOut(BaseModel):
    id: Optional[int] = None
    start_time: datetime
    end_time: datetime
    is_available: bool
    service_id: int
    business_id: int

    @classmethod
    def from_domain(cls, slot: TimeSlot) -> "TimeSlotOut":
        return cls(
            id=slot.id,
            start_time=slot.start,
            end_time=slot.end,
            is_available=slot.is_available,
            service_id=slot.service_id,
            business_id=slot.business_id,
        )


class BusinessSlotOut(BaseModel):
    id: int
    start_time: datetime
    end_time: datetime
    is_available: bool
    service_id: int
    service_name: str


class PublicSlotOut(BaseModel):
    id: int
    start_time: datetime
    end_time: datetime
    service_id: int
    service_name: str
    duration: int


class LoginResponse(BaseModel):
    message: str
    token: str
    user: UserOut


class RegistrationResponse(LoginResponse):
    business: BusinessOut


class GenerateSlotsResponse(BaseModel):
    message: str
    slots: List[TimeSlotOut]


class MessageResponse(BaseModel):
    message: str


class PrincipalOut(BaseModel):
    id: int
    email: str
    role: str
    business_id: Optional[int] = None


class ProfileResponse(BaseModel):
    message: str
    user: PrincipalOut
