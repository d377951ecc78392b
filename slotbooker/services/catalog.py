"""
Service catalogue management and slot listings.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional

import pendulum

from ..adapters.repositories import ServiceRepository, SlotRepository
from ..domain.exceptions import NotFoundError, ValidationError
from ..domain.models import MAX_SLOT_MINUTES, Service


class CatalogService:
    """Business-side service CRUD plus admin and public slot listings."""

    def __init__(self, services: ServiceRepository, slots: SlotRepository) -> None:
        self._services = services
        self._slots = slots

    def create_service(
        self, business_id: int, *, name: str, duration: int, description: str = ""
    ) -> Service:
        if not 0 < duration <= MAX_SLOT_MINUTES:
            raise ValidationError(
                f"Service duration must be between 1 and {MAX_SLOT_MINUTES} minutes"
            )
        return self._services.create(
            business_id=business_id,
            name=name,
            description=description,
            duration=duration,
        )

    def list_services(self, business_id: int) -> List[Service]:
        return self._services.list_for_business(business_id)

    # Customers see the same catalogue as the business admin
    list_public_services = list_services

    def delete_service(self, service_id: int, business_id: int) -> None:
        """
        Delete a service of the business together with its slots.

        Raises:
            NotFoundError: If the service does not belong to the business
        """
        if not self._services.delete(service_id, business_id):
            raise NotFoundError("Service not found or you don't have permission")

    def list_business_slots(self, business_id: int) -> List[Dict[str, Any]]:
        return self._slots.list_for_business(business_id)

    def list_public_slots(
        self,
        business_id: int,
        service_id: int,
        on_date: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """
        List available slots of a service for customers.

        With ``on_date`` the slots starting on that UTC calendar date are
        returned; otherwise only slots starting after ``now``.
        """
        if on_date is not None:
            day_start = pendulum.datetime(on_date.year, on_date.month, on_date.day, tz="UTC")
            return self._slots.list_available(
                business_id=business_id,
                service_id=service_id,
                start_from=day_start,
                start_before=day_start.add(days=1),
            )

        return self._slots.list_available(
            business_id=business_id,
            service_id=service_id,
            start_after=now or pendulum.now("UTC"),
        )
