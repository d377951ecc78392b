"""
Application service for generating bookable slots.

The service resolves the business timezone and the service duration through
lookup adapters, delegates the interval synthesis to the domain-level
``SlotSynthesizer`` and hands the result to a persister that commits the
batch atomically. Every collaborator is injected, so tests can swap in
simple stubs that satisfy the protocols below.
"""

from __future__ import annotations

import logging
from typing import List, Protocol, Sequence

from ..domain.exceptions import NotFoundError, PermissionDeniedError
from ..domain.models import RequestContext, Service, SlotGenerationRequest, TimeSlot
from ..domain.slot_synthesizer import SlotSynthesizer

logger = logging.getLogger(__name__)


class BusinessLookupProtocol(Protocol):
    """Resolves the timezone of a business."""

    def get_timezone(self, business_id: int) -> str | None:
        """Return the IANA timezone, or None if the business is unknown."""


class ServiceLookupProtocol(Protocol):
    """Resolves a service owned by a business."""

    def get_service(self, service_id: int, business_id: int) -> Service | None:
        """Return the service, or None if it does not belong to the business."""


class SlotPersisterProtocol(Protocol):
    """Commits a slot batch in one transaction."""

    def persist(self, candidates: Sequence[TimeSlot]) -> List[TimeSlot]:
        """Return the persisted slots with identifiers, in input order."""


def require_business(context: RequestContext) -> int:
    """
    Return the business id of the authenticated principal.

    Raises:
        PermissionDeniedError: If the user is not associated with a business
    """
    if context.business_id is None:
        raise PermissionDeniedError("User is not associated with a business")
    return context.business_id


class SlotGenerationService:
    """
    Orchestrates lookup, synthesis and persistence of one generation request.

    A request either persists its full slot sequence or adds no rows at all.
    """

    def __init__(
        self,
        business_lookup: BusinessLookupProtocol,
        service_lookup: ServiceLookupProtocol,
        synthesizer: SlotSynthesizer,
        persister: SlotPersisterProtocol,
    ) -> None:
        self._business_lookup = business_lookup
        self._service_lookup = service_lookup
        self._synthesizer = synthesizer
        self._persister = persister

    def generate(
        self,
        context: RequestContext,
        *,
        service_id: int,
        start_date,
        end_date,
        start_time: str,
        end_time: str,
        interval: int,
    ) -> List[TimeSlot]:
        """
        Generate and persist slots for a service of the caller's business.

        Raises:
            PermissionDeniedError: If the caller has no business
            NotFoundError: If the service is not owned by the caller's business
            ValidationError: If the request fields are malformed
            StorageError: If the batch could not be committed
        """
        business_id = require_business(context)

        request = SlotGenerationRequest(
            service_id=service_id,
            business_id=business_id,
            start_date=start_date,
            end_date=end_date,
            start_time=start_time,
            end_time=end_time,
            interval=interval,
        )

        candidates = self.preview(request)
        return self._persister.persist(candidates)

    def preview(self, request: SlotGenerationRequest) -> List[TimeSlot]:
        """Synthesize the slots of a request without persisting them."""
        service = self._service_lookup.get_service(request.service_id, request.business_id)
        if service is None:
            raise NotFoundError("Service not found or access denied")

        timezone = self._business_lookup.get_timezone(request.business_id)

        candidates = self._synthesizer.synthesize(
            request,
            service_duration=service.duration,
            timezone=timezone,
        )

        logger.info(
            "Generated %d slots for service %s of business %s (timezone %s)",
            len(candidates), service.id, request.business_id, timezone or "UTC",
        )
        return candidates
