"""
Transactional batch persistence for synthesized time slots.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..domain.exceptions import SlotConflictError, StorageError
from ..domain.models import TimeSlot
from .database import SLOT_UNIQUE_CONSTRAINT, SlotRow

logger = logging.getLogger(__name__)

# SQLite names the columns instead of the constraint
_SQLITE_SLOT_UNIQUE = "UNIQUE constraint failed: appointment_slots.service_id, appointment_slots.start_time"


def is_duplicate_slot(exc: IntegrityError) -> bool:
    """Tell a slot uniqueness violation apart from other integrity failures."""
    diag = getattr(exc.orig, "diag", None)
    constraint = getattr(diag, "constraint_name", None)
    if constraint:
        return constraint == SLOT_UNIQUE_CONSTRAINT

    message = str(exc.orig)
    return SLOT_UNIQUE_CONSTRAINT in message or _SQLITE_SLOT_UNIQUE in message


class SlotPersister:
    """
    Writes a batch of candidate slots in a single all-or-nothing transaction.

    Either every slot of the batch is committed or none is: any failing
    insert rolls back the whole transaction before the error is raised.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def persist(self, candidates: Sequence[TimeSlot]) -> List[TimeSlot]:
        """
        Insert the candidates in input order and return them with identifiers.

        Args:
            candidates: Unpersisted slots, already tagged with service and business

        Returns:
            The same slots, in the same order, with ``id`` populated

        Raises:
            SlotConflictError: If a slot duplicates an existing one of the same service
            StorageError: If the transaction fails for any other reason
        """
        if not candidates:
            return []

        persisted: List[TimeSlot] = []

        try:
            with self._session_factory.begin() as session:
                for slot in candidates:
                    row = SlotRow(
                        start_time=slot.start,
                        end_time=slot.end,
                        is_available=slot.is_available,
                        service_id=slot.service_id,
                        business_id=slot.business_id,
                    )
                    session.add(row)
                    # Flush per row to capture the store-assigned id in order
                    session.flush()
                    persisted.append(slot.with_id(row.id))
        except IntegrityError as exc:
            if not is_duplicate_slot(exc):
                logger.warning("Rolled back batch of %d slots: %s", len(candidates), exc.orig)
                raise StorageError("Could not save slots: integrity check failed") from exc

            logger.warning("Rolled back batch of %d slots: duplicate slot", len(candidates))
            raise SlotConflictError(
                "Slots already exist for this service at one or more of the requested times"
            ) from exc
        except SQLAlchemyError as exc:
            logger.warning("Rolled back batch of %d slots: %s", len(candidates), exc)
            raise StorageError(f"Could not save slots: {exc}") from exc

        logger.info("Persisted %d slots", len(persisted))
        return persisted
