"""
SQLAlchemy-backed lookups and writes for businesses, users, services and
slot listings.

All queries are parameterized through the ORM. Every write method owns its
own transaction; errors from the driver are wrapped in domain exceptions.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Tuple

import pendulum
from pendulum import DateTime
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..domain.exceptions import ConflictError, StorageError
from ..domain.models import Business, Service, User
from .database import BusinessRow, ServiceRow, SlotRow, UserRow

logger = logging.getLogger(__name__)


def as_utc(value: datetime) -> DateTime:
    """Read a stored timestamp as UTC (SQLite hands back naive values)."""
    return pendulum.instance(value, tz="UTC").in_timezone("UTC")


@contextmanager
def _reading(action: str) -> Iterator[None]:
    """Translate driver failures of a lookup into a StorageError."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Could not %s: %s", action, exc)
        raise StorageError(f"Could not {action}") from exc


def _to_service(row: ServiceRow) -> Service:
    return Service(
        id=row.id,
        name=row.name,
        duration=row.duration,
        business_id=row.business_id,
        description=row.description or "",
    )


def _to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        email=row.email,
        full_name=row.full_name,
        role=row.role,
        business_id=row.business_id,
    )


class BusinessRepository:
    """Business lookups, including the timezone used for slot synthesis."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def get(self, business_id: int) -> Business | None:
        with _reading("load business"), self._session_factory() as session:
            row = session.get(BusinessRow, business_id)
            if row is None:
                return None
            return Business(id=row.id, name=row.name, timezone=row.timezone)

    def get_timezone(self, business_id: int) -> str | None:
        """Return the business timezone, or None if the business is unknown."""
        with _reading("load business timezone"), self._session_factory() as session:
            return session.scalar(
                select(BusinessRow.timezone).where(BusinessRow.id == business_id)
            )

    def set_timezone(self, business_id: int, timezone: str) -> bool:
        """Update the timezone; returns False if no such business exists."""
        try:
            with self._session_factory.begin() as session:
                result = session.execute(
                    update(BusinessRow)
                    .where(BusinessRow.id == business_id)
                    .values(timezone=timezone)
                )
                return result.rowcount > 0
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not update business: {exc}") from exc


class UserRepository:
    """Account storage: lookups by email and business registration."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def get_with_password_hash(self, email: str) -> Tuple[User, str] | None:
        with _reading("load user"), self._session_factory() as session:
            row = session.scalar(select(UserRow).where(UserRow.email == email))
            if row is None:
                return None
            return _to_user(row), row.password_hash

    def register_business(
        self,
        *,
        business_name: str,
        timezone: str,
        email: str,
        full_name: str,
        password_hash: str,
        role: str,
    ) -> Tuple[User, Business]:
        """
        Create a business and its admin user in one transaction.

        Raises:
            ConflictError: If the email is already registered
            StorageError: If the transaction fails
        """
        try:
            with self._session_factory.begin() as session:
                existing = session.scalar(select(UserRow.id).where(UserRow.email == email))
                if existing is not None:
                    raise ConflictError("Email already exists")

                business_row = BusinessRow(name=business_name, timezone=timezone)
                session.add(business_row)
                session.flush()

                user_row = UserRow(
                    email=email,
                    password_hash=password_hash,
                    full_name=full_name,
                    role=role,
                    business_id=business_row.id,
                )
                session.add(user_row)
                session.flush()

                business = Business(
                    id=business_row.id, name=business_row.name, timezone=business_row.timezone
                )
                return _to_user(user_row), business
        except IntegrityError as exc:
            raise ConflictError("Email already exists") from exc
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not register business: {exc}") from exc


class ServiceRepository:
    """Services offered by businesses."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def get_service(self, service_id: int, business_id: int) -> Service | None:
        """Return the service only if it belongs to ``business_id``."""
        with _reading("load service"), self._session_factory() as session:
            row = session.scalar(
                select(ServiceRow).where(
                    ServiceRow.id == service_id,
                    ServiceRow.business_id == business_id,
                )
            )
            return _to_service(row) if row is not None else None

    def create(self, *, business_id: int, name: str, description: str, duration: int) -> Service:
        try:
            with self._session_factory.begin() as session:
                row = ServiceRow(
                    name=name,
                    description=description,
                    duration=duration,
                    business_id=business_id,
                )
                session.add(row)
                session.flush()
                return _to_service(row)
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not create service: {exc}") from exc

    def list_for_business(self, business_id: int) -> List[Service]:
        with _reading("list services"), self._session_factory() as session:
            rows = session.scalars(
                select(ServiceRow)
                .where(ServiceRow.business_id == business_id)
                .order_by(ServiceRow.name, ServiceRow.id)
            ).all()
            return [_to_service(row) for row in rows]

    def delete(self, service_id: int, business_id: int) -> bool:
        """Delete an owned service and its slots; returns False if nothing matched."""
        try:
            with self._session_factory.begin() as session:
                session.execute(
                    delete(SlotRow).where(
                        SlotRow.service_id == service_id,
                        SlotRow.business_id == business_id,
                    )
                )
                result = session.execute(
                    delete(ServiceRow).where(
                        ServiceRow.id == service_id,
                        ServiceRow.business_id == business_id,
                    )
                )
                return result.rowcount > 0
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not delete service: {exc}") from exc


class SlotRepository:
    """Read-only slot listings for business admins and public customers."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def list_for_business(self, business_id: int) -> List[Dict[str, Any]]:
        with _reading("list slots"), self._session_factory() as session:
            rows = session.execute(
                select(SlotRow, ServiceRow.name)
                .join(ServiceRow, SlotRow.service_id == ServiceRow.id)
                .where(SlotRow.business_id == business_id)
                .order_by(SlotRow.start_time, SlotRow.id)
            ).all()

            return [
                {
                    "id": slot.id,
                    "start_time": as_utc(slot.start_time),
                    "end_time": as_utc(slot.end_time),
                    "is_available": slot.is_available,
                    "service_id": slot.service_id,
                    "service_name": service_name,
                }
                for slot, service_name in rows
            ]

    def list_available(
        self,
        *,
        business_id: int,
        service_id: int,
        start_from: Optional[datetime] = None,
        start_before: Optional[datetime] = None,
        start_after: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """
        List available slots of one service, optionally bounded by start time.

        ``start_from`` is inclusive, ``start_before`` and ``start_after`` are
        exclusive bounds; all are UTC instants.
        """
        query = (
            select(SlotRow, ServiceRow.name, ServiceRow.duration)
            .join(ServiceRow, SlotRow.service_id == ServiceRow.id)
            .where(
                SlotRow.business_id == business_id,
                SlotRow.service_id == service_id,
                SlotRow.is_available.is_(True),
            )
        )
        if start_from is not None:
            query = query.where(SlotRow.start_time >= as_utc(start_from))
        if start_before is not None:
            query = query.where(SlotRow.start_time < as_utc(start_before))
        if start_after is not None:
            query = query.where(SlotRow.start_time > as_utc(start_after))

        with _reading("list available slots"), self._session_factory() as session:
            rows = session.execute(query.order_by(SlotRow.start_time, SlotRow.id)).all()

            return [
                {
                    "id": slot.id,
                    "start_time": as_utc(slot.start_time),
                    "end_time": as_utc(slot.end_time),
                    "service_id": slot.service_id,
                    "service_name": service_name,
                    "duration": duration,
                }
                for slot, service_name, duration in rows
            ]

