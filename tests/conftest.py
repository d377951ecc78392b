"""
Shared fixtures: an in-memory database and a minimal application config.
"""

import pytest
from sqlalchemy import func, select

from slotbooker.adapters.database import (
    BusinessRow,
    ServiceRow,
    SlotRow,
    create_db_engine,
    create_session_factory,
    init_db,
)
from slotbooker.config import AppConfig, AuthConfig, DatabaseConfig


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(
        auth=AuthConfig(jwt_secret="test-secret-value", password_hash_rounds=4),
        database=DatabaseConfig(url="sqlite://"),
    )


@pytest.fixture
def engine(app_config):
    engine = create_db_engine(app_config.database)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def seeded(session_factory):
    """One business in UTC with a 30 minute service; returns (business_id, service_id)."""
    with session_factory.begin() as session:
        business = BusinessRow(name="Barber Shop", timezone="UTC")
        session.add(business)
        session.flush()
        service = ServiceRow(
            name="Haircut", description="", duration=30, business_id=business.id
        )
        session.add(service)
        session.flush()
        return business.id, service.id


@pytest.fixture
def slot_count(session_factory):
    """Callable returning the number of persisted slot rows."""
    def _count() -> int:
        with session_factory() as session:
            return session.scalar(select(func.count()).select_from(SlotRow))
    return _count
