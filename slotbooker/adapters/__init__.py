"""
Adapters layer - External integrations (relational store, credentials).
"""

from .repositories import BusinessRepository, ServiceRepository, SlotRepository, UserRepository
from .security import PasswordHasher, TokenService
from .slot_persister import SlotPersister

__all__ = [
    "BusinessRepository",
    "PasswordHasher",
    "ServiceRepository",
    "SlotPersister",
    "SlotRepository",
    "TokenService",
    "UserRepository",
]
