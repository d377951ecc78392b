"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .accounts import AccountService
from .catalog import CatalogService
from .slot_generation import SlotGenerationService

__all__ = ["AccountService", "CatalogService", "SlotGenerationService"]
