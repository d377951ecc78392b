"""
FastAPI dependencies: the per-application service container and the typed
request context of the authenticated principal.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Request
from sqlalchemy.engine import Engine

from ..adapters.security import TokenService
from ..domain.models import RequestContext
from ..domain.exceptions import AuthenticationError
from ..services.accounts import AccountService
from ..services.catalog import CatalogService
from ..services.slot_generation import SlotGenerationService, require_business

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class Container:
    """Process-wide collaborators, owned by the application factory."""
    engine: Engine
    tokens: TokenService
    accounts: AccountService
    catalog: CatalogService
    slot_generation: SlotGenerationService


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_request_context(
    request: Request,
    container: Container = Depends(get_container),
) -> RequestContext:
    """
    Authenticate the ``Authorization: Bearer <token>`` header.

    Raises:
        AuthenticationError: If the header is missing, malformed or invalid
    """
    header = request.headers.get("Authorization")
    if not header:
        raise AuthenticationError("Authorization header is required")
    if not header.startswith(BEARER_PREFIX):
        raise AuthenticationError("Authorization format must be 'Bearer {token}'")

    token = header[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthenticationError("Authorization format must be 'Bearer {token}'")

    return container.tokens.authenticate(token)


def get_business_id(context: RequestContext = Depends(get_request_context)) -> int:
    """Business of the authenticated user; 403 when there is none."""
    return require_business(context)
