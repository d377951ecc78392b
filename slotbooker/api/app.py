"""
FastAPI application factory.

All process-wide resources (engine, session factory, services) are built
here from an explicit ``AppConfig`` and stored on ``app.state``; nothing in
the core reaches for module-level globals.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..adapters.database import create_db_engine, create_session_factory, init_db
from ..adapters.repositories import (
    BusinessRepository,
    ServiceRepository,
    SlotRepository,
    UserRepository,
)
from ..adapters.security import PasswordHasher, TokenService
from ..adapters.slot_persister import SlotPersister
from ..config import AppConfig
from ..domain.exceptions import AuthenticationError, SlotBookerError
from ..domain.slot_synthesizer import SlotSynthesizer
from ..services.accounts import AccountService
from ..services.catalog import CatalogService
from ..services.slot_generation import SlotGenerationService
from .dependencies import Container
from .routes import router

logger = logging.getLogger(__name__)


def build_container(config: AppConfig) -> Container:
    """Wire adapters and services for one application instance."""
    engine = create_db_engine(config.database)
    session_factory = create_session_factory(engine)

    businesses = BusinessRepository(session_factory)
    services = ServiceRepository(session_factory)
    tokens = TokenService(config.auth)

    return Container(
        engine=engine,
        tokens=tokens,
        accounts=AccountService(
            users=UserRepository(session_factory),
            businesses=businesses,
            hasher=PasswordHasher(rounds=config.auth.password_hash_rounds),
            tokens=tokens,
        ),
        catalog=CatalogService(services=services, slots=SlotRepository(session_factory)),
        slot_generation=SlotGenerationService(
            business_lookup=businesses,
            service_lookup=services,
            synthesizer=SlotSynthesizer(max_days=config.generation.max_days),
            persister=SlotPersister(session_factory),
        ),
    )


async def _handle_domain_error(_request: Request, exc: SlotBookerError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Request failed: %s", exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message}, headers=headers)


async def _handle_request_validation(_request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'] if part != 'body')}: {error['msg']}"
        for error in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": f"Invalid input: {problems}"})


def create_app(config: AppConfig, *, create_schema: bool = True) -> FastAPI:
    """
    Build the API application.

    Args:
        config: Application configuration
        create_schema: Create missing tables before serving

    Returns:
        Configured FastAPI instance
    """
    container = build_container(config)
    if create_schema:
        init_db(container.engine)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        container.engine.dispose()
        logger.info("Database engine disposed")

    app = FastAPI(title="slotbooker", version=__version__, lifespan=lifespan)
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"],
        allow_headers=["Origin", "Content-Length", "Content-Type", "Authorization", "Accept"],
        expose_headers=["Content-Length"],
        allow_credentials=True,
        max_age=12 * 60 * 60,
    )

    app.add_exception_handler(SlotBookerError, _handle_domain_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.include_router(router)

    return app
