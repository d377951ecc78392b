"""
HTTP routes. Endpoints are plain (sync) functions: FastAPI runs them in its
thread pool, so the blocking transactional writes never stall the event loop.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from ..adapters.database import ping
from ..domain.models import RequestContext
from . import schemas
from .dependencies import Container, get_business_id, get_container, get_request_context

router = APIRouter(prefix="/api")


@router.get("/health", response_model=schemas.MessageResponse)
def health(container: Container = Depends(get_container)):
    if not ping(container.engine):
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Database is down"},
        )
    return schemas.MessageResponse(message="Server and database are running!")


@router.post(
    "/register",
    response_model=schemas.RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(
    body: schemas.RegistrationRequest,
    container: Container = Depends(get_container),
):
    session, business = container.accounts.register(
        business_name=body.business_name,
        email=body.email,
        full_name=body.full_name,
        password=body.password,
        timezone=body.timezone,
    )
    return schemas.RegistrationResponse(
        message="Registration successful",
        token=session.token,
        user=schemas.UserOut.from_domain(session.user),
        business=schemas.BusinessOut.from_domain(business),
    )


@router.post("/login", response_model=schemas.LoginResponse)
def login(body: schemas.LoginRequest, container: Container = Depends(get_container)):
    session = container.accounts.login(body.email, body.password)
    return schemas.LoginResponse(
        message="Login successful",
        token=session.token,
        user=schemas.UserOut.from_domain(session.user),
    )


@router.get("/profile", response_model=schemas.ProfileResponse)
def profile(context: RequestContext = Depends(get_request_context)):
    return schemas.ProfileResponse(
        message="Welcome to protected route!",
        user=schemas.PrincipalOut(
            id=context.user_id,
            email=context.email,
            role=context.role,
            business_id=context.business_id,
        ),
    )


@router.put("/business/timezone", response_model=schemas.BusinessOut)
def update_timezone(
    body: schemas.TimezoneUpdateRequest,
    business_id: int = Depends(get_business_id),
    container: Container = Depends(get_container),
):
    business = container.accounts.set_timezone(business_id, body.timezone)
    return schemas.BusinessOut.from_domain(business)


@router.post(
    "/services",
    response_model=schemas.ServiceOut,
    status_code=status.HTTP_201_CREATED,
)
def create_service(
    body: schemas.CreateServiceRequest,
    business_id: int = Depends(get_business_id),
    container: Container = Depends(get_container),
):
    service = container.catalog.create_service(
        business_id,
        name=body.name,
        description=body.description,
        duration=body.duration,
    )
    return schemas.ServiceOut.from_domain(service)


@router.get("/services", response_model=List[schemas.ServiceOut])
def list_services(
    business_id: int = Depends(get_business_id),
    container: Container = Depends(get_container),
):
    return [schemas.ServiceOut.from_domain(s) for s in container.catalog.list_services(business_id)]


@router.delete("/services/{service_id}", response_model=schemas.MessageResponse)
def delete_service(
    service_id: int,
    business_id: int = Depends(get_business_id),
    container: Container = Depends(get_container),
):
    container.catalog.delete_service(service_id, business_id)
    return schemas.MessageResponse(message="Service deleted successfully")


@router.post(
    "/slots/generate",
    response_model=schemas.GenerateSlotsResponse,
    status_code=status.HTTP_201_CREATED,
)
def generate_slots(
    body: schemas.GenerateSlotsRequest,
    context: RequestContext = Depends(get_request_context),
    container: Container = Depends(get_container),
):
    slots = container.slot_generation.generate(
        context,
        service_id=body.service_id,
        start_date=body.start_date,
        end_date=body.end_date,
        start_time=body.start_time,
        end_time=body.end_time,
        interval=body.interval,
    )
    return schemas.GenerateSlotsResponse(
        message=f"Generated {len(slots)} time slots",
        slots=[schemas.TimeSlotOut.from_domain(slot) for slot in slots],
    )


@router.get("/slots", response_model=List[schemas.BusinessSlotOut])
def list_business_slots(
    business_id: int = Depends(get_business_id),
    container: Container = Depends(get_container),
):
    return container.catalog.list_business_slots(business_id)


@router.get("/public/slots", response_model=List[schemas.PublicSlotOut])
def list_public_slots(
    business_id: int = Query(...),
    service_id: int = Query(...),
    on_date: Optional[date] = Query(None, alias="date"),
    container: Container = Depends(get_container),
):
    return container.catalog.list_public_slots(business_id, service_id, on_date=on_date)


@router.get("/public/services", response_model=List[schemas.ServiceOut])
def list_public_services(
    business_id: int = Query(...),
    container: Container = Depends(get_container),
):
    return [
        schemas.ServiceOut.from_domain(s)
        for s in container.catalog.list_public_services(business_id)
    ]
