"""
nextra/domains/appointment/routes.py

Appointment endpoints.

Security guarantees:
- All endpoints require authentication
- /user/{userId} views are limited to ADMIN or that user
- creating for another user requires ADMIN or AGENT
- updating or deleting requires ADMIN or the appointment's user
- generic POST /, PUT /{id} and DELETE /{id} are disabled in favour of
  /create, /{id}/update and /{id}/delete
"""

from __future__ import annotations

from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Query

from nextra.api import ApiResponse
from nextra.auth_context import AuthContext, current_auditor, require_auth_context
from nextra.crud_router import register_crud_routes
from nextra.domains.appointment.schemas import (
    AppointmentCreateRequest,
    AppointmentResponse,
    AppointmentUpdateRequest,
    appointment_to_response,
    to_naive_utc,
)
from nextra.domains.appointment.service import AppointmentService, get_appointment_service
from nextra.errors import Forbidden
from nextra.models import AppointmentStatus
from nextra.rbac import ROLE_ADMIN, ROLE_AGENT

router = APIRouter(
    prefix="/api/appointments",
    tags=["appointments"],
    dependencies=[Depends(require_auth_context)],
)

AppointmentList = ApiResponse[List[AppointmentResponse]]


def _as_list(appointments) -> ApiResponse:
    return ApiResponse.ok([appointment_to_response(a) for a in appointments])


def _ensure_self_or_admin(ctx: AuthContext, user_id: int) -> None:
    if ctx.user_id != user_id and not ctx.is_admin:
        raise Forbidden("You can only access your own appointments")


# ---------------------------------------------------------
# Current user
# ---------------------------------------------------------
@router.get("/me", response_model=AppointmentList)
def my_appointments(
    ctx: AuthContext = Depends(require_auth_context),
    service: AppointmentService = Depends(get_appointment_service),
) -> ApiResponse:
    return _as_list(service.find_by_user(ctx.user_id))


@router.get("/me/upcoming", response_model=AppointmentList)
def my_upcoming_appointments(
    ctx: AuthContext = Depends(require_auth_context),
    service: AppointmentService = Depends(get_appointment_service),
) -> ApiResponse:
    return _as_list(service.find_upcoming_by_user(ctx.user_id))


@router.get("/me/past", response_model=AppointmentList)
def my_past_appointments(
    ctx: AuthContext = Depends(require_auth_context),
    service: AppointmentService = Depends(get_appointment_service),
) -> ApiResponse:
    return _as_list(service.find_past_by_user(ctx.user_id))


# ---------------------------------------------------------
# Queries
# ---------------------------------------------------------
@router.get("/user/{user_id}", response_model=AppointmentList)
def appointments_by_user(
    user_id: int,
    ctx: AuthContext = Depends(require_auth_context),
    service: AppointmentService = Depends(get_appointment_service),
) -> ApiResponse:
    _ensure_self_or_admin(ctx, user_id)
    return _as_list(service.find_by_user(user_id))


@router.get("/user/{user_id}/range", response_model=AppointmentList)
def appointments_by_user_and_range(
    user_id: int,
    start: datetime = Query(...),
    end: datetime = Query(...),
    ctx: AuthContext = Depends(require_auth_context),
    service: AppointmentService = Depends(get_appointment_service),
) -> ApiResponse:
    _ensure_self_or_admin(ctx, user_id)
    return _as_list(service.find_by_user_and_date_range(user_id, to_naive_utc(start), to_naive_utc(end)))


@router.get("/user/{user_id}/status/{status}", response_model=AppointmentList)
def appointments_by_user_and_status(
    user_id: int,
    status: AppointmentStatus,
    ctx: AuthContext = Depends(require_auth_context),
    service: AppointmentService = Depends(get_appointment_service),
) -> ApiResponse:
    _ensure_self_or_admin(ctx, user_id)
    return _as_list(service.find_by_user_and_status(user_id, status))


@router.get("/client/{client_id}", response_model=AppointmentList)
def appointments_by_client(client_id: int, service: AppointmentService = Depends(get_appointment_service)) -> ApiResponse:
    return _as_list(service.find_by_client(client_id))


@router.get("/property/{property_id}", response_model=AppointmentList)
def appointments_by_property(
    property_id: int,
    service: AppointmentService = Depends(get_appointment_service),
) -> ApiResponse:
    return _as_list(service.find_by_property(property_id))


@router.get("/status/{status}", response_model=AppointmentList)
def appointments_by_status(
    status: AppointmentStatus,
    service: AppointmentService = Depends(get_appointment_service),
) -> ApiResponse:
    return _as_list(service.find_by_status(status))


@router.get("/range", response_model=AppointmentList)
def appointments_in_range(
    start: datetime = Query(...),
    end: datetime = Query(...),
    service: AppointmentService = Depends(get_appointment_service),
) -> ApiResponse:
    """Appointments whose start time falls within [start, end]."""
    return _as_list(service.find_by_date_range(to_naive_utc(start), to_naive_utc(end)))


# ---------------------------------------------------------
# Writes
# ---------------------------------------------------------
@router.post("/create", status_code=201, response_model=ApiResponse[AppointmentResponse])
def create_appointment(
    request: AppointmentCreateRequest,
    ctx: AuthContext = Depends(require_auth_context),
    service: AppointmentService = Depends(get_appointment_service),
    actor: str = Depends(current_auditor),
) -> ApiResponse:
    if request.user_id != ctx.user_id and not ctx.has_role(ROLE_ADMIN, ROLE_AGENT):
        raise Forbidden("You can only create appointments for yourself")
    return ApiResponse.ok(appointment_to_response(service.create_from_request(request, actor)))


@router.put("/{appointment_id}/update", response_model=ApiResponse[AppointmentResponse])
def update_appointment(
    appointment_id: int,
    request: AppointmentUpdateRequest,
    ctx: AuthContext = Depends(require_auth_context),
    service: AppointmentService = Depends(get_appointment_service),
    actor: str = Depends(current_auditor),
) -> ApiResponse:
    _ensure_self_or_admin(ctx, service.get_or_404(appointment_id).user_id)
    return ApiResponse.ok(appointment_to_response(service.update_from_request(appointment_id, request, actor)))


@router.delete("/{appointment_id}/delete", response_model=ApiResponse)
def delete_appointment(
    appointment_id: int,
    ctx: AuthContext = Depends(require_auth_context),
    service: AppointmentService = Depends(get_appointment_service),
    actor: str = Depends(current_auditor),
) -> ApiResponse:
    _ensure_self_or_admin(ctx, service.get_or_404(appointment_id).user_id)
    service.delete(appointment_id, actor)
    return ApiResponse.ok(None)


register_crud_routes(
    router,
    service_dependency=get_appointment_service,
    to_response=appointment_to_response,
    response_model=AppointmentResponse,
    disabled={
        "create": "Use POST /api/appointments/create instead",
        "update": "Use PUT /api/appointments/{id}/update instead",
        "delete": "Use DELETE /api/appointments/{id}/delete instead",
    },
)
