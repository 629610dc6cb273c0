"""
nextra/domains/appointment/service.py

Appointment service: scheduling rules and calendar queries.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from nextra.auditing import utcnow
from nextra.crud import ALL_CAPABILITIES, CrudService
from nextra.db import get_session
from nextra.domains.appointment.schemas import AppointmentCreateRequest, AppointmentUpdateRequest
from nextra.errors import BadRequest, ResourceNotFound
from nextra.models import Appointment, AppointmentStatus, Client, Property, User
from nextra.repository import BaseRepository

_TEXT_FIELDS = ("notes", "location", "title", "status")


class AppointmentService(CrudService[Appointment]):
    model = Appointment
    entity_name = "Appointment"
    capabilities = ALL_CAPABILITIES

    # -----------------------------------------------------
    # Queries (ordered by start time)
    # -----------------------------------------------------
    def _find(self, *criteria, descending: bool = False) -> List[Appointment]:
        order = Appointment.start_time.desc() if descending else Appointment.start_time.asc()
        return self.repository.find_active_where(*criteria, order_by=(order, Appointment.id))

    def find_by_user(self, user_id: int) -> List[Appointment]:
        return self._find(Appointment.user_id == user_id)

    def find_by_client(self, client_id: int) -> List[Appointment]:
        return self._find(Appointment.client_id == client_id)

    def find_by_property(self, property_id: int) -> List[Appointment]:
        return self._find(Appointment.property_id == property_id)

    def find_by_status(self, status: AppointmentStatus) -> List[Appointment]:
        return self._find(Appointment.status == status)

    def find_by_user_and_status(self, user_id: int, status: AppointmentStatus) -> List[Appointment]:
        return self._find(Appointment.user_id == user_id, Appointment.status == status)

    def find_by_date_range(self, start: datetime, end: datetime) -> List[Appointment]:
        """Appointments starting within [start, end]."""
        self._check_range(start, end)
        return self._find(Appointment.start_time.between(start, end))

    def find_by_user_and_date_range(self, user_id: int, start: datetime, end: datetime) -> List[Appointment]:
        self._check_range(start, end)
        return self._find(Appointment.user_id == user_id, Appointment.start_time.between(start, end))

    def find_upcoming_by_user(self, user_id: int) -> List[Appointment]:
        return self._find(Appointment.user_id == user_id, Appointment.start_time > utcnow())

    def find_past_by_user(self, user_id: int) -> List[Appointment]:
        return self._find(Appointment.user_id == user_id, Appointment.start_time < utcnow(), descending=True)

    @staticmethod
    def _check_range(start: datetime, end: datetime) -> None:
        if start > end:
            raise BadRequest("Range start must not be after range end")

    # -----------------------------------------------------
    # DTO-driven writes
    # -----------------------------------------------------
    def create_from_request(self, request: AppointmentCreateRequest, actor: str) -> Appointment:
        if request.end_time <= request.start_time:
            raise BadRequest("End time must be after start time")

        appointment = Appointment(
            start_time=request.start_time,
            end_time=request.end_time,
            notes=request.notes,
            location=request.location,
            title=request.title,
            status=request.status,
        )
        appointment.user = self._require(User, "User", request.user_id)
        appointment.client = self._optional(Client, "Client", request.client_id)
        appointment.property = self._optional(Property, "Property", request.property_id)
        return self.save(appointment, actor)

    def update_from_request(self, appointment_id: int, request: AppointmentUpdateRequest, actor: str) -> Appointment:
        appointment = self.get_or_404(appointment_id, for_update=True)
        supplied = request.model_fields_set

        start = request.start_time if "start_time" in supplied and request.start_time else appointment.start_time
        end = request.end_time if "end_time" in supplied and request.end_time else appointment.end_time
        if end <= start:
            raise BadRequest("End time must be after start time")
        appointment.start_time = start
        appointment.end_time = end

        for field in _TEXT_FIELDS:
            if field in supplied and (field != "status" or request.status is not None):
                setattr(appointment, field, getattr(request, field))
        if "client_id" in supplied:
            appointment.client = self._optional(Client, "Client", request.client_id)
        if "property_id" in supplied:
            appointment.property = self._optional(Property, "Property", request.property_id)

        return self.update(appointment_id, appointment, actor)

    def _require(self, model, label: str, entity_id: int):
        entity = BaseRepository(self.session, model).get(entity_id)
        if entity is None:
            raise ResourceNotFound(f"{label} not found with id: {entity_id}")
        return entity

    def _optional(self, model, label: str, entity_id: Optional[int]):
        if entity_id is None:
            return None
        return self._require(model, label, entity_id)


def get_appointment_service(session: Session = Depends(get_session)) -> AppointmentService:
    return AppointmentService(session)
