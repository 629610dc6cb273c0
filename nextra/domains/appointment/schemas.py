"""
nextra/domains/appointment/schemas.py

Appointment schemas. Datetimes are stored as naive UTC: aware inputs are
converted, naive inputs are taken to be UTC already.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import Field, field_validator

from nextra.api import ApiModel, AuditedResponse, audit_fields, strip_optional
from nextra.auditing import utcnow
from nextra.models import Appointment, AppointmentStatus


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class AppointmentCreateRequest(ApiModel):
    user_id: int = Field(..., description="User the appointment belongs to")
    client_id: Optional[int] = None
    property_id: Optional[int] = None
    start_time: datetime = Field(..., description="Must be in the future")
    end_time: datetime = Field(..., description="Must be in the future and after startTime")
    notes: Optional[str] = Field(None, max_length=2000)
    location: Optional[str] = Field(None, max_length=500)
    title: Optional[str] = Field(None, max_length=500)
    status: AppointmentStatus = AppointmentStatus.SCHEDULED

    @field_validator("start_time", "end_time")
    @classmethod
    def must_be_future(cls, v):
        v = to_naive_utc(v)
        if v <= utcnow():
            raise ValueError("must be a future date")
        return v

    @field_validator("notes", "location", "title", mode="before")
    @classmethod
    def trim_text(cls, v):
        return strip_optional(v)


class AppointmentUpdateRequest(ApiModel):
    """Partial update; omitted fields are left unchanged."""
    client_id: Optional[int] = None
    property_id: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=2000)
    location: Optional[str] = Field(None, max_length=500)
    title: Optional[str] = Field(None, max_length=500)
    status: Optional[AppointmentStatus] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_time(cls, v):
        return to_naive_utc(v)


class AppointmentResponse(AuditedResponse):
    user_id: int
    username: Optional[str] = None
    client_id: Optional[int] = None
    client_name: Optional[str] = None
    property_id: Optional[int] = None
    property_title: Optional[str] = None
    start_time: datetime
    end_time: datetime
    notes: Optional[str] = None
    location: Optional[str] = None
    title: Optional[str] = None
    status: AppointmentStatus


def appointment_to_response(appointment: Appointment) -> AppointmentResponse:
    return AppointmentResponse(
        **audit_fields(appointment),
        user_id=appointment.user_id,
        username=appointment.user.username if appointment.user else None,
        client_id=appointment.client_id,
        client_name=appointment.client.name if appointment.client else None,
        property_id=appointment.property_id,
        property_title=appointment.property.title if appointment.property else None,
        start_time=appointment.start_time,
        end_time=appointment.end_time,
        notes=appointment.notes,
        location=appointment.location,
        title=appointment.title,
        status=appointment.status,
    )
