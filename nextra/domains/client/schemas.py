"""
nextra/domains/client/schemas.py

Schemas for buyer/tenant clients and their search preferences.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator, model_validator

from nextra.api import ApiModel, AuditedResponse, audit_fields, check_email, strip_optional, strip_required
from nextra.models import Client


class ClientRequest(ApiModel):
    """
    Create/update payload.

    name, email, phone, fiscalId and address are required; budget and size
    ranges are optional but, when both bounds are given, min must not exceed max.
    """
    name: str = Field(..., max_length=100)
    email: str = Field(..., max_length=100)
    phone: str = Field(..., max_length=30)
    fiscal_id: str = Field(..., max_length=50, description="Tax identifier, unique per client")
    address: str = Field(..., max_length=300)
    preferred_budget_min: Optional[Decimal] = Field(None, ge=0, max_digits=15, decimal_places=2)
    preferred_budget_max: Optional[Decimal] = Field(None, ge=0, max_digits=15, decimal_places=2)
    preferred_locations: Optional[str] = Field(None, max_length=500)
    preferred_property_types: Optional[str] = Field(None, max_length=500)
    preferred_size_min: Optional[float] = Field(None, ge=0)
    preferred_size_max: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=2000)
    assigned_agent_id: Optional[int] = Field(None, description="Account id of the assigned agent")

    @field_validator("name", "phone", "fiscal_id", "address", mode="before")
    @classmethod
    def trim_required(cls, v, info):
        return strip_required(v, info.field_name)

    @field_validator("email", mode="before")
    @classmethod
    def trim_email(cls, v):
        return strip_required(v, "email")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return check_email(v)

    @field_validator("preferred_locations", "preferred_property_types", "notes", mode="before")
    @classmethod
    def trim_optional(cls, v):
        return strip_optional(v)

    @model_validator(mode="after")
    def check_ranges(self):
        if (
            self.preferred_budget_min is not None
            and self.preferred_budget_max is not None
            and self.preferred_budget_min > self.preferred_budget_max
        ):
            raise ValueError("preferredBudgetMin must not exceed preferredBudgetMax")
        if (
            self.preferred_size_min is not None
            and self.preferred_size_max is not None
            and self.preferred_size_min > self.preferred_size_max
        ):
            raise ValueError("preferredSizeMin must not exceed preferredSizeMax")
        return self


class ClientResponse(AuditedResponse):
    name: str
    email: str
    phone: str
    fiscal_id: str
    address: str
    preferred_budget_min: Optional[float] = None
    preferred_budget_max: Optional[float] = None
    preferred_locations: Optional[str] = None
    preferred_property_types: Optional[str] = None
    preferred_size_min: Optional[float] = None
    preferred_size_max: Optional[float] = None
    notes: Optional[str] = None
    assigned_agent_id: Optional[int] = None
    assigned_agent_name: Optional[str] = None


def _as_float(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def client_to_response(client: Client) -> ClientResponse:
    return ClientResponse(
        **audit_fields(client),
        name=client.name,
        email=client.email,
        phone=client.phone,
        fiscal_id=client.fiscal_id,
        address=client.address,
        preferred_budget_min=_as_float(client.preferred_budget_min),
        preferred_budget_max=_as_float(client.preferred_budget_max),
        preferred_locations=client.preferred_locations,
        preferred_property_types=client.preferred_property_types,
        preferred_size_min=client.preferred_size_min,
        preferred_size_max=client.preferred_size_max,
        notes=client.notes,
        assigned_agent_id=client.assigned_agent_id,
        assigned_agent_name=client.assigned_agent.name if client.assigned_agent else None,
    )
