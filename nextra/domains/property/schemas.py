"""
nextra/domains/property/schemas.py

Pydantic schemas for property listings.

PropertyRequest is the only accepted write payload (POST /new, PUT /{id}/update);
the generic entity-body verbs are disabled on this resource.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator

from nextra.api import ApiModel, AuditedResponse, audit_fields, strip_optional, strip_required
from nextra.models import Property, PropertyStatus, PropertyType


class PropertyRequest(ApiModel):
    """Create/update payload. title and a positive price are required."""

    title: str = Field(..., min_length=1, max_length=200, description="Listing title (required)")
    location: Optional[str] = Field(None, max_length=200, description="City / area")
    address: Optional[str] = Field(None, max_length=300, description="Street address")
    price: Decimal = Field(..., gt=0, max_digits=15, decimal_places=2, description="Asking price (> 0)")
    size: Optional[float] = Field(None, ge=0, description="Surface in square metres")
    description: Optional[str] = Field(None, description="Long description")
    property_type: Optional[PropertyType] = Field(None, description="APARTMENT, HOUSE, VILLA, ...")
    status: PropertyStatus = Field(PropertyStatus.AVAILABLE, description="Listing status")
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    floors: Optional[int] = Field(None, ge=0)
    year_built: Optional[int] = Field(None, ge=1000, le=2100)
    features: Optional[str] = Field(None, description="Comma-separated feature list")
    owner_id: Optional[int] = Field(None, description="Owning account id")
    category_id: Optional[int] = Field(None, description="Category id")

    @field_validator("title", mode="before")
    @classmethod
    def trim_title(cls, v):
        return strip_required(v, "title")

    @field_validator("location", "address", "description", "features", mode="before")
    @classmethod
    def trim_optional_text(cls, v):
        return strip_optional(v)


class PropertyResponse(AuditedResponse):
    title: str
    location: Optional[str] = None
    address: Optional[str] = None
    price: float
    size: Optional[float] = None
    description: Optional[str] = None
    property_type: Optional[PropertyType] = None
    status: PropertyStatus
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    floors: Optional[int] = None
    year_built: Optional[int] = None
    features: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    main_image: Optional[str] = None
    owner_id: Optional[int] = None
    owner_name: Optional[str] = None
    category_id: Optional[int] = None
    category_name: Optional[str] = None


def property_to_response(prop: Property) -> PropertyResponse:
    return PropertyResponse(
        **audit_fields(prop),
        title=prop.title,
        location=prop.location,
        address=prop.address,
        price=float(prop.price),
        size=prop.size,
        description=prop.description,
        property_type=prop.property_type,
        status=prop.status,
        bedrooms=prop.bedrooms,
        bathrooms=prop.bathrooms,
        floors=prop.floors,
        year_built=prop.year_built,
        features=prop.features,
        images=list(prop.images or []),
        main_image=prop.main_image,
        owner_id=prop.owner_id,
        owner_name=prop.owner.name if prop.owner else None,
        category_id=prop.category_id,
        category_name=prop.category.name if prop.category else None,
    )
