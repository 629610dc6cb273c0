"""
nextra/domains/category/schemas.py
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator

from nextra.api import ApiModel, AuditedResponse, audit_fields, strip_optional, strip_required
from nextra.models import Category


class CategoryRequest(ApiModel):
    name: str = Field(..., min_length=1, max_length=100, description="Category name, unique")
    description: Optional[str] = Field(None, max_length=500, description="Free-text description")

    @field_validator("name", mode="before")
    @classmethod
    def trim_name(cls, v):
        return strip_required(v, "name")

    @field_validator("description", mode="before")
    @classmethod
    def trim_description(cls, v):
        return strip_optional(v)

    def to_entity(self) -> Category:
        return Category(name=self.name, description=self.description)


class CategoryResponse(AuditedResponse):
    name: str
    description: Optional[str] = None


def category_to_response(category: Category) -> CategoryResponse:
    return CategoryResponse(**audit_fields(category), name=category.name, description=category.description)
