"""
nextra/api.py

Response envelope and shared schema base classes.

Every response body is {success, message, data}; paginated lists put
{items, page, size, totalElements, totalPages} inside data.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Callable, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ApiModel(BaseModel):
    """camelCase on the wire; snake_case (or camelCase) accepted on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AuditedResponse(ApiModel):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None


def audit_fields(entity: Any) -> dict:
    return {
        "id": entity.id,
        "created_at": entity.created_at,
        "updated_at": entity.updated_at,
        "created_by": entity.created_by,
        "updated_by": entity.updated_by,
    }


class ApiResponse(BaseModel, Generic[T]):
    success: bool
    message: str
    data: Optional[T] = None

    @classmethod
    def ok(cls, data: Any = None, message: str = "OK") -> "ApiResponse":
        return cls(success=True, message=message, data=data)

    @classmethod
    def error(cls, message: str, data: Any = None) -> "ApiResponse":
        return cls(success=False, message=message, data=data)


class PagedResponse(ApiModel, Generic[T]):
    items: List[T]
    page: int
    size: int
    total_elements: int
    total_pages: int

    @classmethod
    def from_page(cls, page: Any, mapper: Callable[[Any], Any]) -> "PagedResponse":
        return cls(
            items=[mapper(item) for item in page.items],
            page=page.page,
            size=page.size,
            total_elements=page.total_elements,
            total_pages=page.total_pages,
        )


# ---------------------------------------------------------
# Validation helpers shared by request schemas
# ---------------------------------------------------------
def strip_required(value: Any, field_name: str) -> Any:
    """Trim a required string and reject it when blank."""
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValueError(f"{field_name} must not be blank")
    return value


def strip_optional(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def check_email(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("must be a well-formed email address")
    return value
