"""
nextra/domains/user/schemas.py

User request/response schemas. Password hashes never leave the service.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import Field, field_validator

from nextra.api import ApiModel, AuditedResponse, audit_fields, check_email, strip_required
from nextra.models import User


class UserCreateRequest(ApiModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6, max_length=128)
    email: str = Field(..., max_length=100)
    roles: List[str] = Field(default_factory=list, description="Role names, with or without ROLE_ prefix")

    @field_validator("username", mode="before")
    @classmethod
    def trim_username(cls, v):
        return strip_required(v, "username")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return check_email(v)


class UserUpdateRequest(ApiModel):
    """Every field optional; only supplied fields change."""
    email: Optional[str] = Field(None, max_length=100)
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    active: Optional[bool] = None
    roles: Optional[List[str]] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return check_email(v)


class UserResponse(AuditedResponse):
    username: str
    email: str
    active: bool
    roles: List[str]


def user_to_response(user: User) -> UserResponse:
    return UserResponse(
        **audit_fields(user),
        username=user.username,
        email=user.email,
        active=user.active,
        roles=user.role_names,
    )
