"""
nextra/domains/account/schemas.py

Request/response schemas for accounts (agents, admins and client contacts).
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator

from nextra.api import ApiModel, AuditedResponse, audit_fields, check_email, strip_optional, strip_required
from nextra.models import Account, AccountRole


class AccountRequest(ApiModel):
    name: str = Field(..., min_length=1, max_length=100, description="Display name (required)")
    email: str = Field(..., max_length=100, description="Contact email, unique across accounts")
    phone: Optional[str] = Field(None, max_length=30, description="Phone number")
    role: AccountRole = Field(AccountRole.CLIENT, description="ADMIN, AGENT or CLIENT")

    @field_validator("name", mode="before")
    @classmethod
    def trim_name(cls, v):
        return strip_required(v, "name")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return check_email(v)

    @field_validator("phone", mode="before")
    @classmethod
    def trim_phone(cls, v):
        return strip_optional(v)

    def to_entity(self) -> Account:
        return Account(name=self.name, email=self.email, phone=self.phone, role=self.role)


class AccountResponse(AuditedResponse):
    name: str
    email: str
    phone: Optional[str] = None
    role: AccountRole


def account_to_response(account: Account) -> AccountResponse:
    return AccountResponse(
        **audit_fields(account),
        name=account.name,
        email=account.email,
        phone=account.phone,
        role=account.role,
    )
