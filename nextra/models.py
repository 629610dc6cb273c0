"""
nextra/models.py

SQLAlchemy entities for the Nextra backend.

Base layer:
- Auditable: created_by/updated_by/created_at/updated_at columns
- BaseEntity: integer id + soft-delete flag, extended by every domain entity

Rows are never physically removed through the service layer; "delete" flips
`deleted` and every default repository read filters on it.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    Text,
)
from sqlalchemy import Enum as SqlEnum
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from nextra.auditing import SYSTEM_AUDITOR, utcnow


# Enums
class AccountRole(str, Enum):
    ADMIN = "ADMIN"
    AGENT = "AGENT"
    CLIENT = "CLIENT"


class PropertyType(str, Enum):
    APARTMENT = "APARTMENT"
    HOUSE = "HOUSE"
    VILLA = "VILLA"
    LAND = "LAND"
    COMMERCIAL = "COMMERCIAL"
    OFFICE = "OFFICE"


class PropertyStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    RESERVED = "RESERVED"
    SOLD = "SOLD"
    RENTED = "RENTED"


class AppointmentStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


def _enum_column(enum_cls):
    return SqlEnum(enum_cls, native_enum=False, length=20, validate_strings=True)


# ---------------------------------------------------------
# Base layer
# ---------------------------------------------------------
class Base(DeclarativeBase):
    pass


class Auditable:
    """Audit columns shared by every persisted entity."""

    created_by: Mapped[str] = mapped_column(String(100), default=SYSTEM_AUDITOR, nullable=False)
    updated_by: Mapped[str] = mapped_column(String(100), default=SYSTEM_AUDITOR, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)


class BaseEntity(Auditable, Base):
    """Soft-deletable entity with a system-assigned integer id."""

    __abstract__ = True

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)

    # Never copied from a client-supplied entity on update
    PROTECTED_FIELDS = frozenset({"id", "deleted", "created_by", "created_at", "updated_by", "updated_at"})


# ---------------------------------------------------------
# Users and roles
# ---------------------------------------------------------
user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", ForeignKey("users.id"), primary_key=True),
    Column("role_id", ForeignKey("roles.id"), primary_key=True),
)


class Role(Base):
    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(200))


class User(BaseEntity):
    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(100), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    roles: Mapped[List[Role]] = relationship(secondary=user_roles, lazy="selectin")

    @property
    def role_names(self) -> List[str]:
        return sorted(role.name for role in self.roles)


# ---------------------------------------------------------
# Accounts and categories
# ---------------------------------------------------------
class Account(BaseEntity):
    __tablename__ = "accounts"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(30))
    role: Mapped[AccountRole] = mapped_column(_enum_column(AccountRole), default=AccountRole.CLIENT, nullable=False)


class Category(BaseEntity):
    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500))


# ---------------------------------------------------------
# Properties
# ---------------------------------------------------------
class Property(BaseEntity):
    __tablename__ = "properties"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(200))
    address: Mapped[Optional[str]] = mapped_column(String(300))
    price: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    size: Mapped[Optional[float]] = mapped_column(Float)
    description: Mapped[Optional[str]] = mapped_column(Text)
    property_type: Mapped[Optional[PropertyType]] = mapped_column(_enum_column(PropertyType))
    status: Mapped[PropertyStatus] = mapped_column(
        _enum_column(PropertyStatus), default=PropertyStatus.AVAILABLE, nullable=False
    )
    bedrooms: Mapped[Optional[int]] = mapped_column(Integer)
    bathrooms: Mapped[Optional[int]] = mapped_column(Integer)
    floors: Mapped[Optional[int]] = mapped_column(Integer)
    year_built: Mapped[Optional[int]] = mapped_column(Integer)
    features: Mapped[Optional[str]] = mapped_column(Text)

    # Ordered list of public image URLs; always reassigned, never mutated in place
    images: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    main_image: Mapped[Optional[str]] = mapped_column(String(500))

    owner_id: Mapped[Optional[int]] = mapped_column(ForeignKey("accounts.id"), index=True)
    category_id: Mapped[Optional[int]] = mapped_column(ForeignKey("categories.id"), index=True)
    owner: Mapped[Optional[Account]] = relationship(lazy="joined")
    category: Mapped[Optional[Category]] = relationship(lazy="joined")


# ---------------------------------------------------------
# Clients
# ---------------------------------------------------------
class Client(BaseEntity):
    __tablename__ = "clients"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str] = mapped_column(String(30), nullable=False)
    fiscal_id: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    address: Mapped[str] = mapped_column(String(300), nullable=False)
    preferred_budget_min: Mapped[Optional[Decimal]] = mapped_column(Numeric(15, 2))
    preferred_budget_max: Mapped[Optional[Decimal]] = mapped_column(Numeric(15, 2))
    preferred_locations: Mapped[Optional[str]] = mapped_column(String(500))
    preferred_property_types: Mapped[Optional[str]] = mapped_column(String(500))
    preferred_size_min: Mapped[Optional[float]] = mapped_column(Float)
    preferred_size_max: Mapped[Optional[float]] = mapped_column(Float)
    notes: Mapped[Optional[str]] = mapped_column(String(2000))

    assigned_agent_id: Mapped[Optional[int]] = mapped_column(ForeignKey("accounts.id"), index=True)
    assigned_agent: Mapped[Optional[Account]] = relationship(lazy="joined")


# ---------------------------------------------------------
# Appointments
# ---------------------------------------------------------
class Appointment(BaseEntity):
    __tablename__ = "appointments"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    client_id: Mapped[Optional[int]] = mapped_column(ForeignKey("clients.id"), index=True)
    property_id: Mapped[Optional[int]] = mapped_column(ForeignKey("properties.id"), index=True)
    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    end_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(String(2000))
    location: Mapped[Optional[str]] = mapped_column(String(500))
    status: Mapped[AppointmentStatus] = mapped_column(
        _enum_column(AppointmentStatus), default=AppointmentStatus.SCHEDULED, nullable=False
    )
    title: Mapped[Optional[str]] = mapped_column(String(500))

    user: Mapped[User] = relationship(lazy="joined")
    client: Mapped[Optional[Client]] = relationship(lazy="joined")
    property: Mapped[Optional[Property]] = relationship(lazy="joined")
