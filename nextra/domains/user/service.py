"""
nextra/domains/user/service.py

User service.

Users can be created, read, updated and soft-deleted, but not restored:
RESTORE is deliberately absent from the capability set, so the generic
restore endpoint answers 501.
"""

from __future__ import annotations

from typing import Iterable, List

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from nextra.auth_context import hash_password, verify_password
from nextra.crud import Capability, CrudService
from nextra.db import get_session
from nextra.domains.user.schemas import UserCreateRequest, UserUpdateRequest
from nextra.errors import BadRequest, ResourceNotFound, Unauthorized
from nextra.models import Role, User
from nextra.observability import get_logger
from nextra.rbac import DEFAULT_ROLE, normalize_role

logger = get_logger(__name__)


class UserService(CrudService[User]):
    model = User
    entity_name = "User"
    capabilities = frozenset({Capability.CREATE, Capability.READ, Capability.UPDATE, Capability.SOFT_DELETE})

    # -----------------------------------------------------
    # Queries
    # -----------------------------------------------------
    def find_by_username(self, username: str) -> User:
        user = self.repository.find_one_active_where(User.username == username)
        if user is None:
            raise ResourceNotFound(f"User not found with username: {username}")
        return user

    def find_active_users(self) -> List[User]:
        return self.repository.find_active_where(User.active.is_(True))

    def find_by_role_name(self, role_name: str) -> List[User]:
        return self.repository.find_active_where(User.roles.any(Role.name == normalize_role(role_name)))

    # -----------------------------------------------------
    # Authentication
    # -----------------------------------------------------
    def authenticate(self, username: str, password: str) -> User:
        user = self.repository.find_one_active_where(User.username == username)
        if user is None or not verify_password(password, user.password):
            logger.info("login_failed", username=username)
            raise Unauthorized("Invalid username or password")
        if not user.active:
            logger.info("login_inactive_user", username=username)
            raise Unauthorized("User account is disabled")
        return user

    # -----------------------------------------------------
    # DTO-driven writes
    # -----------------------------------------------------
    def create_user(self, request: UserCreateRequest, actor: str) -> User:
        if self.repository.any_where(User.username == request.username):
            raise BadRequest(f"Username already exists: {request.username}")
        if self.repository.any_where(User.email == request.email):
            raise BadRequest(f"Email already exists: {request.email}")

        user = User(
            username=request.username,
            password=hash_password(request.password),
            email=request.email,
            active=True,
            roles=self.resolve_roles(request.roles),
        )
        return self.save(user, actor)

    def update_user(self, user_id: int, request: UserUpdateRequest, actor: str) -> User:
        user = self.get_or_404(user_id, for_update=True)

        if request.email is not None and request.email != user.email:
            if self.repository.any_where(User.email == request.email, User.id != user_id):
                raise BadRequest(f"Email already exists: {request.email}")
            user.email = request.email
        if request.password is not None:
            user.password = hash_password(request.password)
        if request.active is not None:
            user.active = request.active
        if request.roles is not None:
            user.roles = self.resolve_roles(request.roles)

        return self.update(user_id, user, actor)

    def resolve_roles(self, names: Iterable[str]) -> List[Role]:
        wanted = sorted({normalize_role(name) for name in names if name and name.strip()}) or [DEFAULT_ROLE]
        roles = []
        for name in wanted:
            role = self.session.scalars(select(Role).where(Role.name == name)).first()
            if role is None:
                raise ResourceNotFound(f"Role not found: {name}")
            roles.append(role)
        return roles


def get_user_service(session: Session = Depends(get_session)) -> UserService:
    return UserService(session)
