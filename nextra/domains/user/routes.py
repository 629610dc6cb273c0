"""
nextra/domains/user/routes.py

User management endpoints.

Security guarantees:
- /me is available to any authenticated user
- listing, lookup, creation and deletion are ADMIN only
- /{id}/update is allowed for ADMIN or the user themself; only ADMIN may
  change roles or the active flag
- generic POST / and PUT /{id} are disabled (use /new and /{id}/update)
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from nextra.api import ApiResponse
from nextra.auth_context import AuthContext, current_auditor, require_auth_context, require_role
from nextra.crud_router import register_crud_routes
from nextra.domains.user.schemas import UserCreateRequest, UserResponse, UserUpdateRequest, user_to_response
from nextra.domains.user.service import UserService, get_user_service
from nextra.errors import Forbidden
from nextra.rbac import ROLE_ADMIN

router = APIRouter(
    prefix="/api/users",
    tags=["users"],
    dependencies=[Depends(require_auth_context)],
)

_admin_only = [Depends(require_role(ROLE_ADMIN))]


def _as_list(users) -> ApiResponse:
    return ApiResponse.ok([user_to_response(u) for u in users])


@router.get("/me", response_model=ApiResponse[UserResponse])
def get_me(
    ctx: AuthContext = Depends(require_auth_context),
    service: UserService = Depends(get_user_service),
) -> ApiResponse:
    return ApiResponse.ok(user_to_response(service.get_or_404(ctx.user_id)))


@router.get("/all", response_model=ApiResponse[List[UserResponse]], dependencies=_admin_only)
def list_all_users(service: UserService = Depends(get_user_service)) -> ApiResponse:
    return _as_list(service.find_all())


@router.get("/active", response_model=ApiResponse[List[UserResponse]], dependencies=_admin_only)
def list_active_users(service: UserService = Depends(get_user_service)) -> ApiResponse:
    return _as_list(service.find_active_users())


@router.get("/username/{username}", response_model=ApiResponse[UserResponse], dependencies=_admin_only)
def get_by_username(username: str, service: UserService = Depends(get_user_service)) -> ApiResponse:
    return ApiResponse.ok(user_to_response(service.find_by_username(username)))


@router.get("/role/{role_name}", response_model=ApiResponse[List[UserResponse]], dependencies=_admin_only)
def list_by_role(role_name: str, service: UserService = Depends(get_user_service)) -> ApiResponse:
    return _as_list(service.find_by_role_name(role_name))


@router.post("/new", status_code=201, response_model=ApiResponse[UserResponse], dependencies=_admin_only)
def create_user(
    request: UserCreateRequest,
    service: UserService = Depends(get_user_service),
    actor: str = Depends(current_auditor),
) -> ApiResponse:
    return ApiResponse.ok(user_to_response(service.create_user(request, actor)))


@router.put("/{user_id}/update", response_model=ApiResponse[UserResponse])
def update_user(
    user_id: int,
    request: UserUpdateRequest,
    ctx: AuthContext = Depends(require_auth_context),
    service: UserService = Depends(get_user_service),
    actor: str = Depends(current_auditor),
) -> ApiResponse:
    if not ctx.is_admin:
        if ctx.user_id != user_id:
            raise Forbidden("You can only update your own account")
        if request.roles is not None or request.active is not None:
            raise Forbidden("Only administrators can change roles or the active flag")
    return ApiResponse.ok(user_to_response(service.update_user(user_id, request, actor)))


register_crud_routes(
    router,
    service_dependency=get_user_service,
    to_response=user_to_response,
    response_model=UserResponse,
    disabled={
        "create": "Use POST /api/users/new instead",
        "update": "Use PUT /api/users/{id}/update instead",
    },
    verb_dependencies={verb: _admin_only for verb in ("list", "get", "delete", "restore")},
)
