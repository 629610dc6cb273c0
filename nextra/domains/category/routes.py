"""
nextra/domains/category/routes.py

Category endpoints: generic CRUD verbs; reads for any authenticated user,
writes for ADMIN only.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from nextra.auth_context import require_auth_context, require_role
from nextra.crud_router import register_crud_routes
from nextra.domains.category.schemas import CategoryRequest, CategoryResponse, category_to_response
from nextra.domains.category.service import get_category_service
from nextra.rbac import ROLE_ADMIN

router = APIRouter(
    prefix="/api/categories",
    tags=["categories"],
    dependencies=[Depends(require_auth_context)],
)

_admin_only = [Depends(require_role(ROLE_ADMIN))]

register_crud_routes(
    router,
    service_dependency=get_category_service,
    to_response=category_to_response,
    response_model=CategoryResponse,
    payload_model=CategoryRequest,
    to_entity=CategoryRequest.to_entity,
    verb_dependencies={verb: _admin_only for verb in ("create", "update", "delete", "restore")},
)
