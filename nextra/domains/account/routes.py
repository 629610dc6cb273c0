"""
nextra/domains/account/routes.py

Account endpoints: the generic CRUD verbs, writes restricted to ADMIN.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from nextra.api import ApiResponse
from nextra.auth_context import require_auth_context, require_role
from nextra.crud_router import register_crud_routes
from nextra.domains.account.schemas import AccountRequest, AccountResponse, account_to_response
from nextra.domains.account.service import AccountService, get_account_service
from nextra.models import AccountRole
from nextra.rbac import ROLE_ADMIN

router = APIRouter(
    prefix="/api/accounts",
    tags=["accounts"],
    dependencies=[Depends(require_auth_context)],
)

_admin_only = [Depends(require_role(ROLE_ADMIN))]


@router.get("/role/{role}", response_model=ApiResponse[List[AccountResponse]])
def list_accounts_by_role(
    role: AccountRole,
    service: AccountService = Depends(get_account_service),
) -> ApiResponse:
    """List active accounts holding the given account role (ADMIN, AGENT, CLIENT)."""
    return ApiResponse.ok([account_to_response(a) for a in service.find_by_role(role)])


register_crud_routes(
    router,
    service_dependency=get_account_service,
    to_response=account_to_response,
    response_model=AccountResponse,
    payload_model=AccountRequest,
    to_entity=AccountRequest.to_entity,
    verb_dependencies={
        "create": _admin_only,
        "update": _admin_only,
        "delete": _admin_only,
        "restore": _admin_only,
    },
)
