"""
nextra/domains/client/routes.py

Client endpoints. Create/update for ADMIN or AGENT via ClientRequest,
delete/restore for ADMIN; generic entity-body create/update are disabled.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List

from fastapi import APIRouter, Depends, Query

from nextra.api import ApiResponse
from nextra.auth_context import current_auditor, require_auth_context, require_role
from nextra.crud_router import register_crud_routes
from nextra.domains.client.schemas import ClientRequest, ClientResponse, client_to_response
from nextra.domains.client.service import ClientService, get_client_service
from nextra.rbac import ROLE_ADMIN, ROLE_AGENT

router = APIRouter(
    prefix="/api/clients",
    tags=["clients"],
    dependencies=[Depends(require_auth_context)],
)

_staff_only = [Depends(require_role(ROLE_ADMIN, ROLE_AGENT))]
_admin_only = [Depends(require_role(ROLE_ADMIN))]


@router.post("/new", status_code=201, response_model=ApiResponse[ClientResponse], dependencies=_staff_only)
def create_client(
    request: ClientRequest,
    service: ClientService = Depends(get_client_service),
    actor: str = Depends(current_auditor),
) -> ApiResponse:
    client = service.create_from_request(request, actor)
    return ApiResponse.ok(client_to_response(client))


@router.put("/{client_id}/update", response_model=ApiResponse[ClientResponse], dependencies=_staff_only)
def update_client(
    client_id: int,
    request: ClientRequest,
    service: ClientService = Depends(get_client_service),
    actor: str = Depends(current_auditor),
) -> ApiResponse:
    client = service.update_from_request(client_id, request, actor)
    return ApiResponse.ok(client_to_response(client))


@router.get("/agent/{agent_id}", response_model=ApiResponse[List[ClientResponse]])
def list_by_agent(agent_id: int, service: ClientService = Depends(get_client_service)) -> ApiResponse:
    return ApiResponse.ok([client_to_response(c) for c in service.find_by_assigned_agent(agent_id)])


@router.get("/fiscal/{fiscal_id}", response_model=ApiResponse[ClientResponse])
def get_by_fiscal_id(fiscal_id: str, service: ClientService = Depends(get_client_service)) -> ApiResponse:
    return ApiResponse.ok(client_to_response(service.get_by_fiscal_id(fiscal_id)))


@router.get("/budget", response_model=ApiResponse[List[ClientResponse]])
def list_by_budget(
    min_budget: Decimal = Query(..., alias="min", ge=0),
    max_budget: Decimal = Query(..., alias="max", ge=0),
    service: ClientService = Depends(get_client_service),
) -> ApiResponse:
    """Clients whose preferred budget range overlaps [min, max]."""
    clients = service.find_by_budget_range(min_budget, max_budget)
    return ApiResponse.ok([client_to_response(c) for c in clients])


register_crud_routes(
    router,
    service_dependency=get_client_service,
    to_response=client_to_response,
    response_model=ClientResponse,
    disabled={
        "create": "Use POST /api/clients/new instead",
        "update": "Use PUT /api/clients/{id}/update instead",
    },
    verb_dependencies={"delete": _admin_only, "restore": _admin_only},
)
