"""
nextra/domains/client/service.py

Client service: generic CRUD, agent/fiscal-id lookups and budget matching.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from nextra.crud import ALL_CAPABILITIES, CrudService
from nextra.db import get_session
from nextra.domains.client.schemas import ClientRequest
from nextra.errors import BadRequest, ResourceNotFound
from nextra.models import Account, Client
from nextra.repository import BaseRepository

_SCALAR_FIELDS = (
    "name",
    "email",
    "phone",
    "fiscal_id",
    "address",
    "preferred_budget_min",
    "preferred_budget_max",
    "preferred_locations",
    "preferred_property_types",
    "preferred_size_min",
    "preferred_size_max",
    "notes",
)


class ClientService(CrudService[Client]):
    model = Client
    entity_name = "Client"
    capabilities = ALL_CAPABILITIES

    # -----------------------------------------------------
    # Queries
    # -----------------------------------------------------
    def find_by_assigned_agent(self, agent_id: int) -> List[Client]:
        return self.repository.find_active_where(Client.assigned_agent_id == agent_id)

    def find_by_fiscal_id(self, fiscal_id: str) -> Optional[Client]:
        return self.repository.find_one_active_where(Client.fiscal_id == fiscal_id)

    def get_by_fiscal_id(self, fiscal_id: str) -> Client:
        client = self.find_by_fiscal_id(fiscal_id)
        if client is None:
            raise ResourceNotFound(f"Client not found with fiscal id: {fiscal_id}")
        return client

    def find_by_budget_min_at_least(self, amount: Decimal) -> List[Client]:
        return self.repository.find_active_where(Client.preferred_budget_min >= amount)

    def find_by_budget_max_at_most(self, amount: Decimal) -> List[Client]:
        return self.repository.find_active_where(Client.preferred_budget_max <= amount)

    def find_by_budget_range(self, min_budget: Decimal, max_budget: Decimal) -> List[Client]:
        """Clients whose preferred budget range overlaps [min_budget, max_budget]."""
        if min_budget > max_budget:
            raise BadRequest("min budget must not exceed max budget")
        return self.repository.find_active_where(
            Client.preferred_budget_min <= max_budget,
            Client.preferred_budget_max >= min_budget,
        )

    # -----------------------------------------------------
    # DTO-driven writes
    # -----------------------------------------------------
    def create_from_request(self, request: ClientRequest, actor: str) -> Client:
        self._ensure_unique_fiscal_id(request.fiscal_id, None)
        client = Client()
        self._apply_request(client, request)
        return self.save(client, actor)

    def update_from_request(self, client_id: int, request: ClientRequest, actor: str) -> Client:
        client = self.get_or_404(client_id, for_update=True)
        self._ensure_unique_fiscal_id(request.fiscal_id, client_id)
        self._apply_request(client, request)
        return self.update(client_id, client, actor)

    def _apply_request(self, client: Client, request: ClientRequest) -> None:
        for field in _SCALAR_FIELDS:
            setattr(client, field, getattr(request, field))
        client.assigned_agent = None
        if request.assigned_agent_id is not None:
            agent = BaseRepository(self.session, Account).get(request.assigned_agent_id)
            if agent is None:
                raise ResourceNotFound(f"Account not found with id: {request.assigned_agent_id}")
            client.assigned_agent = agent

    def _ensure_unique_fiscal_id(self, fiscal_id: str, exclude_id: Optional[int]) -> None:
        criteria = [Client.fiscal_id == fiscal_id]
        if exclude_id is not None:
            criteria.append(Client.id != exclude_id)
        if self.repository.any_where(*criteria):
            raise BadRequest(f"Fiscal id already registered: {fiscal_id}")


def get_client_service(session: Session = Depends(get_session)) -> ClientService:
    return ClientService(session)
