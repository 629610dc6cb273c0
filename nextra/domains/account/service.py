"""
nextra/domains/account/service.py

Account service: generic CRUD plus email uniqueness.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from nextra.auditing import SYSTEM_AUDITOR
from nextra.crud import ALL_CAPABILITIES, CrudService
from nextra.db import get_session
from nextra.errors import BadRequest
from nextra.models import Account, AccountRole


class AccountService(CrudService[Account]):
    model = Account
    entity_name = "Account"
    capabilities = ALL_CAPABILITIES

    def exists_by_email(self, email: str, exclude_id: Optional[int] = None) -> bool:
        criteria = [Account.email == email]
        if exclude_id is not None:
            criteria.append(Account.id != exclude_id)
        return self.repository.any_where(*criteria)

    def find_by_role(self, role: AccountRole) -> List[Account]:
        return self.repository.find_active_where(Account.role == role)

    def save(self, entity: Account, actor: str = SYSTEM_AUDITOR) -> Account:
        if entity.id is None:
            self._ensure_unique_email(entity.email, None)
        return super().save(entity, actor)

    def update(self, entity_id: int, changes: Account, actor: str = SYSTEM_AUDITOR) -> Account:
        self.get_or_404(entity_id)
        self._ensure_unique_email(changes.email, entity_id)
        return super().update(entity_id, changes, actor)

    def _ensure_unique_email(self, email: str, exclude_id: Optional[int]) -> None:
        if self.exists_by_email(email, exclude_id):
            raise BadRequest(f"Account email already in use: {email}")


def get_account_service(session: Session = Depends(get_session)) -> AccountService:
    return AccountService(session)
