from __future__ import annotations

from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from nextra.auditing import SYSTEM_AUDITOR
from nextra.crud import ALL_CAPABILITIES, CrudService
from nextra.db import get_session
from nextra.errors import BadRequest
from nextra.models import Category


class CategoryService(CrudService[Category]):
    model = Category
    entity_name = "Category"
    capabilities = ALL_CAPABILITIES

    def exists_by_name(self, name: str, exclude_id: Optional[int] = None) -> bool:
        criteria = [Category.name == name]
        if exclude_id is not None:
            criteria.append(Category.id != exclude_id)
        return self.repository.any_where(*criteria)

    def save(self, entity: Category, actor: str = SYSTEM_AUDITOR) -> Category:
        if entity.id is None and self.exists_by_name(entity.name):
            raise BadRequest(f"Category already exists: {entity.name}")
        return super().save(entity, actor)

    def update(self, entity_id: int, changes: Category, actor: str = SYSTEM_AUDITOR) -> Category:
        self.get_or_404(entity_id)
        if self.exists_by_name(changes.name, exclude_id=entity_id):
            raise BadRequest(f"Category already exists: {changes.name}")
        return super().update(entity_id, changes, actor)


def get_category_service(session: Session = Depends(get_session)) -> CategoryService:
    return CategoryService(session)
