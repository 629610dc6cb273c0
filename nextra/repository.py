"""
nextra/repository.py

Generic soft-delete aware repository over a SQLAlchemy session.

Every default read composes the active predicate (`deleted = false`);
only the explicitly named *_including_deleted / exists helpers see
soft-deleted rows.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from nextra.auditing import stamp_created, stamp_updated
from nextra.config import MAX_PAGE_SIZE
from nextra.errors import BadRequest
from nextra.models import BaseEntity

T = TypeVar("T", bound=BaseEntity)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


@dataclass
class Page(Generic[T]):
    items: List[T]
    page: int
    size: int
    total_elements: int

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return math.ceil(self.total_elements / self.size)


class BaseRepository(Generic[T]):
    """CRUD-by-id plus soft delete/restore for one entity type."""

    def __init__(self, session: Session, model: Type[T]):
        self.session = session
        self.model = model

    # -----------------------------------------------------
    # Query building
    # -----------------------------------------------------
    def active_predicate(self):
        return self.model.deleted.is_(False)

    def select_active(self) -> Select:
        return select(self.model).where(self.active_predicate())

    # -----------------------------------------------------
    # Reads
    # -----------------------------------------------------
    def get(self, entity_id: int, for_update: bool = False) -> Optional[T]:
        stmt = self.select_active().where(self.model.id == entity_id)
        if for_update:
            stmt = stmt.with_for_update(of=self.model)
        return self.session.scalars(stmt).unique().first()

    def get_including_deleted(self, entity_id: int) -> Optional[T]:
        return self.session.get(self.model, entity_id)

    def exists(self, entity_id: int) -> bool:
        """Existence across all rows, deleted or not."""
        stmt = select(self.model.id).where(self.model.id == entity_id).limit(1)
        return self.session.scalar(stmt) is not None

    def find_all_active(self) -> List[T]:
        return self.find_active_where()

    def find_all_including_deleted(self) -> List[T]:
        stmt = select(self.model).order_by(self.model.id)
        return list(self.session.scalars(stmt).unique().all())

    def find_active_where(self, *criteria: Any, order_by: Sequence[Any] = ()) -> List[T]:
        stmt = self.select_active().where(*criteria).order_by(*(order_by or (self.model.id,)))
        return list(self.session.scalars(stmt).unique().all())

    def find_one_active_where(self, *criteria: Any) -> Optional[T]:
        stmt = self.select_active().where(*criteria).order_by(self.model.id)
        return self.session.scalars(stmt).unique().first()

    def any_where(self, *criteria: Any) -> bool:
        """Existence check across all rows (unique constraints ignore the deleted flag)."""
        stmt = select(self.model.id).where(*criteria).limit(1)
        return self.session.scalar(stmt) is not None

    def count_active(self) -> int:
        stmt = select(func.count()).select_from(self.model).where(self.active_predicate())
        return self.session.scalar(stmt) or 0

    def find_page(self, page: int, size: int, sort: str = "id") -> Page[T]:
        if page < 0:
            raise BadRequest("Page index must not be negative")
        if size < 1:
            raise BadRequest("Page size must be at least 1")
        size = min(size, MAX_PAGE_SIZE)

        order_by = self._parse_sort(sort)
        stmt = self.select_active().order_by(*order_by).offset(page * size).limit(size)
        items = list(self.session.scalars(stmt).unique().all())
        return Page(items=items, page=page, size=size, total_elements=self.count_active())

    def _parse_sort(self, sort: Optional[str]) -> Tuple[Any, ...]:
        """Parse "field" or "field,asc|desc"; camelCase field names are accepted."""
        field, _, direction = (sort or "id").partition(",")
        field = field.strip() or "id"
        column_name = _CAMEL_BOUNDARY.sub("_", field).lower()
        column = self.model.__table__.columns.get(column_name)
        if column is None:
            raise BadRequest(f"Invalid sort field: {field}")

        direction = direction.strip().lower()
        if direction in ("", "asc"):
            ordered = column.asc()
        elif direction == "desc":
            ordered = column.desc()
        else:
            raise BadRequest(f"Invalid sort direction: {direction}")

        if column_name == "id":
            return (ordered,)
        # id as tie-breaker keeps page boundaries stable
        return (ordered, self.model.id.asc())

    # -----------------------------------------------------
    # Writes (flush only; the service owns the transaction)
    # -----------------------------------------------------
    def insert(self, entity: T, actor: str) -> T:
        stamp_created(entity, actor)
        entity.deleted = False
        self.session.add(entity)
        self.session.flush()
        return entity

    def touch(self, entity: T, actor: str) -> T:
        stamp_updated(entity, actor)
        self.session.flush()
        return entity

    def soft_delete(self, entity_id: int, actor: str) -> bool:
        entity = self.get_including_deleted(entity_id)
        if entity is None:
            return False
        entity.deleted = True
        self.touch(entity, actor)
        return True

    def restore(self, entity_id: int, actor: str) -> bool:
        entity = self.get_including_deleted(entity_id)
        if entity is None:
            return False
        entity.deleted = False
        self.touch(entity, actor)
        return True
