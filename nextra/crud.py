"""
nextra/crud.py

Generic CRUD service with soft delete, built on BaseRepository.

Each service declares the capabilities it supports as a static set; an
operation outside that set fails with UnsupportedOperation instead of
silently succeeding. Restore in particular reports 501 when undeclared.
"""

from __future__ import annotations

from enum import Enum
from typing import ClassVar, FrozenSet, Generic, List, Optional, Type, TypeVar

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from nextra.auditing import SYSTEM_AUDITOR
from nextra.errors import ResourceNotFound, UnsupportedOperation, restore_not_supported
from nextra.models import BaseEntity
from nextra.observability import get_logger
from nextra.repository import BaseRepository, Page

T = TypeVar("T", bound=BaseEntity)

logger = get_logger(__name__)


class Capability(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    SOFT_DELETE = "soft_delete"
    RESTORE = "restore"


ALL_CAPABILITIES: FrozenSet[Capability] = frozenset(Capability)


class CrudService(Generic[T]):
    """
    Uniform save/update/delete/restore/find operations for one entity type.

    Subclasses set `model`, optionally `entity_name` (used in NotFound messages)
    and `capabilities`.
    """

    model: ClassVar[Type[BaseEntity]]
    entity_name: ClassVar[str] = "Entity"
    capabilities: ClassVar[FrozenSet[Capability]] = ALL_CAPABILITIES

    def __init__(self, session: Session):
        self.session = session
        self.repository: BaseRepository[T] = BaseRepository(session, self.model)

    # -----------------------------------------------------
    # Capability checks
    # -----------------------------------------------------
    @classmethod
    def supports(cls, capability: Capability) -> bool:
        return capability in cls.capabilities

    def require(self, capability: Capability) -> None:
        if self.supports(capability):
            return
        if capability is Capability.RESTORE:
            raise restore_not_supported()
        raise UnsupportedOperation(f"Operation '{capability.value}' not supported for this entity")

    def not_found(self, entity_id: int) -> ResourceNotFound:
        return ResourceNotFound(f"{self.entity_name} not found with id: {entity_id}")

    # -----------------------------------------------------
    # Writes
    # -----------------------------------------------------
    def save(self, entity: T, actor: str = SYSTEM_AUDITOR) -> T:
        """Insert a new entity, or update the existing one with the same id."""
        if entity.id is not None:
            return self.update(entity.id, entity, actor)

        self.require(Capability.CREATE)
        self.repository.insert(entity, actor)
        self.commit()
        logger.info("entity_created", entity=self.entity_name, entity_id=entity.id, actor=actor)
        return entity

    def update(self, entity_id: int, changes: T, actor: str = SYSTEM_AUDITOR) -> T:
        """Overwrite the active row's fields with `changes`, keeping id, flag and creation metadata."""
        self.require(Capability.UPDATE)
        current = self.get_or_404(entity_id, for_update=True)
        if changes is not current:
            self.copy_fields(changes, current)
        self.repository.touch(current, actor)
        self.commit()
        # FK columns may have changed under already-loaded relationships
        self.session.refresh(current)
        logger.info("entity_updated", entity=self.entity_name, entity_id=entity_id, actor=actor)
        return current

    def delete(self, entity_id: int, actor: str = SYSTEM_AUDITOR) -> None:
        self.require(Capability.SOFT_DELETE)
        if not self.repository.exists(entity_id):
            raise self.not_found(entity_id)
        self.repository.soft_delete(entity_id, actor)
        self.commit()
        logger.warning("entity_soft_deleted", entity=self.entity_name, entity_id=entity_id, actor=actor)

    def restore(self, entity_id: int, actor: str = SYSTEM_AUDITOR) -> None:
        self.require(Capability.RESTORE)
        if not self.repository.exists(entity_id):
            raise self.not_found(entity_id)
        self.repository.restore(entity_id, actor)
        self.commit()
        logger.info("entity_restored", entity=self.entity_name, entity_id=entity_id, actor=actor)

    def commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

    def copy_fields(self, source: T, target: T) -> None:
        for attr in inspect(self.model).column_attrs:
            if attr.key in BaseEntity.PROTECTED_FIELDS:
                continue
            setattr(target, attr.key, getattr(source, attr.key))

    # -----------------------------------------------------
    # Reads (active rows only unless named otherwise)
    # -----------------------------------------------------
    def find_by_id(self, entity_id: int) -> Optional[T]:
        self.require(Capability.READ)
        return self.repository.get(entity_id)

    def get_or_404(self, entity_id: int, for_update: bool = False) -> T:
        entity = self.repository.get(entity_id, for_update=for_update)
        if entity is None:
            raise self.not_found(entity_id)
        return entity

    def find_all(self) -> List[T]:
        self.require(Capability.READ)
        return self.repository.find_all_active()

    def find_all_including_deleted(self) -> List[T]:
        self.require(Capability.READ)
        return self.repository.find_all_including_deleted()

    def find_page(self, page: int, size: int, sort: str = "id") -> Page[T]:
        self.require(Capability.READ)
        logger.debug("entity_page_requested", entity=self.entity_name, page=page, size=size, sort=sort)
        return self.repository.find_page(page, size, sort)
