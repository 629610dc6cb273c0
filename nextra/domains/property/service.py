"""
nextra/domains/property/service.py

Property service: generic CRUD plus owner/category/price queries and
DTO-driven create/update with reference resolution.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from nextra.crud import ALL_CAPABILITIES, CrudService
from nextra.db import get_session
from nextra.domains.property.schemas import PropertyRequest
from nextra.errors import BadRequest, ResourceNotFound
from nextra.models import Account, Category, Property
from nextra.observability import get_logger
from nextra.repository import BaseRepository

logger = get_logger(__name__)

_SCALAR_FIELDS = (
    "title",
    "location",
    "address",
    "price",
    "size",
    "description",
    "property_type",
    "status",
    "bedrooms",
    "bathrooms",
    "floors",
    "year_built",
    "features",
)


class PropertyService(CrudService[Property]):
    model = Property
    entity_name = "Property"
    capabilities = ALL_CAPABILITIES

    # -----------------------------------------------------
    # Queries
    # -----------------------------------------------------
    def find_by_owner(self, owner_id: int) -> List[Property]:
        return self.repository.find_active_where(Property.owner_id == owner_id)

    def find_by_category(self, category_id: int) -> List[Property]:
        return self.repository.find_active_where(Property.category_id == category_id)

    def find_by_price_range(self, min_price: Optional[Decimal], max_price: Optional[Decimal]) -> List[Property]:
        if min_price is not None and max_price is not None and min_price > max_price:
            raise BadRequest("min price must not exceed max price")

        criteria = []
        if min_price is not None:
            criteria.append(Property.price >= min_price)
        if max_price is not None:
            criteria.append(Property.price <= max_price)
        return self.repository.find_active_where(*criteria, order_by=(Property.price, Property.id))

    # -----------------------------------------------------
    # DTO-driven writes
    # -----------------------------------------------------
    def create_from_request(self, request: PropertyRequest, actor: str) -> Property:
        prop = Property(images=[], main_image=None)
        self._apply_request(prop, request)
        return self.save(prop, actor)

    def update_from_request(self, property_id: int, request: PropertyRequest, actor: str) -> Property:
        prop = self.get_or_404(property_id, for_update=True)
        self._apply_request(prop, request)
        return self.update(property_id, prop, actor)

    def _apply_request(self, prop: Property, request: PropertyRequest) -> None:
        for field in _SCALAR_FIELDS:
            setattr(prop, field, getattr(request, field))
        prop.owner = self._resolve(Account, "Account", request.owner_id)
        prop.category = self._resolve(Category, "Category", request.category_id)

    def _resolve(self, model, label: str, entity_id: Optional[int]):
        if entity_id is None:
            return None
        entity = BaseRepository(self.session, model).get(entity_id)
        if entity is None:
            raise ResourceNotFound(f"{label} not found with id: {entity_id}")
        return entity


def get_property_service(session: Session = Depends(get_session)) -> PropertyService:
    return PropertyService(session)
