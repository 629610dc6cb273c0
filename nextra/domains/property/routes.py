"""
nextra/domains/property/routes.py

Property endpoints.

Security guarantees:
- All endpoints require authentication
- Create/update and image management require ADMIN or AGENT
- Delete and restore require ADMIN
- Generic entity-body create/update are disabled in favour of the
  validated PropertyRequest endpoints (/new, /{id}/update)
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile

from nextra.api import ApiResponse
from nextra.auth_context import current_auditor, require_auth_context, require_role
from nextra.crud_router import register_crud_routes
from nextra.domains.property.images import PropertyImageService, get_property_image_service
from nextra.domains.property.schemas import PropertyRequest, PropertyResponse, property_to_response
from nextra.domains.property.service import PropertyService, get_property_service
from nextra.rbac import ROLE_ADMIN, ROLE_AGENT

router = APIRouter(
    prefix="/api/properties",
    tags=["properties"],
    dependencies=[Depends(require_auth_context)],
)

_staff_only = [Depends(require_role(ROLE_ADMIN, ROLE_AGENT))]
_admin_only = [Depends(require_role(ROLE_ADMIN))]


def _as_list(properties) -> ApiResponse:
    return ApiResponse.ok([property_to_response(p) for p in properties])


# ---------------------------------------------------------
# DTO-based create / update
# ---------------------------------------------------------
@router.post("/new", status_code=201, response_model=ApiResponse[PropertyResponse], dependencies=_staff_only)
def create_property(
    request: PropertyRequest,
    service: PropertyService = Depends(get_property_service),
    actor: str = Depends(current_auditor),
) -> ApiResponse:
    """
    Create a property listing.

    Raises:
        400: Validation failed (blank title, non-positive price, ...)
        404: ownerId / categoryId do not reference an active row
    """
    prop = service.create_from_request(request, actor)
    return ApiResponse.ok(property_to_response(prop))


@router.put("/{property_id}/update", response_model=ApiResponse[PropertyResponse], dependencies=_staff_only)
def update_property(
    property_id: int,
    request: PropertyRequest,
    service: PropertyService = Depends(get_property_service),
    actor: str = Depends(current_auditor),
) -> ApiResponse:
    prop = service.update_from_request(property_id, request, actor)
    return ApiResponse.ok(property_to_response(prop))


# ---------------------------------------------------------
# Queries
# ---------------------------------------------------------
@router.get("/owner/{owner_id}", response_model=ApiResponse[List[PropertyResponse]])
def list_by_owner(owner_id: int, service: PropertyService = Depends(get_property_service)) -> ApiResponse:
    return _as_list(service.find_by_owner(owner_id))


@router.get("/category/{category_id}", response_model=ApiResponse[List[PropertyResponse]])
def list_by_category(category_id: int, service: PropertyService = Depends(get_property_service)) -> ApiResponse:
    return _as_list(service.find_by_category(category_id))


@router.get("/price", response_model=ApiResponse[List[PropertyResponse]])
def list_by_price(
    min_price: Optional[Decimal] = Query(None, alias="min", ge=0),
    max_price: Optional[Decimal] = Query(None, alias="max", ge=0),
    service: PropertyService = Depends(get_property_service),
) -> ApiResponse:
    """Active properties priced within [min, max]; either bound may be omitted."""
    return _as_list(service.find_by_price_range(min_price, max_price))


# ---------------------------------------------------------
# Images
# ---------------------------------------------------------
@router.post("/{property_id}/images", response_model=ApiResponse[PropertyResponse], dependencies=_staff_only)
def upload_images(
    property_id: int,
    files: List[UploadFile] = File(..., description="Image files (image/*, max 10MB each)"),
    set_as_main: bool = Query(True, alias="setAsMain"),
    images: PropertyImageService = Depends(get_property_image_service),
    actor: str = Depends(current_auditor),
) -> ApiResponse:
    prop = images.upload_images(property_id, files, set_as_main, actor)
    return ApiResponse.ok(property_to_response(prop), "Images uploaded")


@router.put("/{property_id}/images/main", response_model=ApiResponse[PropertyResponse], dependencies=_staff_only)
def set_main_image(
    property_id: int,
    image_url: str = Query(..., alias="imageUrl"),
    images: PropertyImageService = Depends(get_property_image_service),
    actor: str = Depends(current_auditor),
) -> ApiResponse:
    prop = images.set_main_image(property_id, image_url, actor)
    return ApiResponse.ok(property_to_response(prop))


@router.delete("/{property_id}/images/all", response_model=ApiResponse[PropertyResponse], dependencies=_staff_only)
def delete_all_images(
    property_id: int,
    images: PropertyImageService = Depends(get_property_image_service),
    actor: str = Depends(current_auditor),
) -> ApiResponse:
    prop = images.delete_all_images(property_id, actor)
    return ApiResponse.ok(property_to_response(prop))


@router.delete("/{property_id}/images", response_model=ApiResponse[PropertyResponse], dependencies=_staff_only)
def delete_image(
    property_id: int,
    image_url: str = Query(..., alias="imageUrl"),
    images: PropertyImageService = Depends(get_property_image_service),
    actor: str = Depends(current_auditor),
) -> ApiResponse:
    prop = images.delete_image(property_id, image_url, actor)
    return ApiResponse.ok(property_to_response(prop))


# ---------------------------------------------------------
# Generic verbs
# ---------------------------------------------------------
register_crud_routes(
    router,
    service_dependency=get_property_service,
    to_response=property_to_response,
    response_model=PropertyResponse,
    disabled={
        "create": "Use POST /api/properties/new instead",
        "update": "Use PUT /api/properties/{id}/update instead",
    },
    verb_dependencies={"delete": _admin_only, "restore": _admin_only},
)
