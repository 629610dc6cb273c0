"""
nextra/crud_router.py

Generic REST verbs over a CrudService, registered onto a domain APIRouter.

    POST   ""                  create            201
    GET    ""                  paginated list    page=0 size=10 sort=id
    GET    "/{id}"             single resource   404 when absent
    PUT    "/{id}"             update            404 when absent
    DELETE "/{id}"             soft delete       data: null
    PATCH  "/{id}/restore"     restore           501 when unsupported

Domain routers call register_crud_routes() after their own routes so fixed
paths such as "/me" are matched first. A verb listed in `disabled` answers
with UnsupportedOperation naming the DTO endpoint to use instead.

No `from __future__ import annotations` here: endpoint signatures are built
from runtime values (payload_model) that FastAPI must see as real classes.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional, Type

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from nextra.api import ApiResponse, PagedResponse
from nextra.auth_context import current_auditor
from nextra.config import DEFAULT_PAGE_SIZE
from nextra.crud import CrudService
from nextra.errors import ResourceNotFound, UnsupportedOperation

CRUD_VERBS = ("create", "list", "get", "update", "delete", "restore")


def _disabled_endpoint(message: str) -> Callable:
    def endpoint() -> None:
        raise UnsupportedOperation(message)

    return endpoint


def register_crud_routes(
    router: APIRouter,
    service_dependency: Callable[..., CrudService],
    to_response: Callable[[Any], Any],
    response_model: Type[BaseModel],
    payload_model: Optional[Type[BaseModel]] = None,
    to_entity: Optional[Callable[[Any], Any]] = None,
    disabled: Optional[Dict[str, str]] = None,
    verb_dependencies: Optional[Dict[str, Iterable[Any]]] = None,
) -> APIRouter:
    disabled = disabled or {}
    verb_dependencies = verb_dependencies or {}
    unknown = (set(disabled) | set(verb_dependencies)) - set(CRUD_VERBS)
    if unknown:
        raise ValueError(f"Unknown CRUD verbs: {sorted(unknown)}")
    if payload_model is None and not {"create", "update"} <= set(disabled):
        raise ValueError("payload_model is required unless create and update are disabled")

    def dependencies_for(verb: str) -> List[Any]:
        return list(verb_dependencies.get(verb, ()))

    def add(verb: str, path: str, method: str, endpoint: Callable, **kwargs: Any) -> None:
        if verb in disabled:
            endpoint = _disabled_endpoint(disabled[verb])
            kwargs = {"include_in_schema": False}
        router.add_api_route(
            path,
            endpoint,
            methods=[method],
            name=f"{router.prefix.strip('/').replace('/', '_')}_{verb}",
            dependencies=dependencies_for(verb),
            **kwargs,
        )

    model = payload_model or BaseModel

    def create_entity(
        payload: model,
        service: CrudService = Depends(service_dependency),
        actor: str = Depends(current_auditor),
    ):
        entity = service.save(to_entity(payload), actor)
        return ApiResponse.ok(to_response(entity))

    def list_entities(
        page: int = Query(0, ge=0),
        size: int = Query(DEFAULT_PAGE_SIZE, ge=1),
        sort: str = Query("id"),
        service: CrudService = Depends(service_dependency),
    ):
        result = service.find_page(page, size, sort)
        return ApiResponse.ok(PagedResponse.from_page(result, to_response))

    def get_entity(entity_id: int, service: CrudService = Depends(service_dependency)):
        entity = service.find_by_id(entity_id)
        if entity is None:
            raise ResourceNotFound("Entity not found")
        return ApiResponse.ok(to_response(entity))

    def update_entity(
        entity_id: int,
        payload: model,
        service: CrudService = Depends(service_dependency),
        actor: str = Depends(current_auditor),
    ):
        entity = service.update(entity_id, to_entity(payload), actor)
        return ApiResponse.ok(to_response(entity))

    def delete_entity(
        entity_id: int,
        service: CrudService = Depends(service_dependency),
        actor: str = Depends(current_auditor),
    ):
        service.delete(entity_id, actor)
        return ApiResponse.ok(None)

    def restore_entity(
        entity_id: int,
        service: CrudService = Depends(service_dependency),
        actor: str = Depends(current_auditor),
    ):
        service.restore(entity_id, actor)
        return ApiResponse.ok(None, "Restored")

    single = ApiResponse[response_model]
    add("create", "", "POST", create_entity, status_code=201, response_model=single)
    add("list", "", "GET", list_entities, response_model=ApiResponse[PagedResponse[response_model]])
    add("get", "/{entity_id:int}", "GET", get_entity, response_model=single)
    add("update", "/{entity_id:int}", "PUT", update_entity, response_model=single)
    add("delete", "/{entity_id:int}", "DELETE", delete_entity, response_model=ApiResponse[Any])
    add("restore", "/{entity_id:int}/restore", "PATCH", restore_entity, response_model=ApiResponse[Any])
    return router
