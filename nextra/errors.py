"""
nextra/errors.py

Typed error conditions and their translation into response envelopes.

Service and domain code raise these; the handlers installed by
install_exception_handlers are the only place they become HTTP responses.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from nextra.api import ApiResponse

logger = structlog.get_logger(__name__)

RESTORE_NOT_SUPPORTED = "Restore not supported for this entity"

_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


class NextraError(Exception):
    status_code = 500

    def __init__(self, message: str, data: Any = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.data = data
        if status_code is not None:
            self.status_code = status_code


class ResourceNotFound(NextraError):
    status_code = 404


class BadRequest(NextraError):
    status_code = 400


class Unauthorized(NextraError):
    status_code = 401


class Forbidden(NextraError):
    status_code = 403


class UnsupportedOperation(NextraError):
    """A verb deliberately disabled (400) or a capability the entity lacks (501)."""

    status_code = 400


class StorageError(NextraError):
    status_code = 500


def restore_not_supported() -> UnsupportedOperation:
    return UnsupportedOperation(RESTORE_NOT_SUPPORTED, status_code=501)


# ---------------------------------------------------------
# Envelope builders
# ---------------------------------------------------------
def error_response(
    status_code: int,
    message: str,
    data: Any = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    body = ApiResponse.error(message, data).model_dump(mode="json")
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def internal_error_response() -> JSONResponse:
    return error_response(500, "Internal Server Error")


def validation_errors(exc: RequestValidationError) -> Dict[str, str]:
    """Flatten pydantic errors into {field: message}, first message per field wins."""
    fields: Dict[str, str] = {}
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in _LOCATION_PREFIXES]
        field = ".".join(location) or "request"
        message = error.get("msg", "Invalid value")
        if error.get("type") == "value_error" and error.get("ctx", {}).get("error") is not None:
            message = str(error["ctx"]["error"])
        fields.setdefault(field, message)
    return fields


# ---------------------------------------------------------
# Handlers
# ---------------------------------------------------------
async def nextra_error_handler(request: Request, exc: NextraError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, status_code=exc.status_code, error=exc.message)
    else:
        logger.info("request_rejected", path=request.url.path, status_code=exc.status_code, error=exc.message)
    return error_response(exc.status_code, exc.message, exc.data)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = validation_errors(exc)
    logger.info("validation_failed", path=request.url.path, fields=sorted(fields))
    return error_response(400, "Validation failed", fields)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NextraError, nextra_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
