"""
nextra/routes_auth.py

Authentication endpoints: credential login issuing a bearer token, and the
current principal's summary.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import Field, field_validator

from nextra.api import ApiModel, ApiResponse, strip_required
from nextra.auth_context import AuthContext, create_access_token, require_auth_context
from nextra.domains.user.service import UserService, get_user_service
from nextra.observability import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(ApiModel):
    username: str = Field(..., max_length=50)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("username", mode="before")
    @classmethod
    def trim_username(cls, v):
        return strip_required(v, "username")


class LoginResponse(ApiModel):
    token: str
    token_type: str = "Bearer"
    user_id: int
    username: str
    email: Optional[str] = None
    roles: List[str]


class PrincipalResponse(ApiModel):
    user_id: int
    username: str
    email: Optional[str] = None
    roles: List[str]


@router.post("/login", response_model=ApiResponse[LoginResponse])
def login(request: LoginRequest, service: UserService = Depends(get_user_service)) -> ApiResponse:
    """
    Exchange username/password for an access token.

    Raises:
        401: Unknown user, wrong password, or disabled account
    """
    user = service.authenticate(request.username, request.password)
    token = create_access_token(user.username)
    logger.info("login_succeeded", username=user.username, user_id=user.id)
    return ApiResponse.ok(
        LoginResponse(
            token=token,
            user_id=user.id,
            username=user.username,
            email=user.email,
            roles=user.role_names,
        )
    )


@router.get("/me", response_model=ApiResponse[PrincipalResponse])
def whoami(ctx: AuthContext = Depends(require_auth_context)) -> ApiResponse:
    return ApiResponse.ok(
        PrincipalResponse(user_id=ctx.user_id, username=ctx.username, email=ctx.email, roles=sorted(ctx.roles))
    )
