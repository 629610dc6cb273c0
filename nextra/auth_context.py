"""
nextra/auth_context.py

Shared authentication primitives for FastAPI dependency injection.

Contains:
- hash_password / verify_password: salted PBKDF2-SHA256
- create_access_token / verify_token: JWT issue and verification
- AuthContext: principal resolved from the bearer token
- optional_auth_context / require_auth_context / require_role: dependencies
- current_auditor: actor name threaded into every service mutation

The token subject is the username; the users table is the source of truth
for roles and the active flag, so a deactivated user is locked out at once.
"""

from __future__ import annotations

import hashlib
import hmac
import os
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Set

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from nextra.auditing import resolve_auditor
from nextra.config import ACCESS_TOKEN_MINUTES, ALGORITHM, PASSWORD_HASH_ITERATIONS, SECRET_KEY
from nextra.db import get_session
from nextra.errors import Forbidden, Unauthorized
from nextra.models import User
from nextra.observability import get_logger
from nextra.rbac import ROLE_ADMIN, normalize_role

logger = get_logger(__name__)

# Bearer scheme; missing credentials are handled by the dependencies below
security = HTTPBearer(auto_error=False)

_HASH_SCHEME = "pbkdf2_sha256"


# ---------------------------------------------------------
# Password hashing
# ---------------------------------------------------------
def hash_password(password: str, iterations: int = PASSWORD_HASH_ITERATIONS) -> str:
    salt = os.urandom(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt, iterations)
    return f"{_HASH_SCHEME}${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    try:
        scheme, iterations, salt_hex, digest_hex = password_hash.split("$")
    except ValueError:
        return False
    if scheme != _HASH_SCHEME:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), bytes.fromhex(salt_hex), int(iterations))
    return hmac.compare_digest(digest.hex(), digest_hex)


# ---------------------------------------------------------
# JWT tokens
# ---------------------------------------------------------
def create_access_token(username: str, expires_minutes: Optional[int] = None) -> str:
    now = datetime.now(timezone.utc)
    lifetime = timedelta(minutes=expires_minutes if expires_minutes is not None else ACCESS_TOKEN_MINUTES)
    payload = {"sub": username, "iat": now, "exp": now + lifetime}
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> dict:
    """
    Verify JWT access token and return decoded payload.

    Raises:
        Unauthorized: If token is expired or invalid
    """
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token expired")
    except jwt.InvalidTokenError:
        raise Unauthorized("Invalid token")


# ---------------------------------------------------------
# AuthContext
# ---------------------------------------------------------
class AuthContext(BaseModel):
    """
    Principal derived from server-side token verification.

    Fields:
        user_id: User row id
        username: Token subject, also the audit name
        email: User email
        roles: Role names with the ROLE_ prefix
        authenticated: Always True for contexts built from a valid token
    """
    user_id: int
    username: str
    email: Optional[str] = None
    roles: Set[str] = set()
    authenticated: bool = True

    def has_role(self, *roles: str) -> bool:
        return any(normalize_role(role) in self.roles for role in roles)

    @property
    def is_admin(self) -> bool:
        return ROLE_ADMIN in self.roles


def context_for_user(user: User) -> AuthContext:
    return AuthContext(
        user_id=user.id,
        username=user.username,
        email=user.email,
        roles={role.name for role in user.roles},
    )


def load_auth_context(token: str, session: Session) -> AuthContext:
    payload = verify_token(token)
    username = payload.get("sub")
    if not username:
        logger.info("auth_missing_subject")
        raise Unauthorized("Invalid token payload")

    user = session.scalars(
        select(User).where(User.username == username, User.deleted.is_(False))
    ).first()
    if user is None:
        logger.info("auth_user_not_found", username=username)
        raise Unauthorized("User not found")
    if not user.active:
        logger.info("auth_inactive_user", username=username)
        raise Unauthorized("User account is disabled")

    return context_for_user(user)


# ---------------------------------------------------------
# Dependencies
# ---------------------------------------------------------
def optional_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    session: Session = Depends(get_session),
) -> Optional[AuthContext]:
    """None when no bearer token was sent; a bad token is still rejected."""
    if credentials is None:
        return None
    return load_auth_context(credentials.credentials, session)


def require_auth_context(ctx: Optional[AuthContext] = Depends(optional_auth_context)) -> AuthContext:
    if ctx is None:
        raise Unauthorized("Authentication required")
    return ctx


def require_role(*roles: str) -> Callable:
    """
    Dependency factory: the caller must hold at least one of `roles`.

    Usage in routes:
        @router.post("/new", dependencies=[Depends(require_role("ADMIN", "AGENT"))])
    """
    wanted = {normalize_role(role) for role in roles}

    def _check_role(ctx: AuthContext = Depends(require_auth_context)) -> AuthContext:
        if not wanted & ctx.roles:
            logger.info("role_denied", username=ctx.username, required=sorted(wanted))
            raise Forbidden("Access denied")
        return ctx

    return _check_role


def current_auditor(ctx: Optional[AuthContext] = Depends(optional_auth_context)) -> str:
    return resolve_auditor(ctx)
