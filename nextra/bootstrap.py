"""
nextra/bootstrap.py

Startup seeding: the default roles always, and an administrator account when
ADMIN_USERNAME / ADMIN_PASSWORD are configured (dev provides defaults).
Idempotent; safe to run on every start.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from nextra.auditing import SYSTEM_AUDITOR, stamp_created
from nextra.auth_context import hash_password
from nextra.config import ADMIN_EMAIL, ADMIN_PASSWORD, ADMIN_USERNAME, IS_DEV
from nextra.db import SessionLocal
from nextra.models import Role, User
from nextra.observability import get_logger
from nextra.rbac import ROLE_ADMIN, ROLE_DESCRIPTIONS

logger = get_logger(__name__)


def seed_roles(session: Session) -> None:
    existing = set(session.scalars(select(Role.name)))
    missing = [name for name in ROLE_DESCRIPTIONS if name not in existing]
    for name in missing:
        session.add(Role(name=name, description=ROLE_DESCRIPTIONS[name]))
    session.commit()
    if missing:
        logger.info("roles_seeded", roles=missing)


def seed_admin(session: Session) -> None:
    if not ADMIN_USERNAME or not ADMIN_PASSWORD:
        return
    if session.scalars(select(User.id).where(User.username == ADMIN_USERNAME)).first() is not None:
        return

    admin_role = session.scalars(select(Role).where(Role.name == ROLE_ADMIN)).one()
    admin = User(
        username=ADMIN_USERNAME,
        password=hash_password(ADMIN_PASSWORD),
        email=ADMIN_EMAIL,
        active=True,
        roles=[admin_role],
    )
    stamp_created(admin, SYSTEM_AUDITOR)
    session.add(admin)
    session.commit()
    if IS_DEV:
        logger.warning("dev_admin_seeded", username=ADMIN_USERNAME)
    else:
        logger.info("admin_seeded", username=ADMIN_USERNAME)


def bootstrap() -> None:
    with SessionLocal() as session:
        seed_roles(session)
        seed_admin(session)
