"""
nextra/auditing.py

Audit-trail helpers: who and when for every create/update.

The actor is always passed in explicitly by the caller (routes resolve it
from the request's auth context through the `current_auditor` dependency);
nothing here reads ambient request state.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

SYSTEM_AUDITOR = "system"
ANONYMOUS_PRINCIPAL = "anonymousUser"


def utcnow() -> datetime:
    """Naive UTC timestamp (SQLite stores no tzinfo)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def resolve_auditor(context: Optional[Any]) -> str:
    """
    Resolve the display name recorded in created_by/updated_by.

    Returns the principal's username when the context exists, is authenticated
    and is not the anonymous placeholder; otherwise "system".
    """
    if context is None or not getattr(context, "authenticated", False):
        return SYSTEM_AUDITOR

    username = getattr(context, "username", None)
    if not username or username == ANONYMOUS_PRINCIPAL:
        return SYSTEM_AUDITOR
    return username


def stamp_created(entity: Any, actor: str) -> None:
    now = utcnow()
    entity.created_by = actor or SYSTEM_AUDITOR
    entity.updated_by = actor or SYSTEM_AUDITOR
    entity.created_at = now
    entity.updated_at = now


def stamp_updated(entity: Any, actor: str) -> None:
    # created_by / created_at are never touched after insert
    entity.updated_by = actor or SYSTEM_AUDITOR
    entity.updated_at = utcnow()
