"""
nextra/rbac.py

Role-Based Access Control constants and helpers.

Role names are stored with the "ROLE_" prefix; callers may pass either
"ADMIN" or "ROLE_ADMIN".

Pure Python logic - no FastAPI imports, no database access.
"""

from typing import Dict, Iterable, Set

ROLE_PREFIX = "ROLE_"

ROLE_ADMIN = "ROLE_ADMIN"
ROLE_AGENT = "ROLE_AGENT"
ROLE_NORMAL = "ROLE_NORMAL"

DEFAULT_ROLE = ROLE_NORMAL

ROLE_DESCRIPTIONS: Dict[str, str] = {
    ROLE_ADMIN: "Administrator with full access",
    ROLE_AGENT: "Real-estate agent managing properties and clients",
    ROLE_NORMAL: "Standard user",
}


def normalize_role(name: str) -> str:
    """Upper-case a role name and make sure it carries the ROLE_ prefix."""
    name = name.strip().upper()
    if not name.startswith(ROLE_PREFIX):
        name = f"{ROLE_PREFIX}{name}"
    return name


def has_any_role(held: Iterable[str], required: Iterable[str]) -> bool:
    wanted: Set[str] = {normalize_role(role) for role in required}
    return any(normalize_role(role) in wanted for role in held)
