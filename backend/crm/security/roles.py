"""Staff roles and the role hierarchy used for staff management."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class Role(str, Enum):
    """Staff roles. Names match the identity-provider group names."""

    AGENT = "Agent"
    ADMIN = "Admin"
    SUPER_ADMIN = "SuperAdmin"

    @classmethod
    def from_group(cls, group: str) -> Optional["Role"]:
        """Map an identity-provider group name to a Role (case-insensitive)."""
        normalized = group.strip().lower()
        for role in cls:
            if role.value.lower() == normalized:
                return role
        return None


class RoleHierarchy:
    """Total order over staff roles.

    Only `rank` and `may_act_on` are exposed; callers never compare roles by
    name or by Enum ordinal.
    """

    _RANKS: dict[Role, int] = {
        Role.AGENT: 1,
        Role.ADMIN: 2,
        Role.SUPER_ADMIN: 3,
    }

    @classmethod
    def rank(cls, role: Role) -> int:
        if not isinstance(role, Role):
            raise TypeError(f"Not a staff role: {role!r}")
        return cls._RANKS[role]

    @classmethod
    def may_act_on(cls, actor: Role, target: Role) -> bool:
        """Strict seniority: a role never acts on a peer or a senior."""
        return cls.rank(actor) > cls.rank(target)


STAFF_MANAGER_ROLES = frozenset({Role.ADMIN, Role.SUPER_ADMIN})
CUSTOMER_DATA_ROLES = frozenset({Role.AGENT})


def is_role_allowed(subject_role: Role, allowed: set[Role] | frozenset[Role]) -> bool:
    """Default-deny role check with explicit allow set."""
    return subject_role in allowed
