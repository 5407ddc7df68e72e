"""Local directory of staff identities.

Source of truth for ownership and role checks. Disabled identities remain in
storage but every lookup treats them as absent. The `disable_by_id` and
`apply_update` convenience operations report expected business failures as a
(status, message) pair instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from sqlalchemy import Select, func, select

from crm.core.errors import Conflict
from crm.domain.lifecycle import STAFF_LIFECYCLE
from crm.models.staff_identity import StaffIdentity
from crm.repositories.base import BaseRepository
from crm.security.roles import Role, RoleHierarchy


Failure = tuple[int, str]


@dataclass(frozen=True, slots=True)
class StaffPatch:
    """Mutable staff fields. None means "keep the current value"."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None

    def changes_from(self, identity: StaffIdentity) -> dict[str, str]:
        """Fields whose value differs from the identity's current value."""
        changed: dict[str, str] = {}
        for field in ("first_name", "last_name", "email"):
            value = getattr(self, field)
            if value is not None and value != getattr(identity, field):
                changed[field] = value
        return changed


class StaffDirectory(BaseRepository[StaffIdentity]):
    model = StaffIdentity

    def find_by_id(self, user_id: str) -> Optional[StaffIdentity]:
        identity = self._get(user_id)
        return identity if STAFF_LIFECYCLE.is_visible(identity) else None

    def find_by_email(self, email: str) -> Optional[StaffIdentity]:
        stmt: Select = select(StaffIdentity).where(func.lower(StaffIdentity.email) == email.lower())
        identity = self._execute(stmt).scalars().first()
        return identity if STAFF_LIFECYCLE.is_visible(identity) else None

    def is_enrolled(self, user_id: str) -> bool:
        """True when a local record exists, Disabled included."""
        return self._get(user_id) is not None

    def email_in_use(self, email: str, *, exclude_id: Optional[str] = None) -> bool:
        """Uniqueness probe across all rows, Disabled ones included (the column is unique)."""
        stmt: Select = select(func.count()).select_from(StaffIdentity).where(
            func.lower(StaffIdentity.email) == email.lower()
        )
        if exclude_id is not None:
            stmt = stmt.where(StaffIdentity.user_id != exclude_id)
        return bool(self._execute(stmt).scalar())

    def list_visible(self) -> Sequence[StaffIdentity]:
        stmt: Select = select(StaffIdentity).order_by(StaffIdentity.last_name, StaffIdentity.first_name)
        rows = self._execute(stmt).scalars().all()
        return [r for r in rows if STAFF_LIFECYCLE.is_visible(r)]

    def save(self, identity: StaffIdentity) -> StaffIdentity:
        return self._save(identity)

    def _gate(self, requester_role: Role, user_id: str, verb: str) -> tuple[Optional[StaffIdentity], Optional[Failure]]:
        identity = self.find_by_id(user_id)
        if identity is None:
            return None, (404, f"User {user_id} not found")
        if not RoleHierarchy.may_act_on(requester_role, identity.role):
            return None, (403, f"Not allowed to {verb} {user_id}")
        return identity, None

    def disable_by_id(self, requester_role: Role, user_id: str) -> Optional[Failure]:
        identity, failure = self._gate(requester_role, user_id, "delete")
        if failure is not None:
            return failure
        STAFF_LIFECYCLE.retire(identity, user_id)
        self.save(identity)
        return None

    def apply_update(self, requester_role: Role, user_id: str, patch: StaffPatch) -> Optional[Failure]:
        identity, failure = self._gate(requester_role, user_id, "update")
        if failure is not None:
            return failure
        changed = patch.changes_from(identity)
        if not changed:
            return None
        for field, value in changed.items():
            setattr(identity, field, value)
        try:
            self.save(identity)
        except Conflict as e:
            return 400, e.detail
        return None
