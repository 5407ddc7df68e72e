"""Status lifecycles for managed resources and staff identities.

States:
- Account: ACTIVE <-> INACTIVE (via update), ACTIVE/INACTIVE -> DELETED (via delete).
- Client: ACTIVE -> DELETED (via delete).
- Staff identity: ACTIVE -> DISABLED (via deactivate).

DELETED and DISABLED are terminal. Nothing is ever removed from storage; the
terminal transition flips the status and the row keeps every foreign reference.

Visibility: a DISABLED staff identity is treated as absent by every lookup.
DELETED accounts and clients stay readable by id as historical records but
refuse further mutation with `Gone`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from crm.core.errors import Gone, InvalidTransition


logger = logging.getLogger(__name__)


class AccountStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    DELETED = "Deleted"


class ClientStatus(str, Enum):
    ACTIVE = "Active"
    DELETED = "Deleted"


class UserStatus(str, Enum):
    ACTIVE = "Active"
    DISABLED = "Disabled"


@dataclass(frozen=True)
class ResourceLifecycle:
    """Status state machine for one resource kind."""

    kind: str
    status_attr: str
    terminal: Enum
    transitions: Mapping[Enum, frozenset]
    hidden: frozenset = frozenset()

    def status_of(self, entity: Any) -> Enum:
        return getattr(entity, self.status_attr)

    def is_terminal(self, entity: Any) -> bool:
        return self.status_of(entity) == self.terminal

    def is_visible(self, entity: Any) -> bool:
        """Single read-path predicate: hidden statuses behave as absent."""
        return entity is not None and self.status_of(entity) not in self.hidden

    def ensure_mutable(self, entity: Any, entity_id: str) -> None:
        if self.is_terminal(entity):
            raise Gone(f"{self.kind} {entity_id} has been {self.terminal.value.lower()} and cannot be modified.")

    def change_status(self, entity: Any, target: Enum, entity_id: str) -> bool:
        """Non-terminal status change requested through an update.

        Returns True when the status actually changed.
        """
        self.ensure_mutable(entity, entity_id)
        current = self.status_of(entity)
        if target == current:
            return False
        if target == self.terminal or target not in self.transitions.get(current, frozenset()):
            raise InvalidTransition(
                f"{self.kind} {entity_id} cannot move from {current.value} to {target.value}."
            )
        setattr(entity, self.status_attr, target)
        return True

    def retire(self, entity: Any, entity_id: str) -> None:
        """Terminal transition (soft delete / disable)."""
        self.ensure_mutable(entity, entity_id)
        current = self.status_of(entity)
        if self.terminal not in self.transitions.get(current, frozenset()):
            raise InvalidTransition(
                f"{self.kind} {entity_id} cannot move from {current.value} to {self.terminal.value}."
            )
        setattr(entity, self.status_attr, self.terminal)
        logger.info("%s %s moved %s -> %s", self.kind, entity_id, current.value, self.terminal.value)


ACCOUNT_LIFECYCLE = ResourceLifecycle(
    kind="Account",
    status_attr="account_status",
    terminal=AccountStatus.DELETED,
    transitions={
        AccountStatus.ACTIVE: frozenset({AccountStatus.INACTIVE, AccountStatus.DELETED}),
        AccountStatus.INACTIVE: frozenset({AccountStatus.ACTIVE, AccountStatus.DELETED}),
        AccountStatus.DELETED: frozenset(),
    },
)

CLIENT_LIFECYCLE = ResourceLifecycle(
    kind="Client",
    status_attr="client_status",
    terminal=ClientStatus.DELETED,
    transitions={
        ClientStatus.ACTIVE: frozenset({ClientStatus.DELETED}),
        ClientStatus.DELETED: frozenset(),
    },
)

STAFF_LIFECYCLE = ResourceLifecycle(
    kind="User",
    status_attr="user_status",
    terminal=UserStatus.DISABLED,
    transitions={
        UserStatus.ACTIVE: frozenset({UserStatus.DISABLED}),
        UserStatus.DISABLED: frozenset(),
    },
    hidden=frozenset({UserStatus.DISABLED}),
)
