"""Ownership check shared by accounts, clients and transactions.

The guard is a pure function of the caller id and the resource's owner id. It
never looks at roles: admins have no override in the customer-data domain.
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol


class OwnedResource(Protocol):
    @property
    def owner_id(self) -> str: ...


class Decision(str, Enum):
    AUTHORIZED = "Authorized"
    FORBIDDEN = "Forbidden"


def authorize(caller_id: str, resource: OwnedResource) -> Decision:
    """Raw id equality; no case folding or normalisation."""
    if caller_id is not None and caller_id == resource.owner_id:
        return Decision.AUTHORIZED
    return Decision.FORBIDDEN
