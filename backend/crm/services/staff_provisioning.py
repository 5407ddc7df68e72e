"""Staff identity provisioning across the identity provider and the local directory.

Lifecycle per identity: absent -> create -> Active -> update* -> deactivate -> Disabled.

Creation and update are sagas, not transactions. The first provider-side write
is the commit point; group assignment, password changes and the local write
follow it. A failure after that point cannot be undone here and is raised as
`InconsistentState` carrying the completed steps, for operator reconciliation.
No step is retried or compensated automatically.
"""

from __future__ import annotations

import logging
import secrets
import string
from dataclasses import dataclass, field
from typing import Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from crm.core.errors import (
    Conflict,
    CrmError,
    Forbidden,
    InconsistentState,
    NotFound,
    error_from_status,
)
from crm.models.staff_identity import StaffIdentity
from crm.repositories.staff_directory import StaffDirectory, StaffPatch
from crm.security.roles import STAFF_MANAGER_ROLES, Role, RoleHierarchy
from crm.services.identity_provider import IdentityProviderGateway, to_provider_attributes


logger = logging.getLogger(__name__)

STEP_CREATE_USER = "create_user"
STEP_ADD_TO_GROUP = "add_to_group"
STEP_EXTRACT_SUBJECT = "extract_subject"
STEP_PERSIST_LOCAL = "persist_local"
STEP_UPDATE_ATTRIBUTES = "update_attributes"
STEP_SET_PASSWORD = "set_password"

_PASSWORD_SYMBOLS = "!@#$%^&*()-_=+"


@dataclass(frozen=True, slots=True)
class NewStaffIdentity:
    first_name: str
    last_name: str
    email: str
    role: Role


@dataclass
class ProvisioningSaga:
    """Steps committed so far for one creation."""

    email: str
    completed: list[str] = field(default_factory=list)

    def record(self, step: str) -> None:
        self.completed.append(step)

    def inconsistent(self, failed_step: str, cause: object) -> InconsistentState:
        logger.critical(
            "Staff provisioning for %s failed at %s after %s; manual reconciliation required: %s",
            self.email,
            failed_step,
            ",".join(self.completed),
            cause,
        )
        return InconsistentState(
            f"Provisioning of {self.email} failed at {failed_step} after {', '.join(self.completed)}.",
            completed_steps=self.completed,
        )


def generate_temporary_password(length: int = 16) -> str:
    """Random password meeting the usual pool policy (upper, lower, digit, symbol)."""
    pools = (string.ascii_uppercase, string.ascii_lowercase, string.digits, _PASSWORD_SYMBOLS)
    alphabet = "".join(pools)
    chars = [secrets.choice(pool) for pool in pools]
    chars += [secrets.choice(alphabet) for _ in range(max(length, len(pools)) - len(pools))]
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


class StaffProvisioningService:
    def __init__(self, directory: StaffDirectory, gateway: IdentityProviderGateway) -> None:
        self.directory = directory
        self.gateway = gateway

    def list_identities(self, requester_role: Role) -> Sequence[StaffIdentity]:
        if requester_role not in STAFF_MANAGER_ROLES:
            raise Forbidden("Not allowed to list users")
        return self.directory.list_visible()

    def create(
        self,
        requester_role: Role,
        new_identity: NewStaffIdentity,
        raw_password: Optional[str] = None,
    ) -> StaffIdentity:
        if not RoleHierarchy.may_act_on(requester_role, new_identity.role):
            logger.warning(
                "Staff creation refused: %s may not create %s", requester_role.value, new_identity.role.value
            )
            raise Forbidden(f"Role {requester_role.value} is not allowed to create {new_identity.role.value} users")

        email = new_identity.email
        if self.directory.email_in_use(email):
            logger.warning("Staff creation refused: email already registered")
            raise Conflict(f"Email {email} already exists")

        password = raw_password or generate_temporary_password()
        attributes = to_provider_attributes(
            {"email": email, "first_name": new_identity.first_name, "last_name": new_identity.last_name}
        )
        saga = ProvisioningSaga(email=email)

        # Nothing is persisted yet: a failure here propagates as-is.
        provider_user = self.gateway.create_user(email, password, attributes)
        saga.record(STEP_CREATE_USER)

        try:
            self.gateway.add_user_to_group(email, new_identity.role.value)
        except CrmError as e:
            raise saga.inconsistent(STEP_ADD_TO_GROUP, e) from e
        saga.record(STEP_ADD_TO_GROUP)

        subject = provider_user.subject
        if not subject:
            raise saga.inconsistent(STEP_EXTRACT_SUBJECT, "provider response carried no subject id")
        saga.record(STEP_EXTRACT_SUBJECT)

        identity = StaffIdentity(
            user_id=subject,
            first_name=new_identity.first_name,
            last_name=new_identity.last_name,
            email=email,
            role=new_identity.role,
        )
        try:
            self.directory.save(identity)
        except Conflict as e:
            raise saga.inconsistent(STEP_PERSIST_LOCAL, e) from e
        except SQLAlchemyError as e:
            self.directory.session.rollback()
            raise saga.inconsistent(STEP_PERSIST_LOCAL, e) from e
        saga.record(STEP_PERSIST_LOCAL)

        logger.info("Staff identity %s created with role %s", identity.user_id, identity.role.value)
        return identity

    def update(
        self,
        requester_role: Role,
        identity_id: str,
        patch: StaffPatch,
        new_password: Optional[str] = None,
    ) -> StaffIdentity:
        identity = self.directory.find_by_id(identity_id)
        if identity is None:
            logger.warning("Staff update refused: %s not found", identity_id)
            raise NotFound(f"User {identity_id} not found")
        if not RoleHierarchy.may_act_on(requester_role, identity.role):
            logger.warning("Staff update refused: %s may not update %s", requester_role.value, identity_id)
            raise Forbidden(f"Not allowed to update {identity_id}")

        changed = patch.changes_from(identity)
        if not changed and not new_password:
            return identity

        new_email = changed.get("email")
        if new_email is not None and self.directory.email_in_use(new_email, exclude_id=identity_id):
            raise Conflict(f"Email {new_email} already exists")

        # The provider addresses the user by the email it currently knows.
        saga = ProvisioningSaga(email=identity.email)
        if changed:
            self.gateway.update_user_attributes(identity.email, to_provider_attributes(changed))
            saga.record(STEP_UPDATE_ATTRIBUTES)
        if new_password:
            try:
                self.gateway.set_user_password(new_email or identity.email, new_password)
            except CrmError as e:
                if saga.completed:
                    raise saga.inconsistent(STEP_SET_PASSWORD, e) from e
                raise
            saga.record(STEP_SET_PASSWORD)

        # Every path reaching here has changed something at the provider.
        try:
            failure = self.directory.apply_update(requester_role, identity_id, patch)
        except SQLAlchemyError as e:
            self.directory.session.rollback()
            raise saga.inconsistent(STEP_PERSIST_LOCAL, e) from e
        if failure is not None:
            raise saga.inconsistent(STEP_PERSIST_LOCAL, error_from_status(*failure))
        saga.record(STEP_PERSIST_LOCAL)

        logger.info("Staff identity %s updated (%s)", identity_id, ",".join(sorted(changed)) or "password")
        return identity

    def deactivate(self, requester_role: Role, identity_id: str) -> None:
        # Provider-side credentials stay untouched.
        failure = self.directory.disable_by_id(requester_role, identity_id)
        if failure is not None:
            logger.warning("Staff deactivation refused for %s: %s", identity_id, failure[1])
            raise error_from_status(*failure)
        logger.info("Staff identity %s disabled", identity_id)
